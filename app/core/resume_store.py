from __future__ import annotations

import os
import secrets
import sqlite3
import threading
from datetime import datetime, timezone

from app.schemas.resume import AnalysisResult, UploadRecord

_SELECT_COLUMNS = "id, original_name, size, mime_type, analysis_json, created_at, updated_at"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _row_to_record(row: tuple) -> UploadRecord:
    analysis = AnalysisResult.model_validate_json(row[4]) if row[4] else None
    return UploadRecord(
        id=row[0],
        original_name=row[1],
        size=row[2],
        mime_type=row[3],
        analysis=analysis,
        created_at=datetime.fromisoformat(row[5]),
        updated_at=datetime.fromisoformat(row[6]),
    )


class ResumeStore:
    """SQLite-backed store for upload records, keyed by an opaque id."""

    def __init__(self, db_path: str):
        self._lock = threading.Lock()
        if db_path != ":memory:":
            directory = os.path.dirname(db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

        self._conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._conn.execute("PRAGMA busy_timeout=5000;")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS resume_uploads (
                id TEXT PRIMARY KEY,
                original_name TEXT NOT NULL,
                size INTEGER NOT NULL,
                mime_type TEXT NOT NULL,
                analysis_json TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        self._conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_resume_uploads_created_at
            ON resume_uploads (created_at);
            """
        )

    def create(self, *, original_name: str, size: int, mime_type: str) -> UploadRecord:
        now = _utc_now()
        record = UploadRecord(
            id=secrets.token_urlsafe(12),
            original_name=original_name,
            size=size,
            mime_type=mime_type,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO resume_uploads (
                    id, original_name, size, mime_type, analysis_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, NULL, ?, ?)
                """,
                (
                    record.id,
                    record.original_name,
                    record.size,
                    record.mime_type,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        return record

    def attach_analysis(self, record_id: str, analysis: AnalysisResult) -> UploadRecord:
        now = _utc_now()
        payload = analysis.model_dump_json(by_alias=True)
        with self._lock:
            cur = self._conn.execute(
                "UPDATE resume_uploads SET analysis_json = ?, updated_at = ? WHERE id = ?",
                (payload, now.isoformat(), record_id),
            )
            if cur.rowcount == 0:
                raise KeyError(record_id)
        record = self.get(record_id)
        if record is None:
            raise KeyError(record_id)
        return record

    def get(self, record_id: str) -> UploadRecord | None:
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM resume_uploads WHERE id = ?",
                (record_id,),
            ).fetchone()
        if not row:
            return None
        return _row_to_record(row)

    def list_recent(self, limit: int = 20) -> list[UploadRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_SELECT_COLUMNS} FROM resume_uploads ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_row_to_record(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
