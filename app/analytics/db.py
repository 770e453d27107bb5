from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from app.core.config import settings


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_db_path() -> Path:
    return Path(settings.analytics_db_path)


def init_db() -> None:
    if not settings.analytics_enabled:
        return
    db_path = _get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS ai_analysis_runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                created_at TEXT NOT NULL,
                run_id TEXT NOT NULL,
                model TEXT NOT NULL,
                source TEXT NOT NULL,
                status TEXT NOT NULL,
                error_code TEXT,
                latency_ms INTEGER
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_ai_analysis_runs_created_at
            ON ai_analysis_runs (created_at)
            """
        )
        conn.commit()
    purge_old_records()


def log_ai_analysis_run(
    *,
    run_id: str,
    model: str,
    source: str,
    status: str,
    error_code: str | None = None,
    latency_ms: int | None = None,
) -> None:
    if not settings.analytics_enabled:
        return
    db_path = _get_db_path()
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO ai_analysis_runs (
                created_at, run_id, model, source, status, error_code, latency_ms
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _utc_now(),
                run_id,
                model,
                source,
                status,
                error_code,
                latency_ms,
            ),
        )
        conn.commit()


def purge_old_records() -> dict[str, int]:
    if not settings.analytics_enabled:
        return {"ai_analysis_runs": 0}

    retention = max(1, int(settings.analytics_retention_days))
    cutoff = datetime.now(timezone.utc).timestamp() - retention * 86400
    cutoff_iso = datetime.fromtimestamp(cutoff, timezone.utc).isoformat()
    with sqlite3.connect(_get_db_path()) as conn:
        cur = conn.execute("DELETE FROM ai_analysis_runs WHERE created_at < ?", (cutoff_iso,))
        conn.commit()
        return {"ai_analysis_runs": int(cur.rowcount or 0)}


def get_summary() -> dict[str, Any]:
    """Run counts by provenance; a rising fallback share points at an evaluator outage."""
    if not settings.analytics_enabled:
        return {"enabled": False}
    with sqlite3.connect(_get_db_path()) as conn:
        total = conn.execute("SELECT COUNT(*) FROM ai_analysis_runs").fetchone()[0]
        rows = conn.execute(
            "SELECT source, COUNT(*) FROM ai_analysis_runs GROUP BY source"
        ).fetchall()
        error_rows = conn.execute(
            """
            SELECT error_code, COUNT(*)
            FROM ai_analysis_runs
            WHERE error_code IS NOT NULL
            GROUP BY error_code
            """
        ).fetchall()
        avg_latency = conn.execute(
            "SELECT AVG(latency_ms) FROM ai_analysis_runs WHERE status != 'error'"
        ).fetchone()[0]
    return {
        "enabled": True,
        "total": total,
        "by_source": {source: count for source, count in rows},
        "by_error_code": {code: count for code, count in error_rows},
        "avg_latency_ms": round(avg_latency, 1) if avg_latency is not None else None,
    }
