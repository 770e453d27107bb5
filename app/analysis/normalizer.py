from __future__ import annotations

import json
import logging
import math
import re
import time
import uuid
from typing import Any, Callable

from app.ai.types import Evaluator
from app.analysis.prompt import build_messages
from app.analytics.db import log_ai_analysis_run
from app.core.config import settings
from app.schemas.resume import AnalysisResult

logger = logging.getLogger(__name__)

EVALUATOR_TEMPERATURE = 0.2
DEFAULT_SCORE = 50
DEFAULT_SKILLS = ("Basic resume skills",)
DEFAULT_SUGGESTIONS = ("Please provide more details in your resume",)
DEFAULT_JOB_SUGGESTIONS = ("General professional positions",)

_FENCE_OPEN_RE = re.compile(r"^```[a-zA-Z]*\s*")
_FENCE_CLOSE_RE = re.compile(r"\s*```$")

# Validators return (value, repaired).
FieldValidator = Callable[[Any], tuple[Any, bool]]


def fallback_result() -> AnalysisResult:
    """Result used when the evaluator or its reply cannot be trusted at all."""
    return AnalysisResult(
        score=DEFAULT_SCORE,
        skills=["Basic resume analysis"],
        suggestions=[
            "Could not analyze properly, please upload a valid PDF resume",
            "Check that the AI evaluator (OPENAI_API_KEY) is configured",
        ],
        job_suggestions=["General positions"],
        source="fallback",
    )


def strip_code_fence(content: str) -> str:
    cleaned = content.strip()
    cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
    cleaned = _FENCE_CLOSE_RE.sub("", cleaned, count=1)
    return cleaned.strip()


def score_or_default(default: int = DEFAULT_SCORE) -> FieldValidator:
    def validate(value: Any) -> tuple[Any, bool]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default, True
        # Compare ints exactly; huge JSON integers overflow float conversion.
        if isinstance(value, int):
            return (value, False) if 0 <= value <= 100 else (default, True)
        if not math.isfinite(value) or value < 0 or value > 100:
            return default, True
        return value, False

    return validate


def _is_usable_item(item: Any) -> bool:
    if not isinstance(item, str) or not item.strip():
        return False
    try:
        item.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates from \ud800-style escapes cannot be stored or returned.
        return False
    return True


def string_list_or_default(default: tuple[str, ...]) -> FieldValidator:
    def validate(value: Any) -> tuple[Any, bool]:
        if not isinstance(value, list) or not value:
            return list(default), True
        if not all(_is_usable_item(item) for item in value):
            return list(default), True
        return list(value), False

    return validate


FIELD_VALIDATORS: dict[str, tuple[str, FieldValidator]] = {
    "score": ("score", score_or_default()),
    "skills": ("skills", string_list_or_default(DEFAULT_SKILLS)),
    "suggestions": ("suggestions", string_list_or_default(DEFAULT_SUGGESTIONS)),
    "jobSuggestions": ("job_suggestions", string_list_or_default(DEFAULT_JOB_SUGGESTIONS)),
}


def normalize_reply(parsed: dict[str, Any]) -> tuple[AnalysisResult, list[str]]:
    """Repair each field independently; returns the result and repaired field names."""
    values: dict[str, Any] = {}
    repaired: list[str] = []
    for reply_key, (field_name, validate) in FIELD_VALIDATORS.items():
        value, was_repaired = validate(parsed.get(reply_key))
        values[field_name] = value
        if was_repaired:
            repaired.append(reply_key)
    values["source"] = "repaired" if repaired else "model"
    return AnalysisResult(**values), repaired


class AnalysisNormalizer:
    """Turns resume text into an ``AnalysisResult`` that always satisfies its constraints."""

    def __init__(self, evaluator: Evaluator, *, max_chars: int | None = None):
        self._evaluator = evaluator
        self._max_chars = settings.resume_text_max_chars if max_chars is None else max_chars

    @property
    def evaluator(self) -> Evaluator:
        return self._evaluator

    @property
    def model(self) -> str:
        return getattr(self._evaluator, "model", "unknown")

    async def evaluate(self, text: str | None) -> AnalysisResult:
        run_id = uuid.uuid4().hex
        started = time.perf_counter()
        truncated = (text or "")[: self._max_chars]
        logger.debug("resume_evaluation_started run_id=%s text_len=%s", run_id, len(truncated))

        try:
            content = await self._evaluator.complete_json(
                build_messages(truncated), temperature=EVALUATOR_TEMPERATURE
            )
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            logger.warning(
                "resume_evaluation_failed model=%s text_len=%s: %s", self.model, len(truncated), exc
            )
            code = getattr(exc, "code", None) or "evaluator_exception"
            return self._finish(run_id, started, fallback_result(), status="error", error_code=str(code))

        if not isinstance(content, str):
            content = ""
        preview = content[: settings.log_message_max_chars]
        logger.debug("resume_evaluation_reply run_id=%s preview=%r", run_id, preview)

        try:
            parsed = json.loads(strip_code_fence(content) or "{}")
        except (ValueError, RecursionError) as exc:
            logger.warning("resume_evaluation_unparsable model=%s: %s", self.model, exc)
            return self._finish(run_id, started, fallback_result(), status="invalid_json", error_code="invalid_json")

        if not isinstance(parsed, dict):
            logger.warning(
                "resume_evaluation_invalid_schema model=%s type=%s", self.model, type(parsed).__name__
            )
            return self._finish(run_id, started, fallback_result(), status="invalid_schema", error_code="invalid_schema")

        result, repaired = normalize_reply(parsed)
        if repaired:
            logger.warning("resume_evaluation_repaired model=%s fields=%s", self.model, ",".join(repaired))
        return self._finish(
            run_id,
            started,
            result,
            status="repaired" if repaired else "success",
            error_code=None,
        )

    def _finish(
        self,
        run_id: str,
        started: float,
        result: AnalysisResult,
        *,
        status: str,
        error_code: str | None,
    ) -> AnalysisResult:
        latency_ms = int((time.perf_counter() - started) * 1000)
        try:
            log_ai_analysis_run(
                run_id=run_id,
                model=self.model,
                source=result.source,
                status=status,
                error_code=error_code,
                latency_ms=latency_ms,
            )
        except Exception:  # pragma: no cover - analytics must not break evaluation
            logger.debug("ai_run_logging_failed", exc_info=True)
        logger.info(
            "resume_evaluation_done run_id=%s source=%s score=%s latency_ms=%s",
            run_id,
            result.source,
            result.score,
            latency_ms,
        )
        return result
