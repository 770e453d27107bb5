import contextlib
from contextlib import asynccontextmanager
import asyncio
import logging

from app.ai.factory import build_evaluator
from app.analysis.normalizer import AnalysisNormalizer
from app.analytics.db import init_db, purge_old_records
from app.core.config import settings
from app.core.resume_store import ResumeStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    evaluator = build_evaluator()
    app.state.resume_store = ResumeStore(settings.resume_db_path)
    app.state.normalizer = AnalysisNormalizer(evaluator)
    logger.info("resume_pipeline_ready model=%s", evaluator.model)
    init_db()

    stop_event = asyncio.Event()

    async def periodic_purge() -> None:
        while not stop_event.is_set():
            try:
                deleted = purge_old_records()
                if any(deleted.values()):
                    logger.info("analytics_retention_purge deleted=%s", deleted)
            except Exception as exc:  # pragma: no cover - defensive guard
                logger.warning("analytics_retention_purge_failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=3600)
            except asyncio.TimeoutError:
                continue

    purge_task = asyncio.create_task(periodic_purge())
    yield
    stop_event.set()
    if not purge_task.done():
        purge_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await purge_task
    app.state.resume_store.close()
