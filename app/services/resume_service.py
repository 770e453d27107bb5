from __future__ import annotations

import logging

from app.analysis.normalizer import AnalysisNormalizer
from app.core.resume_store import ResumeStore
from app.parsing.extract import ExtractionError, extract_text
from app.schemas.resume import UploadRecord

logger = logging.getLogger(__name__)

NO_FILE_PLACEHOLDER = "No resume file uploaded."
DEFAULT_MIME_TYPE = "application/octet-stream"


def extraction_placeholder(original_name: str) -> str:
    return f"Could not extract text. File info: {original_name}"


def resume_text_for(*, filename: str, content: bytes, mime_type: str | None) -> str:
    """Extracted text, or a placeholder; extraction problems never stop the pipeline."""
    if not content:
        logger.warning("resume_extraction_skipped reason=empty_buffer")
        return NO_FILE_PLACEHOLDER
    try:
        extracted = extract_text(filename, content, mime_type)
    except ExtractionError as exc:
        logger.error("resume_extraction_failed file=%s: %s", filename, exc)
        return extraction_placeholder(filename)
    logger.info(
        "resume_extraction_done source_type=%s pages=%s text_len=%s",
        extracted.source_type,
        extracted.pages,
        len(extracted.text),
    )
    return extracted.text


async def upload_and_analyze(
    *,
    filename: str,
    content: bytes,
    mime_type: str | None,
    normalizer: AnalysisNormalizer,
    store: ResumeStore,
) -> UploadRecord:
    record = store.create(
        original_name=filename,
        size=len(content),
        mime_type=mime_type or DEFAULT_MIME_TYPE,
    )
    logger.info("resume_upload_saved id=%s size=%s", record.id, record.size)

    text = resume_text_for(filename=filename, content=content, mime_type=mime_type)
    analysis = await normalizer.evaluate(text)

    record = store.attach_analysis(record.id, analysis)
    logger.info("resume_analysis_saved id=%s source=%s", record.id, analysis.source)
    return record
