from __future__ import annotations

import logging
from io import BytesIO

from .models import ExtractedText

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {"txt", "md"}
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class ExtractionError(ValueError):
    pass


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _detect_source_type(filename: str, mime_type: str | None) -> str:
    ext = _extension(filename)
    mime = (mime_type or "").split(";")[0].strip().lower()
    if ext == "docx" or mime == DOCX_MIME_TYPE:
        return "docx"
    if ext in TEXT_EXTENSIONS or mime.startswith("text/"):
        return "text"
    # Anything else, including unknown types, goes through the PDF reader.
    return "pdf"


def _extract_pdf(content: bytes) -> ExtractedText:
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(content))
    page_chunks: list[str] = []
    for page in reader.pages:
        page_text = page.extract_text() or ""
        if page_text.strip():
            page_chunks.append(page_text.strip())
    warnings = [] if page_chunks else ["No extractable text found in PDF."]
    return ExtractedText(
        text="\n\n".join(page_chunks),
        source_type="pdf",
        pages=len(reader.pages),
        warnings=warnings,
    )


def _extract_docx(content: bytes) -> ExtractedText:
    from docx import Document

    document = Document(BytesIO(content))
    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    warnings = [] if paragraphs else ["No extractable text found in DOCX."]
    return ExtractedText(text="\n".join(paragraphs), source_type="docx", warnings=warnings)


def _extract_plain(content: bytes) -> ExtractedText:
    for encoding in ("utf-8", "utf-16", "latin-1"):
        try:
            return ExtractedText(text=content.decode(encoding), source_type="text")
        except UnicodeDecodeError:
            continue
    raise ExtractionError("Unable to decode text file.")


def extract_text(filename: str, content: bytes, mime_type: str | None = None) -> ExtractedText:
    """Best-effort plain text from an uploaded file. Raises ExtractionError on failure."""
    if not content:
        raise ExtractionError("Uploaded file is empty.")

    source_type = _detect_source_type(filename, mime_type)
    try:
        if source_type == "docx":
            extracted = _extract_docx(content)
        elif source_type == "text":
            extracted = _extract_plain(content)
        else:
            extracted = _extract_pdf(content)
    except ExtractionError:
        raise
    except Exception as exc:
        raise ExtractionError(f"{source_type.upper()} parsing failed: {exc}") from exc

    for warning in extracted.warnings:
        logger.info("resume_extraction_warning source_type=%s: %s", source_type, warning)
    return extracted
