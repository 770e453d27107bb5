import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status

from app.analysis.normalizer import AnalysisNormalizer
from app.core.config import settings
from app.core.rate_limit import upload_rate_limit
from app.core.resume_store import ResumeStore
from app.schemas.resume import UploadListResponse, UploadRecord, UploadResponse
from app.services.resume_service import upload_and_analyze

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_CHUNK_BYTES = 1024 * 64


def get_resume_store(request: Request) -> ResumeStore:
    return request.app.state.resume_store


def get_normalizer(request: Request) -> AnalysisNormalizer:
    return request.app.state.normalizer


async def _read_upload(upload: UploadFile) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/resume", response_model=UploadResponse)
@upload_rate_limit()
async def upload_resume(
    request: Request,
    resume: UploadFile | None = File(default=None),
    store: ResumeStore = Depends(get_resume_store),
    normalizer: AnalysisNormalizer = Depends(get_normalizer),
):
    _ = request
    if resume is None:
        logger.warning("resume_upload_rejected reason=no_file")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    filename = resume.filename or "uploaded-file"
    content = await _read_upload(resume)
    logger.info("resume_upload_received file=%s size=%s", filename, len(content))

    try:
        record = await upload_and_analyze(
            filename=filename,
            content=content,
            mime_type=resume.content_type,
            normalizer=normalizer,
            store=store,
        )
    except Exception as exc:
        logger.exception("resume_upload_failed file=%s", filename)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Server error: {exc}",
        ) from exc

    return UploadResponse(ok=True, doc=record)


@router.get("/resume", response_model=UploadListResponse)
def list_resumes(
    limit: int = Query(default=20, ge=1, le=100),
    store: ResumeStore = Depends(get_resume_store),
):
    return UploadListResponse(items=store.list_recent(limit=limit))


@router.get("/resume/{record_id}", response_model=UploadRecord)
def get_resume(record_id: str, store: ResumeStore = Depends(get_resume_store)):
    record = store.get(record_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resume not found")
    return record
