from typing import Annotated
import logging
import os

from fastapi import APIRouter, File, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse

from app.config import settings
from app.exceptions import GuideDecodeError
from app.models import Guide
from app.rendering import templates
from app.schemas import ErrorDetail, HealthResponse
from app.services import UploadSummary, decode_upload


logger = logging.getLogger(__name__)

main_router = APIRouter()

PARSE_FORM_ERROR = "Error parsing form."
PARSE_UPLOAD_ERROR = "Could not parse upload."


def _upload_size(upload: UploadFile) -> int:
    """Size of the uploaded file in bytes"""
    if upload.size is not None:
        return upload.size

    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def _upload_too_large(upload: UploadFile, size: int) -> bool:
    """Check an upload against the configured limit"""
    if size <= settings.max_upload_size_bytes:
        return False

    logger.warning(
        f"Upload '{upload.filename}' rejected: {size} bytes exceeds limit of "
        f"{settings.max_upload_size_bytes} bytes"
    )
    return True


def _upload_limit_message() -> str:
    return f"Upload exceeds {settings.max_upload_size_bytes} bytes."


async def _decode(upload: UploadFile) -> Guide:
    """Decode an uploaded file with the configured limits"""
    return await decode_upload(
        upload.file,
        timeout_seconds=settings.decode_timeout_sec,
        chunk_size=settings.decode_chunk_size,
    )


@main_router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Upload form"""
    return templates.TemplateResponse(request, "index.html", {})


@main_router.get("/health")
async def health_check() -> HealthResponse:
    """Health check endpoint"""
    return HealthResponse(status="ok")


@main_router.post("/submit", response_class=HTMLResponse)
async def submit(
    request: Request,
    xml: Annotated[UploadFile | None, File()] = None
):
    """
    Decode an uploaded EPG document and render its summary

    Decode failures are logged with full detail and reported to the user
    with a generic message.
    """
    if xml is None:
        logger.error("Parsing form: missing 'xml' file field")
        return templates.TemplateResponse(
            request, "index.html", {"error": PARSE_FORM_ERROR}, status_code=400
        )

    size = _upload_size(xml)
    if _upload_too_large(xml, size):
        return templates.TemplateResponse(
            request, "index.html", {"error": _upload_limit_message()}, status_code=413
        )
    logger.info(f"Received upload '{xml.filename}' ({size} bytes, {xml.content_type})")

    try:
        guide = await _decode(xml)
    except GuideDecodeError as e:
        logger.warning(f"Failed to decode upload '{xml.filename}': [{e.code}] {e}")
        return templates.TemplateResponse(
            request, "index.html", {"error": PARSE_UPLOAD_ERROR}, status_code=400
        )

    logger.info(f"Decoded upload '{xml.filename}': {len(guide.broadcasts)} broadcasts")

    summary = UploadSummary(
        name=xml.filename or "",
        size=size,
        content_type=xml.content_type,
        guide=guide,
    )
    return templates.TemplateResponse(request, "index.html", {"summary": summary})


@main_router.post("/api/guide", response_model=Guide)
async def decode_guide_json(xml: Annotated[UploadFile, File()]) -> Guide:
    """
    Decode an uploaded EPG document and return it as JSON

    Keys follow the XML element and attribute names.
    """
    if _upload_too_large(xml, _upload_size(xml)):
        raise HTTPException(status_code=413, detail=_upload_limit_message())

    try:
        guide = await _decode(xml)
    except GuideDecodeError as e:
        logger.warning(f"Failed to decode upload '{xml.filename}': [{e.code}] {e}")
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code=e.code, message=str(e)).model_dump(),
        ) from e

    return guide
