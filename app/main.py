from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings, setup_logging

from app.routers import main_router


setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("Starting EPG Viewer...")
    yield
    logger.info("EPG Viewer stopped")


app = FastAPI(
    title="EPG Viewer",
    version="0.1.0",
    lifespan=lifespan
)

app.include_router(main_router)

# Room for multipart boundaries and part headers around the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024


@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    """Refuse oversized uploads from Content-Length before the body is spooled"""
    content_length = request.headers.get("content-length")
    limit = settings.max_upload_size_bytes + MULTIPART_OVERHEAD_BYTES

    if request.method == "POST" and content_length and content_length.isdigit():
        if int(content_length) > limit:
            logger.warning(
                f"Request to {request.url.path} rejected: Content-Length {content_length} "
                f"exceeds {limit} bytes"
            )
            return JSONResponse(
                status_code=413,
                content={"detail": f"Upload exceeds {settings.max_upload_size_bytes} bytes."}
            )

    return await call_next(request)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors with details"""
    logger.error(f"Validation error for {request.method} {request.url.path}")
    logger.error(f"Validation details: {exc.errors()}")

    # Create a properly serializable error response
    errors = []
    for error in exc.errors():
        error_dict = {
            "type": error.get("type"),
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "input": str(error.get("input", ""))[:100]
        }
        errors.append(error_dict)

    return JSONResponse(
        status_code=422,
        content={
            "detail": errors
        }
    )
