"""
Upload Service

Runs the synchronous EPG decoder for an uploaded file without blocking the
event loop. Decoding is offloaded to the default thread pool executor and
bounded by an optional timeout.
"""
from dataclasses import dataclass
from typing import BinaryIO
import asyncio
import logging
import threading

from app.exceptions import DecodeTimeoutError
from app.models import Guide
from app.services.epg_decoder_service import DEFAULT_CHUNK_SIZE, decode_guide


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UploadSummary:
    """Uploaded file metadata together with its decoded guide."""
    name: str
    size: int
    content_type: str | None
    guide: Guide


async def decode_upload(
    stream: BinaryIO,
    *,
    timeout_seconds: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE
) -> Guide:
    """
    Decode an uploaded XMLTV stream asynchronously with timeout protection

    Args:
        stream: Binary file-like object positioned at the start of the document

    Keyword Args:
        timeout_seconds: Timeout in seconds for decoding (0/None disables timeout)
        chunk_size: Number of bytes fed to the tokenizer per read

    Returns:
        Decoded Guide

    Raises:
        GuideDecodeError: If the document cannot be decoded
        DecodeTimeoutError: If decoding exceeds the timeout
    """
    effective_timeout = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None
    timeout_display = f"{effective_timeout}s" if effective_timeout else "disabled"

    loop = asyncio.get_running_loop()
    logger.debug("Offloading XML decoding to thread pool executor (timeout: %s)...", timeout_display)
    cancel_event = threading.Event()
    decode_task = loop.run_in_executor(None, decode_guide, stream, chunk_size, cancel_event)

    try:
        if effective_timeout:
            guide = await asyncio.wait_for(decode_task, timeout=effective_timeout)
        else:
            guide = await decode_task
    except asyncio.TimeoutError as e:
        # The worker thread cannot be interrupted, stop it before its next read
        cancel_event.set()
        logger.error("XML decoding timed out after %s", timeout_display)
        raise DecodeTimeoutError(
            f"XML decoding timed out after {timeout_display} - file may be too large"
        ) from e

    logger.debug(f"XML decoding completed: {len(guide.broadcasts)} broadcasts")
    return guide
