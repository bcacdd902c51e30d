"""
Image Relay API Routes

Provides endpoints for:
- PUT /        Relay raw image bytes to Weibo, respond with the public URL
- GET /        Serve the configured fallback image
- GET /health  Health check

Handlers read the shared configuration and uploader from app.state.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse, PlainTextResponse

from .errors import UpstreamError

logger = logging.getLogger(__name__)

# Plain-text bodies returned to callers; no error detail is ever included
INTERNAL_ERROR_MESSAGE = "Internal server error"
UPLOAD_FAILED_MESSAGE = "Weibo upload failed"
NOT_FOUND_MESSAGE = "404 page not found"

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Image Relay"])


# ============================================
# Endpoints
# ============================================

@router.put("/")
async def upload_image(request: Request):
    """
    Relay an image upload.

    The request body is the raw image; no size or content-type checks are
    made here. Responds with:
    - 200 and the image URL as the whole text body
    - 403 if Weibo rejected the upload or answered with something unexpected
    - 500 if the body could not be read or Weibo could not be reached

    Example:
        curl -T photo.jpg http://localhost:8080/
    """
    try:
        body = await request.body()
    except Exception as e:
        logger.error(f"[ImageRelay] Failed to read request body: {type(e).__name__}: {e}")
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)

    uploader = request.app.state.uploader
    try:
        result = await uploader.upload(body)
    except UpstreamError as e:
        logger.error(f"[ImageRelay] Upload error: {e}")
        return PlainTextResponse(INTERNAL_ERROR_MESSAGE, status_code=500)

    if not result.success:
        logger.warning(f"[ImageRelay] Upload rejected ({len(body)} bytes)")
        return PlainTextResponse(UPLOAD_FAILED_MESSAGE, status_code=403)

    logger.info(f"[ImageRelay] Upload succeeded: {result.url}")
    return PlainTextResponse(result.url)


@router.get("/")
async def fallback_image(request: Request):
    """
    Serve the fallback image.

    The configured Referer header is attached to every response, including
    the 404 returned when the file is missing.
    """
    config = request.app.state.config
    base_dir: Path = request.app.state.base_dir
    headers = {"Referer": config.referer}

    # Always relative to base_dir, even when written with a leading slash
    file_path = base_dir / config.image_path.lstrip("/\\")
    if not file_path.is_file():
        logger.warning(f"[ImageRelay] Fallback image not found: {config.image_path}")
        return PlainTextResponse(NOT_FOUND_MESSAGE, status_code=404, headers=headers)

    return FileResponse(file_path, headers=headers)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "image-relay",
    }
