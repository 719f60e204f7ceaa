"""Service for storing uploaded images on the local disk."""

import os
from typing import Optional
from urllib.parse import urlparse

from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from uuid_extensions import uuid7

from app.settings import settings
from app.utils.file_validator import validate_image
from app.utils.logging_config import logger

UPLOADS_URL_PREFIX = "/uploads"
CHUNK_SIZE = 64 * 1024


def ensure_upload_dir() -> str:
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    return settings.UPLOAD_DIR


def generate_filename(ext: str) -> str:
    """
    Builds a collision-resistant name: a UUIDv7 (millisecond timestamp plus
    random bits) followed by the extension of the detected image type.
    The client's filename is ignored.
    """
    return f"{uuid7().hex}{ext}"


def public_url(request: Request, filename: str) -> str:
    base_url = settings.PUBLIC_BASE_URL or str(request.base_url)
    return f"{base_url.rstrip('/')}{UPLOADS_URL_PREFIX}/{filename}"


async def read_upload(file: UploadFile) -> bytes:
    """
    Reads an uploaded file into memory, enforcing MAX_UPLOAD_SIZE.
    """
    content = bytearray()
    while chunk := await file.read(CHUNK_SIZE):
        content.extend(chunk)
        if len(content) > settings.MAX_UPLOAD_SIZE:
            raise HTTPException(
                status_code=413,
                detail=f"Arquivo excede o limite de {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB.",
            )
    return bytes(content)


def _write_file(path: str, content: bytes) -> None:
    with open(path, "wb") as buffer:
        buffer.write(content)


async def save_upload(request: Request, file: Optional[UploadFile]) -> Optional[str]:
    """
    Validates and writes an uploaded image to UPLOAD_DIR.

    Returns:
        The public URL of the stored file, or None when no file was sent.
    """
    if file is None:
        return None

    content = await read_upload(file)
    ext = validate_image(content, file.content_type)
    filename = generate_filename(ext)
    file_path = os.path.join(ensure_upload_dir(), filename)

    await run_in_threadpool(_write_file, file_path, content)
    logger.info(f"Upload stored at path: {file_path}")

    return public_url(request, filename)


def remove_upload_by_url(url_imagem: Optional[str]) -> None:
    """
    Best-effort removal of a stored upload given its absolute public URL.
    Only the basename of the URL path is used, so the target always lives
    inside UPLOAD_DIR.
    """
    if not url_imagem:
        return

    try:
        filename = os.path.basename(urlparse(url_imagem).path)
        if not filename:
            return
        os.remove(os.path.join(settings.UPLOAD_DIR, filename))
        logger.info(f"Upload removed: {filename}")
    except (OSError, ValueError) as e:
        logger.debug(f"Could not remove upload {url_imagem}: {e}")
