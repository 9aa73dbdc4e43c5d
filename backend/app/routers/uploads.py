"""Image uploads for product pictures and custom-order references.

Files land in settings.upload_dir as "<uuid>.<ext>" and are served back
under settings.upload_url_prefix.
"""

import logging
import mimetypes
import uuid
from pathlib import Path

from fastapi import APIRouter, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from app.config import settings
from app.middleware.exceptions import ValidationFailed
from app.schemas.storefront import UploadOut

logger = logging.getLogger("signshop.uploads")

router = APIRouter()


def upload_extension(filename: str | None, content_type: str) -> str:
    suffix = Path(filename or "").suffix.lower().lstrip(".")
    if suffix and suffix.isalnum():
        return suffix
    guessed = mimetypes.guess_extension(content_type) or ".bin"
    return guessed.lstrip(".")


def _write(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


@router.post("/api/upload", response_model=UploadOut)
async def upload_image(file: UploadFile | None = File(None)):
    if file is None:
        raise ValidationFailed("No file received")
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise ValidationFailed("Only image uploads are allowed", error_code="INVALID_FILE_TYPE")

    data = await file.read()
    if not data:
        raise ValidationFailed("Uploaded file is empty")

    file_id = uuid.uuid4().hex
    name = f"{file_id}.{upload_extension(file.filename, content_type)}"
    await run_in_threadpool(_write, Path(settings.upload_dir) / name, data)
    logger.info("Stored upload %s (%d bytes)", name, len(data))

    return UploadOut(
        url=f"{settings.upload_url_prefix.rstrip('/')}/{name}",
        file_id=file_id,
        name=name,
    )
