import os
import uuid
from typing import List, Tuple

import aiofiles
from fastapi import UploadFile
from structlog import get_logger

from app.config import settings

logger = get_logger()


class UploadRejected(ValueError):
    """A file in the batch failed validation; nothing from the batch is stored."""


async def read_images(files: List[UploadFile]) -> List[Tuple[str, bytes]]:
    """Validate every file up front and return (original name, content) pairs."""
    if not files:
        raise UploadRejected("No images uploaded")
    if len(files) > settings.MAX_UPLOAD_FILES:
        raise UploadRejected(f"At most {settings.MAX_UPLOAD_FILES} images can be uploaded at once")

    limit_mb = settings.MAX_UPLOAD_SIZE_BYTES // (1024 * 1024)
    accepted = []
    for upload in files:
        if not (upload.content_type or "").startswith("image/"):
            raise UploadRejected(f"Only image files are allowed ({upload.filename})")
        if upload.size is not None and upload.size > settings.MAX_UPLOAD_SIZE_BYTES:
            raise UploadRejected(f"{upload.filename} is larger than {limit_mb}MB")
        content = await upload.read()
        if len(content) > settings.MAX_UPLOAD_SIZE_BYTES:
            raise UploadRejected(f"{upload.filename} is larger than {limit_mb}MB")
        accepted.append((upload.filename or "", content))
    return accepted


async def save_image(filename: str, content: bytes) -> str:
    """Write one image under UPLOAD_DIR and return the URL it is served from."""
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{os.path.splitext(filename)[1].lower()}"
    async with aiofiles.open(os.path.join(settings.UPLOAD_DIR, stored_name), "wb") as f:
        await f.write(content)
    logger.info("Image stored", original=filename, stored_as=stored_name, size=len(content))
    return f"{settings.UPLOAD_URL_PREFIX}/{stored_name}"
