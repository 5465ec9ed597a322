"""Local-disk storage for uploaded images."""

import os
from pathlib import Path

from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from libs.common.config import get_settings
from libs.common.error_handler import BadRequestError
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def save_image_upload(upload: UploadFile, *, folder: str, entity_id) -> str:
    """
    Validate and persist an uploaded image.

    The file is stored as ``<FILE_UPLOAD_PATH>/<folder>/photo_<entity_id><ext>``.
    Returns the stored file name.
    """
    settings = get_settings()

    if not upload.content_type or not upload.content_type.startswith("image"):
        raise BadRequestError("Please upload an image file")

    data = await upload.read()
    if not data:
        raise BadRequestError("Please upload a file")

    max_size = settings.MAX_FILE_UPLOAD
    if len(data) > max_size:
        raise BadRequestError(f"Please upload an image less than {max_size // 1000}KB")

    ext = os.path.splitext(upload.filename or "")[1].lower()
    file_name = f"photo_{entity_id}{ext}"
    target_dir = Path(settings.FILE_UPLOAD_PATH) / folder

    def _write() -> None:
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / file_name).write_bytes(data)

    try:
        await run_in_threadpool(_write)
    except OSError as e:
        logger.error("Problem with file upload for %s/%s: %s", folder, file_name, e)
        raise

    logger.info("Stored upload %s/%s (%d bytes)", folder, file_name, len(data))
    return file_name
