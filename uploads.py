"""Profile-image upload handling: validate, store under UPLOAD_DIR, return the public path."""

import secrets
import time
from pathlib import Path

import structlog
from fastapi import HTTPException, UploadFile, status

from config import IMAGE_CONTENT_TYPES, MAX_UPLOAD_BYTES, UPLOAD_DIR, UPLOAD_URL_PREFIX

logger = structlog.get_logger("hr.uploads")

_CHUNK_SIZE = 64 * 1024


def _stored_name(content_type: str) -> str:
    return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}{IMAGE_CONTENT_TYPES[content_type]}"


def save_upload(file: UploadFile | None, upload_dir: Path = UPLOAD_DIR) -> str | None:
    """
    Store an uploaded profile image and return its public path ("/uploads/<name>").
    Returns None when no file was attached.
    Raises 400 for non-image content or files over MAX_UPLOAD_BYTES.
    """
    if file is None or not file.filename:
        return None
    if file.content_type not in IMAGE_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed",
        )

    upload_dir.mkdir(parents=True, exist_ok=True)
    dest = upload_dir / _stored_name(file.content_type)
    written = 0
    try:
        with dest.open("wb") as out:
            while chunk := file.file.read(_CHUNK_SIZE):
                written += len(chunk)
                if written > MAX_UPLOAD_BYTES:
                    raise HTTPException(
                        status_code=status.HTTP_400_BAD_REQUEST,
                        detail="Image exceeds size limit",
                    )
                out.write(chunk)
    except Exception:
        dest.unlink(missing_ok=True)
        raise

    logger.info("upload_stored", filename=file.filename, path=dest.name)
    return f"{UPLOAD_URL_PREFIX}/{dest.name}"


def discard_upload(path: str | None, upload_dir: Path = UPLOAD_DIR) -> None:
    """Remove a file previously returned by save_upload (e.g. when the store write failed)."""
    if not path:
        return
    (upload_dir / Path(path).name).unlink(missing_ok=True)
