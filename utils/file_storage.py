"""Blob storage for uploaded lecture videos and notes"""

import os
import re
import shutil
import time
from pathlib import Path

from fastapi import UploadFile

from config import settings
from utils.error_handling import InvalidUploadError, PersistenceError
from utils.structured_logging import get_logger

logger = get_logger("file_storage")

UPLOAD_KINDS = ("lectures", "notes")
PUBLIC_PREFIX = "/uploads"


def safe_filename(filename: str) -> str:
    name = os.path.basename(filename or "").strip()
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name)
    return name.lstrip(".") or "upload"


def upload_size(upload: UploadFile) -> int:
    upload.file.seek(0, 2)  # Seek to end
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def store_upload(upload: UploadFile, kind: str) -> str:
    """
    Save an uploaded file under UPLOAD_DIR/<kind>/ and return its public path
    """
    if kind not in UPLOAD_KINDS:
        raise ValueError(f"Unknown upload kind: {kind}")
    if upload is None or not upload.filename:
        raise InvalidUploadError("no file provided")

    size = upload_size(upload)
    if size == 0 or size > settings.MAX_UPLOAD_BYTES:
        raise InvalidUploadError(f"file size {size} is outside the accepted range", size=size)

    directory = Path(settings.UPLOAD_DIR) / kind
    stored_name = f"{int(time.time() * 1000)}-{safe_filename(upload.filename)}"

    try:
        directory.mkdir(parents=True, exist_ok=True)
        with open(directory / stored_name, "wb") as buffer:
            shutil.copyfileobj(upload.file, buffer)
    except OSError as e:
        logger.error("File upload failed", exception=e, extra={"kind": kind})
        raise PersistenceError("could not store upload") from e

    logger.info("File stored", extra={"kind": kind, "file": stored_name, "size": size})
    return f"{PUBLIC_PREFIX}/{kind}/{stored_name}"


def discard_upload(public_path: str) -> None:
    """Remove a stored file whose database record could not be written"""
    relative = public_path[len(PUBLIC_PREFIX):].lstrip("/")
    try:
        (Path(settings.UPLOAD_DIR) / relative).unlink()
    except FileNotFoundError:
        pass
