# yogaschool/services/chat/attachment_service.py
"""Stores chat attachments on local disk under the upload directory."""
import os
import random
import time
import logging
from pathlib import Path
from fastapi import UploadFile
from starlette.concurrency import run_in_threadpool

from ...core.config import settings
from ...core.exceptions import ValidationException
from ...models.chat.chat_message import MessageType

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp", ".pdf", ".doc", ".docx", ".txt", ".zip"}
CHAT_UPLOAD_SUBDIR = "chat"


def chat_upload_dir() -> Path:
    return Path(settings.upload_dir) / CHAT_UPLOAD_SUBDIR


def _stored_name(original_name: str) -> str:
    extension = os.path.splitext(original_name)[1].lower()
    return f"chat-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"


def _write_file(path: Path, content: bytes):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)


async def save_chat_attachment(file: UploadFile) -> dict:
    if not file or not file.filename:
        raise ValidationException("No file uploaded")

    extension = os.path.splitext(file.filename)[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise ValidationException("Invalid file type. Allowed: images, PDF, DOC, TXT, ZIP")

    # One byte past the limit is enough to tell it is oversized
    content = await file.read(settings.chat_upload_max_bytes + 1)
    if len(content) > settings.chat_upload_max_bytes:
        limit_mb = settings.chat_upload_max_bytes // (1024 * 1024)
        raise ValidationException(f"File too large. Maximum size is {limit_mb}MB")

    stored_name = _stored_name(file.filename)
    await run_in_threadpool(_write_file, chat_upload_dir() / stored_name, content)

    content_type = file.content_type or ""
    message_type = MessageType.IMAGE if content_type.startswith("image/") else MessageType.FILE
    logger.info(f"Stored chat attachment {stored_name} ({len(content)} bytes)")

    return {
        "success": True,
        "file_url": f"/uploads/{CHAT_UPLOAD_SUBDIR}/{stored_name}",
        "file_name": file.filename,
        "file_size": len(content),
        "message_type": message_type.value,
    }
