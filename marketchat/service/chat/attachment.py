import enum
import logging
import random
import time
from pathlib import Path
from typing import BinaryIO, Optional

from marketchat.db.models.message import ActionKind

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
DEFAULT_EXTENSION = ".bin"
WEBM_AUDIO_NAME = "audio.webm"


class AttachmentKind(str, enum.Enum):
    AUDIO = ActionKind.AUDIO.value
    IMAGE = ActionKind.IMAGE.value
    FILE = ActionKind.FILE.value


class AttachmentTooLarge(Exception):
    def __init__(self, limit: int):
        super().__init__(f"Arquivo excede o limite de {limit // (1024 * 1024)}MB")
        self.limit = limit


def classify_attachment(content_type: Optional[str], declared_kind: Optional[str] = None) -> AttachmentKind:
    """
    Decide how an uploaded file is shown in the chat.

    An explicit "audio" intent wins (browsers record voice notes as video/webm
    on some platforms), then the MIME family. Anything else, including a
    missing content type, is a plain FILE.
    """
    mime = (content_type or "").lower()
    if declared_kind == "audio" or "audio" in mime:
        return AttachmentKind.AUDIO
    if "image" in mime:
        return AttachmentKind.IMAGE
    return AttachmentKind.FILE


def attachment_extension(original_name: Optional[str], content_type: Optional[str]) -> str:
    name = original_name or ""
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type == "audio/webm" or name == WEBM_AUDIO_NAME:
        return ".webm"
    return Path(name).suffix or DEFAULT_EXTENSION


def generate_filename(original_name: Optional[str], content_type: Optional[str]) -> str:
    unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"chat-{unique}{attachment_extension(original_name, content_type)}"


def store_attachment(source: BinaryIO, filename: str, upload_dir: Path, max_bytes: int) -> int:
    """Copy an upload stream into upload_dir/filename; returns the byte count."""
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / filename
    written = 0
    try:
        with target.open("wb") as out:
            while True:
                chunk = source.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise AttachmentTooLarge(max_bytes)
                out.write(chunk)
    except AttachmentTooLarge:
        target.unlink(missing_ok=True)
        logger.warning("attachment rejected filename=%s limit=%s", filename, max_bytes)
        raise
    return written


def remove_attachment(filename: str, upload_dir: Path) -> None:
    (upload_dir / filename).unlink(missing_ok=True)
