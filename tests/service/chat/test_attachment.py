import io
import re

import pytest

import marketchat.service.chat.attachment as attachment_module
from marketchat.service.chat.attachment import AttachmentKind, AttachmentTooLarge


@pytest.mark.parametrize(
    "content_type, declared, expected",
    [
        ("audio/mpeg", "", AttachmentKind.AUDIO),
        ("video/webm", "audio", AttachmentKind.AUDIO),
        ("image/png", "", AttachmentKind.IMAGE),
        ("application/pdf", "", AttachmentKind.FILE),
        (None, None, AttachmentKind.FILE),
    ],
)
def test_classify_attachment(content_type, declared, expected):
    assert attachment_module.classify_attachment(content_type, declared) is expected


def test_attachment_kind_values_match_action_kinds():
    assert AttachmentKind.IMAGE.value == "imagem"
    assert AttachmentKind.FILE.value == "arquivo"


@pytest.mark.parametrize(
    "name, content_type",
    [
        ("recording.ogg", "audio/webm"),
        ("blob", "audio/webm;codecs=opus"),
        ("blob", "Audio/WebM; codecs=opus"),
        ("audio.webm", "application/octet-stream"),
    ],
)
def test_extension_is_forced_for_webm_audio(name, content_type):
    assert attachment_module.attachment_extension(name, content_type) == ".webm"


def test_extension_falls_back_to_bin():
    assert attachment_module.attachment_extension("README", "text/plain") == ".bin"
    assert attachment_module.attachment_extension(None, None) == ".bin"


def test_generate_filename_shape():
    first = attachment_module.generate_filename("foto.jpg", "image/jpeg")
    second = attachment_module.generate_filename("foto.jpg", "image/jpeg")

    assert re.fullmatch(r"chat-\d+-\d+\.jpg", first)
    assert first != second


def test_store_attachment_writes_file(upload_dir):
    written = attachment_module.store_attachment(io.BytesIO(b"hello"), "chat-1-1.txt", upload_dir, 10)

    assert written == 5
    assert (upload_dir / "chat-1-1.txt").read_bytes() == b"hello"


def test_store_attachment_rejects_oversized_upload(upload_dir):
    with pytest.raises(AttachmentTooLarge):
        attachment_module.store_attachment(io.BytesIO(b"x" * 11), "chat-1-2.bin", upload_dir, 10)

    assert not (upload_dir / "chat-1-2.bin").exists()
