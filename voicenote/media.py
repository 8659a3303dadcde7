from __future__ import annotations

from .errors import UnsupportedMediaError
from .transcode import VOICE_MIME_TYPE

MAX_AUDIO_BYTES = 16 * 1024 * 1024

AUDIO_MIME_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/ogg",
        "audio/aac",
        "audio/m4a",
        "audio/mp4",
        "audio/amr",
        "audio/webm",
    }
)

# Upload type -> type announced to the WhatsApp media endpoint.
WHATSAPP_AUDIO_TYPES = {
    "audio/mpeg": "audio/mpeg",
    "audio/mp3": "audio/mpeg",
    "audio/ogg": VOICE_MIME_TYPE,
    "audio/webm": VOICE_MIME_TYPE,
    "audio/aac": "audio/aac",
    "audio/m4a": "audio/aac",
    "audio/mp4": "audio/aac",
    "audio/amr": "audio/amr",
}

VOICE_NAME_MARKERS = ("voice_", "recording_")


def base_mime(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


def whatsapp_mime_type(mime_type: str, *, voice: bool = False) -> str:
    base = base_mime(mime_type)
    if voice and base.startswith("audio/"):
        return VOICE_MIME_TYPE
    return WHATSAPP_AUDIO_TYPES.get(base, mime_type)


def is_voice_filename(name: str) -> bool:
    return any(marker in name for marker in VOICE_NAME_MARKERS)


def validate_audio_upload(buffer: bytes, mime_type: str) -> None:
    base = base_mime(mime_type)
    if base not in AUDIO_MIME_TYPES:
        raise UnsupportedMediaError(f"Invalid audio type: {mime_type or '<none>'}")
    if not buffer:
        raise UnsupportedMediaError("Audio upload is empty")
    if len(buffer) > MAX_AUDIO_BYTES:
        size_mb = len(buffer) / (1024 * 1024)
        max_mb = MAX_AUDIO_BYTES / (1024 * 1024)
        raise UnsupportedMediaError(
            f"Audio too large for WhatsApp. Size: {size_mb:.2f}MB, Max: {max_mb:.2f}MB"
        )
