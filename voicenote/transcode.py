from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

from mutagen import File as MutagenFile

from .config import Settings
from .tempfiles import TempFileGuard, read_output_async
from .tools import FFMPEG, MediaTools

logger = logging.getLogger(__name__)

# WhatsApp only renders a message as a voice note for mono 16 kHz Opus in Ogg.
VOICE_CODEC = "libopus"
VOICE_CHANNELS = 1
VOICE_SAMPLE_RATE = 16000
VOICE_BITRATE = "24k"
VOICE_FORMAT = "ogg"
VOICE_MIME_TYPE = "audio/ogg; codecs=opus"
OPUS_OPTIONS = ("-application", "voip", "-vbr", "on", "-compression_level", "10")


def build_transcode_args(input_path: Path, output_path: Path) -> list[str]:
    return [
        "-hide_banner",
        "-nostdin",
        "-y",
        "-i",
        str(input_path),
        "-vn",
        "-c:a",
        VOICE_CODEC,
        "-ac",
        str(VOICE_CHANNELS),
        "-ar",
        str(VOICE_SAMPLE_RATE),
        "-b:a",
        VOICE_BITRATE,
        *OPUS_OPTIONS,
        "-f",
        VOICE_FORMAT,
        str(output_path),
    ]


def detect_container(path: Path) -> Optional[str]:
    """Return the primary MIME type mutagen recognises for ``path``, if any."""
    try:
        handle = MutagenFile(path)
    except Exception as exc:  # pragma: no cover - sniffing is diagnostic only
        logger.debug("mutagen could not read %s: %s", path.name, exc)
        return None
    if handle is None or not handle.mime:
        return None
    return handle.mime[0]


def _same_family(declared: str, detected: str) -> bool:
    declared_base = declared.split(";", 1)[0].strip().lower()
    return declared_base == detected.lower() or declared_base.split("/")[-1] in detected.lower()


async def convert_to_voice(
    buffer: bytes,
    original_mime_type: str,
    settings: Settings,
    *,
    tools: Optional[MediaTools] = None,
) -> bytes:
    """Transcode ``buffer`` into a mono 16 kHz Ogg/Opus voice note.

    The input container is auto-detected by ffmpeg; ``original_mime_type`` is
    only used for diagnostics. Both temp files are removed on every exit path.
    """
    tools = tools or MediaTools(settings.tools)
    with TempFileGuard(settings.temp.directory) as guard:
        input_path = await guard.write_async("in", ".bin", buffer)
        output_path = guard.path("out", ".ogg")

        loop = asyncio.get_running_loop()
        detected = await loop.run_in_executor(None, detect_container, input_path)
        if detected and original_mime_type and not _same_family(original_mime_type, detected):
            logger.info(
                "Declared type %s differs from detected %s; letting ffmpeg decide",
                original_mime_type,
                detected,
            )
        logger.debug(
            "Converting %d bytes (%s) to voice note [%s]",
            len(buffer),
            original_mime_type or "unknown",
            guard.token,
        )

        await tools.run(FFMPEG, build_transcode_args(input_path, output_path))
        data = await read_output_async(output_path)
    logger.debug("Voice note ready: %d bytes", len(data))
    return data
