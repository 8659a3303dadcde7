from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from .errors import ProbeParseError
from .models import ProbeResult
from .tools import FFPROBE, MediaTools

logger = logging.getLogger(__name__)

PROBE_ARGS = ("-v", "error", "-print_format", "json", "-show_format", "-show_streams")


def _parse_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _parse_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_probe_output(data: Mapping[str, Any]) -> ProbeResult:
    """Build a ProbeResult from ffprobe's JSON document.

    Only the first audio stream is considered. Absent or malformed fields fall
    back to empty/zero values so the result is always fully populated.
    """
    streams = data.get("streams") or []
    audio: Mapping[str, Any] = next(
        (s for s in streams if isinstance(s, Mapping) and s.get("codec_type") == "audio"),
        {},
    )
    fmt = data.get("format") or {}
    return ProbeResult(
        codec_name=str(audio.get("codec_name") or ""),
        sample_rate=_parse_int(audio.get("sample_rate")),
        channels=_parse_int(audio.get("channels")),
        duration=_parse_float(fmt.get("duration")),
        format_name=str(fmt.get("format_name") or ""),
    )


async def probe_file(path: Path, tools: MediaTools) -> ProbeResult:
    output = await tools.run(FFPROBE, [*PROBE_ARGS, str(path)])
    text = output.text()
    try:
        data = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as exc:
        raise ProbeParseError(FFPROBE, text) from exc
    if not isinstance(data, Mapping):
        raise ProbeParseError(FFPROBE, text)
    result = parse_probe_output(data)
    logger.debug("Probed %s: %s", path.name, result)
    return result
