from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from ..config import Settings
from ..errors import VoiceNoteError
from ..tempfiles import TempFileGuard
from ..tools import FFMPEG, FFPROBE, MediaTools
from ..transcode import VOICE_CODEC
from .output import error, ok as ok_line, warning


@dataclass(slots=True)
class DoctorReport:
    ok: bool
    checks: list[str]


async def _tool_version(tools: MediaTools, tool: str) -> str:
    output = await tools.run(tool, ["-hide_banner", "-version"])
    first = output.text().splitlines()
    return first[0] if first else tool


async def _has_encoder(tools: MediaTools, encoder: str) -> bool:
    output = await tools.run(FFMPEG, ["-hide_banner", "-encoders"])
    return any(
        len(parts) > 1 and parts[1] == encoder
        for parts in (line.split() for line in output.text().splitlines())
    )


async def _run_async(settings: Settings) -> DoctorReport:
    checks: list[str] = []
    ok = True
    tools = MediaTools(settings.tools)

    for tool in (FFMPEG, FFPROBE):
        try:
            version = await _tool_version(tools, tool)
            checks.append(ok_line(tool, version))
        except VoiceNoteError as exc:
            ok = False
            checks.append(error(tool, str(exc)))

    try:
        if await _has_encoder(tools, VOICE_CODEC):
            checks.append(ok_line("Opus encoder", VOICE_CODEC))
        else:
            ok = False
            checks.append(error("Opus encoder", f"ffmpeg lacks {VOICE_CODEC}"))
    except VoiceNoteError as exc:
        ok = False
        checks.append(error("Opus encoder", str(exc)))

    try:
        with TempFileGuard(settings.temp.directory) as guard:
            guard.write("doctor", ".bin", b"ok")
        if guard.report.clean:
            checks.append(ok_line("Temp directory", str(settings.temp.directory)))
        else:
            checks.append(warning("Temp directory", "files could not be removed"))
    except VoiceNoteError as exc:
        ok = False
        checks.append(error("Temp directory", str(exc)))

    watch = settings.watch
    for label, directory in (("Inbox", watch.inbox), ("Outbox", watch.outbox)):
        if directory is None:
            checks.append(warning(label, f"watch.{label.lower()} not set"))
        elif not Path(directory).exists():
            checks.append(warning(label, f"missing: {directory}"))
        else:
            checks.append(ok_line(label, str(directory)))
    return DoctorReport(ok=ok, checks=checks)


def run(settings: Settings) -> DoctorReport:
    return asyncio.run(_run_async(settings))
