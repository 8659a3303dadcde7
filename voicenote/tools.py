from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass
from typing import Sequence

from .config import ToolSettings
from .errors import ToolInvocationError, ToolNotFoundError, ToolTimeoutError

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"


@dataclass(frozen=True, slots=True)
class ToolOutput:
    stdout: bytes
    stderr: bytes

    def text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")


class MediaTools:
    """Runs ffmpeg/ffprobe as subprocesses without blocking the event loop."""

    def __init__(self, settings: ToolSettings) -> None:
        self.settings = settings

    def binary(self, tool: str) -> str:
        if tool == FFMPEG:
            path = self.settings.resolve_ffmpeg()
        elif tool == FFPROBE:
            path = self.settings.resolve_ffprobe()
        else:
            raise ValueError(f"Unknown tool: {tool}")
        if not path:
            raise ToolNotFoundError(tool)
        return path

    async def run(self, tool: str, args: Sequence[str]) -> ToolOutput:
        binary = self.binary(tool)
        cmd = [binary, *args]
        logger.debug("Running %s", shlex.join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise ToolNotFoundError(tool, binary) from exc

        timeout = self.settings.timeout_seconds
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await _terminate(proc)
            logger.warning("%s timed out after %ss; process killed", tool, timeout)
            raise ToolTimeoutError(tool, timeout) from None
        except asyncio.CancelledError:
            await _terminate(proc)
            raise

        if proc.returncode != 0:
            err = stderr.decode("utf-8", errors="replace")
            logger.debug("%s failed with exit %s: %s", tool, proc.returncode, err.strip())
            raise ToolInvocationError(tool, "failed", returncode=proc.returncode, stderr=err)
        return ToolOutput(stdout=stdout, stderr=stderr)


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
