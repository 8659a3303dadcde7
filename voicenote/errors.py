from __future__ import annotations

from typing import Optional

STDERR_LIMIT = 500


class VoiceNoteError(Exception):
    """Base class for every failure raised by the voice-note pipeline."""


class ToolNotFoundError(VoiceNoteError):
    def __init__(self, tool: str, path: Optional[str] = None) -> None:
        self.tool = tool
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(f"{tool} not found{where}; install it or set tools.{tool}_path")


class ToolInvocationError(VoiceNoteError):
    def __init__(
        self,
        tool: str,
        message: str,
        *,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr[-STDERR_LIMIT:]
        detail = f"{tool} {message}"
        if returncode is not None:
            detail = f"{detail} (exit {returncode})"
        if self.stderr:
            detail = f"{detail}: {self.stderr.strip()}"
        super().__init__(detail)


class ToolTimeoutError(ToolInvocationError):
    def __init__(self, tool: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(tool, f"timed out after {timeout:g} seconds")


class ProbeParseError(ToolInvocationError):
    def __init__(self, tool: str, stdout: str) -> None:
        super().__init__(tool, "printed unparseable metadata", stderr=stdout)


class TempFileError(VoiceNoteError):
    pass


class UnsupportedMediaError(VoiceNoteError):
    pass
