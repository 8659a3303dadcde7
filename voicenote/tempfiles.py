from __future__ import annotations

import asyncio
import logging
import secrets
from pathlib import Path
from types import TracebackType
from typing import Optional

from .errors import TempFileError
from .models import CleanupReport

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


def ensure_temp_dir(directory: Path) -> Path:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise TempFileError(f"cannot create temp directory {directory}: {exc}") from exc
    return directory


def new_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


class TempFileGuard:
    """Allocates uniquely named files for one call and removes them on scope exit.

    Every allocated path is removed independently when the ``with`` block ends,
    whether it ended normally or by an exception (including cancellation).
    Removal failures are collected in :attr:`report` and logged, so they never
    replace the exception or result of the guarded block.
    """

    def __init__(self, directory: Path, token: Optional[str] = None) -> None:
        self.directory = ensure_temp_dir(directory)
        self.token = token or new_token()
        self.paths: list[Path] = []
        self.report = CleanupReport()

    def path(self, prefix: str, suffix: str) -> Path:
        path = self.directory / f"{prefix}_{self.token}{suffix}"
        self.paths.append(path)
        return path

    def write(self, prefix: str, suffix: str, data: bytes) -> Path:
        path = self.path(prefix, suffix)
        try:
            path.write_bytes(data)
        except OSError as exc:
            raise TempFileError(f"write temp failed: {exc}") from exc
        return path

    async def write_async(self, prefix: str, suffix: str, data: bytes) -> Path:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.write, prefix, suffix, data)

    def cleanup(self) -> CleanupReport:
        for path in self.paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                self.report.failures[path] = str(exc)
                logger.warning("Could not remove temp file %s: %s", path, exc)
            else:
                self.report.removed.append(path)
        self.paths = []
        return self.report

    def __enter__(self) -> "TempFileGuard":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.cleanup()


def read_output(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise TempFileError(f"read temp output failed: {exc}") from exc


async def read_output_async(path: Path) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, read_output, path)
