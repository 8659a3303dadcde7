from __future__ import annotations

import fnmatch
from collections.abc import Iterator
from pathlib import Path

from .config import WatchSettings


class InboxScanner:
    """Lists audio files waiting in the inbox directory."""

    def __init__(self, settings: WatchSettings) -> None:
        self.settings = settings
        self._exts = {ext.lower() for ext in self.settings.include_extensions}

    def should_include(self, path: Path) -> bool:
        if path.name.startswith("."):
            return False
        if path.suffix.lower() not in self._exts:
            return False
        rel = str(path)
        for pattern in self.settings.exclude_patterns:
            if fnmatch.fnmatch(rel, pattern) or fnmatch.fnmatch(path.name, pattern):
                return False
        return True

    def iter_files(self) -> Iterator[Path]:
        inbox = self.settings.inbox
        if inbox is None or not inbox.exists():
            return
        for path in sorted(inbox.iterdir()):
            if path.is_file() and self.should_include(path):
                yield path
