from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler

from .scanner import InboxScanner

logger = logging.getLogger(__name__)


class WatchHandler(FileSystemEventHandler):
    def __init__(
        self,
        queue: asyncio.Queue[Path],
        scanner: InboxScanner,
        *,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        super().__init__()
        self.queue = queue
        self.scanner = scanner
        self.loop = loop

    def on_created(self, event: FileSystemEvent) -> None:
        self._maybe_enqueue(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._maybe_enqueue(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        dest = getattr(event, "dest_path", None)
        if dest:
            self._enqueue_path(dest)

    def _maybe_enqueue(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._enqueue_path(event.src_path)

    def _enqueue_path(self, src: str | bytes) -> None:
        if isinstance(src, bytes):
            src = src.decode("utf-8", errors="replace")
        path = Path(src)
        if self.scanner.should_include(path):
            logger.debug("Queued inbox file: %s", path.name)
            self.loop.call_soon_threadsafe(self.queue.put_nowait, path)
