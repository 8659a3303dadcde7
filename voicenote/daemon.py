from __future__ import annotations

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from watchdog.observers import Observer

from .app import VoiceNoteApp
from .config import Settings
from .errors import VoiceNoteError
from .fs_utils import atomic_write_bytes, unique_destination
from .models import EligibilityVerdict
from .scanner import InboxScanner
from .watchdog_handler import WatchHandler

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ConversionOutcome:
    source: Path
    destination: Optional[Path] = None
    verdict: Optional[EligibilityVerdict] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class VoiceNoteDaemon:
    """Converts audio dropped into the inbox into voice notes in the outbox."""

    def __init__(self, settings: Settings, app: VoiceNoteApp | None = None) -> None:
        watch = settings.watch
        if watch.inbox is None or watch.outbox is None:
            raise VoiceNoteError("watch.inbox and watch.outbox must both be configured")
        self.settings = settings
        self.app = app or VoiceNoteApp.create(settings)
        self.scanner = InboxScanner(watch)
        self.inbox: Path = watch.inbox
        self.outbox: Path = watch.outbox
        self.queue: asyncio.Queue[Path] = asyncio.Queue()
        self.observer: Observer | None = None
        self.outcomes: list[ConversionOutcome] = []
        self._seen: dict[Path, float] = {}
        self._produced: set[Path] = set()
        self._destinations: dict[Path, Path] = {}

    async def run_batch(self) -> list[ConversionOutcome]:
        logger.debug("Starting one-off inbox conversion")
        self._queue_inbox()
        workers = self._start_workers()
        await self.queue.join()
        await self._stop_workers(workers)
        return list(self.outcomes)

    async def run_daemon(self) -> None:
        logger.debug("Starting watch daemon on %s", self.inbox)
        self._queue_inbox()
        loop = asyncio.get_running_loop()
        self._bootstrap_watchdog(loop)
        workers = self._start_workers()
        try:
            while True:
                await asyncio.sleep(3600)
        except (asyncio.CancelledError, KeyboardInterrupt):
            logger.info("Stopping daemon")
        finally:
            if self.observer:
                self.observer.stop()
                self.observer.join()
            await self._stop_workers(workers)

    def _queue_inbox(self) -> None:
        for path in self.scanner.iter_files():
            self.queue.put_nowait(path)

    def _bootstrap_watchdog(self, loop: asyncio.AbstractEventLoop) -> None:
        self.inbox.mkdir(parents=True, exist_ok=True)
        handler = WatchHandler(self.queue, self.scanner, loop=loop)
        observer = Observer()
        observer.schedule(handler, str(self.inbox), recursive=False)
        observer.start()
        self.observer = observer

    def _start_workers(self) -> list[asyncio.Task[None]]:
        concurrency = self.settings.watch.worker_concurrency
        return [asyncio.create_task(self._worker(i)) for i in range(concurrency)]

    async def _stop_workers(self, workers: list[asyncio.Task[None]]) -> None:
        for worker_task in workers:
            worker_task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

    async def _worker(self, worker_id: int) -> None:
        while True:
            path = await self.queue.get()
            try:
                if self._should_process(path):
                    outcome = await self.process_file(path)
                    self.outcomes.append(outcome)
            except Exception as exc:
                logger.exception("Worker %s failed to process %s", worker_id, path)
                self.outcomes.append(ConversionOutcome(source=path, error=str(exc)))
            finally:
                self.queue.task_done()

    def _should_process(self, path: Path) -> bool:
        if path in self._produced:
            return False
        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            return False
        if self._seen.get(path) == mtime:
            logger.debug("Skipping unchanged %s", path.name)
            return False
        self._seen[path] = mtime
        return True

    def _destination_for(self, source: Path) -> Path:
        previous = self._destinations.get(source)
        if previous is not None:
            return previous
        destination = unique_destination(self.outbox / f"{source.stem}.ogg", self._produced)
        self._produced.add(destination)
        self._destinations[source] = destination
        return destination

    async def process_file(self, path: Path) -> ConversionOutcome:
        """Convert one inbox file; a source seen before replaces its earlier output."""
        loop = asyncio.get_running_loop()
        mime_type = mimetypes.guess_type(path.name)[0] or ""
        try:
            buffer = await loop.run_in_executor(None, path.read_bytes)
            data = await self.app.convert(buffer, mime_type)
            verdict: EligibilityVerdict | None = None
            if self.settings.watch.check_output:
                verdict = await self.app.check(data)
                if not verdict.ok:
                    logger.warning("%s converted but is not voice eligible: %s", path.name, verdict.info)
            destination = self._destination_for(path)
            await loop.run_in_executor(None, atomic_write_bytes, destination, data)
        except (VoiceNoteError, OSError) as exc:
            logger.error("Could not convert %s: %s", path.name, exc)
            self._release(path)
            return ConversionOutcome(source=path, error=str(exc))
        logger.info("Converted %s -> %s", path.name, destination.name)
        return ConversionOutcome(source=path, destination=destination, verdict=verdict)

    def _release(self, source: Path) -> None:
        destination = self._destinations.get(source)
        if destination is not None and not destination.exists():
            self._destinations.pop(source, None)
            self._produced.discard(destination)
