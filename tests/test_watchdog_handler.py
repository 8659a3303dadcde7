import asyncio
import unittest
from pathlib import Path

from voicenote.config import WatchSettings
from voicenote.scanner import InboxScanner
from voicenote.watchdog_handler import WatchHandler


class _Event:
    def __init__(self, src_path, *, is_directory: bool = False, dest_path=None) -> None:
        self.src_path = src_path
        self.is_directory = is_directory
        self.dest_path = dest_path


class TestWatchdogHandler(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.queue: asyncio.Queue[Path] = asyncio.Queue()
        scanner = InboxScanner(WatchSettings(exclude_patterns=["*.tmp.*"]))
        self.handler = WatchHandler(self.queue, scanner, loop=asyncio.get_running_loop())

    async def test_bytes_src_path_is_decoded(self) -> None:
        self.handler.on_created(_Event(b"/inbox/voice_1.webm"))  # type: ignore[arg-type]
        path = await asyncio.wait_for(self.queue.get(), timeout=1.0)
        self.assertEqual(path, Path("/inbox/voice_1.webm"))

    async def test_ignores_directories_and_other_files(self) -> None:
        self.handler.on_created(_Event("/inbox/sub", is_directory=True))  # type: ignore[arg-type]
        self.handler.on_modified(_Event("/inbox/notes.txt"))  # type: ignore[arg-type]
        self.handler.on_created(_Event("/inbox/.hidden.mp3"))  # type: ignore[arg-type]
        self.handler.on_created(_Event("/inbox/clip.tmp.mp3"))  # type: ignore[arg-type]
        await asyncio.sleep(0)
        self.assertTrue(self.queue.empty())

    async def test_moved_file_uses_destination(self) -> None:
        self.handler.on_moved(_Event("/inbox/.part", dest_path="/inbox/clip.m4a"))  # type: ignore[arg-type]
        path = await asyncio.wait_for(self.queue.get(), timeout=1.0)
        self.assertEqual(path, Path("/inbox/clip.m4a"))


if __name__ == "__main__":
    unittest.main()
