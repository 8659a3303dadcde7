import tempfile
import unittest
from pathlib import Path

from voicenote.commands.doctor import run
from voicenote.config import Settings, TempSettings, ToolSettings, WatchSettings

from fakes import make_settings


class TestDoctorCommand(unittest.TestCase):
    def test_reports_tools_and_missing_watch_dirs(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            inbox = tmp / "inbox"
            inbox.mkdir()
            settings = make_settings(tmp, watch=WatchSettings(inbox=inbox))

            report = run(settings)

            self.assertTrue(report.ok)
            joined = "\n".join(report.checks)
            self.assertIn("ffmpeg: OK (ffmpeg version 6.1-fake", joined)
            self.assertIn("ffprobe: OK", joined)
            self.assertIn("Opus encoder: OK (libopus)", joined)
            self.assertIn("Temp directory: OK", joined)
            self.assertIn("Inbox: OK", joined)
            self.assertIn("Outbox: WARNING (watch.outbox not set)", joined)
            self.assertEqual(list(settings.temp.directory.iterdir()), [])

    def test_missing_tools_fail(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            settings = Settings(
                tools=ToolSettings(ffmpeg_path=tmp / "missing-ffmpeg", ffprobe_path=tmp / "missing-ffprobe"),
                temp=TempSettings(directory=tmp / "temp"),
            )

            report = run(settings)

            self.assertFalse(report.ok)
            joined = "\n".join(report.checks)
            self.assertIn("ffmpeg: ERROR", joined)
            self.assertIn("ffprobe: ERROR", joined)
            self.assertIn("Opus encoder: ERROR", joined)


if __name__ == "__main__":
    unittest.main()
