import tempfile
import unittest
from pathlib import Path

from voicenote.eligibility import check_eligibility, is_voice_eligible
from voicenote.models import ProbeResult

from fakes import make_settings, temp_files


def _info(**overrides) -> ProbeResult:
    base = dict(codec_name="opus", sample_rate=16000, channels=1, duration=2.0, format_name="ogg")
    base.update(overrides)
    return ProbeResult(**base)


class TestVoicePolicy(unittest.TestCase):
    def test_accepted_sample_rates(self) -> None:
        for rate in (16000, 24000, 48000):
            self.assertTrue(is_voice_eligible(_info(sample_rate=rate)), rate)
        for rate in (0, 8000, 22050, 44100):
            self.assertFalse(is_voice_eligible(_info(sample_rate=rate)), rate)

    def test_duration_boundary(self) -> None:
        self.assertFalse(is_voice_eligible(_info(duration=0.999)))
        self.assertTrue(is_voice_eligible(_info(duration=1.0)))

    def test_rejects_stereo_and_other_codecs(self) -> None:
        self.assertFalse(is_voice_eligible(_info(channels=2)))
        self.assertFalse(is_voice_eligible(_info(channels=0)))
        self.assertFalse(is_voice_eligible(_info(codec_name="vorbis")))
        self.assertFalse(is_voice_eligible(_info(codec_name="")))

    def test_empty_probe_is_not_eligible(self) -> None:
        self.assertFalse(is_voice_eligible(ProbeResult()))


class TestCheckEligibility(unittest.IsolatedAsyncioTestCase):
    async def test_voice_note_is_ok(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = make_settings(Path(tmpdir))
            verdict = await check_eligibility(b"OggS-voice", settings)
            self.assertTrue(verdict.ok)
            self.assertEqual(verdict.info.codec_name, "opus")
            self.assertIsNone(verdict.error)
            self.assertEqual(temp_files(settings), [])

    async def test_short_clip_is_rejected(self) -> None:
        payload = {
            "streams": [{"codec_type": "audio", "codec_name": "opus", "sample_rate": "16000", "channels": 1}],
            "format": {"format_name": "ogg", "duration": "0.500000"},
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = make_settings(Path(tmpdir), probe_payload=payload)
            verdict = await check_eligibility(b"OggS-short", settings)
            self.assertFalse(verdict.ok)
            self.assertAlmostEqual(verdict.info.duration, 0.5)

    async def test_stereo_is_rejected(self) -> None:
        payload = {
            "streams": [{"codec_type": "audio", "codec_name": "opus", "sample_rate": "48000", "channels": 2}],
            "format": {"format_name": "ogg", "duration": "3.0"},
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = make_settings(Path(tmpdir), probe_payload=payload)
            verdict = await check_eligibility(b"OggS-stereo", settings)
            self.assertFalse(verdict.ok)
            self.assertEqual(verdict.info.channels, 2)

    async def test_unprobeable_buffer_is_not_eligible(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = make_settings(Path(tmpdir))
            verdict = await check_eligibility(b"BAD not audio", settings)
            self.assertFalse(verdict.ok)
            self.assertEqual(verdict.info, ProbeResult())
            self.assertIn("Invalid data", verdict.error or "")
            self.assertEqual(temp_files(settings), [])

    async def test_verdict_record(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = make_settings(Path(tmpdir))
            verdict = await check_eligibility(b"OggS", settings)
            record = verdict.to_record()
            self.assertEqual(record["ok"], True)
            self.assertEqual(record["info"]["sample_rate"], 16000)
            self.assertNotIn("error", record)


if __name__ == "__main__":
    unittest.main()
