from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import Settings
from .eligibility import check_eligibility
from .media import validate_audio_upload
from .models import EligibilityVerdict, ProbeResult, VoiceNote
from .probe import probe_file
from .tempfiles import ensure_temp_dir
from .tools import MediaTools
from .transcode import VOICE_MIME_TYPE, convert_to_voice

logger = logging.getLogger(__name__)


@dataclass
class VoiceNoteApp:
    settings: Settings
    tools: MediaTools

    @classmethod
    def create(cls, settings: Settings) -> "VoiceNoteApp":
        ensure_temp_dir(settings.temp.directory)
        return cls(settings=settings, tools=MediaTools(settings.tools))

    @property
    def temp_dir(self) -> Path:
        return self.settings.temp.directory

    async def convert(self, buffer: bytes, mime_type: str = "") -> bytes:
        return await convert_to_voice(buffer, mime_type, self.settings, tools=self.tools)

    async def check(self, buffer: bytes) -> EligibilityVerdict:
        return await check_eligibility(buffer, self.settings, tools=self.tools)

    async def probe(self, path: Path) -> ProbeResult:
        return await probe_file(path, self.tools)

    async def prepare_voice_note(
        self, buffer: bytes, mime_type: str, *, name: Optional[str] = None
    ) -> VoiceNote:
        """Validate an audio upload, transcode it and decide whether it ships as voice."""
        validate_audio_upload(buffer, mime_type)
        data = await self.convert(buffer, mime_type)
        verdict = await self.check(data)
        if verdict.ok:
            logger.info("Voice note prepared%s (%.1fs)", f" for {name}" if name else "", verdict.info.duration)
        else:
            logger.warning(
                "Converted audio%s is not voice eligible: %s",
                f" {name}" if name else "",
                verdict.error or verdict.info,
            )
        return VoiceNote(data=data, mime_type=VOICE_MIME_TYPE, verdict=verdict)
