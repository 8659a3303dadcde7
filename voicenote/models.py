from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, slots=True)
class ProbeResult:
    codec_name: str = ""
    sample_rate: int = 0
    channels: int = 0
    duration: float = 0.0
    format_name: str = ""

    def to_record(self) -> Dict[str, object]:
        return {
            "codec_name": self.codec_name,
            "sample_rate": self.sample_rate,
            "channels": self.channels,
            "duration": self.duration,
            "format_name": self.format_name,
        }


@dataclass(frozen=True, slots=True)
class EligibilityVerdict:
    ok: bool
    info: ProbeResult
    error: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"ok": self.ok, "info": self.info.to_record()}
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class CleanupReport:
    """Outcome of best-effort temp file removal; failures are recorded, never raised."""

    removed: List[Path] = field(default_factory=list)
    failures: Dict[Path, str] = field(default_factory=dict)

    @property
    def clean(self) -> bool:
        return not self.failures


@dataclass(frozen=True, slots=True)
class VoiceNote:
    data: bytes
    mime_type: str
    verdict: EligibilityVerdict

    @property
    def voice(self) -> bool:
        return self.verdict.ok
