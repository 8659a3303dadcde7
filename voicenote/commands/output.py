from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional

from ..models import EligibilityVerdict, ProbeResult


@dataclass(frozen=True, slots=True)
class CheckLine:
    label: str
    status: str
    detail: Optional[str] = None

    def render(self) -> str:
        if self.detail:
            return f"{self.label}: {self.status} ({self.detail})"
        return f"{self.label}: {self.status}"


def ok(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "OK", detail).render()


def warning(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "WARNING", detail).render()


def error(label: str, detail: Optional[str] = None) -> str:
    return CheckLine(label, "ERROR", detail).render()


def format_probe(info: ProbeResult) -> str:
    return (
        f"codec={info.codec_name or '-'} channels={info.channels} "
        f"sample_rate={info.sample_rate} duration={info.duration:.3f}s "
        f"format={info.format_name or '-'}"
    )


def format_verdict(verdict: EligibilityVerdict) -> str:
    status = "VOICE OK" if verdict.ok else "NOT VOICE ELIGIBLE"
    line = f"{status}: {format_probe(verdict.info)}"
    if verdict.error:
        line = f"{line}\n  error: {verdict.error}"
    return line


def as_json(payload: object) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)
