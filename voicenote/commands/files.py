from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Optional

from ..app import VoiceNoteApp
from ..fs_utils import atomic_write_bytes
from .output import as_json, format_probe, format_verdict


async def convert(
    app: VoiceNoteApp,
    source: Path,
    *,
    output: Optional[Path] = None,
    mime_type: Optional[str] = None,
) -> Path:
    mime = mime_type or mimetypes.guess_type(source.name)[0] or ""
    data = await app.convert(source.read_bytes(), mime)
    destination = output or source.with_suffix(".ogg")
    if destination.resolve() == source.resolve():
        destination = source.with_name(f"{source.stem}.voice.ogg")
    atomic_write_bytes(destination, data)
    print(f"Wrote {destination} ({len(data)} bytes)")
    return destination


async def probe(app: VoiceNoteApp, source: Path, *, json_output: bool = False) -> None:
    info = await app.probe(source)
    print(as_json(info.to_record()) if json_output else format_probe(info))


async def check(app: VoiceNoteApp, source: Path, *, json_output: bool = False) -> bool:
    verdict = await app.check(source.read_bytes())
    print(as_json(verdict.to_record()) if json_output else format_verdict(verdict))
    return verdict.ok
