from __future__ import annotations

import os
from collections.abc import Collection
from pathlib import Path

from .tempfiles import new_token

MAX_BASENAME_BYTES = 255


def unique_destination(path: Path, reserved: Collection[Path] = ()) -> Path:
    """Return ``path`` or the first ``stem_N`` sibling that does not exist yet."""
    name_bytes = path.name.encode("utf-8")
    if len(name_bytes) > MAX_BASENAME_BYTES:
        allowed = MAX_BASENAME_BYTES - len(path.suffix.encode("utf-8")) - 8
        stem = path.stem.encode("utf-8")[: max(0, allowed)].decode("utf-8", errors="ignore") or "file"
        path = path.with_name(f"{stem}{path.suffix}")
    candidate = path
    counter = 1
    while candidate.exists() or candidate in reserved:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        counter += 1
    return candidate


def atomic_write_bytes(destination: Path, data: bytes) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = destination.with_name(f".{destination.name}.{new_token()[:8]}.part")
    try:
        staging.write_bytes(data)
        os.replace(staging, destination)
    finally:
        staging.unlink(missing_ok=True)
