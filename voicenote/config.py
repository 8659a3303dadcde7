from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

FFMPEG_ENV = "FFMPEG_PATH"
FFPROBE_ENV = "FFPROBE_PATH"


def _expand(value: Optional[str | Path]) -> Optional[Path]:
    if value is None:
        return None
    return Path(value).expanduser().resolve()


class ToolSettings(BaseModel):
    ffmpeg_path: Optional[Path] = None
    ffprobe_path: Optional[Path] = None
    timeout_seconds: float = 120.0

    @field_validator("ffmpeg_path", "ffprobe_path", mode="before")
    @classmethod
    def _expand_tool(cls, value: Optional[str | Path]) -> Optional[Path]:
        return _expand(value)

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        return value

    def resolve_ffmpeg(self) -> Optional[str]:
        return _resolve_binary(self.ffmpeg_path, FFMPEG_ENV, "ffmpeg")

    def resolve_ffprobe(self) -> Optional[str]:
        return _resolve_binary(self.ffprobe_path, FFPROBE_ENV, "ffprobe")


def _resolve_binary(configured: Optional[Path], env_var: str, name: str) -> Optional[str]:
    if configured is not None:
        return str(configured)
    from_env = os.environ.get(env_var)
    if from_env:
        return from_env
    return shutil.which(name)


class TempSettings(BaseModel):
    directory: Path = Field(default=Path("./temp"), validate_default=True)

    @field_validator("directory", mode="before")
    @classmethod
    def _expand_directory(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()


class WatchSettings(BaseModel):
    inbox: Optional[Path] = None
    outbox: Optional[Path] = None
    include_extensions: List[str] = Field(
        default_factory=lambda: [".mp3", ".m4a", ".aac", ".ogg", ".opus", ".webm", ".wav", ".amr"]
    )
    exclude_patterns: List[str] = Field(default_factory=list)
    worker_concurrency: int = 2
    check_output: bool = True

    @field_validator("inbox", "outbox", mode="before")
    @classmethod
    def _expand_dirs(cls, value: Optional[str | Path]) -> Optional[Path]:
        return _expand(value)

    @field_validator("worker_concurrency")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, value)


class Settings(BaseModel):
    tools: ToolSettings = Field(default_factory=ToolSettings)
    temp: TempSettings = Field(default_factory=TempSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
        return cls.model_validate(raw or {})


def find_config(explicit_path: Optional[Path]) -> Optional[Path]:
    if explicit_path:
        if not explicit_path.exists():
            raise FileNotFoundError(f"Config file not found: {explicit_path}")
        return explicit_path
    cwd = Path.cwd()
    for candidate in (cwd / "config.yaml", cwd / "config.yml"):
        if candidate.exists():
            return candidate
    return None
