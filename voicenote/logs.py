from __future__ import annotations

import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(levelname).1s | %(name)s | %(message)s"

RESET = "\033[0m"
# Only the level tag is colored; message text stays plain for copy/paste.
LEVEL_TAGS = {
    logging.DEBUG: "\033[36m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


class ConsoleFormatter(logging.Formatter):
    """Strips known working directories from messages and tints the level tag."""

    def __init__(self, roots: Iterable[Path], *, color: bool = False) -> None:
        super().__init__(LOG_FORMAT)
        self.roots = sorted((str(root) for root in roots if root), key=len, reverse=True)
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        for root in self.roots:
            line = line.replace(f"{root}/", "")
        tint = LEVEL_TAGS.get(record.levelno) if self.color else None
        if tint and line:
            return f"{tint}{line[0]}{RESET}{line[1:]}"
        return line


class ProblemCollector(logging.Handler):
    """Keeps WARNING and above so the CLI can print a closing summary."""

    def __init__(self) -> None:
        super().__init__(level=logging.WARNING)
        self.lines: list[str] = []
        self.by_level: Counter[str] = Counter()

    def emit(self, record: logging.LogRecord) -> None:
        self.by_level[record.levelname] += 1
        self.lines.append(self.format(record))

    def summary(self) -> list[str]:
        if not self.lines:
            return []
        counts = ", ".join(f"{count} {level.lower()}" for level, count in sorted(self.by_level.items()))
        return [f"Problems ({counts}):", *(f" - {line}" for line in self.lines)]


def configure_logging(
    level_name: str, roots: Iterable[Path], *, stream: Optional[object] = None
) -> ProblemCollector:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    roots = [Path(root).resolve() for root in roots if root]
    out = stream or sys.stderr
    console = logging.StreamHandler(out)
    console.setFormatter(ConsoleFormatter(roots, color=getattr(out, "isatty", lambda: False)()))
    root_logger.addHandler(console)

    collector = ProblemCollector()
    collector.setFormatter(ConsoleFormatter(roots))
    root_logger.addHandler(collector)

    logging.getLogger("watchdog").setLevel(logging.WARNING)
    return collector
