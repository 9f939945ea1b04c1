"""Append-only warning log (``[<timestamp> W] <message>`` per line)."""

from __future__ import annotations
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List

LOG = logging.getLogger("delegateops")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class WarningLog:
    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now):
        self.path = Path(path)
        self._clock = clock
        self.messages: List[str] = []

    def format(self, message: str) -> str:
        return f"[{self._clock().strftime(TIMESTAMP_FORMAT)} W] {message}"

    def warn(self, message: str) -> str:
        line = self.format(message)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
        self.messages.append(message)
        LOG.warning(message)
        return line
