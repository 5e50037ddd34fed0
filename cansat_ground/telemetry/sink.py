"""
Telemetry Sinks
===============

Append-only destinations for formatted telemetry lines.
"""

import logging
from pathlib import Path
from typing import List, Optional, Protocol, TextIO

logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Anything that accepts one formatted telemetry line at a time."""

    def append(self, text: str) -> None:
        ...


class FileSink:
    """
    Appends telemetry lines to a text file.

    The file is opened on first use and flushed after every line so a crash
    loses at most the line being written.
    """

    def __init__(self, path: str = "telemetry.csv"):
        """
        Initialize sink.

        Args:
            path: Telemetry log file, created if missing
        """
        self.path = Path(path)
        self._file: Optional[TextIO] = None
        self.lines_written = 0
        self.errors = 0

    def append(self, text: str) -> None:
        try:
            if self._file is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._file = self.path.open('a', encoding='utf-8')
            self._file.write(text + '\n')
            self._file.flush()
        except OSError as e:
            self.errors += 1
            logger.warning("Failed to write to `%s` - %s", self.path, e)
            return
        self.lines_written += 1

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class MemorySink:
    """Keeps lines in memory."""

    def __init__(self):
        self.lines: List[str] = []

    def append(self, text: str) -> None:
        self.lines.append(text)
