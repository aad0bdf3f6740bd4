import logging
import sys
from typing import List, Protocol, TextIO, Optional

logger = logging.getLogger(__name__)


class StatusSink(Protocol):
    """Live status line. Best-effort; a failing sink never stops a run."""

    def __call__(self, text: str) -> None:
        ...


class Notifier(Protocol):
    """Transient user-facing notice."""

    def __call__(self, message: str) -> None:
        ...


class LoggingStatusSink:
    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, text: str) -> None:
        logger.log(self.level, text)


class StreamNotifier:
    def __init__(self, stream: Optional[TextIO] = None, prefix: str = "[smartmerge]"):
        self.stream = stream
        self.prefix = prefix

    def __call__(self, message: str) -> None:
        out = self.stream or sys.stdout
        print(f"{self.prefix} {message}", file=out, flush=True)


class MemorySink:
    """Collects lines in memory. Serves as status sink or notifier."""

    def __init__(self):
        self.lines: List[str] = []

    def __call__(self, text: str) -> None:
        self.lines.append(text)
