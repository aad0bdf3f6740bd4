from __future__ import annotations

import logging
import os
import urllib.parse
from pathlib import Path
from typing import Optional, Protocol, Tuple

from ..core.errors import DestinationWriteError

logger = logging.getLogger(__name__)

MAX_SUFFIX_ATTEMPTS = 999


class ExternalSink(Protocol):
    """Raw filesystem access. Hosts without it pass ``None`` instead of a sink."""

    def ensure_dir(self, path: str) -> None:
        ...

    def exists(self, path: str) -> bool:
        ...

    def write(self, path: str, content: str) -> None:
        ...

    def join(self, *parts: str) -> str:
        ...

    def split_ext(self, name: str) -> Tuple[str, str]:
        ...


class LocalSink:
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def ensure_dir(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def write(self, path: str, content: str) -> None:
        with open(path, "w", encoding=self.encoding, newline="") as f:
            f.write(content)

    def join(self, *parts: str) -> str:
        return str(Path(*parts))

    def split_ext(self, name: str) -> Tuple[str, str]:
        return os.path.splitext(name)


def deurl(s: Optional[str]) -> str:
    if s and s.lower().startswith("file://"):
        return urllib.parse.unquote(s[7:])
    return s or ""


def resolve_external_dir(raw: Optional[str]) -> str:
    """Accepts plain paths, ``~`` paths and ``file://`` URLs. Empty means unset."""
    s = deurl((raw or "").strip())
    if not s:
        return ""
    return str(Path(s).expanduser())


def unique_path(sink: ExternalSink, directory: str, file_name: str,
                max_attempts: int = MAX_SUFFIX_ATTEMPTS) -> str:
    """
    First free path for ``file_name`` in ``directory``.

    Tries the plain name, then ``stem(1).ext`` … ``stem(max_attempts).ext``.
    """
    candidate = sink.join(directory, file_name)
    if not sink.exists(candidate):
        return candidate

    stem, ext = sink.split_ext(file_name)
    for idx in range(1, max_attempts + 1):
        candidate = sink.join(directory, f"{stem}({idx}){ext}")
        if not sink.exists(candidate):
            return candidate

    raise DestinationWriteError(
        f"No free file name for {file_name} in {directory} after {max_attempts} attempts"
    )
