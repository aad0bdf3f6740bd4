# -*- coding: utf-8 -*-

"""
Chunked merge engine.

Walks the working set in order, appends one section per document to a
single buffer and hands the buffer to ``emit`` as an OutputUnit whenever it
reaches the size threshold. A document is never split across two units.

Section format::

    \\n\\n## <base name>\\n\\n<content>

Unreadable documents become ``\\n\\n## <base name> (read error)\\n\\n`` and the
run goes on.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from . import clock
from .errors import DocumentReadError
from ..adapters.vault import DocumentRef, DocumentStore

logger = logging.getLogger(__name__)

PLUGIN_NAME = "SmartMerger"

# Measured in characters of the accumulated str, not encoded bytes.
MAX_CONTENT_LENGTH = 10 * 1024 * 1024

READ_ERROR_MARKER = "(read error)"


@dataclass(frozen=True)
class OutputUnit:
    file_name: str
    content: str


@dataclass
class MergeSummary:
    processed_count: int = 0
    read_errors: List[str] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    canceled: bool = False


class CancelToken:
    """Checked once per document; setting it ends the run after the current one."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def canceled(self) -> bool:
        return self._event.is_set()


def make_output_filename(plugin_name: str, stamp: str, part: int) -> str:
    # <PluginName>_<YYYYMMDD>_<HHMMSS>_part<N>.md
    return f"{plugin_name}_{stamp}_part{part}.md"


def render_section(name: str, content: str) -> str:
    return f"\n\n## {name}\n\n{content}"


def render_error_section(name: str) -> str:
    return f"\n\n## {name} {READ_ERROR_MARKER}\n\n"


class MergeBuffer:
    """Accumulator plus part counter. Owned by one run."""

    def __init__(self, plugin_name: str, stamp: str):
        self.plugin_name = plugin_name
        self.stamp = stamp
        self.part = 1
        self._chunks: List[str] = []
        self._length = 0

    def __len__(self) -> int:
        return self._length

    def append(self, text: str) -> None:
        self._chunks.append(text)
        self._length += len(text)

    def flush(self) -> OutputUnit:
        unit = OutputUnit(
            file_name=make_output_filename(self.plugin_name, self.stamp, self.part),
            content="".join(self._chunks),
        )
        self.part += 1
        self._chunks = []
        self._length = 0
        return unit


def _report(progress: Optional[Callable[[str], None]], text: str) -> None:
    if progress is None:
        return
    try:
        progress(text)
    except Exception as e:
        logger.debug(f"Progress sink failed: {e}")


def run_merge(
    working_set: Sequence[DocumentRef],
    store: DocumentStore,
    emit: Callable[[OutputUnit], None],
    progress: Optional[Callable[[str], None]] = None,
    *,
    plugin_name: str = PLUGIN_NAME,
    threshold: int = MAX_CONTENT_LENGTH,
    cancel: Optional[CancelToken] = None,
) -> MergeSummary:
    """
    Merge ``working_set`` into one or more OutputUnits passed to ``emit``.

    The timestamp is taken once, so every part of a run shares it. The
    summary's ``processed_count`` counts documents visited, including the
    ones that failed to read.
    """
    buffer = MergeBuffer(plugin_name, clock.run_stamp())
    summary = MergeSummary()
    total = len(working_set)

    def flush() -> None:
        unit = buffer.flush()
        emit(unit)
        summary.outputs.append(unit.file_name)

    for i, doc in enumerate(working_set, 1):
        if cancel is not None and cancel.canceled:
            logger.info(f"Merge canceled after {summary.processed_count}/{total} documents")
            summary.canceled = True
            break

        _report(progress, f"[{i}/{total}] {doc.base_name}")
        logger.debug(f"Merging {doc.full_path}")
        try:
            content = store.read(doc)
        except DocumentReadError as e:
            logger.error(f"Error reading file {doc.full_path}: {e}")
            buffer.append(render_error_section(doc.base_name))
            summary.read_errors.append(doc.full_path)
        else:
            buffer.append(render_section(doc.base_name, content))
        summary.processed_count += 1

        if len(buffer) >= threshold:
            flush()

    if len(buffer) > 0:
        flush()

    return summary
