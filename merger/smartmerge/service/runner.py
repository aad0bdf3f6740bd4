"""
Command layer: merge-all and merge-selected.

Wires the pure core (parser, selector, engine) to a document store, an
optional external sink, a status line and a notifier. One run at a time per
runner; a second command while one is active raises MergeAlreadyRunning.
"""
import contextlib
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Generator, List, Literal, Optional

from ..adapters.filesystem import ExternalSink
from ..adapters.vault import DocumentRef, DocumentStore
from ..adapters.writer import OutputWriter
from ..core import links, selector
from ..core.errors import MergeAlreadyRunning
from ..core.merge import PLUGIN_NAME, MAX_CONTENT_LENGTH, CancelToken, MergeSummary, run_merge
from .config import MergeConfiguration

logger = logging.getLogger(__name__)

CommandStatus = Literal["ok", "no-links", "no-match", "canceled"]

# Input surface: returns raw text, or None when the user cancels.
LinkPrompt = Callable[[], Optional[str]]


@dataclass
class CommandResult:
    status: CommandStatus
    summary: Optional[MergeSummary] = None
    message: str = ""


class MergeRunner:
    def __init__(
        self,
        store: DocumentStore,
        config_provider: Callable[[], MergeConfiguration],
        *,
        sink: Optional[ExternalSink] = None,
        status: Optional[Callable[[str], None]] = None,
        notify: Optional[Callable[[str], None]] = None,
        plugin_name: str = PLUGIN_NAME,
        threshold: int = MAX_CONTENT_LENGTH,
    ):
        self.store = store
        self.config_provider = config_provider
        self.sink = sink
        self.status = status
        self.notify = notify or (lambda message: None)
        self.plugin_name = plugin_name
        self.threshold = threshold
        self._lock = threading.Lock()
        self._cancel: Optional[CancelToken] = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def cancel(self) -> bool:
        """Request cancellation of the active run. Returns False if idle."""
        token = self._cancel
        if token is None:
            return False
        token.cancel()
        return True

    def merge_all(self) -> CommandResult:
        with self._exclusive():
            working_set = selector.select_all(self.store)
            return self._merge(working_set)

    def merge_selected(self, prompt: LinkPrompt) -> Optional[CommandResult]:
        """
        Ask ``prompt`` for link text and merge the referenced notes.

        Returns None when the prompt was canceled.
        """
        raw = prompt()
        if raw is None:
            logger.info("Link input canceled")
            return None
        return self.merge_links(raw)

    def merge_links(self, raw_text: str) -> CommandResult:
        names = links.parse(raw_text)
        if not names:
            msg = "No links found in the input."
            self.notify(msg)
            return CommandResult(status="no-links", message=msg)

        with self._exclusive():
            working_set = selector.select_by_names(self.store, names)
            if not working_set:
                msg = "No matching files found for the given links."
                self.notify(msg)
                return CommandResult(status="no-match", message=msg)
            logger.info(f"Selected {len(working_set)} of {len(names)} linked names")
            return self._merge(working_set)

    @contextlib.contextmanager
    def _exclusive(self) -> Generator[None, None, None]:
        if not self._lock.acquire(blocking=False):
            raise MergeAlreadyRunning("A merge is already running.")
        try:
            yield
        finally:
            self._lock.release()

    def _merge(self, working_set: List[DocumentRef]) -> CommandResult:
        # Snapshot: a settings change during the run does not affect it.
        config = self.config_provider()
        writer = OutputWriter(self.store, self.sink, self.notify)
        self._cancel = CancelToken()
        self._set_status("Starting merge...")
        try:
            summary = run_merge(
                working_set,
                self.store,
                lambda unit: writer.write(unit, config),
                self.status,
                plugin_name=self.plugin_name,
                threshold=self.threshold,
                cancel=self._cancel,
            )
        finally:
            self._cancel = None

        if summary.canceled:
            msg = f"Canceled: merged {summary.processed_count} of {len(working_set)} files."
            self._set_status(msg)
            self.notify(msg)
            return CommandResult(status="canceled", summary=summary, message=msg)

        self._set_status(f"Done: merged {summary.processed_count} files.")
        msg = f"Merged {summary.processed_count} files into {self.plugin_name} files."
        self.notify(msg)
        return CommandResult(status="ok", summary=summary, message=msg)

    def _set_status(self, text: str) -> None:
        if self.status is None:
            return
        try:
            self.status(text)
        except Exception as e:
            logger.debug(f"Status sink failed: {e}")

