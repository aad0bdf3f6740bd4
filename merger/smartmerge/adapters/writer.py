from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from ..core.errors import DocumentCreateError, DestinationWriteError, ExternalSinkUnavailable
from .filesystem import ExternalSink, resolve_external_dir, unique_path
from .vault import DocumentStore

if TYPE_CHECKING:
    from ..core.merge import OutputUnit
    from ..service.config import MergeConfiguration

logger = logging.getLogger(__name__)


class OutputWriter:
    """
    Persists output units to the vault, an external directory, or both.

    Each destination is attempted on its own; a failure is reported through
    ``notify`` and never stops the sibling write or the run.
    """

    def __init__(
        self,
        store: DocumentStore,
        sink: Optional[ExternalSink],
        notify: Callable[[str], None],
    ):
        self.store = store
        self.sink = sink
        self.notify = notify
        self.written: List[str] = []

    def write(self, unit: "OutputUnit", config: "MergeConfiguration") -> None:
        if config.wants_vault:
            self._write_vault(unit)
        if config.wants_external:
            self._write_external(unit, config.external_dir)

    def _write_vault(self, unit: "OutputUnit") -> None:
        try:
            self.store.create(unit.file_name, unit.content)
        except DocumentCreateError as e:
            logger.error(f"Error creating merged file: {e}")
            self.notify(f"Error creating {unit.file_name} in vault: {e.reason}")
            return
        self.written.append(unit.file_name)
        self.notify(f"Created {unit.file_name}")

    def _external_target_dir(self, external_dir: str) -> str:
        if self.sink is None:
            raise ExternalSinkUnavailable("External output is not available on this host")
        directory = resolve_external_dir(external_dir)
        if not directory:
            raise ExternalSinkUnavailable("No external output directory configured")
        return directory

    def _write_external(self, unit: "OutputUnit", external_dir: str) -> None:
        try:
            directory = self._external_target_dir(external_dir)
        except ExternalSinkUnavailable as e:
            logger.warning(f"Skipping external output for {unit.file_name}: {e}")
            self.notify(f"{e}; skipped.")
            return

        try:
            self.sink.ensure_dir(directory)
            target = unique_path(self.sink, directory, unit.file_name)
            self.sink.write(target, unit.content)
        except (OSError, DestinationWriteError) as e:
            logger.error(f"Error writing {unit.file_name} to {directory}: {e}")
            self.notify(f"Error saving {unit.file_name} to {directory}: {e}")
            return
        self.written.append(target)
        self.notify(f"Saved {target}")
