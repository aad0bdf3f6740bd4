from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from ..core.errors import ConfigError

logger = logging.getLogger(__name__)

SETTINGS_DIR_NAME = ".smartmerge"
SETTINGS_FILE_NAME = "settings.yml"
SETTINGS_ENV_VAR = "SMARTMERGE_SETTINGS"

Destination = Literal["vault", "external", "both"]


class MergeConfiguration(BaseModel):
    """Immutable settings snapshot handed to one merge run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    output_destination: Destination = "vault"
    external_dir: str = ""

    @property
    def wants_vault(self) -> bool:
        return self.output_destination in ("vault", "both")

    @property
    def wants_external(self) -> bool:
        return self.output_destination in ("external", "both")


DEFAULT_CONFIG = MergeConfiguration()


def default_settings_path(vault_root: Path) -> Path:
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return vault_root / SETTINGS_DIR_NAME / SETTINGS_FILE_NAME


class SettingsStore:
    """
    YAML-backed persistence for MergeConfiguration.

    Stored keys are merged over the defaults on load; the whole record is
    written back on every change.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._current: Optional[MergeConfiguration] = None

    def load(self) -> MergeConfiguration:
        data: Dict[str, Any] = {}
        if self.path.is_file():
            try:
                with self.path.open("r", encoding="utf-8") as f:
                    raw = yaml.safe_load(f)
                if isinstance(raw, dict):
                    data = raw
                elif raw is not None:
                    logger.warning(f"Ignoring settings at {self.path}: expected a mapping")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to read settings from {self.path}: {e}")

        merged = {**DEFAULT_CONFIG.model_dump(), **data}
        try:
            self._current = MergeConfiguration(**merged)
        except ValidationError as e:
            logger.warning(f"Invalid settings in {self.path}, using defaults: {e}")
            self._current = DEFAULT_CONFIG
        return self._current

    @property
    def current(self) -> MergeConfiguration:
        if self._current is None:
            return self.load()
        return self._current

    def snapshot(self) -> MergeConfiguration:
        """The configuration a run should use. Never mutated afterwards."""
        return self.current

    def save(self, config: MergeConfiguration) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_file = self.path.with_suffix(".tmp")
            with tmp_file.open("w", encoding="utf-8") as f:
                yaml.safe_dump(config.model_dump(), f, sort_keys=True, allow_unicode=True)
            tmp_file.replace(self.path)
        except OSError as e:
            raise ConfigError(f"Could not save settings to {self.path}: {e}") from e
        self._current = config

    def update(self, **changes: Any) -> MergeConfiguration:
        merged = {**self.current.model_dump(), **{k: v for k, v in changes.items() if v is not None}}
        try:
            config = MergeConfiguration(**merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings: {e}") from e
        self.save(config)
        return config
