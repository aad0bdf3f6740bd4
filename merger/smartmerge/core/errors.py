"""Exception taxonomy for smartmerge.

Only MergeAlreadyRunning escapes a command; everything else is recovered at
the seam that owns it and turned into a notice.
"""


class SmartMergeError(Exception):
    """Base class for all smartmerge errors."""


class DocumentReadError(SmartMergeError):
    def __init__(self, path: str, reason: object = None):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}" if reason else f"Could not read {path}")


class DocumentCreateError(SmartMergeError):
    def __init__(self, name: str, reason: object = None):
        self.name = name
        self.reason = reason
        super().__init__(f"Could not create {name}: {reason}" if reason else f"Could not create {name}")


class DestinationWriteError(SmartMergeError):
    """An output unit could not be persisted to the external directory."""


class ExternalSinkUnavailable(SmartMergeError):
    """External output requested but no sink or directory is available."""


class MergeAlreadyRunning(SmartMergeError):
    """A merge run is already active in this process."""


class ConfigError(SmartMergeError):
    """Settings could not be validated or saved."""
