"""Error kinds raised by the reader and mapping store."""


class TapreelError(Exception):
    """Base class for all tapreel errors."""


class HardwareError(TapreelError):
    """Reader absent, could not be opened, or a bus/timing fault."""


class ValidationError(TapreelError, ValueError):
    """Rejected mapping mutation; the store is left unchanged."""

    EMPTY_KEY = "empty_key"
    EMPTY_TARGET = "empty_target"

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class ConfigError(TapreelError):
    """Mapping file exists but could not be parsed."""


class StorageError(TapreelError):
    """Mapping file could not be written."""
