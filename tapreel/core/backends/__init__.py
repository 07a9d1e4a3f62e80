"""Reader backends, keyed by ScannerKind."""
from tapreel.core.backends.base import ScannerBackend
from tapreel.core.backends.contactless import ContactlessBackend
from tapreel.core.backends.serial_backend import SerialBackend
from tapreel.models.scanner import ScannerKind, ScannerSettings

# Registry of available reader backends
BACKENDS = {
    ScannerKind.CONTACTLESS: ContactlessBackend,
    ScannerKind.SERIAL: SerialBackend,
}


def create_backend(settings: ScannerSettings) -> ScannerBackend:
    """Build (but do not open) the backend selected by settings.kind."""
    backend_class = BACKENDS.get(settings.kind)
    if backend_class is None:
        raise ValueError(f"Unknown RFID backend: {settings.kind}")
    return backend_class.from_settings(settings)


__all__ = [
    "BACKENDS",
    "ContactlessBackend",
    "ScannerBackend",
    "SerialBackend",
    "create_backend",
]
