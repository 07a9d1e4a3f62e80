"""Capability every reader backend provides to the scan loop.

Backends are plain classes that satisfy ScannerBackend structurally; they
share no base class. Register new ones in tapreel.core.backends.BACKENDS;
each registered class also provides from_settings(ScannerSettings).
"""
from typing import Any, Dict, Optional, Protocol


class ScannerBackend(Protocol):
    kind: str
    # Pause after every poll cycle (seconds)
    idle_interval: float
    # Pause after an accepted read, on top of debouncing (seconds)
    cooldown: float
    # Upper bound for one read_once() call (seconds)
    read_timeout: float

    def open(self) -> None:
        """Acquire the hardware. Raises HardwareError."""

    def read_once(self, timeout: float) -> Optional[str]:
        """Return one raw tag id, or None when nothing was read. Raises HardwareError."""

    def close(self) -> None:
        """Release the hardware. Safe to call when not open."""

    def status_details(self) -> Dict[str, Any]:
        """Backend-specific fields for scanner_status()."""
