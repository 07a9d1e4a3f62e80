"""Reader settings, reader state and status snapshots."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# Common serial device names for USB RFID readers on a Raspberry Pi
DEFAULT_SERIAL_PORTS = (
    "/dev/ttyUSB0",
    "/dev/ttyUSB1",
    "/dev/ttyACM0",
    "/dev/ttyACM1",
)


class ScannerKind(str, Enum):
    SERIAL = "serial"
    CONTACTLESS = "contactless"


class ScannerState(str, Enum):
    """Hardware side of the reader; DISABLED holds until initialize() runs again."""
    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    DISABLED = "disabled"


class LoopState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass(frozen=True)
class ScannerSettings:
    """Everything needed to build and open one reader backend."""
    enabled: bool = True
    kind: ScannerKind = ScannerKind.CONTACTLESS
    bus_id: int = 0
    chip_select_line: int = 0
    reset_pin: int = 25
    serial_ports: Tuple[str, ...] = DEFAULT_SERIAL_PORTS
    baudrate: int = 9600
    debounce_sec: float = 2.0


@dataclass
class ScannerStatus:
    """Snapshot for status screens and the API."""
    connected: bool
    state: ScannerState
    backend: Optional[str]
    scanning: bool
    details: Dict[str, Any] = field(default_factory=dict)
