"""Line-oriented RFID reader on a serial port (USB readers that 'type' the tag id)."""
import logging
import os
from typing import Any, Callable, Dict, Optional, Sequence

import serial

from tapreel.core.errors import HardwareError
from tapreel.models.scanner import DEFAULT_SERIAL_PORTS

logger = logging.getLogger(__name__)

READ_TIMEOUT_SEC = 0.5


class SerialBackend:
    """Opens the first candidate port that exists and accepts 8N1 at the given baud."""

    kind = "serial"
    idle_interval = 0.0
    cooldown = 0.0
    read_timeout = READ_TIMEOUT_SEC

    def __init__(
        self,
        ports: Sequence[str] = DEFAULT_SERIAL_PORTS,
        baudrate: int = 9600,
        serial_factory: Callable[..., Any] = serial.Serial,
        path_exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        self.ports = tuple(ports)
        self.baudrate = baudrate
        self._serial_factory = serial_factory
        self._path_exists = path_exists
        self._port = None
        self._port_name: Optional[str] = None
        self._pending = b""

    @classmethod
    def from_settings(cls, settings) -> "SerialBackend":
        return cls(ports=settings.serial_ports, baudrate=settings.baudrate)

    @property
    def port_name(self) -> Optional[str]:
        return self._port_name

    def open(self) -> None:
        for name in self.ports:
            if not self._path_exists(name):
                continue
            try:
                port = self._serial_factory(
                    name,
                    self.baudrate,
                    bytesize=serial.EIGHTBITS,
                    parity=serial.PARITY_NONE,
                    stopbits=serial.STOPBITS_ONE,
                    timeout=self.read_timeout,
                )
            except (serial.SerialException, OSError, ValueError) as e:
                logger.warning("Could not connect to RFID reader on %s: %s", name, e)
                continue
            self._port = port
            self._port_name = name
            self._pending = b""
            logger.info("RFID reader connected on %s (%d baud)", name, self.baudrate)
            return
        raise HardwareError(
            "No serial RFID reader found (tried %s)" % ", ".join(self.ports)
        )

    def read_once(self, timeout: float) -> Optional[str]:
        if self._port is None:
            raise HardwareError("serial port is not open")
        try:
            self._port.timeout = timeout
            raw = self._port.readline()
        except (serial.SerialException, OSError) as e:
            raise HardwareError(f"read failed on {self._port_name}: {e}") from e
        if not raw:
            return None
        # readline() returns a partial line when the timeout hits mid-line
        if not raw.endswith((b"\n", b"\r")):
            self._pending += raw
            return None
        line = (self._pending + raw).decode("utf-8", errors="ignore").strip()
        self._pending = b""
        if not line:
            return None
        return line

    def close(self) -> None:
        port, self._port = self._port, None
        self._pending = b""
        if port is None:
            return
        try:
            if port.is_open:
                port.close()
        except (serial.SerialException, OSError) as e:
            raise HardwareError(f"error closing {self._port_name}: {e}") from e

    def status_details(self) -> Dict[str, Any]:
        return {
            "port": self._port_name,
            "baudrate": self.baudrate,
            "candidates": list(self.ports),
        }
