"""RC522 contactless reader on SPI: card-present polling and UID formatting."""
import logging
import time
from typing import Any, Callable, Dict, Optional

from tapreel.core.errors import HardwareError
from tapreel.models.tag import uid_to_hex

logger = logging.getLogger(__name__)

# Optional: MFRC522 for real hardware (pimylifeup mfrc522 package, needs RPi.GPIO + spidev)
_RC522_AVAILABLE = False
try:
    import RPi.GPIO as GPIO
    from mfrc522 import MFRC522
    _RC522_AVAILABLE = True
except (ImportError, RuntimeError):
    GPIO = None
    MFRC522 = None

SPI_CLOCK_HZ = 10_000_000
SPI_MODE = 0
CARD_QUERY_TIMEOUT_SEC = 0.2
IDLE_TICK_SEC = 0.1
COOLDOWN_SEC = 1.5
# Gap between REQA attempts inside one read_once() call
_ATTEMPT_GAP_SEC = 0.02


def _default_reader_factory(bus_id: int, chip_select_line: int, reset_pin: int):
    if not _RC522_AVAILABLE:
        raise HardwareError("mfrc522 / RPi.GPIO not installed")
    return MFRC522(
        bus=bus_id,
        device=chip_select_line,
        spd=SPI_CLOCK_HZ,
        pin_mode=GPIO.BCM,
        pin_rst=reset_pin,
    )


class ContactlessBackend:
    """Polls an RC522 for ISO 14443A cards and halts each card after reading it."""

    kind = "contactless"
    idle_interval = IDLE_TICK_SEC
    cooldown = COOLDOWN_SEC
    read_timeout = CARD_QUERY_TIMEOUT_SEC

    def __init__(
        self,
        bus_id: int = 0,
        chip_select_line: int = 0,
        reset_pin: int = 25,
        reader_factory: Optional[Callable[[int, int, int], Any]] = None,
    ) -> None:
        self.bus_id = bus_id
        self.chip_select_line = chip_select_line
        self.reset_pin = reset_pin
        self._reader_factory = reader_factory or _default_reader_factory
        self._reader = None

    @classmethod
    def from_settings(cls, settings) -> "ContactlessBackend":
        return cls(
            bus_id=settings.bus_id,
            chip_select_line=settings.chip_select_line,
            reset_pin=settings.reset_pin,
        )

    def open(self) -> None:
        try:
            reader = self._reader_factory(self.bus_id, self.chip_select_line, self.reset_pin)
        except HardwareError:
            logger.error("Failed to initialize RC522: library not available")
            raise
        except Exception as e:
            logger.error(
                "Failed to initialize RC522: %s (is SPI enabled? raspi-config -> Interface Options -> SPI)",
                e,
            )
            raise HardwareError(f"RC522 init failed: {e}") from e
        # Held from here on so close() can release the GPIO/SPI claimed above
        self._reader = reader
        try:
            spi = getattr(reader, "spi", None)
            if spi is not None:
                spi.mode = SPI_MODE
        except Exception as e:
            logger.error("Failed to configure RC522 SPI mode: %s", e)
            raise HardwareError(f"RC522 SPI setup failed: {e}") from e
        logger.info(
            "RC522 reader initialized on SPI bus %d, CS %d, RST pin %d",
            self.bus_id,
            self.chip_select_line,
            self.reset_pin,
        )

    def _request_serial(self) -> Optional[list]:
        """REQA + anticollision; returns UID bytes followed by the BCC byte."""
        reader = self._reader
        (status, _) = reader.MFRC522_Request(reader.PICC_REQIDL)
        if status != reader.MI_OK:
            return None
        (status, back_data) = reader.MFRC522_Anticoll()
        if status != reader.MI_OK or not back_data or len(back_data) < 4:
            return None
        return list(back_data)

    def _halt(self, serial_number: list) -> None:
        """Select the card, then send HLTA so it stays quiet until lifted and placed again.

        HLTA only halts a selected (ACTIVE) card; a card that is merely READY
        drops back to IDLE and answers the next REQIDL.
        """
        reader = self._reader
        reader.MFRC522_SelectTag(serial_number)
        buf = [reader.PICC_HALT, 0]
        buf += reader.CalulateCRC(buf)
        # A halted card does not answer; the status here is always a timeout
        reader.MFRC522_ToCard(reader.PCD_TRANSCEIVE, buf)

    def read_once(self, timeout: float) -> Optional[str]:
        if self._reader is None:
            raise HardwareError("RC522 is not open")
        deadline = time.monotonic() + timeout
        try:
            while True:
                serial_number = self._request_serial()
                if serial_number:
                    self._halt(serial_number)
                    # 5th byte is the BCC checksum
                    return uid_to_hex(serial_number[:4])
                if time.monotonic() >= deadline:
                    return None
                time.sleep(_ATTEMPT_GAP_SEC)
        except HardwareError:
            raise
        except Exception as e:
            raise HardwareError(f"RC522 read failed: {e}") from e

    def close(self) -> None:
        reader, self._reader = self._reader, None
        if reader is None:
            return
        try:
            reader.Close_MFRC522()
        except Exception as e:
            raise HardwareError(f"error releasing RC522: {e}") from e

    def status_details(self) -> Dict[str, Any]:
        return {
            "bus_id": self.bus_id,
            "chip_select_line": self.chip_select_line,
            "reset_pin": self.reset_pin,
            "clock_hz": SPI_CLOCK_HZ,
        }
