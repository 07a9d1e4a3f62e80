"""Configuration: env, RFID reader wiring, mapping file, player command."""
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from tapreel.models.scanner import (
    DEFAULT_SERIAL_PORTS,
    ScannerKind,
    ScannerSettings,
)

logger = logging.getLogger(__name__)

# Base paths (project root = parent of tapreel package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so TAPREEL_* overrides are set
try:
    from dotenv import load_dotenv
    load_dotenv(BASE_DIR / ".env")
except ImportError:
    pass

# Mapping file is resolved against the working directory, not the package
MAPPINGS_PATH = Path(os.getenv("TAPREEL_MAPPINGS_PATH", "rfid-config.json"))

# API
API_HOST = os.getenv("TAPREEL_API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("TAPREEL_API_PORT", "8000"))

LOG_LEVEL = os.getenv("TAPREEL_LOG_LEVEL", "INFO").upper()

# External player; the target path is appended as the last argument
PLAYER_CMD = os.getenv("TAPREEL_PLAYER_CMD", "vlc --fullscreen --play-and-exit")

# RC522 wiring (BCM numbering)
DEFAULT_SPI_BUS = 0
DEFAULT_SPI_CS = 0  # CE0 = GPIO 8
DEFAULT_RST_PIN = 25  # BCM 25 = physical pin 22

DEFAULT_SERIAL_BAUD = 9600
DEFAULT_DEBOUNCE_SEC = 2.0

_KIND_ALIASES = {
    "contactless": ScannerKind.CONTACTLESS,
    "contactlessbus": ScannerKind.CONTACTLESS,
    "rc522": ScannerKind.CONTACTLESS,
    "spi": ScannerKind.CONTACTLESS,
    "serial": ScannerKind.SERIAL,
}


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Config: %s=%r is not an integer, using %d", name, raw, default)
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Config: %s=%r is not a number, using %.1f", name, raw, default)
        return default


def _env_positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = _env_float(env, name, default)
    if value <= 0:
        logger.warning("Config: %s=%r must be positive, using %.1f", name, env.get(name), default)
        return default
    return value


def configure_logging(level_name: str = LOG_LEVEL) -> None:
    """Root logger format and level; TAPREEL_LOG_LEVEL applies in every entry path."""
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format="%(levelname)s: %(name)s: %(message)s")
    # basicConfig is a no-op once handlers exist, the level still has to apply
    logging.getLogger().setLevel(level)


def parse_scanner_kind(value: Optional[str]) -> ScannerKind:
    """Map a config string (e.g. "Serial", "ContactlessBus") to a ScannerKind."""
    if value is None or not value.strip():
        return ScannerKind.CONTACTLESS
    key = value.strip().lower().replace("_", "").replace("-", "")
    kind = _KIND_ALIASES.get(key)
    if kind is None:
        logger.warning("Config: unknown RFID type %r, using contactless reader", value)
        return ScannerKind.CONTACTLESS
    return kind


def scanner_settings_from_env(env: Optional[Mapping[str, str]] = None) -> ScannerSettings:
    """Resolve reader kind and its parameters from TAPREEL_* variables."""
    if env is None:
        env = os.environ
    ports_raw = env.get("TAPREEL_SERIAL_PORTS", "")
    ports = tuple(p.strip() for p in ports_raw.split(",") if p.strip())
    return ScannerSettings(
        enabled=_env_bool(env, "TAPREEL_RFID_ENABLED", True),
        kind=parse_scanner_kind(env.get("TAPREEL_RFID_TYPE")),
        bus_id=_env_int(env, "TAPREEL_SPI_BUS", DEFAULT_SPI_BUS),
        chip_select_line=_env_int(env, "TAPREEL_SPI_CS", DEFAULT_SPI_CS),
        reset_pin=_env_int(env, "TAPREEL_RFID_RST_PIN", DEFAULT_RST_PIN),
        serial_ports=ports or DEFAULT_SERIAL_PORTS,
        baudrate=_env_int(env, "TAPREEL_SERIAL_BAUD", DEFAULT_SERIAL_BAUD),
        debounce_sec=_env_positive_float(env, "TAPREEL_DEBOUNCE_SEC", DEFAULT_DEBOUNCE_SEC),
    )
