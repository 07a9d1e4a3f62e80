"""Persist and load tag -> target mappings (flat JSON object)."""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from tapreel.core.errors import ConfigError, StorageError, ValidationError
from tapreel.models.tag import normalize_tag_id

logger = logging.getLogger(__name__)

# Written on first run so the file shows users the expected shape
DEFAULT_MAPPINGS = {
    "0123456789": "/home/pi/Videos/movie1.mp4",
    "9876543210": "/home/pi/Videos/movie2.mp4",
}


def _parse(text: str) -> Dict[str, str]:
    """Decode file content; raise ConfigError unless it is an object of strings."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"expected a JSON object, got {type(data).__name__}")
    out = {}
    for key, value in data.items():
        if not isinstance(value, str):
            raise ConfigError(f"target for {key!r} is not a string")
        tag_id = normalize_tag_id(key)
        target = value.strip()
        if not tag_id or not target:
            logger.warning("Mappings: skipping blank entry %r -> %r", key, value)
            continue
        out[tag_id] = target
    return out


class MappingStore:
    """Tag id -> target table, re-persisted after every mutation.

    Mutations and save() share one lock, so callers on different threads
    (API workers, scan loop subscribers) are serialized.
    """

    def __init__(self, path: Union[str, Path], seed_defaults: bool = True) -> None:
        self._path = Path(path)
        self._seed_defaults = seed_defaults
        self._mappings: Dict[str, str] = {}
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> "MappingStore":
        """Load from disk. Never raises: a bad file leaves an empty store."""
        if not self._path.exists():
            with self._lock:
                self._mappings = dict(DEFAULT_MAPPINGS) if self._seed_defaults else {}
            try:
                self.save()
                logger.info("Created default tag mappings at %s", self._path)
            except StorageError as e:
                logger.warning("Could not create %s: %s", self._path, e)
            return self
        try:
            mappings = _parse(self._path.read_text(encoding="utf-8"))
        except (ConfigError, OSError, UnicodeDecodeError) as e:
            logger.error(
                "Error loading tag mappings from %s: %s; starting with an empty store",
                self._path,
                e,
            )
            mappings = {}
        else:
            logger.info("Loaded %d tag mappings from %s", len(mappings), self._path)
        with self._lock:
            self._mappings = mappings
        return self

    def save(self) -> None:
        with self._lock:
            self._save_locked()

    def _save_locked(self) -> None:
        # Temp file + rename so readers never see a half-written file
        payload = json.dumps(self._mappings, indent=2)
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=str(directory)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.write("\n")
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"could not write {self._path}: {e}") from e

    def _persist_locked(self) -> None:
        # In-memory state stays authoritative when the disk write fails
        try:
            self._save_locked()
        except StorageError as e:
            logger.error("Error saving tag mappings: %s", e)

    def add(self, tag_id: str, target: str) -> None:
        """Map tag_id to target, overwriting any existing entry, then save."""
        key = normalize_tag_id(tag_id)
        value = (target or "").strip()
        if not key:
            raise ValidationError(ValidationError.EMPTY_KEY, "Tag id cannot be empty.")
        if not value:
            raise ValidationError(ValidationError.EMPTY_TARGET, "Target cannot be empty.")
        with self._lock:
            self._mappings[key] = value
            self._persist_locked()

    def remove(self, tag_id: str) -> bool:
        """Delete mapping; save only when something was removed."""
        key = normalize_tag_id(tag_id)
        if not key:
            return False
        with self._lock:
            if key not in self._mappings:
                return False
            del self._mappings[key]
            self._persist_locked()
        return True

    def lookup(self, tag_id: str) -> Optional[str]:
        return self._mappings.get(normalize_tag_id(tag_id))

    def list(self) -> List[Tuple[str, str]]:
        with self._lock:
            return list(self._mappings.items())

    def count(self) -> int:
        return len(self._mappings)
