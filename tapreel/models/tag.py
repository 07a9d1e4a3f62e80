"""Tag events and tag id formatting."""
from dataclasses import dataclass


@dataclass(frozen=True)
class TagEvent:
    """One accepted (debounced) read."""
    tag_id: str
    observed_at: float  # time.monotonic() seconds


def normalize_tag_id(tag_id: str) -> str:
    """Trim surrounding whitespace; ids are otherwise compared verbatim."""
    return (tag_id or "").strip()


def uid_to_hex(uid) -> str:
    """Format raw UID bytes as uppercase hex without separators."""
    return "".join(f"{b:02X}" for b in uid)
