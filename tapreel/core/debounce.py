"""Drop repeated reads of the same tag within a time window."""
from typing import Optional

from tapreel.models.tag import TagEvent

DEBOUNCE_WINDOW_SEC = 2.0


class DebounceFilter:
    """Tag-aware debounce: a different tag passes at once, the same tag waits out the window.

    Not thread-safe; owned by the scan loop.
    """

    def __init__(self, window_sec: float = DEBOUNCE_WINDOW_SEC) -> None:
        self.window_sec = window_sec
        self.last_tag_id: Optional[str] = None
        self.last_seen_at: float = 0.0

    def accept(self, tag_id: str, now: float) -> Optional[TagEvent]:
        """Return a TagEvent if this read counts as a new tap, else None."""
        if tag_id == self.last_tag_id and (now - self.last_seen_at) <= self.window_sec:
            return None
        self.last_tag_id = tag_id
        self.last_seen_at = now
        return TagEvent(tag_id=tag_id, observed_at=now)

    def reset(self) -> None:
        self.last_tag_id = None
        self.last_seen_at = 0.0
