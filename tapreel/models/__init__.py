"""Data models for tags, mappings and the reader."""
from tapreel.models.scanner import (
    LoopState,
    ScannerKind,
    ScannerSettings,
    ScannerState,
    ScannerStatus,
)
from tapreel.models.tag import TagEvent

__all__ = [
    "LoopState",
    "ScannerKind",
    "ScannerSettings",
    "ScannerState",
    "ScannerStatus",
    "TagEvent",
]
