"""Core services: mapping store, reader backends, scan loop, playback."""
from tapreel.core.mapping_store import MappingStore
from tapreel.core.playback import PlaybackLauncher
from tapreel.core.rfid_service import RFIDService

__all__ = ["MappingStore", "PlaybackLauncher", "RFIDService"]
