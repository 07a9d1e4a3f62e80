"""Shared application state (injected into routes)."""
from typing import Optional

from tapreel.config import MAPPINGS_PATH, PLAYER_CMD, scanner_settings_from_env
from tapreel.core.mapping_store import MappingStore
from tapreel.core.playback import PlaybackLauncher
from tapreel.core.rfid_service import RFIDService


class AppState:
    def __init__(self, store: Optional[MappingStore] = None, rfid_service: Optional[RFIDService] = None) -> None:
        self.store = store or MappingStore(MAPPINGS_PATH)
        self._rfid_service = rfid_service
        self._player: Optional[PlaybackLauncher] = None

    @property
    def rfid_service(self) -> RFIDService:
        if self._rfid_service is None:
            self._rfid_service = RFIDService(self.store, settings=scanner_settings_from_env())
        return self._rfid_service

    @property
    def player(self) -> PlaybackLauncher:
        if self._player is None:
            self._player = PlaybackLauncher(self.rfid_service.resolve, PLAYER_CMD)
        return self._player

    def startup(self) -> None:
        """Load mappings, hook up playback and bring the reader up (never raises)."""
        self.store.load()
        self.rfid_service.subscribe(self.player)
        self.rfid_service.initialize()

    def shutdown(self) -> None:
        self.rfid_service.unsubscribe(self.player)
        self.rfid_service.dispose()
        self.player.stop()


_state = AppState()


def get_state() -> AppState:
    return _state
