"""RFID scan loop and tag -> target mapping lookup.

RFIDService owns the reader backend and runs the poll / debounce / emit cycle
on one background thread. Subscribers are called synchronously on that
thread, one after another: a subscriber that blocks (e.g. starts playback and
waits) delays the next poll until it returns. There is no queue between the
reader and subscribers; slow work belongs on the subscriber's own thread.
"""
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

from tapreel.core.backends import ScannerBackend, create_backend
from tapreel.core.debounce import DebounceFilter
from tapreel.core.errors import HardwareError
from tapreel.core.mapping_store import MappingStore
from tapreel.models.scanner import (
    LoopState,
    ScannerSettings,
    ScannerState,
    ScannerStatus,
)
from tapreel.models.tag import TagEvent, normalize_tag_id

logger = logging.getLogger(__name__)

# Back off after a failed read before polling again
ERROR_BACKOFF_SEC = 1.0
# Extra time dispose() waits for the loop beyond one read timeout
_JOIN_MARGIN_SEC = 1.0

TagCallback = Callable[[str], None]


class RFIDService:
    """Reader lifecycle, tag notifications and the mapping facade."""

    def __init__(
        self,
        store: MappingStore,
        settings: Optional[ScannerSettings] = None,
        backend_factory: Callable[[ScannerSettings], ScannerBackend] = create_backend,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._settings = settings or ScannerSettings()
        self._backend_factory = backend_factory
        self._clock = clock
        self._backend: Optional[ScannerBackend] = None
        self._state = ScannerState.UNINITIALIZED
        self._last_error: Optional[str] = None
        self._debounce = DebounceFilter(self._settings.debounce_sec)
        self._subscribers: List[TagCallback] = []
        self._subscribers_lock = threading.Lock()
        self._lifecycle_lock = threading.RLock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    # -- lifecycle --------------------------------------------------------

    def initialize(self) -> bool:
        """Build and open the configured backend, then start scanning.

        Returns True when the reader is connected. Failure leaves the service
        DISABLED and is only logged.
        """
        with self._lifecycle_lock:
            self._release_backend()
            self._debounce.reset()
            self._last_error = None
            if not self._settings.enabled:
                self._state = ScannerState.DISABLED
                self._last_error = "disabled in configuration"
                logger.info("RFID scanning disabled in configuration")
                return False
            logger.info("Initializing RFID reader (%s)...", self._settings.kind.value)
            backend = None
            try:
                backend = self._backend_factory(self._settings)
                backend.open()
            except HardwareError as e:
                self._close_failed(backend)
                self._disable(str(e))
                logger.warning("No RFID reader available: %s. RFID functionality disabled.", e)
                return False
            except Exception as e:
                self._close_failed(backend)
                self._disable(str(e))
                logger.error("Error initializing RFID reader: %s", e, exc_info=True)
                return False
            self._backend = backend
            self._state = ScannerState.CONNECTED
        self.start_scanning()
        return True

    @staticmethod
    def _close_failed(backend: Optional[ScannerBackend]) -> None:
        # open() may have claimed part of the hardware before failing
        if backend is None:
            return
        try:
            backend.close()
        except Exception as e:
            logger.error("Error releasing RFID reader after failed open: %s", e)

    def _disable(self, reason: str) -> None:
        self._backend = None
        self._state = ScannerState.DISABLED
        self._last_error = reason

    def start_scanning(self) -> bool:
        """Start the background poll loop. No-op if already running."""
        with self._lifecycle_lock:
            backend = self._backend
            if self._state is not ScannerState.CONNECTED or backend is None:
                logger.warning("RFID reader not connected; scanning not started")
                return False
            if self.is_scanning():
                logger.info("RFID scanning is already running")
                return False
            previous = self._thread
            if previous is not None and previous.is_alive():
                # A stopped run may still be inside its last read
                previous.join(timeout=backend.read_timeout + _JOIN_MARGIN_SEC)
                if previous.is_alive():
                    logger.warning("Previous RFID scan loop still finishing; not restarting")
                    return False
            stop = threading.Event()
            self._stop_event = stop
            self._thread = threading.Thread(
                target=self._scan_loop,
                args=(backend, stop),
                name="rfid-scan",
                daemon=True,
            )
            self._thread.start()
            logger.info("Starting RFID scanning (%s)", backend.kind)
            return True

    def stop_scanning(self) -> None:
        """Request the loop to stop; does not wait for the current iteration."""
        stop = self._stop_event
        if stop is None or stop.is_set():
            return
        stop.set()
        logger.info("RFID scanning stopped")

    def dispose(self) -> None:
        """Stop scanning and release the reader. Safe to call repeatedly; never raises."""
        with self._lifecycle_lock:
            self._release_backend()
            if self._state is ScannerState.CONNECTED:
                self._state = ScannerState.UNINITIALIZED

    def _release_backend(self) -> None:
        self.stop_scanning()
        thread, self._thread = self._thread, None
        backend, self._backend = self._backend, None
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            timeout = (backend.read_timeout if backend else 0.0) + _JOIN_MARGIN_SEC
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("RFID scan loop did not exit within %.1fs", timeout)
        if backend is None:
            return
        try:
            backend.close()
            logger.info("RFID reader released")
        except Exception as e:
            logger.error("Error cleaning up RFID reader: %s", e)

    # -- scanning ---------------------------------------------------------

    def _scan_loop(self, backend: ScannerBackend, stop: threading.Event) -> None:
        logger.debug(
            "RFID scan loop started (tick=%.2fs, cooldown=%.2fs)",
            backend.idle_interval,
            backend.cooldown,
        )
        while not stop.is_set():
            event, failed = self._cycle(backend)
            if stop.is_set():
                break
            if failed:
                stop.wait(ERROR_BACKOFF_SEC)
                continue
            if event is not None and backend.cooldown > 0:
                stop.wait(backend.cooldown)
            if backend.idle_interval > 0:
                stop.wait(backend.idle_interval)
        logger.debug("RFID scan loop exited")

    def _cycle(self, backend: ScannerBackend) -> Tuple[Optional[TagEvent], bool]:
        """One read -> debounce -> emit pass. Returns (event, read_failed)."""
        try:
            raw = backend.read_once(backend.read_timeout)
        except HardwareError as e:
            logger.warning("Error reading RFID tag: %s", e)
            return None, True
        except Exception as e:
            logger.error("Unexpected error reading RFID tag: %s", e, exc_info=True)
            return None, True
        if raw is None:
            return None, False
        tag_id = normalize_tag_id(raw)
        if not tag_id:
            return None, False
        event = self._debounce.accept(tag_id, self._clock())
        if event is None:
            logger.debug("Ignoring repeated read of %s", tag_id)
            return None, False
        logger.info("RFID tag detected: %s", tag_id)
        self._emit(event.tag_id)
        return event, False

    def poll_once(self) -> Optional[TagEvent]:
        """Run a single poll cycle on the caller's thread (loop must not be running)."""
        backend = self._backend
        if backend is None:
            return None
        if self.is_scanning():
            raise RuntimeError("poll_once() while the scan loop owns the reader")
        event, _ = self._cycle(backend)
        return event

    def simulate_tag(self, tag_id: str) -> bool:
        """Notify subscribers as if tag_id had been read (no hardware, no debounce)."""
        tag_id = normalize_tag_id(tag_id)
        if not tag_id:
            return False
        logger.info("Simulating RFID tag: %s", tag_id)
        self._emit(tag_id)
        return True

    # -- notifications ----------------------------------------------------

    def subscribe(self, callback: TagCallback) -> None:
        with self._subscribers_lock:
            if callback not in self._subscribers:
                self._subscribers.append(callback)

    def unsubscribe(self, callback: TagCallback) -> None:
        with self._subscribers_lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def _emit(self, tag_id: str) -> None:
        with self._subscribers_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(tag_id)
            except Exception as e:
                logger.error("Error in tag callback %r: %s", callback, e, exc_info=True)

    # -- status -----------------------------------------------------------

    def is_enabled(self) -> bool:
        return self._state is ScannerState.CONNECTED

    def is_scanning(self) -> bool:
        return self.loop_state() is LoopState.RUNNING

    def loop_state(self) -> LoopState:
        thread = self._thread
        if thread is None or not thread.is_alive():
            return LoopState.IDLE
        stop = self._stop_event
        if stop is not None and stop.is_set():
            return LoopState.STOPPING
        return LoopState.RUNNING

    def scanner_status(self) -> ScannerStatus:
        backend = self._backend
        details = backend.status_details() if backend is not None else {}
        if self._last_error:
            details["error"] = self._last_error
        return ScannerStatus(
            connected=self.is_enabled() and backend is not None,
            state=self._state,
            backend=backend.kind if backend is not None else self._settings.kind.value,
            scanning=self.is_scanning(),
            details=details,
        )

    # -- mappings ---------------------------------------------------------

    def add_mapping(self, tag_id: str, target: str) -> None:
        self._store.add(tag_id, target)
        logger.info("Mapped tag %s -> %s", normalize_tag_id(tag_id), target.strip())

    def remove_mapping(self, tag_id: str) -> bool:
        removed = self._store.remove(tag_id)
        if removed:
            logger.info("Removed mapping for tag %s", normalize_tag_id(tag_id))
        return removed

    def resolve(self, tag_id: str) -> Optional[str]:
        return self._store.lookup(tag_id)

    def list_mappings(self) -> List[Tuple[str, str]]:
        return self._store.list()

    def mapping_count(self) -> int:
        return self._store.count()
