"""Start an external video player for the target mapped to a tapped tag."""
import logging
import os
import shlex
import subprocess
import threading
from typing import Callable, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)

# How long to wait for the previous player to exit after terminate()
_TERMINATE_TIMEOUT_SEC = 2.0


class PlaybackLauncher:
    """Tag callback: resolve the tag and hand the target to a player process.

    Runs on the scan thread, so it only spawns the player and returns.
    """

    def __init__(
        self,
        resolve: Callable[[str], Optional[str]],
        command: Union[str, Sequence[str]],
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        path_exists: Callable[[str], bool] = os.path.exists,
    ) -> None:
        self._resolve = resolve
        self._command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        self._popen = popen
        self._path_exists = path_exists
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None
        self.last_target: Optional[str] = None

    def __call__(self, tag_id: str) -> None:
        self.handle_tag(tag_id)

    def handle_tag(self, tag_id: str) -> bool:
        """Return True if a player was started for tag_id."""
        target = self._resolve(tag_id)
        if target is None:
            logger.info("No video mapped to tag %s", tag_id)
            return False
        if not self._path_exists(target):
            logger.warning("Video for tag %s not found: %s", tag_id, target)
            return False
        return self.play(target)

    def play(self, target: str) -> bool:
        with self._lock:
            self._stop_locked()
            argv = self._command + [target]
            try:
                self._process = self._popen(
                    argv,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as e:
                logger.error("Could not start player %r: %s", argv[0] if argv else "", e)
                self._process = None
                return False
            self.last_target = target
            logger.info("Playing %s", target)
            return True

    def stop(self) -> None:
        with self._lock:
            self._stop_locked()

    def is_playing(self) -> bool:
        process = self._process
        return process is not None and process.poll() is None

    def _stop_locked(self) -> None:
        process, self._process = self._process, None
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=_TERMINATE_TIMEOUT_SEC)
        except subprocess.TimeoutExpired:
            logger.warning("Player did not exit, killing it")
            process.kill()
            # Reap it so no zombie is left behind
            process.wait()
