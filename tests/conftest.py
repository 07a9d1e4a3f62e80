"""Fakes for readers, serial ports and the clock."""
from typing import List, Optional

import pytest

from tapreel.core.errors import HardwareError
from tapreel.core.mapping_store import MappingStore


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    """Scripted backend: each read_once() pops the next item (str, None or an exception)."""

    kind = "fake"
    idle_interval = 0.001
    cooldown = 0.0
    read_timeout = 0.01

    def __init__(self, reads: Optional[List] = None, fail_open: bool = False, fail_close: bool = False) -> None:
        self.reads = list(reads or [])
        self.fail_open = fail_open
        self.fail_close = fail_close
        self.opened = False
        self.read_calls = 0
        self.close_calls = 0

    def open(self) -> None:
        if self.fail_open:
            raise HardwareError("no reader attached")
        self.opened = True

    def read_once(self, timeout: float):
        self.read_calls += 1
        if not self.reads:
            return None
        item = self.reads.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.close_calls += 1
        self.opened = False
        if self.fail_close:
            raise HardwareError("bus fault on release")

    def status_details(self):
        return {"fake": True}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    return MappingStore(tmp_path / "rfid-config.json", seed_defaults=False).load()
