import json

import pytest

from tapreel.core import mapping_store as mapping_store_module
from tapreel.core.errors import StorageError, ValidationError
from tapreel.core.mapping_store import DEFAULT_MAPPINGS, MappingStore


def test_missing_file_is_seeded_and_persisted(tmp_path):
    path = tmp_path / "rfid-config.json"
    store = MappingStore(path).load()
    assert dict(store.list()) == DEFAULT_MAPPINGS
    assert json.loads(path.read_text()) == DEFAULT_MAPPINGS


def test_missing_file_without_seed_starts_empty(tmp_path):
    path = tmp_path / "rfid-config.json"
    store = MappingStore(path, seed_defaults=False).load()
    assert store.count() == 0
    assert json.loads(path.read_text()) == {}


def test_add_then_resolve_survives_reload(tmp_path):
    path = tmp_path / "rfid-config.json"
    store = MappingStore(path, seed_defaults=False).load()
    store.add("04A1B2C3", "/videos/a.mp4")
    assert store.lookup("04A1B2C3") == "/videos/a.mp4"

    reloaded = MappingStore(path).load()
    assert reloaded.lookup("04A1B2C3") == "/videos/a.mp4"


def test_file_is_pretty_printed_flat_object(store):
    store.add("X1", "/v/x.mp4")
    text = store.path.read_text()
    assert "\n  " in text
    assert json.loads(text) == {"X1": "/v/x.mp4"}


def test_add_overwrites_existing_key(store):
    store.add("K", "/v/1.mp4")
    store.add("K", "/v/2.mp4")
    assert store.lookup("K") == "/v/2.mp4"
    assert store.count() == 1


def test_keys_and_targets_are_trimmed(store):
    store.add("  K  ", " /v/1.mp4\n")
    assert store.list() == [("K", "/v/1.mp4")]
    assert store.lookup(" K") == "/v/1.mp4"


@pytest.mark.parametrize(
    "tag_id,target,kind",
    [
        ("", "/v/1.mp4", ValidationError.EMPTY_KEY),
        ("   ", "/v/1.mp4", ValidationError.EMPTY_KEY),
        ("K", "", ValidationError.EMPTY_TARGET),
        ("K", "  ", ValidationError.EMPTY_TARGET),
    ],
)
def test_add_rejects_blank_values(store, tag_id, target, kind):
    store.add("EXISTING", "/v/e.mp4")
    before = store.path.read_text()
    with pytest.raises(ValidationError) as excinfo:
        store.add(tag_id, target)
    assert excinfo.value.kind == kind
    assert store.list() == [("EXISTING", "/v/e.mp4")]
    assert store.path.read_text() == before


def test_remove_present_key(store):
    store.add("K", "/v/1.mp4")
    assert store.remove("K") is True
    assert store.lookup("K") is None
    assert json.loads(store.path.read_text()) == {}


def test_remove_absent_or_blank_key_changes_nothing(store):
    store.add("K", "/v/1.mp4")
    mtime = store.path.stat().st_mtime_ns
    assert store.remove("missing") is False
    assert store.remove("") is False
    assert store.remove("   ") is False
    assert store.count() == 1
    assert store.path.stat().st_mtime_ns == mtime


def test_corrupt_file_gives_empty_operable_store(tmp_path):
    path = tmp_path / "rfid-config.json"
    path.write_text("{not json")
    store = MappingStore(path).load()
    assert store.count() == 0
    # the broken file is left alone until the next write
    assert path.read_text() == "{not json"

    store.add("K", "/v/1.mp4")
    assert json.loads(path.read_text()) == {"K": "/v/1.mp4"}


@pytest.mark.parametrize("content", ["[1, 2]", '{"K": 5}', '"text"'])
def test_wrong_shape_is_treated_as_corrupt(tmp_path, content):
    path = tmp_path / "rfid-config.json"
    path.write_text(content)
    store = MappingStore(path).load()
    assert store.count() == 0


def test_blank_entries_in_file_are_skipped(tmp_path):
    path = tmp_path / "rfid-config.json"
    path.write_text(json.dumps({"A": "/v/a.mp4", " ": "/v/b.mp4", "C": ""}))
    store = MappingStore(path).load()
    assert store.list() == [("A", "/v/a.mp4")]


def test_save_leaves_no_temp_files(store):
    store.add("A", "/v/a.mp4")
    store.add("B", "/v/b.mp4")
    assert sorted(p.name for p in store.path.parent.iterdir()) == ["rfid-config.json"]


def test_save_failure_raises_storage_error(store, monkeypatch):
    def boom(src, dst):
        raise OSError("read-only file system")

    monkeypatch.setattr(mapping_store_module.os, "replace", boom)
    with pytest.raises(StorageError):
        store.save()


def test_add_keeps_memory_state_when_persist_fails(store, monkeypatch):
    def boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(mapping_store_module.os, "replace", boom)
    store.add("K", "/v/1.mp4")
    assert store.lookup("K") == "/v/1.mp4"
    assert sorted(p.name for p in store.path.parent.iterdir()) == ["rfid-config.json"]
