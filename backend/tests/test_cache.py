"""
Tests for key-value store backends and the last-palette cache.
"""
import pytest

from hueprint.schemas import ExtractionResult
from hueprint.services import cache as cache_module
from hueprint.services.cache import (
    InMemoryStore, JsonFileStore, KeyValueStore, PaletteCache, StoreError, build_store
)


def make_result(**overrides):
    fields = {
        "palette": ["#7832C8", "#FAFAFA"],
        "is_grayscale": False,
        "filename": "sunset.jpg",
        "timestamp": "2026-10-17T12:00:00.000Z",
    }
    fields.update(overrides)
    return ExtractionResult(**fields)


class FailingStore(KeyValueStore):
    name = "failing"

    def get(self, key):
        raise StoreError("unavailable")

    def set(self, key, value):
        raise StoreError("unavailable")

    def remove(self, key):
        raise StoreError("unavailable")


class TestInMemoryStore:

    def test_get_set_remove(self):
        store = InMemoryStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        store.remove("k")
        assert store.get("k") is None
        # Removing a missing key is a no-op
        store.remove("k")

    def test_ttl_expiry(self, monkeypatch):
        now = [1000.0]
        monkeypatch.setattr(cache_module.time, "time", lambda: now[0])

        store = InMemoryStore(ttl=60)
        store.set("k", "v")
        now[0] += 59
        assert store.get("k") == "v"
        now[0] += 2
        assert store.get("k") is None


class TestJsonFileStore:

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        JsonFileStore(str(path)).set("lastPalette", "{}")

        assert JsonFileStore(str(path)).get("lastPalette") == "{}"

    def test_remove(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "store.json"))
        store.set("a", "1")
        store.set("b", "2")
        store.remove("a")
        assert store.get("a") is None
        assert store.get("b") == "2"

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStore(str(tmp_path / "absent.json")).get("x") is None

    def test_corrupt_file_raises_store_error(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileStore(str(path)).get("x")


class TestBuildStore:

    def test_default_is_memory(self):
        assert isinstance(build_store(), InMemoryStore)

    def test_file_path(self, tmp_path):
        assert isinstance(build_store(file_path=str(tmp_path / "s.json")), JsonFileStore)

    def test_unreachable_redis_falls_back(self, tmp_path):
        store = build_store(redis_url="redis://127.0.0.1:1/0", file_path=str(tmp_path / "s.json"))
        assert isinstance(store, JsonFileStore)


class TestPaletteCache:

    def test_save_and_load(self):
        cache = PaletteCache(InMemoryStore())
        result = make_result()
        assert cache.save(result) is True
        assert cache.load() == result

    def test_stored_under_last_palette_key_as_json(self):
        store = InMemoryStore()
        PaletteCache(store).save(make_result())
        raw = store.get("lastPalette")
        assert '"palette":["#7832C8","#FAFAFA"]' in raw

    def test_load_empty(self):
        assert PaletteCache(InMemoryStore()).load() is None

    def test_clear(self):
        cache = PaletteCache(InMemoryStore())
        cache.save(make_result())
        assert cache.clear() is True
        assert cache.load() is None

    def test_corrupt_entry_ignored(self):
        store = InMemoryStore()
        store.set(PaletteCache.KEY, '{"palette": ["purple"]}')
        assert PaletteCache(store).load() is None

    def test_store_failures_swallowed(self):
        cache = PaletteCache(FailingStore())
        assert cache.save(make_result()) is False
        assert cache.load() is None
        assert cache.clear() is False

    def test_corrupt_file_store_ignored(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[]", encoding="utf-8")
        assert PaletteCache(JsonFileStore(str(path))).load() is None

    def test_backend_name(self, tmp_path):
        assert PaletteCache(InMemoryStore()).backend_name == "memory"
        assert PaletteCache(JsonFileStore(str(tmp_path / "s.json"))).backend_name == "file"
