"""
Tests for the persistent store backends
"""
from unittest.mock import MagicMock, patch

from persistent_store import JsonFileStore, MemoryStore, RedisStore, create_store


class TestJsonFileStore:

    def test_set_get_delete(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "cache" / "catalog.json"))

        assert store.get("businesses") is None
        assert store.set("businesses", "[]") is True
        assert store.get("businesses") == "[]"
        assert store.delete("businesses") is True
        assert store.delete("businesses") is False

    def test_survives_new_instance(self, tmp_path):
        path = str(tmp_path / "catalog.json")
        JsonFileStore(path).set("k", "v")
        assert JsonFileStore(path).get("k") == "v"

    def test_corrupted_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{broken")
        assert JsonFileStore(str(path)).get("k") is None


class TestRedisStore:

    def test_prefixed_keys(self):
        client = MagicMock()
        client.get.return_value = "[]"
        store = RedisStore(client, prefix="test:")

        assert store.get("businesses") == "[]"
        client.get.assert_called_once_with("test:businesses")

        store.set("businesses", "[1]")
        client.set.assert_called_once_with("test:businesses", "[1]")

    def test_errors_degrade_gracefully(self):
        client = MagicMock()
        client.get.side_effect = ConnectionError("down")
        client.set.side_effect = ConnectionError("down")
        store = RedisStore(client)

        assert store.get("k") is None
        assert store.set("k", "v") is False

    def test_from_url_returns_none_when_unreachable(self):
        with patch("redis.from_url") as mock_from_url:
            mock_from_url.return_value.ping.side_effect = ConnectionError("refused")
            assert RedisStore.from_url("redis://nowhere:6379/0") is None


class TestCreateStore:

    def test_memory_backend(self):
        assert isinstance(create_store({"storage": {"backend": "memory"}}), MemoryStore)

    def test_file_backend(self, tmp_path):
        store = create_store({"storage": {"backend": "file", "file_path": str(tmp_path / "c.json")}})
        assert isinstance(store, JsonFileStore)

    def test_redis_falls_back_to_file(self, tmp_path):
        settings = {"storage": {"backend": "redis", "redis_url": "redis://x", "file_path": str(tmp_path / "c.json")}}
        with patch("persistent_store.RedisStore.from_url", return_value=None):
            store = create_store(settings)
        assert isinstance(store, JsonFileStore)
