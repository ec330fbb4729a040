"""Tests for cache backends and the import playlist store."""
from unittest.mock import MagicMock, patch

from encore.services.cache import MemoryCache, RedisCache, get_cache
from encore.services.import_store import ImportPlaylist


class TestMemoryCache:
    """In-process backend."""

    def test_json_round_trip_and_delete(self):
        cache = MemoryCache()

        cache.set_json("k", {"songs": [1, 2]})

        assert cache.get_json("k") == {"songs": [1, 2]}
        assert cache.delete("k") is True
        assert cache.get_json("k") is None
        assert cache.delete("k") is False

    def test_ttl_expiry(self):
        cache = MemoryCache()

        with patch("encore.services.cache.time") as clock:
            clock.monotonic.return_value = 100.0
            cache.set_json("k", "v", ttl=60)
            clock.monotonic.return_value = 159.0
            assert cache.get_json("k") == "v"
            clock.monotonic.return_value = 160.0
            assert cache.get_json("k") is None

    def test_sorted_set(self):
        cache = MemoryCache()

        assert cache.zadd("z", "b", 2.0) is True
        assert cache.zadd("z", "a", 1.0) is True
        assert cache.zadd("z", "b", 9.0) is False

        assert cache.zrange("z") == [("a", 1.0), ("b", 2.0)]
        assert cache.zcard("z") == 2
        assert cache.zrem("z", "a") is True
        assert cache.zrem("z", "a") is False
        assert cache.zcard("z") == 1


class TestRedisCache:
    """Redis backend delegates to redis-py."""

    def test_json_values(self):
        client = MagicMock()
        client.get.return_value = '{"a": 1}'
        cache = RedisCache(client)

        cache.set_json("k", {"a": 1}, ttl=60)

        client.set.assert_called_once_with("k", '{"a": 1}', ex=60)
        assert cache.get_json("k") == {"a": 1}

    def test_missing_key(self):
        client = MagicMock()
        client.get.return_value = None

        assert RedisCache(client).get_json("k") is None

    def test_zadd_only_adds_new_members(self):
        client = MagicMock()
        client.zadd.return_value = 0

        assert RedisCache(client).zadd("z", "7", 1.5) is False
        client.zadd.assert_called_once_with("z", {"7": 1.5}, nx=True)

    def test_zrange_with_scores(self):
        client = MagicMock()
        client.zrange.return_value = [("3", 1.0), ("9", "2.5")]

        assert RedisCache(client).zrange("z") == [("3", 1.0), ("9", 2.5)]
        client.zrange.assert_called_once_with("z", 0, -1, withscores=True)


def test_get_cache_without_redis_url_is_memory():
    assert isinstance(get_cache(), MemoryCache)
    assert get_cache() is get_cache()


class TestImportPlaylist:
    """Per-actor import playlist."""

    def test_add_is_idempotent(self):
        playlist = ImportPlaylist(MemoryCache())

        assert playlist.add("userA", 5) == (True, 1)
        assert playlist.add("userA", 5) == (False, 1)
        assert playlist.add("userA", 6) == (True, 2)

    def test_positions_follow_add_order(self):
        playlist = ImportPlaylist(MemoryCache())

        with patch("encore.services.import_store.time") as clock:
            for stamp, song_id in [(30.0, 9), (10.0, 4), (20.0, 7)]:
                clock.time.return_value = stamp
                playlist.add("userA", song_id)

        entries = playlist.entries("userA")

        assert [(pos, song_id) for pos, song_id, _ in entries] == [(1, 4), (2, 7), (3, 9)]

    def test_readding_keeps_original_position(self):
        playlist = ImportPlaylist(MemoryCache())

        with patch("encore.services.import_store.time") as clock:
            for stamp, song_id in [(1.0, 1), (2.0, 2), (3.0, 1)]:
                clock.time.return_value = stamp
                playlist.add("userA", song_id)

        assert [song_id for _, song_id, _ in playlist.entries("userA")] == [1, 2]

    def test_remove_and_clear(self):
        playlist = ImportPlaylist(MemoryCache())
        playlist.add("userA", 1)
        playlist.add("userA", 2)

        assert playlist.remove("userA", 1) == (True, 1)
        assert playlist.remove("userA", 1) == (False, 1)
        playlist.clear("userA")
        assert playlist.entries("userA") == []

    def test_playlists_are_per_actor(self):
        playlist = ImportPlaylist(MemoryCache())
        playlist.add("userA", 1)

        assert playlist.entries("userB") == []
