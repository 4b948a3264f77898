"""
Tests for the SQLite response cache
"""
import pytest

from rosetta_server.database.cache import Epoch, ResponseCache, make_key

TIP = Epoch(100, "0xaaa")


def test_make_key_ignores_field_order():
    """Test cache keys do not depend on field order"""
    first = make_key("ethereum/dev", "block", {"a": 1, "b": {"c": 2, "d": 3}})
    second = make_key("ethereum/dev", "block", {"b": {"d": 3, "c": 2}, "a": 1})
    assert first == second
    assert first.startswith("ethereum/dev:block:")
    assert make_key("ethereum/mainnet", "block", {"a": 1}) != make_key("ethereum/dev", "block", {"a": 1})


def test_hit_within_epoch(cache):
    """Test entries are served within the same epoch"""
    cache.put_entry("k", "account/balance", {"value": 1}, TIP)
    assert cache.get_entry("k", "account/balance", TIP) == {"value": 1}
    assert cache.count() == 1


def test_stale_entry_is_discarded(cache):
    """Test entries from an older epoch are discarded"""
    cache.put_entry("k", "account/balance", {"value": 1}, TIP)
    assert cache.get_entry("k", "account/balance", Epoch(101, "0xbbb")) is None
    assert cache.count() == 0
    # same height, different hash after a reorg
    cache.put_entry("k", "account/balance", {"value": 1}, TIP)
    assert cache.get_entry("k", "account/balance", Epoch(100, "0xfork")) is None


def test_pinned_entries_survive_tip_changes(cache):
    """Test pinned entries ignore tip changes"""
    cache.put_entry("k", "block", {"block": 1}, None)
    assert cache.get_entry("k", "block", Epoch(500, "0xccc")) == {"block": 1}
    assert cache.get_entry("k", "block", None) == {"block": 1}


def test_last_writer_wins(cache):
    """Test a second write replaces the first"""
    cache.put_entry("k", "block", {"v": 1}, TIP)
    cache.put_entry("k", "block", {"v": 2}, TIP)
    assert cache.get_entry("k", "block", TIP) == {"v": 2}
    assert cache.count() == 1


def test_unserializable_data_is_not_cached(cache):
    """Test data that cannot be serialized is skipped"""
    assert cache.put_entry("k", "block", {"v": object()}, TIP) is False
    assert cache.get_entry("k", "block", TIP) is None


def test_clear(cache):
    """Test clearing the cache"""
    cache.put_entry("a", "block", {}, None)
    cache.put_entry("b", "block", {}, None)
    cache.clear()
    assert cache.count() == 0


def test_persists_across_instances(tmp_path):
    """Test entries persist in the database file"""
    path = str(tmp_path / "nested" / "cache.db")
    first = ResponseCache(path)
    first.put_entry("k", "block", {"v": 1}, None)
    first.close()
    second = ResponseCache(path)
    try:
        assert second.get_entry("k", "block", None) == {"v": 1}
    finally:
        second.close()


@pytest.mark.asyncio
async def test_async_access(cache):
    """Test async get and set"""
    assert await cache.set("k", "block", {"v": 1}, TIP)
    assert await cache.get("k", "block", TIP) == {"v": 1}
    assert await cache.get("missing", "block", TIP) is None
