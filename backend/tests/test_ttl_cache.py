import threading

import pytest

from app.cache.ttl import TTLCache, cached_call


def test_set_then_get(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v")
    assert cache.get("k") == "v"


def test_missing_key_is_none(clock):
    assert TTLCache(clock=clock).get("nope") is None


def test_overwrite_resets_value_and_timestamp(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v1")
    clock.advance(minutes=4)
    cache.set("k", "v2")
    clock.advance(minutes=4)
    assert cache.get("k") == "v2"


def test_value_alive_before_ttl(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v")
    clock.advance(minutes=4)
    assert cache.get("k") == "v"


def test_exactly_at_ttl_is_still_fresh(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v")
    clock.advance(minutes=5)
    assert cache.get("k") == "v"


def test_expired_entry_evicted_on_get_only(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v")
    clock.advance(minutes=6)

    # still counted until somebody reads it
    assert cache.size == 1
    assert cache.get("k") is None
    assert cache.size == 0


def test_has_evicts_expired(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v")
    assert cache.has("k")
    clock.advance(minutes=6)
    assert not cache.has("k")
    assert len(cache) == 0


def test_delete_and_clear(clock):
    cache = TTLCache(clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    assert cache.delete("a") is True
    assert cache.delete("a") is False
    cache.clear()
    assert cache.size == 0


def test_cleanup_removes_only_expired(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("old1", 1)
    cache.set("old2", 2)
    clock.advance(minutes=3)
    cache.set("fresh", 3)
    clock.advance(minutes=3)

    assert cache.cleanup() == 2
    assert cache.size == 1
    assert cache.get("fresh") == 3
    assert cache.cleanup() == 0


def test_instances_do_not_share_entries(clock):
    a = TTLCache(clock=clock)
    b = TTLCache(clock=clock)
    a.set("k", "v")
    assert b.get("k") is None


def test_cached_call_fetches_once(clock):
    cache = TTLCache(5, clock=clock)
    calls = []

    def fetch():
        calls.append(1)
        return {"temp": 12}

    assert cached_call(cache, "w", fetch) == {"temp": 12}
    assert cached_call(cache, "w", fetch) == {"temp": 12}
    assert len(calls) == 1

    clock.advance(minutes=6)
    cached_call(cache, "w", fetch)
    assert len(calls) == 2


class BrokenCache(TTLCache):
    def get(self, key):
        raise OSError("backing store down")

    def set(self, key, data):
        raise OSError("backing store down")


def test_cached_call_ignores_cache_failures(clock):
    cache = BrokenCache(clock=clock)
    assert cached_call(cache, "k", lambda: "fresh") == "fresh"


def test_cached_call_propagates_fetch_errors(clock):
    cache = TTLCache(clock=clock)

    def fetch():
        raise RuntimeError("upstream")

    with pytest.raises(RuntimeError, match="upstream"):
        cached_call(cache, "k", fetch)
    assert cache.size == 0


def test_cleanup_while_another_thread_writes(clock):
    cache = TTLCache(5, clock=clock)
    for i in range(50_000):
        cache.set(f"old{i}", i)
    clock.advance(minutes=6)

    stop = threading.Event()

    def writer():
        n = 0
        while not stop.is_set():
            cache.set(f"new{n}", n)
            n += 1

    t = threading.Thread(target=writer)
    t.start()
    try:
        removed = sum(cache.cleanup() for _ in range(5))
    finally:
        stop.set()
        t.join()

    assert removed == 50_000
    assert all(not k.startswith("old") for k in list(cache._entries))


def test_get_tolerates_concurrent_eviction(clock):
    cache = TTLCache(5, clock=clock)
    cache.set("k", "v")
    clock.advance(minutes=6)
    cache.cleanup()
    # entry already swept by someone else
    assert cache.get("k") is None
    assert cache.delete("k") is False
