import threading

import pytest

from backend.agency.client.normalize import normalize_collection, unwrap
from backend.agency.client.query_cache import QueryCache, query_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_normalize_collection_shapes():
    assert normalize_collection([1, 2], "projects") == {"projects": [1, 2], "total": 2}
    keyed = {"projects": [1], "total": 1, "pagination": {}}
    assert normalize_collection(keyed, "projects") is keyed
    assert normalize_collection({"data": [3], "total": 7}, "projects") == {"projects": [3], "total": 7}
    assert normalize_collection({"success": True}, "projects") == {"projects": [], "total": 0}
    assert normalize_collection(None, "posts") == {"posts": [], "total": 0}
    assert unwrap({"success": True, "data": {"id": 1}}) == {"id": 1}
    assert unwrap([1]) == [1]


def test_query_key_ignores_param_order_and_none():
    assert query_key("/projects", {"b": 2, "a": 1, "c": None}) == query_key("/projects", {"a": "1", "b": "2"})
    assert query_key("/projects", {"page": 1}) != query_key("/projects", {"page": 2})


def test_fresh_entry_served_from_cache_then_refetched_when_stale():
    clock = FakeClock()
    cache = QueryCache(stale_time=300, cache_time=600, clock=clock)
    calls = []

    def fetch():
        calls.append(1)
        return len(calls)

    assert cache.query("/projects", None, fetch) == 1
    clock.now += 299
    assert cache.query("/projects", None, fetch) == 1
    clock.now += 2
    assert cache.query("/projects", None, fetch) == 2
    assert cache.fetch_count == 2


def test_unused_entries_are_collected():
    clock = FakeClock()
    cache = QueryCache(stale_time=300, cache_time=600, clock=clock)
    cache.query("/team", None, lambda: "x")
    clock.now += 600
    cache.query("/other", None, lambda: "y")
    assert cache.peek("/team") is None
    assert len(cache) == 1


def test_invalidate_drops_only_tagged_entries():
    cache = QueryCache()
    cache.query("/projects", {"page": 1}, lambda: "p1", tags=("projects",))
    cache.query("/projects", {"page": 2}, lambda: "p2", tags=("projects",))
    cache.query("/blog", None, lambda: "b", tags=("blog",))
    assert cache.invalidate("projects") == 2
    assert cache.peek("/blog") is not None
    assert cache.query("/projects", {"page": 1}, lambda: "fresh", tags=("projects",)) == "fresh"


def test_concurrent_identical_queries_share_one_fetch():
    cache = QueryCache()
    started = threading.Event()
    release = threading.Event()
    calls = []

    def slow_fetch():
        calls.append(1)
        started.set()
        release.wait(5)
        return "result"

    results = []
    first = threading.Thread(target=lambda: results.append(cache.query("/services", None, slow_fetch)))
    first.start()
    assert started.wait(5)
    second = threading.Thread(target=lambda: results.append(cache.query("/services", None, slow_fetch)))
    second.start()
    release.set()
    first.join(5)
    second.join(5)
    assert results == ["result", "result"]
    assert len(calls) == 1


def test_result_not_stored_when_tag_invalidated_during_fetch():
    cache = QueryCache()

    def fetch_then_mutate():
        cache.invalidate("projects")
        return "stale"

    assert cache.query("/projects", None, fetch_then_mutate, tags=("projects",)) == "stale"
    assert cache.peek("/projects") is None
    # a fetch that starts after the invalidation is cached normally
    cache.query("/projects", None, lambda: "new", tags=("projects",))
    assert cache.peek("/projects").value == "new"


def test_failed_fetch_is_not_cached():
    cache = QueryCache()

    def boom():
        raise RuntimeError("down")

    with pytest.raises(RuntimeError):
        cache.query("/team", None, boom)
    assert cache.peek("/team") is None
    assert cache.query("/team", None, lambda: "ok") == "ok"


def test_focus_does_not_refetch():
    cache = QueryCache()
    assert cache.refetch_on_focus is False
    cache.query("/blog", None, lambda: 1)
    assert cache.on_focus() == 0
    assert cache.fetch_count == 1
