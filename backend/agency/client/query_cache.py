from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, Iterable, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_STALE_TIME = 5 * 60
DEFAULT_CACHE_TIME = 10 * 60

QueryKey = Tuple[str, Tuple[Tuple[str, str], ...]]


def query_key(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> QueryKey:
    items = tuple(sorted((str(k), str(v)) for k, v in (params or {}).items() if v is not None))
    return endpoint, items


@dataclass
class CacheEntry:
    value: Any
    tags: frozenset
    fetched_at: float
    last_used: float
    stale_time: float
    cache_time: float

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < self.stale_time

    def is_expired(self, now: float) -> bool:
        return now - self.last_used >= self.cache_time


@dataclass
class _InFlight:
    future: Future
    generation: int
    tags: frozenset = field(default_factory=frozenset)


class QueryCache:
    """Tagged result cache for read queries.

    Each distinct (endpoint, params) pair is its own entry. Identical queries
    that arrive while one is being fetched wait for that fetch instead of
    issuing another. ``invalidate(tag)`` drops every entry carrying the tag,
    so the next read goes back to the server.
    """

    refetch_on_focus = False

    def __init__(
        self,
        stale_time: float = DEFAULT_STALE_TIME,
        cache_time: float = DEFAULT_CACHE_TIME,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time = stale_time
        self.cache_time = cache_time
        self.clock = clock
        self._entries: Dict[QueryKey, CacheEntry] = {}
        self._inflight: Dict[QueryKey, _InFlight] = {}
        self._invalidated_at: Dict[Hashable, int] = {}
        self._generation = 0
        self._lock = threading.Lock()
        self.fetch_count = 0

    def query(
        self,
        endpoint: str,
        params: Optional[Mapping[str, Any]],
        fetcher: Callable[[], Any],
        tags: Iterable[Hashable] = (),
        stale_time: Optional[float] = None,
        cache_time: Optional[float] = None,
        force: bool = False,
    ) -> Any:
        key = query_key(endpoint, params)
        tag_set = frozenset(tags)
        with self._lock:
            now = self.clock()
            self._collect(now)
            entry = self._entries.get(key)
            if entry is not None and not force and entry.is_fresh(now):
                entry.last_used = now
                return entry.value
            pending = self._inflight.get(key)
            if pending is None:
                pending = _InFlight(future=Future(), generation=self._generation, tags=tag_set)
                self._inflight[key] = pending
                self.fetch_count += 1
                owner = True
            else:
                owner = False
        if not owner:
            return pending.future.result()
        try:
            value = fetcher()
        except BaseException as exc:
            with self._lock:
                self._inflight.pop(key, None)
            pending.future.set_exception(exc)
            raise
        with self._lock:
            self._inflight.pop(key, None)
            now = self.clock()
            if not self._invalidated_since(tag_set, pending.generation):
                self._entries[key] = CacheEntry(
                    value=value,
                    tags=tag_set,
                    fetched_at=now,
                    last_used=now,
                    stale_time=self.stale_time if stale_time is None else stale_time,
                    cache_time=self.cache_time if cache_time is None else cache_time,
                )
        pending.future.set_result(value)
        return value

    def _invalidated_since(self, tags: frozenset, generation: int) -> bool:
        return any(self._invalidated_at.get(tag, -1) > generation for tag in tags)

    def _collect(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

    def invalidate(self, *tags: Hashable) -> int:
        with self._lock:
            self._generation += 1
            for tag in tags:
                self._invalidated_at[tag] = self._generation
            doomed = [key for key, entry in self._entries.items() if entry.tags.intersection(tags)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug("query cache invalidated tags=%s entries=%s", tags, len(doomed))
        return len(doomed)

    def peek(self, endpoint: str, params: Optional[Mapping[str, Any]] = None) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(query_key(endpoint, params))

    def on_focus(self) -> int:
        # window focus never triggers refetches
        return 0

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._invalidated_at.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
