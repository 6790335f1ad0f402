"""Cache abstractions for query result storage."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Generic, TypeVar

from cachetools import TTLCache  # type: ignore[import]

from .exceptions import CacheError
from .logger import logger

__all__ = [
    "Cache",
    "MemoryTTL",
    "KeyedResultCache",
]

T = TypeVar("T")


class Cache:
    """Base cache interface."""

    def get(self, key: str) -> tuple[bool, Any]:
        """Get a cached value.

        Args:
            key: Cache key.

        Returns:
            A tuple of (hit, value).
        """
        raise NotImplementedError

    def put(self, key: str, value: Any) -> None:
        """Store a value in the cache.

        Args:
            key: Cache key.
            value: Value to cache.
        """
        raise NotImplementedError

    def delete(self, key: str) -> None:
        """Delete a cached value.

        Args:
            key: Cache key.
        """
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class MemoryTTL(Cache):
    """Thread-safe in-memory LRU cache whose entries expire after ``ttl`` seconds."""

    def __init__(
        self,
        maxsize: int = 1000,
        ttl: float = 86400.0,
        *,
        timer: Callable[[], float] = time.monotonic,
    ):
        if maxsize <= 0:
            raise CacheError(f"maxsize must be positive, got {maxsize}")
        if ttl <= 0:
            raise CacheError(f"ttl must be positive, got {ttl}")
        self._ttl: TTLCache[str, Any] = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        self._lock = threading.Lock()

    @property
    def maxsize(self) -> int:
        return int(self._ttl.maxsize)

    def get(self, key: str):
        with self._lock:
            # item access refreshes the LRU position; expired entries read as absent
            try:
                return True, self._ttl[key]
            except KeyError:
                return False, None

    def put(self, key: str, value: Any):
        with self._lock:
            self._ttl[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._ttl.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._ttl.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._ttl

    def __len__(self) -> int:
        with self._lock:
            self._ttl.expire()
            return len(self._ttl)


class KeyedResultCache(Generic[T]):
    """Bounded, expiring cache computing each result on demand.

    On a miss ``get`` calls the supplied loader in the caller's thread and
    stores its result. With ``single_flight`` enabled, concurrent misses on
    the same key wait for one load instead of recomputing. A loader that
    raises leaves no entry behind, so the next request retries.

    Parameters
    ----------
    maxsize:
        Maximum number of entries; the least recently used entry is evicted.
    ttl:
        Seconds after insertion at which an entry is treated as absent.
    single_flight:
        Collapse concurrent misses on one key into a single load.
    timer:
        Clock used for expiry, ``time.monotonic`` by default.
    executor:
        Pool for :meth:`get_async`. A private pool of ``workers`` threads is
        created lazily when omitted.
    """

    def __init__(
        self,
        maxsize: int = 1000,
        ttl: float = 86400.0,
        *,
        single_flight: bool = True,
        timer: Callable[[], float] = time.monotonic,
        executor: ThreadPoolExecutor | None = None,
        workers: int = 4,
    ):
        self._store = MemoryTTL(maxsize, ttl, timer=timer)
        self.single_flight = single_flight
        self.workers = workers
        self._executor = executor
        self._owns_executor = False
        self._lock = threading.Lock()
        self._loading: dict[str, threading.Lock] = {}

    @property
    def maxsize(self) -> int:
        return self._store.maxsize

    def _key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            lock = self._loading.get(key)
            if lock is None:
                lock = self._loading[key] = threading.Lock()
            return lock

    def _release_key_lock(self, key: str, lock: threading.Lock) -> None:
        with self._lock:
            if self._loading.get(key) is lock and not lock.locked():
                del self._loading[key]

    def _call(self, key: str, loader: Callable[[], T]) -> T:
        try:
            return loader()
        except Exception as e:
            logger.error("loading {} failed: {}", key, e)
            raise

    def _load(self, key: str, loader: Callable[[], T]) -> T:
        value = self._call(key, loader)
        self._store.put(key, value)
        return value

    def get(self, key: str, loader: Callable[[], T]) -> T:
        """Return the value for ``key``, calling ``loader`` on a miss."""
        hit, value = self._store.get(key)
        if hit:
            logger.debug("cache hit for {}", key)
            return value
        if not self.single_flight:
            logger.debug("cache miss for {}", key)
            return self._load(key, loader)

        lock = self._key_lock(key)
        try:
            with lock:
                # another caller may have finished loading while we waited
                hit, value = self._store.get(key)
                if hit:
                    logger.debug("cache hit for {} after wait", key)
                    return value
                logger.debug("cache miss for {}", key)
                return self._load(key, loader)
        finally:
            self._release_key_lock(key, lock)

    def get_with_params(
        self,
        key: str,
        loader: Callable[[Mapping[str, str] | None], T],
        params: Mapping[str, str] | None = None,
    ) -> T:
        """Like :meth:`get`, but non-empty ``params`` bypass the cache.

        Parameterized results are never stored; ``loader`` receives the
        parameters, or ``None`` for the cached default.
        """
        if params:
            logger.debug("bypassing cache for {} with {}", key, dict(params))
            return self._call(key, lambda: loader(params))
        return self.get(key, lambda: loader(None))

    def _pool(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.workers, thread_name_prefix="tablegraph-cache"
                )
                self._owns_executor = True
            return self._executor

    def get_async(self, key: str, loader: Callable[[], T]) -> Future[T]:
        """Submit :meth:`get` to the cache's thread pool."""
        return self._pool().submit(self.get, key, loader)

    def invalidate(self, key: str) -> None:
        self._store.delete(key)

    def refresh(self, key: str, loader: Callable[[], T]) -> T:
        """Drop ``key`` and load it again."""
        self.invalidate(key)
        return self.get(key, loader)

    def clear(self) -> None:
        self._store.clear()

    def close(self) -> None:
        """Shut down the private executor, if one was created."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None and self._owns_executor:
            executor.shutdown(wait=True)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
