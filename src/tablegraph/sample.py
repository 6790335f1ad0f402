"""Cached, asynchronous sample queries against Hive tables."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor

from .cache import KeyedResultCache
from .config import Config
from .exceptions import QueryError
from .model import Field, QueryResult
from .repository import TableRepository

__all__ = [
    "QueryExecutor",
    "SampleService",
]


class QueryExecutor:
    """Base interface for running sample queries."""

    def execute_query(
        self,
        fqdn: str,
        fields: Sequence[str],
        parameters: Sequence[Field],
        overrides: Mapping[str, str] | None = None,
    ) -> QueryResult:
        """Select a sample of ``fields`` from table ``fqdn``.

        Args:
            fqdn: Fully qualified table name.
            fields: Column names to select.
            parameters: Partition parameters of the table.
            overrides: Partition values to filter on, ``None`` for any.

        Returns:
            The sampled rows.
        """
        raise NotImplementedError


class SampleService:
    """Serve table samples, caching the unfiltered sample of each table.

    Samples are computed on a thread pool and handed out as futures. Samples
    restricted by partition parameters bypass the cache.
    """

    def __init__(
        self,
        repository: TableRepository,
        executor: QueryExecutor,
        cache: KeyedResultCache[QueryResult] | None = None,
        *,
        pool: ThreadPoolExecutor | None = None,
        workers: int = 4,
    ):
        self.repository = repository
        self.executor = executor
        self.cache = cache if cache is not None else KeyedResultCache()
        self._owns_pool = pool is None
        self._pool = pool or ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="tablegraph-sample"
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        repository: TableRepository,
        executor: QueryExecutor,
    ) -> "SampleService":
        settings = config.validate().section("sample")
        cache: KeyedResultCache[QueryResult] = KeyedResultCache(
            maxsize=int(settings["maxsize"]),
            ttl=float(settings["ttl"]),
            single_flight=bool(settings.get("single_flight", True)),
        )
        return cls(repository, executor, cache, workers=int(settings["workers"]))

    def _query(self, fqdn: str, overrides: Mapping[str, str] | None) -> QueryResult:
        table = self.repository.get_by_fqdn(fqdn)
        fields = [f.name for f in table.fields]
        try:
            return self.executor.execute_query(fqdn, fields, table.parameters, overrides)
        except Exception as e:
            raise QueryError(f"sample query for {fqdn} failed: {e}") from e

    def sample(self, fqdn: str, params: Mapping[str, str] | None = None) -> QueryResult:
        """Compute the sample for ``fqdn`` in the calling thread."""
        return self.cache.get_with_params(
            fqdn, lambda overrides: self._query(fqdn, overrides), params
        )

    def get_sample(
        self, fqdn: str, params: Mapping[str, str] | None = None
    ) -> Future[QueryResult]:
        """Return a future for the sample of ``fqdn``."""
        return self._pool.submit(self.sample, fqdn, dict(params) if params else None)

    def invalidate(self, fqdn: str) -> None:
        self.cache.invalidate(fqdn)

    def refresh(self, fqdn: str) -> Future[QueryResult]:
        """Drop the cached sample of ``fqdn`` and compute it again."""
        self.invalidate(fqdn)
        return self.get_sample(fqdn)

    def close(self) -> None:
        if self._owns_pool:
            self._pool.shutdown(wait=True)
        self.cache.close()

    def __enter__(self) -> "SampleService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
