# ruff: noqa: E402
import sys
from pathlib import Path

# ensure src is on PYTHONPATH
src_path = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(src_path))

import pytest
from tablegraph import (
    Field,
    InMemoryRepository,
    KeyedResultCache,
    QueryExecutor,
    QueryResult,
    SampleService,
    Table,
    TableCatalog,
)


class FakeClock:
    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingExecutor(QueryExecutor):
    """Returns one row per call and remembers the calls it saw."""

    def __init__(self, fail: Exception | None = None):
        self.calls: list[tuple] = []
        self.fail = fail

    def execute_query(self, fqdn, fields, parameters, overrides=None):
        self.calls.append((fqdn, tuple(fields), tuple(p.name for p in parameters), overrides))
        if self.fail is not None:
            raise self.fail
        return QueryResult(header=tuple(fields), rows=((fqdn, len(self.calls)),))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository():
    """raw.events <- stage.events <- mart.sessions <- mart.kpis, stage.users <- mart.sessions."""
    tables = [
        Table("raw.events", owner="ingest"),
        Table("raw.users", owner="ingest"),
        Table("stage.events", owner="etl").depends_on("raw.events"),
        Table("stage.users", owner="etl").depends_on("raw.users"),
        Table(
            "mart.sessions",
            owner="analytics",
            fields=[Field("session_id"), Field("duration", "int")],
            parameters=[Field("year"), Field("month")],
        ).depends_on("stage.events", "stage.users"),
        Table("mart.kpis", owner="analytics").depends_on("mart.sessions", "stage.events"),
    ]
    return InMemoryRepository(tables)


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def sample_factory(repository, executor, clock):
    services = []

    def _make(**kwargs) -> SampleService:
        cache = kwargs.pop("cache", KeyedResultCache(maxsize=10, ttl=60, timer=clock))
        service = SampleService(
            kwargs.pop("repository", repository),
            kwargs.pop("executor", executor),
            cache,
            **kwargs,
        )
        services.append(service)
        return service

    yield _make
    for service in services:
        service.close()


@pytest.fixture
def catalog(repository, sample_factory):
    return TableCatalog(repository, sample_factory())
