from concurrent.futures import ThreadPoolExecutor

import pytest

from tablegraph import (
    Config,
    InMemoryRepository,
    QueryError,
    SampleService,
    TableNotFoundError,
)

from conftest import RecordingExecutor


def test_sample_is_cached(sample_factory, executor):
    service = sample_factory()
    first = service.get_sample("mart.sessions").result(timeout=5)
    second = service.get_sample("mart.sessions").result(timeout=5)
    assert first is second
    assert first.header == ("session_id", "duration")
    assert executor.calls == [
        ("mart.sessions", ("session_id", "duration"), ("year", "month"), None)
    ]


def test_parameterized_sample_bypasses_cache(sample_factory, executor):
    service = sample_factory()
    params = {"year": "2024"}
    a = service.get_sample("mart.sessions", params).result(timeout=5)
    b = service.get_sample("mart.sessions", params).result(timeout=5)
    assert a != b
    assert len(executor.calls) == 2
    assert executor.calls[0][3] == {"year": "2024"}
    assert "mart.sessions" not in service.cache


def test_empty_params_use_cache(sample_factory, executor):
    service = sample_factory()
    service.get_sample("mart.sessions", {}).result(timeout=5)
    service.get_sample("mart.sessions").result(timeout=5)
    assert len(executor.calls) == 1


def test_sample_expires(sample_factory, executor, clock):
    service = sample_factory()
    service.sample("mart.sessions")
    clock.advance(61)
    service.sample("mart.sessions")
    assert len(executor.calls) == 2


def test_refresh_recomputes(sample_factory, executor):
    service = sample_factory()
    first = service.sample("mart.sessions")
    second = service.refresh("mart.sessions").result(timeout=5)
    assert first.rows != second.rows
    assert service.sample("mart.sessions") is second


def test_unknown_table(sample_factory, executor):
    service = sample_factory()
    fut = service.get_sample("nope.nope")
    with pytest.raises(TableNotFoundError):
        fut.result(timeout=5)
    assert executor.calls == []


def test_executor_failure_is_wrapped_and_not_cached(sample_factory):
    failing = RecordingExecutor(fail=ConnectionError("metastore down"))
    service = sample_factory(executor=failing)
    with pytest.raises(QueryError) as exc:
        service.get_sample("mart.sessions").result(timeout=5)
    assert isinstance(exc.value.__cause__, ConnectionError)
    assert "mart.sessions" not in service.cache

    failing.fail = None
    assert service.sample("mart.sessions").ok
    assert len(failing.calls) == 2


def test_shared_pool_not_shut_down(repository, executor):
    with ThreadPoolExecutor(max_workers=1) as pool:
        with SampleService(repository, executor, pool=pool) as service:
            service.get_sample("mart.sessions").result(timeout=5)
        assert pool.submit(lambda: 1).result(timeout=5) == 1


def test_from_config(executor):
    repo = InMemoryRepository()
    config = Config({"sample": {"maxsize": 7, "ttl": 5, "workers": 1}})
    service = SampleService.from_config(config, repo, executor)
    try:
        assert service.cache.maxsize == 7
    finally:
        service.close()
