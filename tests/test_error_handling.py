import pytest

from tablegraph import KeyedResultCache, QueryError, logger

from conftest import RecordingExecutor


def test_loader_failure_is_logged(capsys):
    cache = KeyedResultCache(maxsize=2, ttl=60)

    def fail():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        cache.get("warehouse.orders", fail)
    captured = capsys.readouterr().out
    assert "warehouse.orders" in captured
    assert "failed" in captured


def test_query_failure_is_logged(sample_factory):
    messages = []
    sink = logger.add(messages.append, level="ERROR", format="{message}")
    try:
        service = sample_factory(executor=RecordingExecutor(fail=TimeoutError("slow")))
        with pytest.raises(QueryError, match="mart.sessions"):
            service.sample("mart.sessions")
    finally:
        logger.remove(sink)
    assert any("sample query for mart.sessions failed" in m for m in messages)


def test_catalog_mutation_is_logged(catalog):
    messages = []
    sink = logger.add(messages.append, level="INFO", format="{message}")
    try:
        catalog.set_tags("raw.events", "pii", "alice")
    finally:
        logger.remove(sink)
    assert any("User 'alice' changed tags for table 'raw.events' to 'pii'" in m for m in messages)
