"""tablegraph tutorial
===================

Walks through the dependency closure of a small warehouse, then serves
cached samples through a fake query executor.
"""

from __future__ import annotations

import time

from tablegraph import (
    Config,
    Field,
    InMemoryRepository,
    QueryExecutor,
    QueryResult,
    Table,
    TableCatalog,
)


# --------------------------------------------------------------
# A tiny warehouse
# --------------------------------------------------------------
repo = InMemoryRepository(
    [
        Table("raw.clicks", owner="ingest"),
        Table("raw.orders", owner="ingest"),
        Table("stage.clicks", owner="etl").depends_on("raw.clicks"),
        Table(
            "mart.funnel",
            owner="analytics",
            fields=[Field("step"), Field("users", "int")],
            parameters=[Field("day")],
        ).depends_on("stage.clicks", "raw.orders"),
    ]
)


class SlowExecutor(QueryExecutor):
    def execute_query(self, fqdn, fields, parameters, overrides=None):
        time.sleep(0.5)
        return QueryResult(header=tuple(fields), rows=(("visit", 100), ("buy", 7)))


def closures(catalog: TableCatalog) -> None:
    funnel = catalog.find_by_fqdn("mart.funnel")
    print("depends on:")
    for edge in catalog.transitive_dependencies(funnel):
        print("  ", edge)
    print("build order:", " -> ".join(catalog.lineage(funnel)))

    clicks = catalog.find_by_fqdn("raw.clicks")
    print("read by:", [e.fqdn for e in catalog.transitive_successors(clicks)])


def samples(catalog: TableCatalog) -> None:
    t0 = time.perf_counter()
    first = catalog.get_sample("mart.funnel").result()
    print(f"cold sample: {len(first)} rows in {time.perf_counter() - t0:.2f}s")

    t0 = time.perf_counter()
    catalog.get_sample("mart.funnel").result()
    print(f"warm sample in {time.perf_counter() - t0:.4f}s")

    t0 = time.perf_counter()
    catalog.get_sample("mart.funnel", {"day": "2024-01-01"}).result()
    print(f"filtered sample (never cached) in {time.perf_counter() - t0:.2f}s")


if __name__ == "__main__":
    config = Config({"sample": {"ttl": 600, "workers": 2}})
    catalog = TableCatalog.from_config(config, repo, SlowExecutor())
    try:
        closures(catalog)
        samples(catalog)
    finally:
        catalog.close()
