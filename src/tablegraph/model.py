"""Catalog records: tables, dependency edges, taxonomy and query results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

__all__ = [
    "Direction",
    "TableDependency",
    "Field",
    "Table",
    "Taxonomy",
    "Category",
    "CategoryObject",
    "CategoryMap",
    "ParameterValue",
    "User",
    "QueryResult",
]


class Direction(str, Enum):
    """Direction of a dependency traversal."""

    DEPENDS_ON = "depends_on"  # walk towards the tables a table reads from
    SUCCESSOR_OF = "successor_of"  # walk towards the tables that read from it


@dataclass(frozen=True)
class TableDependency:
    """Directed edge: ``fqdn`` depends on ``dependency_fqdn``."""

    fqdn: str
    dependency_fqdn: str

    def target(self, direction: Direction) -> str:
        """Return the endpoint the traversal continues from."""
        if direction is Direction.DEPENDS_ON:
            return self.dependency_fqdn
        return self.fqdn

    def __str__(self) -> str:
        return f"{self.fqdn} -> {self.dependency_fqdn}"


@dataclass(frozen=True)
class Field:
    name: str
    type: str = "string"
    description: str = ""


@dataclass
class Table:
    """A Hive table or view known to the catalog.

    ``parameters`` are the partitioning fields; ``fields`` the regular
    columns. ``partitions`` holds the url paths of the materialized views of
    the table, in internal view order.
    """

    fqdn: str
    owner: str | None = None
    fields: list[Field] = field(default_factory=list)
    parameters: list[Field] = field(default_factory=list)
    dependencies: list[TableDependency] = field(default_factory=list)
    partitions: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    category_objects: list["CategoryObject"] = field(default_factory=list)
    person_responsible: str | None = None
    timestamp_field: str | None = None
    timestamp_field_format: str | None = None
    view_count: int = 0

    @property
    def fields_comma_delimited(self) -> str:
        return ",".join(f.name for f in self.fields)

    def depends_on(self, *fqdns: str) -> "Table":
        """Append dependency edges to ``fqdns`` and return ``self``."""
        self.dependencies.extend(TableDependency(self.fqdn, d) for d in fqdns)
        return self


@dataclass(frozen=True)
class Taxonomy:
    name: str


@dataclass(frozen=True)
class Category:
    name: str
    taxonomy: Taxonomy


@dataclass(frozen=True)
class CategoryObject:
    id: int
    name: str
    category: Category


@dataclass
class CategoryMap:
    """Categories and category objects of one taxonomy attached to a table."""

    categories: list[Category] = field(default_factory=list)
    category_objects: list[CategoryObject] = field(default_factory=list)

    def add_category(self, category: Category) -> None:
        if category not in self.categories:
            self.categories.append(category)

    def add_category_object(self, category_object: CategoryObject) -> None:
        if category_object not in self.category_objects:
            self.category_objects.append(category_object)

    @property
    def categories_comma_delimited(self) -> str:
        return ", ".join(c.name for c in self.categories)

    @property
    def category_objects_comma_delimited(self) -> str:
        return ", ".join(co.name for co in self.category_objects)


@dataclass(frozen=True)
class ParameterValue:
    """Value of one partition parameter for one materialized view."""

    fqdn: str
    url_path: str
    key: str
    value: str


@dataclass
class User:
    username: str
    fullname: str
    favourites: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QueryResult:
    """Tabular result of a sample query."""

    header: tuple[str, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.rows)
