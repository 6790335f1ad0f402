from .cache import Cache, KeyedResultCache, MemoryTTL
from .catalog import TableCatalog
from .config import Config
from .exceptions import (
    CacheError,
    ConfigurationError,
    FetchError,
    QueryError,
    TableGraphError,
    TableNotFoundError,
)
from .graph import (
    lineage_order,
    transitive_closure,
    transitive_dependencies,
    transitive_successors,
)
from .logger import logger, console
from .model import Direction, Field, QueryResult, Table, TableDependency
from .repository import InMemoryRepository, TableRepository
from .sample import QueryExecutor, SampleService

__all__ = [
    "Cache",
    "MemoryTTL",
    "KeyedResultCache",
    "TableCatalog",
    "Config",
    "TableGraphError",
    "ConfigurationError",
    "FetchError",
    "TableNotFoundError",
    "CacheError",
    "QueryError",
    "transitive_closure",
    "transitive_dependencies",
    "transitive_successors",
    "lineage_order",
    "Direction",
    "Field",
    "QueryResult",
    "Table",
    "TableDependency",
    "TableRepository",
    "InMemoryRepository",
    "QueryExecutor",
    "SampleService",
    "logger",
    "console",
]
