"""Custom exception hierarchy for tablegraph."""


class TableGraphError(Exception):
    """Base class for all tablegraph exceptions."""
    pass


class ConfigurationError(TableGraphError):
    """Raised when there is an issue with configuration parsing or values."""
    pass


class FetchError(TableGraphError):
    """Raised when edges for a node cannot be fetched during traversal."""
    pass


class TableNotFoundError(FetchError, LookupError):
    """Raised when a table with the given fqdn does not exist."""

    def __init__(self, fqdn: str):
        super().__init__(f"table '{fqdn}' not found")
        self.fqdn = fqdn


class CacheError(TableGraphError):
    """Raised when cache operations fail or a cache is misconfigured."""
    pass


class QueryError(TableGraphError):
    """Raised when a sample query cannot be executed."""
    pass
