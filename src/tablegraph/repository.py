"""Table lookup and persistence boundary."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from .exceptions import TableNotFoundError
from .model import CategoryObject, ParameterValue, Table, TableDependency, User

__all__ = [
    "TableRepository",
    "InMemoryRepository",
]


class TableRepository:
    """Base repository interface.

    Implementations back the catalog with persistent storage. Lookups that
    may legitimately miss return ``None``; :meth:`get_by_fqdn` turns a miss
    into :class:`TableNotFoundError`.
    """

    def find_by_fqdn(self, fqdn: str) -> Table | None:
        raise NotImplementedError

    def get_by_fqdn(self, fqdn: str) -> Table:
        table = self.find_by_fqdn(fqdn)
        if table is None:
            raise TableNotFoundError(fqdn)
        return table

    def save(self, table: Table) -> None:
        raise NotImplementedError

    def find_successors(self, fqdn: str) -> list[TableDependency]:
        """Return the edges of all tables depending on ``fqdn``."""
        raise NotImplementedError

    def find_top_by_view_count(self, limit: int) -> list[Table]:
        raise NotImplementedError

    def all_owners(self) -> set[str]:
        raise NotImplementedError

    def find_category_object(self, category_object_id: int) -> CategoryObject | None:
        raise NotImplementedError

    def find_user(self, username: str) -> User | None:
        raise NotImplementedError

    def find_user_by_fullname(self, fullname: str) -> User | None:
        raise NotImplementedError

    def save_user(self, user: User) -> None:
        raise NotImplementedError

    def find_parameter_values(self, fqdn: str) -> list[ParameterValue]:
        """Return the parameter values of all partitions of ``fqdn``."""
        raise NotImplementedError


class InMemoryRepository(TableRepository):
    """Thread-safe dictionary-backed repository."""

    def __init__(
        self,
        tables: Iterable[Table] = (),
        *,
        category_objects: Iterable[CategoryObject] = (),
        users: Iterable[User] = (),
        parameter_values: Iterable[ParameterValue] = (),
    ):
        self._lock = threading.RLock()
        self._tables: dict[str, Table] = {}
        self._category_objects = {co.id: co for co in category_objects}
        self._users = {u.username: u for u in users}
        self._parameter_values: list[ParameterValue] = list(parameter_values)
        for table in tables:
            self.save(table)

    def find_by_fqdn(self, fqdn: str) -> Table | None:
        with self._lock:
            return self._tables.get(fqdn)

    def save(self, table: Table) -> None:
        with self._lock:
            self._tables[table.fqdn] = table

    def find_successors(self, fqdn: str) -> list[TableDependency]:
        with self._lock:
            return [
                dep
                for table in self._tables.values()
                for dep in table.dependencies
                if dep.dependency_fqdn == fqdn
            ]

    def find_top_by_view_count(self, limit: int) -> list[Table]:
        with self._lock:
            # sorted() is stable, ties keep insertion order
            ranked = sorted(self._tables.values(), key=lambda t: t.view_count, reverse=True)
        return ranked[:limit]

    def all_owners(self) -> set[str]:
        with self._lock:
            return {t.owner for t in self._tables.values() if t.owner}

    def add_category_object(self, category_object: CategoryObject) -> None:
        with self._lock:
            self._category_objects[category_object.id] = category_object

    def find_category_object(self, category_object_id: int) -> CategoryObject | None:
        with self._lock:
            return self._category_objects.get(category_object_id)

    def find_user(self, username: str) -> User | None:
        with self._lock:
            return self._users.get(username)

    def find_user_by_fullname(self, fullname: str) -> User | None:
        with self._lock:
            for user in self._users.values():
                if user.fullname == fullname:
                    return user
        return None

    def save_user(self, user: User) -> None:
        with self._lock:
            self._users[user.username] = user

    def add_parameter_value(self, value: ParameterValue) -> None:
        with self._lock:
            self._parameter_values.append(value)

    def find_parameter_values(self, fqdn: str) -> list[ParameterValue]:
        with self._lock:
            return [pv for pv in self._parameter_values if pv.fqdn == fqdn]

    def __len__(self) -> int:
        with self._lock:
            return len(self._tables)

    def __contains__(self, fqdn: object) -> bool:
        with self._lock:
            return fqdn in self._tables
