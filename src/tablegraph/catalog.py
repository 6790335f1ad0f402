"""Table metadata service of the catalog."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import Future

from pydantic import validate_call

from .config import Config
from .graph import lineage_order, transitive_dependencies, transitive_successors
from .logger import logger
from .model import CategoryMap, CategoryObject, QueryResult, Table, TableDependency, User
from .repository import TableRepository
from .sample import QueryExecutor, SampleService

__all__ = ["TableCatalog"]

CATEGORY_OBJECTS_SUFFIX = "CategoryObjects"


class TableCatalog:
    """Query and edit table metadata stored in a :class:`TableRepository`.

    Mutators take the acting ``user`` name for logging and ignore unknown
    tables, returning ``False``. Sample queries are delegated to an optional
    :class:`SampleService`.
    """

    def __init__(
        self,
        repository: TableRepository,
        samples: SampleService | None = None,
    ):
        self.repository = repository
        self.samples = samples

    @classmethod
    def from_config(
        cls,
        config: Config | str | None,
        repository: TableRepository,
        executor: QueryExecutor | None = None,
    ) -> "TableCatalog":
        """Wire a catalog and, when ``executor`` is given, its sample service."""
        config = config if isinstance(config, Config) else Config(config)
        samples = (
            SampleService.from_config(config, repository, executor)
            if executor is not None
            else None
        )
        return cls(repository, samples)

    def close(self) -> None:
        if self.samples is not None:
            self.samples.close()

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def find_by_fqdn(self, fqdn: str | None) -> Table | None:
        if fqdn is None:
            return None
        return self.repository.find_by_fqdn(fqdn)

    def top_five_tables(self) -> list[Table]:
        return self.repository.find_top_by_view_count(5)

    def all_owners(self) -> set[str]:
        return self.repository.all_owners()

    def successors(self, table: Table) -> list[TableDependency]:
        return self.repository.find_successors(table.fqdn)

    def transitive_dependencies(self, table: Table) -> list[TableDependency]:
        return transitive_dependencies(self.repository, table.fqdn)

    def transitive_successors(self, table: Table) -> list[TableDependency]:
        return transitive_successors(self.repository, table.fqdn)

    def lineage(self, table: Table) -> list[str]:
        """Tables ``table`` is built from, in build order, ending with ``table``."""
        order = lineage_order(self.transitive_dependencies(table))
        return order or [table.fqdn]

    def table_taxonomies(self, table: Table) -> dict[str, CategoryMap]:
        """Group the table's category objects by taxonomy name."""
        taxonomies: dict[str, CategoryMap] = {}
        for category_object in table.category_objects:
            category = category_object.category
            category_map = taxonomies.setdefault(category.taxonomy.name, CategoryMap())
            category_map.add_category(category)
            category_map.add_category_object(category_object)
        return taxonomies

    def parameter_values(self, table: Table) -> dict[str, list[str]]:
        """Distinct values of each partition parameter of ``table``."""
        distinct = list(
            dict.fromkeys((pv.key, pv.value) for pv in self.repository.find_parameter_values(table.fqdn))
        )
        values: dict[str, list[str]] = {}
        for key, value in reversed(distinct):
            values.setdefault(key, []).append(value)
        return values

    def parameter_value_set(
        self, table: Table, url_path_prefix: str, next_parameter: str
    ) -> list[str]:
        """Values of ``next_parameter`` below ``url_path_prefix``, descending, without duplicates."""
        matches = [
            pv.value
            for pv in self.repository.find_parameter_values(table.fqdn)
            if pv.key == next_parameter and pv.url_path.startswith(url_path_prefix)
        ]
        return list(dict.fromkeys(sorted(matches, reverse=True)))

    def random_parameter_value(self, table: Table, parameter: str) -> str | None:
        """Value of ``parameter`` on the first partition of ``table``."""
        if not table.partitions:
            return None
        url_path = table.partitions[0]
        for pv in self.repository.find_parameter_values(table.fqdn):
            if pv.url_path == url_path and pv.key == parameter:
                return pv.value
        return None

    def get_sample(
        self, fqdn: str, params: Mapping[str, str] | None = None
    ) -> Future[QueryResult]:
        if self.samples is None:
            raise RuntimeError("No sample service configured. Pass an executor to from_config().")
        return self.samples.get_sample(fqdn, params)

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    @validate_call
    def set_person_responsible(self, fqdn: str, fullname: str, user: str) -> bool:
        table = self.repository.find_by_fqdn(fqdn)
        if table is None or table.person_responsible == fullname:
            return False
        registered = self.repository.find_user_by_fullname(fullname)
        if registered is not None:
            table.person_responsible = registered.fullname
        elif fullname:
            table.person_responsible = fullname
        else:
            return False
        self.repository.save(table)
        logger.info(
            "User '{}' changed responsible person for table '{}' to '{}'", user, fqdn, fullname
        )
        return True

    @validate_call
    def set_timestamp_field(
        self, fqdn: str, field: str, field_format: str, user: str
    ) -> bool:
        table = self.repository.find_by_fqdn(fqdn)
        if table is None or not field:
            return False
        table.timestamp_field = field
        if field_format:
            table.timestamp_field_format = field_format
        self.repository.save(table)
        logger.info(
            "User '{}' changed timestamp field for table '{}' to '{}' with format '{}'",
            user,
            fqdn,
            field,
            field_format,
        )
        return True

    @validate_call
    def toggle_favourite(self, fqdn: str, user: str) -> bool:
        """Add or remove ``fqdn`` from the user's favourites; return whether it is one now."""
        account = self.repository.find_user(user) or User(username=user, fullname=user)
        if fqdn in account.favourites:
            account.favourites.remove(fqdn)
            favourite = False
        else:
            account.favourites.append(fqdn)
            favourite = True
        self.repository.save_user(account)
        return favourite

    def increase_view_count(self, fqdn: str) -> int:
        table = self.repository.get_by_fqdn(fqdn)
        table.view_count += 1
        self.repository.save(table)
        return table.view_count

    @validate_call
    def set_tags(self, fqdn: str, tags: str | None, user: str) -> bool:
        table = self.repository.find_by_fqdn(fqdn)
        if table is None:
            return False
        table.tags = [tag for tag in (tags or "").split(",") if tag]
        self.repository.save(table)
        logger.info("User '{}' changed tags for table '{}' to '{}'", user, fqdn, tags or "")
        return True

    @validate_call
    def set_category_objects(
        self, fqdn: str, parameter_map: Mapping[str, Sequence[str]], user: str
    ) -> bool:
        """Replace the table's category objects.

        Every ``*CategoryObjects`` entry of ``parameter_map`` carries a
        comma-separated list of category object ids as its first value.
        Unknown ids are skipped.
        """
        table = self.repository.find_by_fqdn(fqdn)
        if table is None:
            return False

        selected: list[CategoryObject] = []
        for key, values in parameter_map.items():
            if not key.endswith(CATEGORY_OBJECTS_SUFFIX) or not values:
                continue
            for raw_id in values[0].split(","):
                if not raw_id:
                    continue
                if not raw_id.strip().isdigit():
                    logger.warning("ignoring invalid category object id {!r} for {}", raw_id, fqdn)
                    continue
                category_object = self.repository.find_category_object(int(raw_id))
                if category_object is not None and category_object not in selected:
                    selected.append(category_object)

        table.category_objects = selected
        self.repository.save(table)
        logger.info(
            "User '{}' changed category objects for table '{}' to '{}'",
            user,
            fqdn,
            ", ".join(co.name for co in selected),
        )
        return True
