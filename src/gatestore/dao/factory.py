"""DAO factory: one store, its repositories, and its migration engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping

from gatestore.dao.entities import (
    create_account_repository,
    create_api_repository,
    create_application_repository,
)
from gatestore.dao.faker import Faker
from gatestore.dao.plugins import create_plugin_repository
from gatestore.errors import StorageError
from gatestore.migrations import Migrations, bundled_path
from gatestore.plugins import default_registry
from gatestore.storage.engine import Store, create_store_engine
from gatestore.storage.statements import Statement

if TYPE_CHECKING:
    from gatestore.config import Configuration
    from gatestore.dao.repository import Repository
    from gatestore.migrations.engine import Migration, StepCallback
    from gatestore.schema.registry import SchemaRegistry

logger = logging.getLogger(__name__)


class DAOFactory:
    """Entry point to the data access layer for one backend.

    Example::

        factory = DAOFactory(Store(create_store_engine(":memory:")))
        factory.migrate()
        api = factory.apis.insert({"name": "x", "public_dns": "x.com",
                                   "target_url": "http://x.com"})
    """

    def __init__(
        self,
        store: Store,
        options: Mapping[str, Any] | None = None,
        *,
        database: str = "sqlite",
        registry: SchemaRegistry | None = None,
        migrations_directory: str | Path | None = None,
    ) -> None:
        self.store = store
        self.type = database
        self.registry = registry if registry is not None else default_registry()

        self.accounts = create_account_repository(store)
        self.applications = create_application_repository(store)
        self.apis = create_api_repository(store)
        self.plugins = create_plugin_repository(store, self.registry)

        directory = migrations_directory if migrations_directory is not None else bundled_path(database)
        self.migrations = Migrations.from_directory(store, directory, options)

    @classmethod
    def from_configuration(cls, configuration: Configuration) -> DAOFactory:
        properties = configuration.dao_properties
        store = Store(create_store_engine(url=properties.url))
        return cls(
            store,
            configuration.migration_options(),
            database=configuration.database,
            migrations_directory=configuration.migrations_directory(),
        )

    @property
    def repositories(self) -> dict[str, Repository]:
        """Repositories by entity name, referenced entities first."""
        return {
            "accounts": self.accounts,
            "applications": self.applications,
            "apis": self.apis,
            "plugins": self.plugins,
        }

    # ------------------------------------------------------------------
    # Migrations
    # ------------------------------------------------------------------

    def migrate(self, on_step: StepCallback | None = None) -> list[Migration]:
        return self.migrations.migrate(on_step)

    def rollback(self, on_step: StepCallback | None = None) -> Migration | None:
        return self.migrations.rollback(on_step)

    def reset(self, on_step: StepCallback | None = None) -> list[Migration]:
        return self.migrations.reset(on_step)

    # ------------------------------------------------------------------
    # Data management
    # ------------------------------------------------------------------

    def drop(self) -> None:
        """Delete every row of every entity table. Tables are kept."""
        for name in reversed(list(self.repositories)):
            self.store.execute_write(Statement(f"DELETE FROM {name};"))
        logger.info("Dropped all entities")

    def prepare(self) -> None:
        """Check that every entity table exists.

        Raises StorageError naming the missing tables, typically because
        migrations have not been run.
        """
        existing = set(self.store.table_names())
        missing = [name for name in self.repositories if name not in existing]
        if missing:
            raise StorageError(f"Missing tables: {', '.join(missing)}. Run migrations first.")

    def seed(self, random: bool = False, number: int = 1000) -> dict[str, int]:
        """Insert fixture data, plus ``number`` random entities per collection."""
        return Faker(self).seed(random=random, amount=number)

    def close(self) -> None:
        self.store.close()
