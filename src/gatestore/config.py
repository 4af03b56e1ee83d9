"""Configuration models and loading.

The configuration file is YAML::

    database: sqlite
    databases_available:
      sqlite:
        properties:
          url: sqlite:///gatestore.db
          keyspace: gatestore

``database`` selects which entry of ``databases_available`` is active.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

import yaml
from pydantic import BaseModel, ValidationError, model_validator

from gatestore.errors import ConfigurationError

if TYPE_CHECKING:
    from gatestore.dao.factory import DAOFactory

DEFAULT_CONFIGURATION_PATH = "config.dev/gatestore.yml"


class DatabaseProperties(BaseModel):
    """Connection settings for one backend.

    The whole model, as a dict, is the options mapping handed to migration
    scripts.
    """

    url: str = "sqlite://"
    keyspace: str = "gatestore"
    migrations_path: Optional[str] = None


class DatabaseSettings(BaseModel):
    properties: DatabaseProperties = DatabaseProperties()


class Configuration(BaseModel):
    """Top-level configuration."""

    database: str = "sqlite"
    databases_available: dict[str, DatabaseSettings] = {"sqlite": DatabaseSettings()}
    path: Optional[str] = None

    @model_validator(mode="after")
    def _database_is_available(self) -> Configuration:
        if self.database not in self.databases_available:
            raise ValueError(
                f"database '{self.database}' is not one of "
                f"{sorted(self.databases_available)}"
            )
        return self

    @property
    def dao_properties(self) -> DatabaseProperties:
        """Properties of the active backend."""
        return self.databases_available[self.database].properties

    def migration_options(self) -> dict:
        return self.dao_properties.model_dump()

    def migrations_directory(self) -> Path:
        """Where this backend's migrations live.

        A relative ``migrations_path`` is resolved against the directory of
        the configuration file.
        """
        from gatestore.migrations import bundled_path

        configured = self.dao_properties.migrations_path
        if configured is None:
            return bundled_path(self.database)
        directory = Path(configured)
        if not directory.is_absolute() and self.path is not None:
            directory = Path(self.path).parent / directory
        return directory


def load_configuration(path: str | Path = DEFAULT_CONFIGURATION_PATH) -> Configuration:
    """Read and validate a YAML configuration file.

    Raises ConfigurationError when the file is missing, is not valid YAML,
    or does not match the configuration models.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"No configuration file at {path}")
    try:
        with path.open(encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping")

    try:
        return Configuration(**{**data, "path": str(path)})
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc


def load_configuration_and_dao(path: str | Path = DEFAULT_CONFIGURATION_PATH) -> tuple[Configuration, DAOFactory]:
    """Load the configuration and build the DAO factory it describes."""
    from gatestore.dao.factory import DAOFactory

    configuration = load_configuration(path)
    return configuration, DAOFactory.from_configuration(configuration)
