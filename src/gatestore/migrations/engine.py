"""Versioned migration engine.

Migrations are totally ordered by name. The ledger of applied migrations
must always be a prefix of that order: migrate() applies pending migrations
in order and stops at the first failure, rollback() undoes exactly the most
recent one, reset() rolls back until nothing is applied.

Scripts are opaque text produced by each migration's up/down functions from
the environment options; the engine only sequences and executes them.

Concurrent migrate/rollback runs against the same ledger are not safe. Run a
single migration process at a time.
"""

from __future__ import annotations

import importlib.util
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from gatestore.errors import MigrationError, StorageError
from gatestore.migrations.ledger import Ledger

if TYPE_CHECKING:
    from gatestore.storage.engine import Store

logger = logging.getLogger(__name__)

ScriptFn = Callable[[Mapping[str, Any]], str]
StepCallback = Callable[["Migration"], None]

BUNDLED_DIR = Path(__file__).parent

PREFIX_FORMAT = "%Y-%m-%d-%H%M%S"
_PREFIX_LEN = len("2015-01-12-175310")
_NAME_RE = re.compile(r"^[A-Za-z0-9_]+$")

SCAFFOLD = '''"""Migration {name}."""


def up(options):
    return """
    """


def down(options):
    return """
    """
'''


@dataclass(frozen=True)
class Migration:
    """A named pair of forward and reverse script producers."""

    name: str
    up: ScriptFn
    down: ScriptFn


def load_migration(path: Path) -> Migration:
    """Load one migration file. Its stem is the migration name."""
    module_name = "gatestore_migration_" + re.sub(r"\W", "_", path.stem)
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise MigrationError(f"Cannot load migration file: {path}", migration=path.stem)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    up = getattr(module, "up", None)
    down = getattr(module, "down", None)
    if not callable(up) or not callable(down):
        raise MigrationError(
            f"Migration {path.stem} must define up(options) and down(options)",
            migration=path.stem,
        )
    return Migration(name=path.stem, up=up, down=down)


def load_migrations(directory: Path) -> list[Migration]:
    """Load every migration file in directory, ordered by name."""
    if not directory.is_dir():
        return []
    paths = [p for p in directory.glob("*.py") if not p.name.startswith("_")]
    return sorted((load_migration(p) for p in paths), key=lambda m: m.name)


class Migrations:
    """Applies, rolls back, and scaffolds migrations for one store."""

    def __init__(
        self,
        store: Store,
        migrations: Sequence[Migration],
        options: Mapping[str, Any] | None = None,
        *,
        directory: Path | None = None,
    ) -> None:
        names = [m.name for m in migrations]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate migration names in {names}")
        self.store = store
        self.options = dict(options or {})
        self.directory = directory
        self._migrations = sorted(migrations, key=lambda m: m.name)
        self._ledger = Ledger(store.engine)

    @classmethod
    def from_directory(
        cls,
        store: Store,
        directory: str | Path,
        options: Mapping[str, Any] | None = None,
    ) -> Migrations:
        directory = Path(directory)
        return cls(store, load_migrations(directory), options, directory=directory)

    @property
    def migrations(self) -> list[Migration]:
        return list(self._migrations)

    def applied(self) -> list[str]:
        """Names of applied migrations, oldest first."""
        applied = self._ledger.applied()
        self._check_ledger(applied)
        return applied

    def pending(self) -> list[Migration]:
        return self._migrations[len(self.applied()):]

    def migrate(self, on_step: StepCallback | None = None) -> list[Migration]:
        """Apply every pending migration in order.

        Returns the migrations applied by this call (empty when up to date).

        Raises:
            MigrationError: a forward script failed. That migration is not
                recorded as applied and later ones are not attempted.
        """
        done: list[Migration] = []
        for migration in self.pending():
            try:
                self.store.execute_script(migration.up(self.options))
            except Exception as exc:
                raise MigrationError(
                    f"Migration {migration.name} failed: {exc}",
                    migration=migration.name,
                    applied=[m.name for m in done],
                ) from exc
            try:
                self._ledger.append(migration.name)
            except StorageError as exc:
                raise MigrationError(
                    f"Migration {migration.name} ran but could not be recorded as applied: {exc}",
                    migration=migration.name,
                    applied=[m.name for m in done],
                ) from exc
            logger.info("Migrated up to: %s", migration.name)
            done.append(migration)
            if on_step is not None:
                on_step(migration)
        return done

    def rollback(self, on_step: StepCallback | None = None) -> Migration | None:
        """Undo the most recently applied migration.

        Returns the rolled back migration, or None when nothing is applied.
        """
        applied = self.applied()
        if not applied:
            return None

        migration = self._by_name(applied[-1])
        try:
            self.store.execute_script(migration.down(self.options))
        except Exception as exc:
            raise MigrationError(
                f"Rollback of {migration.name} failed: {exc}",
                migration=migration.name,
            ) from exc
        try:
            self._ledger.remove(migration.name)
        except StorageError as exc:
            raise MigrationError(
                f"Migration {migration.name} was rolled back but is still recorded as applied: {exc}",
                migration=migration.name,
            ) from exc
        logger.info("Rolled back: %s", migration.name)
        if on_step is not None:
            on_step(migration)
        return migration

    def reset(self, on_step: StepCallback | None = None) -> list[Migration]:
        """Roll back one migration at a time until none is applied."""
        undone: list[Migration] = []
        while True:
            migration = self.rollback(on_step)
            if migration is None:
                return undone
            undone.append(migration)

    def create(self, name: str, now: datetime | None = None) -> Path:
        """Write an empty migration file named ``<timestamp>_<name>``.

        The timestamp is moved forward when needed so the new migration sorts
        after every existing one. Returns the path written.

        The bundled migrations directory is part of the installed package and
        is never written to; configure ``migrations_path`` instead.
        """
        if self.directory is None:
            raise MigrationError("No migrations directory configured")
        if self.directory.resolve().is_relative_to(BUNDLED_DIR.resolve()):
            raise MigrationError(
                f"Refusing to write into the bundled migrations at {self.directory}: "
                "set migrations_path in the configuration"
            )
        if not _NAME_RE.match(name):
            raise MigrationError(f"Invalid migration name '{name}': use letters, digits and '_'")

        stamp = now or datetime.now()
        if self._migrations:
            last = self._migrations[-1].name[:_PREFIX_LEN]
            try:
                last_stamp = datetime.strptime(last, PREFIX_FORMAT)
            except ValueError:
                last_stamp = None
            if last_stamp is not None and stamp <= last_stamp:
                stamp = last_stamp + timedelta(seconds=1)

        full_name = f"{stamp.strftime(PREFIX_FORMAT)}_{name}"
        path = self.directory / f"{full_name}.py"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(SCAFFOLD.format(name=full_name), encoding="utf-8")
        except OSError as exc:
            raise MigrationError(f"Cannot write migration {path}: {exc}", migration=full_name) from exc

        self._migrations.append(load_migration(path))
        self._migrations.sort(key=lambda m: m.name)
        logger.info("New migration: %s", path)
        return path

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _by_name(self, name: str) -> Migration:
        for migration in self._migrations:
            if migration.name == name:
                return migration
        raise MigrationError(f"Applied migration {name} is unknown", migration=name)

    def _check_ledger(self, applied: list[str]) -> None:
        names = [m.name for m in self._migrations]
        for index, name in enumerate(applied):
            if name not in names:
                raise MigrationError(f"Applied migration {name} is unknown", migration=name)
            if names[index] != name:
                raise MigrationError(
                    f"Migration {names[index]} sorts before applied migration {name} "
                    f"but was never applied",
                    migration=names[index],
                )
