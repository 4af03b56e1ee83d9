"""Migration engine and the bundled per-backend migration scripts."""

from pathlib import Path

from gatestore.migrations.engine import BUNDLED_DIR, Migration, Migrations, load_migration, load_migrations


def bundled_path(database: str) -> Path:
    """Directory of the migrations shipped for a backend (e.g. ``sqlite``)."""
    return BUNDLED_DIR / database


__all__ = [
    "BUNDLED_DIR",
    "Migration",
    "Migrations",
    "bundled_path",
    "load_migration",
    "load_migrations",
]
