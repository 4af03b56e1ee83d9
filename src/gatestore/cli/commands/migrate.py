"""gatestore-db migrate / rollback / reset -- move the schema between versions."""

from __future__ import annotations

import click

from gatestore.cli.commands import silent_option
from gatestore.cli.formatting import yellow


@click.command()
@silent_option
@click.argument("configuration", required=False)
@click.pass_context
def migrate(ctx: click.Context, configuration: str | None) -> None:
    """Apply every pending migration, in order."""
    from gatestore.cli import _dao_session
    from gatestore.config import DEFAULT_CONFIGURATION_PATH

    with _dao_session(ctx, configuration or DEFAULT_CONFIGURATION_PATH) as (dao, logger):
        logger.log(f"Migrating {yellow(dao.type)}")
        applied = dao.migrate(lambda m: logger.success(f"Migrated up to: {yellow(m.name)}"))
        if not applied:
            logger.log("Schema is up to date")


@click.command()
@silent_option
@click.argument("configuration", required=False)
@click.pass_context
def rollback(ctx: click.Context, configuration: str | None) -> None:
    """Roll back the most recently applied migration."""
    from gatestore.cli import _dao_session
    from gatestore.config import DEFAULT_CONFIGURATION_PATH

    with _dao_session(ctx, configuration or DEFAULT_CONFIGURATION_PATH) as (dao, logger):
        logger.log(f"Rolling back {yellow(dao.type)}")
        migration = dao.rollback()
        if migration is None:
            logger.log("No migration to roll back")
        else:
            logger.success(f"Rolled back: {yellow(migration.name)}")


@click.command()
@silent_option
@click.argument("configuration", required=False)
@click.pass_context
def reset(ctx: click.Context, configuration: str | None) -> None:
    """Roll back every applied migration."""
    from gatestore.cli import _dao_session
    from gatestore.config import DEFAULT_CONFIGURATION_PATH

    with _dao_session(ctx, configuration or DEFAULT_CONFIGURATION_PATH) as (dao, logger):
        logger.log(f"Resetting {yellow(dao.type)}")
        dao.reset(lambda m: logger.success(f"Rolled back: {yellow(m.name)}"))
