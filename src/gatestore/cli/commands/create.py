"""gatestore-db create -- scaffold a new migration."""

from __future__ import annotations

import click
from rich.markup import escape

from gatestore.cli.commands import silent_option


@click.command()
@click.option("-n", "--name", default="new_migration", show_default=True, help="Name of the migration.")
@silent_option
@click.argument("configuration", required=False)
@click.pass_context
def create(ctx: click.Context, name: str, configuration: str | None) -> None:
    """Create an empty migration after every existing one."""
    from gatestore.cli import _dao_session
    from gatestore.config import DEFAULT_CONFIGURATION_PATH

    with _dao_session(ctx, configuration or DEFAULT_CONFIGURATION_PATH) as (dao, logger):
        path = dao.migrations.create(name)
        logger.success(f"New migration: {escape(str(path))}")
