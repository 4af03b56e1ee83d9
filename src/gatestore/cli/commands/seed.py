"""gatestore-db seed / drop -- fill or empty the entity tables."""

from __future__ import annotations

import click
from rich.markup import escape

from gatestore.cli.commands import silent_option
from gatestore.errors import GatestoreError


@click.command()
@click.option("-r", "--random", "random_", is_flag=True,
              help="Also seed random entities (1000 per collection by default).")
@click.option("--number", default=1000, show_default=True, help="Random entities per collection.")
@silent_option
@click.argument("configuration", required=False)
@click.pass_context
def seed(ctx: click.Context, random_: bool, number: int, configuration: str | None) -> None:
    """Drop all entities, check the schema, then insert seed data.

    Every step is attempted even if an earlier one failed; each failure is
    reported and the command exits with code 1 at the end.
    """
    from gatestore.cli import _dao_session
    from gatestore.config import DEFAULT_CONFIGURATION_PATH

    with _dao_session(ctx, configuration or DEFAULT_CONFIGURATION_PATH) as (dao, logger):
        failed: list[str] = []
        steps = (
            ("drop", dao.drop),
            ("prepare", dao.prepare),
            ("seed", lambda: dao.seed(random=random_, number=number)),
        )
        for step, run in steps:
            try:
                run()
            except GatestoreError as e:
                logger.error(f"{step}: {escape(str(e))}")
                failed.append(step)

        if failed:
            logger.error(f"Seeding incomplete, failed steps: {', '.join(failed)}")
            raise SystemExit(1)
        logger.success("Populated")


@click.command()
@silent_option
@click.argument("configuration", required=False)
@click.pass_context
def drop(ctx: click.Context, configuration: str | None) -> None:
    """Delete every entity, keeping the schema."""
    from gatestore.cli import _dao_session
    from gatestore.config import DEFAULT_CONFIGURATION_PATH

    with _dao_session(ctx, configuration or DEFAULT_CONFIGURATION_PATH) as (dao, logger):
        dao.drop()
        logger.success("Dropped")
