"""gatestore-db -- database management for the Gatestore DAO.

This module is NEVER imported from gatestore/__init__.py.
It is only loaded via the ``gatestore-db`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Sequence

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install gatestore[cli]"
    ) from None

from rich.markup import escape

from gatestore.cli.formatting import Logger
from gatestore.errors import GatestoreError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from gatestore.dao.factory import DAOFactory


@click.group()
@click.option("-s", "--silent", is_flag=True, help="No output.")
@click.pass_context
def cli(ctx: click.Context, silent: bool) -> None:
    """Manage the Gatestore database: migrations, seeding, and cleanup."""
    ctx.ensure_object(dict)
    ctx.obj["logger"] = Logger(silent=silent)


def get_logger(ctx: click.Context) -> Logger:
    return ctx.obj["logger"]


@contextmanager
def _dao_session(ctx: click.Context, configuration: str) -> Iterator[tuple[DAOFactory, Logger]]:
    """Load configuration and DAO, yield (dao, logger), and close the DAO.

    Gatestore errors are reported through the logger and exit with code 1.
    """
    from gatestore.config import load_configuration_and_dao

    logger = get_logger(ctx)
    try:
        _, dao = load_configuration_and_dao(configuration)
        try:
            yield dao, logger
        finally:
            dao.close()
    except GatestoreError as e:
        logger.error(escape(str(e)))
        raise SystemExit(1) from None


def main(argv: Sequence[str] | None = None) -> None:
    """Console entry point. Any argument-parse failure exits with code 1."""
    try:
        cli.main(args=argv, prog_name="gatestore-db", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        raise SystemExit(1) from None
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from gatestore.cli.commands.create import create  # noqa: E402
from gatestore.cli.commands.migrate import migrate, reset, rollback  # noqa: E402
from gatestore.cli.commands.seed import drop, seed  # noqa: E402

cli.add_command(create)
cli.add_command(migrate)
cli.add_command(rollback)
cli.add_command(reset)
cli.add_command(seed)
cli.add_command(drop)
