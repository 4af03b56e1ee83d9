"""gatestore-db subcommands."""

from __future__ import annotations

import click


def _silence(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if value:
        ctx.obj["logger"].silent = True


# Also accepted after the command name: ``gatestore-db migrate -s``.
silent_option = click.option(
    "-s", "--silent", is_flag=True, expose_value=False, callback=_silence, help="No output."
)
