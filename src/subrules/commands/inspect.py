"""Command: decode rule names."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from subrules.commands._base import RulesCommand

if TYPE_CHECKING:
    from subrules.commands._context import AppContext


@click.command(
    "inspect",
    cls=RulesCommand,
    examples="""\
  subrules inspect 1_v_1_0_0
  subrules inspect '$Default' Orders.Subscriber_0_1_0""",
)
@click.argument("names", nargs=-1, required=True)
@click.pass_obj
def inspect_cmd(app: AppContext, names: tuple[str, ...]) -> None:
    """Show the format and version encoded in each rule NAME."""
    app.emit(app.service.inspect_names(list(names)))
