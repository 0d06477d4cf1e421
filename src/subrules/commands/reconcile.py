"""Command: reconcile a deployed-rule snapshot onto the desired rules."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from subrules.commands._base import RulesCommand

if TYPE_CHECKING:
    from subrules.commands._context import AppContext


@click.command(
    cls=RulesCommand,
    examples="""\
  subrules reconcile --deployed rules.json Sales.Orders.Handler Sales.OrderPlaced
  subrules reconcile --deployed rules.json --write Sales.Orders.Handler Sales.OrderPlaced
  subrules --version-override 2.0.0 -v reconcile --deployed rules.json Sales.Orders.Handler A B""",
)
@click.argument("handler")
@click.argument("message_types", nargs=-1, required=True)
@click.option(
    "--deployed",
    "deployed",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON snapshot of the currently deployed rules (missing file = none).",
)
@click.option("--write", is_flag=True, help="Save the converged rules back to the snapshot.")
@click.option(
    "--omit-specific-subscriber/--specific-subscriber",
    "omit_specific_subscriber",
    default=None,
    help="Drop (or keep) the specific-subscriber predicate. Defaults to config.",
)
@click.pass_obj
def reconcile(
    app: AppContext,
    handler: str,
    message_types: tuple[str, ...],
    deployed: Path,
    write: bool,
    omit_specific_subscriber: bool | None,
) -> None:
    """Show (and optionally apply) the rule changes for HANDLER."""
    app.emit(
        app.service.reconcile(
            handler,
            list(message_types),
            deployed,
            write=write,
            omit_specific_subscriber_filter=omit_specific_subscriber,
        )
    )
