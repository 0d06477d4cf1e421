"""Command: generate the desired rules for a handler."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from subrules.commands._base import RulesCommand

if TYPE_CHECKING:
    from subrules.commands._context import AppContext


@click.command(
    cls=RulesCommand,
    examples="""\
  subrules generate Sales.Orders.Handler Sales.OrderPlaced Sales.OrderCancelled
  subrules --subscriber Billing generate Sales.Orders.Handler Sales.OrderPlaced
  subrules --json -v generate --omit-specific-subscriber Sales.Orders.Handler Sales.OrderPlaced""",
)
@click.argument("handler")
@click.argument("message_types", nargs=-1, required=True)
@click.option(
    "--omit-specific-subscriber/--specific-subscriber",
    "omit_specific_subscriber",
    default=None,
    help="Drop (or keep) the specific-subscriber predicate. Defaults to config.",
)
@click.pass_obj
def generate(
    app: AppContext,
    handler: str,
    message_types: tuple[str, ...],
    omit_specific_subscriber: bool | None,
) -> None:
    """Generate filter rules for HANDLER covering MESSAGE_TYPES."""
    app.emit(
        app.service.generate(
            handler,
            list(message_types),
            omit_specific_subscriber_filter=omit_specific_subscriber,
        )
    )
