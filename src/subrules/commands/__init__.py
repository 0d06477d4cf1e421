"""Subcommand modules for subrules.

Provides register_commands() which uses deferred imports to keep
``subrules --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from subrules.commands.generate import generate
    from subrules.commands.inspect import inspect_cmd
    from subrules.commands.reconcile import reconcile

    cli.add_command(generate)
    cli.add_command(reconcile)
    cli.add_command(inspect_cmd)
