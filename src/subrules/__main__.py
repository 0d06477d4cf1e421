"""Allow ``python -m subrules``."""

from subrules.cli import cli

cli()
