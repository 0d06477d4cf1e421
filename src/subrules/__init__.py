"""subrules — subscription filter rule generation and reconciliation."""

__version__ = "0.1.0"
