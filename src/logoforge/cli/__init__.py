"""
Command-line interface for logoforge.

This package contains CLI implementations using Click.
Uses only the public API: from logoforge import ...
"""

from logoforge.cli.commands import cli, main

__all__ = ["cli", "main"]
