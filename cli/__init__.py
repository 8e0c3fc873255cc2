"""
CLI module for dotviz.

The command-line interface providing the graph and services commands.
"""

from cli.main import app

__all__ = ["app"]
