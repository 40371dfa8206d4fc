"""Command-line interface for envbind."""

from __future__ import annotations

from envbind.cli.main import cli

__all__ = ["cli"]
