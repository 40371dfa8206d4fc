"""CLI entry point for envbind package.

Allows running via: python -m envbind
"""

from __future__ import annotations

from envbind.cli.main import cli

if __name__ == "__main__":
    cli()
