"""CLI utility functions for envbind.

This module provides output formatting, nested lookups and status messages
for the CLI.
"""

from __future__ import annotations

import json
import sys
from io import StringIO
from typing import Literal

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envbind.api import Envfile
from envbind.config.options import CodecOptions
from envbind.value import Value

# Type alias for nested string data (recursive type)
type NestedStr = str | dict[str, NestedStr]

console = Console()
err_console = Console(stderr=True)


def get_envfile(ctx: click.Context) -> Envfile:
    """Build an :class:`Envfile` from the options stored on the CLI context.

    Parameters
    ----------
    ctx : click.Context
        Current click context.

    Returns
    -------
    Envfile
        Reader/writer configured from global options.
    """
    options: CodecOptions = ctx.obj["options"]
    return Envfile(options)


def format_output(
    value: Value,
    format_type: Literal["env", "yaml", "json", "table"],
    envfile: Envfile,
) -> str:
    """Format a value for CLI output.

    Parameters
    ----------
    value : Value
        Value to format.
    format_type : {"env", "yaml", "json", "table"}
        Output format type.
    envfile : Envfile
        Writer used for the ``env`` format.

    Returns
    -------
    str
        Formatted output string.

    Raises
    ------
    ValueError
        If format_type is invalid.
    """
    data = value.to_dict()
    if format_type == "env":
        return envfile.to_string(value)
    elif format_type == "yaml":
        return yaml.dump(data, default_flow_style=False, sort_keys=False)
    elif format_type == "json":
        return json.dumps(data, indent=2)
    elif format_type == "table":
        return _dict_to_table(data)
    else:
        raise ValueError(f"Invalid format type: {format_type}")


def _dict_to_table(data: dict[str, NestedStr], title: str | None = None) -> str:
    """Convert dictionary to rich table string.

    Parameters
    ----------
    data : dict[str, NestedStr]
        Dictionary to convert.
    title : str | None
        Optional table title.

    Returns
    -------
    str
        Rendered table as string.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Key", style="yellow", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in data.items():
        if isinstance(value, dict):
            value_str = _format_nested_dict(value)
        else:
            value_str = value
        table.add_row(escape(key), escape(value_str))

    # Capture table output
    string_io = StringIO()
    temp_console = Console(file=string_io, force_terminal=True, width=120)
    temp_console.print(table)
    return string_io.getvalue()


def _format_nested_dict(data: dict[str, NestedStr], indent: int = 0) -> str:
    lines: list[str] = []
    for key, value in data.items():
        prefix = "  " * indent
        if isinstance(value, dict):
            lines.append(f"{prefix}{key}:")
            lines.append(_format_nested_dict(value, indent + 1))
        else:
            lines.append(f"{prefix}{key}: {value}")
    return "\n".join(lines)


def get_nested_value(value: Value, key_path: str) -> str | Value:
    """Get a nested entry using dot notation.

    Parameters
    ----------
    value : Value
        Value to search.
    key_path : str
        Dot-separated key path (e.g., "db.host").

    Returns
    -------
    str | Value
        Entry at key path.

    Raises
    ------
    KeyError
        If key path doesn't exist.

    Examples
    --------
    >>> get_nested_value(Value({"db": {"host": "localhost"}}), "db.host")
    'localhost'
    """
    current: str | Value = value
    for key in key_path.split("."):
        if not isinstance(current, Value):
            raise KeyError(
                f"Cannot access key '{key}' in scalar value at path '{key_path}'"
            )
        if key not in current:
            raise KeyError(f"Key '{key}' not found in path '{key_path}'")
        current = current[key]
    return current


def print_error(message: str, exit_code: int = 1) -> None:
    """Print error message and exit.

    Parameters
    ----------
    message : str
        Error message to display.
    exit_code : int
        Exit code (default: 1). Pass 0 to not exit.
    """
    err_console.print(
        f"[red]✗ Error:[/red] {escape(message)}", highlight=False, soft_wrap=True
    )
    if exit_code != 0:
        sys.exit(exit_code)


def print_success(message: str) -> None:
    """Print success message.

    Parameters
    ----------
    message : str
        Success message to display.
    """
    console.print(
        f"[green]✓ {escape(message)}[/green]", highlight=False, soft_wrap=True
    )


def print_info(message: str) -> None:
    """Print info message.

    Parameters
    ----------
    message : str
        Info message to display.
    """
    err_console.print(
        f"[blue]ℹ Info:[/blue] {escape(message)}", highlight=False, soft_wrap=True
    )
