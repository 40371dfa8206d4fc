"""Main CLI entry point for envbind.

This module provides the command group and the commands for inspecting,
checking and converting environment files.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from envbind import __version__
from envbind.cli.utils import (
    format_output,
    get_envfile,
    get_nested_value,
    print_error,
    print_info,
    print_success,
)
from envbind.codec import parse
from envbind.config import (
    CodecOptions,
    LoggingConfig,
    configure_logging,
    load_options_from_env,
)
from envbind.errors import EnvbindError
from envbind.value import Value

FORMATS = ["env", "yaml", "json", "table"]


@click.group()
@click.version_option(version=__version__, prog_name="envbind")
@click.option(
    "--separator",
    "-s",
    type=str,
    default=None,
    help="Nested key separator (default: __ or ENVBIND_SEPARATOR)",
)
@click.option(
    "--prefix",
    "-p",
    type=str,
    default=None,
    help="Only read keys with this prefix, and write keys with it",
)
@click.option(
    "--no-preserve-order",
    is_flag=True,
    default=False,
    help="Sort keys instead of keeping file order",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Suppress all output except errors",
)
@click.pass_context
def cli(
    ctx: click.Context,
    separator: str | None,
    prefix: str | None,
    no_preserve_order: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    r"""Read, check and convert environment files.

    \b
    Examples:
        # Show a .env file as YAML
        $ envbind show .env --format yaml

        # Check a file for syntax errors
        $ envbind check .env

        # Show APP_-prefixed process variables
        $ envbind --prefix APP_ env

        # Turn a YAML document into a .env file
        $ envbind convert config.yaml --output .env
    """
    level = "DEBUG" if verbose else "ERROR" if quiet else "WARNING"
    configure_logging(LoggingConfig(level=level))

    overrides: dict[str, Any] = {}
    if separator is not None:
        overrides["separator"] = separator
    if prefix is not None:
        overrides["prefix"] = prefix
    if no_preserve_order:
        overrides["preserve_order"] = False

    try:
        base = load_options_from_env()
        options = CodecOptions(**{**base.model_dump(), **overrides})
    except (EnvbindError, ValidationError) as e:
        print_error(f"Invalid options: {e}")
        return

    ctx.ensure_object(dict)
    ctx.obj["options"] = options
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


@cli.command()
@click.argument(
    "env_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--format",
    "-f",
    "format_type",
    type=click.Choice(FORMATS, case_sensitive=False),
    default="yaml",
    help="Output format (default: yaml)",
)
@click.option(
    "--key",
    "-k",
    type=str,
    default=None,
    help="Show a single entry (e.g., db.host)",
)
@click.pass_context
def show(
    ctx: click.Context, env_file: Path, format_type: str, key: str | None
) -> None:
    r"""Display the contents of an environment file.

    Keys are shown lower-cased and nested by the separator.

    \b
    Examples:
        $ envbind show .env
        $ envbind show .env --format json
        $ envbind --separator . show .env --key db.host
    """
    envfile = get_envfile(ctx)
    try:
        value: Value = envfile.from_file(env_file)
    except (EnvbindError, OSError) as e:
        print_error(f"Failed to read {env_file}: {e}")
        return

    if key:
        try:
            entry = get_nested_value(value, key)
        except KeyError as e:
            print_error(f"Key not found: {e}")
            return
        if not isinstance(entry, Value):
            click.echo(entry)
            return
        value = entry

    try:
        output = format_output(value, format_type.lower(), envfile)  # type: ignore[arg-type]
    except EnvbindError as e:
        print_error(f"Failed to format output: {e}")
        return
    click.echo(output)


@cli.command()
@click.argument(
    "env_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def check(ctx: click.Context, env_file: Path) -> None:
    r"""Check an environment file for syntax errors.

    \b
    Exit codes:
        0 - File parses
        1 - File is malformed
    """
    try:
        entries = parse(env_file.read_text(encoding="utf-8"))
    except (EnvbindError, OSError) as e:
        print_error(f"{env_file}: {e}")
        return

    if not ctx.obj.get("quiet", False):
        print_success(f"{env_file} is valid ({len(entries)} entries)")


@cli.command()
@click.option(
    "--format",
    "-f",
    "format_type",
    type=click.Choice(FORMATS, case_sensitive=False),
    default="env",
    help="Output format (default: env)",
)
@click.pass_context
def env(ctx: click.Context, format_type: str) -> None:
    r"""Display the process environment.

    With --prefix only matching variables are shown, without the prefix.

    \b
    Examples:
        $ envbind env --format table
        $ envbind --prefix APP_ env --format yaml
    """
    envfile = get_envfile(ctx)
    try:
        value: Value = envfile.from_env()
    except EnvbindError as e:
        print_error(f"Failed to read environment: {e}")
        return

    try:
        output = format_output(value, format_type.lower(), envfile)  # type: ignore[arg-type]
    except EnvbindError as e:
        print_error(f"Failed to format output: {e}")
        return
    click.echo(output)


@cli.command()
@click.argument(
    "input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default: stdout)",
)
@click.pass_context
def convert(ctx: click.Context, input_file: Path, output: Path | None) -> None:
    r"""Convert a YAML or JSON document into environment file text.

    Nested mappings become separator-joined keys and lists become
    index-suffixed keys.

    \b
    Examples:
        $ envbind convert config.yaml
        $ envbind convert settings.json --output .env
    """
    envfile = get_envfile(ctx)
    try:
        with open(input_file, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print_error(f"Failed to load {input_file}: {e}")
        return

    if document is None:
        document = {}
    if not isinstance(document, dict):
        print_error(f"{input_file} must contain a mapping at the top level")
        return

    try:
        if output is None:
            click.echo(envfile.to_string(document))
        else:
            envfile.to_file(output, document, create_dirs=True)
            if ctx.obj.get("verbose", False):
                print_info(f"Wrote {output}")
    except (EnvbindError, OSError) as e:
        print_error(f"Failed to convert {input_file}: {e}")
