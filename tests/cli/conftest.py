"""Test fixtures for CLI tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide Click CLI test runner.

    Returns
    -------
    CliRunner
        Click test runner.
    """
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cli(clean_env: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear option variables and restore the package logger after each test.

    Parameters
    ----------
    clean_env : pytest.MonkeyPatch
        Environment without ``ENVBIND_`` option variables.

    Yields
    ------
    None
    """
    logger = logging.getLogger("envbind")
    handlers = list(logger.handlers)
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def malformed_env_file(tmp_path: Path) -> Path:
    """Create an environment file with a line missing '='.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory.

    Returns
    -------
    Path
        Path to malformed file.
    """
    env_file = tmp_path / "broken.env"
    env_file.write_text("GOOD=1\nNOVALUELINE\n", encoding="utf-8")
    return env_file


@pytest.fixture
def yaml_document(tmp_path: Path) -> Path:
    """Create a YAML document to convert.

    Parameters
    ----------
    tmp_path : Path
        Pytest temporary directory.

    Returns
    -------
    Path
        Path to YAML file.
    """
    yaml_file = tmp_path / "config.yaml"
    yaml_file.write_text(
        """
app:
  name: demo
  debug: true
hosts:
  - a
  - b
port: 8080
""",
        encoding="utf-8",
    )
    return yaml_file
