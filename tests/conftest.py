"""Root pytest configuration for envbind tests."""

from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_ENV = """\
# Application settings
APP_NAME=envbind
export DEBUG=true
PORT=8080
GREETING="hello world"
RAW='no \\n escapes'
DB__HOST=localhost
DB__PORT=5432
HOSTS_0=alpha
HOSTS_1=beta
"""


@pytest.fixture(scope="session")
def tests_dir() -> Path:
    """Get tests directory path.

    Returns
    -------
    Path
        Path to tests directory
    """
    return Path(__file__).parent


@pytest.fixture
def sample_env_text() -> str:
    """Provide environment file text covering the common syntax.

    Returns
    -------
    str
        Comment, ``export`` prefix, double and single quotes, nested keys
        and indexed sequence keys.
    """
    return SAMPLE_ENV


@pytest.fixture
def sample_env_file(tmp_path: Path, sample_env_text: str) -> Path:
    """Write the sample environment text to a temporary ``.env`` file.

    Parameters
    ----------
    tmp_path : Path
        Pytest's tmp_path fixture
    sample_env_text : str
        File contents

    Returns
    -------
    Path
        Path to the created file
    """
    env_file = tmp_path / ".env"
    env_file.write_text(sample_env_text, encoding="utf-8")
    return env_file


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove envbind's own option variables from the environment.

    Parameters
    ----------
    monkeypatch : pytest.MonkeyPatch
        Pytest monkeypatch fixture

    Returns
    -------
    pytest.MonkeyPatch
        The same fixture, for setting further variables
    """
    for name in ("SEPARATOR", "SEQUENCE_SEPARATOR", "LIST_DELIMITER", "PREFIX"):
        monkeypatch.delenv(f"ENVBIND_{name}", raising=False)
    monkeypatch.delenv("ENVBIND_PRESERVE_ORDER", raising=False)
    return monkeypatch
