"""Tests for environment variable configuration support."""

from __future__ import annotations

import pytest

from envbind.config.env import DEFAULT_PREFIX, load_options_from_env
from envbind.config.options import CodecOptions
from envbind.errors import DecodeError


class TestLoadOptionsFromEnv:
    """Tests for load_options_from_env function."""

    def test_default_prefix(self) -> None:
        """Test the default prefix."""
        assert DEFAULT_PREFIX == "ENVBIND_"

    def test_empty_environment(self) -> None:
        """Test defaults when nothing is set."""
        assert load_options_from_env(environ={}) == CodecOptions()

    def test_all_options(self, options_environ: dict[str, str]) -> None:
        """Test every option can be set."""
        options = load_options_from_env(environ=options_environ)
        assert options == CodecOptions(
            separator=".",
            sequence_separator="__",
            list_delimiter=";",
            preserve_order=False,
            prefix="APP_",
        )

    def test_unrelated_variables_ignored(self) -> None:
        """Test variables without the prefix are ignored."""
        options = load_options_from_env(environ={"SEPARATOR": "."})
        assert options.separator == "__"

    def test_lowercase_variables(self) -> None:
        """Test variable names match case-insensitively."""
        options = load_options_from_env(environ={"envbind_separator": "."})
        assert options.separator == "."

    def test_custom_prefix(self) -> None:
        """Test a custom prefix."""
        options = load_options_from_env(
            prefix="MYAPP_", environ={"MYAPP_LIST_DELIMITER": ":"}
        )
        assert options.list_delimiter == ":"

    @pytest.mark.parametrize("text", ["false", "0", "no", "off", "FALSE"])
    def test_boolean_spellings(self, text: str) -> None:
        """Test boolean options accept the usual spellings."""
        options = load_options_from_env(environ={"ENVBIND_PRESERVE_ORDER": text})
        assert options.preserve_order is False

    def test_invalid_boolean(self) -> None:
        """Test an invalid boolean raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            load_options_from_env(environ={"ENVBIND_PRESERVE_ORDER": "sometimes"})
        assert exc_info.value.path == "preserve_order"

    def test_invalid_separator(self) -> None:
        """Test a separator failing validation raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            load_options_from_env(environ={"ENVBIND_SEPARATOR": "-"})
        assert exc_info.value.path == "separator"

    def test_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the process environment is read by default."""
        monkeypatch.setenv("ENVBIND_SEPARATOR", ".")
        assert load_options_from_env().separator == "."
