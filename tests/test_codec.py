"""Tests for the environment file text codec."""

from __future__ import annotations

import pytest

from envbind.codec import RawEntry, is_valid_key, parse, quote_value, serialize
from envbind.errors import (
    EncodeError,
    InvalidEscapeError,
    InvalidKeyError,
    MissingSeparatorError,
    ParseError,
    UnterminatedQuoteError,
)


class TestParse:
    """Tests for parse function."""

    def test_parse_simple_pair(self) -> None:
        """Test parsing a single unquoted pair."""
        assert parse("HELLO=WORLD") == [RawEntry("HELLO", "WORLD")]

    def test_parse_double_quoted(self) -> None:
        """Test quotes are removed from a double-quoted value."""
        assert parse('HELLO="WORLD"') == [RawEntry("HELLO", "WORLD")]

    def test_parse_skips_comments_and_blank_lines(self) -> None:
        """Test comment and blank lines produce no entries."""
        text = "# header\n\n   # indented comment\nA=1\n\n"
        assert parse(text) == [RawEntry("A", "1")]

    def test_parse_empty_text(self) -> None:
        """Test empty input yields no entries."""
        assert parse("") == []

    def test_parse_preserves_order(self) -> None:
        """Test entries come back in file order."""
        entries = parse("B=2\nA=1\nC=3")
        assert [entry.key for entry in entries] == ["B", "A", "C"]

    def test_parse_empty_value(self) -> None:
        """Test a key with nothing after '=' has an empty value."""
        assert parse("EMPTY=") == [RawEntry("EMPTY", "")]

    def test_parse_trims_unquoted_value(self) -> None:
        """Test surrounding whitespace of unquoted values is dropped."""
        assert parse("KEY =   spaced value  ") == [RawEntry("KEY", "spaced value")]

    def test_parse_unquoted_hash_is_literal(self) -> None:
        """Test '#' inside an unquoted value is kept."""
        assert parse("COLOR=#ff0000") == [RawEntry("COLOR", "#ff0000")]

    def test_parse_value_with_equals(self) -> None:
        """Test only the first '=' separates key and value."""
        assert parse("URL=a=b=c") == [RawEntry("URL", "a=b=c")]

    def test_parse_export_prefix(self) -> None:
        """Test a leading 'export' keyword is ignored."""
        assert parse("export TOKEN=abc") == [RawEntry("TOKEN", "abc")]

    def test_parse_dotted_key(self) -> None:
        """Test dots are allowed in keys."""
        assert parse("A.B=1") == [RawEntry("A.B", "1")]

    def test_parse_crlf_line_endings(self) -> None:
        """Test Windows line endings are handled."""
        assert parse("A=1\r\nB=2\r\n") == [RawEntry("A", "1"), RawEntry("B", "2")]

    def test_parse_single_quoted_is_literal(self) -> None:
        """Test single-quoted values keep backslashes."""
        assert parse(r"PATTERN='a\nb'") == [RawEntry("PATTERN", r"a\nb")]

    def test_parse_double_quoted_escapes(self) -> None:
        """Test escape sequences in double-quoted values."""
        text = r'MSG="tab\there\nquote\" slash\\ dollar\$"'
        assert parse(text) == [RawEntry("MSG", 'tab\there\nquote" slash\\ dollar$')]

    def test_parse_double_quoted_keeps_hash(self) -> None:
        """Test '#' inside quotes is part of the value."""
        assert parse('TITLE="a # b"') == [RawEntry("TITLE", "a # b")]

    def test_parse_comment_after_quoted_value(self) -> None:
        """Test a comment may follow the closing quote."""
        assert parse('NAME="x"   # trailing') == [RawEntry("NAME", "x")]

    def test_parse_multiline_double_quoted(self) -> None:
        """Test a double-quoted value may span lines."""
        text = 'CERT="line one\nline two"\nNEXT=1'
        assert parse(text) == [
            RawEntry("CERT", "line one\nline two"),
            RawEntry("NEXT", "1"),
        ]

    def test_parse_multiline_single_quoted(self) -> None:
        """Test a single-quoted value may span lines."""
        assert parse("KEY='a\nb'") == [RawEntry("KEY", "a\nb")]

    def test_parse_duplicate_key_last_wins(self) -> None:
        """Test the last definition of a key wins at its first position."""
        assert parse("A=1\nB=2\nA=3") == [RawEntry("A", "3"), RawEntry("B", "2")]


class TestParseErrors:
    """Tests for malformed input."""

    def test_missing_separator(self) -> None:
        """Test a line without '=' raises MissingSeparatorError."""
        with pytest.raises(MissingSeparatorError) as exc_info:
            parse("NOVALUELINE")
        assert exc_info.value.line == 1
        assert exc_info.value.text == "NOVALUELINE"

    def test_missing_separator_is_parse_error(self) -> None:
        """Test every parse failure is a ParseError."""
        with pytest.raises(ParseError):
            parse("A=1\nNOVALUELINE")

    def test_missing_separator_reports_line(self) -> None:
        """Test the failing line number is reported."""
        with pytest.raises(ParseError) as exc_info:
            parse("A=1\n# c\nBROKEN")
        assert exc_info.value.line == 3
        assert "line 3" in str(exc_info.value)

    def test_invalid_key(self) -> None:
        """Test a key starting with a digit is rejected."""
        with pytest.raises(InvalidKeyError):
            parse("1ST=value")

    def test_key_with_space(self) -> None:
        """Test a key containing a space is rejected."""
        with pytest.raises(InvalidKeyError):
            parse("MY KEY=value")

    def test_empty_key(self) -> None:
        """Test '=value' is rejected."""
        with pytest.raises(InvalidKeyError):
            parse("=value")

    def test_unterminated_double_quote(self) -> None:
        """Test an unterminated double quote is reported at its start line."""
        with pytest.raises(UnterminatedQuoteError) as exc_info:
            parse('A=1\nB="never closed\nC=3')
        assert exc_info.value.line == 2

    def test_unterminated_single_quote(self) -> None:
        """Test an unterminated single quote is rejected."""
        with pytest.raises(UnterminatedQuoteError):
            parse("A='open")

    def test_invalid_escape(self) -> None:
        """Test unknown escapes in double quotes are rejected."""
        with pytest.raises(InvalidEscapeError) as exc_info:
            parse(r'A="bad \q"')
        assert exc_info.value.line == 1
        assert exc_info.value.column is not None

    def test_text_after_closing_quote(self) -> None:
        """Test stray characters after a quoted value are rejected."""
        with pytest.raises(ParseError):
            parse('A="x" y')


class TestIsValidKey:
    """Tests for is_valid_key function."""

    @pytest.mark.parametrize("key", ["A", "_A", "a1", "DB.HOST", "DB__HOST"])
    def test_valid_keys(self, key: str) -> None:
        """Test identifier-like keys are accepted."""
        assert is_valid_key(key)

    @pytest.mark.parametrize("key", ["", "1A", "A-B", "A B", "A=B"])
    def test_invalid_keys(self, key: str) -> None:
        """Test other keys are rejected."""
        assert not is_valid_key(key)


class TestQuoteValue:
    """Tests for quote_value function."""

    def test_plain_value_unquoted(self) -> None:
        """Test simple values are written bare."""
        assert quote_value("WORLD") == "WORLD"

    def test_empty_value_unquoted(self) -> None:
        """Test the empty string is written bare."""
        assert quote_value("") == ""

    def test_whitespace_quoted(self) -> None:
        """Test values with spaces are quoted."""
        assert quote_value("hello world") == '"hello world"'

    def test_hash_quoted(self) -> None:
        """Test values with '#' are quoted."""
        assert quote_value("a#b") == '"a#b"'

    def test_newline_escaped(self) -> None:
        """Test newlines are escaped inside quotes."""
        assert quote_value("a\nb") == '"a\\nb"'

    def test_leading_quote_quoted(self) -> None:
        """Test a value starting with a quote character is quoted."""
        assert quote_value("'x'") == "\"'x'\""


class TestSerialize:
    """Tests for serialize function."""

    def test_serialize_example(self) -> None:
        """Test entries are written one per line without trailing newline."""
        text = serialize([RawEntry("HELLO", "WORLD"), RawEntry("NAME", "a b")])
        assert text == 'HELLO=WORLD\nNAME="a b"'

    def test_serialize_empty(self) -> None:
        """Test no entries give empty text."""
        assert serialize([]) == ""

    def test_serialize_invalid_key(self) -> None:
        """Test keys parse would reject cannot be written."""
        with pytest.raises(EncodeError):
            serialize([RawEntry("BAD-KEY", "x")])

    def test_round_trip(self) -> None:
        """Test parse reads back what serialize writes."""
        entries = [
            RawEntry("PLAIN", "value"),
            RawEntry("EMPTY", ""),
            RawEntry("SPACES", "  padded  "),
            RawEntry("QUOTES", 'say "hi" and \'bye\''),
            RawEntry("MULTI", "line1\nline2\r\n\tend"),
            RawEntry("BACKSLASH", "C:\\path\\to"),
            RawEntry("HASH", "#not a comment"),
            RawEntry("EQUALS", "a=b"),
            RawEntry("DOLLAR", "$HOME"),
            RawEntry("DB.HOST", "localhost"),
        ]
        assert parse(serialize(entries)) == entries
