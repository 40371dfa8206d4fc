"""Text codec for environment files.

This module converts ``KEY=VALUE`` text into an ordered list of raw entries
and back. Values come out exactly as written once quoting and escaping have
been resolved; no type parsing happens here.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import NamedTuple

from envbind.errors import (
    EncodeError,
    InvalidEscapeError,
    InvalidKeyError,
    MissingSeparatorError,
    ParseError,
    UnterminatedQuoteError,
)

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")

_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "$": "$",
}

_REVERSE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_NEEDS_QUOTES = re.compile(r"[\s#=]")


class RawEntry(NamedTuple):
    """One ``KEY=VALUE`` pair after quote and escape resolution."""

    key: str
    value: str


def is_valid_key(key: str) -> bool:
    """Return whether ``key`` may appear on the left of ``=``.

    Examples
    --------
    >>> is_valid_key("DB.HOST")
    True
    >>> is_valid_key("1ST")
    False
    """
    return KEY_PATTERN.match(key) is not None


def parse(text: str) -> list[RawEntry]:
    """Parse environment file text into raw entries.

    Parameters
    ----------
    text : str
        Environment file contents.

    Returns
    -------
    list[RawEntry]
        Entries in order of first appearance. When a key occurs more than
        once the last value wins.

    Raises
    ------
    ParseError
        If a line is malformed. The concrete subclass says why.

    Examples
    --------
    >>> parse('# comment\\nHELLO="WORLD"\\nNAME=envbind')
    [RawEntry(key='HELLO', value='WORLD'), RawEntry(key='NAME', value='envbind')]
    """
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    entries: dict[str, str] = {}
    index = 0

    while index < len(lines):
        line_no = index + 1
        line = lines[index]
        index += 1

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith("export ") or stripped.startswith("export\t"):
            stripped = stripped[len("export") :].lstrip()

        if "=" not in stripped:
            raise MissingSeparatorError(
                "Expected KEY=VALUE", line=line_no, text=line
            )

        raw_key, _, rest = stripped.partition("=")
        key = raw_key.strip()
        if not is_valid_key(key):
            raise InvalidKeyError(f"Invalid key {key!r}", line=line_no, text=line)

        rest = rest.lstrip()
        after = line[line.index("=") + 1 :]
        column = line.index("=") + len(after) - len(after.lstrip()) + 2

        if rest.startswith('"'):
            value, trailing, index = _read_double_quoted(
                rest[1:], lines, index, line_no, column
            )
            _check_trailing(trailing, index, lines[index - 1])
        elif rest.startswith("'"):
            value, trailing, index = _read_single_quoted(
                rest[1:], lines, index, line_no
            )
            _check_trailing(trailing, index, lines[index - 1])
        else:
            value = rest.strip()

        if key in entries:
            logger.debug("Key %s redefined at line %d; last value wins", key, line_no)
        entries[key] = value

    return [RawEntry(key, value) for key, value in entries.items()]


def _read_double_quoted(
    chunk: str, lines: list[str], index: int, line_no: int, column: int
) -> tuple[str, str, int]:
    """Read a double-quoted value starting after the opening quote.

    Returns the unescaped value, whatever follows the closing quote on its
    line, and the index of the next unread line.
    """
    out: list[str] = []
    current_line_no = line_no
    while True:
        pos = 0
        while pos < len(chunk):
            char = chunk[pos]
            if char == '"':
                return "".join(out), chunk[pos + 1 :], index
            if char == "\\":
                if pos + 1 >= len(chunk):
                    raise InvalidEscapeError(
                        "Backslash at end of line",
                        line=current_line_no,
                        text=lines[current_line_no - 1],
                    )
                escaped = chunk[pos + 1]
                if escaped not in _ESCAPES:
                    col = column + pos + 1 if current_line_no == line_no else pos + 1
                    raise InvalidEscapeError(
                        f"Invalid escape sequence '\\{escaped}'",
                        line=current_line_no,
                        column=col,
                        text=lines[current_line_no - 1],
                    )
                out.append(_ESCAPES[escaped])
                pos += 2
                continue
            out.append(char)
            pos += 1

        if index >= len(lines):
            raise UnterminatedQuoteError(
                "Unterminated double-quoted value",
                line=line_no,
                column=column,
                text=lines[line_no - 1],
            )
        out.append("\n")
        chunk = lines[index]
        index += 1
        current_line_no = index


def _read_single_quoted(
    chunk: str, lines: list[str], index: int, line_no: int
) -> tuple[str, str, int]:
    """Read a single-quoted value starting after the opening quote."""
    parts: list[str] = []
    while True:
        end = chunk.find("'")
        if end >= 0:
            parts.append(chunk[:end])
            return "\n".join(parts), chunk[end + 1 :], index
        parts.append(chunk)
        if index >= len(lines):
            raise UnterminatedQuoteError(
                "Unterminated single-quoted value",
                line=line_no,
                text=lines[line_no - 1],
            )
        chunk = lines[index]
        index += 1


def _check_trailing(trailing: str, line_no: int, line: str) -> None:
    rest = trailing.strip()
    if rest and not rest.startswith("#"):
        raise ParseError(
            f"Unexpected characters after quoted value: {rest!r}",
            line=line_no,
            text=line,
        )


def quote_value(value: str) -> str:
    """Render a value so that :func:`parse` reads it back unchanged.

    Parameters
    ----------
    value : str
        Raw value.

    Returns
    -------
    str
        The value bare, or double-quoted with escapes when it contains
        whitespace, ``#`` or ``=``, or starts with a quote character.

    Examples
    --------
    >>> quote_value("WORLD")
    'WORLD'
    >>> quote_value("hello world")
    '"hello world"'
    >>> quote_value('say "hi"')
    '"say \\\\"hi\\\\""'
    """
    if not _NEEDS_QUOTES.search(value) and not value.startswith(('"', "'")):
        return value
    escaped = "".join(_REVERSE_ESCAPES.get(char, char) for char in value)
    return f'"{escaped}"'


def serialize(entries: Iterable[tuple[str, str]]) -> str:
    """Serialize entries into environment file text.

    Parameters
    ----------
    entries : Iterable[tuple[str, str]]
        Key/value pairs in output order.

    Returns
    -------
    str
        One ``KEY=VALUE`` line per entry, joined by newlines, with no
        trailing newline.

    Raises
    ------
    EncodeError
        If a key would not be accepted by :func:`parse`.

    Examples
    --------
    >>> serialize([RawEntry("HELLO", "WORLD"), RawEntry("GREETING", "hi there")])
    'HELLO=WORLD\\nGREETING="hi there"'
    """
    lines: list[str] = []
    for key, value in entries:
        if not is_valid_key(key):
            raise EncodeError(f"Cannot write invalid key {key!r}")
        lines.append(f"{key}={quote_value(value)}")
    return "\n".join(lines)
