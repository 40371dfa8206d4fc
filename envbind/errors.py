"""Exceptions raised by envbind."""

from __future__ import annotations


class EnvbindError(Exception):
    """Base exception for envbind errors."""

    pass


class ParseError(EnvbindError):
    """Exception raised when environment file text cannot be parsed.

    Parameters
    ----------
    message
        Error message describing what went wrong during parsing.
    line
        Line number where the error occurred (1-indexed). None if unknown.
    column
        Column number where the error occurred (1-indexed). None if unknown.
    text
        The text that caused the error. None if unavailable.

    Attributes
    ----------
    line : int | None
        Line number where error occurred.
    column : int | None
        Column number where error occurred.
    text : str | None
        Text that caused the error.

    Examples
    --------
    >>> try:
    ...     raise ParseError("Missing '='", line=3, text="NOVALUELINE")
    ... except ParseError as e:
    ...     print(e.line, e.column)
    3 None
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        text: str | None = None,
    ) -> None:
        self.line = line
        self.column = column
        self.text = text
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message."""
        parts = [super().__str__()]
        if self.line is not None:
            parts.append(f" at line {self.line}")
        if self.column is not None:
            parts.append(f", column {self.column}")
        if self.text is not None:
            parts.append(f"\n  {self.text}")
        return "".join(parts)


class MissingSeparatorError(ParseError):
    """A non-comment line has no ``=``."""


class InvalidKeyError(ParseError):
    """A key is not identifier-like."""


class UnterminatedQuoteError(ParseError):
    """A quoted value is still open at end of input."""


class InvalidEscapeError(ParseError):
    """A double-quoted value contains an unknown escape sequence."""


class FlattenError(EnvbindError):
    """Exception raised when a value tree cannot be (un)flattened.

    Parameters
    ----------
    message
        Error message.
    path
        Flat key path at which the problem was found, if any.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class NonScalarLeafError(FlattenError):
    """A leaf position holds something that cannot be written as a string."""


class DecodeError(EnvbindError):
    """Exception raised when a value cannot be bound to a structured type.

    Parameters
    ----------
    path
        Logical field path, e.g. ``"db.port"`` or ``"hosts[1]"``.
    expected
        Description of the expected type.
    found
        Description of what was found instead.
    message
        Optional message replacing the default "expected ..., found ..." text.

    Attributes
    ----------
    path : str
        Field path of the offending value.
    expected : str
        Expected type description.
    found : str
        Found value description.

    Examples
    --------
    >>> str(DecodeError("count", "int", "'notanumber'"))
    "count: expected int, found 'notanumber'"
    """

    def __init__(
        self,
        path: str,
        expected: str,
        found: str,
        message: str | None = None,
    ) -> None:
        self.path = path
        self.expected = expected
        self.found = found
        if message is None:
            message = f"expected {expected}, found {found}"
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class EncodeError(EnvbindError):
    """Exception raised when data cannot be written as environment variables."""

    pass
