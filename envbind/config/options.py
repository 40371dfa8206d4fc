"""Codec option models for the envbind package."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

_SEPARATOR_PATTERN = re.compile(r"^[A-Za-z0-9_.]+$")


class CodecOptions(BaseModel):
    """Options shared by every conversion step.

    Parameters
    ----------
    separator : str
        Joins nested key paths in flat keys.
    sequence_separator : str
        Joins a sequence key and an element index (``LIST_0``).
    list_delimiter : str
        Splits a single scalar into sequence elements when decoding.
    preserve_order : bool
        Keep insertion order in decoded values and in output.
    prefix : str
        Prefix that every flat key carries in text or in the environment.

    Examples
    --------
    >>> options = CodecOptions()
    >>> options.separator
    '__'
    >>> CodecOptions(separator=".").separator
    '.'
    """

    model_config = ConfigDict(frozen=True)

    separator: str = Field(default="__", description="Nested key path separator")
    sequence_separator: str = Field(
        default="_", description="Separator between a sequence key and its index"
    )
    list_delimiter: str = Field(
        default=",", description="Delimiter for sequences given as one scalar"
    )
    preserve_order: bool = Field(
        default=True, description="Preserve key insertion order"
    )
    prefix: str = Field(default="", description="Prefix of every flat key")

    @field_validator("separator", "sequence_separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Validate a separator only uses key characters.

        Parameters
        ----------
        v : str
            Separator value.

        Returns
        -------
        str
            Validated value.

        Raises
        ------
        ValueError
            If the separator is empty or would make keys unparseable.
        """
        if not _SEPARATOR_PATTERN.match(v):
            msg = f"separator must be non-empty and use only [A-Za-z0-9_.], got {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("list_delimiter")
    @classmethod
    def validate_list_delimiter(cls, v: str) -> str:
        """Validate the list delimiter is non-empty."""
        if not v:
            msg = "list_delimiter must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Validate the prefix only uses key characters."""
        if v and not _SEPARATOR_PATTERN.match(v):
            msg = f"prefix must use only [A-Za-z0-9_.], got {v!r}"
            raise ValueError(msg)
        return v
