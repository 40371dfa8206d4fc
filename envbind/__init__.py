"""Deserialize and serialize environment variables.

envbind reads ``KEY=VALUE`` text, files and the process environment into
typed structures (dataclasses, pydantic models, named tuples) or into the
schema-less :class:`Value`, and writes them back.

Keys are upper-cased when writing and matched case-insensitively when
reading; decoding into :class:`Value` lower-cases them.

Examples
--------
>>> from envbind import Value, from_str, to_string
>>> env = Value()
>>> env.insert("hello", "world")
>>> to_string(env)
'HELLO=world'
>>> from_str(to_string(env)) == env
True
"""

from __future__ import annotations

from envbind.api import (
    Envfile,
    from_env,
    from_file,
    from_iter,
    from_reader,
    from_str,
    prefixed,
    to_file,
    to_string,
    to_writer,
)
from envbind.binding import decode, encode
from envbind.codec import RawEntry, parse, serialize
from envbind.config.options import CodecOptions
from envbind.errors import (
    DecodeError,
    EncodeError,
    EnvbindError,
    FlattenError,
    InvalidEscapeError,
    InvalidKeyError,
    MissingSeparatorError,
    NonScalarLeafError,
    ParseError,
    UnterminatedQuoteError,
)
from envbind.fields import FieldSpec, describe
from envbind.flatten import from_flat, to_flat
from envbind.value import Value

__version__ = "0.3.0"

__all__ = [
    # Facade
    "Envfile",
    "from_env",
    "from_file",
    "from_iter",
    "from_reader",
    "from_str",
    "prefixed",
    "to_file",
    "to_string",
    "to_writer",
    # Layers
    "RawEntry",
    "parse",
    "serialize",
    "from_flat",
    "to_flat",
    "decode",
    "encode",
    "FieldSpec",
    "describe",
    # Value model
    "Value",
    # Options
    "CodecOptions",
    # Errors
    "EnvbindError",
    "ParseError",
    "MissingSeparatorError",
    "InvalidKeyError",
    "UnterminatedQuoteError",
    "InvalidEscapeError",
    "FlattenError",
    "NonScalarLeafError",
    "DecodeError",
    "EncodeError",
]
