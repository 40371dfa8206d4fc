"""Entry points composing the codec, flattening and binding layers.

Every operation is a single pass over owned data: text is parsed into flat
pairs, nested by :func:`~envbind.flatten.from_flat`, then bound to the target
type, and the reverse for writing. Nothing is cached between calls.

Examples
--------
>>> from dataclasses import dataclass
>>> @dataclass
... class Test:
...     hello: str
>>> from_str('HELLO="WORLD"', Test)
Test(hello='WORLD')
>>> to_string(Test(hello="WORLD"))
'HELLO=WORLD'
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, TextIO, TypeVar

from envbind.binding import decode, encode
from envbind.codec import parse, serialize
from envbind.config.options import CodecOptions
from envbind.flatten import from_flat
from envbind.flatten import to_flat as flatten_value
from envbind.value import Value

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Envfile:
    """Reads and writes environment variables with fixed options.

    Parameters
    ----------
    options : CodecOptions | None
        Codec options. Defaults are used if None.

    Examples
    --------
    >>> env = Envfile(CodecOptions(separator="."))
    >>> env.from_str("A.B=1")
    Value({'a': Value({'b': '1'})})
    """

    def __init__(self, options: CodecOptions | None = None) -> None:
        self.options = options or CodecOptions()

    def _strip_prefix(self, pairs: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        prefix = self.options.prefix.upper()
        if not prefix:
            return list(pairs)
        return [
            (key[len(prefix) :], value)
            for key, value in pairs
            if len(key) > len(prefix) and key.upper().startswith(prefix)
        ]

    def from_iter(
        self,
        pairs: Iterable[tuple[str, str]],
        cls: type[T] = Value,  # type: ignore[assignment]
    ) -> T:
        """Decode flat key/value pairs into ``cls``.

        Parameters
        ----------
        pairs : Iterable[tuple[str, str]]
            Flat pairs, e.g. parsed entries or an environment snapshot.
        cls : type[T]
            Target type. Defaults to :class:`~envbind.value.Value`.

        Returns
        -------
        T
            Decoded instance.
        """
        flat = self._strip_prefix(pairs)
        value = from_flat(
            flat, self.options.separator, preserve_order=self.options.preserve_order
        )
        return decode(cls, value, self.options)

    def from_str(self, text: str, cls: type[T] = Value) -> T:  # type: ignore[assignment]
        """Decode environment file text into ``cls``.

        Raises
        ------
        ParseError
            If the text is malformed.
        DecodeError
            If the parsed keys do not fit ``cls``.
        """
        return self.from_iter(parse(text), cls)

    def from_reader(self, reader: TextIO, cls: type[T] = Value) -> T:  # type: ignore[assignment]
        """Decode everything readable from a text stream into ``cls``."""
        return self.from_str(reader.read(), cls)

    def from_file(self, path: Path | str, cls: type[T] = Value) -> T:  # type: ignore[assignment]
        """Decode an environment file into ``cls``.

        Raises
        ------
        OSError
            If the file cannot be read.
        """
        path = Path(path) if isinstance(path, str) else path
        logger.debug("Reading environment file %s", path)
        return self.from_str(path.read_text(encoding="utf-8"), cls)

    def from_env(
        self,
        cls: type[T] = Value,  # type: ignore[assignment]
        environ: Mapping[str, str] | None = None,
    ) -> T:
        """Decode the process environment into ``cls``.

        Parameters
        ----------
        cls : type[T]
            Target type.
        environ : Mapping[str, str] | None
            Environment to read. If None, a snapshot of ``os.environ`` is
            taken. The environment itself is never modified.
        """
        snapshot = dict(os.environ if environ is None else environ)
        logger.debug("Read %d environment variables", len(snapshot))
        return self.from_iter(snapshot.items(), cls)

    def to_flat(self, data: Any) -> dict[str, str]:
        """Encode ``data`` into flat, prefixed key/value pairs."""
        flat = flatten_value(encode(data, self.options), self.options.separator)
        prefix = self.options.prefix.upper()
        if not prefix:
            return flat
        return {f"{prefix}{key}": value for key, value in flat.items()}

    def to_string(self, data: Any) -> str:
        """Encode ``data`` as environment file text.

        Raises
        ------
        EncodeError
            If ``data`` holds something without a textual form.
        FlattenError
            If the encoded value cannot be flattened.
        """
        return serialize(self.to_flat(data).items())

    def to_writer(self, writer: TextIO, data: Any) -> None:
        """Write ``data`` as environment file text to a stream."""
        writer.write(self.to_string(data))

    def to_file(self, path: Path | str, data: Any, create_dirs: bool = False) -> None:
        """Write ``data`` to an environment file.

        Parameters
        ----------
        path : Path | str
            Destination file. Its contents are replaced.
        data : Any
            Structured instance, mapping or value.
        create_dirs : bool
            If True, create missing parent directories.

        Raises
        ------
        OSError
            If the file cannot be written.
        """
        path = Path(path) if isinstance(path, str) else path
        text = self.to_string(data)
        if create_dirs:
            path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Writing environment file %s", path)
        path.write_text(f"{text}\n" if text else "", encoding="utf-8")


def prefixed(prefix: str, **options: Any) -> Envfile:
    """Create an :class:`Envfile` whose keys all carry ``prefix``.

    The prefix is upper-cased. On read, keys without it are ignored and it is
    stripped from the rest; on write, it is prepended to every key.

    Examples
    --------
    >>> env = Value()
    >>> env.insert("hello", "world")
    >>> prefixed("app_").to_string(env)
    'APP_HELLO=world'
    >>> prefixed("app_").from_str("APP_HELLO=world\\nOTHER=x")
    Value({'hello': 'world'})
    """
    return Envfile(CodecOptions(prefix=prefix, **options))


def from_str(
    text: str,
    cls: type[T] = Value,  # type: ignore[assignment]
    options: CodecOptions | None = None,
) -> T:
    """Decode environment file text into ``cls``."""
    return Envfile(options).from_str(text, cls)


def from_iter(
    pairs: Iterable[tuple[str, str]],
    cls: type[T] = Value,  # type: ignore[assignment]
    options: CodecOptions | None = None,
) -> T:
    """Decode flat key/value pairs into ``cls``."""
    return Envfile(options).from_iter(pairs, cls)


def from_reader(
    reader: TextIO,
    cls: type[T] = Value,  # type: ignore[assignment]
    options: CodecOptions | None = None,
) -> T:
    """Decode a text stream into ``cls``."""
    return Envfile(options).from_reader(reader, cls)


def from_file(
    path: Path | str,
    cls: type[T] = Value,  # type: ignore[assignment]
    options: CodecOptions | None = None,
) -> T:
    """Decode an environment file into ``cls``."""
    return Envfile(options).from_file(path, cls)


def from_env(
    cls: type[T] = Value,  # type: ignore[assignment]
    environ: Mapping[str, str] | None = None,
    options: CodecOptions | None = None,
) -> T:
    """Decode the process environment into ``cls``."""
    return Envfile(options).from_env(cls, environ)


def to_string(data: Any, options: CodecOptions | None = None) -> str:
    """Encode ``data`` as environment file text."""
    return Envfile(options).to_string(data)


def to_writer(writer: TextIO, data: Any, options: CodecOptions | None = None) -> None:
    """Write ``data`` as environment file text to a stream."""
    Envfile(options).to_writer(writer, data)


def to_file(
    path: Path | str,
    data: Any,
    create_dirs: bool = False,
    options: CodecOptions | None = None,
) -> None:
    """Write ``data`` to an environment file."""
    Envfile(options).to_file(path, data, create_dirs=create_dirs)
