"""Typed binding between values and structured types.

:func:`decode` walks the field descriptions of a structured type and coerces
each scalar it finds in a :class:`~envbind.value.Value`; :func:`encode` does
the reverse. Field names map to keys by upper-casing unless a field carries an
explicit key.

Sequences are written as index-suffixed sibling keys, so ``hosts=["a", "b"]``
becomes ``HOSTS_0=a`` and ``HOSTS_1=b``. When reading, a nested map keyed
``0..n-1`` or a single delimited scalar (``HOSTS=a,b``) is accepted as well.
"""

from __future__ import annotations

import collections.abc
import itertools
import logging
import re
import types
import typing
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Literal, TypeVar, Union
from uuid import UUID

from pydantic import ValidationError

from envbind.config.options import CodecOptions
from envbind.errors import DecodeError, EncodeError
from envbind.fields import (
    FieldSpec,
    construct,
    describe,
    is_structured,
    unwrap_optional,
)
from envbind.value import Value

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
FALSE_VALUES = frozenset({"false", "0", "no", "off"})

_SEQUENCE_TYPES: dict[Any, type] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}

_MAPPING_TYPES = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


class _Missing:
    """Marker for a key that is absent from its parent map."""

    def __repr__(self) -> str:
        return "<missing>"


MISSING = _Missing()


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _found(entry: Any) -> str:
    if isinstance(entry, _Missing):
        return "nothing"
    if isinstance(entry, Value):
        return "a nested map"
    return repr(entry)


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _origin(annotation: Any) -> Any:
    return typing.get_origin(annotation) or annotation


def _is_sequence(annotation: Any) -> bool:
    origin = _origin(annotation)
    return isinstance(origin, type) and origin in _SEQUENCE_TYPES


def _is_mapping(annotation: Any) -> bool:
    origin = _origin(annotation)
    return isinstance(origin, type) and origin in _MAPPING_TYPES


def _element_type(annotation: Any, index: int) -> Any:
    args = typing.get_args(annotation)
    if _origin(annotation) is tuple and args and not (
        len(args) == 2 and args[1] is Ellipsis
    ):
        return args[index] if index < len(args) else MISSING
    return args[0] if args else Any


def _lookup(parent: Value, key: str) -> Any:
    """Find ``key`` in ``parent``, falling back to a case-insensitive match."""
    if key in parent:
        return parent[key]
    wanted = key.upper()
    for candidate in parent:
        if candidate.upper() == wanted:
            return parent[candidate]
    return MISSING


def _lower_keys(value: Value) -> Value:
    return Value(
        (
            (key.lower(), _lower_keys(entry) if isinstance(entry, Value) else entry)
            for key, entry in value.items()
        ),
        preserve_order=value.preserve_order,
    )


def _scalar_text(option: Any) -> str:
    if isinstance(option, bool):
        return "true" if option else "false"
    if isinstance(option, Enum):
        return option.name
    return str(option)


class Decoder:
    """Converts values into structured types.

    Parameters
    ----------
    options : CodecOptions
        Separators and delimiters used to locate sequence elements.
    """

    def __init__(self, options: CodecOptions) -> None:
        self.options = options

    def decode(self, cls: Any, value: Value) -> Any:
        """Decode a root value into ``cls``."""
        if cls is Value or cls is Any:
            return _lower_keys(value)
        if is_structured(cls):
            logger.debug("Decoding %s from %d keys", _type_name(cls), len(value))
            return self.structure(cls, value, "")
        if _is_mapping(cls):
            return self.mapping(cls, value, "")
        raise TypeError(f"Cannot decode into {_type_name(cls)}")

    def structure(self, cls: type, value: Value, path: str) -> Any:
        """Decode every described field of ``cls`` and construct it."""
        arguments: dict[str, Any] = {}
        for spec in describe(cls):
            field_path = _join(path, spec.name)
            entry = self.take(spec.annotation, value, spec.env_key, field_path)
            if entry is MISSING:
                entry = self.missing(spec, field_path)
                if entry is MISSING:
                    continue
            arguments[spec.init_name] = entry

        try:
            return construct(cls, arguments)
        except ValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"])
            raise DecodeError(
                _join(path, location) if location else path,
                _type_name(cls),
                _found(error.get("input")),
                message=error["msg"],
            ) from e

    def missing(self, spec: FieldSpec, path: str) -> Any:
        """Resolve a field whose key is absent."""
        if not spec.required:
            return MISSING
        if spec.optional:
            return None

        annotation = spec.annotation
        if annotation is Value:
            return Value(preserve_order=self.options.preserve_order)
        if _is_sequence(annotation):
            return self.build(annotation, [], path)
        if _is_mapping(annotation):
            return {}
        if is_structured(annotation):
            return self.structure(
                annotation, Value(preserve_order=self.options.preserve_order), path
            )

        raise DecodeError(
            path,
            _type_name(annotation),
            "nothing",
            message=f"missing required key {spec.env_key}",
        )

    def take(self, annotation: Any, parent: Value, key: str, path: str) -> Any:
        """Read ``key`` from ``parent`` as ``annotation``, or return MISSING."""
        inner, optional = unwrap_optional(annotation)

        if _is_sequence(inner):
            return self.sequence(inner, parent, key, path)

        entry = _lookup(parent, key)
        if entry is MISSING:
            return MISSING
        if optional and entry == "" and inner is not str:
            return None
        return self.convert(inner, entry, path)

    def sequence(self, annotation: Any, parent: Value, key: str, path: str) -> Any:
        """Collect sequence elements stored under ``key``."""
        separator = self.options.sequence_separator
        items = self.elements(
            annotation, parent, lambda index: f"{key}{separator}{index}", path
        )
        if not items:
            entry = _lookup(parent, key)
            if entry is MISSING:
                return MISSING
            items = self.unindexed(annotation, entry, path)
        return self.build(annotation, items, path)

    def elements(
        self,
        annotation: Any,
        parent: Value,
        key_for: Callable[[int], str],
        path: str,
    ) -> list[Any]:
        """Read consecutive indexed elements until one is absent."""
        items: list[Any] = []
        for index in itertools.count():
            element = _element_type(annotation, index)
            if element is MISSING:
                break
            item = self.take(element, parent, key_for(index), f"{path}[{index}]")
            if item is MISSING:
                break
            items.append(item)
        return items

    def unindexed(self, annotation: Any, entry: Any, path: str) -> list[Any]:
        """Read sequence elements from a nested map or a delimited scalar."""
        if isinstance(entry, Value):
            return self.elements(annotation, entry, str, path)

        parts = entry.split(self.options.list_delimiter) if entry else []
        items: list[Any] = []
        for index, part in enumerate(parts):
            element = _element_type(annotation, index)
            if element is MISSING:
                raise DecodeError(
                    path, _type_name(annotation), f"{len(parts)} items"
                )
            items.append(self.convert(element, part.strip(), f"{path}[{index}]"))
        return items

    def build(self, annotation: Any, items: list[Any], path: str) -> Any:
        """Turn decoded elements into the annotated container."""
        origin = _origin(annotation)
        if origin is tuple:
            args = typing.get_args(annotation)
            fixed = args and not (len(args) == 2 and args[1] is Ellipsis)
            if fixed and len(items) != len(args):
                raise DecodeError(
                    path, _type_name(annotation), f"{len(items)} items"
                )
        return _SEQUENCE_TYPES[origin](items)

    def mapping(self, annotation: Any, value: Value, path: str) -> dict[Any, Any]:
        """Decode a nested map into a dictionary with lower-cased keys."""
        args = typing.get_args(annotation)
        key_type, value_type = args if len(args) == 2 else (str, Any)
        inner, _ = unwrap_optional(value_type)
        if _is_sequence(inner):
            return self.sequence_mapping(key_type, inner, value, path)

        result: dict[Any, Any] = {}
        for key, entry in value.items():
            name = key.lower()
            entry_path = f"{path}[{name}]"
            result[self.convert(key_type, name, entry_path)] = self.convert(
                value_type, entry, entry_path
            )
        return result

    def sequence_mapping(
        self, key_type: Any, annotation: Any, value: Value, path: str
    ) -> dict[Any, Any]:
        """Decode a map whose entries are sequences stored as indexed keys.

        Keys such as ``A_0`` and ``A_1`` are grouped under ``a``; a key whose
        indexed run does not start at zero is decoded on its own.
        """
        suffix = re.compile(rf"^(.+){re.escape(self.options.sequence_separator)}\d+$")
        groups: dict[str, list[str]] = {}
        for key in value:
            match = suffix.match(key)
            groups.setdefault(match.group(1) if match else key, []).append(key)

        result: dict[Any, Any] = {}
        for base, keys in groups.items():
            items = self.sequence(annotation, value, base, f"{path}[{base.lower()}]")
            if items is not MISSING:
                name = base.lower()
                result[self.convert(key_type, name, f"{path}[{name}]")] = items
                continue
            for key in keys:
                name = key.lower()
                entry_path = f"{path}[{name}]"
                result[self.convert(key_type, name, entry_path)] = self.convert(
                    annotation, value[key], entry_path
                )
        return result

    def convert(self, annotation: Any, entry: Any, path: str) -> Any:
        """Coerce one entry to ``annotation``."""
        if annotation is Any or annotation is object:
            return entry

        origin = typing.get_origin(annotation)
        if origin is typing.Annotated:
            return self.convert(typing.get_args(annotation)[0], entry, path)

        inner, optional = unwrap_optional(annotation)
        if optional:
            if entry == "" and inner is not str:
                return None
            return self.convert(inner, entry, path)

        if origin is Union or origin is types.UnionType:
            return self.union(annotation, entry, path)

        if entry == "" and (
            annotation is Value
            or is_structured(annotation)
            or _is_mapping(annotation)
        ):
            entry = Value(preserve_order=self.options.preserve_order)

        if annotation is Value:
            if not isinstance(entry, Value):
                raise DecodeError(path, "a nested map", _found(entry))
            return _lower_keys(entry)

        if is_structured(annotation):
            if not isinstance(entry, Value):
                raise DecodeError(path, _type_name(annotation), _found(entry))
            return self.structure(annotation, entry, path)

        if _is_mapping(annotation):
            if not isinstance(entry, Value):
                raise DecodeError(path, _type_name(annotation), _found(entry))
            return self.mapping(annotation, entry, path)

        if _is_sequence(annotation):
            return self.build(annotation, self.unindexed(annotation, entry, path), path)

        if not isinstance(entry, str):
            raise DecodeError(path, _type_name(annotation), _found(entry))

        return self.scalar(annotation, entry, path)

    def union(self, annotation: Any, entry: Any, path: str) -> Any:
        """Try each member of a union in declaration order."""
        for member in typing.get_args(annotation):
            try:
                return self.convert(member, entry, path)
            except DecodeError:
                continue
        raise DecodeError(path, _type_name(annotation), _found(entry))

    def scalar(self, annotation: Any, entry: str, path: str) -> Any:
        """Coerce a scalar string to a primitive type."""
        if typing.get_origin(annotation) is Literal:
            for option in typing.get_args(annotation):
                if _scalar_text(option) == entry:
                    return option
            raise DecodeError(path, _type_name(annotation), _found(entry))

        if annotation is str:
            return entry

        if annotation is bool:
            lowered = entry.strip().lower()
            if lowered in TRUE_VALUES:
                return True
            if lowered in FALSE_VALUES:
                return False
            raise DecodeError(path, "bool", _found(entry))

        if isinstance(annotation, type) and issubclass(annotation, Enum):
            return self.enum(annotation, entry, path)

        if isinstance(annotation, type):
            try:
                return annotation(entry)
            except (ValueError, TypeError, ArithmeticError) as e:
                raise DecodeError(path, annotation.__name__, _found(entry)) from e

        raise DecodeError(path, _type_name(annotation), _found(entry))

    def enum(self, annotation: type[Enum], entry: str, path: str) -> Enum:
        """Look an enum member up by name, then by value."""
        if entry in annotation.__members__:
            return annotation.__members__[entry]
        for name, member in annotation.__members__.items():
            if name.lower() == entry.lower():
                return member
        for member in annotation:
            if str(member.value) == entry:
                return member
        raise DecodeError(path, annotation.__name__, _found(entry))


class Encoder:
    """Converts structured data into values.

    Parameters
    ----------
    options : CodecOptions
        Order mode and sequence separator for the produced value.
    """

    def __init__(self, options: CodecOptions) -> None:
        self.options = options

    def encode(self, data: Any) -> Value:
        """Encode root data into a value."""
        if isinstance(data, Mapping):
            return self.mapping(data)
        if is_structured(type(data)):
            logger.debug("Encoding %s", type(data).__name__)
            return self.structure(data)
        raise EncodeError(
            f"Cannot encode {type(data).__name__}; expected a mapping or a "
            "structured type"
        )

    def new_value(self) -> Value:
        return Value(preserve_order=self.options.preserve_order)

    def structure(self, obj: Any) -> Value:
        """Encode every described field of ``obj``."""
        out = self.new_value()
        for spec in describe(type(obj)):
            self.place(out, spec.env_key, getattr(obj, spec.name))
        return out

    def mapping(self, data: Mapping[Any, Any]) -> Value:
        """Encode a mapping, upper-casing its keys."""
        out = self.new_value()
        for key, item in data.items():
            name = key.name if isinstance(key, Enum) else str(key)
            self.place(out, name.upper(), item)
        return out

    def place(self, parent: Value, key: str, obj: Any) -> None:
        """Store ``obj`` under ``key``; sequences fan out into indexed keys."""
        if obj is None:
            return

        if isinstance(obj, list | tuple | set | frozenset) and not is_structured(
            type(obj)
        ):
            items = obj
            if isinstance(obj, set | frozenset):
                items = sorted(obj, key=_scalar_text)
            separator = self.options.sequence_separator
            for index, item in enumerate(items):
                element_key = f"{key}{separator}{index}"
                if isinstance(item, list | tuple | set | frozenset) and not (
                    is_structured(type(item))
                ):
                    self.place(parent, element_key, item)
                    continue
                # Empty elements are written blank to keep later indexes reachable.
                entry = "" if item is None else self.value(item)
                parent[element_key] = entry or ""
            return

        entry = self.value(obj)
        if isinstance(entry, Value) and not entry:
            return
        parent[key] = entry

    def value(self, obj: Any) -> str | Value:
        """Encode a single non-sequence object."""
        if isinstance(obj, Mapping):
            return self.mapping(obj)
        if isinstance(obj, bool):
            return "true" if obj else "false"
        if isinstance(obj, Enum):
            return obj.name
        if isinstance(obj, str):
            return obj
        if isinstance(obj, int | float | Decimal | PurePath | UUID):
            return str(obj)
        if is_structured(type(obj)):
            return self.structure(obj)
        raise EncodeError(f"Cannot encode value of type {type(obj).__name__}")


def decode(cls: type[T], value: Value, options: CodecOptions | None = None) -> T:
    """Decode a value into an instance of ``cls``.

    Parameters
    ----------
    cls : type[T]
        Structured type, mapping type, or :class:`~envbind.value.Value`.
    value : Value
        Value tree, usually produced by :func:`~envbind.flatten.from_flat`.
    options : CodecOptions | None
        Codec options. Defaults are used if None.

    Returns
    -------
    T
        Decoded instance. Decoding into ``Value`` returns a copy with
        lower-cased keys.

    Raises
    ------
    DecodeError
        If a required key is missing, a scalar cannot be coerced, or a
        scalar and a nested map are confused.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Greeting:
    ...     hello: str
    >>> decode(Greeting, Value({"HELLO": "WORLD"}))
    Greeting(hello='WORLD')
    """
    return Decoder(options or CodecOptions()).decode(cls, value)


def encode(data: Any, options: CodecOptions | None = None) -> Value:
    """Encode structured data or a mapping into a value.

    Parameters
    ----------
    data : Any
        Structured instance, mapping, or :class:`~envbind.value.Value`.
    options : CodecOptions | None
        Codec options. Defaults are used if None.

    Returns
    -------
    Value
        Value tree with upper-cased keys. ``None`` fields are omitted.

    Raises
    ------
    EncodeError
        If a field holds a type with no textual form.
    """
    return Encoder(options or CodecOptions()).encode(data)
