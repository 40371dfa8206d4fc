"""Conversion between flat key mappings and nested values.

Flat keys are paths joined by a separator, e.g. ``DB__HOST`` for
``{"DB": {"HOST": ...}}`` with the default ``"__"`` separator. Keys that
themselves contain the separator cannot be told apart from nested paths;
that limitation is inherent to the format.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from envbind.errors import FlattenError, NonScalarLeafError
from envbind.value import Value

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "__"


def split_key(key: str, separator: str = DEFAULT_SEPARATOR) -> list[str]:
    """Split a flat key into path segments.

    A key that would produce an empty segment is kept whole.

    Examples
    --------
    >>> split_key("DB__HOST")
    ['DB', 'HOST']
    >>> split_key("__PRIVATE")
    ['__PRIVATE']
    """
    parts = key.split(separator)
    if any(not part for part in parts):
        return [key]
    return parts


def from_flat(
    mapping: Mapping[str, str] | Iterable[tuple[str, str]],
    separator: str = DEFAULT_SEPARATOR,
    *,
    preserve_order: bool = True,
) -> Value:
    """Build a nested value from a flat key mapping.

    Parameters
    ----------
    mapping : Mapping[str, str] | Iterable[tuple[str, str]]
        Flat keys and scalar values.
    separator : str
        Path separator.
    preserve_order : bool
        Order mode of every map in the result.

    Returns
    -------
    Value
        Nested value tree.

    Raises
    ------
    FlattenError
        If a key is empty.

    Examples
    --------
    >>> from_flat({"A.B": "1"}, separator=".")
    Value({'A': Value({'B': '1'})})
    """
    pairs = mapping.items() if isinstance(mapping, Mapping) else mapping
    root = Value(preserve_order=preserve_order)

    for key, scalar in pairs:
        if not key:
            raise FlattenError("Flat keys must not be empty")

        parts = split_key(key, separator)
        current = root
        for depth, part in enumerate(parts[:-1]):
            child = current.get(part)
            if not isinstance(child, Value):
                if child is not None:
                    logger.debug(
                        "Scalar at %s replaced by nested map for %s",
                        separator.join(parts[: depth + 1]),
                        key,
                    )
                child = Value(preserve_order=preserve_order)
                current[part] = child
            current = child

        if isinstance(current.get(parts[-1]), Value):
            logger.debug("Nested map at %s replaced by scalar", key)
        current[parts[-1]] = scalar

    return root


def to_flat(value: Value, separator: str = DEFAULT_SEPARATOR) -> dict[str, str]:
    """Flatten a nested value into single-level keys.

    Parameters
    ----------
    value : Value
        Value tree to flatten.
    separator : str
        Path separator.

    Returns
    -------
    dict[str, str]
        Flat mapping in the value's iteration order.

    Raises
    ------
    NonScalarLeafError
        If a nested map is empty or a leaf is not a string.

    Examples
    --------
    >>> to_flat(Value({"DB": {"HOST": "localhost", "PORT": "5432"}}))
    {'DB__HOST': 'localhost', 'DB__PORT': '5432'}
    """
    flat: dict[str, str] = {}
    _flatten_into(flat, value, "", separator)
    return flat


def _flatten_into(flat: dict[str, str], value: Value, path: str, separator: str) -> None:
    for key, entry in value.items():
        flat_key = f"{path}{separator}{key}" if path else key
        if isinstance(entry, Value):
            if not entry:
                raise NonScalarLeafError(
                    f"Empty map at {flat_key} has no flat representation",
                    path=flat_key,
                )
            _flatten_into(flat, entry, flat_key, separator)
        elif isinstance(entry, str):
            if flat_key in flat:
                logger.debug("Flat key %s produced twice; last value wins", flat_key)
            flat[flat_key] = entry
        else:
            raise NonScalarLeafError(
                f"Leaf at {flat_key} is {type(entry).__name__}, not a string",
                path=flat_key,
            )
