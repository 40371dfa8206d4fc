"""Schema-less representation of environment configuration.

A :class:`Value` maps non-empty string keys to either a scalar string or a
nested :class:`Value`. Numbers and booleans stay strings here; coercion only
happens in :mod:`envbind.binding`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Any

type Entry = str | Value


class Value(MutableMapping[str, "str | Value"]):
    """Flexible representation of environment variables.

    Parameters
    ----------
    entries : Mapping[str, Any] | Iterable[tuple[str, Any]] | None
        Initial entries. Plain mappings among the values become nested
        :class:`Value` objects with the same order mode.
    preserve_order : bool
        If True, iteration follows first-insertion order. If False,
        iteration is canonical (sorted by key) and insertion order is not
        observable.

    Examples
    --------
    >>> env = Value()
    >>> env.insert("hello", "world")
    >>> env["hello"]
    'world'
    >>> list(Value({"b": "2", "a": "1"}, preserve_order=False))
    ['a', 'b']
    >>> Value({"a": "1"}) == Value({"a": "1"}, preserve_order=False)
    True
    """

    __slots__ = ("_data", "_preserve_order")

    def __init__(
        self,
        entries: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
        *,
        preserve_order: bool = True,
    ) -> None:
        self._data: dict[str, Entry] = {}
        self._preserve_order = preserve_order
        if entries is not None:
            self.update(entries)

    @property
    def preserve_order(self) -> bool:
        """Whether iteration follows insertion order."""
        return self._preserve_order

    def insert(self, key: str, value: str | Value | Mapping[str, Any]) -> Entry | None:
        """Insert an entry and return the entry it replaced, if any.

        Parameters
        ----------
        key : str
            Non-empty key.
        value : str | Value | Mapping[str, Any]
            Scalar string or nested map.

        Returns
        -------
        str | Value | None
            Previous entry under ``key``.
        """
        previous = self._data.get(key)
        self[key] = value
        return previous

    def __getitem__(self, key: str) -> Entry:
        return self._data[key]

    def __setitem__(self, key: str, value: str | Value | Mapping[str, Any]) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Value keys must be strings, got {type(key).__name__}")
        if not key:
            raise ValueError("Value keys must not be empty")
        self._data[key] = self._coerce(value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        if self._preserve_order:
            return iter(self._data)
        return iter(sorted(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"Value({ {key: self._data[key] for key in self}!r})"

    def _coerce(self, value: Any) -> Entry:
        if isinstance(value, str | Value):
            return value
        if isinstance(value, Mapping):
            return Value(value, preserve_order=self._preserve_order)
        raise TypeError(
            f"Value entries must be str, Value or a mapping, got {type(value).__name__}"
        )

    def copy(self) -> Value:
        """Return a deep copy with the same order mode."""
        return Value(
            (
                (key, entry.copy() if isinstance(entry, Value) else entry)
                for key, entry in self.items()
            ),
            preserve_order=self._preserve_order,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to nested plain dictionaries in iteration order.

        Examples
        --------
        >>> Value({"db": {"host": "localhost"}}).to_dict()
        {'db': {'host': 'localhost'}}
        """
        return {
            key: entry.to_dict() if isinstance(entry, Value) else entry
            for key, entry in self.items()
        }
