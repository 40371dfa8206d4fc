"""Tests for the Value model."""

from __future__ import annotations

import pytest

from envbind.value import Value


class TestValueConstruction:
    """Tests for creating Value objects."""

    def test_empty(self) -> None:
        """Test a new value has no entries."""
        value = Value()
        assert len(value) == 0
        assert list(value) == []

    def test_from_mapping_nests_plain_dicts(self) -> None:
        """Test plain dicts among the entries become nested values."""
        value = Value({"db": {"host": "localhost"}})
        assert isinstance(value["db"], Value)
        assert value["db"]["host"] == "localhost"

    def test_from_pairs(self) -> None:
        """Test construction from an iterable of pairs."""
        value = Value([("a", "1"), ("b", "2")])
        assert value.to_dict() == {"a": "1", "b": "2"}

    def test_nested_inherits_order_mode(self) -> None:
        """Test nested values share the parent's order mode."""
        value = Value({"db": {"b": "2", "a": "1"}}, preserve_order=False)
        nested = value["db"]
        assert isinstance(nested, Value)
        assert nested.preserve_order is False


class TestValueInsert:
    """Tests for insert and item assignment."""

    def test_insert_new_key(self) -> None:
        """Test inserting a key returns None."""
        value = Value()
        assert value.insert("hello", "world") is None
        assert value["hello"] == "world"

    def test_insert_returns_previous(self) -> None:
        """Test replacing a key returns the replaced entry."""
        value = Value({"hello": "world"})
        assert value.insert("hello", "there") == "world"
        assert value["hello"] == "there"

    def test_get_missing_key(self) -> None:
        """Test get on a missing key returns the default."""
        assert Value().get("missing") is None

    def test_empty_key_rejected(self) -> None:
        """Test empty keys are not allowed."""
        with pytest.raises(ValueError, match="must not be empty"):
            Value().insert("", "x")

    def test_non_string_key_rejected(self) -> None:
        """Test non-string keys are not allowed."""
        with pytest.raises(TypeError):
            Value()[1] = "x"  # type: ignore[index]

    def test_non_string_entry_rejected(self) -> None:
        """Test scalars must already be strings."""
        with pytest.raises(TypeError, match="must be str"):
            Value().insert("port", 8080)  # type: ignore[arg-type]

    def test_delete(self) -> None:
        """Test deleting an entry."""
        value = Value({"a": "1", "b": "2"})
        del value["a"]
        assert list(value) == ["b"]


class TestValueOrdering:
    """Tests for order-preserving and canonical iteration."""

    def test_insertion_order(self) -> None:
        """Test iteration follows insertion order by default."""
        value = Value()
        for key in ("zeta", "alpha", "mid"):
            value.insert(key, "x")
        assert list(value) == ["zeta", "alpha", "mid"]

    def test_replacing_keeps_position(self) -> None:
        """Test replacing an entry does not move it."""
        value = Value({"a": "1", "b": "2"})
        value.insert("a", "3")
        assert list(value.items()) == [("a", "3"), ("b", "2")]

    def test_canonical_order(self) -> None:
        """Test iteration is sorted when order is not preserved."""
        value = Value(preserve_order=False)
        for key in ("zeta", "alpha", "mid"):
            value.insert(key, "x")
        assert list(value) == ["alpha", "mid", "zeta"]

    def test_equality_ignores_order(self) -> None:
        """Test values with the same entries are equal."""
        first = Value({"a": "1", "b": "2"})
        second = Value({"b": "2", "a": "1"}, preserve_order=False)
        assert first == second

    def test_equality_with_dict(self) -> None:
        """Test a value compares equal to a plain mapping."""
        assert Value({"a": "1"}) == {"a": "1"}


class TestValueHelpers:
    """Tests for copy, to_dict and repr."""

    def test_copy_is_deep(self) -> None:
        """Test modifying a copy leaves the original untouched."""
        original = Value({"db": {"host": "a"}})
        duplicate = original.copy()
        duplicate["db"]["host"] = "b"  # type: ignore[index]
        assert original["db"]["host"] == "a"  # type: ignore[index]

    def test_to_dict(self) -> None:
        """Test conversion to plain nested dicts."""
        value = Value({"db": {"host": "a"}, "name": "x"})
        assert value.to_dict() == {"db": {"host": "a"}, "name": "x"}
        assert type(value.to_dict()["db"]) is dict

    def test_repr(self) -> None:
        """Test repr shows entries."""
        assert repr(Value({"a": "1"})) == "Value({'a': '1'})"
