"""Tests for the row builder and immutable rows."""

import dataclasses

import pytest

from xml_row_extractor.rows import Row, RowSchema, UpdatableRow


@pytest.fixture
def schema():
    return RowSchema.of("a", "b", "c")


class TestRow:
    """Test immutable row snapshots."""

    def test_access(self, schema):
        """Test access by name, position and iteration."""
        row = Row(schema, ("x", "", None))

        assert row["a"] == "x"
        assert row[1] == ""
        assert row["c"] is None
        assert list(row) == ["x", "", None]
        assert len(row) == 3
        assert row.as_tuple() == ("x", "", None)

    def test_get_with_default(self, schema):
        """Test that get() tolerates unknown columns."""
        row = Row(schema, ("x", None, None))

        assert row.get("a") == "x"
        assert row.get("z", "missing") == "missing"

    def test_to_dict_preserves_order(self, schema):
        """Test dictionary conversion."""
        row = Row(schema, ("x", "", None))

        assert list(row.to_dict().items()) == [("a", "x"), ("b", ""), ("c", None)]

    def test_width_must_match_schema(self, schema):
        """Test that rows cannot be wider or narrower than their schema."""
        with pytest.raises(ValueError, match="2 values for 3 columns"):
            Row(schema, ("x", "y"))

    def test_rows_are_frozen(self, schema):
        """Test that rows cannot be modified."""
        row = Row(schema, ("x", None, None))

        with pytest.raises(dataclasses.FrozenInstanceError):
            row.values = ("y", None, None)

    def test_equality(self, schema):
        """Test value-based equality."""
        assert Row(schema, ("x", None, None)) == Row(schema, ("x", None, None))


class TestUpdatableRow:
    """Test the mutable row builder."""

    def test_starts_all_missing(self, schema):
        """Test that every column starts as None."""
        builder = UpdatableRow(schema)

        assert builder.as_read_only().as_tuple() == (None, None, None)

    def test_accepts_schema_like(self):
        """Test construction from a declaration string."""
        builder = UpdatableRow("a string, b string")

        assert builder.schema.names == ("a", "b")

    def test_set_and_get(self, schema):
        """Test setting by name and position."""
        builder = UpdatableRow(schema)
        builder.set("a", "x")
        builder.set(2, "")

        assert builder.get("a") == "x"
        assert builder.get(1) is None
        assert builder.get("c") == ""

    def test_unknown_column(self, schema):
        """Test that unknown names and positions are rejected."""
        builder = UpdatableRow(schema)

        with pytest.raises(KeyError, match="not in the output schema"):
            builder.set("z", "x")
        with pytest.raises(IndexError):
            builder.set(3, "x")

    def test_snapshots_are_independent(self, schema):
        """Test that later changes do not leak into earlier snapshots."""
        builder = UpdatableRow(schema)
        builder.set("a", "first")
        first = builder.as_read_only()

        builder.clear()
        builder.set("b", "second")
        second = builder.as_read_only()

        assert first.as_tuple() == ("first", None, None)
        assert second.as_tuple() == (None, "second", None)
