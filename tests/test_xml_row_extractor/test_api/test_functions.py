"""Tests for the one-call API functions."""

import io
from pathlib import Path

import pytest

from xml_row_extractor import ExtractorConfig, extract_rows, write_rows
from xml_row_extractor.rows import UpdatableRow
from xml_row_extractor.shared.errors import ConfigurationError, StructuralError

AB = "a string, b string"
FRAGMENTS = "<row><a>foo</a><b>3</b></row><row><a/></row>"


def tuples(rows):
    return [row.as_tuple() for row in rows]


class TestExtractRows:
    """Test input type handling."""

    def test_bytes(self):
        """Test extraction from bytes."""
        assert tuples(extract_rows(FRAGMENTS.encode(), "row", AB)) == [("foo", "3"), ("", None)]

    def test_str(self):
        """Test that a str is XML text."""
        assert tuples(extract_rows(FRAGMENTS, "row", AB)) == [("foo", "3"), ("", None)]

    def test_str_with_declared_encoding(self):
        """Test that a str declaration does not affect decoding."""
        xml = '<?xml version="1.0" encoding="ISO-8859-1"?>\n<row><a>café</a></row>'

        assert tuples(extract_rows(xml, "row", AB)) == [("café", None)]

    def test_binary_stream(self):
        """Test extraction from a file-like object."""
        rows = extract_rows(io.BytesIO(FRAGMENTS.encode()), "row", AB)

        assert tuples(rows) == [("foo", "3"), ("", None)]

    def test_path(self, tmp_path):
        """Test extraction from a file path."""
        path = tmp_path / "rows.xml"
        path.write_bytes(FRAGMENTS.encode())

        assert tuples(extract_rows(path, "row", AB)) == [("foo", "3"), ("", None)]

    def test_path_error_after_rows(self, tmp_path):
        """Test that a file path input still reports truncated input."""
        path = tmp_path / "truncated.xml"
        path.write_bytes(b"<row><a>1</a></row><row>")
        rows = extract_rows(path, "row", AB)

        assert next(rows).as_tuple() == ("1", None)
        with pytest.raises(StructuralError):
            next(rows)

    def test_missing_path(self, tmp_path):
        """Test that a missing file fails immediately."""
        with pytest.raises(ConfigurationError, match="File not found"):
            extract_rows(tmp_path / "missing.xml", "row", AB)

    def test_path_schema_errors_are_immediate(self, tmp_path):
        """Test eager validation for path inputs."""
        path = tmp_path / "rows.xml"
        path.write_bytes(FRAGMENTS.encode())

        with pytest.raises(ConfigurationError, match="must be of type 'string'"):
            extract_rows(path, "row", "a int")

    def test_mapping_and_config(self):
        """Test column paths and configuration together."""
        config = ExtractorConfig(row_element="item")

        rows = extract_rows(b"<item><x>1</x></item>", None, AB, {"x": "a"}, config)

        assert tuples(rows) == [("1", None)]

    def test_row_builder(self):
        """Test passing an UpdatableRow instead of a schema."""
        builder = UpdatableRow(AB)

        assert tuples(extract_rows(FRAGMENTS, "row", builder))[0] == ("foo", "3")

    def test_unsupported_source(self):
        """Test an input of an unsupported type."""
        with pytest.raises(ConfigurationError, match="Unsupported source type: int"):
            extract_rows(42, "row", AB)


class TestWriteRows:
    """Test writing rows as fragments."""

    def test_write_rows(self):
        """Test that every row is written and counted."""
        stream = io.StringIO()

        count = write_rows(extract_rows(FRAGMENTS, "row", AB), stream, "row")

        assert count == 2
        assert stream.getvalue() == "<row><a>foo</a><b>3</b></row><row><a/></row>"

    def test_write_rows_escaped(self):
        """Test escaped output."""
        stream = io.BytesIO()
        rows = extract_rows(b"<row><a>x<i>y</i></a></row>", "row", AB)

        write_rows(rows, stream, "row", escape_values=True)

        assert stream.getvalue() == b"<row><a>x&lt;i&gt;y&lt;/i&gt;</a></row>"

    def test_round_trip_through_file(self, tmp_path):
        """Test writing fragments to a file and reading them back."""
        path = Path(tmp_path) / "out.xml"
        rows = list(extract_rows(FRAGMENTS, "row", AB))

        with path.open("wb") as stream:
            write_rows(rows, stream, "row")

        assert list(extract_rows(path, "row", AB)) == rows
