"""Tests for the CLI main module."""

import json

import pytest

from xml_row_extractor.cli.main import (
    EXIT_EXTRACTION_ERROR,
    EXIT_OK,
    EXIT_USAGE_ERROR,
    create_argument_parser,
    main,
    read_jsonl,
    records_to_rows,
)
from xml_row_extractor.shared.errors import XmlRowExtractorError

FRAGMENTS = b"<row><a>foo</a><b>3</b></row><row><a/></row>"


@pytest.fixture
def xml_file(tmp_path):
    path = tmp_path / "rows.xml"
    path.write_bytes(FRAGMENTS)
    return path


class TestArgumentParser:
    """Test command-line parsing."""

    def test_extract_arguments(self):
        """Test extract options and defaults."""
        args = create_argument_parser().parse_args(
            ["extract", "in.xml", "--schema", "a string", "--map", "x=a", "--map", "y=b"]
        )

        assert args.command == "extract"
        assert args.input == "in.xml"
        assert args.row is None
        assert args.map == ["x=a", "y=b"]
        assert args.format == "jsonl"
        assert args.dom is False

    def test_emit_arguments(self):
        """Test emit options and defaults."""
        args = create_argument_parser().parse_args(["emit", "rows.jsonl", "--escape-values"])

        assert args.command == "emit"
        assert args.row == "row"
        assert args.escape_values is True

    def test_schema_is_required(self):
        """Test that extract needs a schema."""
        with pytest.raises(SystemExit) as exc_info:
            main(["extract", "in.xml"])

        assert exc_info.value.code == EXIT_USAGE_ERROR

    def test_no_command(self, capsys):
        """Test running without a command."""
        assert main([]) == EXIT_USAGE_ERROR
        assert "usage" in capsys.readouterr().err


class TestExtractCommand:
    """Test the extract command."""

    def test_jsonl_to_stdout(self, xml_file, capsys):
        """Test JSON lines output."""
        code = main(["extract", str(xml_file), "--row", "row", "--schema", "a string, b string"])

        lines = capsys.readouterr().out.splitlines()
        assert code == EXIT_OK
        assert [json.loads(line) for line in lines] == [
            {"a": "foo", "b": "3"},
            {"a": "", "b": None},
        ]

    def test_csv_to_file(self, xml_file, tmp_path):
        """Test CSV output written to a file."""
        out = tmp_path / "rows.csv"

        code = main([
            "extract", str(xml_file), "--schema", "a string, b string",
            "--format", "csv", "--output", str(out),
        ])

        assert code == EXIT_OK
        assert out.read_text(encoding="utf-8") == "a,b\nfoo,3\n,\n"

    def test_column_mapping(self, tmp_path, capsys):
        """Test --map options."""
        path = tmp_path / "mapped.xml"
        path.write_bytes(b"<row><x>1</x></row>")

        code = main(["extract", str(path), "--schema", "a string, b string", "--map", "x=a"])

        assert code == EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"a": "1", "b": None}

    def test_config_file(self, tmp_path, capsys):
        """Test the row element and mapping from a configuration file."""
        path = tmp_path / "items.xml"
        path.write_bytes(b"<items><item><x>1</x></item></items>")
        config = tmp_path / "job.json"
        config.write_text(json.dumps({"row_element": "item", "column_paths": {"x": "a"}}))

        code = main(["extract", str(path), "--schema", "a string", "--config", str(config)])

        assert code == EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"a": "1"}

    def test_dom_mode(self, tmp_path, capsys):
        """Test XPath extraction with namespaces."""
        path = tmp_path / "ns.xml"
        path.write_bytes(b'<r xmlns:p="urn:p"><p:row id="7"><p:a>1</p:a></p:row></r>')

        code = main([
            "extract", str(path), "--dom", "--row", "p:row", "--schema", "id string, a string",
            "--map", "@id=id", "--map", "p:a=a", "--namespaces", 'xmlns:p="urn:p"',
        ])

        assert code == EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"id": "7", "a": "1"}

    def test_namespaces_require_dom(self, xml_file, capsys):
        """Test that namespaces are rejected for streaming extraction."""
        code = main(["extract", str(xml_file), "--schema", "a string", "--namespaces", "p=urn:p"])

        assert code == EXIT_USAGE_ERROR
        assert "--namespaces requires --dom" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        """Test a nonexistent input file."""
        code = main(["extract", str(tmp_path / "missing.xml"), "--schema", "a string"])

        assert code == EXIT_USAGE_ERROR
        assert "File not found" in capsys.readouterr().err

    def test_non_text_schema(self, xml_file, capsys):
        """Test a schema the extractor cannot fill."""
        code = main(["extract", str(xml_file), "--schema", "a int"])

        assert code == EXIT_USAGE_ERROR
        assert "must be of type 'string'" in capsys.readouterr().err

    def test_truncated_input(self, tmp_path, capsys):
        """Test that rows before a structural error are still written."""
        path = tmp_path / "truncated.xml"
        path.write_bytes(b"<row><a>1</a></row><row><a>2")

        code = main(["extract", str(path), "--schema", "a string"])

        captured = capsys.readouterr()
        assert code == EXIT_EXTRACTION_ERROR
        assert json.loads(captured.out.splitlines()[0]) == {"a": "1"}
        assert "ended without proper closing tags" in captured.err

    def test_malformed_input(self, tmp_path, capsys):
        """Test malformed XML."""
        path = tmp_path / "bad.xml"
        path.write_bytes(b"<row><a>1</b></row>")

        assert main(["extract", str(path), "--schema", "a string"]) == EXIT_EXTRACTION_ERROR
        assert "mismatched tag" in capsys.readouterr().err


class TestEmitCommand:
    """Test the emit command."""

    def test_emit_to_file(self, tmp_path):
        """Test writing JSON lines rows as fragments."""
        source = tmp_path / "rows.jsonl"
        source.write_text('{"a": "foo", "b": "3"}\n\n{"a": "", "b": null}\n', encoding="utf-8")
        out = tmp_path / "rows.xml"

        code = main(["emit", str(source), "--output", str(out)])

        assert code == EXIT_OK
        assert out.read_bytes() == FRAGMENTS

    def test_extract_emit_round_trip(self, xml_file, tmp_path):
        """Test that extract followed by emit reproduces the input."""
        jsonl = tmp_path / "rows.jsonl"
        xml_out = tmp_path / "again.xml"

        assert main([
            "extract", str(xml_file), "--schema", "a string, b string", "--output", str(jsonl)
        ]) == EXIT_OK
        assert main(["emit", str(jsonl), "--output", str(xml_out)]) == EXIT_OK

        assert xml_out.read_bytes() == FRAGMENTS

    def test_emit_with_mapping_and_escaping(self, tmp_path):
        """Test --map, --row and --escape-values."""
        source = tmp_path / "rows.jsonl"
        source.write_text('{"a": "<b>"}\n', encoding="utf-8")
        out = tmp_path / "rows.xml"

        code = main([
            "emit", str(source), "--row", "item", "--map", "x=a", "--escape-values",
            "--output", str(out),
        ])

        assert code == EXIT_OK
        assert out.read_bytes() == b"<item><x>&lt;b&gt;</x></item>"

    def test_emit_malformed_value(self, tmp_path, capsys):
        """Test a value that is not a well-formed fragment."""
        source = tmp_path / "rows.jsonl"
        source.write_text('{"a": "<b>"}\n', encoding="utf-8")

        code = main(["emit", str(source), "--output", str(tmp_path / "out.xml")])

        assert code == EXIT_EXTRACTION_ERROR
        assert "not a well-formed XML fragment" in capsys.readouterr().err

    def test_emit_invalid_json(self, tmp_path, capsys):
        """Test a line that is not JSON."""
        source = tmp_path / "rows.jsonl"
        source.write_text("{nope}\n", encoding="utf-8")

        code = main(["emit", str(source), "--output", str(tmp_path / "out.xml")])

        assert code == EXIT_EXTRACTION_ERROR
        assert "Line 1 is not valid JSON" in capsys.readouterr().err


class TestJsonLines:
    """Test JSON lines to row conversion."""

    def test_first_record_fixes_columns(self, tmp_path):
        """Test that later records may omit columns."""
        source = tmp_path / "rows.jsonl"
        source.write_text('{"a": "1", "b": "2"}\n{"b": "3"}\n', encoding="utf-8")

        with source.open(encoding="utf-8") as stream:
            rows = list(records_to_rows(read_jsonl(stream)))

        assert [row.as_tuple() for row in rows] == [("1", "2"), (None, "3")]

    def test_unknown_column(self):
        """Test a record with a column the first record lacks."""
        with pytest.raises(XmlRowExtractorError, match="not present in the first record"):
            list(records_to_rows(iter([{"a": "1"}, {"c": "2"}])))

    def test_non_string_value(self):
        """Test a record with a number value."""
        with pytest.raises(XmlRowExtractorError, match="must hold a string or null, not int"):
            list(records_to_rows(iter([{"a": 1}])))

    def test_non_object_line(self, tmp_path):
        """Test a line holding a JSON array."""
        source = tmp_path / "rows.jsonl"
        source.write_text("[1]\n", encoding="utf-8")

        with source.open(encoding="utf-8") as stream:
            with pytest.raises(XmlRowExtractorError, match="Line 1 is not a JSON object"):
                list(read_jsonl(stream))
