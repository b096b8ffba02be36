"""Main CLI entry point for the xml-rows command-line tool.

Provides extraction of rows from XML files to JSON lines or CSV, and the
reverse operation of writing JSON lines back out as XML row fragments.
"""

import argparse
import csv
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Dict, Iterator, List, Optional

from xml_row_extractor import __version__
from xml_row_extractor.api import extract_rows, write_rows
from xml_row_extractor.dom import XmlDomExtractor
from xml_row_extractor.extraction.paths import ColumnPathTable
from xml_row_extractor.rows import Row, RowSchema
from xml_row_extractor.shared.config import ExtractorConfig
from xml_row_extractor.shared.errors import ConfigurationError, XmlRowExtractorError
from xml_row_extractor.shared.logging import get_logger

EXIT_OK = 0
EXIT_EXTRACTION_ERROR = 1
EXIT_USAGE_ERROR = 2

STDIO = "-"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-rows",
        description="Extract flat rows from XML fragments and write rows back as XML"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only report errors"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract rows from XML")
    extract_parser.add_argument(
        "input",
        help="XML file to read ('-' for standard input)"
    )
    extract_parser.add_argument(
        "--row", "-r",
        help="Row element name, or row XPath with --dom (default: from config, else 'row')"
    )
    extract_parser.add_argument(
        "--schema", "-s",
        required=True,
        help="Output columns, e.g. 'a string, b string'"
    )
    extract_parser.add_argument(
        "--map", "-m",
        action="append",
        default=[],
        metavar="SOURCE=COLUMN",
        help="Read COLUMN from element (or XPath) SOURCE; repeatable"
    )
    extract_parser.add_argument(
        "--format", "-f",
        choices=["jsonl", "csv"],
        default="jsonl",
        help="Output format (default: jsonl)"
    )
    extract_parser.add_argument(
        "--output", "-o",
        help="Output file (default: stdout)"
    )
    extract_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Extractor configuration file (JSON)"
    )
    extract_parser.add_argument(
        "--dom",
        action="store_true",
        help="Load the whole document and use XPath for rows and columns"
    )
    extract_parser.add_argument(
        "--namespaces", "-n",
        help="Namespace declarations for --dom, e.g. 'xmlns:a=\"urn:a\"'"
    )

    # Emit command
    emit_parser = subparsers.add_parser("emit", help="Write JSON lines rows as XML fragments")
    emit_parser.add_argument(
        "input",
        help="JSON lines file, one object per row ('-' for standard input)"
    )
    emit_parser.add_argument(
        "--row", "-r",
        default="row",
        help="Row element name (default: row)"
    )
    emit_parser.add_argument(
        "--map", "-m",
        action="append",
        default=[],
        metavar="ELEMENT=COLUMN",
        help="Write COLUMN as element ELEMENT; repeatable"
    )
    emit_parser.add_argument(
        "--escape-values",
        action="store_true",
        help="Write values as escaped text instead of inner XML"
    )
    emit_parser.add_argument(
        "--output", "-o",
        help="Output file (default: stdout)"
    )

    return parser


@contextmanager
def open_input(name: str, binary: bool) -> Iterator[IO[Any]]:
    """Open an input file, or standard input for '-'."""
    if name == STDIO:
        yield sys.stdin.buffer if binary else sys.stdin
        return
    path = Path(name)
    if not path.is_file():
        raise ConfigurationError(f"File not found: {path}", "input")
    with path.open("rb" if binary else "r", encoding=None if binary else "utf-8") as handle:
        yield handle


@contextmanager
def open_output(name: Optional[str], binary: bool = False) -> Iterator[IO[Any]]:
    """Open an output file, or standard output when no name is given."""
    if name is None or name == STDIO:
        yield sys.stdout.buffer if binary else sys.stdout
        sys.stdout.flush()
        return
    if binary:
        with open(name, "wb") as handle:
            yield handle
    else:
        with open(name, "w", encoding="utf-8", newline="") as handle:
            yield handle


def write_jsonl(rows: Iterator[Row], out: IO[str]) -> int:
    """Write one JSON object per row."""
    count = 0
    for row in rows:
        out.write(json.dumps(row.to_dict(), ensure_ascii=False))
        out.write("\n")
        count += 1
    return count


def write_csv(rows: Iterator[Row], out: IO[str], schema: RowSchema) -> int:
    """Write a header and one record per row; missing values become empty fields."""
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(schema.names)
    count = 0
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
        count += 1
    return count


def read_jsonl(stream: IO[str]) -> Iterator[Dict[str, Any]]:
    """Read JSON objects, one per non-blank line."""
    for line_number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            raise XmlRowExtractorError(f"Line {line_number} is not valid JSON: {e}") from e
        if not isinstance(record, dict):
            raise XmlRowExtractorError(f"Line {line_number} is not a JSON object")
        yield record


def records_to_rows(records: Iterator[Dict[str, Any]]) -> Iterator[Row]:
    """Turn JSON objects into rows; the first object fixes the column order."""
    schema: Optional[RowSchema] = None
    for record in records:
        if schema is None:
            schema = RowSchema.of(*record)
        unknown = [name for name in record if name not in schema]
        if unknown:
            raise XmlRowExtractorError(f"Columns not present in the first record: {unknown}")
        values = []
        for name in schema.names:
            value = record.get(name)
            if value is not None and not isinstance(value, str):
                raise XmlRowExtractorError(
                    f"Column '{name}' must hold a string or null, not {type(value).__name__}"
                )
            values.append(value)
        yield Row(schema, tuple(values))


def cmd_extract(args: argparse.Namespace) -> int:
    """Handle extract command."""
    logger = get_logger(__name__, None, "cli_extract")

    config = ExtractorConfig.from_file(args.config) if args.config else ExtractorConfig()
    row = args.row if args.row else config.row_element
    column_paths = ColumnPathTable.from_pairs(args.map) if args.map else None
    schema = RowSchema.parse(args.schema)

    with open_input(args.input, binary=True) as stream:
        if args.dom:
            extractor = XmlDomExtractor(
                row, column_paths, args.namespaces, config.correlation_id
            )
            rows = extractor.extract(stream, schema)
        else:
            if args.namespaces:
                raise ConfigurationError("--namespaces requires --dom", "namespaces")
            rows = extract_rows(stream, row, schema, column_paths, config)

        with open_output(args.output) as out:
            if args.format == "csv":
                count = write_csv(rows, out, schema)
            else:
                count = write_jsonl(rows, out)

    logger.info("Extraction finished", extra={"rows_written": count, "format": args.format})
    return EXIT_OK


def cmd_emit(args: argparse.Namespace) -> int:
    """Handle emit command."""
    logger = get_logger(__name__, None, "cli_emit")

    column_paths = ColumnPathTable.from_pairs(args.map) if args.map else None
    with open_input(args.input, binary=False) as stream:
        rows = records_to_rows(read_jsonl(stream))
        with open_output(args.output, binary=True) as out:
            count = write_rows(
                rows, out, args.row, column_paths, escape_values=args.escape_values
            )

    logger.info("Emit finished", extra={"rows_written": count})
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help(sys.stderr)
        return EXIT_USAGE_ERROR

    # Set up logging verbosity
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "extract":
            return cmd_extract(args)
        if args.command == "emit":
            return cmd_emit(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return EXIT_USAGE_ERROR

    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except (XmlRowExtractorError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_EXTRACTION_ERROR
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
