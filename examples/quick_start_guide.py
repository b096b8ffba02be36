#!/usr/bin/env python3
"""
Quick Start Guide for XML Row Extractor.

This example walks through streaming extraction, column mapping, DOM/XPath
extraction and writing rows back out as XML fragments.
"""

import io
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from xml_row_extractor import (
    ExtractorConfig,
    StructuralError,
    XmlDomExtractor,
    XmlExtractor,
    evaluate,
    extract_rows,
    write_rows,
)

ORDERS = b"""<?xml version="1.0" encoding="utf-8"?>
<orders>
  <order><id>1</id><customer>Ada</customer><note>rush <b>today</b></note></order>
  <order><id>2</id><customer/></order>
  <order><id>3</id><cust>Grace</cust></order>
</orders>
"""


def quick_start_example():
    """Stream rows out of a document."""
    print("QUICK START - XML Row Extractor")
    print("=" * 40)

    # Step 1: one row per <order>, one column per child element
    print("\nStep 1: Streaming extraction")
    print("-" * 30)
    for row in extract_rows(ORDERS, "order", "id string, customer string, note string"):
        print(f"  {row.to_dict()}")

    # Step 2: read the customer column from <cust> elements too
    print("\nStep 2: Column mapping")
    print("-" * 30)
    extractor = XmlExtractor("order", {"cust": "customer"})
    rows = list(extractor.extract(io.BytesIO(ORDERS), "id string, customer string"))
    for row in rows:
        print(f"  {row.as_tuple()}")
    print(f"  metrics: {extractor.last_metrics.summary()}")

    # Step 3: write the rows back as fragments
    print("\nStep 3: Rows to XML")
    print("-" * 30)
    out = io.StringIO()
    count = write_rows(rows, out, "order", {"cust": "customer"})
    print(f"  {count} rows: {out.getvalue()}")


def dom_example():
    """Use XPath paths over a loaded document."""
    print("\nDOM / XPath extraction")
    print("-" * 30)

    extractor = XmlDomExtractor("order[id > 1]", {"id": "id", "cust|customer": "customer"})
    for row in extractor.extract_string(ORDERS, "id string, customer string"):
        print(f"  {row.as_tuple()}")

    print(f"  order count: {evaluate(ORDERS, 'count(order)')}")


def error_example():
    """Show how truncated input is reported."""
    print("\nTruncated input")
    print("-" * 30)

    rows = extract_rows(b"<order><id>1</id></order><order><id>2", None, "id string",
                        config=ExtractorConfig(row_element="order"))
    try:
        for row in rows:
            print(f"  {row.as_tuple()}")
    except StructuralError as e:
        print(f"  stopped: {e} (open elements: {e.open_elements})")


def main():
    """Main function."""
    quick_start_example()
    dom_example()
    error_example()

    print("\nAll examples completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
