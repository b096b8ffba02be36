"""Re-serialization of the inner XML of a column element.

Nested markup inside a column is not parsed into fields; it is written back
out as text, event by event, so the column value is the element's inner XML.
"""

import io
from typing import Optional
from xml.sax.saxutils import XMLGenerator
from xml.sax.xmlreader import AttributesImpl

from .events import EventType, XmlEvent


class FragmentWriter(XMLGenerator):
    """XMLGenerator that also writes comments and CDATA sections.

    No XML declaration is written: the output is a fragment.
    """

    def __init__(self, out: io.StringIO) -> None:
        super().__init__(out, encoding="utf-8", short_empty_elements=True)

    def comment(self, content: str) -> None:
        self.ignorableWhitespace(f"<!--{content}-->")

    def cdata(self, content: str) -> None:
        # "]]>" cannot appear inside a section, split it across two
        escaped = content.replace("]]>", "]]]]><![CDATA[>")
        self.ignorableWhitespace(f"<![CDATA[{escaped}]]>")


class FragmentRecomposer:
    """Accumulates nested XML events into an inner-XML string.

    A fresh buffer is opened by ``begin`` for every column and released by
    ``read_and_clear`` or ``close``.
    """

    def __init__(self) -> None:
        self._buffer: Optional[io.StringIO] = None
        self._writer: Optional[FragmentWriter] = None

    @property
    def active(self) -> bool:
        return self._writer is not None

    def begin(self) -> None:
        """Open an empty buffer and writer, discarding any previous one."""
        self.close()
        self._buffer = io.StringIO()
        self._writer = FragmentWriter(self._buffer)

    def accumulate(self, event: XmlEvent) -> None:
        """Write one nested event to the fragment."""
        writer = self._writer
        if writer is None:
            raise RuntimeError("accumulate() called before begin()")

        if event.type is EventType.START_ELEMENT:
            writer.startElement(event.name, AttributesImpl(dict(event.attributes)))
            if event.is_empty:
                writer.endElement(event.name)
        elif event.type is EventType.END_ELEMENT:
            writer.endElement(event.name)
        elif event.type is EventType.CDATA:
            writer.cdata(event.value)
        elif event.type is EventType.COMMENT:
            writer.comment(event.value)
        elif event.type is EventType.PROCESSING_INSTRUCTION:
            writer.processingInstruction(event.name, event.value)
        else:
            writer.characters(event.value)

    def read_and_clear(self) -> str:
        """Return the accumulated fragment and release the buffer."""
        if self._writer is None or self._buffer is None:
            raise RuntimeError("read_and_clear() called before begin()")
        value = self._buffer.getvalue()
        self.close()
        return value

    def close(self) -> None:
        """Release the writer and buffer; safe to call more than once."""
        if self._buffer is not None:
            self._buffer.close()
        self._buffer = None
        self._writer = None
