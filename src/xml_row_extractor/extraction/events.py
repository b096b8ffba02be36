"""Forward-only XML event source built on the expat parser.

The reader pulls the byte stream in chunks, feeds each chunk to expat and
hands out the resulting events one at a time, so memory stays bounded by the
chunk size however large the document is. The input may hold several
consecutive row fragments instead of one root element: the decoded text is
parsed inside a synthetic wrapper element that never appears in the events.
"""

import codecs
from collections import deque
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import BinaryIO, Deque, Iterator, List, Optional, Tuple
from xml.parsers import expat

from xml_row_extractor.shared.config import StreamingConfig
from xml_row_extractor.shared.errors import MalformedXmlError
from xml_row_extractor.shared.logging import get_logger

from .encoding import detect_encoding, strip_xml_declaration

FRAGMENT_ROOT = "xml-row-extractor.fragments"
_ROOT_START = f"<{FRAGMENT_ROOT}>"
_ROOT_END = f"</{FRAGMENT_ROOT}>"


class EventType(Enum):
    """XML event types produced by the reader."""

    START_ELEMENT = auto()
    END_ELEMENT = auto()
    TEXT = auto()
    CDATA = auto()
    COMMENT = auto()
    PROCESSING_INSTRUCTION = auto()


@dataclass(frozen=True)
class EventPosition:
    """1-based line and column of the event in the source."""

    line: int
    column: int


@dataclass(frozen=True)
class XmlEvent:
    """A single parse event.

    ``is_empty`` is set on a start event whose element has no content; no
    end event follows such a start. For processing instructions ``name`` is
    the target and ``value`` the data.
    """

    type: EventType
    name: str = ""
    value: str = ""
    attributes: Tuple[Tuple[str, str], ...] = ()
    is_empty: bool = False
    position: Optional[EventPosition] = None


class XmlEventReader:
    """Reads parse events from a binary stream.

    Use as a context manager, or call ``close`` when done; iteration can be
    abandoned at any point. The underlying stream is not closed.
    """

    def __init__(
        self,
        stream: BinaryIO,
        config: Optional[StreamingConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize the reader.

        Args:
            stream: Readable binary stream positioned at the start of the XML
            config: Chunk and sniff sizes
            correlation_id: Optional correlation ID for logging
        """
        self._stream = stream
        self.config = config or StreamingConfig()
        self.logger = get_logger(__name__, correlation_id, "xml_event_reader")

        self.open_elements: List[str] = []
        self.bytes_read = 0
        self.encoding: Optional[str] = None

        self._parser: Optional[expat.XMLParserType] = None
        self._queue: Deque[XmlEvent] = deque()
        self._pending_start: Optional[XmlEvent] = None
        self._cdata: Optional[List[str]] = None
        self._in_root = False
        self._iterator: Optional[Iterator[XmlEvent]] = None

    def __enter__(self) -> "XmlEventReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[XmlEvent]:
        if self._iterator is None:
            self._iterator = self._read_events()
        return self._iterator

    def close(self) -> None:
        """Stop reading and release the parser."""
        if self._iterator is not None:
            self._iterator.close()
        self._release_parser()

    @property
    def at_top_level(self) -> bool:
        """True when no element is open outside the fragment wrapper."""
        return not self.open_elements

    def _read_events(self) -> Iterator[XmlEvent]:
        self._parser = self._create_parser()
        try:
            head = self._stream.read(self.config.sniff_size) or b""
            self.bytes_read += len(head)

            detected = detect_encoding(head)
            self.encoding = detected.encoding
            decoder = codecs.getincrementaldecoder(detected.encoding)()
            self.logger.debug(
                "Detected input encoding",
                extra={"encoding": detected.encoding, "method": detected.method.value}
            )

            text = self._decode(decoder, head[detected.bom_length:])
            declaration, text = strip_xml_declaration(text)
            # keep line numbers stable by blanking the declaration out
            blanked = "".join("\n" if c == "\n" else " " for c in declaration)
            yield from self._parse(_ROOT_START + blanked + text)

            while True:
                chunk = self._stream.read(self.config.chunk_size)
                if not chunk:
                    break
                self.bytes_read += len(chunk)
                yield from self._parse(self._decode(decoder, chunk))

            yield from self._parse(self._decode(decoder, b"", final=True))
            if self.at_top_level:
                yield from self._parse(_ROOT_END, final=True)
            self._flush_pending_start()
            yield from self._drain()
        finally:
            self._release_parser()

    def _create_parser(self) -> "expat.XMLParserType":
        parser = expat.ParserCreate()
        parser.ordered_attributes = True
        parser.buffer_text = True
        parser.StartElementHandler = self._on_start_element
        parser.EndElementHandler = self._on_end_element
        parser.CharacterDataHandler = self._on_character_data
        parser.StartCdataSectionHandler = self._on_start_cdata
        parser.EndCdataSectionHandler = self._on_end_cdata
        parser.CommentHandler = self._on_comment
        parser.ProcessingInstructionHandler = self._on_processing_instruction
        return parser

    def _release_parser(self) -> None:
        # handlers are bound methods, drop the parser to break the cycle
        self._parser = None
        self._queue.clear()
        self._pending_start = None

    def _decode(self, decoder: codecs.IncrementalDecoder, data: bytes, final: bool = False) -> str:
        try:
            return decoder.decode(data, final)
        except UnicodeDecodeError as e:
            raise MalformedXmlError(
                f"Input is not valid {self.encoding}: {e.reason} at byte {self.bytes_read - len(data) + e.start}"
            ) from e

    def _feed(self, text: str, final: bool = False) -> None:
        if not text and not final:
            return
        parser = self._parser
        if parser is None:
            raise RuntimeError("Event reader is closed")
        try:
            parser.Parse(text, final)
        except expat.ExpatError as e:
            position = self._position(e.lineno, e.offset)
            raise MalformedXmlError(
                expat.ErrorString(e.code), position.line, position.column
            ) from e

    def _parse(self, text: str, final: bool = False) -> Iterator[XmlEvent]:
        try:
            self._feed(text, final)
        except MalformedXmlError:
            # events completed before the error are delivered first
            yield from self._drain()
            raise
        yield from self._drain()

    def _drain(self) -> Iterator[XmlEvent]:
        while self._queue:
            yield self._queue.popleft()

    def _position(self, line: Optional[int] = None, offset: Optional[int] = None) -> EventPosition:
        parser = self._parser
        if line is None and parser is not None:
            line, offset = parser.CurrentLineNumber, parser.CurrentColumnNumber
        line = line or 1
        offset = offset or 0
        if line == 1:
            offset = max(offset - len(_ROOT_START), 0)
        return EventPosition(line, offset + 1)

    def _emit(self, event: XmlEvent) -> None:
        self._flush_pending_start()
        self._queue.append(event)

    def _flush_pending_start(self) -> None:
        if self._pending_start is not None:
            self._queue.append(self._pending_start)
            self._pending_start = None

    # expat handlers

    def _on_start_element(self, name: str, attributes: List[str]) -> None:
        if not self._in_root:
            self._in_root = True
            return
        self._flush_pending_start()
        pairs = tuple(zip(attributes[0::2], attributes[1::2]))
        self.open_elements.append(name)
        # held back until the next event shows whether the element is empty
        self._pending_start = XmlEvent(
            EventType.START_ELEMENT, name, attributes=pairs, position=self._position()
        )

    def _on_end_element(self, name: str) -> None:
        if not self.open_elements:
            return
        self.open_elements.pop()
        pending = self._pending_start
        if pending is not None and pending.name == name:
            self._pending_start = None
            self._queue.append(replace(pending, is_empty=True))
            return
        self._emit(XmlEvent(EventType.END_ELEMENT, name, position=self._position()))

    def _on_character_data(self, data: str) -> None:
        if self._cdata is not None:
            self._cdata.append(data)
            return
        if not self.open_elements and data.isspace():
            return
        self._emit(XmlEvent(EventType.TEXT, value=data, position=self._position()))

    def _on_start_cdata(self) -> None:
        self._flush_pending_start()
        self._cdata = []

    def _on_end_cdata(self) -> None:
        value = "".join(self._cdata or [])
        self._cdata = None
        self._emit(XmlEvent(EventType.CDATA, value=value, position=self._position()))

    def _on_comment(self, data: str) -> None:
        self._emit(XmlEvent(EventType.COMMENT, value=data, position=self._position()))

    def _on_processing_instruction(self, target: str, data: str) -> None:
        self._emit(
            XmlEvent(
                EventType.PROCESSING_INSTRUCTION, target, value=data, position=self._position()
            )
        )
