"""Pull-based markup events over :class:`lxml.etree.XMLPullParser`.

The source reads fixed-size chunks from a binary stream, passes them through
:class:`~burpsuite_kit.http_history.decoding.DocumentDecoder`, feeds lxml and
hands out one event at a time.  Finished elements are cleared and earlier
siblings dropped from the tree, so memory stays bounded by a single record
however large the export is.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import IO, Deque, Dict, Optional, Union

from lxml import etree

from ..logging import get_logger
from .decoding import DEFAULT_ENCODING, DocumentDecoder, restore_marks

logger = get_logger(__name__)

# Raised by ``read_event`` for input that is not a well-formed document.
MARKUP_ERRORS = (etree.XMLSyntaxError, UnicodeDecodeError, LookupError)


@dataclass(frozen=True)
class StartTag:
    name: str
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EndTag:
    name: str


@dataclass(frozen=True)
class Text:
    """Character data of a leaf element; CDATA sections are included."""

    value: str


@dataclass(frozen=True)
class Eof:
    # Set when lxml rejected the unfinished document on termination.
    detail: Optional[str] = None


MarkupEvent = Union[StartTag, EndTag, Text, Eof]


class MarkupEventSource:
    """Turn a binary stream into :data:`MarkupEvent` objects on demand.

    ``read_event`` raises one of :data:`MARKUP_ERRORS` for malformed input.
    Once the stream is exhausted it keeps returning :class:`Eof`.  Carriage
    returns inside CDATA sections are reported as written.
    """

    def __init__(
        self,
        reader: IO[bytes],
        *,
        chunk_size: int = 64 * 1024,
        huge_tree: bool = True,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._reader = reader
        self._chunk_size = chunk_size
        self._decoder = DocumentDecoder()
        self._parser = etree.XMLPullParser(
            events=("start", "end"),
            huge_tree=huge_tree,
            remove_comments=True,
            remove_pis=True,
            resolve_entities=False,
            no_network=True,
        )
        self._pending: Deque[MarkupEvent] = deque()
        self._error: Optional[Exception] = None
        self._eof: Optional[Eof] = None

    @property
    def encoding(self) -> str:
        """Codec of the source document, known once its head has been read."""
        return self._decoder.encoding or DEFAULT_ENCODING

    def read_event(self) -> MarkupEvent:
        while not self._pending:
            if self._error is not None:
                raise self._error
            if self._eof is not None:
                return self._eof
            self._fill()
        return self._pending.popleft()

    def _fill(self) -> None:
        chunk = self._reader.read(self._chunk_size)
        final = not chunk
        try:
            data = self._decoder.decode(chunk, final=final)
            if data:
                self._parser.feed(data)
        except MARKUP_ERRORS as exc:
            logger.debug("Tokenizer rejected input: %s", exc)
            self._error = exc
        else:
            if final:
                self._eof = self._terminate()
        self._collect()

    def _terminate(self) -> Eof:
        # libxml2 may hold back the last bytes until the push parser is
        # closed, so closing flushes them.  An unfinished document fails here.
        try:
            self._parser.close()
        except etree.XMLSyntaxError as exc:
            logger.debug("Input ended inside an unfinished document: %s", exc)
            return Eof(detail=str(exc))
        return Eof()

    def _collect(self) -> None:
        for action, elem in self._parser.read_events():
            if action == "start":
                attrs = {key: restore_marks(value) for key, value in elem.attrib.items()}
                self._pending.append(StartTag(elem.tag, attrs))
                continue

            if len(elem) == 0 and elem.text is not None:
                self._pending.append(Text(restore_marks(elem.text)))
            self._pending.append(EndTag(elem.tag))

            elem.clear()
            parent = elem.getparent()
            if parent is not None:
                while elem.getprevious() is not None:
                    del parent[0]


__all__ = [
    "MARKUP_ERRORS",
    "StartTag",
    "EndTag",
    "Text",
    "Eof",
    "MarkupEvent",
    "MarkupEventSource",
]
