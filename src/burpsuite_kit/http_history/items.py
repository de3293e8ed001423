"""Streaming reader for Burp Suite "Save items" HTTP history exports.

:class:`Items` reads the ``<items>`` root attributes eagerly and then yields
one validated :class:`~burpsuite_kit.http_history.item.Item` per ``<item>``
element.  Only the record currently being assembled is held in memory.

Typical use::

    with Items.from_path("history.xml") as items:
        print(items.attr.burp_version)
        for item in items:
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import IO, Any, Callable, Dict, Iterator, Optional, Set, Union

from ..core.config import Settings, get_settings
from ..core.constants import (
    ATTR_BASE64,
    ATTR_BURP_VERSION,
    ATTR_EXPORT_TIME,
    ATTR_HOST_IP,
    EXTENSION_NULL,
    ITEM_TAG,
    ROOT_TAG,
)
from ..exceptions import (
    DuplicateTagError,
    ItemMarkupError,
    ItemParseError,
    ItemsAttrInvalidError,
    ItemsAttrMissingError,
    ItemsMarkupError,
    ItemsUnexpectedEofError,
    ItemUnexpectedEofError,
    StateMismatchError,
    TagAttrInvalidError,
    TagAttrMissingError,
    TagsMissingError,
    TagValueInvalidError,
    TagValueMissingError,
    UnknownItemTagError,
    UnknownRootTagError,
)
from ..logging import get_logger
from .events import (
    MARKUP_ERRORS,
    EndTag,
    Eof,
    MarkupEvent,
    MarkupEventSource,
    StartTag,
    Text,
)
from .item import (
    TAG_SET,
    Item,
    ItemHostAttr,
    ItemRequestAttr,
    ItemResponseAttr,
    ItemTag,
)
from .values import (
    parse_bool,
    parse_export_time,
    parse_method,
    parse_port,
    parse_scheme,
    parse_status,
    parse_u32,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ItemsAttr:
    burp_version: str
    export_time: datetime


# ---------------------------------------------------------------------------
# Cursor states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Idle:
    """Between records."""


@dataclass(frozen=True)
class WaitTag:
    """Inside ``<item>``, between fields."""


@dataclass(frozen=True)
class WaitTagValue:
    """A field element is open and its content is expected."""

    tag: ItemTag


State = Union[Idle, WaitTag, WaitTagValue]

IDLE = Idle()
WAIT_TAG = WaitTag()


# ---------------------------------------------------------------------------
# Field content
# ---------------------------------------------------------------------------


def _parse_extension(text: str) -> Optional[str]:
    return None if text == EXTENSION_NULL else text


def _parse_comment(text: str) -> Optional[str]:
    return text or None


_VALUE_PARSERS: Dict[ItemTag, Callable[[str], Any]] = {
    ItemTag.TIME: parse_export_time,
    ItemTag.URL: str,
    ItemTag.HOST: str,
    ItemTag.PORT: parse_port,
    ItemTag.PROTOCOL: parse_scheme,
    ItemTag.METHOD: parse_method,
    ItemTag.PATH: str,
    ItemTag.EXTENSION: _parse_extension,
    ItemTag.REQUEST: str,
    ItemTag.STATUS: parse_status,
    ItemTag.RESPONSE_LENGTH: parse_u32,
    ItemTag.MIMETYPE: str,
    ItemTag.RESPONSE: str,
    ItemTag.COMMENT: _parse_comment,
}

# Fields whose empty element is a value rather than an omission.
_EMPTY_VALUE_TAGS = frozenset({ItemTag.EXTENSION, ItemTag.COMMENT})

# Raw HTTP messages, handed back in the encoding of the export.
_PAYLOAD_TAGS = frozenset({ItemTag.REQUEST, ItemTag.RESPONSE})


class Items:
    """Iterator over the records of an HTTP history export.

    Parameters
    ----------
    reader:
        Binary stream positioned at the start of the document.
    settings:
        Optional :class:`~burpsuite_kit.core.config.Settings` override.

    Raises
    ------
    ItemsParseError
        If the root element is missing, unknown or lacks valid attributes.

    Iteration raises :class:`~burpsuite_kit.exceptions.ItemParseError`
    subclasses for malformed records.  A document truncated inside a record
    raises :class:`~burpsuite_kit.exceptions.ItemUnexpectedEofError` once and
    then stops; a document that ends between records simply stops.  After any
    other error the stream should be abandoned.
    """

    def __init__(self, reader: IO[bytes], *, settings: Optional[Settings] = None) -> None:
        settings = settings or get_settings()
        self._events = MarkupEventSource(
            reader,
            chunk_size=settings.read_chunk_size,
            huge_tree=settings.huge_tree,
        )
        self._owned: Optional[IO[bytes]] = None

        self.attr = self._read_attr()

        self._state: State = IDLE
        self._values: Dict[ItemTag, Any] = {}
        self._tag_attrs: Dict[ItemTag, Any] = {}
        self._processed: Set[ItemTag] = set()
        self.is_eof = False

    @classmethod
    def from_reader(cls, reader: IO[bytes], *, settings: Optional[Settings] = None) -> "Items":
        return cls(reader, settings=settings)

    @classmethod
    def from_path(cls, path: Union[str, Path], *, settings: Optional[Settings] = None) -> "Items":
        """Open ``path`` and read its root element.

        The returned instance owns the file; use it as a context manager or
        call :meth:`close`.
        """
        handle = Path(path).open("rb")
        try:
            items = cls(handle, settings=settings)
        except Exception:
            handle.close()
            raise
        items._owned = handle
        return items

    def close(self) -> None:
        if self._owned is not None:
            self._owned.close()
            self._owned = None

    def __enter__(self) -> "Items":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Root element
    # ------------------------------------------------------------------
    def _read_attr(self) -> ItemsAttr:
        while True:
            try:
                event = self._events.read_event()
            except MARKUP_ERRORS as exc:
                raise ItemsMarkupError(str(exc)) from exc

            if isinstance(event, StartTag):
                if event.name != ROOT_TAG:
                    raise UnknownRootTagError(event.name)
                attr = self._parse_root_attrs(event.attrs)
                logger.debug(
                    "Opened export burpVersion=%s exportTime=%s",
                    attr.burp_version,
                    attr.export_time.isoformat(),
                )
                return attr
            if isinstance(event, Eof):
                raise ItemsUnexpectedEofError(context=event.detail)

    @staticmethod
    def _parse_root_attrs(attrs: Dict[str, str]) -> ItemsAttr:
        burp_version = attrs.get(ATTR_BURP_VERSION)
        if burp_version is None:
            raise ItemsAttrMissingError(ATTR_BURP_VERSION)

        export_time = attrs.get(ATTR_EXPORT_TIME)
        if export_time is None:
            raise ItemsAttrMissingError(ATTR_EXPORT_TIME)
        try:
            parsed_time = parse_export_time(export_time)
        except ValueError as exc:
            raise ItemsAttrInvalidError(ATTR_EXPORT_TIME, str(exc)) from exc

        return ItemsAttr(burp_version=burp_version, export_time=parsed_time)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------
    def next_item(self) -> Item:
        """Read events until one record is complete and return it.

        Raises :class:`~burpsuite_kit.exceptions.ItemUnexpectedEofError` at
        end of input, whether or not a record was in progress.
        """
        while True:
            event = self._read_event()

            if isinstance(event, StartTag):
                if event.name == ITEM_TAG:
                    self._open_item()
                else:
                    self._open_tag(event)
            elif isinstance(event, EndTag):
                if event.name == ITEM_TAG:
                    return self._close_item()
                if event.name != ROOT_TAG:
                    self._close_tag(event.name)
            elif isinstance(event, Text):
                if isinstance(self._state, WaitTagValue):
                    self._store(self._state.tag, event.value)
            else:
                raise ItemUnexpectedEofError(context=event.detail)

    def _read_event(self) -> MarkupEvent:
        try:
            return self._events.read_event()
        except MARKUP_ERRORS as exc:
            raise ItemMarkupError(str(exc)) from exc

    @staticmethod
    def _lookup(name: str) -> ItemTag:
        try:
            return ItemTag.from_name(name)
        except ValueError:
            raise UnknownItemTagError(name) from None

    def _open_item(self) -> None:
        if self._state != IDLE:
            raise StateMismatchError(f"expect {IDLE!r} but current {self._state!r}")
        self._values = {}
        self._tag_attrs = {}
        self._processed.clear()
        self._state = WAIT_TAG

    def _open_tag(self, event: StartTag) -> None:
        tag = self._lookup(event.name)
        if self._state != WAIT_TAG:
            raise StateMismatchError(
                f"expect {WAIT_TAG!r} but current {self._state!r} at <{tag}>"
            )
        if tag in self._processed:
            raise DuplicateTagError(tag)

        tag_attr = self._read_tag_attr(tag, event.attrs)
        if tag_attr is not None:
            self._tag_attrs[tag] = tag_attr
        self._state = WaitTagValue(tag)

    def _read_tag_attr(self, tag: ItemTag, attrs: Dict[str, str]) -> Any:
        if tag is ItemTag.HOST:
            ip = attrs.get(ATTR_HOST_IP)
            if ip is None:
                raise TagAttrMissingError(tag, ATTR_HOST_IP)
            try:
                return ItemHostAttr(ip=ip.encode(self._events.encoding))
            except UnicodeEncodeError as exc:
                raise TagAttrInvalidError(tag, ATTR_HOST_IP, str(exc)) from exc

        if tag is ItemTag.REQUEST or tag is ItemTag.RESPONSE:
            raw = attrs.get(ATTR_BASE64)
            if raw is None:
                raise TagAttrMissingError(tag, ATTR_BASE64)
            try:
                base64 = parse_bool(raw)
            except ValueError as exc:
                raise TagAttrInvalidError(tag, ATTR_BASE64, str(exc)) from exc
            if tag is ItemTag.REQUEST:
                return ItemRequestAttr(base64=base64)
            return ItemResponseAttr(base64=base64)

        return None

    def _store(self, tag: ItemTag, text: str) -> None:
        try:
            value = _VALUE_PARSERS[tag](text)
            if tag in _PAYLOAD_TAGS:
                value = value.encode(self._events.encoding)
        except ValueError as exc:
            raise TagValueInvalidError(tag, str(exc)) from exc

        tag_attr = self._tag_attrs.get(tag)
        self._values[tag] = value if tag_attr is None else (tag_attr, value)
        self._processed.add(tag)

    def _close_tag(self, name: str) -> None:
        tag = self._lookup(name)
        if self._state != WaitTagValue(tag):
            raise StateMismatchError(
                f"expect {WaitTagValue(tag)!r} but current {self._state!r}"
            )

        if tag not in self._processed:
            if tag not in _EMPTY_VALUE_TAGS:
                raise TagValueMissingError(tag)
            self._store(tag, "")
        self._state = WAIT_TAG

    def _close_item(self) -> Item:
        missing = TAG_SET - self._processed
        if missing:
            raise TagsMissingError(frozenset(missing))

        item = Item.from_tag_values(self._values)
        self._state = IDLE
        self._values = {}
        self._tag_attrs = {}
        self._processed.clear()
        logger.debug("Parsed item %s %s -> %s", item.method, item.url, item.status)
        return item

    # ------------------------------------------------------------------
    # Iteration
    # ------------------------------------------------------------------
    def __iter__(self) -> "Items":
        return self

    def __next__(self) -> Item:
        if self.is_eof:
            raise StopIteration
        try:
            return self.next_item()
        except ItemUnexpectedEofError:
            if self._state == IDLE:
                raise StopIteration from None
            self.is_eof = True
            logger.warning("Export truncated inside a record (state %r)", self._state)
            raise
        except ItemParseError as exc:
            logger.warning("Failed to parse item: %s", exc)
            raise

    def iter_results(self) -> Iterator[Union[Item, ItemParseError]]:
        """Yield records, or the error that ended the stream, as values.

        At most one error is yielded, always last.
        """
        while True:
            try:
                item = next(self)
            except StopIteration:
                return
            except ItemParseError as exc:
                yield exc
                return
            yield item


__all__ = [
    "Items",
    "ItemsAttr",
    "State",
    "Idle",
    "WaitTag",
    "WaitTagValue",
]
