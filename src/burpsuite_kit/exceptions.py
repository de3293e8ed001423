"""Custom exceptions for the :mod:`burpsuite_kit` package.

Errors are organised along two axes.  The *phase* bases
(:class:`ItemsParseError` for the root element, :class:`ItemParseError` for
individual records) tell where reading stopped; the *kind* bases
(:class:`MarkupError`, :class:`UnknownTagError`, :class:`UnexpectedEofError`,
:class:`AttrMissingError`, :class:`AttrInvalidError`) tell what went wrong and
are shared by both phases.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet

if TYPE_CHECKING:  # pragma: no cover
    from .http_history.item import ItemTag


class BurpSuiteKitError(Exception):
    """Base class for all custom ``burpsuite_kit`` exceptions.

    Parameters
    ----------
    message:
        Short description of the failure.
    context:
        Optional additional information about where/why the error occurred.
    suggestion:
        Optional hint that may help recover from the error.
    """

    def __init__(
        self,
        message: str = "",
        *,
        context: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.context = context
        self.suggestion = suggestion


# ---------------------------------------------------------------------------
# Kinds shared by the root and record phases
# ---------------------------------------------------------------------------


class MarkupError(BurpSuiteKitError):
    """The XML tokenizer reported a syntax error."""


class UnknownTagError(BurpSuiteKitError):
    """An element name is not part of the export format."""

    def __init__(self, name: str, **kwargs) -> None:
        super().__init__(f"UnknownTag {name!r}", **kwargs)
        self.name = name


class UnexpectedEofError(BurpSuiteKitError):
    """Input ended before the document structure was complete."""


class AttrMissingError(BurpSuiteKitError):
    """A required attribute is absent."""


class AttrInvalidError(BurpSuiteKitError):
    """A required attribute is present but its value cannot be parsed."""


# ---------------------------------------------------------------------------
# Root element (``<items>``) phase
# ---------------------------------------------------------------------------


class ItemsParseError(BurpSuiteKitError):
    """Raised when the root element or its attributes cannot be read."""


class ItemsMarkupError(ItemsParseError, MarkupError):
    """Malformed XML before the root element was opened."""


class UnknownRootTagError(ItemsParseError, UnknownTagError):
    """The first element is not ``<items>``."""


class ItemsUnexpectedEofError(ItemsParseError, UnexpectedEofError):
    """Input ended before the root element was opened."""

    def __init__(self, message: str = "UnexpectedEof", **kwargs) -> None:
        super().__init__(message, **kwargs)


class ItemsAttrMissingError(ItemsParseError, AttrMissingError):
    """A required root attribute is absent."""

    def __init__(self, attr: str, **kwargs) -> None:
        super().__init__(f"AttrMissing {attr}", **kwargs)
        self.attr = attr


class ItemsAttrInvalidError(ItemsParseError, AttrInvalidError):
    """A root attribute failed to parse."""

    def __init__(self, attr: str, reason: str, **kwargs) -> None:
        super().__init__(f"AttrInvalid {attr} {reason}", **kwargs)
        self.attr = attr
        self.reason = reason


# ---------------------------------------------------------------------------
# Record (``<item>``) phase
# ---------------------------------------------------------------------------


class ItemParseError(BurpSuiteKitError):
    """Raised when a single ``<item>`` record cannot be extracted."""


class ItemMarkupError(ItemParseError, MarkupError):
    """Malformed XML inside the record stream."""


class UnknownItemTagError(ItemParseError, UnknownTagError):
    """An element inside the record stream is not a known field."""


class ItemUnexpectedEofError(ItemParseError, UnexpectedEofError):
    """Input ended while records were being read."""

    def __init__(self, message: str = "UnexpectedEof", **kwargs) -> None:
        super().__init__(message, **kwargs)


class StateMismatchError(ItemParseError):
    """Elements are nested or ordered in a way the format does not allow."""


class DuplicateTagError(ItemParseError):
    """A field appears more than once in one record."""

    def __init__(self, tag: "ItemTag", **kwargs) -> None:
        super().__init__(f"DuplicateTag {tag}", **kwargs)
        self.tag = tag


class TagsMissingError(ItemParseError):
    """A record was closed before all of its fields were seen."""

    def __init__(self, missing: FrozenSet["ItemTag"], **kwargs) -> None:
        names = ", ".join(sorted(str(tag) for tag in missing))
        super().__init__(f"SomeTagsMissing {names}", **kwargs)
        self.missing = frozenset(missing)


class TagAttrMissingError(ItemParseError, AttrMissingError):
    """A field element lacks a required attribute."""

    def __init__(self, tag: "ItemTag", attr: str, **kwargs) -> None:
        super().__init__(f"TagAttrMissing {tag} {attr}", **kwargs)
        self.tag = tag
        self.attr = attr


class TagAttrInvalidError(ItemParseError, AttrInvalidError):
    """A field attribute failed to parse."""

    def __init__(self, tag: "ItemTag", attr: str, reason: str, **kwargs) -> None:
        super().__init__(f"TagAttrInvalid {tag} {attr} {reason}", **kwargs)
        self.tag = tag
        self.attr = attr
        self.reason = reason


class TagValueMissingError(ItemParseError):
    """A field was closed without any content."""

    def __init__(self, tag: "ItemTag", **kwargs) -> None:
        super().__init__(f"TagValueMissing {tag}", **kwargs)
        self.tag = tag


class TagValueInvalidError(ItemParseError):
    """A field's content failed its type coercion."""

    def __init__(self, tag: "ItemTag", reason: str, **kwargs) -> None:
        super().__init__(f"TagValueInvalid {tag} {reason}", **kwargs)
        self.tag = tag
        self.reason = reason


__all__ = [
    "BurpSuiteKitError",
    "MarkupError",
    "UnknownTagError",
    "UnexpectedEofError",
    "AttrMissingError",
    "AttrInvalidError",
    "ItemsParseError",
    "ItemsMarkupError",
    "UnknownRootTagError",
    "ItemsUnexpectedEofError",
    "ItemsAttrMissingError",
    "ItemsAttrInvalidError",
    "ItemParseError",
    "ItemMarkupError",
    "UnknownItemTagError",
    "ItemUnexpectedEofError",
    "StateMismatchError",
    "DuplicateTagError",
    "TagsMissingError",
    "TagAttrMissingError",
    "TagAttrInvalidError",
    "TagValueMissingError",
    "TagValueInvalidError",
]
