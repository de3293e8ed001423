"""Record model and field catalog for Burp Suite HTTP history exports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union


@dataclass(frozen=True)
class ItemHostAttr:
    ip: bytes


@dataclass(frozen=True)
class ItemRequestAttr:
    base64: bool


@dataclass(frozen=True)
class ItemResponseAttr:
    base64: bool


class ItemTag(Enum):
    """Child elements of ``<item>``; the value is the markup name."""

    TIME = "time"
    URL = "url"
    HOST = "host"
    PORT = "port"
    PROTOCOL = "protocol"
    METHOD = "method"
    PATH = "path"
    EXTENSION = "extension"
    REQUEST = "request"
    STATUS = "status"
    RESPONSE_LENGTH = "responselength"
    MIMETYPE = "mimetype"
    RESPONSE = "response"
    COMMENT = "comment"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_name(cls, name: Union[str, bytes]) -> "ItemTag":
        """Return the tag for markup ``name``.

        Raises ``ValueError`` when ``name`` is not part of the catalog.
        """
        if isinstance(name, bytes):
            name = name.decode("utf-8")
        return cls(name)


TAG_SET: FrozenSet[ItemTag] = frozenset(ItemTag)


@dataclass(frozen=True)
class Item:
    """One captured request/response exchange."""

    time: datetime
    url: str
    host: Tuple[ItemHostAttr, str]
    port: int
    protocol: str
    method: str
    path: str
    extension: Optional[str]
    request: Tuple[ItemRequestAttr, bytes]
    status: int
    response_length: int
    mimetype: str
    response: Tuple[ItemResponseAttr, bytes]
    comment: Optional[str]

    @classmethod
    def from_tag_values(cls, values: Dict[ItemTag, Any]) -> "Item":
        """Build an :class:`Item` from a complete ``{ItemTag: value}`` mapping.

        ``KeyError`` is raised for an incomplete mapping; callers check
        completeness against :data:`TAG_SET` first.
        """
        return cls(
            time=values[ItemTag.TIME],
            url=values[ItemTag.URL],
            host=values[ItemTag.HOST],
            port=values[ItemTag.PORT],
            protocol=values[ItemTag.PROTOCOL],
            method=values[ItemTag.METHOD],
            path=values[ItemTag.PATH],
            extension=values[ItemTag.EXTENSION],
            request=values[ItemTag.REQUEST],
            status=values[ItemTag.STATUS],
            response_length=values[ItemTag.RESPONSE_LENGTH],
            mimetype=values[ItemTag.MIMETYPE],
            response=values[ItemTag.RESPONSE],
            comment=values[ItemTag.COMMENT],
        )

    def __str__(self) -> str:
        return (
            f"Time: {self.time.isoformat()}, {self.method} {self.url} "
            f"({self.host[1]} [{self.host[0].ip.decode('utf-8', 'replace')}]:{self.port}), "
            f"Status: {self.status}, Length: {self.response_length}, "
            f"MIME: {self.mimetype}"
        )


__all__ = [
    "Item",
    "ItemHostAttr",
    "ItemRequestAttr",
    "ItemResponseAttr",
    "ItemTag",
    "TAG_SET",
]
