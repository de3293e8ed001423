# src/burpsuite_kit/__init__.py
from .http_history import (
    TAG_SET,
    Item,
    ItemHostAttr,
    ItemRequestAttr,
    ItemResponseAttr,
    ItemTag,
    Items,
    ItemsAttr,
)
from .exceptions import (
    BurpSuiteKitError,
    ItemsParseError,
    ItemParseError,
)
from .core.config import Settings, get_settings


__all__ = [
    "Items",
    "ItemsAttr",
    "Item",
    "ItemHostAttr",
    "ItemRequestAttr",
    "ItemResponseAttr",
    "ItemTag",
    "TAG_SET",
    "BurpSuiteKitError",
    "ItemsParseError",
    "ItemParseError",
    "Settings",
    "get_settings",
]
