from .item import (
    TAG_SET,
    Item,
    ItemHostAttr,
    ItemRequestAttr,
    ItemResponseAttr,
    ItemTag,
)
from .items import Items, ItemsAttr

__all__ = [
    "Item",
    "ItemHostAttr",
    "ItemRequestAttr",
    "ItemResponseAttr",
    "ItemTag",
    "TAG_SET",
    "Items",
    "ItemsAttr",
]
