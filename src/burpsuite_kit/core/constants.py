"""Centralized constant definitions for burpsuite_kit."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# HTTP history export markup
# ---------------------------------------------------------------------------
ROOT_TAG: str = "items"
ITEM_TAG: str = "item"

ATTR_BURP_VERSION: str = "burpVersion"
ATTR_EXPORT_TIME: str = "exportTime"
ATTR_HOST_IP: str = "ip"
ATTR_BASE64: str = "base64"

# <extension> content meaning "no extension"
EXTENSION_NULL: str = "null"

# ---------------------------------------------------------------------------
# Value formats
# ---------------------------------------------------------------------------
# ``Wed Jan 06 11:27:54 UTC 2021``; the zone token is matched separately and
# dropped before ``strptime`` sees the rest.
EXPORT_TIME_FORMAT: str = "%a %b %d %H:%M:%S %Y"

PORT_MAX: int = 0xFFFF
U32_MAX: int = 0xFFFF_FFFF
STATUS_MIN: int = 100
STATUS_MAX: int = 599
SCHEME_MAX_LEN: int = 64
