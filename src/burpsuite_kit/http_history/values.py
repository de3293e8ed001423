"""Strict converters from export text to typed values.

Every helper raises ``ValueError`` with a short reason on bad input; the
record extractor wraps that reason in the matching parse error.
"""

from __future__ import annotations

import re
from datetime import datetime

from ..core.constants import (
    EXPORT_TIME_FORMAT,
    PORT_MAX,
    SCHEME_MAX_LEN,
    STATUS_MAX,
    STATUS_MIN,
    U32_MAX,
)

# weekday month day time zone year
_EXPORT_TIME_RE = re.compile(r"(\S+ \S+ \S+ \S+) ([A-Za-z][A-Za-z0-9+\-:]*) (\S+)")
_DECIMAL_RE = re.compile(r"[0-9]+")
_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+\-.]*")
# RFC 7230 token characters
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def parse_export_time(text: str) -> datetime:
    """Parse ``Wed Jan 06 11:27:54 UTC 2021`` into a naive ``datetime``.

    The zone token is required but not applied.
    """
    match = _EXPORT_TIME_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"time data {text!r} does not match 'Www Mmm DD HH:MM:SS ZZZ YYYY'")
    head, _zone, year = match.groups()
    parsed = datetime.strptime(f"{head} {year}", EXPORT_TIME_FORMAT)
    # strptime reads %a without checking it against the date
    weekday = head.split(" ", 1)[0]
    if weekday.lower() != parsed.strftime("%a").lower():
        raise ValueError(f"weekday {weekday!r} does not match {parsed.date().isoformat()}")
    return parsed


def _parse_unsigned(text: str, maximum: int) -> int:
    if not _DECIMAL_RE.fullmatch(text):
        raise ValueError(f"invalid digit found in string {text!r}")
    value = int(text)
    if value > maximum:
        raise ValueError(f"number too large to fit in target type: {text}")
    return value


def parse_port(text: str) -> int:
    return _parse_unsigned(text, PORT_MAX)


def parse_u32(text: str) -> int:
    return _parse_unsigned(text, U32_MAX)


def parse_status(text: str) -> int:
    """Return the status code for a three digit string in 100-599."""
    if len(text) != 3 or not _DECIMAL_RE.fullmatch(text):
        raise ValueError(f"invalid status code {text!r}")
    code = int(text)
    if not STATUS_MIN <= code <= STATUS_MAX:
        raise ValueError(f"invalid status code {text!r}")
    return code


def parse_method(text: str) -> str:
    if not _TOKEN_RE.fullmatch(text):
        raise ValueError(f"invalid HTTP method {text!r}")
    return text


def parse_scheme(text: str) -> str:
    if len(text) > SCHEME_MAX_LEN:
        raise ValueError("scheme too long")
    if not _SCHEME_RE.fullmatch(text):
        raise ValueError(f"invalid scheme {text!r}")
    return text


def parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError("provided string was not `true` or `false`")


__all__ = [
    "parse_export_time",
    "parse_port",
    "parse_u32",
    "parse_status",
    "parse_method",
    "parse_scheme",
    "parse_bool",
]
