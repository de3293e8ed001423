"""Byte front end for the markup tokenizer.

An XML processor folds carriage returns in character data into line feeds
and reports text already decoded from the document encoding.  Raw HTTP
messages in CDATA sections must survive byte for byte, so documents are
decoded here, carriage returns inside CDATA are replaced by private-use marks
and lxml receives UTF-8.  :func:`restore_marks` undoes the substitution on
reported text; :attr:`DocumentDecoder.encoding` turns it back into the bytes
of the file.
"""

from __future__ import annotations

import codecs
import re
from typing import Optional, Tuple

DEFAULT_ENCODING = "utf-8"

# Bytes buffered before the encoding is decided; covers any XML declaration.
HEAD_SIZE = 1024

_MARK = "\ue000"
_MARK_SELF = _MARK + "\ue001"
_MARK_CR = _MARK + "\ue002"
_MARK_RE = re.compile("\ue000([\ue001\ue002])")

_CDATA_CLOSE = "]]>"
# Non-markup sections; only CDATA content keeps its carriage returns.
_SECTIONS = (("<![CDATA[", _CDATA_CLOSE), ("<!--", "-->"), ("<?", "?>"))
_LONGEST_OPEN = max(len(opener) for opener, _ in _SECTIONS)

_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF32_LE, "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32-be"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

_DECLARED_RE = re.compile(
    rb"<\?xml[^>]*?\sencoding\s*=\s*[\"']([A-Za-z][A-Za-z0-9._\-]*)[\"']"
)
_DECLARATION_RE = re.compile(
    r"\A(<\?xml[^>]*?\sencoding\s*=\s*)([\"'])[^\"']*\2"
)


def restore_marks(text: str) -> str:
    """Return ``text`` with escaped carriage returns put back."""
    if _MARK not in text:
        return text
    return _MARK_RE.sub(lambda m: "\r" if m.group(1) == "\ue002" else _MARK, text)


def sniff_encoding(head: bytes) -> Tuple[str, int]:
    """Return the codec for a document starting with ``head`` and its BOM length.

    Raises :class:`LookupError` for a declared encoding Python does not know.
    """
    for bom, name in _BOMS:
        if head.startswith(bom):
            return name, len(bom)
    match = _DECLARED_RE.match(head)
    if match is None:
        return DEFAULT_ENCODING, 0
    return codecs.lookup(match.group(1).decode("ascii")).name, 0


def _escape(text: str) -> str:
    return text.replace(_MARK, _MARK_SELF)


def _escape_cdata(text: str) -> str:
    return _escape(text).replace("\r", _MARK_CR)


class DocumentDecoder:
    """Incrementally re-encode document bytes as marked UTF-8 for lxml.

    ``decode`` raises :class:`UnicodeDecodeError` for bytes invalid in the
    document encoding and :class:`LookupError` for an unknown one.
    """

    def __init__(self) -> None:
        self.encoding: Optional[str] = None
        self._head = b""
        self._decoder: Optional[codecs.IncrementalDecoder] = None
        self._closer: Optional[str] = None
        self._held = ""

    def decode(self, data: bytes, final: bool = False) -> bytes:
        if self._decoder is None:
            self._head += data
            if not final and len(self._head) < HEAD_SIZE:
                return b""
            data, self._head = self._head, b""
            encoding, bom_size = sniff_encoding(data)
            self._decoder = codecs.getincrementaldecoder(encoding)()
            self.encoding = encoding
            text = self._decoder.decode(data[bom_size:], final)
            # lxml gets UTF-8, so the declaration has to say so
            text = _DECLARATION_RE.sub(r"\g<1>\g<2>UTF-8\g<2>", text, count=1)
        else:
            text = self._decoder.decode(data, final)
        return self._mark(text, final).encode("utf-8")

    def _mark(self, text: str, final: bool) -> str:
        text = self._held + text
        self._held = ""
        out = []
        pos = 0
        while pos < len(text):
            if self._closer is None:
                start, opener, closer = self._next_section(text, pos)
                if start < 0:
                    self._hold(text, pos, _LONGEST_OPEN - 1, final, out, _escape)
                    break
                end = start + len(opener)
                out.append(_escape(text[pos:end]))
                self._closer = closer
                pos = end
                continue

            escape = _escape_cdata if self._closer == _CDATA_CLOSE else _escape
            end = text.find(self._closer, pos)
            if end < 0:
                self._hold(text, pos, len(self._closer) - 1, final, out, escape)
                break
            end += len(self._closer)
            out.append(escape(text[pos:end]))
            self._closer = None
            pos = end
        return "".join(out)

    def _hold(self, text, pos, size, final, out, escape) -> None:
        # keep a possible partial delimiter for the next chunk
        keep = len(text) if final else max(pos, len(text) - size)
        out.append(escape(text[pos:keep]))
        self._held = text[keep:]

    @staticmethod
    def _next_section(text: str, pos: int) -> Tuple[int, str, str]:
        found = (-1, "", "")
        for opener, closer in _SECTIONS:
            start = text.find(opener, pos)
            if start >= 0 and (found[0] < 0 or start < found[0]):
                found = (start, opener, closer)
        return found


__all__ = [
    "DEFAULT_ENCODING",
    "DocumentDecoder",
    "restore_marks",
    "sniff_encoding",
]
