"""Character encoding detection for response bodies.

Detection order:
1. Byte order mark
2. ``charset`` parameter of the Content-Type header
3. ``<meta>`` charset declaration in the first 1024 bytes
4. Valid UTF-8
5. charset-normalizer's best guess
6. windows-1252
"""

from __future__ import annotations

import codecs
import logging
import re

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cp1252"
PRESCAN_LENGTH = 1024

_BOMS = (
    (codecs.BOM_UTF8, "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)

_META_CHARSET = re.compile(rb"""<meta[^>]*?charset\s*=\s*["']?\s*([a-zA-Z0-9_.:\-]+)""", re.IGNORECASE)


def sniff_encoding(content: bytes, content_type: str = "") -> str:
    """Return the canonical codec name for ``content``."""
    for bom, name in _BOMS:
        if content.startswith(bom):
            return name

    declared = canonical_encoding(declared_charset(content_type))
    if declared:
        return declared

    match = _META_CHARSET.search(content[:PRESCAN_LENGTH])
    if match:
        meta = canonical_encoding(match.group(1).decode("ascii"))
        if meta:
            return meta

    try:
        content.decode("utf-8")
    except UnicodeDecodeError:
        pass
    else:
        return "utf-8"

    best = from_bytes(content).best()
    if best is not None:
        guessed = canonical_encoding(best.encoding)
        if guessed:
            logger.debug(f"Detected encoding: {guessed}")
            return guessed

    return DEFAULT_ENCODING


def declared_charset(content_type: str) -> str | None:
    for part in content_type.split(";")[1:]:
        key, _, value = part.partition("=")
        if key.strip().lower() == "charset":
            return value.strip().strip("\"'")
    return None


def canonical_encoding(label: str | None) -> str | None:
    if not label:
        return None
    try:
        return codecs.lookup(label).name
    except LookupError:
        return None
