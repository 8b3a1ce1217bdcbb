from __future__ import annotations

import base64
import binascii
import quopri
import re

from .parts import TransferEncoding

_BASE64_JUNK = re.compile(rb"[^A-Za-z0-9+/]")


def _decode_base64(data: bytes) -> bytes:
    cleaned = _BASE64_JUNK.sub(b"", data)
    remainder = len(cleaned) % 4
    if remainder == 1:
        # a single dangling character carries less than one byte
        cleaned = cleaned[:-1]
    elif remainder:
        cleaned += b"=" * (4 - remainder)
    try:
        return base64.b64decode(cleaned)
    except binascii.Error:
        return data


def _decode_quoted_printable(data: bytes) -> bytes:
    try:
        return quopri.decodestring(data)
    except (ValueError, binascii.Error):
        return data


def decode_part(data: bytes, encoding: int | None) -> bytes:
    if not data:
        return b""
    if encoding == TransferEncoding.BASE64:
        return _decode_base64(data)
    if encoding == TransferEncoding.QUOTED_PRINTABLE:
        return _decode_quoted_printable(data)
    return data
