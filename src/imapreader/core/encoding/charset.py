from __future__ import annotations

import codecs
import logging

logger = logging.getLogger(__name__)

FALLBACK_CHARSET = "iso-8859-1"

# Tokens servers and mail clients use when the real charset is unknown.
_UNKNOWN_CHARSETS = {"", "default", "unknown", "unknown-8bit", "x-unknown"}


def canonical_charset(charset: str | None) -> str:
    cleaned = (charset or "").strip().strip('"').lower()
    if cleaned in _UNKNOWN_CHARSETS:
        return FALLBACK_CHARSET
    return cleaned


def _same_charset(left: str, right: str) -> bool:
    if left == right:
        return True
    try:
        return codecs.lookup(left).name == codecs.lookup(right).name
    except LookupError:
        return False


def normalize(data: bytes, source_charset: str | None, target_charset: str) -> bytes:
    if not data:
        return data
    if source_charset is not None and source_charset.strip().lower() == target_charset.strip().lower():
        return data

    source = canonical_charset(source_charset)
    target = canonical_charset(target_charset)
    if _same_charset(source, target):
        return data

    try:
        return data.decode(source).encode(target)
    except LookupError:
        logger.debug("Unknown charset %r, keeping bytes as is", source_charset)
    except (UnicodeDecodeError, UnicodeEncodeError) as exc:
        logger.debug("Transcoding %s -> %s failed: %s", source, target, exc)
    return data


def to_text(data: bytes, charset: str) -> str:
    try:
        return data.decode(canonical_charset(charset), errors="replace")
    except LookupError:
        return data.decode("utf-8", errors="replace")
