from __future__ import annotations

from email.errors import HeaderParseError
from email.header import decode_header as _split_encoded_words

from .charset import normalize, to_text


def _plain_chunk(chunk: bytes) -> str:
    # plain text between encoded words comes back as raw-unicode-escape bytes;
    # a literal "\u" in it (C:\users) is not a valid escape
    try:
        return chunk.decode("raw-unicode-escape")
    except UnicodeDecodeError:
        return chunk.decode("iso-8859-1")


def decode_header(value: str | bytes | None, target_charset: str = "UTF-8") -> str:
    if not value:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    try:
        chunks = _split_encoded_words(value)
    except (HeaderParseError, ValueError):
        return value

    parts: list[str] = []
    for chunk, charset in chunks:
        if isinstance(chunk, str):
            parts.append(chunk)
        elif charset is None:
            parts.append(_plain_chunk(chunk))
        else:
            parts.append(to_text(normalize(chunk, charset, target_charset), target_charset))
    return "".join(parts)
