from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote

from imapreader.core.encoding import decode_header

from .parts import PartNode, PartType

ATTACHMENT_DISPOSITIONS = {"attachment", "inline"}


class PartKind(str, Enum):
    PLAIN = "plain"
    HTML = "html"
    NESTED_MESSAGE = "nested_message"
    ATTACHMENT = "attachment"
    INLINE = "inline"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class Classification:
    kind: PartKind
    attachment_id: str | None = None
    filename: str | None = None

    @property
    def is_attachment(self) -> bool:
        return self.kind in (PartKind.ATTACHMENT, PartKind.INLINE)


IGNORED = Classification(PartKind.IGNORED)


def clean_content_id(value: str | None) -> str | None:
    if not value:
        return None
    cleaned = value.strip(" <>\t\r\n")
    return cleaned or None


def _decode_extended(value: str) -> str:
    charset, tick, rest = value.partition("'")
    if not tick:
        return unquote(value)
    _language, _, text = rest.partition("'")
    try:
        return unquote(text, encoding=charset or "us-ascii", errors="replace")
    except LookupError:
        return unquote(text, errors="replace")


def _rfc2231_filename(params: dict[str, str], key: str) -> str | None:
    # filename*=utf-8''%D0%BE... and the continuation form filename*0*, filename*1*, ...
    if f"{key}*" in params:
        return _decode_extended(params[f"{key}*"])
    pieces = []
    index = 0
    while True:
        extended = params.get(f"{key}*{index}*")
        plain = params.get(f"{key}*{index}")
        if extended is None and plain is None:
            break
        pieces.append(extended if extended is not None else plain)
        index += 1
    if not pieces:
        return None
    joined = "".join(pieces)
    if f"{key}*0*" in params:
        return _decode_extended(joined)
    return joined


def resolve_filename(part: PartNode, target_charset: str = "UTF-8") -> str | None:
    params = part.merged_parameters()
    for key in ("filename", "name"):
        raw = params.get(key) or _rfc2231_filename(params, key)
        if raw:
            return decode_header(raw, target_charset) or None
    return None


def classify(part: PartNode, message_uid: int | str, target_charset: str = "UTF-8") -> Classification:
    disposition = (part.disposition or "").strip().lower()
    if disposition in ATTACHMENT_DISPOSITIONS and part.subtype.upper() != "PLAIN":
        filename = resolve_filename(part, target_charset)
        if not filename:
            return IGNORED
        content_id = clean_content_id(part.content_id) if disposition == "inline" else None
        if content_id:
            return Classification(PartKind.INLINE, attachment_id=content_id, filename=filename)
        return Classification(PartKind.ATTACHMENT, attachment_id=str(message_uid), filename=filename)

    if part.type == PartType.TEXT:
        if part.subtype.upper() == "PLAIN":
            return Classification(PartKind.PLAIN)
        return Classification(PartKind.HTML)

    if part.type == PartType.MESSAGE:
        return Classification(PartKind.NESTED_MESSAGE)

    return IGNORED
