from __future__ import annotations

from typing import Iterable, Protocol

from bs4 import BeautifulSoup

CID_PREFIX = "cid:"


class InlineAttachment(Protocol):
    id: str
    file_path: str | None

    @property
    def is_inline(self) -> bool: ...


def resolve_inline(html: str, attachments: Iterable[InlineAttachment]) -> str:
    if not html:
        return html
    for attachment in attachments:
        if attachment.is_inline and attachment.file_path:
            html = html.replace(CID_PREFIX + attachment.id, attachment.file_path)
    return html


def content_id_references(html: str | None) -> list[str]:
    if not html or CID_PREFIX not in html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    references: list[str] = []
    for tag in soup.find_all(True):
        for attr in ("src", "href", "background"):
            value = tag.get(attr)
            if isinstance(value, str) and value.lower().startswith(CID_PREFIX):
                reference = value[len(CID_PREFIX):].strip()
                if reference and reference not in references:
                    references.append(reference)
    return references


def unresolved_references(html: str | None, attachments: Iterable[InlineAttachment]) -> list[str]:
    resolved = {attachment.id for attachment in attachments if attachment.is_inline and attachment.file_path}
    return [reference for reference in content_id_references(html) if reference not in resolved]
