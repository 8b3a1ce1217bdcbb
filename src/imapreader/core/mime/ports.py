from __future__ import annotations

from typing import Protocol

from .parts import PartNode


class PartSource(Protocol):
    def fetch_part_bytes(self, uid: int, path: str | None, peek: bool = True) -> bytes: ...

    def fetch_structure(self, uid: int) -> PartNode: ...

    def fetch_raw_headers(self, uid: int) -> bytes: ...


class AttachmentSink(Protocol):
    def save(self, name: str, content: bytes, mime: str | None = None) -> str: ...
