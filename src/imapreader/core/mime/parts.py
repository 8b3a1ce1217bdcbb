from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class PartType(IntEnum):
    TEXT = 0
    MULTIPART = 1
    MESSAGE = 2
    APPLICATION = 3
    AUDIO = 4
    IMAGE = 5
    VIDEO = 6
    MODEL = 7
    OTHER = 8

    @classmethod
    def from_name(cls, value: str | None) -> PartType:
        try:
            return cls[(value or "").strip().upper()]
        except KeyError:
            return cls.OTHER


class TransferEncoding(IntEnum):
    SEVEN_BIT = 0
    EIGHT_BIT = 1
    BINARY = 2
    BASE64 = 3
    QUOTED_PRINTABLE = 4
    OTHER = 5

    @classmethod
    def from_name(cls, value: str | None) -> TransferEncoding:
        token = (value or "7bit").strip().lower()
        return _ENCODING_NAMES.get(token, cls.OTHER)


_ENCODING_NAMES = {
    "7bit": TransferEncoding.SEVEN_BIT,
    "8bit": TransferEncoding.EIGHT_BIT,
    "binary": TransferEncoding.BINARY,
    "base64": TransferEncoding.BASE64,
    "quoted-printable": TransferEncoding.QUOTED_PRINTABLE,
}


@dataclass(slots=True)
class PartNode:
    type: PartType
    subtype: str
    encoding: int = TransferEncoding.SEVEN_BIT
    disposition: str | None = None
    parameters: list[tuple[str, str]] = field(default_factory=list)
    disposition_parameters: list[tuple[str, str]] = field(default_factory=list)
    content_id: str | None = None
    children: list[PartNode] = field(default_factory=list)

    @property
    def mime_type(self) -> str:
        return f"{self.type.name}/{self.subtype}".lower()

    @property
    def is_rfc822(self) -> bool:
        return self.type == PartType.MESSAGE and self.subtype.upper() == "RFC822"

    def merged_parameters(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for name, value in self.parameters:
            params[name.lower()] = value
        for name, value in self.disposition_parameters:
            params[name.lower()] = value
        return params

    def charset(self) -> str | None:
        for name, value in self.parameters:
            if name.lower() == "charset" and value:
                return value
        return None
