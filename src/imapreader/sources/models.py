from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from imapreader.core.encoding import decode_header
from imapreader.core.mime.inline import resolve_inline


class AttachmentKind(str, Enum):
    ATTACHMENT = "attachment"
    INLINE = "inline"


@dataclass(frozen=True, slots=True)
class Recipient:
    mailbox: str
    host: str
    name: str | None = None

    @property
    def email(self) -> str:
        return f"{self.mailbox}@{self.host}"


@dataclass(slots=True)
class Attachment:
    id: str
    name: str
    disposition: AttachmentKind
    mime: str | None = None
    file_path: str | None = None
    content: bytes | None = None
    part_path: str | None = None
    key: str | None = None

    @property
    def is_inline(self) -> bool:
        return self.disposition == AttachmentKind.INLINE


@dataclass(slots=True)
class Message:
    uid: int
    msgno: int | None = None
    date: datetime | None = None
    udate: int | None = None
    size: int = 0
    subject: str = ""
    sender: Recipient | None = None
    to: list[Recipient] = field(default_factory=list)
    cc: list[Recipient] = field(default_factory=list)
    reply_to: list[Recipient] = field(default_factory=list)
    recent: bool = False
    unseen: bool = False
    flagged: bool = False
    answered: bool = False
    deleted: bool = False
    draft: bool = False
    plain_text: str = ""
    html_text: str = ""
    attachments: dict[str, Attachment] = field(default_factory=dict)
    custom_headers: dict[str, str] = field(default_factory=dict)
    raw_body: bytes | None = None

    def append_plain(self, text: str) -> None:
        self.plain_text += text

    def append_html(self, html: str) -> None:
        self.html_text += html

    def add_attachment(self, attachment: Attachment) -> str:
        key = attachment.id
        existing = self.attachments.get(key)
        if (
            existing is not None
            and not attachment.is_inline
            and attachment.part_path
            and existing.part_path != attachment.part_path
        ):
            key = f"{attachment.id}.{attachment.part_path}"
        attachment.key = key
        self.attachments[key] = attachment
        return key

    def attachment(self, key: str | int) -> Attachment | None:
        return self.attachments.get(str(key))

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)

    @property
    def html(self) -> str:
        if not self.html_text:
            return ""
        return resolve_inline(self.html_text, self.attachments.values())

    @staticmethod
    def _recipient(mailbox: str | None, host: str | None, name: str | None) -> Recipient | None:
        if not mailbox or not host:
            return None
        return Recipient(mailbox=mailbox, host=host, name=name or None)

    def add_to(self, mailbox: str | None, host: str | None, name: str | None = None) -> bool:
        recipient = self._recipient(mailbox, host, name)
        if recipient is None:
            return False
        self.to.append(recipient)
        return True

    def add_cc(self, mailbox: str | None, host: str | None, name: str | None = None) -> bool:
        recipient = self._recipient(mailbox, host, name)
        if recipient is None:
            return False
        self.cc.append(recipient)
        return True

    def add_reply_to(self, mailbox: str | None, host: str | None, name: str | None = None) -> bool:
        recipient = self._recipient(mailbox, host, name)
        if recipient is None:
            return False
        self.reply_to.append(recipient)
        return True

    def set_from(self, mailbox: str, host: str, name: str | None = None) -> None:
        self.sender = Recipient(mailbox=mailbox, host=host, name=name or None)

    @property
    def from_name(self) -> str | None:
        return self.sender.name if self.sender else None

    @property
    def from_email(self) -> str | None:
        return self.sender.email if self.sender else None

    def is_to(self, email: str) -> bool:
        return any(recipient.email == email for recipient in self.to)

    def add_custom_header(self, line: str, target_charset: str = "UTF-8") -> bool:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            return False
        self.custom_headers[name.strip()] = decode_header(value.strip(), target_charset)
        return True

    def get_custom_header(self, name: str) -> str | None:
        return self.custom_headers.get(name)

    def get_header(self, name: str) -> str | None:
        return self.get_custom_header(name)

    def save_raw(self, destination: Path | str | None = None) -> bytes:
        raw = self.raw_body or b""
        if destination is not None:
            path = Path(destination)
            if not path.exists():
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_bytes(raw)
        return raw
