from __future__ import annotations

import email
import logging
from datetime import datetime, timezone
from email.utils import getaddresses, parsedate_to_datetime

from dateutil import parser as dt_parser

from imapreader.config import Settings
from imapreader.core.encoding import decode_header
from imapreader.core.mime.assembler import MessageAssembler
from imapreader.core.mime.ports import AttachmentSink
from imapreader.sources.email_imap import ImapSession, ImapSessionError, MessageSummary, SearchQuery
from imapreader.sources.models import Message

CUSTOM_HEADER_MARKER = "X-"


def _decode_raw_headers(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("iso-8859-1")


def _split_address(address: str) -> tuple[str, str]:
    mailbox, _, host = address.strip().rpartition("@")
    if not mailbox:
        return host, ""
    return mailbox, host


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = dt_parser.parse(value, fuzzy=True)
        except (ValueError, OverflowError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MailboxReader:
    def __init__(
        self,
        settings: Settings,
        session: ImapSession,
        logger: logging.Logger | logging.LoggerAdapter,
        store: AttachmentSink | None = None,
    ):
        self.settings = settings
        self.session = session
        self.logger = logger
        self.store = store

    def _decode(self, value: str | None) -> str:
        return decode_header(value, self.settings.encoding)

    def _assembler(self, peek: bool) -> MessageAssembler:
        return MessageAssembler(
            self.session,
            self.store,
            encoding=self.settings.encoding,
            peek=peek,
            max_depth=self.settings.max_part_depth,
            logger=self.logger,
        )

    def apply_headers(self, message: Message, raw_headers: bytes) -> None:
        header_text = _decode_raw_headers(raw_headers)
        parsed = email.message_from_string(header_text)

        message.subject = self._decode(parsed.get("Subject"))
        message.date = _parse_date(parsed.get("Date"))

        senders = getaddresses(parsed.get_all("From", []))
        if senders:
            name, address = senders[0]
            mailbox, host = _split_address(address)
            if mailbox:
                message.set_from(mailbox, host, self._decode(name) or None)

        for name, address in getaddresses(parsed.get_all("To", [])):
            message.add_to(*_split_address(address), self._decode(name) or None)
        for name, address in getaddresses(parsed.get_all("Cc", [])):
            message.add_cc(*_split_address(address), self._decode(name) or None)
        for name, address in getaddresses(parsed.get_all("Reply-To", [])):
            message.add_reply_to(*_split_address(address), self._decode(name) or None)

        for line in header_text.split("\n"):
            if CUSTOM_HEADER_MARKER in line:
                message.add_custom_header(line, self.settings.encoding)

    @staticmethod
    def apply_summary(message: Message, summary: MessageSummary) -> None:
        flags = {flag.lower() for flag in summary.flags}
        message.msgno = summary.msgno
        message.size = summary.size
        message.recent = "\\recent" in flags
        message.unseen = "\\seen" not in flags
        message.flagged = "\\flagged" in flags
        message.answered = "\\answered" in flags
        message.deleted = "\\deleted" in flags
        message.draft = "\\draft" in flags

        if message.date is None and summary.internal_date is not None:
            internal = summary.internal_date
            message.date = internal if internal.tzinfo else internal.replace(tzinfo=timezone.utc)
        if message.date is not None:
            message.udate = int(message.date.timestamp())

    def get_email(self, uid: int, mark_as_read: bool | None = None) -> Message:
        mark = self.settings.mark_as_read if mark_as_read is None else mark_as_read
        message = Message(uid=uid)

        try:
            self.apply_headers(message, self.session.fetch_raw_headers(uid))
            self.apply_summary(message, self.session.fetch_summary(uid))

            root = self.session.fetch_structure(uid)
            self._assembler(peek=not mark).assemble(message, root)
            message.raw_body = self.session.fetch_raw_message(uid)
        except ImapSessionError as exc:
            self.logger.warning("Message %s could not be fetched: %s", uid, exc)
            raise

        self.logger.info(
            "Message %s assembled: plain=%s html=%s attachments=%s",
            uid,
            len(message.plain_text),
            len(message.html_text),
            len(message.attachments),
        )
        return message

    def get_email_by_msgno(self, msgno: int, mark_as_read: bool | None = None) -> Message | None:
        uid = self.session.uid_for_msgno(msgno)
        if uid is None:
            self.logger.warning("No message with sequence number %s in %s", msgno, self.session.mailbox)
            return None
        return self.get_email(uid, mark_as_read=mark_as_read)

    def get(self, query: SearchQuery, mark_as_read: bool | None = None) -> list[Message]:
        mark = self.settings.mark_as_read if mark_as_read is None else mark_as_read
        uids = query.paginate(self.session.search(query.terms))
        self.logger.info("Search matched, fetching %s messages", len(uids))

        messages: list[Message] = []
        for uid in uids:
            try:
                message = self.get_email(uid, mark_as_read=mark)
            except ImapSessionError:
                continue
            messages.append(message)
            if not mark:
                continue
            try:
                self.session.mark_as_read(uid)
            except ImapSessionError as exc:
                self.logger.warning("Message %s not marked as read: %s", uid, exc)
        return messages

    def mark_as_read(self, uid: int) -> None:
        self.session.mark_as_read(uid)

    def delete_email(self, uid: int) -> None:
        self.session.delete(uid)

    def move_email(self, uid: int, folder: str) -> bool:
        return self.session.move(uid, folder)
