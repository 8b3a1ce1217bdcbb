from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

from imapreader.config import ImapAccountConfig
from imapreader.core.mime.parts import PartNode

from .search import SearchTerm, build_criteria
from .structure import part_from_bodystructure

SEEN_FLAG = b"\\Seen"


class ImapSessionError(RuntimeError):
    pass


@dataclass(slots=True)
class MessageSummary:
    uid: int
    msgno: int | None = None
    flags: tuple[str, ...] = field(default_factory=tuple)
    size: int = 0
    internal_date: datetime | None = None


def _flag_text(flag: bytes | str) -> str:
    return flag.decode("ascii", errors="replace") if isinstance(flag, bytes) else flag


class ImapSession:
    def __init__(
        self,
        config: ImapAccountConfig,
        *,
        retry_attempts: int = 2,
        retry_delay_sec: float = 2.0,
        timeout_sec: float | None = 30.0,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.config = config
        self.retry_attempts = retry_attempts
        self.retry_delay_sec = retry_delay_sec
        self.timeout_sec = timeout_sec
        self.logger = logger or logging.getLogger(__name__)
        self.mailbox = config.mailbox
        self._client: IMAPClient | None = None

    def __enter__(self) -> ImapSession:
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _open(self) -> IMAPClient:
        client = IMAPClient(self.config.host, port=self.config.port, ssl=self.config.ssl, timeout=self.timeout_sec)
        client.login(self.config.username, self.config.password)
        client.select_folder(self.mailbox)
        return client

    def connect(self) -> IMAPClient:
        last_error: Exception | None = None
        for attempt in range(1, self.retry_attempts + 2):
            try:
                self._client = self._open()
                self.logger.info("IMAP connected: %s@%s/%s", self.config.username, self.config.host, self.mailbox)
                return self._client
            except (IMAPClientError, OSError) as exc:
                last_error = exc
                self.logger.warning("IMAP connect attempt %s failed: %s", attempt, exc)
                if attempt <= self.retry_attempts:
                    time.sleep(self.retry_delay_sec)
        raise ImapSessionError(f"Не удалось подключиться к {self.config.host}: {last_error}") from last_error

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            self._client.noop()
            return True
        except (IMAPClientError, OSError) as exc:
            self.logger.warning("IMAP connection lost: %s", exc)
            self._client = None
            return False

    @property
    def client(self) -> IMAPClient:
        if not self.ping():
            self.connect()
        return self._client

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.logout()
        except (IMAPClientError, OSError) as exc:
            self.logger.warning("IMAP logout failed: %s", exc)
        finally:
            self._client = None

    def select(self, mailbox: str, readonly: bool = False) -> None:
        self.client.select_folder(mailbox, readonly=readonly)
        self.mailbox = mailbox

    def _fetch(self, uid: int, items: list[str]) -> dict:
        try:
            response = self.client.fetch([uid], items)
        except (IMAPClientError, OSError) as exc:
            raise ImapSessionError(f"Ошибка FETCH {items} для UID {uid}: {exc}") from exc
        data = response.get(uid)
        if data is None:
            raise ImapSessionError(f"Письмо UID {uid} не найдено в {self.mailbox}")
        return data

    def _fetch_section(self, uid: int, section: str, peek: bool) -> bytes:
        command = "BODY.PEEK" if peek else "BODY"
        data = self._fetch(uid, [f"{command}[{section}]"])
        expected = f"BODY[{section}]".encode("ascii")
        if expected in data:
            return data[expected] or b""
        for key, value in data.items():
            if isinstance(key, bytes) and key.startswith(expected):
                return value or b""
        return b""

    def fetch_part_bytes(self, uid: int, path: str | None, peek: bool = True) -> bytes:
        return self._fetch_section(uid, path or "TEXT", peek)

    def fetch_structure(self, uid: int) -> PartNode:
        data = self._fetch(uid, ["BODYSTRUCTURE"])
        structure = data.get(b"BODYSTRUCTURE")
        if not structure:
            raise ImapSessionError(f"Сервер не вернул BODYSTRUCTURE для UID {uid}")
        return part_from_bodystructure(structure)

    def fetch_raw_headers(self, uid: int) -> bytes:
        return self._fetch_section(uid, "HEADER", peek=True)

    def fetch_raw_message(self, uid: int) -> bytes:
        return self._fetch_section(uid, "", peek=True)

    def fetch_summary(self, uid: int) -> MessageSummary:
        data = self._fetch(uid, ["FLAGS", "RFC822.SIZE", "INTERNALDATE"])
        return MessageSummary(
            uid=uid,
            msgno=data.get(b"SEQ"),
            flags=tuple(_flag_text(flag) for flag in data.get(b"FLAGS", ())),
            size=int(data.get(b"RFC822.SIZE") or 0),
            internal_date=data.get(b"INTERNALDATE"),
        )

    def search(self, terms: list[SearchTerm], charset: str | None = "UTF-8") -> list[int]:
        criteria = build_criteria(terms)
        try:
            return list(self.client.search(criteria, charset=charset))
        except (IMAPClientError, OSError) as exc:
            raise ImapSessionError(f"Ошибка SEARCH {criteria}: {exc}") from exc

    def uid_for_msgno(self, msgno: int) -> int | None:
        # a bare sequence set as the search key; the answer comes back as UIDs
        try:
            uids = self.client.search([str(msgno)])
        except (IMAPClientError, OSError) as exc:
            raise ImapSessionError(f"Ошибка SEARCH по номеру {msgno}: {exc}") from exc
        return uids[0] if uids else None

    def mark_as_read(self, uid: int) -> None:
        try:
            self.client.add_flags([uid], [SEEN_FLAG])
        except (IMAPClientError, OSError) as exc:
            raise ImapSessionError(f"Не удалось пометить UID {uid} прочитанным: {exc}") from exc

    def delete(self, uid: int) -> None:
        try:
            self.client.delete_messages([uid])
        except (IMAPClientError, OSError) as exc:
            raise ImapSessionError(f"Не удалось удалить UID {uid}: {exc}") from exc

    def move(self, uid: int, folder: str) -> bool:
        if folder == self.mailbox:
            return False
        client = self.client
        try:
            if client.has_capability("MOVE"):
                client.move([uid], folder)
            else:
                client.copy([uid], folder)
                client.delete_messages([uid])
        except (IMAPClientError, OSError) as exc:
            raise ImapSessionError(f"Не удалось переместить UID {uid} в {folder}: {exc}") from exc
        return True
