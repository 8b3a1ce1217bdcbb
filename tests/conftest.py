from __future__ import annotations

import logging
from pathlib import Path

import pytest

from imapreader.config import Settings
from imapreader.core.mime.parts import PartNode
from imapreader.sources.email_imap import ImapSessionError, MessageSummary


class FakeSession:
    """In-memory stand-in for ImapSession keyed by (uid, part path)."""

    def __init__(self, mailbox: str = "INBOX"):
        self.mailbox = mailbox
        self.parts: dict[tuple[int, str | None], bytes] = {}
        self.structures: dict[int, PartNode] = {}
        self.headers: dict[int, bytes] = {}
        self.raw: dict[int, bytes] = {}
        self.summaries: dict[int, MessageSummary] = {}
        self.search_result: list[int] = []
        self.broken: set[int] = set()
        self.broken_flags: set[int] = set()
        self.msgnos: dict[int, int] = {}
        self.fetch_calls: list[tuple[int, str | None, bool]] = []
        self.searched_terms: list = []
        self.marked: list[int] = []
        self.deleted: list[int] = []
        self.moved: list[tuple[int, str]] = []

    def add_message(
        self,
        uid: int,
        structure: PartNode,
        parts: dict[str | None, bytes],
        headers: bytes = b"",
        summary: MessageSummary | None = None,
        raw: bytes = b"",
    ) -> None:
        self.structures[uid] = structure
        for path, data in parts.items():
            self.parts[(uid, path)] = data
        self.headers[uid] = headers
        self.summaries[uid] = summary or MessageSummary(uid=uid)
        self.raw[uid] = raw

    def _check(self, uid: int) -> None:
        if uid in self.broken:
            raise ImapSessionError(f"UID {uid} недоступен")

    def fetch_part_bytes(self, uid: int, path: str | None, peek: bool = True) -> bytes:
        self._check(uid)
        self.fetch_calls.append((uid, path, peek))
        return self.parts.get((uid, path), b"")

    def fetch_structure(self, uid: int) -> PartNode:
        self._check(uid)
        return self.structures[uid]

    def fetch_raw_headers(self, uid: int) -> bytes:
        self._check(uid)
        return self.headers.get(uid, b"")

    def fetch_raw_message(self, uid: int) -> bytes:
        self._check(uid)
        return self.raw.get(uid, b"")

    def fetch_summary(self, uid: int) -> MessageSummary:
        self._check(uid)
        return self.summaries[uid]

    def search(self, terms: list, charset: str | None = "UTF-8") -> list[int]:
        self.searched_terms.append(list(terms))
        return list(self.search_result)

    def uid_for_msgno(self, msgno: int) -> int | None:
        return self.msgnos.get(msgno)

    def mark_as_read(self, uid: int) -> None:
        if uid in self.broken_flags:
            raise ImapSessionError(f"STORE для UID {uid} отклонен")
        self.marked.append(uid)

    def delete(self, uid: int) -> None:
        self.deleted.append(uid)

    def move(self, uid: int, folder: str) -> bool:
        if folder == self.mailbox:
            return False
        self.moved.append((uid, folder))
        return True


class MemoryStore:
    def __init__(self):
        self.saved: dict[str, bytes] = {}

    def save(self, name: str, content: bytes, mime: str | None = None) -> str:
        self.saved.setdefault(name, content)
        return f"/store/{name}"


@pytest.fixture()
def clean_env(monkeypatch, tmp_path: Path) -> Path:
    for name in [
        "IMAP_HOST",
        "IMAP_PORT",
        "IMAP_USER",
        "IMAP_PASSWORD",
        "IMAP_MAILBOX",
        "IMAP_SSL",
        "IMAPREADER_DATA_DIR",
        "IMAPREADER_ATTACHMENTS_DIR",
        "IMAPREADER_LOG_DIR",
        "IMAPREADER_RAW_DIR",
        "IMAPREADER_EXPORT_DIR",
        "IMAPREADER_ENCODING",
        "IMAPREADER_MARK_AS_READ",
        "IMAPREADER_SAVE_ATTACHMENTS",
        "IMAPREADER_RETRY_ATTEMPTS",
        "IMAPREADER_RETRY_DELAY_SEC",
        "IMAPREADER_MAX_MESSAGES",
        "IMAPREADER_MAX_PART_DEPTH",
        "IMAPREADER_LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)
    root = tmp_path / "project"
    root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("IMAPREADER_HOME", str(root))
    return root


@pytest.fixture()
def settings(clean_env: Path) -> Settings:
    s = Settings.load(base_dir=clean_env)
    s.ensure_directories()
    return s


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def test_logger() -> logging.Logger:
    logger = logging.getLogger("imapreader-test")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.INFO)
    return logger
