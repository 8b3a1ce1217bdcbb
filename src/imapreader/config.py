from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_ENCODING = "UTF-8"
TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class ImapAccountConfig:
    host: str
    port: int
    username: str
    password: str
    mailbox: str = "INBOX"
    ssl: bool = True


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in TRUE_VALUES


@dataclass(slots=True)
class Settings:
    root_dir: Path
    data_dir: Path
    attachments_dir: Path
    logs_dir: Path
    raw_dir: Path
    exports_dir: Path
    imap_account: ImapAccountConfig | None = None
    encoding: str = DEFAULT_ENCODING
    mark_as_read: bool = True
    save_attachments: bool = True
    imap_retry_attempts: int = 2
    imap_retry_delay_sec: float = 2.0
    max_messages: int = 50
    max_part_depth: int = 32
    log_level: str = "INFO"

    @classmethod
    def load(cls, base_dir: Path | None = None) -> Settings:
        load_dotenv(override=False)

        root_env = os.getenv("IMAPREADER_HOME")
        root_dir = Path(root_env).expanduser().resolve() if root_env else (base_dir or Path.cwd()).resolve()

        data_dir = Path(os.getenv("IMAPREADER_DATA_DIR", root_dir / "data")).expanduser().resolve()
        attachments_dir = Path(
            os.getenv("IMAPREADER_ATTACHMENTS_DIR", data_dir / "attachments")
        ).expanduser().resolve()
        logs_dir = Path(os.getenv("IMAPREADER_LOG_DIR", root_dir / "logs")).expanduser().resolve()
        raw_dir = Path(os.getenv("IMAPREADER_RAW_DIR", data_dir / "raw")).expanduser().resolve()
        exports_dir = Path(os.getenv("IMAPREADER_EXPORT_DIR", root_dir / "exports")).expanduser().resolve()

        return cls(
            root_dir=root_dir,
            data_dir=data_dir,
            attachments_dir=attachments_dir,
            logs_dir=logs_dir,
            raw_dir=raw_dir,
            exports_dir=exports_dir,
            imap_account=cls._load_imap_account(),
            encoding=os.getenv("IMAPREADER_ENCODING", DEFAULT_ENCODING),
            mark_as_read=_env_bool("IMAPREADER_MARK_AS_READ", True),
            save_attachments=_env_bool("IMAPREADER_SAVE_ATTACHMENTS", True),
            imap_retry_attempts=int(os.getenv("IMAPREADER_RETRY_ATTEMPTS", "2")),
            imap_retry_delay_sec=float(os.getenv("IMAPREADER_RETRY_DELAY_SEC", "2")),
            max_messages=int(os.getenv("IMAPREADER_MAX_MESSAGES", "50")),
            max_part_depth=int(os.getenv("IMAPREADER_MAX_PART_DEPTH", "32")),
            log_level=os.getenv("IMAPREADER_LOG_LEVEL", "INFO"),
        )

    @staticmethod
    def _load_imap_account() -> ImapAccountConfig | None:
        host = os.getenv("IMAP_HOST")
        user = os.getenv("IMAP_USER")
        password = os.getenv("IMAP_PASSWORD")
        if not host or not user or not password:
            return None

        ssl = _env_bool("IMAP_SSL", True)
        port_raw = os.getenv("IMAP_PORT", "993" if ssl else "143")
        return ImapAccountConfig(
            host=host,
            port=int(port_raw),
            username=user,
            password=password,
            mailbox=os.getenv("IMAP_MAILBOX", "INBOX"),
            ssl=ssl,
        )

    def require_imap_account(self) -> ImapAccountConfig:
        if self.imap_account is None:
            raise ValueError("IMAP аккаунт не настроен: задайте IMAP_HOST, IMAP_USER и IMAP_PASSWORD")
        return self.imap_account

    def ensure_directories(self) -> None:
        paths = [self.root_dir, self.data_dir, self.logs_dir, self.raw_dir, self.exports_dir]
        if self.save_attachments:
            paths.append(self.attachments_dir)
        for path in paths:
            path.mkdir(parents=True, exist_ok=True)
