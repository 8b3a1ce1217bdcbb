from __future__ import annotations

from pathlib import Path

import pytest

from imapreader.config import Settings


def test_settings_loads_imap_account(monkeypatch, clean_env: Path) -> None:
    monkeypatch.setenv("IMAP_HOST", "imap.example.com")
    monkeypatch.setenv("IMAP_USER", "me@example.com")
    monkeypatch.setenv("IMAP_PASSWORD", "secret")
    monkeypatch.setenv("IMAP_MAILBOX", "Archive")

    settings = Settings.load(base_dir=clean_env)

    account = settings.require_imap_account()
    assert account.host == "imap.example.com"
    assert account.port == 993
    assert account.ssl is True
    assert account.mailbox == "Archive"
    assert settings.attachments_dir == (clean_env / "data" / "attachments").resolve()


def test_settings_plain_imap_defaults_to_port_143(monkeypatch, clean_env: Path) -> None:
    monkeypatch.setenv("IMAP_HOST", "imap.example.com")
    monkeypatch.setenv("IMAP_USER", "me")
    monkeypatch.setenv("IMAP_PASSWORD", "secret")
    monkeypatch.setenv("IMAP_SSL", "false")

    account = Settings.load(base_dir=clean_env).require_imap_account()

    assert account.ssl is False
    assert account.port == 143


def test_settings_without_account(clean_env: Path) -> None:
    settings = Settings.load(base_dir=clean_env)

    assert settings.imap_account is None
    with pytest.raises(ValueError):
        settings.require_imap_account()


def test_settings_read_options(monkeypatch, clean_env: Path) -> None:
    monkeypatch.setenv("IMAPREADER_MARK_AS_READ", "no")
    monkeypatch.setenv("IMAPREADER_SAVE_ATTACHMENTS", "0")
    monkeypatch.setenv("IMAPREADER_MAX_PART_DEPTH", "5")

    settings = Settings.load(base_dir=clean_env)
    settings.ensure_directories()

    assert settings.mark_as_read is False
    assert settings.save_attachments is False
    assert settings.max_part_depth == 5
    assert settings.logs_dir.is_dir()
    assert not settings.attachments_dir.exists()
