from __future__ import annotations

import os
import platform
import sys

from imapreader.config import Settings
from imapreader.sources.email_imap import ImapSession, ImapSessionError


def run_doctor_checks(settings: Settings) -> list[dict[str, str]]:
    checks: list[dict[str, str]] = []

    checks.append(
        {
            "check": "python_version",
            "status": "ok" if sys.version_info >= (3, 10) else "warn",
            "detail": platform.python_version(),
        }
    )

    if settings.save_attachments:
        writable = settings.attachments_dir.is_dir() and os.access(settings.attachments_dir, os.W_OK)
        checks.append(
            {
                "check": "attachments_dir",
                "status": "ok" if writable else "warn",
                "detail": str(settings.attachments_dir),
            }
        )

    account = settings.imap_account
    if account is None:
        checks.append(
            {
                "check": "imap_account",
                "status": "warn",
                "detail": "IMAP аккаунт не настроен",
            }
        )
        return checks

    try:
        with ImapSession(account, retry_attempts=0):
            pass
        checks.append(
            {
                "check": "imap_connection",
                "status": "ok",
                "detail": f"{account.username}@{account.host}:{account.port}/{account.mailbox}",
            }
        )
    except ImapSessionError as exc:
        checks.append(
            {
                "check": "imap_connection",
                "status": "warn",
                "detail": str(exc),
            }
        )

    return checks
