from __future__ import annotations

from pathlib import Path

import pandas as pd

from imapreader.sources.models import Message


def _message_row(message: Message) -> dict:
    return {
        "uid": message.uid,
        "date": message.date.isoformat() if message.date else None,
        "from_name": message.from_name,
        "from_email": message.from_email,
        "to": ", ".join(recipient.email for recipient in message.to),
        "cc": ", ".join(recipient.email for recipient in message.cc),
        "subject": message.subject,
        "size": message.size,
        "unseen": message.unseen,
        "flagged": message.flagged,
        "attachments": ", ".join(attachment.name for attachment in message.attachments.values()),
    }


def export_messages(messages: list[Message], formats: list[str], out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame([_message_row(message) for message in messages])

    created_files: list[Path] = []
    if "csv" in formats:
        csv_path = (out_dir / "imapreader_export.csv").resolve()
        df.to_csv(csv_path, index=False, encoding="utf-8-sig")
        created_files.append(csv_path)

    if "xlsx" in formats:
        xlsx_path = (out_dir / "imapreader_export.xlsx").resolve()
        with pd.ExcelWriter(xlsx_path, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="messages")
        created_files.append(xlsx_path)

    return created_files
