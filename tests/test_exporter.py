from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from imapreader.services import export_messages
from imapreader.sources.models import Attachment, AttachmentKind, Message


def test_export_csv(tmp_path: Path) -> None:
    message = Message(uid=42, subject="Заказ 1", date=datetime(2024, 3, 1, 7, 15, tzinfo=timezone.utc))
    message.set_from("shop", "example.com", "Магазин")
    message.add_to("ivan", "example.ru")
    message.add_attachment(
        Attachment(id="42", name="42-report.pdf", disposition=AttachmentKind.ATTACHMENT, part_path="2")
    )

    files = export_messages([message, Message(uid=43)], formats=["csv"], out_dir=tmp_path / "exports")

    assert [path.name for path in files] == ["imapreader_export.csv"]
    df = pd.read_csv(files[0], encoding="utf-8-sig")
    assert list(df["uid"]) == [42, 43]
    assert df.loc[0, "subject"] == "Заказ 1"
    assert df.loc[0, "from_email"] == "shop@example.com"
    assert df.loc[0, "to"] == "ivan@example.ru"
    assert df.loc[0, "attachments"] == "42-report.pdf"
