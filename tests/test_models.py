from __future__ import annotations

from pathlib import Path

from imapreader.sources.models import Attachment, AttachmentKind, Message, Recipient


def test_recipient_email() -> None:
    recipient = Recipient(mailbox="ivan", host="example.ru", name="Иван")
    assert recipient.email == "ivan@example.ru"


def test_add_to_skips_incomplete_addresses() -> None:
    message = Message(uid=1)

    assert message.add_to("ivan", "example.ru", "Иван") is True
    assert message.add_to("undisclosed-recipients", "") is False
    assert message.add_cc(None, "example.ru") is False
    assert message.add_reply_to("help", "example.ru") is True

    assert [r.email for r in message.to] == ["ivan@example.ru"]
    assert message.cc == []
    assert message.reply_to[0].name is None
    assert message.is_to("ivan@example.ru")
    assert not message.is_to("petr@example.ru")


def test_sender_accessors() -> None:
    message = Message(uid=1)
    assert message.from_email is None

    message.set_from("shop", "example.com", "Магазин")

    assert message.from_email == "shop@example.com"
    assert message.from_name == "Магазин"


def test_custom_header_split_on_first_colon() -> None:
    message = Message(uid=1)

    assert message.add_custom_header("X-Tracking: http://example.com:8080/t") is True
    assert message.add_custom_header("X-Subject-Ru: =?UTF-8?B?0J/RgNC40LLQtdGC?=") is True
    assert message.add_custom_header("no separator here") is False

    assert message.get_custom_header("X-Tracking") == "http://example.com:8080/t"
    assert message.get_header("X-Subject-Ru") == "Привет"
    assert message.get_header("X-Missing") is None


def test_add_attachment_inline_with_same_id_overwrites() -> None:
    message = Message(uid=7)
    first = Attachment(id="img", name="img-a.png", disposition=AttachmentKind.INLINE, part_path="2")
    second = Attachment(id="img", name="img-b.png", disposition=AttachmentKind.INLINE, part_path="3")

    message.add_attachment(first)
    key = message.add_attachment(second)

    assert key == "img"
    assert message.attachments == {"img": second}
    assert message.has_attachments


def test_add_attachment_same_part_keeps_key() -> None:
    message = Message(uid=7)
    attachment = Attachment(id="7", name="7-a.pdf", disposition=AttachmentKind.ATTACHMENT, part_path="2")

    assert message.add_attachment(attachment) == "7"
    assert message.add_attachment(attachment) == "7"
    assert list(message.attachments) == ["7"]


def test_html_without_body_is_empty() -> None:
    assert Message(uid=1).html == ""


def test_save_raw_does_not_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "raw" / "1.eml"
    message = Message(uid=1, raw_body=b"Subject: first\r\n\r\nbody")

    assert message.save_raw(target) == b"Subject: first\r\n\r\nbody"
    assert target.read_bytes() == b"Subject: first\r\n\r\nbody"

    message.raw_body = b"Subject: second\r\n\r\nbody"
    assert message.save_raw(target) == b"Subject: second\r\n\r\nbody"
    assert target.read_bytes() == b"Subject: first\r\n\r\nbody"


def test_save_raw_without_destination_returns_bytes() -> None:
    assert Message(uid=1).save_raw() == b""
