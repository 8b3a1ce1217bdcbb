from __future__ import annotations

from imapreader.core.mime.parts import PartType, TransferEncoding
from imapreader.sources.email_imap import part_from_bodystructure

TEXT_PLAIN = (b"TEXT", b"PLAIN", (b"CHARSET", b"utf-8"), None, None, b"7BIT", 12, 1, None, None, None)
TEXT_HTML = (b"TEXT", b"HTML", (b"CHARSET", b"windows-1251"), None, None, b"QUOTED-PRINTABLE", 40, 2, None, None, None)
PDF = (
    b"APPLICATION",
    b"PDF",
    (b"NAME", b"report.pdf"),
    None,
    None,
    b"BASE64",
    1024,
    None,
    (b"ATTACHMENT", (b"FILENAME", b"report.pdf")),
    None,
)
LOGO = (
    b"IMAGE",
    b"PNG",
    (b"NAME", b"logo.png"),
    b"<abc123>",
    None,
    b"BASE64",
    100,
    None,
    (b"INLINE", (b"FILENAME", b"logo.png")),
    None,
)


def test_single_text_part() -> None:
    node = part_from_bodystructure(TEXT_PLAIN)

    assert node.type == PartType.TEXT
    assert node.subtype == "PLAIN"
    assert node.encoding == TransferEncoding.SEVEN_BIT
    assert node.charset() == "utf-8"
    assert node.disposition is None
    assert node.children == []


def test_multipart_from_folded_list() -> None:
    data = [[TEXT_PLAIN, PDF], b"MIXED", (b"BOUNDARY", b"xyz"), None, None]

    node = part_from_bodystructure(data)

    assert node.type == PartType.MULTIPART
    assert node.subtype == "MIXED"
    assert node.parameters == [("BOUNDARY", "xyz")]
    assert [child.mime_type for child in node.children] == ["text/plain", "application/pdf"]
    pdf = node.children[1]
    assert pdf.encoding == TransferEncoding.BASE64
    assert pdf.disposition == "ATTACHMENT"
    assert pdf.merged_parameters() == {"name": "report.pdf", "filename": "report.pdf"}


def test_multipart_from_raw_tuple() -> None:
    related = (TEXT_HTML, LOGO, b"RELATED", None, None, None)
    data = (TEXT_PLAIN, related, b"ALTERNATIVE", None, None, None)

    node = part_from_bodystructure(data)

    assert node.subtype == "ALTERNATIVE"
    assert len(node.children) == 2
    inner = node.children[1]
    assert inner.type == PartType.MULTIPART
    assert inner.subtype == "RELATED"
    html, logo = inner.children
    assert html.encoding == TransferEncoding.QUOTED_PRINTABLE
    assert html.charset() == "windows-1251"
    assert logo.content_id == "<abc123>"
    assert logo.disposition == "INLINE"
    assert logo.disposition_parameters == [("FILENAME", "logo.png")]


def test_rfc822_part_carries_nested_body() -> None:
    envelope = (None,) * 10
    forwarded = (
        b"MESSAGE",
        b"RFC822",
        None,
        None,
        None,
        b"7BIT",
        500,
        envelope,
        TEXT_PLAIN,
        20,
        None,
        (b"ATTACHMENT", (b"FILENAME", b"fwd.eml")),
        None,
    )
    node = part_from_bodystructure([[TEXT_PLAIN, forwarded], b"MIXED", None, None, None])

    message = node.children[1]
    assert message.is_rfc822
    assert message.disposition == "ATTACHMENT"
    assert message.disposition_parameters == [("FILENAME", "fwd.eml")]
    assert len(message.children) == 1
    assert message.children[0].mime_type == "text/plain"


def test_unknown_type_and_encoding() -> None:
    data = (b"X-CUSTOM", b"THING", None, None, None, b"X-UUENCODE", 10)

    node = part_from_bodystructure(data)

    assert node.type == PartType.OTHER
    assert node.encoding == TransferEncoding.OTHER
    assert node.parameters == []
    assert node.disposition is None
