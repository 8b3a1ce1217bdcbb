from __future__ import annotations

import base64
import os

import pytest

from imapreader.core.mime import TransferEncoding, decode_part


@pytest.mark.parametrize(
    "payload",
    [b"", b"a", b"hello world", "Привет, мир".encode("utf-8"), bytes(range(256)), os.urandom(1031)],
)
def test_base64_round_trip(payload: bytes) -> None:
    assert decode_part(base64.b64encode(payload), TransferEncoding.BASE64) == payload


def test_base64_with_line_breaks() -> None:
    payload = os.urandom(300)
    encoded = base64.encodebytes(payload)
    assert b"\n" in encoded
    assert decode_part(encoded, 3) == payload


def test_base64_missing_padding_is_repaired() -> None:
    assert decode_part(b"SGVsbG8", 3) == b"Hello"


def test_base64_garbage_does_not_raise() -> None:
    result = decode_part(b"SGVs*bG8=\x00!!", 3)
    assert result.startswith(b"Hel")


def test_quoted_printable() -> None:
    data = b"caf=C3=A9 soft=\r\nbreak"
    assert decode_part(data, TransferEncoding.QUOTED_PRINTABLE) == "café softbreak".encode("utf-8")


@pytest.mark.parametrize("code", [0, 1, 2, 5, 42, None])
def test_passthrough_codes(code) -> None:
    data = b"\x00raw \xff bytes=41"
    assert decode_part(data, code) == data
