from __future__ import annotations

from typing import Any, Sequence

from imapreader.core.mime.parts import PartNode, PartType, TransferEncoding

# Positions inside a non-multipart BODYSTRUCTURE (RFC 3501, section 7.4.2).
_ENCODING_INDEX = 5
_TEXT_EXTENSION_INDEX = 8
_MESSAGE_BODY_INDEX = 8
_MESSAGE_EXTENSION_INDEX = 10
_BASIC_EXTENSION_INDEX = 7


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _item(data: Sequence[Any], index: int) -> Any:
    return data[index] if len(data) > index else None


def _pairs(value: Any) -> list[tuple[str, str]]:
    if not isinstance(value, (list, tuple)):
        return []
    pairs: list[tuple[str, str]] = []
    for position in range(0, len(value) - 1, 2):
        name = _text(value[position])
        if name:
            pairs.append((name, _text(value[position + 1]) or ""))
    return pairs


def _disposition(value: Any) -> tuple[str | None, list[tuple[str, str]]]:
    if not isinstance(value, (list, tuple)) or not value:
        return None, []
    kind = _text(value[0])
    params = _pairs(value[1]) if len(value) > 1 else []
    return kind, params


def _is_multipart(data: Sequence[Any]) -> bool:
    return bool(data) and isinstance(data[0], (list, tuple))


def _multipart(data: Sequence[Any]) -> PartNode:
    if isinstance(data[0], list):
        # imapclient.BodyData already folded the child parts into one list
        children_raw = list(data[0])
        rest = list(data[1:])
    else:
        children_raw = []
        position = 0
        while position < len(data) and isinstance(data[position], (list, tuple)):
            children_raw.append(data[position])
            position += 1
        rest = list(data[position:])

    disposition, disposition_params = _disposition(_item(rest, 2))
    return PartNode(
        type=PartType.MULTIPART,
        subtype=(_text(_item(rest, 0)) or "MIXED").upper(),
        parameters=_pairs(_item(rest, 1)),
        disposition=disposition,
        disposition_parameters=disposition_params,
        children=[part_from_bodystructure(child) for child in children_raw],
    )


def part_from_bodystructure(data: Sequence[Any]) -> PartNode:
    if _is_multipart(data):
        return _multipart(data)

    part_type = PartType.from_name(_text(_item(data, 0)))
    if part_type == PartType.TEXT:
        extension_index = _TEXT_EXTENSION_INDEX
    elif part_type == PartType.MESSAGE and isinstance(_item(data, _MESSAGE_BODY_INDEX), (list, tuple)):
        extension_index = _MESSAGE_EXTENSION_INDEX
    else:
        extension_index = _BASIC_EXTENSION_INDEX

    # extension data: body MD5, then disposition
    disposition, disposition_params = _disposition(_item(data, extension_index + 1))

    children: list[PartNode] = []
    nested = _item(data, _MESSAGE_BODY_INDEX) if part_type == PartType.MESSAGE else None
    if isinstance(nested, (list, tuple)) and nested:
        children.append(part_from_bodystructure(nested))

    return PartNode(
        type=part_type,
        subtype=(_text(_item(data, 1)) or "").upper(),
        encoding=TransferEncoding.from_name(_text(_item(data, _ENCODING_INDEX))),
        parameters=_pairs(_item(data, 2)),
        content_id=_text(_item(data, 3)),
        disposition=disposition,
        disposition_parameters=disposition_params,
        children=children,
    )
