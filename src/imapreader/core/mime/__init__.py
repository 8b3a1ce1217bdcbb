from .classifier import Classification, PartKind, classify, clean_content_id, resolve_filename
from .decoder import decode_part
from .inline import content_id_references, resolve_inline, unresolved_references
from .parts import PartNode, PartType, TransferEncoding

__all__ = [
    "Classification",
    "PartKind",
    "PartNode",
    "PartType",
    "TransferEncoding",
    "classify",
    "clean_content_id",
    "content_id_references",
    "decode_part",
    "resolve_filename",
    "resolve_inline",
    "unresolved_references",
]
