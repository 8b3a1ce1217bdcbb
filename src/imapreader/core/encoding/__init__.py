from .charset import FALLBACK_CHARSET, canonical_charset, normalize, to_text
from .headers import decode_header

__all__ = ["FALLBACK_CHARSET", "canonical_charset", "decode_header", "normalize", "to_text"]
