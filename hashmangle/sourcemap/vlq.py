"""
HashMangle — Base64 VLQ Codec
==============================
Encoding used by the `mappings` field of Source Map v3: each value is a
signed integer written as little-endian 5-bit groups with a continuation
bit, the sign kept in the lowest bit of the first group.
"""

from typing import Iterable, List

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {c: i for i, c in enumerate(BASE64_CHARS)}

VLQ_BASE_SHIFT = 5
VLQ_BASE = 1 << VLQ_BASE_SHIFT
VLQ_BASE_MASK = VLQ_BASE - 1
VLQ_CONTINUATION_BIT = VLQ_BASE


class SourceMapError(ValueError):
    """Raised for malformed source map input."""


def encode_value(value: int) -> str:
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & VLQ_BASE_MASK
        vlq >>= VLQ_BASE_SHIFT
        if vlq:
            digit |= VLQ_CONTINUATION_BIT
        out.append(BASE64_CHARS[digit])
        if not vlq:
            return "".join(out)


def encode_segment(values: Iterable[int]) -> str:
    return "".join(encode_value(v) for v in values)


def decode_segment(segment: str) -> List[int]:
    """Decode every VLQ value in one comma-free mappings segment."""
    values: List[int] = []
    vlq = 0
    shift = 0
    pending = False
    for char in segment:
        digit = _BASE64_VALUES.get(char)
        if digit is None:
            raise SourceMapError(f"Invalid base64 character {char!r} in mappings segment {segment!r}")
        vlq |= (digit & VLQ_BASE_MASK) << shift
        if digit & VLQ_CONTINUATION_BIT:
            shift += VLQ_BASE_SHIFT
            pending = True
            continue
        negative = vlq & 1
        vlq >>= 1
        values.append(-vlq if negative else vlq)
        vlq = 0
        shift = 0
        pending = False
    if pending:
        raise SourceMapError(f"Truncated VLQ value in mappings segment {segment!r}")
    return values
