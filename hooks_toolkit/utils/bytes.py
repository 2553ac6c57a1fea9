from __future__ import annotations

import re
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

_HEX_RE = re.compile(r"^[0-9A-Fa-f]+$")


def is_hex(s: str) -> bool:
    """
    True when `s` is a non-empty, even-length string of hex digits (no prefix).

    Even length is required because every payload field is a byte string.
    """
    if not isinstance(s, str) or not s or len(s) % 2 != 0:
        return False
    return bool(_HEX_RE.match(s))


def to_hex(b: BytesLike, prefix: bool = False, upper: bool = True) -> str:
    """
    Bytes -> hex string. Uppercase and unprefixed by default, which is the
    ledger's canonical form for blobs and hashes.
    """
    s = bytes(b).hex()
    if upper:
        s = s.upper()
    return f"0x{s}" if prefix else s


def from_hex(s: str) -> bytes:
    """
    Hex string (optionally '0x' prefixed) -> bytes.

    Enforces even-length (nibbles must pair to bytes) and is case agnostic.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a string")
    if s.startswith(("0x", "0X")):
        s = s[2:]
    if len(s) % 2 != 0:
        raise ValueError("hex string must have even length")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


def text_to_hex(s: str) -> str:
    """UTF-8 bytes of `s` as uppercase hex (two digits per byte)."""
    return to_hex(s.encode("utf-8"))


__all__ = [
    "BytesLike",
    "is_hex",
    "to_hex",
    "from_hex",
    "text_to_hex",
]
