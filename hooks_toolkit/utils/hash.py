from __future__ import annotations

import hashlib
from typing import Union

from .bytes import BytesLike, to_hex


def _ensure_bytes(data: Union[BytesLike, str]) -> bytes:
    # Strings hash as their UTF-8 text, not as hex
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def sha256(data: Union[BytesLike, str]) -> bytes:
    """Return the SHA-256 digest of *data* (str is hashed as UTF-8 text)."""
    return hashlib.sha256(_ensure_bytes(data)).digest()


def sha256_hex(data: Union[BytesLike, str]) -> str:
    """64 uppercase hex characters, no prefix."""
    return to_hex(sha256(data))


def double_sha256(data: BytesLike) -> bytes:
    return hashlib.sha256(hashlib.sha256(bytes(data)).digest()).digest()


__all__ = ["sha256", "sha256_hex", "double_sha256"]
