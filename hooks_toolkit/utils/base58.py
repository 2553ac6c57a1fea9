"""
Base58Check with the ledger's alphabet, as used by classic account addresses.

Reference: an address is base58(version || payload || checksum) where the
checksum is the first four bytes of SHA-256(SHA-256(version || payload)) and
account addresses use version byte 0x00.
"""

from __future__ import annotations

from .hash import double_sha256

ALPHABET = "rpshnaf39wBUDNEGHJKLM4PQRST7VWXYZ2bcdeCg65jkm8oFqi1tuvAxyz"
_INDEX = {c: i for i, c in enumerate(ALPHABET)}

ACCOUNT_ID_VERSION = b"\x00"


def b58encode(data: bytes) -> str:
    n = int.from_bytes(data, "big")
    out = []
    while n > 0:
        n, rem = divmod(n, 58)
        out.append(ALPHABET[rem])
    # leading zero bytes map to the alphabet's zero digit
    pad = len(data) - len(data.lstrip(b"\x00"))
    return ALPHABET[0] * pad + "".join(reversed(out))


def b58decode(s: str) -> bytes:
    n = 0
    for ch in s:
        try:
            n = n * 58 + _INDEX[ch]
        except KeyError:
            raise ValueError(f"invalid base58 character {ch!r}") from None
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    pad = len(s) - len(s.lstrip(ALPHABET[0]))
    return b"\x00" * pad + body


def b58encode_check(payload: bytes) -> str:
    return b58encode(payload + double_sha256(payload)[:4])


def b58decode_check(s: str) -> bytes:
    raw = b58decode(s)
    if len(raw) < 5:
        raise ValueError("base58check string too short")
    payload, checksum = raw[:-4], raw[-4:]
    if double_sha256(payload)[:4] != checksum:
        raise ValueError("base58check checksum mismatch")
    return payload


def decode_account_id(address: str) -> bytes:
    """Classic address ("r...") -> 20-byte account id."""
    payload = b58decode_check(address)
    if payload[:1] != ACCOUNT_ID_VERSION or len(payload) != 21:
        raise ValueError(f"not a classic account address: {address!r}")
    return payload[1:]


def encode_account_id(account_id: bytes) -> str:
    if len(account_id) != 20:
        raise ValueError("account id must be 20 bytes")
    return b58encode_check(ACCOUNT_ID_VERSION + bytes(account_id))


__all__ = [
    "ALPHABET",
    "b58encode",
    "b58decode",
    "b58encode_check",
    "b58decode_check",
    "decode_account_id",
    "encode_account_id",
]
