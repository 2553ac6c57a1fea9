"""
Utility helpers for hooks-toolkit.

Re-exports:
- bytes: hex helpers
- hash: SHA-256 convenience wrappers
- base58: ledger-alphabet base58check and account id codec
- retry: retry policy and combinator
"""

from .base58 import decode_account_id, encode_account_id
from .bytes import from_hex, is_hex, text_to_hex, to_hex
from .hash import sha256, sha256_hex
from .retry import RetryError, RetryPolicy, retry_call

__all__ = [
    # bytes
    "is_hex",
    "to_hex",
    "from_hex",
    "text_to_hex",
    # hash
    "sha256",
    "sha256_hex",
    # base58
    "decode_account_id",
    "encode_account_id",
    # retry
    "RetryError",
    "RetryPolicy",
    "retry_call",
]
