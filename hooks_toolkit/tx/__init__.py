"""
hooks_toolkit.tx
================

Transactions on the wire: definitions, binary codec, network client,
fee estimation and retrying submission.
"""

from __future__ import annotations

from .client import LedgerClient, NetworkClient, SubmitOptions, Wallet
from .codec import BinarySerializer, encode_transaction
from .definitions import Definitions, FieldInfo
from .fee import estimate_fee, query_fee_estimate
from .submit import DEFAULT_SUBMIT_POLICY, submit_with_retries

__all__ = [
    "BinarySerializer",
    "DEFAULT_SUBMIT_POLICY",
    "Definitions",
    "FieldInfo",
    "LedgerClient",
    "NetworkClient",
    "SubmitOptions",
    "Wallet",
    "encode_transaction",
    "estimate_fee",
    "query_fee_estimate",
    "submit_with_retries",
]
