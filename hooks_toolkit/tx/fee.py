"""
Fee estimation for draft transactions.

The draft is priced as an unsigned, zero-fee transaction: clone, `Fee="0"`,
empty `SigningPubKey`, autofill, encode, then ask the node what it would
charge for that blob (hook execution cost included). Errors propagate.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Mapping

from hooks_toolkit.errors import RpcError
from hooks_toolkit.logging import get_logger
from hooks_toolkit.tx.client import NetworkClient

log = get_logger(__name__)

FeeQuery = Callable[[NetworkClient, str], str]


def query_fee_estimate(client: NetworkClient, tx_blob: str) -> str:
    """Ask the node's `fee` method to price `tx_blob`; returns drops as a decimal string."""
    res = client.request("fee", {"tx_blob": tx_blob})
    try:
        base_fee = int((res.get("drops") or {})["base_fee"])
    except (KeyError, TypeError, ValueError) as e:
        raise RpcError(method="fee", error="invalidResponse", message="missing drops.base_fee", data=res) from e
    return str(base_fee)


def estimate_fee(
    client: NetworkClient,
    tx: Mapping[str, Any],
    *,
    fee_query: FeeQuery = query_fee_estimate,
) -> str:
    draft = copy.deepcopy(dict(tx))
    draft["Fee"] = "0"
    draft["SigningPubKey"] = ""
    filled = client.autofill(draft)
    tx_blob = client.encode(filled)
    fee = fee_query(client, tx_blob)
    log.info("fee_estimated", fee=fee, tx_type=filled.get("TransactionType"))
    return fee


__all__ = ["FeeQuery", "query_fee_estimate", "estimate_fee"]
