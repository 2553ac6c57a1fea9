"""
hooks_toolkit.deploy
====================

Install a built hook on the ledger with a SetHook transaction.

Flow
----
1. Resolve the signing identity from the secret (`client.wallet_from_secret`).
2. Wrap the payload: {"TransactionType": "SetHook", "Account": ..., "Hooks": [{"Hook": payload}]}.
3. Price it (`estimate_fee`) and set `Fee`.
4. Submit with `fail_hard=True, autofill=True` through the retrying submitter.

Typical usage
-------------
    from hooks_toolkit.config import get_settings
    from hooks_toolkit.toolchain import ToolchainPipeline
    from hooks_toolkit.tx import LedgerClient
    from hooks_toolkit.deploy import set_hook

    payload = ToolchainPipeline(".").build("myhook")
    with LedgerClient.from_settings(get_settings()) as client:
        result = set_hook(client, "sn...", payload)
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional

from hooks_toolkit.logging import get_logger
from hooks_toolkit.payload.types import HookPayload
from hooks_toolkit.tx.client import NetworkClient, SubmitOptions
from hooks_toolkit.tx.fee import FeeQuery, estimate_fee, query_fee_estimate
from hooks_toolkit.tx.submit import DEFAULT_SUBMIT_POLICY, submit_with_retries
from hooks_toolkit.utils.retry import RetryPolicy

log = get_logger(__name__)

SET_HOOK = "SetHook"


def set_hook_transaction(account: str, payload: HookPayload) -> Dict[str, Any]:
    return {
        "TransactionType": SET_HOOK,
        "Account": account,
        "Hooks": [{"Hook": payload.to_wire()}],
    }


class HookDeploymentService:
    """Glue between payload, fee estimation and retrying submission."""

    def __init__(
        self,
        *,
        fee_query: FeeQuery = query_fee_estimate,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.fee_query = fee_query
        self.retry_policy = retry_policy or DEFAULT_SUBMIT_POLICY
        self._sleep = sleep

    def deploy(self, client: NetworkClient, signing_secret: str, payload: HookPayload) -> Dict[str, Any]:
        wallet = client.wallet_from_secret(signing_secret)
        tx = set_hook_transaction(wallet.address, payload)
        tx["Fee"] = estimate_fee(client, tx, fee_query=self.fee_query)
        log.info(
            "deploy_submitting",
            account=wallet.address,
            fee=tx["Fee"],
            namespace=payload.namespace,
            code_bytes=len(payload.code) // 2 if payload.code else 0,
        )
        options = SubmitOptions(wallet=wallet, fail_hard=True, autofill=True)
        result = submit_with_retries(client, tx, options, policy=self.retry_policy, sleep=self._sleep)
        log.info("deploy_done", account=wallet.address, tx_hash=result.get("hash"))
        return result


def set_hook(
    client: NetworkClient,
    signing_secret: str,
    payload: HookPayload,
    *,
    retry_policy: Optional[RetryPolicy] = None,
) -> Dict[str, Any]:
    """One-shot deploy with the default fee query and retry policy."""
    return HookDeploymentService(retry_policy=retry_policy).deploy(client, signing_secret, payload)


__all__ = ["SET_HOOK", "set_hook_transaction", "HookDeploymentService", "set_hook"]
