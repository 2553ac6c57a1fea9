"""
hooks_toolkit.tx.client
=======================

Network client used by fee estimation, submission and deployment.

`NetworkClient` is the minimal surface the rest of the package depends on;
`LedgerClient` implements it over the node's JSON-RPC:

- autofill(tx)                -> new dict with Sequence / Fee / LastLedgerSequence / NetworkID
- encode(tx)                  -> canonical wire form (upper hex)
- wallet_from_secret(secret)  -> Wallet (account resolved by the node)
- submit_and_wait(tx, opts)   -> validated `tx` result
- request(method, params)     -> raw JSON-RPC result

Signing happens on the node (`submit` with `secret`); nothing here derives
keys or signs locally.
"""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import (Any, Callable, Dict, Mapping, Optional, Protocol, Union,
                    runtime_checkable)

from hooks_toolkit.errors import RpcError, SubmissionError
from hooks_toolkit.logging import get_logger
from hooks_toolkit.rpc.http import RpcClient
from hooks_toolkit.tx.codec import encode_transaction
from hooks_toolkit.tx.definitions import Definitions

log = get_logger(__name__)

JsonDict = Dict[str, Any]

# Network ids up to 1024 predate the NetworkID field and must not carry it.
_LEGACY_NETWORK_ID_MAX = 1024

_PENDING_ERRORS = ("txnNotFound",)


@dataclass(frozen=True)
class Wallet:
    address: str
    secret: str = field(repr=False)
    public_key: Optional[str] = None


@dataclass(frozen=True)
class SubmitOptions:
    """
    wallet    : signing identity
    fail_hard : reject outright instead of queueing/relaying when the tx fails locally
    autofill  : let the client complete Sequence/Fee/LastLedgerSequence first
    """

    wallet: Wallet
    fail_hard: bool = True
    autofill: bool = True


@runtime_checkable
class NetworkClient(Protocol):
    def request(self, method: str, params: Optional[Mapping[str, Any]] = None) -> JsonDict: ...

    def autofill(self, tx: Mapping[str, Any]) -> JsonDict: ...

    def encode(self, tx: Mapping[str, Any]) -> str: ...

    def wallet_from_secret(self, secret: str) -> Wallet: ...

    def submit_and_wait(self, tx: Mapping[str, Any], options: SubmitOptions) -> JsonDict: ...


def _engine_ok(code: Optional[str]) -> bool:
    # tes* applied; ter* queued/retryable by the node
    return bool(code) and (code.startswith("tes") or code.startswith("ter"))


class LedgerClient:
    """JSON-RPC backed implementation of `NetworkClient`."""

    def __init__(
        self,
        rpc: RpcClient,
        *,
        definitions: Optional[Definitions] = None,
        definitions_path: Optional[Union[str, Path]] = None,
        ledger_offset: int = 20,
        poll_interval_s: float = 1.0,
        account: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.rpc = rpc
        self._definitions = definitions
        self._definitions_path = definitions_path
        self.ledger_offset = int(ledger_offset)
        self.poll_interval_s = float(poll_interval_s)
        self.account = account
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings, *, account: Optional[str] = None) -> "LedgerClient":
        rpc = RpcClient(settings.resolved_rpc_url, timeout=settings.request_timeout_s)
        return cls(
            rpc,
            definitions_path=settings.definitions_path,
            ledger_offset=settings.ledger_offset,
            poll_interval_s=settings.poll_interval_s,
            account=account or settings.account,
        )

    def close(self) -> None:
        self.rpc.close()

    def __enter__(self) -> "LedgerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    # --- definitions -----------------------------------------------------

    @property
    def definitions(self) -> Definitions:
        if self._definitions is None:
            if self._definitions_path is not None:
                self._definitions = Definitions.from_json(self._definitions_path)
            else:
                self._definitions = Definitions.from_node(self.rpc)
        return self._definitions

    # --- NetworkClient ---------------------------------------------------

    def request(self, method: str, params: Optional[Mapping[str, Any]] = None) -> JsonDict:
        return self.rpc.request(method, params)

    def wallet_from_secret(self, secret: str) -> Wallet:
        if self.account:
            return Wallet(address=self.account, secret=secret)
        res = self.request("wallet_propose", {"seed": secret})
        return Wallet(address=res["account_id"], secret=secret, public_key=res.get("public_key_hex"))

    def autofill(self, tx: Mapping[str, Any]) -> JsonDict:
        out = copy.deepcopy(dict(tx))
        if "NetworkID" not in out:
            network_id = self._network_id()
            if network_id is not None and network_id > _LEGACY_NETWORK_ID_MAX:
                out["NetworkID"] = network_id
        if "Sequence" not in out:
            info = self.request("account_info", {"account": out["Account"], "ledger_index": "current"})
            out["Sequence"] = int(info["account_data"]["Sequence"])
        if "Fee" not in out:
            drops = self.request("fee").get("drops") or {}
            out["Fee"] = str(drops.get("base_fee", "0"))
        if "LastLedgerSequence" not in out:
            out["LastLedgerSequence"] = self._current_ledger() + self.ledger_offset
        return out

    def encode(self, tx: Mapping[str, Any]) -> str:
        return encode_transaction(tx, self.definitions)

    def submit_and_wait(self, tx: Mapping[str, Any], options: SubmitOptions) -> JsonDict:
        tx_json = dict(tx)
        tx_json.setdefault("Account", options.wallet.address)
        if options.autofill:
            tx_json = self.autofill(tx_json)

        # one HTTP submit per call; retries belong to submit_with_retries
        res = self.rpc.request(
            "submit",
            {"tx_json": tx_json, "secret": options.wallet.secret, "fail_hard": bool(options.fail_hard)},
            max_retries=0,
        )
        engine = res.get("engine_result")
        tx_hash = (res.get("tx_json") or {}).get("hash")
        log.info("tx_submitted", engine_result=engine, tx_hash=tx_hash)
        if not _engine_ok(engine):
            raise SubmissionError(
                str(res.get("engine_result_message") or "transaction rejected"),
                engine_result=engine,
                tx_hash=tx_hash,
                response=res,
            )
        if not tx_hash:
            raise SubmissionError("node did not return a transaction hash", engine_result=engine, response=res)
        return self.wait_for_validation(tx_hash, last_ledger=tx_json.get("LastLedgerSequence"))

    # --- helpers ---------------------------------------------------------

    def wait_for_validation(self, tx_hash: str, *, last_ledger: Optional[int] = None) -> JsonDict:
        """Poll `tx` until the transaction is in a validated ledger or can no longer make it."""
        while True:
            self._sleep(self.poll_interval_s)
            try:
                res = self.request("tx", {"transaction": tx_hash})
            except RpcError as e:
                if e.error not in _PENDING_ERRORS:
                    raise
                res = {}

            if res.get("validated"):
                result = (res.get("meta") or {}).get("TransactionResult")
                if result != "tesSUCCESS":
                    raise SubmissionError("transaction failed", engine_result=result, tx_hash=tx_hash, response=res)
                log.info("tx_validated", tx_hash=tx_hash, ledger_index=res.get("ledger_index"))
                return res

            if last_ledger is not None and self._current_ledger() > int(last_ledger):
                raise SubmissionError(
                    f"transaction not validated before LastLedgerSequence {last_ledger}",
                    tx_hash=tx_hash,
                    response=res or None,
                )

    def _current_ledger(self) -> int:
        return int(self.request("ledger_current")["ledger_current_index"])

    def _network_id(self) -> Optional[int]:
        info = self.request("server_info").get("info") or {}
        nid = info.get("network_id")
        return int(nid) if nid is not None else None


__all__ = ["Wallet", "SubmitOptions", "NetworkClient", "LedgerClient"]
