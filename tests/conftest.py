from __future__ import annotations

import copy
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from hooks_toolkit.errors import SubmissionError
from hooks_toolkit.toolchain.runner import CommandResult
from hooks_toolkit.tx.client import SubmitOptions, Wallet
from hooks_toolkit.tx.definitions import Definitions

GENESIS_ADDRESS = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"
GENESIS_ACCOUNT_ID = "B5F762798A53D543A014CAF8B297CFF8F2F937E8"

WASM_BYTES = b"\x00asm\x01\x00\x00\x00\x01\x04\x01`\x00\x00"


# --------------------------------------------------------------------------- #
# Ledger definitions (a trimmed server_definitions document)
# --------------------------------------------------------------------------- #


def _f(nth: int, type_name: str, *, vl: bool = False, serialized: bool = True, signing: bool = True):
    return {
        "nth": nth,
        "isVLEncoded": vl,
        "isSerialized": serialized,
        "isSigningField": signing,
        "type": type_name,
    }


DEFINITIONS_DOC: Dict[str, Any] = {
    "TYPES": {
        "UInt16": 1,
        "UInt32": 2,
        "UInt64": 3,
        "Hash128": 4,
        "Hash256": 5,
        "Amount": 6,
        "Blob": 7,
        "AccountID": 8,
        "STObject": 14,
        "STArray": 15,
        "UInt8": 16,
        "Hash160": 17,
        "Vector256": 19,
        "Transaction": 10001,
    },
    "TRANSACTION_TYPES": {
        "Invalid": -1,
        "Payment": 0,
        "AccountSet": 3,
        "SetHook": 22,
        "Invoke": 99,
    },
    "LEDGER_ENTRY_TYPES": {"AccountRoot": 97},
    "FIELDS": [
        ["TransactionType", _f(2, "UInt16")],
        ["LedgerEntryType", _f(1, "UInt16")],
        ["HookApiVersion", _f(20, "UInt16")],
        ["NetworkID", _f(1, "UInt32")],
        ["Flags", _f(2, "UInt32")],
        ["Sequence", _f(4, "UInt32")],
        ["LastLedgerSequence", _f(27, "UInt32")],
        ["HookOn", _f(20, "Hash256")],
        ["HookNamespace", _f(32, "Hash256")],
        ["Fee", _f(8, "Amount")],
        ["SigningPubKey", _f(3, "Blob", vl=True)],
        ["TxnSignature", _f(4, "Blob", vl=True, signing=False)],
        ["CreateCode", _f(11, "Blob", vl=True)],
        ["HookParameterName", _f(24, "Blob", vl=True)],
        ["HookParameterValue", _f(25, "Blob", vl=True)],
        ["Account", _f(1, "AccountID", vl=True)],
        ["Hook", _f(14, "STObject")],
        ["HookParameter", _f(23, "STObject")],
        ["Hooks", _f(11, "STArray")],
        ["HookParameters", _f(19, "STArray")],
        ["HookGrants", _f(20, "STArray")],
        ["Amendments", _f(3, "Vector256", vl=True)],
        ["hash", _f(257, "Hash256", serialized=False, signing=False)],
    ],
}


@pytest.fixture
def definitions() -> Definitions:
    return Definitions(DEFINITIONS_DOC)


# --------------------------------------------------------------------------- #
# Fake toolchain
# --------------------------------------------------------------------------- #


class FakeRunner:
    """
    Stands in for the external build tools.

    Records every invocation, returns `returncode` from `fail` for the tools
    named there, and otherwise writes the artifact the real tool would.
    """

    def __init__(
        self,
        name: str,
        *,
        code: bytes = WASM_BYTES,
        fail: Optional[Mapping[str, int]] = None,
        write_cleaned: bool = True,
        triple: str = "wasm32-unknown-unknown",
    ) -> None:
        self.name = name
        self.code = code
        self.fail = dict(fail or {})
        self.write_cleaned = write_cleaned
        self.triple = triple
        self.calls: List[Tuple[str, ...]] = []
        self.timeouts: List[Optional[float]] = []
        self._lock = threading.Lock()

    def tools(self) -> List[str]:
        return [Path(c[0]).name for c in self.calls]

    def run(self, args: Sequence[Any], *, cwd=None, timeout=None) -> CommandResult:
        argv = tuple(str(a) for a in args)
        with self._lock:
            self.calls.append(argv)
            self.timeouts.append(timeout)
        tool = Path(argv[0]).name

        if tool in self.fail:
            return CommandResult(argv, self.fail[tool], "", f"{tool}: simulated failure")

        if tool == "cargo":
            raw = Path(cwd) / "target" / self.triple / "release" / f"{self.name}.wasm"
            raw.parent.mkdir(parents=True, exist_ok=True)
            raw.write_bytes(self.code + b"\x00" * 16)
        elif tool == "wasm-opt":
            if not Path(argv[1]).exists():
                return CommandResult(argv, 1, "", f"[wasm-validator error] cannot read {argv[1]}")
            out = Path(argv[argv.index("-o") + 1])
            out.write_bytes(Path(argv[1]).read_bytes()[: len(self.code) + 8])
        elif tool == "hook-cleaner":
            if self.write_cleaned:
                cleaned = Path(argv[2])
                cleaned.parent.mkdir(parents=True, exist_ok=True)
                cleaned.write_bytes(self.code)
        elif tool == "wasm2wat":
            Path(argv[3]).write_text("(module)\n", encoding="utf-8")

        return CommandResult(argv, 0, f"{tool} done\n", "")


@pytest.fixture
def fake_runner_factory():
    return FakeRunner


# --------------------------------------------------------------------------- #
# Fake network client
# --------------------------------------------------------------------------- #


class FakeNetworkClient:
    """In-memory NetworkClient: records traffic, fails the first `fail_submits` submissions."""

    def __init__(self, *, fee: str = "12", fail_submits: int = 0) -> None:
        self.fee = fee
        self.fail_submits = fail_submits
        self.requests: List[Tuple[str, Any]] = []
        self.autofilled: List[Dict[str, Any]] = []
        self.encoded: List[Dict[str, Any]] = []
        self.submitted: List[Tuple[Dict[str, Any], SubmitOptions]] = []

    def request(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        self.requests.append((method, copy.deepcopy(params)))
        if method == "fee":
            return {"drops": {"base_fee": self.fee, "open_ledger_fee": "10"}}
        return {}

    def autofill(self, tx: Mapping[str, Any]) -> Dict[str, Any]:
        out = copy.deepcopy(dict(tx))
        out.setdefault("Sequence", 7)
        out.setdefault("LastLedgerSequence", 120)
        self.autofilled.append(out)
        return out

    def encode(self, tx: Mapping[str, Any]) -> str:
        self.encoded.append(copy.deepcopy(dict(tx)))
        return "12001622000000002400000007"

    def wallet_from_secret(self, secret: str) -> Wallet:
        return Wallet(address=GENESIS_ADDRESS, secret=secret)

    def submit_and_wait(self, tx: Mapping[str, Any], options: SubmitOptions) -> Dict[str, Any]:
        self.submitted.append((copy.deepcopy(dict(tx)), options))
        if len(self.submitted) <= self.fail_submits:
            raise SubmissionError("simulated rejection", engine_result="tefPAST_SEQ")
        return {"hash": "C0FFEE", "validated": True, "meta": {"TransactionResult": "tesSUCCESS"}}


@pytest.fixture
def fake_client() -> FakeNetworkClient:
    return FakeNetworkClient()


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()
