"""
Typed error classes for hooks-toolkit.

These are raised by the payload encoders, the toolchain pipeline, the ledger
codec/client and the submit helpers so callers can catch specific failure
modes while still being able to catch the base `HooksToolkitError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from hooks_toolkit.toolchain.runner import CommandResult

__all__ = [
    "HooksToolkitError",
    "EncodingError",
    "ToolInvocationError",
    "GuardCheckError",
    "ArtifactMissingError",
    "CodecError",
    "RpcError",
    "SubmissionError",
    "SubmissionRetryError",
]


class HooksToolkitError(Exception):
    """Base class for all hooks-toolkit errors."""


class EncodingError(HooksToolkitError, ValueError):
    """A payload field could not be hex-normalized (input validation, never retried)."""


@dataclass(eq=False)
class ToolInvocationError(HooksToolkitError):
    """
    Raised when an external build tool exits non-zero or cannot be spawned.

    Fields:
      - stage: pipeline stage name ("compile", "flatten", "clean", "validate", ...)
      - result: captured CommandResult (args, exit status, stdout, stderr)
    """

    stage: str
    result: Optional["CommandResult"] = None
    message: str = ""

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        msg = self.message or "external tool failed"
        if self.result is None:
            return f"[{self.stage}] {msg}"
        tail = (self.result.stderr or self.result.stdout or "").strip()
        if len(tail) > 400:
            tail = tail[-400:]
        out = f"[{self.stage}] {msg} (exit={self.result.returncode}, cmd={self.result.command_line})"
        return f"{out}: {tail}" if tail else out


class GuardCheckError(ToolInvocationError):
    """The guard checker rejected the cleaned artifact (unbounded loops / nesting depth)."""


class ArtifactMissingError(ToolInvocationError):
    """An artifact a stage depends on is not on disk."""


class CodecError(HooksToolkitError, ValueError):
    """A transaction cannot be serialized to the ledger's binary wire format."""


@dataclass(eq=False)
class RpcError(HooksToolkitError):
    """
    Raised when a JSON-RPC call returns an error status or the transport fails.

    `error` is the node's machine code (e.g. "actNotFound", "txnNotFound"),
    or "transport" for network/HTTP failures.
    """

    method: Optional[str]
    error: str
    message: str = ""
    data: Optional[Any] = None
    http_status: Optional[int] = None

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [f"RPC[{self.method or '-'}] error={self.error}"]
        if self.message:
            parts.append(f"msg={self.message!r}")
        if self.http_status is not None:
            parts.append(f"http={self.http_status}")
        return " ".join(parts)


@dataclass(eq=False)
class SubmissionError(HooksToolkitError):
    """
    Raised when the node rejects a transaction, or it fails/expires while we
    wait for validation.
    """

    message: str
    engine_result: Optional[str] = None
    tx_hash: Optional[str] = None
    response: Optional[Dict[str, Any]] = None

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def __str__(self) -> str:
        bits = [self.message]
        if self.engine_result:
            bits.append(f"result={self.engine_result}")
        if self.tx_hash:
            bits.append(f"tx={self.tx_hash}")
        return " ".join(bits)


class SubmissionRetryError(HooksToolkitError):
    """Terminal submission failure once every attempt has been used."""

    def __init__(self, attempts: int, last_exception: Optional[BaseException] = None) -> None:
        super().__init__(f"Could not submit transaction after {attempts} tries")
        self.attempts = attempts
        self.last_exception = last_exception
