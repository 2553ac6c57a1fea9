"""
hooks_toolkit.payload.types
===========================

The hook payload value and its wire (JSON) shape.

Wire field names are fixed by the ledger:

    {
      "CreateCode":     "<hex>",            # after a successful build
      "HookApiVersion": 0,
      "HookNamespace":  "<64 hex>",
      "Flags":          1,
      "HookOn":         "<64 hex>",
      "HookParameters": [{"HookParameter": {"HookParameterName": "..", "HookParameterValue": ".."}}],
      "HookGrants":     [ ... opaque ... ],
    }

`HookPayload` is immutable; attaching compiled code returns a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from hooks_toolkit.errors import EncodingError

# All 256 bits set except bit 22 (SetHook).
DEFAULT_HOOK_ON = "0x" + "F" * 58 + "B" + "F" * 5

JsonDict = Dict[str, Any]


@dataclass(frozen=True)
class HookParameter:
    name: str
    value: str

    def to_wire(self) -> JsonDict:
        return {
            "HookParameter": {
                "HookParameterName": self.name,
                "HookParameterValue": self.value,
            }
        }

    @classmethod
    def from_wire(cls, obj: Mapping[str, Any]) -> "HookParameter":
        inner = obj.get("HookParameter", obj)
        try:
            return cls(name=inner["HookParameterName"], value=inner["HookParameterValue"])
        except (KeyError, TypeError) as e:
            raise EncodingError(f"malformed HookParameter: {obj!r}") from e


def hook_on_hex(on_mask: Any) -> str:
    """
    Normalize an on-mask (int, or hex string with or without 0x) to the
    ledger's Hash256 form: 64 uppercase hex digits, no prefix.
    """
    if isinstance(on_mask, int) and not isinstance(on_mask, bool):
        if on_mask < 0 or on_mask >= 1 << 256:
            raise EncodingError("on-mask must fit in 256 bits")
        return f"{on_mask:064X}"
    if not isinstance(on_mask, str):
        raise EncodingError(f"on-mask must be an int or hex string, got {type(on_mask).__name__}")
    s = on_mask[2:] if on_mask.startswith(("0x", "0X")) else on_mask
    if not s or len(s) > 64:
        raise EncodingError(f"on-mask must be 1..64 hex digits: {on_mask!r}")
    try:
        int(s, 16)
    except ValueError as e:
        raise EncodingError(f"on-mask is not hex: {on_mask!r}") from e
    return s.upper().rjust(64, "0")


@dataclass(frozen=True)
class HookPayload:
    """
    A hook ready to embed in a SetHook transaction.

    Optional fields left as None are omitted from the wire form. `on_mask`
    is always present and kept exactly as supplied.
    """

    on_mask: str = DEFAULT_HOOK_ON
    api_version: Optional[int] = None
    namespace: Optional[str] = None
    flags: Optional[int] = None
    parameters: Optional[Tuple[HookParameter, ...]] = None
    grants: Optional[Tuple[Any, ...]] = None
    code: Optional[str] = field(default=None, repr=False)

    def with_code(self, code_hex: str) -> "HookPayload":
        """Return a copy carrying the compiled code (uppercase hex)."""
        return replace(self, code=code_hex)

    def to_wire(self) -> JsonDict:
        out: JsonDict = {}
        if self.code is not None:
            out["CreateCode"] = self.code
        if self.api_version is not None:
            out["HookApiVersion"] = self.api_version
        if self.namespace is not None:
            out["HookNamespace"] = self.namespace
        if self.flags is not None:
            out["Flags"] = self.flags
        out["HookOn"] = hook_on_hex(self.on_mask)
        if self.parameters is not None:
            out["HookParameters"] = [p.to_wire() for p in self.parameters]
        if self.grants is not None:
            out["HookGrants"] = list(self.grants)
        return out

    @classmethod
    def from_wire(cls, obj: Mapping[str, Any]) -> "HookPayload":
        """
        Read a payload back from its wire form (e.g. a file written by
        `hooks-toolkit build`). Values are taken as-is; no re-encoding.
        """
        params: Optional[Sequence[Any]] = obj.get("HookParameters")
        grants: Optional[Sequence[Any]] = obj.get("HookGrants")
        on_mask = obj.get("HookOn")
        return cls(
            on_mask="0x" + on_mask if on_mask else DEFAULT_HOOK_ON,
            api_version=obj.get("HookApiVersion"),
            namespace=obj.get("HookNamespace"),
            flags=obj.get("Flags"),
            parameters=tuple(HookParameter.from_wire(p) for p in params) if params is not None else None,
            grants=tuple(grants) if grants is not None else None,
            code=obj.get("CreateCode"),
        )


__all__ = [
    "DEFAULT_HOOK_ON",
    "HookParameter",
    "HookPayload",
    "hook_on_hex",
]
