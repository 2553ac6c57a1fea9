"""
hooks_toolkit.payload.builder
=============================

Assemble a `HookPayload` from optional inputs.

Zero handling is deliberately asymmetric and matches the existing network
format byte for byte:

- api_version=0 is kept (HookApiVersion: 0 is meaningful),
- flags=0 is dropped (a zero Flags field is the same as no Flags field).

Examples
--------
    from hooks_toolkit.payload.builder import build_payload

    payload = build_payload(
        api_version=0,
        namespace_seed="counternamespace",
        parameters=[("owner", "alice")],
    )
    payload.to_wire()["HookNamespace"]   # SHA-256 of "counternamespace"
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from hooks_toolkit.errors import EncodingError
from hooks_toolkit.payload.encoders import (ParameterLike, encode_parameters,
                                            namespace_digest)
from hooks_toolkit.payload.types import (DEFAULT_HOOK_ON, HookPayload,
                                         hook_on_hex)


def build_payload(
    api_version: Optional[int] = None,
    namespace_seed: Optional[str] = None,
    flags: Optional[int] = None,
    on_mask: str = DEFAULT_HOOK_ON,
    parameters: Optional[Iterable[ParameterLike]] = None,
    grants: Optional[Sequence[Any]] = None,
) -> HookPayload:
    version = api_version if isinstance(api_version, int) and not isinstance(api_version, bool) else None
    namespace = namespace_digest(namespace_seed) if isinstance(namespace_seed, str) and namespace_seed else None
    return HookPayload(
        on_mask=on_mask,
        api_version=version,
        namespace=namespace,
        # 0 and None are the same here (see module docstring)
        flags=flags if flags else None,
        parameters=encode_parameters(parameters) if parameters is not None else None,
        grants=tuple(grants) if grants is not None else None,
    )


def hook_on_from_types(names: Iterable[str], transaction_types: Mapping[str, int]) -> str:
    """
    Compute an on-mask that triggers the hook for the named transaction types.

    Starts from DEFAULT_HOOK_ON and flips bit `1 << code` for each name, where
    `code` comes from the ledger definitions' TRANSACTION_TYPES table.
    Returns "0x" + 64 uppercase hex digits.
    """
    mask = int(hook_on_hex(DEFAULT_HOOK_ON), 16)
    for name in names:
        code = transaction_types.get(name)
        if code is None:
            # accept "INVOKE" for "Invoke", "SET_HOOK" for "SetHook"
            wanted = name.replace("_", "").lower()
            code = next((c for n, c in transaction_types.items() if n.lower() == wanted), None)
        if code is None or code < 0 or code >= 256:
            raise EncodingError(f"unknown transaction type: {name!r}")
        mask ^= 1 << code
    return "0x" + hook_on_hex(mask)


__all__ = ["DEFAULT_HOOK_ON", "build_payload", "hook_on_from_types"]
