"""
Field encoders for hook payloads.

- namespace_digest(seed): SHA-256 of the seed's UTF-8 text as 64 uppercase
  hex digits. The payload never carries the raw seed.
- encode_field(text): hex pass-through, otherwise UTF-8 bytes as hex.
- encode_parameters(pairs): applies encode_field to every name and value,
  preserving order (duplicates are kept; the ledger decides what they mean).

Note that a plain-text name which happens to look like hex ("CAFE", "1234")
is passed through as hex. Callers wanting the text form must encode it first.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Tuple, Union

from hooks_toolkit.errors import EncodingError
from hooks_toolkit.payload.types import HookParameter
from hooks_toolkit.utils.bytes import is_hex, text_to_hex
from hooks_toolkit.utils.hash import sha256_hex

ParameterLike = Union[HookParameter, Tuple[str, str], Mapping[str, Any]]


def namespace_digest(seed: str) -> str:
    return sha256_hex(seed)


def encode_field(text: str) -> str:
    """Idempotent: encode_field(encode_field(x)) == encode_field(x)."""
    if not isinstance(text, str):
        raise EncodingError(f"hook parameter fields must be strings, got {type(text).__name__}: {text!r}")
    if is_hex(text):
        return text
    return text_to_hex(text)


def _as_pair(item: ParameterLike) -> Tuple[Any, Any]:
    if isinstance(item, HookParameter):
        return item.name, item.value
    if isinstance(item, Mapping):
        p = HookParameter.from_wire(item)
        return p.name, p.value
    try:
        name, value = item
    except (TypeError, ValueError) as e:
        raise EncodingError(f"hook parameter must be a (name, value) pair: {item!r}") from e
    return name, value


def encode_parameters(pairs: Iterable[ParameterLike]) -> Tuple[HookParameter, ...]:
    out = []
    for item in pairs:
        name, value = _as_pair(item)
        out.append(HookParameter(name=encode_field(name), value=encode_field(value)))
    return tuple(out)


__all__ = ["namespace_digest", "encode_field", "encode_parameters"]
