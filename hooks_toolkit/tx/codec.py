"""
hooks_toolkit.tx.codec
======================

Canonical binary serialization of ledger transactions (JSON -> upper hex).

Rules
-----
* Only fields marked `isSerialized` are written; order is ascending
  (type code, nth), independent of JSON key order.
* Field header: type code and field nth packed into 1 to 3 bytes
  (4-bit nibbles when both are < 16, a full byte otherwise).
* Variable-length fields (Blob, AccountID) carry a length prefix of 1 to 3 bytes.
* STObject values end with 0xE1; STArray values hold `{WrapperName: {...}}`
  elements and end with 0xF1.
* Amounts are native drops only: 8 bytes, big-endian, with the
  "positive" bit (0x40...) set.

Field ids come from `Definitions` (the node's `server_definitions`), so the
codec follows whatever fields the connected network knows about.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Tuple

from hooks_toolkit.errors import CodecError
from hooks_toolkit.tx.definitions import Definitions, FieldInfo
from hooks_toolkit.utils.base58 import decode_account_id
from hooks_toolkit.utils.bytes import from_hex, to_hex

OBJECT_END_MARKER = b"\xe1"
ARRAY_END_MARKER = b"\xf1"

_UINT_WIDTHS = {"UInt8": 1, "UInt16": 2, "UInt32": 4, "UInt64": 8}
_HASH_WIDTHS = {"Hash128": 16, "Hash160": 20, "Hash256": 32}

_MAX_DROPS = 10**17
_POSITIVE_NATIVE = 0x4000000000000000


def field_header(type_code: int, nth: int) -> bytes:
    if type_code < 16:
        if nth < 16:
            return bytes([(type_code << 4) | nth])
        return bytes([type_code << 4, nth])
    if nth < 16:
        return bytes([nth, type_code])
    return bytes([0, type_code, nth])


def length_prefix(length: int) -> bytes:
    if length < 0:
        raise CodecError("negative length")
    if length <= 192:
        return bytes([length])
    if length <= 12480:
        length -= 193
        return bytes([193 + (length >> 8), length & 0xFF])
    if length <= 918744:
        length -= 12481
        return bytes([241 + (length >> 16), (length >> 8) & 0xFF, length & 0xFF])
    raise CodecError(f"variable-length field too long: {length} bytes")


class BinarySerializer:
    """Serialize JSON-shaped transactions using a set of ledger definitions."""

    def __init__(self, definitions: Definitions) -> None:
        self.defs = definitions

    # --- public API ------------------------------------------------------

    def encode(self, obj: Mapping[str, Any], *, signing_only: bool = False) -> bytes:
        return self._encode_fields(obj, signing_only=signing_only)

    def encode_hex(self, obj: Mapping[str, Any], *, signing_only: bool = False) -> str:
        return to_hex(self.encode(obj, signing_only=signing_only))

    # --- internals -------------------------------------------------------

    def _sorted_fields(self, obj: Mapping[str, Any], signing_only: bool) -> List[Tuple[FieldInfo, Any]]:
        if not isinstance(obj, Mapping):
            raise CodecError(f"expected an object, got {type(obj).__name__}")
        picked = []
        for name, value in obj.items():
            info = self.defs.field(name)
            if not info.is_serialized:
                continue
            if signing_only and not info.is_signing_field:
                continue
            picked.append((info, value))
        picked.sort(key=lambda fv: fv[0].sort_key)
        return picked

    def _encode_fields(self, obj: Mapping[str, Any], *, signing_only: bool) -> bytes:
        out = bytearray()
        for info, value in self._sorted_fields(obj, signing_only):
            out += field_header(info.type_code, info.nth)
            out += self._encode_value(info, value, signing_only)
        return bytes(out)

    def _encode_value(self, info: FieldInfo, value: Any, signing_only: bool) -> bytes:
        t = info.type_name
        if t == "STObject":
            return self._encode_fields(value, signing_only=signing_only) + OBJECT_END_MARKER
        if t == "STArray":
            return self._encode_array(info, value, signing_only)
        raw = self._encode_scalar(info, value)
        if info.is_vl_encoded:
            return length_prefix(len(raw)) + raw
        return raw

    def _encode_array(self, info: FieldInfo, items: Iterable[Any], signing_only: bool) -> bytes:
        if isinstance(items, (str, bytes, Mapping)):
            raise CodecError(f"{info.name} must be a list of wrapped objects")
        out = bytearray()
        for item in items:
            if not isinstance(item, Mapping) or len(item) != 1:
                raise CodecError(f"{info.name} elements must be single-key objects, got {item!r}")
            (wrapper, inner), = item.items()
            winfo = self.defs.field(wrapper)
            if winfo.type_name != "STObject":
                raise CodecError(f"{info.name} element {wrapper} is not an object field")
            out += field_header(winfo.type_code, winfo.nth)
            out += self._encode_fields(inner, signing_only=signing_only) + OBJECT_END_MARKER
        out += ARRAY_END_MARKER
        return bytes(out)

    def _encode_scalar(self, info: FieldInfo, value: Any) -> bytes:
        t = info.type_name
        if t in _UINT_WIDTHS:
            return self._encode_uint(info, value, _UINT_WIDTHS[t])
        if t in _HASH_WIDTHS:
            raw = self._hex(info, value)
            if len(raw) != _HASH_WIDTHS[t]:
                raise CodecError(f"{info.name} must be {_HASH_WIDTHS[t]} bytes, got {len(raw)}")
            return raw
        if t == "Blob":
            return self._hex(info, value)
        if t == "AccountID":
            return self._account_id(info, value)
        if t == "Amount":
            return self._native_amount(info, value)
        if t == "Vector256":
            if isinstance(value, str):
                raise CodecError(f"{info.name} must be a list of 256-bit hashes")
            out = bytearray()
            for h in value:
                raw = self._hex(info, h)
                if len(raw) != 32:
                    raise CodecError(f"{info.name} entries must be 32 bytes")
                out += raw
            return bytes(out)
        raise CodecError(f"unsupported field type {t} for {info.name}")

    def _encode_uint(self, info: FieldInfo, value: Any, width: int) -> bytes:
        if isinstance(value, str):
            if info.name == "TransactionType":
                value = self.defs.transaction_type_code(value)
            elif info.name == "LedgerEntryType":
                try:
                    value = self.defs.ledger_entry_types[value]
                except KeyError:
                    raise CodecError(f"unknown ledger entry type: {value}") from None
            elif width == 8:
                # 64-bit values travel as hex strings in JSON
                try:
                    value = int(value, 16)
                except ValueError:
                    raise CodecError(f"{info.name} must be a hex string, got {value!r}") from None
            else:
                try:
                    value = int(value, 10)
                except ValueError:
                    raise CodecError(f"{info.name} must be an integer, got {value!r}") from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise CodecError(f"{info.name} must be an integer, got {type(value).__name__}")
        if value < 0 or value >= 1 << (8 * width):
            raise CodecError(f"{info.name}={value} does not fit in {8 * width} bits")
        return value.to_bytes(width, "big")

    @staticmethod
    def _hex(info: FieldInfo, value: Any) -> bytes:
        if not isinstance(value, str):
            raise CodecError(f"{info.name} must be a hex string, got {type(value).__name__}")
        try:
            return from_hex(value)
        except ValueError as e:
            raise CodecError(f"{info.name}: {e}") from e

    @staticmethod
    def _account_id(info: FieldInfo, value: Any) -> bytes:
        if not isinstance(value, str):
            raise CodecError(f"{info.name} must be an address string")
        if len(value) == 40:
            try:
                return from_hex(value)
            except ValueError:
                pass
        try:
            return decode_account_id(value)
        except ValueError as e:
            raise CodecError(f"{info.name}: {e}") from e

    @staticmethod
    def _native_amount(info: FieldInfo, value: Any) -> bytes:
        if isinstance(value, Mapping):
            raise CodecError(f"{info.name}: issued-currency amounts are not supported")
        try:
            drops = int(str(value), 10)
        except ValueError:
            raise CodecError(f"{info.name} must be a whole number of drops, got {value!r}") from None
        if drops < 0 or drops > _MAX_DROPS:
            raise CodecError(f"{info.name}={drops} drops is out of range")
        return (drops | _POSITIVE_NATIVE).to_bytes(8, "big")


def encode_transaction(tx: Mapping[str, Any], definitions: Definitions) -> str:
    """Serialize `tx` to its canonical wire form (upper hex)."""
    return BinarySerializer(definitions).encode_hex(tx)


__all__ = [
    "OBJECT_END_MARKER",
    "ARRAY_END_MARKER",
    "field_header",
    "length_prefix",
    "BinarySerializer",
    "encode_transaction",
]
