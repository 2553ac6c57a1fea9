"""
Ledger type/field definitions used by the binary codec.

The node publishes them through the `server_definitions` method; the same
document can also be loaded from a JSON file. Shape (abridged):

    {
      "TYPES": {"UInt16": 1, "UInt32": 2, "Amount": 6, "Blob": 7, ...},
      "FIELDS": [
        ["TransactionType", {"nth": 2, "isVLEncoded": false, "isSerialized": true,
                             "isSigningField": true, "type": "UInt16"}],
        ...
      ],
      "TRANSACTION_TYPES": {"Payment": 0, "SetHook": 22, "Invoke": 99, ...}
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from hooks_toolkit.errors import CodecError


@dataclass(frozen=True)
class FieldInfo:
    name: str
    nth: int
    type_name: str
    type_code: int
    is_vl_encoded: bool
    is_serialized: bool
    is_signing_field: bool

    @property
    def sort_key(self):
        return (self.type_code, self.nth)


class Definitions:
    def __init__(self, raw: Mapping[str, Any]) -> None:
        try:
            self.types: Dict[str, int] = {str(k): int(v) for k, v in raw["TYPES"].items()}
            self.transaction_types: Dict[str, int] = {
                str(k): int(v) for k, v in raw.get("TRANSACTION_TYPES", {}).items()
            }
            self.ledger_entry_types: Dict[str, int] = {
                str(k): int(v) for k, v in raw.get("LEDGER_ENTRY_TYPES", {}).items()
            }
            self.fields: Dict[str, FieldInfo] = {}
            for name, info in raw["FIELDS"]:
                type_name = info["type"]
                self.fields[name] = FieldInfo(
                    name=name,
                    nth=int(info["nth"]),
                    type_name=type_name,
                    type_code=self.types.get(type_name, -2),
                    is_vl_encoded=bool(info.get("isVLEncoded", False)),
                    is_serialized=bool(info.get("isSerialized", False)),
                    is_signing_field=bool(info.get("isSigningField", False)),
                )
        except (KeyError, TypeError, ValueError) as e:
            raise CodecError(f"malformed ledger definitions: {e}") from e

    def field(self, name: str) -> FieldInfo:
        try:
            return self.fields[name]
        except KeyError:
            raise CodecError(f"unknown field: {name}") from None

    def transaction_type_code(self, name: str) -> int:
        try:
            return self.transaction_types[name]
        except KeyError:
            raise CodecError(f"unknown transaction type: {name}") from None

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "Definitions":
        return cls(json.loads(Path(path).read_text(encoding="utf-8")))

    @classmethod
    def from_node(cls, rpc) -> "Definitions":
        """Fetch the node's definitions (`server_definitions`)."""
        return cls(rpc.request("server_definitions"))


__all__ = ["FieldInfo", "Definitions"]
