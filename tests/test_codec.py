from __future__ import annotations

import json
from pathlib import Path

import pytest

from hooks_toolkit.errors import CodecError
from hooks_toolkit.tx.codec import (BinarySerializer, encode_transaction,
                                    field_header, length_prefix)
from hooks_toolkit.tx.definitions import Definitions
from hooks_toolkit.utils.base58 import decode_account_id, encode_account_id

from conftest import DEFINITIONS_DOC, GENESIS_ACCOUNT_ID, GENESIS_ADDRESS

SIMPLE_TX = {
    "TransactionType": "SetHook",
    "Account": GENESIS_ADDRESS,
    "Fee": "10",
    "Sequence": 1,
}
SIMPLE_HEX = (
    "120016"  # TransactionType = 22
    "2400000001"  # Sequence = 1
    "68400000000000000A"  # Fee = 10 drops
    "8114" + GENESIS_ACCOUNT_ID  # Account
)


@pytest.mark.parametrize(
    "type_code,nth,expected",
    [
        (1, 2, "12"),
        (2, 27, "201B"),
        (16, 1, "0110"),
        (16, 17, "001011"),
    ],
)
def test_field_header(type_code: int, nth: int, expected: str) -> None:
    assert field_header(type_code, nth).hex().upper() == expected


@pytest.mark.parametrize(
    "length,expected",
    [
        (0, "00"),
        (192, "C0"),
        (193, "C100"),
        (12480, "F0FF"),
        (12481, "F10000"),
        (918744, "FED417"),
    ],
)
def test_length_prefix(length: int, expected: str) -> None:
    assert length_prefix(length).hex().upper() == expected


def test_length_prefix_too_long() -> None:
    with pytest.raises(CodecError):
        length_prefix(918745)


def test_account_id_base58() -> None:
    assert decode_account_id(GENESIS_ADDRESS).hex().upper() == GENESIS_ACCOUNT_ID
    assert encode_account_id(bytes.fromhex(GENESIS_ACCOUNT_ID)) == GENESIS_ADDRESS
    with pytest.raises(ValueError):
        decode_account_id(GENESIS_ADDRESS[:-1] + "x")


def test_encode_simple_transaction(definitions: Definitions) -> None:
    assert encode_transaction(SIMPLE_TX, definitions) == SIMPLE_HEX


def test_field_order_is_canonical(definitions: Definitions) -> None:
    reordered = dict(reversed(list(SIMPLE_TX.items())))
    assert encode_transaction(reordered, definitions) == SIMPLE_HEX


def test_non_serialized_fields_are_skipped(definitions: Definitions) -> None:
    tx = dict(SIMPLE_TX, hash="00" * 32)
    assert encode_transaction(tx, definitions) == SIMPLE_HEX


def test_signing_only_skips_signature(definitions: Definitions) -> None:
    tx = dict(SIMPLE_TX, TxnSignature="ABCD")
    ser = BinarySerializer(definitions)
    assert ser.encode_hex(tx) == SIMPLE_HEX[:34] + "7402ABCD" + SIMPLE_HEX[34:]
    assert ser.encode_hex(tx, signing_only=True) == SIMPLE_HEX


def test_empty_blob(definitions: Definitions) -> None:
    tx = dict(SIMPLE_TX, SigningPubKey="")
    assert encode_transaction(tx, definitions) == SIMPLE_HEX[:34] + "7300" + SIMPLE_HEX[34:]


def test_hooks_array(definitions: Definitions) -> None:
    tx = {"Hooks": [{"Hook": {"HookOn": "F" * 64, "HookApiVersion": 0}}]}
    assert encode_transaction(tx, definitions) == "FB" + "EE" + "10140000" + "5014" + "F" * 64 + "E1" + "F1"


def test_hook_parameters_nested(definitions: Definitions) -> None:
    tx = {
        "HookParameters": [
            {"HookParameter": {"HookParameterName": "6B", "HookParameterValue": "76"}},
        ]
    }
    assert encode_transaction(tx, definitions) == "F013" + "E017" + "7018016B" + "7019" + "0176" + "E1" + "F1"


def test_long_blob_uses_two_byte_prefix(definitions: Definitions) -> None:
    code = "AB" * 200
    out = encode_transaction({"CreateCode": code}, definitions)
    assert out == "7B" + "C107" + code


def test_network_id_and_uint16(definitions: Definitions) -> None:
    out = encode_transaction({"NetworkID": 21337, "HookApiVersion": 0}, definitions)
    assert out == "10140000" + "2100005359"


def test_vector256(definitions: Definitions) -> None:
    out = encode_transaction({"Amendments": ["11" * 32, "22" * 32]}, definitions)
    assert out == "0313" + "40" + "11" * 32 + "22" * 32


@pytest.mark.parametrize(
    "tx",
    [
        {"Unknown": 1},
        {"TransactionType": "Teleport"},
        {"Fee": {"currency": "USD", "issuer": GENESIS_ADDRESS, "value": "1"}},
        {"Fee": "-1"},
        {"Fee": "1.5"},
        {"Sequence": 2**32},
        {"Sequence": True},
        {"HookOn": "ABCD"},
        {"SigningPubKey": "XYZ"},
        {"Account": "not-an-address"},
        {"Hooks": {"Hook": {}}},
        {"Hooks": [{"HookOn": "F" * 64}]},
    ],
)
def test_rejects_bad_input(definitions: Definitions, tx) -> None:
    with pytest.raises(CodecError):
        encode_transaction(tx, definitions)


def test_definitions_from_json(tmp_path: Path) -> None:
    path = tmp_path / "definitions.json"
    path.write_text(json.dumps(DEFINITIONS_DOC), encoding="utf-8")
    defs = Definitions.from_json(path)
    assert defs.transaction_type_code("SetHook") == 22
    assert defs.field("Hooks").type_name == "STArray"


def test_malformed_definitions() -> None:
    with pytest.raises(CodecError):
        Definitions({"FIELDS": []})
