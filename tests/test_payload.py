from __future__ import annotations

import dataclasses

import pytest

from hooks_toolkit.errors import EncodingError
from hooks_toolkit.payload.builder import build_payload, hook_on_from_types
from hooks_toolkit.payload.encoders import namespace_digest
from hooks_toolkit.payload.types import (DEFAULT_HOOK_ON, HookParameter,
                                         HookPayload, hook_on_hex)

from conftest import DEFINITIONS_DOC

TX_TYPES = DEFINITIONS_DOC["TRANSACTION_TYPES"]


class TestBuildPayload:
    def test_api_version_zero_is_kept(self) -> None:
        payload = build_payload(api_version=0)
        assert payload.api_version == 0
        assert payload.to_wire()["HookApiVersion"] == 0

    def test_api_version_absent_when_not_given(self) -> None:
        payload = build_payload()
        assert payload.api_version is None
        assert "HookApiVersion" not in payload.to_wire()

    def test_flags_zero_is_dropped(self) -> None:
        payload = build_payload(flags=0)
        assert payload.flags is None
        assert "Flags" not in payload.to_wire()

    def test_flags_non_zero_is_kept(self) -> None:
        assert build_payload(flags=1).to_wire()["Flags"] == 1

    def test_default_on_mask(self) -> None:
        payload = build_payload()
        assert payload.on_mask == DEFAULT_HOOK_ON
        assert DEFAULT_HOOK_ON == "0x" + "F" * 58 + "B" + "F" * 5
        assert payload.to_wire()["HookOn"] == "F" * 58 + "B" + "F" * 5

    def test_explicit_on_mask_is_kept_verbatim(self) -> None:
        payload = build_payload(on_mask="0x01")
        assert payload.on_mask == "0x01"
        assert payload.to_wire()["HookOn"] == "0" * 63 + "1"

    def test_namespace_is_digest_of_seed(self) -> None:
        payload = build_payload(namespace_seed="foonamespace")
        assert payload.namespace == namespace_digest("foonamespace")
        assert payload.namespace != "foonamespace"

    def test_empty_namespace_seed_is_unset(self) -> None:
        assert build_payload(namespace_seed="").namespace is None

    def test_parameters_and_grants(self) -> None:
        grants = [{"HookGrant": {"HookHash": "AB" * 32}}]
        payload = build_payload(parameters=[("owner", "alice")], grants=grants)
        wire = payload.to_wire()
        assert wire["HookParameters"] == [
            {"HookParameter": {"HookParameterName": "6F776E6572", "HookParameterValue": "616C696365"}}
        ]
        assert wire["HookGrants"] == grants

    def test_parameters_absent_vs_empty(self) -> None:
        assert "HookParameters" not in build_payload().to_wire()
        assert build_payload(parameters=[]).to_wire()["HookParameters"] == []

    def test_no_code_until_attached(self) -> None:
        payload = build_payload(api_version=0)
        assert "CreateCode" not in payload.to_wire()


class TestHookPayload:
    def test_with_code_returns_new_value(self) -> None:
        payload = build_payload(api_version=0)
        built = payload.with_code("0061736D")
        assert payload.code is None
        assert built.code == "0061736D"
        assert built.to_wire()["CreateCode"] == "0061736D"

    def test_payload_is_frozen(self) -> None:
        payload = build_payload()
        with pytest.raises(dataclasses.FrozenInstanceError):
            payload.code = "00"  # type: ignore[misc]

    def test_wire_roundtrip(self) -> None:
        payload = build_payload(
            api_version=0,
            namespace_seed="counternamespace",
            flags=1,
            parameters=[("k", "v")],
            grants=[],
        ).with_code("AA")
        again = HookPayload.from_wire(payload.to_wire())
        assert again.to_wire() == payload.to_wire()
        assert again.parameters == (HookParameter("6B", "76"),)

    def test_hook_on_hex_rejects_garbage(self) -> None:
        with pytest.raises(EncodingError):
            hook_on_hex("0xZZ")
        with pytest.raises(EncodingError):
            hook_on_hex(-1)
        with pytest.raises(EncodingError):
            hook_on_hex("F" * 65)


class TestHookOnFromTypes:
    def test_invoke_clears_its_bit(self) -> None:
        mask = int(hook_on_from_types(["Invoke"], TX_TYPES), 16)
        default = int(DEFAULT_HOOK_ON, 16)
        assert mask == default ^ (1 << 99)
        assert not mask & (1 << 99)

    def test_names_are_case_and_underscore_insensitive(self) -> None:
        assert hook_on_from_types(["INVOKE"], TX_TYPES) == hook_on_from_types(["Invoke"], TX_TYPES)
        assert hook_on_from_types(["SET_HOOK"], TX_TYPES) == hook_on_from_types(["SetHook"], TX_TYPES)

    def test_set_hook_flip_sets_reserved_bit(self) -> None:
        assert hook_on_from_types(["SetHook"], TX_TYPES) == "0x" + "F" * 64

    def test_format(self) -> None:
        out = hook_on_from_types(["Payment"], TX_TYPES)
        assert out.startswith("0x") and len(out) == 66
        assert out[2:] == out[2:].upper()

    def test_unknown_type(self) -> None:
        with pytest.raises(EncodingError):
            hook_on_from_types(["Teleport"], TX_TYPES)
