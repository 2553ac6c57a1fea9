"""
hooks_toolkit.payload
=====================

Hook payload value type, field encoders and builder.
"""

from __future__ import annotations

from .builder import build_payload, hook_on_from_types
from .encoders import encode_field, encode_parameters, namespace_digest
from .types import DEFAULT_HOOK_ON, HookParameter, HookPayload, hook_on_hex

__all__ = [
    "DEFAULT_HOOK_ON",
    "HookParameter",
    "HookPayload",
    "hook_on_hex",
    "build_payload",
    "hook_on_from_types",
    "encode_field",
    "encode_parameters",
    "namespace_digest",
]
