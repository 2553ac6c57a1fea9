from __future__ import annotations

"""
Configuration loader for hooks-toolkit.

- Reads environment variables (optionally from `.env`) via pydantic-settings.
- Resolves the JSON-RPC endpoint from a named network preset unless an
  explicit URL is given.
- Exposes a cached `get_settings()` accessor.

Environment variables (all prefixed with HOOKS_):
    NETWORK                 (local|testnet|mainnet, default testnet)
    RPC_URL                 (str, optional)        : overrides the preset URL
    ACCOUNT                 (str, optional)        : skip node-side account derivation
    WORKDIR                 (path, default cwd)    : hook project root
    TARGET_TRIPLE           (str, default wasm32-unknown-unknown)
    FAILURE_POLICY          (fail_fast|continue, default fail_fast)
    TOOL_TIMEOUT_S          (float, optional)      : unset means no timeout
    SUBMIT_MAX_ATTEMPTS     (int, default 3)
    SUBMIT_BACKOFF_S        (float, default 1.0)
    DEFINITIONS_PATH        (path, optional)       : ledger definitions JSON
    LOG_LEVEL / LOG_FORMAT

Notes
-----
- List settings (COMPILE_ARGS) accept comma-separated strings or JSON arrays.
- Core functions never call `get_settings()` themselves; the CLI passes the
  relevant values in.
"""

import json
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Network(str, Enum):
    LOCAL = "local"
    TESTNET = "testnet"
    MAINNET = "mainnet"


NETWORK_RPC_URLS = {
    Network.LOCAL: "http://127.0.0.1:5005",
    Network.TESTNET: "https://xahau-test.net",
    Network.MAINNET: "https://xahau.network",
}


def _parse_list(val):
    if val is None or isinstance(val, list):
        return val
    s = str(val).strip()
    if not s:
        return []
    if s.startswith("[") and s.endswith("]"):
        try:
            return [str(x) for x in json.loads(s)]
        except ValueError:
            pass
    return [x.strip() for x in s.split(",") if x.strip()]


class HooksSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOOKS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Network
    network: Network = Network.TESTNET
    rpc_url: Optional[str] = None
    account: Optional[str] = None
    request_timeout_s: float = 30.0

    # Toolchain
    workdir: Path = Field(default_factory=Path.cwd)
    target_triple: str = "wasm32-unknown-unknown"
    artifact_ext: str = "wasm"
    cargo_bin: str = "cargo"
    compile_args: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["+nightly", "build", "--release"])
    wasm_opt_bin: str = "wasm-opt"
    cleaner_bin: str = "hook-cleaner"
    wasm2wat_bin: str = "wasm2wat"
    guard_checker_bin: str = "guard_checker"
    failure_policy: str = "fail_fast"
    tool_timeout_s: Optional[float] = None

    # Submission
    submit_max_attempts: int = Field(default=3, ge=1)
    submit_backoff_s: float = Field(default=1.0, ge=0)
    ledger_offset: int = Field(default=20, ge=1)
    poll_interval_s: float = Field(default=1.0, gt=0)
    definitions_path: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    @field_validator("compile_args", mode="before")
    @classmethod
    def _coerce_list(cls, v):
        return _parse_list(v)

    @field_validator("failure_policy")
    @classmethod
    def _check_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("fail_fast", "continue"):
            raise ValueError("failure_policy must be 'fail_fast' or 'continue'")
        return v

    @property
    def resolved_rpc_url(self) -> str:
        if self.rpc_url:
            lower = self.rpc_url.lower()
            if not lower.startswith(("http://", "https://")):
                raise ValueError(f"rpc_url must start with http:// or https://, got: {self.rpc_url!r}")
            return self.rpc_url
        return NETWORK_RPC_URLS[self.network]


@lru_cache(maxsize=1)
def get_settings() -> HooksSettings:
    """Cached settings accessor (call `get_settings.cache_clear()` in tests)."""
    return HooksSettings()


__all__ = ["Network", "NETWORK_RPC_URLS", "HooksSettings", "get_settings"]
