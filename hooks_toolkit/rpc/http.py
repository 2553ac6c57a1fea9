from __future__ import annotations

"""
HTTP JSON-RPC client (sync) for ledger nodes.

- Uses httpx; friendly to unit tests (respx) and mocks.
- Speaks the node's JSON-RPC dialect: one request object in `params`,
  errors reported inside `result` with `status: "error"`.
- Retries on transient transport failures and 429/5xx HTTP. Application
  errors (`actNotFound`, `txnNotFound`, ...) are never retried here.

Example:
    from hooks_toolkit.rpc.http import RpcClient
    rpc = RpcClient("https://xahau-test.net")
    info = rpc.request("server_info")
    print(info["info"]["network_id"])
"""

import json
import random
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import httpx

from ..errors import RpcError
from ..logging import get_logger
from ..version import user_agent

log = get_logger(__name__)

JsonDict = Dict[str, Any]


def _is_retriable_http(status: int) -> bool:
    # Typical transient HTTP statuses: 429/502/503/504
    return status in (429, 502, 503, 504)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    # Exponential backoff with jitter in [0, jitter]
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


class _Transient(Exception):
    """Internal marker for errors worth another transport attempt."""


@dataclass
class RpcClient:
    """Synchronous JSON-RPC client over HTTP."""

    url: str
    timeout: float = 30.0
    max_retries: int = 3
    backoff_base: float = 0.15
    backoff_factor: float = 1.8
    backoff_jitter: float = 0.2
    headers: Optional[Mapping[str, str]] = None
    _client: httpx.Client = field(init=False, repr=False)

    def __post_init__(self) -> None:
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": user_agent(),
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.Client(timeout=self.timeout, headers=merged_headers)

    # --- context manager -------------------------------------------------

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        self._client.close()

    # --- public API ------------------------------------------------------

    def request(
        self,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        max_retries: Optional[int] = None,
    ) -> JsonDict:
        """
        Perform one JSON-RPC request and return its `result` object or raise RpcError.

        `max_retries` overrides the client-wide transport retry count for this
        call (0 sends exactly once).
        """
        payload = {"method": method, "params": [dict(params or {})]}
        retries = self.max_retries if max_retries is None else max(0, int(max_retries))
        body = self._send_with_retries(method, payload, retries)
        return self._handle_response(method, body)

    # --- internals -------------------------------------------------------

    def _send_with_retries(self, method: str, payload: JsonDict, max_retries: int) -> Any:
        last_exc: Optional[Exception] = None
        for attempt in range(1, max_retries + 2):  # N retries -> N+1 attempts
            try:
                return self._send_once(method, payload)
            except _Transient as e:
                last_exc = e
                if attempt > max_retries:
                    break
                delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
                log.debug("rpc_retry", method=method, attempt=attempt, delay=round(delay, 3), error=str(e))
                time.sleep(delay)
        raise RpcError(method=method, error="transport", message=f"RPC transport failed: {last_exc}")

    def _send_once(self, method: str, payload: JsonDict) -> Any:
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        try:
            r = self._client.post(self.url, content=body)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            raise _Transient(f"{type(e).__name__}: {e}") from e
        if _is_retriable_http(r.status_code):
            raise _Transient(f"HTTP {r.status_code}")
        try:
            return r.json()
        except ValueError as e:
            raise RpcError(
                method=method,
                error="invalidResponse",
                message=f"Non-JSON response from RPC: {r.text[:256]}",
                http_status=r.status_code,
            ) from e

    @staticmethod
    def _handle_response(method: str, body: Any) -> JsonDict:
        if not isinstance(body, dict) or not isinstance(body.get("result"), dict):
            raise RpcError(method=method, error="invalidResponse", message="missing result object", data=body)
        result = body["result"]
        if result.get("status") == "error" or "error" in result:
            raise RpcError(
                method=method,
                error=str(result.get("error", "unknown")),
                message=str(result.get("error_message") or result.get("error_exception") or ""),
                data=result,
            )
        return result


__all__ = ["RpcClient"]
