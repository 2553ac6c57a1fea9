"""
hooks-toolkit - build and deploy ledger hooks.

Commands:
  hooks-toolkit build NAME      Run the toolchain and write the payload JSON
  hooks-toolkit deploy NAME     Build (or load) a payload and install it with SetHook
  hooks-toolkit hook-on TYPE..  Print the on-mask for the given transaction types

Global options:
  --log-level TEXT     Log level (env HOOKS_LOG_LEVEL)
  --log-format TEXT    console | json (env HOOKS_LOG_FORMAT)

Examples:
  hooks-toolkit build counter --output counter.json
  HOOKS_SECRET=sn... hooks-toolkit deploy counter --hook-on INVOKE
  hooks-toolkit deploy counter --payload counter.json --network mainnet
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from pydantic import ValidationError

from hooks_toolkit.config import HooksSettings
from hooks_toolkit.deploy import HookDeploymentService
from hooks_toolkit.errors import HooksToolkitError
from hooks_toolkit.logging import setup_logging
from hooks_toolkit.payload.builder import hook_on_from_types
from hooks_toolkit.payload.types import HookPayload
from hooks_toolkit.toolchain.pipeline import (FailurePolicy, ToolchainConfig,
                                              ToolchainPipeline)
from hooks_toolkit.tx.client import LedgerClient
from hooks_toolkit.utils.retry import RetryPolicy

app = typer.Typer(
    name="hooks-toolkit",
    help="Build and deploy ledger hooks",
    no_args_is_help=True,
    add_completion=False,
)


def load_settings(**overrides: Any) -> HooksSettings:
    """Settings from env/.env with explicit CLI values taking precedence."""
    return HooksSettings(**{k: v for k, v in overrides.items() if v is not None})


def make_pipeline(settings: HooksSettings, workdir: Path) -> ToolchainPipeline:
    return ToolchainPipeline(
        workdir,
        config=ToolchainConfig.from_settings(settings),
        policy=FailurePolicy(settings.failure_policy),
    )


def make_client(settings: HooksSettings) -> LedgerClient:
    return LedgerClient.from_settings(settings)


def _pretty(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


def _fail(e: Exception) -> None:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level", envvar="HOOKS_LOG_LEVEL"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="console | json", envvar="HOOKS_LOG_FORMAT"),
) -> None:
    setup_logging(level=log_level, log_format=log_format)


@app.command()
def build(
    name: str = typer.Argument(..., help="Hook crate / artifact name"),
    workdir: Optional[Path] = typer.Option(None, "--workdir", "-C", help="Crate directory (default: cwd)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write payload JSON here instead of stdout"),
) -> None:
    """Compile, flatten, clean and guard-check a hook; emit its payload."""
    try:
        settings = load_settings(workdir=workdir)
        payload = make_pipeline(settings, settings.workdir).build(name)
    except (HooksToolkitError, ValidationError) as e:
        _fail(e)

    text = _pretty(payload.to_wire())
    if output is None:
        typer.echo(text)
        return
    output.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"Wrote {output} ({len(payload.code or '') // 2} bytes of code)")


@app.command()
def deploy(
    name: str = typer.Argument(..., help="Hook crate / artifact name"),
    payload_file: Optional[Path] = typer.Option(
        None, "--payload", "-p", exists=True, dir_okay=False, help="Deploy a payload written by `build`"
    ),
    hook_on: Optional[List[str]] = typer.Option(
        None, "--hook-on", help="Transaction type that triggers the hook (repeatable)"
    ),
    workdir: Optional[Path] = typer.Option(None, "--workdir", "-C", help="Crate directory (default: cwd)"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Override RPC endpoint URL", envvar="HOOKS_RPC_URL"),
    network: Optional[str] = typer.Option(None, "--network", help="local | testnet | mainnet", envvar="HOOKS_NETWORK"),
    account: Optional[str] = typer.Option(None, "--account", help="Account address (skip wallet_propose)"),
    secret: str = typer.Option(..., "--secret", envvar="HOOKS_SECRET", help="Signing secret", hide_input=True),
) -> None:
    """Install the hook on the target network with a SetHook transaction."""
    client: Optional[LedgerClient] = None
    try:
        settings = load_settings(workdir=workdir, rpc_url=rpc_url, network=network, account=account)
        service = HookDeploymentService(
            retry_policy=RetryPolicy(max_attempts=settings.submit_max_attempts, delay=settings.submit_backoff_s)
        )
        client = make_client(settings)
        if payload_file is not None:
            payload = HookPayload.from_wire(json.loads(payload_file.read_text(encoding="utf-8")))
        else:
            payload = make_pipeline(settings, settings.workdir).build(name)
        if hook_on:
            mask = hook_on_from_types(hook_on, client.definitions.transaction_types)
            payload = dataclasses.replace(payload, on_mask=mask)
        result = service.deploy(client, secret, payload)
    except (HooksToolkitError, ValidationError) as e:
        _fail(e)
    finally:
        if client is not None:
            client.close()

    typer.echo(f"Deployed {name}: {result.get('hash', '?')}")


@app.command("hook-on")
def hook_on_cmd(
    types: List[str] = typer.Argument(..., help="Transaction type names, e.g. INVOKE Payment"),
    definitions: Optional[Path] = typer.Option(
        None, "--definitions", exists=True, dir_okay=False, help="Ledger definitions JSON (default: fetch from node)"
    ),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Override RPC endpoint URL", envvar="HOOKS_RPC_URL"),
) -> None:
    """Print the on-mask that triggers a hook for the given transaction types."""
    client: Optional[LedgerClient] = None
    try:
        client = make_client(load_settings(definitions_path=definitions, rpc_url=rpc_url))
        typer.echo(hook_on_from_types(types, client.definitions.transaction_types))
    except (HooksToolkitError, ValidationError) as e:
        _fail(e)
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":  # pragma: no cover
    app()
