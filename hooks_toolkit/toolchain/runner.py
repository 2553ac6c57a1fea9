"""
hooks_toolkit.toolchain.runner - run external build tools with captured output
==============================================================================

The pipeline never spawns processes directly; it asks a `CommandRunner`.
`SubprocessRunner` is the real one. Tests pass a fake that returns canned
`CommandResult`s (and writes whatever artifacts the stage would produce).

A tool that cannot be spawned (not on PATH, not executable) or that exceeds
its timeout does not raise here: it comes back as a failed `CommandResult`
so the pipeline's failure policy decides what happens next.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple, Union

StrPath = Union[str, os.PathLike]

# Conventional shell exit statuses for "command not found" and "timed out"
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class CommandResult:
    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return " ".join(shlex.quote(a) for a in self.args)


class CommandRunner(Protocol):
    def run(
        self,
        args: Sequence[StrPath],
        *,
        cwd: Optional[StrPath] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult: ...


class SubprocessRunner:
    """Runs commands with `subprocess.run`, capturing text stdout/stderr."""

    def __init__(self, env: Optional[dict] = None) -> None:
        self._env = env

    def _build_env(self) -> Optional[dict]:
        if not self._env:
            return None
        env = os.environ.copy()
        env.update({str(k): str(v) for k, v in self._env.items()})
        return env

    def run(
        self,
        args: Sequence[StrPath],
        *,
        cwd: Optional[StrPath] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        argv = tuple(str(a) for a in args)
        if cwd and not os.path.isdir(cwd):
            return CommandResult(argv, EXIT_NOT_FOUND, "", f"working directory not found: {cwd}")
        try:
            proc = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                env=self._build_env(),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as e:
            return CommandResult(argv, EXIT_NOT_FOUND, "", f"command not found: {argv[0]} ({e})")
        except PermissionError as e:
            return CommandResult(argv, EXIT_NOT_FOUND, "", f"command not executable: {argv[0]} ({e})")
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                argv,
                EXIT_TIMEOUT,
                _text(e.stdout),
                _text(e.stderr) + f"\ntimed out after {timeout}s",
            )
        return CommandResult(argv, proc.returncode, proc.stdout or "", proc.stderr or "")


def _text(out: Union[str, bytes, None]) -> str:
    if out is None:
        return ""
    if isinstance(out, bytes):
        return out.decode(errors="replace")
    return out


__all__ = [
    "CommandResult",
    "CommandRunner",
    "SubprocessRunner",
    "EXIT_NOT_FOUND",
    "EXIT_TIMEOUT",
]
