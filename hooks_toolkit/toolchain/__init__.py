"""
hooks_toolkit.toolchain
=======================

External build-tool orchestration: compile, flatten, clean, dump, validate,
finalize.

Submodules
----------
- runner    : CommandRunner protocol and the subprocess-backed runner.
- artifacts : Deterministic artifact paths under <workdir>/target.
- pipeline  : The staged pipeline and its failure policy.
"""

from __future__ import annotations

from .artifacts import ArtifactPaths
from .pipeline import (BuildOutcome, FailurePolicy, PipelineState, Stage,
                       StageResult, ToolchainConfig, ToolchainPipeline)
from .runner import CommandResult, CommandRunner, SubprocessRunner

__all__ = [
    "ArtifactPaths",
    "BuildOutcome",
    "CommandResult",
    "CommandRunner",
    "FailurePolicy",
    "PipelineState",
    "Stage",
    "StageResult",
    "SubprocessRunner",
    "ToolchainConfig",
    "ToolchainPipeline",
]
