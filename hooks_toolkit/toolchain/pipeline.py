"""
hooks_toolkit.toolchain.pipeline
================================

Turn a hook crate into a deployable payload by driving the external toolchain.

Stages
------
1. compile   cargo +nightly build --release   -> target/<triple>/release/<name>.wasm
2. flatten   wasm-opt <raw> --flatten --rereloop -Oz -Oz -o <name>-flattened.wasm
3. clean     hook-cleaner <flattened> <name>-cleaned.wasm
4. debug     wasm2wat for raw, flattened and cleaned (concurrent, never fatal)
5. validate  guard_checker <cleaned>
6. finalize  read <cleaned>, uppercase hex -> HookPayload.code

Stages 1→2→3→5→6 are strictly sequential. The three text conversions run on
a small thread pool while the guard checker runs, and are joined before
finalize.

The guard checker enforces a maximum block nesting depth of 16; SetHook is
rejected by the node otherwise, which is why flattening is not optional.

Failure policy
--------------
FAIL_FAST (default): a failed compile/flatten/clean/validate raises
ToolInvocationError (GuardCheckError for validate) and nothing later runs.

CONTINUE: the legacy behaviour. Failures are logged and the pipeline moves
on; finalize raises ArtifactMissingError if there is no cleaned artifact to
read, and may otherwise pick up a stale one from an earlier build.

Only one pipeline may run against a given workdir at a time; nothing here
locks the target directory.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from hooks_toolkit.errors import (ArtifactMissingError, GuardCheckError,
                                  ToolInvocationError)
from hooks_toolkit.logging import get_logger
from hooks_toolkit.payload.builder import build_payload
from hooks_toolkit.payload.types import HookPayload
from hooks_toolkit.toolchain.artifacts import ArtifactPaths
from hooks_toolkit.toolchain.runner import (CommandResult, CommandRunner,
                                            StrPath, SubprocessRunner)
from hooks_toolkit.utils.bytes import to_hex

log = get_logger(__name__)


class Stage(str, Enum):
    COMPILE = "compile"
    FLATTEN = "flatten"
    CLEAN = "clean"
    DEBUG = "debug"
    VALIDATE = "validate"
    FINALIZE = "finalize"


class PipelineState(str, Enum):
    PENDING = "pending"
    COMPILED = "compiled"
    FLATTENED = "flattened"
    CLEANED = "cleaned"
    VALIDATED = "validated"
    FINALIZED = "finalized"
    FAILED = "failed"


_NEXT_STATE = {
    Stage.COMPILE: PipelineState.COMPILED,
    Stage.FLATTEN: PipelineState.FLATTENED,
    Stage.CLEAN: PipelineState.CLEANED,
    Stage.VALIDATE: PipelineState.VALIDATED,
    Stage.FINALIZE: PipelineState.FINALIZED,
}


class FailurePolicy(str, Enum):
    FAIL_FAST = "fail_fast"
    CONTINUE = "continue"


@dataclass(frozen=True)
class ToolchainConfig:
    """Executables and fixed argument sets for each stage."""

    cargo_bin: str = "cargo"
    compile_args: Tuple[str, ...] = ("+nightly", "build", "--release")
    wasm_opt_bin: str = "wasm-opt"
    optimize_flags: Tuple[str, ...] = ("--flatten", "--rereloop", "-Oz", "-Oz")
    cleaner_bin: str = "hook-cleaner"
    wasm2wat_bin: str = "wasm2wat"
    guard_checker_bin: str = "guard_checker"
    target_triple: str = "wasm32-unknown-unknown"
    artifact_ext: str = "wasm"
    # None means wait as long as the tool takes
    timeout: Optional[float] = None

    @classmethod
    def from_settings(cls, settings) -> "ToolchainConfig":
        return cls(
            cargo_bin=settings.cargo_bin,
            compile_args=tuple(settings.compile_args),
            wasm_opt_bin=settings.wasm_opt_bin,
            cleaner_bin=settings.cleaner_bin,
            wasm2wat_bin=settings.wasm2wat_bin,
            guard_checker_bin=settings.guard_checker_bin,
            target_triple=settings.target_triple,
            artifact_ext=settings.artifact_ext,
            timeout=settings.tool_timeout_s,
        )


@dataclass(frozen=True)
class StageResult:
    stage: Stage
    result: CommandResult

    @property
    def ok(self) -> bool:
        return self.result.ok


@dataclass
class BuildOutcome:
    """Everything a build produced: the payload plus per-stage diagnostics."""

    payload: HookPayload
    paths: ArtifactPaths
    state: PipelineState = PipelineState.PENDING
    stages: List[StageResult] = field(default_factory=list)
    debug: List[StageResult] = field(default_factory=list)

    @property
    def failures(self) -> List[StageResult]:
        return [s for s in self.stages if not s.ok]

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.FINALIZED and not self.failures


class ToolchainPipeline:
    """
    Build a hook in `workdir` and return its payload.

    Usage:
        pipeline = ToolchainPipeline(Path("."))
        payload = pipeline.build("counter")
        payload.code  # uppercase hex of target/.../counter-cleaned.wasm
    """

    def __init__(
        self,
        workdir: StrPath,
        *,
        runner: Optional[CommandRunner] = None,
        config: Optional[ToolchainConfig] = None,
        policy: FailurePolicy = FailurePolicy.FAIL_FAST,
    ) -> None:
        self.workdir = Path(workdir)
        self.runner = runner or SubprocessRunner()
        self.config = config or ToolchainConfig()
        self.policy = FailurePolicy(policy)

    # --- public API ------------------------------------------------------

    def paths(self, artifact_name: str) -> ArtifactPaths:
        return ArtifactPaths(
            workdir=self.workdir,
            name=artifact_name,
            triple=self.config.target_triple,
            ext=self.config.artifact_ext,
        )

    def build(self, artifact_name: str) -> HookPayload:
        return self.run(artifact_name).payload

    def run(self, artifact_name: str) -> BuildOutcome:
        cfg = self.config
        paths = self.paths(artifact_name)
        outcome = BuildOutcome(
            payload=build_payload(api_version=0, namespace_seed=f"{artifact_name}namespace"),
            paths=paths,
        )
        log.info("build_started", hook=artifact_name, workdir=str(self.workdir), policy=self.policy.value)

        try:
            self._run_stage(outcome, Stage.COMPILE, [cfg.cargo_bin, *cfg.compile_args])
            self._run_stage(
                outcome,
                Stage.FLATTEN,
                [cfg.wasm_opt_bin, paths.raw, *cfg.optimize_flags, "-o", paths.flattened],
            )
            self._run_stage(outcome, Stage.CLEAN, [cfg.cleaner_bin, paths.flattened, paths.cleaned])

            with ThreadPoolExecutor(max_workers=3, thread_name_prefix="text-dump") as pool:
                pending = self._start_text_dumps(pool, paths)
                self._run_stage(outcome, Stage.VALIDATE, [cfg.guard_checker_bin, paths.cleaned])
                self._join_text_dumps(outcome, pending)

            outcome.payload = self._finalize(outcome)
        except ToolInvocationError:
            outcome.state = PipelineState.FAILED
            raise

        log.info(
            "build_finished",
            hook=artifact_name,
            code_bytes=len(outcome.payload.code or "") // 2,
            failures=[s.stage.value for s in outcome.failures],
        )
        return outcome

    # --- internals -------------------------------------------------------

    def _invoke(self, args: Sequence[StrPath]) -> CommandResult:
        return self.runner.run(args, cwd=self.workdir, timeout=self.config.timeout)

    def _run_stage(self, outcome: BuildOutcome, stage: Stage, args: Sequence[StrPath]) -> StageResult:
        result = self._invoke(args)
        sr = StageResult(stage, result)
        outcome.stages.append(sr)

        if result.ok:
            log.info("stage_ok", stage=stage.value, cmd=result.command_line, stdout=result.stdout.strip() or None)
            outcome.state = _NEXT_STATE[stage]
            return sr

        log.error(
            "stage_failed",
            stage=stage.value,
            cmd=result.command_line,
            returncode=result.returncode,
            stderr=result.stderr.strip() or None,
        )
        if self.policy is FailurePolicy.FAIL_FAST:
            exc_cls = GuardCheckError if stage is Stage.VALIDATE else ToolInvocationError
            raise exc_cls(stage=stage.value, result=result, message=f"{stage.value} stage failed")
        # Legacy: carry on as if the stage had produced its artifact
        outcome.state = _NEXT_STATE[stage]
        return sr

    def _start_text_dumps(self, pool: ThreadPoolExecutor, paths: ArtifactPaths) -> List[Future]:
        paths.debug_dir.mkdir(parents=True, exist_ok=True)
        return [
            pool.submit(self._invoke, [self.config.wasm2wat_bin, src, "-o", dst])
            for src, dst in paths.text_conversions()
        ]

    def _join_text_dumps(self, outcome: BuildOutcome, pending: List[Future]) -> None:
        for fut in pending:
            try:
                result = fut.result()
            except Exception as e:  # a broken dump must never fail the build
                log.warning("text_dump_error", error=str(e))
                continue
            outcome.debug.append(StageResult(Stage.DEBUG, result))
            if not result.ok:
                log.warning(
                    "text_dump_failed",
                    cmd=result.command_line,
                    returncode=result.returncode,
                    stderr=result.stderr.strip() or None,
                )

    def _finalize(self, outcome: BuildOutcome) -> HookPayload:
        cleaned = outcome.paths.cleaned
        try:
            wasm = cleaned.read_bytes()
        except OSError as e:
            raise ArtifactMissingError(
                stage=Stage.FINALIZE.value,
                message=f"cannot read cleaned artifact {cleaned}: {e}",
            ) from e
        outcome.state = _NEXT_STATE[Stage.FINALIZE]
        return outcome.payload.with_code(to_hex(wasm))


__all__ = [
    "Stage",
    "PipelineState",
    "FailurePolicy",
    "ToolchainConfig",
    "StageResult",
    "BuildOutcome",
    "ToolchainPipeline",
]
