from __future__ import annotations

import sys
from pathlib import Path

from hooks_toolkit.toolchain.runner import (EXIT_NOT_FOUND, EXIT_TIMEOUT,
                                            CommandResult, SubprocessRunner)


def test_captures_output_and_exit_status(tmp_path: Path) -> None:
    res = SubprocessRunner().run(
        [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"],
        cwd=tmp_path,
    )
    assert res.returncode == 3
    assert not res.ok
    assert res.stdout.strip() == "out"
    assert res.stderr.strip() == "err"


def test_runs_in_cwd(tmp_path: Path) -> None:
    res = SubprocessRunner().run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
    assert res.ok
    assert Path(res.stdout.strip()).resolve() == tmp_path.resolve()


def test_missing_executable_is_a_failed_result() -> None:
    res = SubprocessRunner().run(["definitely-not-a-real-tool-xyz", "--help"])
    assert res.returncode == EXIT_NOT_FOUND
    assert "command not found" in res.stderr


def test_missing_working_directory_is_not_reported_as_missing_command(tmp_path: Path) -> None:
    missing = tmp_path / "no-such-crate"
    res = SubprocessRunner().run([sys.executable, "-c", "pass"], cwd=missing)
    assert res.returncode == EXIT_NOT_FOUND
    assert "working directory not found" in res.stderr
    assert str(missing) in res.stderr
    assert "command not found" not in res.stderr


def test_timeout_is_a_failed_result() -> None:
    res = SubprocessRunner().run([sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2)
    assert res.returncode == EXIT_TIMEOUT
    assert "timed out" in res.stderr


def test_env_overrides() -> None:
    res = SubprocessRunner(env={"HOOKS_TEST_VALUE": "42"}).run(
        [sys.executable, "-c", "import os; print(os.environ['HOOKS_TEST_VALUE'])"]
    )
    assert res.stdout.strip() == "42"


def test_command_line_quotes_arguments() -> None:
    res = CommandResult(("wasm-opt", "my file.wasm", "-Oz"), 0)
    assert res.command_line == "wasm-opt 'my file.wasm' -Oz"
