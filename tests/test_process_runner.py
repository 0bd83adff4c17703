"""ProcessRunner tests.

Test coverage:
- Output relayed in order, exactly once
- stdout/stderr interleaving
- Failure with bounded output tail
- Signals, launch errors and unsupported platforms
- Environment overlay
- Backpressure with a tiny pipe
"""

from __future__ import annotations

from pathlib import Path

import pytest

import waffles_mcp.runtime.process_runner as process_runner_mod
from waffles_mcp.errors import (
    ExecutionError,
    LaunchError,
    PlatformUnsupportedError,
)
from waffles_mcp.runtime.process_runner import InvocationSpec, ProcessRunner


def sh(script: str, **env: str) -> InvocationSpec:
    return InvocationSpec(program="sh", args=("-c", script), env=env)


@pytest.fixture
def runner() -> ProcessRunner:
    return ProcessRunner()


# =============================================================================
# Successful runs
# =============================================================================


class TestSuccess:

    @pytest.mark.asyncio
    async def test_lines_relayed_in_order(self, runner: ProcessRunner, output):
        await runner.apply(sh("for i in 1 2 3 4 5; do echo line$i; done"), output)
        assert output.lines == ["line1", "line2", "line3", "line4", "line5"]

    @pytest.mark.asyncio
    async def test_many_lines_exactly_once(self, runner: ProcessRunner, output):
        script = 'i=0; while [ $i -lt 500 ]; do echo "n $i"; i=$((i+1)); done'
        await runner.apply(sh(script), output)
        assert output.lines == [f"n {i}" for i in range(500)]

    @pytest.mark.asyncio
    async def test_stderr_is_combined(self, runner: ProcessRunner, output):
        await runner.apply(sh("echo out1; echo err1 >&2; echo out2; echo err2 >&2"), output)
        assert output.lines == ["out1", "err1", "out2", "err2"]

    @pytest.mark.asyncio
    async def test_no_output(self, runner: ProcessRunner, output):
        await runner.apply(sh("true"), output)
        assert output.lines == []

    @pytest.mark.asyncio
    async def test_last_line_without_newline(self, runner: ProcessRunner, output):
        await runner.apply(sh("printf 'a\\nb\\nc'"), output)
        assert output.lines == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_tiny_pipe_and_reads(self, output):
        runner = ProcessRunner(read_size=1, pipe_depth=1)
        script = 'i=0; while [ $i -lt 50 ]; do echo "row $i"; i=$((i+1)); done'
        await runner.apply(sh(script), output)
        assert output.lines == [f"row {i}" for i in range(50)]


# =============================================================================
# Environment
# =============================================================================


class TestEnvironment:

    @pytest.mark.asyncio
    async def test_overlay_and_inherited(
        self, runner: ProcessRunner, output, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("WMCP_TEST_INHERITED", "from-parent")
        monkeypatch.setenv("WAFFLES_SITE_DIR", "/parent/value")
        spec = sh(
            'echo "$WAFFLES_SITE_DIR"; echo "$WMCP_TEST_INHERITED"',
            WAFFLES_SITE_DIR="/srv/waffles",
        )
        await runner.apply(spec, output)
        assert output.lines == ["/srv/waffles", "from-parent"]

    def test_command_line(self):
        spec = InvocationSpec(
            program="/etc/waffles/waffles.sh",
            args=("-s", "web01", "-u", "ops user"),
            env={"WAFFLES_SITE_DIR": "/srv/waffles"},
        )
        assert spec.command_line() == (
            "WAFFLES_SITE_DIR=/srv/waffles /etc/waffles/waffles.sh -s web01 -u 'ops user'"
        )


# =============================================================================
# Failures
# =============================================================================


class TestFailures:

    @pytest.mark.asyncio
    async def test_exit_code_reported(self, runner: ProcessRunner, output):
        with pytest.raises(ExecutionError) as exc_info:
            await runner.apply(sh("echo boom; exit 4"), output)
        err = exc_info.value
        assert err.returncode == 4
        assert err.output == "boom\n"
        assert "exit status 4" in str(err)
        assert "Output: boom" in str(err)
        assert output.lines == ["boom"]

    @pytest.mark.asyncio
    async def test_tail_is_bounded(self, output):
        runner = ProcessRunner(buffer_size=1024)
        script = (
            'i=0; while [ $i -lt 400 ]; do echo "noise line $i"; i=$((i+1)); done; '
            "echo LAST-LINE >&2; exit 3"
        )
        with pytest.raises(ExecutionError) as exc_info:
            await runner.apply(sh(script), output)
        err = exc_info.value
        assert err.returncode == 3
        assert len(err.output.encode()) <= 1024
        assert err.output.endswith("noise line 399\nLAST-LINE\n")
        assert "noise line 0\n" not in err.output
        # The sink still saw everything
        assert len(output.lines) == 401
        assert output.lines[-1] == "LAST-LINE"

    @pytest.mark.asyncio
    async def test_killed_by_signal(self, runner: ProcessRunner, output):
        with pytest.raises(ExecutionError) as exc_info:
            await runner.apply(sh("echo going; kill -9 $$"), output)
        err = exc_info.value
        assert err.returncode < 0
        assert "signal: SIGKILL" in str(err)
        assert output.lines == ["going"]

    @pytest.mark.asyncio
    async def test_missing_executable(self, runner: ProcessRunner, output, tmp_path: Path):
        spec = InvocationSpec(program=str(tmp_path / "missing.sh"))
        with pytest.raises(LaunchError) as exc_info:
            await runner.apply(spec, output)
        assert isinstance(exc_info.value.cause, FileNotFoundError)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert output.lines == []

    @pytest.mark.asyncio
    async def test_not_executable(self, runner: ProcessRunner, output, tmp_path: Path):
        script = tmp_path / "waffles.sh"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o644)
        with pytest.raises(LaunchError) as exc_info:
            await runner.apply(InvocationSpec(program=str(script)), output)
        assert isinstance(exc_info.value.cause, PermissionError)
        assert output.lines == []

    @pytest.mark.asyncio
    async def test_nul_in_argument(self, runner: ProcessRunner, output):
        spec = InvocationSpec(program="/bin/echo", args=("a\x00b",))
        with pytest.raises(LaunchError) as exc_info:
            await runner.apply(spec, output)
        assert isinstance(exc_info.value.cause, ValueError)
        assert output.lines == []

    @pytest.mark.asyncio
    async def test_runner_usable_after_launch_error(self, runner: ProcessRunner, output):
        with pytest.raises(LaunchError):
            await runner.apply(InvocationSpec(program="/nonexistent/waffles.sh"), output)
        await runner.apply(sh("echo recovered"), output)
        assert output.lines == ["recovered"]

    @pytest.mark.asyncio
    async def test_windows_refused(
        self, runner: ProcessRunner, output, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(process_runner_mod, "IS_WINDOWS", True)
        with pytest.raises(PlatformUnsupportedError):
            await runner.apply(sh("echo should-not-run"), output)
        assert output.lines == []
