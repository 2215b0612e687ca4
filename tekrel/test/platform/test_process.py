"""Tests for tekrel.platform.process and tekrel.platform.files."""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest

from tekrel.core.result import Err, Ok
from tekrel.platform.files import write_text_atomic
from tekrel.platform.process import REDACTED, ProcessError, redact, run


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(
            command=("git", "status"),
            returncode=1,
            stdout="",
            stderr="fatal: not a git repository",
        )
        assert str(error) == "git status failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "push", "-u", "origin", "release-v1.21.x"),
            returncode=128,
            stdout="",
            stderr="",
        )
        assert str(error) == "git push -u ... failed (exit 128)"


def test_redact_skips_empty_secrets() -> None:
    assert redact("token=abc", ["", "abc"]) == f"token={REDACTED}"


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_carries_stderr(self, tmp_path: Path) -> None:
        code = "import sys; sys.stderr.write('bad'); sys.exit(3)"
        result = run([sys.executable, "-c", code], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 3
        assert result.error.stderr == "bad"

    def test_secrets_are_redacted(self, tmp_path: Path) -> None:
        code = "import sys; sys.stderr.write('auth failed for s3cret'); sys.exit(1)"
        result = run([sys.executable, "-c", code, "s3cret"], cwd=tmp_path, secrets=["s3cret"])
        assert isinstance(result, Err)
        assert "s3cret" not in result.error.stderr
        assert "s3cret" not in " ".join(result.error.command)

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = run(["definitely-not-a-real-binary-xyz"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import time; time.sleep(5)"], cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr


class TestWriteTextAtomic:
    def test_creates_parents(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "file.yaml"
        write_text_atomic(target, "x: 1\n")
        assert target.read_text(encoding="utf-8") == "x: 1\n"

    def test_overwrites_without_leftovers(self, tmp_path: Path) -> None:
        target = tmp_path / "file.yaml"
        target.write_text("old\n", encoding="utf-8")
        write_text_atomic(target, "new\n")
        assert target.read_text(encoding="utf-8") == "new\n"
        assert [p.name for p in tmp_path.iterdir()] == ["file.yaml"]

    @pytest.mark.skipif(sys.platform == "win32", reason="chmod doesn't work on Windows")
    def test_keeps_existing_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "run.sh"
        target.write_text("old\n", encoding="utf-8")
        target.chmod(0o755)
        write_text_atomic(target, "new\n")
        assert stat.S_IMODE(target.stat().st_mode) == 0o755

    @pytest.mark.skipif(sys.platform == "win32", reason="chmod doesn't work on Windows")
    def test_new_file_is_world_readable(self, tmp_path: Path) -> None:
        target = tmp_path / "new.yaml"
        write_text_atomic(target, "x: 1\n")
        assert stat.S_IMODE(target.stat().st_mode) == 0o644
