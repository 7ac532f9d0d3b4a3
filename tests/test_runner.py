import os
import signal
import subprocess
import sys
import time

import pytest

from crossbuild.runtime.runner import (
    RecordingRunner,
    SubprocessRunner,
    normalize_returncode,
    subprocess_runner,
)


def test_subprocess_runner_reports_exit_code(tmp_path):
    runner = SubprocessRunner()
    result = runner.run(
        [sys.executable, "-c", "import sys; sys.exit(3)"], cwd=tmp_path
    )
    assert result.exit_code == 3
    assert not result.success


def test_subprocess_runner_uses_cwd_and_env(tmp_path):
    runner = SubprocessRunner()
    code = (
        "import os, pathlib;"
        "pathlib.Path('seen.txt').write_text(os.environ['CROSSBUILD_OVERLAY'])"
    )
    env = dict(os.environ, CROSSBUILD_OVERLAY="overlay-value")
    result = runner.run([sys.executable, "-c", code], cwd=tmp_path, env=env)
    assert result.success
    assert (tmp_path / "seen.txt").read_text() == "overlay-value"


def test_subprocess_runner_missing_command(tmp_path):
    result = SubprocessRunner().run(
        ["crossbuild-no-such-tool-xyz"], cwd=tmp_path
    )
    assert result.exit_code == 127


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
def test_subprocess_runner_maps_signals(tmp_path):
    code = "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"
    result = SubprocessRunner().run([sys.executable, "-c", code], cwd=tmp_path)
    assert result.exit_code == 128 + signal.SIGTERM


@pytest.mark.skipif(sys.platform == "win32", reason="process groups")
def test_subprocess_runner_timeout(tmp_path):
    runner = SubprocessRunner(timeout_s=0.5)
    result = runner.run(
        [sys.executable, "-c", "import time; time.sleep(30)"], cwd=tmp_path
    )
    assert result.exit_code == 124
    assert "timeout" in result.error


def test_subprocess_runner_timeout_without_process_groups(
    tmp_path, monkeypatch
):
    monkeypatch.delattr(subprocess_runner.os, "killpg", raising=False)
    runner = SubprocessRunner(timeout_s=0.5)
    result = runner.run(
        [sys.executable, "-c", "import time; time.sleep(30)"], cwd=tmp_path
    )
    assert result.exit_code == 124


class _InterruptedPopen(subprocess.Popen):
    """Popen whose first wait() behaves as if Ctrl-C hit the parent."""

    def wait(self, timeout=None):
        if not getattr(self, "_interrupted", False):
            self._interrupted = True
            raise KeyboardInterrupt
        return super().wait(timeout)


@pytest.mark.skipif(sys.platform == "win32", reason="process groups")
def test_subprocess_runner_forwards_ctrl_c_to_child_group(
    tmp_path, monkeypatch
):
    monkeypatch.setattr(
        subprocess_runner.subprocess, "Popen", _InterruptedPopen
    )
    runner = SubprocessRunner(timeout_s=120)
    started = time.monotonic()
    with pytest.raises(KeyboardInterrupt):
        runner.run(
            [sys.executable, "-c", "import time; time.sleep(30)"],
            cwd=tmp_path,
        )
    assert time.monotonic() - started < 10


def test_normalize_returncode():
    assert normalize_returncode(0) == 0
    assert normalize_returncode(2) == 2
    assert normalize_returncode(-9) == 137


def test_recording_runner_matches_full_line_before_program(tmp_path):
    runner = RecordingRunner(exit_codes={"cargo test": 4, "cargo": 9})
    assert runner.run(["cargo", "test"], cwd=tmp_path).exit_code == 4
    assert runner.run(["cargo", "build"], cwd=tmp_path).exit_code == 9
    assert runner.run(["javac"], cwd=tmp_path).exit_code == 0
    assert [call.program for call in runner.calls] == ["cargo", "cargo", "javac"]
