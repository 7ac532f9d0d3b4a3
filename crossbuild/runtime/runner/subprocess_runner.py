# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Runner that executes stages as blocking child processes."""

from __future__ import annotations

import logging
import os
import signal
import subprocess

from pathlib import Path
from typing import Mapping, Optional, Sequence

from crossbuild.constants import (
    EXIT_COMMAND_NOT_FOUND,
    EXIT_GENERIC_FAILURE,
    EXIT_SIGNAL_BASE,
    EXIT_TIMEOUT,
)

from .base import CommandResult, CommandRunner

LOGGER = logging.getLogger(__name__)


def normalize_returncode(rc: int) -> int:
    """Report signal deaths the way a POSIX shell does (128 + signum)."""

    if rc < 0:
        return EXIT_SIGNAL_BASE + (-rc)
    return rc


def _signal_group(proc: subprocess.Popen, signum: int) -> None:
    try:
        os.killpg(proc.pid, signum)
    except ProcessLookupError:
        pass


class SubprocessRunner(CommandRunner):
    """Runs commands with inherited stdio so tool diagnostics stay visible."""

    def __init__(self, *, timeout_s: Optional[float] = None) -> None:
        self.timeout_s = timeout_s

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        child_env = dict(env) if env is not None else None
        new_session = self.timeout_s is not None and hasattr(os, "killpg")
        try:
            proc = subprocess.Popen(
                list(argv),
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                env=child_env,
                start_new_session=new_session,
            )
        except FileNotFoundError as exc:
            return CommandResult(
                EXIT_COMMAND_NOT_FOUND, error=f"command not found: {exc}"
            )
        except (NotADirectoryError, PermissionError) as exc:
            return CommandResult(EXIT_GENERIC_FAILURE, error=str(exc))
        try:
            rc = proc.wait(timeout=self.timeout_s)
        except subprocess.TimeoutExpired:
            LOGGER.error(
                "%s exceeded %ss; terminating", argv[0], self.timeout_s
            )
            if new_session:
                _signal_group(proc, signal.SIGKILL)
            else:
                proc.kill()
            proc.wait()
            return CommandResult(
                EXIT_TIMEOUT, error=f"timeout after {self.timeout_s}s"
            )
        except KeyboardInterrupt:
            # The child left the terminal's process group; forward Ctrl-C.
            if new_session:
                _signal_group(proc, signal.SIGINT)
            proc.wait()
            raise
        code = normalize_returncode(rc)
        return CommandResult(
            code, error=None if code == 0 else f"rc={rc}"
        )
