"""Runner that records invocations instead of executing them."""

from __future__ import annotations

import logging
import shlex

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .base import CommandResult, CommandRunner

LOGGER = logging.getLogger(__name__)


@dataclass
class RecordedCall:
    argv: List[str]
    cwd: Path
    env: Optional[Dict[str, str]] = None

    @property
    def program(self) -> str:
        return self.argv[0] if self.argv else ""


@dataclass
class RecordingRunner(CommandRunner):
    """Returns scripted exit codes; used for dry runs and in tests.

    ``exit_codes`` maps either a full command line or a program name to
    the code to report. Unmatched commands succeed.
    """

    exit_codes: Dict[str, int] = field(default_factory=dict)
    calls: List[RecordedCall] = field(default_factory=list)
    announce: bool = False

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        call = RecordedCall(
            argv=list(argv),
            cwd=Path(cwd),
            env=dict(env) if env is not None else None,
        )
        self.calls.append(call)
        line = shlex.join(call.argv)
        if self.announce:
            LOGGER.info("[dry-run] (cd %s && %s)", cwd, line)
        code = self.exit_codes.get(line, self.exit_codes.get(call.program, 0))
        return CommandResult(code, error=None if code == 0 else f"rc={code}")

    def commands(self) -> List[List[str]]:
        return [call.argv for call in self.calls]
