"""Command runner interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence


@dataclass
class CommandResult:
    exit_code: int
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """Run ``argv`` in ``cwd`` to completion and report its exit code."""
        ...
