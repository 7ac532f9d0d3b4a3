"""Core dataclasses shared by the planner, pipeline and runners."""

from __future__ import annotations

import enum
import re
import shlex

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from crossbuild.constants import STAGE_KIND_CLEAN, STAGE_KIND_COMMAND
from crossbuild.environment import EnvironmentOverlay
from crossbuild.exceptions import UnknownChannelError

_RELEASE_RE = re.compile(r"^\d+\.\d+(\.\d+)?$")


class ToolchainChannel(str, enum.Enum):
    """Release track of the Rust toolchain running the suite."""

    STABLE = "stable"
    BETA = "beta"
    NIGHTLY = "nightly"

    @classmethod
    def parse(cls, value: Optional[str]) -> "ToolchainChannel":
        """Map a channel name to a member; unknown names are rejected.

        Unset and empty values, and plain release numbers such as
        ``1.75.0``, select the stable channel. Names are compared as-is,
        so padded values such as ``" nightly"`` are rejected.
        """

        text = value or ""
        if not text:
            return cls.STABLE
        for member in cls:
            if member.value == text:
                return member
        if _RELEASE_RE.match(text):
            return cls.STABLE
        known = ", ".join(member.value for member in cls)
        raise UnknownChannelError(
            f"unknown toolchain channel '{text}' (expected one of: {known})"
        )

    @property
    def is_unstable(self) -> bool:
        return self is ToolchainChannel.NIGHTLY


@dataclass(frozen=True)
class RunContext:
    """Arguments forwarded unmodified to the terminal test stage."""

    args: Tuple[str, ...] = ()

    @classmethod
    def from_argv(cls, argv: Optional[Sequence[str]]) -> "RunContext":
        return cls(tuple(argv or ()))


@dataclass(frozen=True)
class Stage:
    """One ordered, blocking step of the sequence."""

    name: str
    cwd: Path
    command: Tuple[str, ...] = ()
    kind: str = STAGE_KIND_COMMAND
    patterns: Tuple[str, ...] = ()
    env: Optional[EnvironmentOverlay] = None
    fatal: bool = True
    tolerate_absence: bool = True
    expand_globs: bool = False

    def __post_init__(self) -> None:
        if self.kind not in {STAGE_KIND_COMMAND, STAGE_KIND_CLEAN}:
            raise ValueError(f"unknown stage kind: {self.kind}")
        if self.kind == STAGE_KIND_COMMAND and not self.command:
            raise ValueError(f"stage '{self.name}' has no command")
        if self.kind == STAGE_KIND_CLEAN and not self.patterns:
            raise ValueError(f"stage '{self.name}' has no clean patterns")

    @classmethod
    def invoke(
        cls,
        name: str,
        cwd: Path,
        *command: str,
        env: Optional[EnvironmentOverlay] = None,
        fatal: bool = True,
        expand_globs: bool = False,
    ) -> "Stage":
        return cls(
            name=name,
            cwd=Path(cwd),
            command=tuple(command),
            env=env,
            fatal=fatal,
            expand_globs=expand_globs,
        )

    @classmethod
    def clean(
        cls,
        name: str,
        cwd: Path,
        *patterns: str,
        tolerate_absence: bool = True,
    ) -> "Stage":
        return cls(
            name=name,
            cwd=Path(cwd),
            kind=STAGE_KIND_CLEAN,
            patterns=tuple(patterns),
            tolerate_absence=tolerate_absence,
        )

    @property
    def is_clean(self) -> bool:
        return self.kind == STAGE_KIND_CLEAN

    def describe(self) -> str:
        if self.is_clean:
            return "remove " + " ".join(self.patterns)
        return shlex.join(self.command)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "cwd": str(self.cwd),
            "command": list(self.command),
            "patterns": list(self.patterns),
            "env": self.env.to_dict() if self.env else {},
            "fatal": self.fatal,
        }


@dataclass
class StageResult:
    stage: str
    exit_code: int
    elapsed_s: float = 0.0
    removed: List[Path] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "exit_code": self.exit_code,
            "elapsed_s": round(self.elapsed_s, 3),
            "removed": [str(path) for path in self.removed],
            "error": self.error,
        }


@dataclass
class PipelineResult:
    results: List[StageResult] = field(default_factory=list)
    aborted_at: Optional[str] = None

    @property
    def exit_code(self) -> int:
        """Code of the aborting stage, otherwise of the last stage run."""

        if self.aborted_at is not None:
            for result in self.results:
                if result.stage == self.aborted_at:
                    return result.exit_code
        if not self.results:
            return 0
        return self.results[-1].exit_code

    @property
    def stage_names(self) -> List[str]:
        return [result.stage for result in self.results]

    def extend(self, other: "PipelineResult") -> "PipelineResult":
        self.results.extend(other.results)
        if other.aborted_at is not None:
            self.aborted_at = other.aborted_at
        return self
