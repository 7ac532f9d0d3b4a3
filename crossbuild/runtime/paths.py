# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Run directory layout and path helpers."""

from __future__ import annotations

import glob

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Sequence


@dataclass(frozen=True)
class RunDirectories:
    """Standardized directory layout for RunSession artifacts."""

    run_dir: Path
    logs: Path


def make_run_dirs(
    base: Path,
    run_id: str,
    *,
    exist_ok: bool = False,
) -> RunDirectories:
    run_dir = base / run_id
    logs = run_dir / "logs"
    run_dir.mkdir(parents=True, exist_ok=exist_ok)
    logs.mkdir(parents=True, exist_ok=True)
    return RunDirectories(run_dir=run_dir, logs=logs)


def has_magic(text: str) -> bool:
    return glob.has_magic(text)


def _glob(cwd: Path, pattern: str) -> List[Path]:
    """Sorted matches of ``pattern``; wildcards skip dotfiles like a shell."""

    hidden_ok = Path(pattern).name.startswith(".")
    return sorted(
        path
        for path in cwd.glob(pattern)
        if hidden_ok or not path.name.startswith(".")
    )


def match_patterns(cwd: Path, patterns: Iterable[str]) -> List[Path]:
    """Sorted paths under ``cwd`` matching any pattern (no duplicates)."""

    seen: dict[Path, None] = {}
    for pattern in patterns:
        for match in _glob(cwd, pattern):
            seen.setdefault(match, None)
    return list(seen)


def expand_arguments(cwd: Path, argv: Sequence[str]) -> List[str]:
    """Expand wildcard arguments relative to ``cwd`` like a shell would.

    Matches are made relative to ``cwd`` and sorted. A pattern without
    matches is kept literally so the tool reports the missing input.
    """

    expanded: List[str] = []
    for index, arg in enumerate(argv):
        if index == 0 or not has_magic(arg):
            expanded.append(arg)
            continue
        matches = [
            str(path.relative_to(cwd))
            for path in _glob(cwd, arg)
        ]
        expanded.extend(matches or [arg])
    return expanded
