"""Runner loop that executes an ordered list of stages, failing fast."""

from __future__ import annotations

import logging
import os
import time

from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from crossbuild.constants import EXIT_GENERIC_FAILURE
from crossbuild.exceptions import StageFailedError
from crossbuild.runtime.paths import expand_arguments, match_patterns
from crossbuild.runtime.runner.base import CommandRunner
from crossbuild.runtime.session import RunSession
from crossbuild.types import PipelineResult, Stage, StageResult

LOGGER = logging.getLogger(__name__)


class StagePipeline:
    """Executes stages strictly in order.

    A fatal stage that fails raises :class:`StageFailedError` carrying its
    exit code, and no later stage runs. Environment overlays are applied
    to a copy of ``base_env`` for the stage that declares them only.
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        base_env: Optional[Mapping[str, str]] = None,
        session: Optional[RunSession] = None,
        dry_run: bool = False,
    ) -> None:
        self.runner = runner
        self._base_env = base_env
        self.session = session
        self.dry_run = dry_run

    @property
    def base_env(self) -> Mapping[str, str]:
        if self._base_env is None:
            return os.environ
        return self._base_env

    def execute(self, stages: Iterable[Stage]) -> PipelineResult:
        plan: List[Stage] = list(stages)
        outcome = PipelineResult()
        self._event(
            "pipeline_started", {"stages": [stage.name for stage in plan]}
        )
        for stage in plan:
            result = self.run_stage(stage)
            outcome.results.append(result)
            if result.success:
                continue
            if not stage.fatal:
                LOGGER.warning(
                    "stage %s failed (exit %s); continuing",
                    stage.name,
                    result.exit_code,
                )
                continue
            outcome.aborted_at = stage.name
            LOGGER.error(
                "stage %s failed with exit code %s%s",
                stage.name,
                result.exit_code,
                f" ({result.error})" if result.error else "",
            )
            self._event(
                "pipeline_finished",
                {"exit_code": outcome.exit_code, "aborted_at": stage.name},
            )
            error = StageFailedError(
                stage.name, result.exit_code, result.error or ""
            )
            error.result = outcome
            raise error
        self._event(
            "pipeline_finished",
            {"exit_code": outcome.exit_code, "aborted_at": None},
        )
        return outcome

    def run_stage(self, stage: Stage) -> StageResult:
        LOGGER.info(
            "[%s] (cd %s && %s)", stage.name, stage.cwd, stage.describe()
        )
        self._event("stage_started", stage.to_dict())
        started = time.monotonic()
        if not stage.cwd.is_dir():
            result = StageResult(
                stage.name,
                EXIT_GENERIC_FAILURE,
                error=f"no such directory: {stage.cwd}",
            )
        elif stage.is_clean:
            result = self._clean(stage)
        else:
            result = self._invoke(stage)
        result.elapsed_s = time.monotonic() - started
        self._event("stage_finished", result.to_dict())
        return result

    def _invoke(self, stage: Stage) -> StageResult:
        argv = list(stage.command)
        if stage.expand_globs:
            argv = expand_arguments(stage.cwd, argv)
        env = None
        if stage.env:
            env = stage.env.apply(self.base_env)
        elif self._base_env is not None:
            env = dict(self._base_env)
        outcome = self.runner.run(argv, cwd=stage.cwd, env=env)
        return StageResult(stage.name, outcome.exit_code, error=outcome.error)

    def _clean(self, stage: Stage) -> StageResult:
        matches = match_patterns(stage.cwd, stage.patterns)
        if not matches and not stage.tolerate_absence:
            return StageResult(
                stage.name,
                EXIT_GENERIC_FAILURE,
                error="nothing matched " + " ".join(stage.patterns),
            )
        if self.dry_run:
            for path in matches:
                LOGGER.info("[dry-run] would remove %s", path)
            return StageResult(stage.name, 0)
        removed: List[Path] = []
        for path in matches:
            if path.is_dir() and not path.is_symlink():
                LOGGER.warning("not removing directory %s", path)
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                return StageResult(
                    stage.name,
                    EXIT_GENERIC_FAILURE,
                    removed=removed,
                    error=f"cannot remove {path}: {exc}",
                )
            removed.append(path)
        LOGGER.debug("[%s] removed %d file(s)", stage.name, len(removed))
        return StageResult(stage.name, 0, removed=removed)

    def _event(self, kind: str, data: dict) -> None:
        if self.session is not None:
            self.session.log_event(kind, data)


__all__ = ["StagePipeline"]
