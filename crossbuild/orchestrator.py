"""Build-then-test orchestrator for the JNI binding suite."""

from __future__ import annotations

import logging
import os

from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from crossbuild.configuration import Settings
from crossbuild.environment import EnvironmentOverlay, java_library_overlay
from crossbuild.exceptions import StageFailedError
from crossbuild.logging import detach_file_logger, setup_file_logger
from crossbuild.pipeline import StagePipeline
from crossbuild.runtime.runner import (
    CommandRunner,
    RecordingRunner,
    SubprocessRunner,
)
from crossbuild.runtime.session import RunSession
from crossbuild.types import (
    PipelineResult,
    RunContext,
    Stage,
    ToolchainChannel,
)

LOGGER = logging.getLogger(__name__)


class Orchestrator:
    """Plans the stage sequence and runs it through :class:`StagePipeline`.

    Two sequences exist. The java-lib sequence cleans and compiles the
    Java test classes, builds the native library, then runs ``cargo test``
    with the JVM library directory on the linker search path. The CI
    sequence runs the crate tests with the JVM feature enabled and, on the
    nightly channel only, the java-lib sequence and the generator tests.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        runner: Optional[CommandRunner] = None,
        env: Optional[Mapping[str, str]] = None,
        dry_run: bool = False,
    ) -> None:
        self.settings = settings
        self.dry_run = dry_run
        if runner is None:
            runner = (
                RecordingRunner(announce=True)
                if dry_run
                else SubprocessRunner(timeout_s=settings.runner.timeout_s)
            )
        self.runner = runner
        self.env: Mapping[str, str] = env if env is not None else os.environ
        self.last_result: Optional[PipelineResult] = None

    # planning -----------------------------------------------------------

    def channel(self) -> ToolchainChannel:
        return ToolchainChannel.parse(
            self.env.get(self.settings.environment.channel_var)
        )

    def library_overlay(self) -> EnvironmentOverlay:
        env_settings = self.settings.environment
        return java_library_overlay(
            self.env,
            java_home_var=env_settings.java_home_var,
            library_path_var=env_settings.library_path_var,
            java_library_subdir=env_settings.java_library_subdir,
            home_var=env_settings.home_var,
        )

    def java_lib_stages(
        self,
        project_dir: Optional[Path] = None,
        context: Optional[RunContext] = None,
        *,
        prefix: str = "",
    ) -> List[Stage]:
        layout = self.settings.layout
        tools = self.settings.tools
        project = Path(project_dir or layout.java_lib)
        context = context or RunContext()
        java_dir = project / layout.java_dir
        package = layout.java_package
        overlay = self.library_overlay()
        return [
            Stage.clean(
                f"{prefix}clean-java", java_dir, f"{package}/*.class"
            ),
            Stage.invoke(
                f"{prefix}compile-java",
                java_dir,
                tools.javac,
                f"{package}/*.java",
                expand_globs=True,
            ),
            Stage.invoke(
                f"{prefix}build-dylib",
                project / layout.dylib_dir,
                tools.cargo,
                "build",
            ),
            Stage.invoke(
                f"{prefix}test",
                project,
                tools.cargo,
                "test",
                *context.args,
                env=overlay,
            ),
        ]

    def ci_stages(self) -> List[Stage]:
        ci = self.settings.ci
        tools = self.settings.tools
        channel = self.channel()
        verbose = ["--verbose"] if ci.verbose else []
        features = []
        if ci.features:
            features = ["--features", ",".join(ci.features)]
        stages = [
            Stage.invoke(
                "test-libjvm",
                self.settings.root,
                tools.cargo,
                "test",
                *verbose,
                *features,
            )
        ]
        if not channel.is_unstable:
            LOGGER.info(
                "toolchain channel is %s; skipping nested suites",
                channel.value,
            )
            return stages
        stages.extend(
            self.java_lib_stages(
                self.settings.layout.java_lib, prefix="java-lib:"
            )
        )
        stages.append(
            Stage.invoke(
                "test-generator",
                self.settings.layout.generator,
                tools.cargo,
                "test",
                *verbose,
            )
        )
        return stages

    # execution ----------------------------------------------------------

    def run_java_lib(self, args: Sequence[str] = ()) -> int:
        stages = self.java_lib_stages(context=RunContext.from_argv(args))
        return self.execute(stages, label="java-lib")

    def run_ci(self) -> int:
        return self.execute(self.ci_stages(), label="ci")

    def execute(self, stages: Sequence[Stage], *, label: str) -> int:
        """Run ``stages`` and return the exit code of the sequence."""

        session = self._open_session(label)
        pipeline = StagePipeline(
            self.runner,
            base_env=self.env,
            session=session,
            dry_run=self.dry_run,
        )
        try:
            result = pipeline.execute(stages)
        except StageFailedError as exc:
            result = exc.result or PipelineResult()
            exit_code = exc.exit_code
        else:
            exit_code = result.exit_code
        finally:
            if session is not None:
                detach_file_logger(session.log_path)
        self.last_result = result
        if session is not None:
            session.write_summary(
                {
                    "label": label,
                    "exit_code": exit_code,
                    "aborted_at": result.aborted_at,
                    "stages": [item.to_dict() for item in result.results],
                }
            )
        return exit_code

    def _open_session(self, label: str) -> Optional[RunSession]:
        runtime = self.settings.runtime
        if not runtime.enabled:
            return None
        session = RunSession(
            runtime.run_root,
            metadata={"label": label, "root": str(self.settings.root)},
        )
        setup_file_logger(session.log_path)
        LOGGER.info("run records in %s", session.dirs.run_dir)
        return session


__all__ = ["Orchestrator"]
