"""Typed helpers for parsing crossbuild configuration dictionaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from crossbuild.constants import (
    CHANNEL_VAR,
    DEFAULT_RUN_ROOT,
    HOME_VAR,
    JAVA_HOME_VAR,
    JAVA_LIBRARY_SUBDIR,
)
from crossbuild.exceptions import ConfigurationError


def _ensure_path(value: Optional[str | Path], *, config_root: Path) -> Path:
    if value is None:
        raise ConfigurationError("Path value is required")
    path = Path(value)
    if not path.is_absolute():
        path = (config_root / path).resolve()
    return path


def _as_mapping(value: Any, section: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{section}' must be a mapping")
    return dict(value)


def _optional_float(value: Any, key: str) -> Optional[float]:
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"'{key}' must be a number") from exc
    if result <= 0:
        raise ConfigurationError(f"'{key}' must be positive")
    return result


@dataclass(frozen=True)
class LayoutSettings:
    java_lib: Path
    generator: Path
    java_dir: str = "java"
    java_package: str = "rustjni/test"
    dylib_dir: str = "dylib"


@dataclass(frozen=True)
class ToolSettings:
    javac: str = "javac"
    cargo: str = "cargo"


@dataclass(frozen=True)
class CISettings:
    features: Tuple[str, ...] = ("libjvm",)
    verbose: bool = True


@dataclass(frozen=True)
class EnvironmentSettings:
    java_home_var: str = JAVA_HOME_VAR
    home_var: str = HOME_VAR
    channel_var: str = CHANNEL_VAR
    library_path_var: Optional[str] = None
    java_library_subdir: str = JAVA_LIBRARY_SUBDIR


@dataclass(frozen=True)
class RunnerSettings:
    timeout_s: Optional[float] = None


@dataclass(frozen=True)
class RuntimeSettings:
    enabled: bool = False
    run_root: Path = field(
        default_factory=lambda: Path(DEFAULT_RUN_ROOT).resolve()
    )


@dataclass(frozen=True)
class Settings:
    root: Path
    layout: LayoutSettings
    tools: ToolSettings = field(default_factory=ToolSettings)
    ci: CISettings = field(default_factory=CISettings)
    environment: EnvironmentSettings = field(
        default_factory=EnvironmentSettings
    )
    runner: RunnerSettings = field(default_factory=RunnerSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)


def load_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise ConfigurationError(f"Config file '{config_path}' not found.")
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Config file '{config_path}' is not valid YAML: {exc}"
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file '{config_path}' must contain a mapping"
        )
    return data


def build_settings(
    config: Optional[Dict[str, Any]], *, config_root: Path
) -> Settings:
    """Parse the ``crossbuild`` section of a loaded config.

    Relative paths resolve against ``config_root``.
    """

    root = config_root.resolve()
    cfg = _as_mapping((config or {}).get("crossbuild"), "crossbuild")

    layout_cfg = _as_mapping(cfg.get("layout"), "crossbuild.layout")
    layout = LayoutSettings(
        java_lib=_ensure_path(
            layout_cfg.get("java_lib", "examples/java-lib"), config_root=root
        ),
        generator=_ensure_path(
            layout_cfg.get("generator", "generator"), config_root=root
        ),
        java_dir=str(layout_cfg.get("java_dir", "java")),
        java_package=str(
            layout_cfg.get("java_package", "rustjni/test")
        ).strip("/"),
        dylib_dir=str(layout_cfg.get("dylib_dir", "dylib")),
    )

    tools_cfg = _as_mapping(cfg.get("tools"), "crossbuild.tools")
    tools = ToolSettings(
        javac=str(tools_cfg.get("javac", "javac")),
        cargo=str(tools_cfg.get("cargo", "cargo")),
    )

    ci_cfg = _as_mapping(cfg.get("ci"), "crossbuild.ci")
    features = ci_cfg.get("features", ["libjvm"])
    if isinstance(features, str):
        features = [features]
    ci = CISettings(
        features=tuple(str(item) for item in features or ()),
        verbose=bool(ci_cfg.get("verbose", True)),
    )

    env_cfg = _as_mapping(cfg.get("environment"), "crossbuild.environment")
    library_path_var = env_cfg.get("library_path_var")
    environment = EnvironmentSettings(
        java_home_var=str(env_cfg.get("java_home_var", JAVA_HOME_VAR)),
        home_var=str(env_cfg.get("home_var", HOME_VAR)),
        channel_var=str(env_cfg.get("channel_var", CHANNEL_VAR)),
        library_path_var=str(library_path_var) if library_path_var else None,
        java_library_subdir=str(
            env_cfg.get("java_library_subdir", JAVA_LIBRARY_SUBDIR)
        ),
    )

    runner_cfg = _as_mapping(cfg.get("runner"), "crossbuild.runner")
    runner = RunnerSettings(
        timeout_s=_optional_float(
            runner_cfg.get("timeout_s"), "crossbuild.runner.timeout_s"
        )
    )

    runtime_cfg = _as_mapping(cfg.get("runtime"), "crossbuild.runtime")
    runtime = RuntimeSettings(
        enabled=bool(runtime_cfg.get("enabled", False)),
        run_root=_ensure_path(
            runtime_cfg.get("run_root", DEFAULT_RUN_ROOT), config_root=root
        ),
    )

    return Settings(
        root=root,
        layout=layout,
        tools=tools,
        ci=ci,
        environment=environment,
        runner=runner,
        runtime=runtime,
    )


def default_settings(root: Path) -> Settings:
    return build_settings({}, config_root=root)


__all__ = [
    "CISettings",
    "EnvironmentSettings",
    "LayoutSettings",
    "RunnerSettings",
    "RuntimeSettings",
    "Settings",
    "ToolSettings",
    "build_settings",
    "default_settings",
    "load_config",
]
