"""CLI entrypoints: ``crossbuild-test`` and ``crossbuild-ci``."""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import sys

from pathlib import Path
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

from crossbuild.configuration import Settings, build_settings, load_config
from crossbuild.constants import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    DRY_RUN_ENV_VAR,
    EXIT_USAGE,
    LOG_LEVEL_ENV_VAR,
    ROOT_ENV_VAR,
)
from crossbuild.exceptions import ConfigurationError
from crossbuild.logging import DEFAULT_FORMAT, resolve_level
from crossbuild.orchestrator import Orchestrator

_TRUTHY = {"1", "true", "yes", "on"}


def _build_ci_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog="crossbuild-ci",
        description=(
            "Run the crate tests with the JVM feature enabled and, on the "
            "nightly toolchain, the java-lib and generator suites."
        ),
    )


def _configure_logging(env: Mapping[str, str]) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=resolve_level(env.get(LOG_LEVEL_ENV_VAR)),
            format=DEFAULT_FORMAT,
        )


def _resolve_root(env: Mapping[str, str]) -> Path:
    return Path(env.get(ROOT_ENV_VAR) or Path.cwd()).expanduser().resolve()


def _load_settings(env: Mapping[str, str]) -> Settings:
    root = _resolve_root(env)
    explicit = env.get(CONFIG_ENV_VAR)
    if explicit:
        config_path = Path(explicit).expanduser()
        if not config_path.is_absolute():
            config_path = root / config_path
        config = load_config(config_path)
    else:
        config_path = root / DEFAULT_CONFIG_PATH
        config = load_config(config_path) if config_path.exists() else {}
    return build_settings(config, config_root=root)


def _is_dry_run(env: Mapping[str, str]) -> bool:
    return str(env.get(DRY_RUN_ENV_VAR, "")).strip().lower() in _TRUTHY


def _build_orchestrator(env: Mapping[str, str]) -> Orchestrator:
    settings = _load_settings(env)
    return Orchestrator(
        settings,
        env=env,
        dry_run=_is_dry_run(env),
    )


def _bootstrap(prog: str, args: Sequence[str]) -> Mapping[str, str]:
    try:
        load_dotenv()
    except OSError as exc:  # pragma: no cover
        print(f"Could not read .env: {exc}", file=sys.stderr)
    env = os.environ
    _configure_logging(env)
    print(f"Running {shlex.join([prog, *args])}...", flush=True)
    return env


def java_lib_main(argv: Optional[Sequence[str]] = None) -> int:
    """Compile, build and run ``cargo test`` with ``argv`` forwarded as-is."""

    args = list(sys.argv[1:] if argv is None else argv)
    env = _bootstrap("crossbuild-test", args)
    try:
        orchestrator = _build_orchestrator(env)
        return orchestrator.run_java_lib(args)
    except ConfigurationError as exc:
        print(f"crossbuild-test: {exc}", file=sys.stderr)
        return EXIT_USAGE


def ci_main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_ci_parser()
    parser.parse_args(argv)
    env = _bootstrap("crossbuild-ci", [])
    try:
        orchestrator = _build_orchestrator(env)
        return orchestrator.run_ci()
    except ConfigurationError as exc:
        print(f"crossbuild-ci: {exc}", file=sys.stderr)
        return EXIT_USAGE


def run_tests() -> None:  # pragma: no cover
    raise SystemExit(java_lib_main())


def run_ci() -> None:  # pragma: no cover
    raise SystemExit(ci_main())


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(java_lib_main())
