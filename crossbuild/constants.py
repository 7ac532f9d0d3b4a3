"""Shared constants (default layout, environment variable names)."""

DEFAULT_CONFIG_PATH = "crossbuild.yaml"
DEFAULT_RUN_ROOT = ".crossbuild_runs"

STAGE_KIND_COMMAND = "command"
STAGE_KIND_CLEAN = "clean"

JAVA_HOME_VAR = "JAVA_HOME"
HOME_VAR = "HOME"
CHANNEL_VAR = "TRAVIS_RUST_VERSION"
JAVA_LIBRARY_SUBDIR = "jre/lib/server"

CONFIG_ENV_VAR = "CROSSBUILD_CONFIG"
ROOT_ENV_VAR = "CROSSBUILD_ROOT"
DRY_RUN_ENV_VAR = "CROSSBUILD_DRY_RUN"
LOG_LEVEL_ENV_VAR = "CROSSBUILD_LOG_LEVEL"

# Exit codes that mirror what a POSIX shell reports.
EXIT_GENERIC_FAILURE = 1
EXIT_USAGE = 2
EXIT_TIMEOUT = 124
EXIT_COMMAND_NOT_FOUND = 127
EXIT_SIGNAL_BASE = 128
