"""Environment overlays for stages that need dynamic-linker configuration."""

from __future__ import annotations

import logging
import os
import sys

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from crossbuild.constants import HOME_VAR, JAVA_LIBRARY_SUBDIR
from crossbuild.exceptions import MissingEnvironmentError

LOGGER = logging.getLogger(__name__)

_LIBRARY_PATH_VARS = {
    "darwin": "DYLD_FALLBACK_LIBRARY_PATH",
    "win32": "PATH",
    "cygwin": "PATH",
}


def library_path_variable(platform: Optional[str] = None) -> str:
    """Return the dynamic-linker search-path variable for ``platform``."""

    platform = platform or sys.platform
    return _LIBRARY_PATH_VARS.get(platform, "LD_LIBRARY_PATH")


def require_env(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "")
    if not value:
        raise MissingEnvironmentError(
            f"environment variable {name} must be set"
        )
    return value


def java_runtime_library_dir(
    java_home: str | Path, subdir: str = JAVA_LIBRARY_SUBDIR
) -> Path:
    """Directory holding the JVM shared library below ``java_home``."""

    if not str(java_home):
        raise MissingEnvironmentError("Java installation path is empty")
    return Path(java_home) / subdir


def append_to_path_list(
    existing: Optional[str], derived: str, *, sep: str = os.pathsep
) -> str:
    """Append ``derived`` to a path list, keeping any prior entries first."""

    if not existing:
        return derived
    return f"{existing}{sep}{derived}"


@dataclass(frozen=True)
class EnvironmentOverlay:
    """Immutable mapping merged onto an inherited environment."""

    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "values", MappingProxyType(dict(self.values))
        )

    def __bool__(self) -> bool:
        return bool(self.values)

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def apply(self, base: Mapping[str, str]) -> Dict[str, str]:
        """Return a new environment; ``base`` is left untouched."""

        merged = dict(base)
        merged.update(self.values)
        return merged

    def to_dict(self) -> Dict[str, str]:
        return dict(self.values)


def library_path_overlay(
    base_env: Mapping[str, str],
    derived: str | Path,
    variable: Optional[str] = None,
) -> EnvironmentOverlay:
    """Overlay that appends ``derived`` to the library search path."""

    variable = variable or library_path_variable()
    value = append_to_path_list(base_env.get(variable), str(derived))
    return EnvironmentOverlay({variable: value})


def java_library_overlay(
    base_env: Mapping[str, str],
    *,
    java_home_var: str,
    library_path_var: Optional[str] = None,
    java_library_subdir: str = JAVA_LIBRARY_SUBDIR,
    home_var: str = HOME_VAR,
) -> EnvironmentOverlay:
    """Build the overlay that lets test binaries locate the JVM library.

    The home directory is only reported; the appended directory comes
    from the Java installation alone.
    """

    java_home = require_env(base_env, java_home_var)
    LOGGER.debug(
        "%s=%s is not part of the library path",
        home_var,
        base_env.get(home_var, ""),
    )
    derived = java_runtime_library_dir(java_home, java_library_subdir)
    return library_path_overlay(base_env, derived, library_path_var)


__all__ = [
    "EnvironmentOverlay",
    "append_to_path_list",
    "java_library_overlay",
    "java_runtime_library_dir",
    "library_path_overlay",
    "library_path_variable",
    "require_env",
]
