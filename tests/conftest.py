"""Expose the project root on sys.path and build fixture source trees."""

from __future__ import annotations

import sys

from pathlib import Path
from typing import Dict

import pytest

from crossbuild.configuration import Settings, build_settings
from crossbuild.environment import library_path_variable

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture()
def repo_root(tmp_path: Path) -> Path:
    """A repository checkout with the java-lib and generator projects."""

    root = tmp_path / "rust-jni"
    package = root / "examples" / "java-lib" / "java" / "rustjni" / "test"
    package.mkdir(parents=True)
    (package / "Greeter.java").write_text("class Greeter {}\n")
    (package / "Adder.java").write_text("class Adder {}\n")
    (root / "examples" / "java-lib" / "dylib").mkdir()
    (root / "generator").mkdir()
    return root


@pytest.fixture()
def settings(repo_root: Path) -> Settings:
    return build_settings({}, config_root=repo_root)


@pytest.fixture()
def base_env(tmp_path: Path) -> Dict[str, str]:
    """Environment with a JDK location and no prior library path."""

    return {
        "HOME": str(tmp_path / "home"),
        "JAVA_HOME": "/opt/jdk8",
        "PATH": "/usr/bin",
    }


@pytest.fixture()
def library_var() -> str:
    return library_path_variable()
