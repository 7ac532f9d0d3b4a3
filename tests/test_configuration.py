from __future__ import annotations

from pathlib import Path

import pytest

from crossbuild.configuration import (
    build_settings,
    default_settings,
    load_config,
)
from crossbuild.exceptions import ConfigurationError

ROOT = Path(__file__).resolve().parents[1]


def test_defaults_match_repository_layout(tmp_path: Path) -> None:
    settings = default_settings(tmp_path)
    assert settings.root == tmp_path.resolve()
    assert settings.layout.java_lib == (tmp_path / "examples/java-lib").resolve()
    assert settings.layout.generator == (tmp_path / "generator").resolve()
    assert settings.layout.java_package == "rustjni/test"
    assert settings.tools.cargo == "cargo"
    assert settings.ci.features == ("libjvm",)
    assert settings.environment.channel_var == "TRAVIS_RUST_VERSION"
    assert settings.environment.library_path_var is None
    assert settings.environment.java_library_subdir == "jre/lib/server"
    assert settings.runner.timeout_s is None
    assert settings.runtime.enabled is False


def test_build_settings_resolves_paths(tmp_path: Path) -> None:
    config = {
        "crossbuild": {
            "layout": {
                "java_lib": "bindings/java",
                "generator": "/abs/gen",
                "java_package": "org/example/",
            },
            "runner": {"timeout_s": 90},
            "runtime": {"enabled": True, "run_root": "out/runs"},
        }
    }
    settings = build_settings(config, config_root=tmp_path)
    assert settings.layout.java_lib == (tmp_path / "bindings/java").resolve()
    assert settings.layout.generator == Path("/abs/gen")
    assert settings.layout.java_package == "org/example"
    assert settings.runner.timeout_s == 90.0
    assert settings.runtime.run_root == (tmp_path / "out/runs").resolve()


@pytest.mark.parametrize(
    "config",
    [
        {"crossbuild": ["not", "a", "mapping"]},
        {"crossbuild": {"tools": "cargo"}},
        {"crossbuild": {"runner": {"timeout_s": "soon"}}},
        {"crossbuild": {"runner": {"timeout_s": 0}}},
    ],
)
def test_build_settings_rejects_bad_values(tmp_path: Path, config) -> None:
    with pytest.raises(ConfigurationError):
        build_settings(config, config_root=tmp_path)


def test_load_config_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "missing.yaml")
    bad = tmp_path / "bad.yaml"
    bad.write_text("crossbuild: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_config(bad)
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n")
    with pytest.raises(ConfigurationError):
        load_config(listing)
    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config(empty) == {}


def test_shipped_default_config_matches_defaults(tmp_path: Path) -> None:
    shipped = load_config(ROOT / "configs" / "default_config.yaml")
    assert build_settings(shipped, config_root=tmp_path) == default_settings(
        tmp_path
    )
