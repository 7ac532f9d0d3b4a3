from __future__ import annotations

from pathlib import Path

import pytest

from crossbuild.exceptions import UnknownChannelError
from crossbuild.types import (
    PipelineResult,
    RunContext,
    Stage,
    StageResult,
    ToolchainChannel,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ToolchainChannel.STABLE),
        ("", ToolchainChannel.STABLE),
        ("stable", ToolchainChannel.STABLE),
        ("beta", ToolchainChannel.BETA),
        ("nightly", ToolchainChannel.NIGHTLY),
        ("1.75.0", ToolchainChannel.STABLE),
        ("1.75", ToolchainChannel.STABLE),
    ],
)
def test_channel_parse(value, expected):
    assert ToolchainChannel.parse(value) is expected


@pytest.mark.parametrize(
    "value",
    [
        "nightyl",
        "Nightly",
        "nightly-2024-01-01",
        " nightly\n",
        "nightly ",
        "  ",
    ],
)
def test_channel_parse_rejects_unknown_names(value):
    with pytest.raises(UnknownChannelError):
        ToolchainChannel.parse(value)


def test_only_nightly_is_unstable():
    assert ToolchainChannel.NIGHTLY.is_unstable
    assert not ToolchainChannel.BETA.is_unstable
    assert not ToolchainChannel.STABLE.is_unstable


def test_run_context_preserves_order():
    ctx = RunContext.from_argv(["b", "--a", "c"])
    assert ctx.args == ("b", "--a", "c")
    assert RunContext.from_argv(None).args == ()


def test_stage_validation(tmp_path: Path):
    with pytest.raises(ValueError):
        Stage(name="empty", cwd=tmp_path)
    with pytest.raises(ValueError):
        Stage(name="clean", cwd=tmp_path, kind="clean")
    with pytest.raises(ValueError):
        Stage(name="odd", cwd=tmp_path, command=("x",), kind="shell")


def test_stage_describe(tmp_path: Path):
    run = Stage.invoke("build", tmp_path, "cargo", "build", "--features", "a b")
    assert run.describe() == "cargo build --features 'a b'"
    clean = Stage.clean("clean", tmp_path, "out/*.class")
    assert clean.is_clean
    assert clean.describe() == "remove out/*.class"
    assert clean.to_dict()["patterns"] == ["out/*.class"]


def test_pipeline_result_exit_code():
    result = PipelineResult()
    assert result.exit_code == 0
    result.results.append(StageResult("a", 0))
    result.results.append(StageResult("b", 5))
    assert result.exit_code == 5
    aborted = PipelineResult(
        results=[StageResult("a", 7), StageResult("b", 0)], aborted_at="a"
    )
    assert aborted.exit_code == 7
