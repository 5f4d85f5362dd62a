"""Tests for the command-line entry point."""

from pathlib import Path
from typing import List

import pytest

from srs_media import main as cli
from tests.test_pipeline import RecordingStep


class BrokenCleanup:
    def run(self, ctx) -> None:
        raise FileNotFoundError("robocopy")


@pytest.fixture
def steps(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> List[str]:
    log: List[str] = []
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        cli,
        "build_steps",
        lambda: [RecordingStep("10_a", log), RecordingStep("20_b", log), RecordingStep("30_c", log)],
    )
    return log


def test_start_at_and_stop_after_from_command_line(steps: List[str], tmp_path: Path) -> None:
    rc = cli.main(["--log", str(tmp_path / "run.log"), "--start-at", "20_b", "--stop-after", "20_b"])

    assert rc == 0
    assert steps == ["20_b@20_b"]


def test_unknown_step_id_exits_nonzero(steps: List[str], tmp_path: Path) -> None:
    rc = cli.main(["--log", str(tmp_path / "run.log"), "--start-at", "99_nope"])

    assert rc == 1
    assert steps == []


def test_step_failure_exits_nonzero(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "build_steps", lambda: [RecordingStep("10_a", [], fail=True)])

    assert cli.main(["--log", str(tmp_path / "run.log")]) == 1


def test_cleanup_failure_does_not_mask_step_failure(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "build_steps", lambda: [RecordingStep("10_a", [], fail=True)])
    monkeypatch.setattr(cli, "CleanupStep", BrokenCleanup)

    with pytest.raises(RuntimeError, match="boom"):
        cli.run(cli.MediaConfig(raw={}), log_path=str(tmp_path / "run.log"))

    assert "Cleanup after the failed run also failed" in caplog.text
