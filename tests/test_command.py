"""Tests for the external command runner."""

import sys

import pytest

from srs_media.lib.command import run_cmd


def test_dry_run_does_not_execute() -> None:
    r = run_cmd(["definitely-not-a-real-tool", "--wipe"], dry_run=True)

    assert r.returncode == 0
    assert r.argv == ["definitely-not-a-real-tool", "--wipe"]


def test_captures_output() -> None:
    r = run_cmd([sys.executable, "-c", "print('hello')"])

    assert r.stdout.strip() == "hello"


def test_check_raises_with_exit_code() -> None:
    with pytest.raises(RuntimeError, match=r"\(3\)"):
        run_cmd([sys.executable, "-c", "raise SystemExit(3)"])


def test_check_false_returns_code() -> None:
    assert run_cmd([sys.executable, "-c", "raise SystemExit(3)"], check=False).returncode == 3


def test_undecodable_output_is_replaced() -> None:
    r = run_cmd([sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'ok\\xff')"], encoding="utf-8")

    assert r.stdout == "ok\ufffd"
