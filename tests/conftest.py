"""Fixtures for media-creation tests."""

from pathlib import Path

import pytest

from tests.fakes import ANSWER_FILE, FakeSession, MirrorRunner


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def mirror() -> MirrorRunner:
    return MirrorRunner()


@pytest.fixture
def answer_file(tmp_path: Path) -> Path:
    p = tmp_path / "AutoUnattend.xml"
    p.write_text(ANSWER_FILE, encoding="utf-8")
    return p
