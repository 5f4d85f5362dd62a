"""Tests for redirect resolution and cached, atomic downloads."""

from pathlib import Path

import pytest
import requests

from srs_media.lib.download import (
    MAX_REDIRECTS,
    DownloadError,
    fetch_asset,
    filename_from_url,
    partial_path,
    resolve_redirects,
)
from tests.fakes import FakeResponse, FakeSession


def _chain(session: FakeSession, length: int) -> str:
    """Build a redirect chain of ``length`` hops ending at a served file."""
    urls = [f"https://dl.example.com/hop{i}" for i in range(length)]
    final = "https://cdn.example.com/kits/kit-1.2.msi"
    for src, dst in zip(urls, urls[1:] + [final]):
        session.redirect(src, dst)
    session.serve(final, [b"kit"])
    return urls[0] if urls else final


def test_resolve_returns_url_without_redirects(session: FakeSession) -> None:
    session.serve("https://cdn.example.com/a.msi", [b"x"])

    assert resolve_redirects("https://cdn.example.com/a.msi", session=session) == "https://cdn.example.com/a.msi"


def test_resolve_follows_chain_up_to_limit(session: FakeSession) -> None:
    start = _chain(session, MAX_REDIRECTS)

    assert resolve_redirects(start, session=session) == "https://cdn.example.com/kits/kit-1.2.msi"


def test_resolve_fails_past_limit_naming_origin(session: FakeSession) -> None:
    start = _chain(session, MAX_REDIRECTS + 1)

    with pytest.raises(DownloadError) as exc:
        resolve_redirects(start, session=session)

    assert start in str(exc.value)


def test_resolve_reports_terminal_status(session: FakeSession) -> None:
    session.redirect("https://dl.example.com/kit", "https://cdn.example.com/gone.msi")
    session.heads["https://cdn.example.com/gone.msi"] = FakeResponse(403)

    with pytest.raises(DownloadError, match="HTTP 403"):
        resolve_redirects("https://dl.example.com/kit", session=session)


def test_resolve_handles_relative_location(session: FakeSession) -> None:
    session.redirect("https://dl.example.com/latest", "/files/v2/pack.msi")
    session.serve("https://dl.example.com/files/v2/pack.msi", [b"x"])

    assert resolve_redirects("https://dl.example.com/latest", session=session) == (
        "https://dl.example.com/files/v2/pack.msi"
    )


def test_resolve_wraps_connection_errors() -> None:
    class Unreachable:
        def head(self, url, allow_redirects=True, timeout=0):
            raise requests.ConnectionError("no route to host")

    with pytest.raises(DownloadError, match="Unable to reach"):
        resolve_redirects("https://dl.example.com/kit", session=Unreachable())


def test_filename_from_url_unquotes_and_ignores_query() -> None:
    assert filename_from_url("https://cdn.example.com/a/My%20Pack.msi?sig=abc") == "My Pack.msi"


def test_filename_from_url_rejects_bare_host() -> None:
    with pytest.raises(DownloadError):
        filename_from_url("https://cdn.example.com/")


def test_fetch_downloads_under_resolved_name(tmp_path: Path, session: FakeSession) -> None:
    start = _chain(session, 2)
    session.serve("https://cdn.example.com/kits/kit-1.2.msi", [b"ab", b"cd"])

    path = fetch_asset(start, "kit", cache_dir=tmp_path, session=session)

    assert path == tmp_path / "kit-1.2.msi"
    assert path.read_bytes() == b"abcd"
    assert not partial_path(path).exists()


def test_fetch_honours_explicit_output_name(tmp_path: Path, session: FakeSession) -> None:
    session.serve("https://cdn.example.com/download", [b"data"])

    path = fetch_asset(
        "https://cdn.example.com/download", "driver", cache_dir=tmp_path, output_name="oem.msi", session=session
    )

    assert path.name == "oem.msi"


def test_second_fetch_is_cache_hit(tmp_path: Path, session: FakeSession) -> None:
    session.serve("https://cdn.example.com/u/kb1.msu", [b"update"])

    first = fetch_asset("https://cdn.example.com/u/kb1.msu", "update", cache_dir=tmp_path, session=session)
    second = fetch_asset("https://cdn.example.com/u/kb1.msu", "update", cache_dir=tmp_path, session=session)

    assert first == second
    assert session.gets == ["https://cdn.example.com/u/kb1.msu"]


def test_interrupted_transfer_leaves_no_final_file_and_retries_cleanly(
    tmp_path: Path, session: FakeSession
) -> None:
    url = "https://cdn.example.com/big.wim"

    def broken():
        yield b"first half"
        raise requests.ConnectionError("reset by peer")

    session.serve(url, broken(), [b"first half", b" second half"])

    with pytest.raises(DownloadError):
        fetch_asset(url, "image", cache_dir=tmp_path, session=session)

    final = tmp_path / "big.wim"
    assert not final.exists()
    assert partial_path(final).exists()

    path = fetch_asset(url, "image", cache_dir=tmp_path, session=session)

    assert path.read_bytes() == b"first half second half"
    assert not partial_path(final).exists()


def test_stale_marker_is_discarded(tmp_path: Path, session: FakeSession) -> None:
    session.serve("https://cdn.example.com/pack.msi", [b"fresh"])
    (tmp_path / "pack.msi.downloading").write_bytes(b"stale partial bytes")

    path = fetch_asset("https://cdn.example.com/pack.msi", "pack", cache_dir=tmp_path, session=session)

    assert path.read_bytes() == b"fresh"


def test_fetch_failure_status_leaves_nothing_behind(tmp_path: Path, session: FakeSession) -> None:
    session.heads["https://cdn.example.com/pack.msi"] = FakeResponse(200)

    with pytest.raises(DownloadError, match="HTTP 404"):
        fetch_asset("https://cdn.example.com/pack.msi", "pack", cache_dir=tmp_path, session=session)

    assert not (tmp_path / "pack.msi").exists()
