from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urljoin, urlparse

import requests

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 10
DEFAULT_TIMEOUT_S = 60.0
CHUNK_SIZE = 1024 * 1024
PARTIAL_SUFFIX = ".downloading"


class DownloadError(RuntimeError):
    pass


def _session(session: Optional[requests.Session]) -> requests.Session:
    return session if session is not None else requests.Session()


def resolve_redirects(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> str:
    """Follow the redirect chain of ``url`` and return the final location.

    Each hop is a HEAD request with automatic redirects disabled, so every
    Location header is seen and counted. More than MAX_REDIRECTS hops, or a
    final status that is neither a redirect nor a success, raises
    DownloadError. There is no retry; the operator re-runs the tool.
    """

    s = _session(session)
    current = url
    hops = 0
    while True:
        try:
            resp = s.head(current, allow_redirects=False, timeout=timeout_s)
        except requests.RequestException as e:
            raise DownloadError(f"Unable to reach {current}: {e}") from e

        location = resp.headers.get("Location")
        if 300 <= resp.status_code < 400 and location:
            hops += 1
            if hops > MAX_REDIRECTS:
                raise DownloadError(f"Too many redirects (>{MAX_REDIRECTS}) resolving {url}")
            current = urljoin(current, location)
            logger.debug("Redirect %d: %s", hops, current)
            continue

        if not 200 <= resp.status_code < 300:
            raise DownloadError(f"HTTP {resp.status_code} resolving {current} (from {url})")

        return current


def filename_from_url(url: str) -> str:
    name = PurePosixPath(unquote(urlparse(url).path)).name
    if not name:
        raise DownloadError(f"Cannot derive a file name from {url}")
    return name


def partial_path(final: Path) -> Path:
    return final.with_name(final.name + PARTIAL_SUFFIX)


def fetch_asset(
    url: str,
    label: str,
    *,
    cache_dir: str | Path,
    output_name: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout_s: float = DEFAULT_TIMEOUT_S,
) -> Path:
    """Download ``url`` into ``cache_dir`` and return the local path.

    An existing file at the final path is a cache hit and no transfer
    happens. This treats the file name as the identity of the content, which
    holds because kit, driver and update URLs are version-pinned; do not point
    this at URLs whose content changes under a stable name.

    The body is streamed to a ``<name>.downloading`` sibling and renamed into
    place only after the stream completes, so an interrupted run never leaves
    a truncated file under the final name. A stale marker from an earlier
    interrupted run is discarded first.
    """

    s = _session(session)
    resolved = resolve_redirects(url, session=s, timeout_s=timeout_s)
    name = output_name or filename_from_url(resolved)

    cache = Path(cache_dir)
    cache.mkdir(parents=True, exist_ok=True)
    final = cache / name

    if final.exists():
        logger.info("%s already downloaded: %s", label, final)
        return final

    marker = partial_path(final)
    if marker.exists():
        logger.info("Discarding interrupted download %s", marker)
        marker.unlink()

    logger.info("Downloading %s from %s", label, resolved)
    try:
        with s.get(resolved, stream=True, timeout=timeout_s) as resp:
            if not 200 <= resp.status_code < 300:
                raise DownloadError(f"HTTP {resp.status_code} downloading {label} from {resolved}")
            with marker.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        raise DownloadError(f"Transfer of {label} from {resolved} failed: {e}") from e

    os.replace(marker, final)
    logger.info("Downloaded %s (%d bytes) -> %s", label, final.stat().st_size, final)
    return final
