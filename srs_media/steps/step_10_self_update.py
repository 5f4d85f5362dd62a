from __future__ import annotations

import logging

import requests

from .. import __version__
from ..context import MediaCtx

logger = logging.getLogger(__name__)


def _version_tuple(v: str) -> tuple[int, ...]:
    parts = []
    for piece in str(v).strip().lstrip("v").split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits or 0))
    return tuple(parts)


def is_newer(candidate: str, current: str) -> bool:
    return _version_tuple(candidate) > _version_tuple(current)


class SelfUpdateCheckStep:
    step_id = "10_self_update"

    def run(self, ctx: MediaCtx) -> None:
        url = ctx.cfg.self_update_url
        if not url:
            logger.info("No self-update URL configured; skipping version check")
            return

        try:
            resp = ctx.session.get(url, timeout=ctx.cfg.timeout_s)
            resp.raise_for_status()
            info = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Could not check for a newer version at %s: %s", url, e)
            return

        if not isinstance(info, dict):
            logger.warning("Ignoring malformed version document from %s", url)
            return

        latest = str(info.get("version") or "")
        if latest and is_newer(latest, __version__):
            logger.warning(
                "A newer version (%s) is available, running %s. Download it from %s",
                latest,
                __version__,
                info.get("url") or url,
            )
        else:
            logger.info("Running the latest version (%s)", __version__)
