from __future__ import annotations

import logging
from pathlib import Path

from ..context import MediaCtx
from ..lib.image import extract_msi

logger = logging.getLogger(__name__)

QUIET = ["/njh", "/njs", "/ndl", "/nfl"]


class CopyMediaStep:
    step_id = "70_copy_media"

    def run(self, ctx: MediaCtx) -> None:
        iso_root = ctx.require("iso_root")
        media_root = Path(ctx.require("media_root"))
        kit_dir: Path = ctx.require("kit_dir")
        sync = ctx.tree_sync

        # The install image is serviced and written separately.
        sync.sync(iso_root, media_root, [*QUIET, "/xf", "install.wim", "/xd", "System Volume Information"])

        kit_media = kit_dir / ctx.cfg.kit_media_dir
        if kit_media.is_dir():
            sync.sync_all_subdirectories(kit_media, media_root, QUIET)
        else:
            logger.warning("Kit has no %s directory; nothing to merge", ctx.cfg.kit_media_dir)

        for artifact in ctx.artifacts:
            staging = ctx.staging_dir / artifact.stem
            if staging.exists():
                sync.remove_tree(staging)
            if artifact.suffix.lower() == ".msi":
                extract_msi(artifact, staging, dry_run=ctx.dry_run)
                merged = sync.sync_all_subdirectories(staging, media_root, QUIET) if staging.is_dir() else []
                logger.info("Merged %s onto media: %s", artifact.name, ", ".join(merged) or "<nothing>")
            else:
                logger.warning("Not merging %s: only .msi packages are understood", artifact.name)
