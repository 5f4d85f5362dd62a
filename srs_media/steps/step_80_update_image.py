from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..context import MediaCtx
from ..lib import image

logger = logging.getLogger(__name__)


class UpdateImageStep:
    step_id = "80_update_image"

    def run(self, ctx: MediaCtx) -> None:
        iso_root = Path(ctx.require("iso_root"))
        media_sources = Path(ctx.require("media_root")) / "sources"
        dry_run = ctx.dry_run

        ctx.work_dir.mkdir(parents=True, exist_ok=True)
        wim = ctx.work_dir / "install.wim"
        if wim.exists():
            wim.unlink()
        image.export_image(iso_root / "sources" / "install.wim", ctx.cfg.image_index, wim, dry_run=dry_run)

        if ctx.packages:
            mount_dir = ctx.mount_dir
            if mount_dir.exists():
                ctx.tree_sync.remove_tree(mount_dir)
            image.mount_image(wim, mount_dir, dry_run=dry_run)
            committed = False
            try:
                for package in ctx.packages:
                    logger.info("Adding %s to the image", package.name)
                    image.add_package(mount_dir, package, dry_run=dry_run)
                committed = True
            finally:
                image.unmount_image(mount_dir, commit=committed, dry_run=dry_run)

        if dry_run:
            logger.info("Would place %s on %s", wim, media_sources)
            return

        media_sources.mkdir(parents=True, exist_ok=True)
        size_mib = wim.stat().st_size // (1024 * 1024)
        if size_mib >= ctx.cfg.split_threshold_mib:
            logger.info("Image is %d MiB; splitting for FAT32", size_mib)
            image.split_image(wim, media_sources / "install.swm", size_mib=ctx.cfg.split_threshold_mib)
        else:
            shutil.copyfile(wim, media_sources / "install.wim")
