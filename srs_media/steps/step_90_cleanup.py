from __future__ import annotations

import logging

from ..context import MediaCtx
from ..lib.image import dismount_iso

logger = logging.getLogger(__name__)


class CleanupStep:
    step_id = "90_cleanup"

    def run(self, ctx: MediaCtx) -> None:
        if ctx.iso_root and ctx.iso_path:
            dismount_iso(ctx.iso_path, dry_run=ctx.dry_run)
            ctx.iso_root = None

        if ctx.cfg.keep_work:
            logger.info("Keeping work directory %s", ctx.work_dir)
        else:
            ctx.tree_sync.remove_tree(ctx.work_dir)

        logger.info("Downloads remain cached in %s", ctx.cache_dir)
