from __future__ import annotations

import logging
from pathlib import Path

from ..context import MediaCtx
from ..kit import load_kit_metadata
from ..lib.image import extract_msi

logger = logging.getLogger(__name__)


class AcquireKitStep:
    step_id = "30_acquire_kit"

    def run(self, ctx: MediaCtx) -> None:
        if ctx.cfg.kit_dir:
            kit_dir = Path(ctx.cfg.kit_dir)
            logger.info("Using pre-extracted kit at %s", kit_dir)
        else:
            kit_msi = ctx.fetch_verified(ctx.cfg.kit_url, "deployment kit")
            kit_dir = ctx.work_dir / "kit"
            if kit_dir.exists():
                ctx.tree_sync.remove_tree(kit_dir)
            extract_msi(kit_msi, kit_dir, dry_run=ctx.dry_run)

        ctx.kit_dir = kit_dir
        ctx.kit = load_kit_metadata(kit_dir / ctx.cfg.kit_metadata)
        logger.info("Kit loaded: OS versions %s", ", ".join(ctx.kit.os_versions))
