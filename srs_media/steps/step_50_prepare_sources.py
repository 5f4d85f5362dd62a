from __future__ import annotations

import logging
from pathlib import Path

from ..context import MediaCtx
from ..kit import KitError, OsConfig
from ..lib.image import mount_iso
from ..lib.verify import matches_identity

logger = logging.getLogger(__name__)


class PrepareSourcesStep:
    step_id = "50_prepare_sources"

    def run(self, ctx: MediaCtx) -> None:
        os_cfg: OsConfig = ctx.require("os_config")

        if ctx.cfg.skip_updates:
            logger.info("Skipping required updates (--skip-updates)")
        else:
            for name, url in sorted(os_cfg.required_updates.items()):
                ctx.packages.append(ctx.fetch_verified(url, f"update {name}"))

        if ctx.cfg.language:
            url = os_cfg.language_packs.get(ctx.cfg.language)
            if not url:
                raise KitError(
                    f"No language pack {ctx.cfg.language!r} for {os_cfg.version_label} "
                    f"(available: {', '.join(sorted(os_cfg.language_packs)) or 'none'})"
                )
            ctx.packages.append(ctx.fetch_verified(url, f"language pack {ctx.cfg.language}"))

        ctx.iso_path = self._verified_iso(ctx, os_cfg)
        ctx.iso_root = mount_iso(ctx.iso_path, dry_run=ctx.dry_run)

    def _verified_iso(self, ctx: MediaCtx, os_cfg: OsConfig) -> Path:
        candidate = ctx.cfg.iso_path or ctx.prompter.ask(f"Path to the {os_cfg.version_label} ISO:")
        while True:
            if not candidate:
                raise RuntimeError(f"No valid {os_cfg.version_label} ISO supplied")
            if matches_identity(
                candidate,
                expected_size=os_cfg.iso_size,
                expected_sha256=os_cfg.iso_sha256,
                source_hint=os_cfg.iso_source,
            ):
                return Path(candidate)
            candidate = ctx.prompter.ask(
                f"That is not the expected {os_cfg.version_label} ISO. Path to another ISO (empty to abort):"
            )
