from __future__ import annotations

import logging

from ..context import MediaCtx
from ..kit import KitMetadata
from ..menu import MenuRun, resolve

logger = logging.getLogger(__name__)

# Variables the kit's menu may set for the rest of the build.
OS_MAJOR_VAR = "TargetOsMajor"
LEGACY_BOOT_VAR = "LegacyBoot"


def _truthy(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


class ResolveMenuStep:
    step_id = "40_resolve_menu"

    def run(self, ctx: MediaCtx) -> None:
        kit: KitMetadata = ctx.require("kit")

        menu = MenuRun(items=kit.menu_items, prompter=ctx.prompter, fetch=ctx.fetch_verified)
        artifacts = resolve(menu, kit.root_menu)
        if not artifacts:
            raise RuntimeError("The menu selection produced no deployment package; nothing to build")

        ctx.variables = menu.variables
        ctx.artifacts = artifacts
        logger.info("Menu path: %s", " > ".join(menu.visited))

        major = ctx.cfg.os_major or menu.variables.get(OS_MAJOR_VAR)
        if major is None:
            versions = kit.os_versions
            labels = [kit.os_config(v).version_label for v in versions]
            major = versions[ctx.prompter.choose("Select the Windows version", labels, 0)]
        ctx.os_config = kit.os_config(str(major))

        ctx.legacy_boot = ctx.cfg.legacy_boot or _truthy(menu.variables.get(LEGACY_BOOT_VAR, False))
        logger.info(
            "Target: %s (legacy_boot=%s)", ctx.os_config.version_label, ctx.legacy_boot
        )
