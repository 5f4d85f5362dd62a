from __future__ import annotations

import logging

from ..context import MediaCtx
from ..lib.media import MediaPlan, format_media, free_drive_letter
from ..lib.prompt import confirm

logger = logging.getLogger(__name__)


class FormatMediaStep:
    step_id = "60_format_media"

    def run(self, ctx: MediaCtx) -> None:
        disk = ctx.cfg.disk_number
        if disk is None:
            answer = ctx.prompter.ask("Disk number of the USB drive to erase:")
            if not answer.isdigit():
                raise RuntimeError(f"Invalid disk number: {answer!r}")
            disk = int(answer)

        if not confirm(
            ctx.prompter,
            f"ALL DATA ON DISK {disk} WILL BE ERASED. Type the disk number again to continue:",
            str(disk),
        ):
            raise RuntimeError("Formatting not confirmed; aborting")

        used = {ctx.iso_root[0]} if ctx.iso_root else set()
        plan = MediaPlan(
            disk_number=disk,
            drive_letter=free_drive_letter(used),
            label=ctx.cfg.media_label,
            legacy_boot=ctx.legacy_boot,
        )
        ctx.media_root = format_media(plan, dry_run=ctx.dry_run)
