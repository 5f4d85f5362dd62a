from __future__ import annotations

import logging
import shutil
from pathlib import Path

from ..context import MediaCtx
from ..kit import OsConfig
from ..lib.answer_file import SUPPORTED_COMPAT_REVISION, AnswerDocument, AnswerFileError

logger = logging.getLogger(__name__)

MEDIA_ANSWER_FILE = "AutoUnattend.xml"


class AnswerFileStep:
    step_id = "75_answer_file"

    def run(self, ctx: MediaCtx) -> None:
        kit_dir: Path = ctx.require("kit_dir")
        os_cfg: OsConfig = ctx.require("os_config")
        media_root = Path(ctx.require("media_root"))

        source = kit_dir / os_cfg.answer_file
        target = media_root / MEDIA_ANSWER_FILE
        if ctx.dry_run:
            logger.info("Would write %s from %s", target, source)
            return
        shutil.copyfile(source, target)

        doc = AnswerDocument.load(target)
        if not doc.is_compatible(SUPPORTED_COMPAT_REVISION):
            raise AnswerFileError(
                f"{source} requires compatibility revision {doc.compat_revision()}, "
                f"this tool supports {SUPPORTED_COMPAT_REVISION}; update the tool"
            )

        if ctx.cfg.product_key:
            doc.inject_product_key(ctx.cfg.product_key)
        doc.set_boot_mode(legacy=ctx.legacy_boot)
        doc.set_post_install_action(shutdown=ctx.cfg.shutdown)
        doc.save()
