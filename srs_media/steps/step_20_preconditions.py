from __future__ import annotations

import logging

from ..context import MediaCtx
from ..lib.env import free_gib, is_elevated, missing_tools

logger = logging.getLogger(__name__)


class PreconditionsStep:
    step_id = "20_preconditions"

    def run(self, ctx: MediaCtx) -> None:
        problems: list[str] = []

        if not ctx.dry_run:
            if not is_elevated():
                problems.append("must run elevated (Administrator)")
            missing = missing_tools((ctx.cfg.copy_command, "dism", "diskpart", "msiexec", "powershell"))
            if missing:
                problems.append(f"missing host tools: {', '.join(missing)}")

        free = free_gib(ctx.cache_dir)
        if free < ctx.cfg.min_free_gib:
            problems.append(f"{ctx.cache_dir} has {free:.1f} GiB free, need {ctx.cfg.min_free_gib} GiB")

        if problems:
            raise RuntimeError("Environment check failed: " + "; ".join(problems))

        logger.info("Environment OK (%.1f GiB free in %s)", free, ctx.cache_dir)
