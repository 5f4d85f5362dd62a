from __future__ import annotations

import argparse
import logging
from typing import Optional

import requests

from . import __version__
from .config import DEFAULT_CONFIG_PATH, MediaConfig, load_media_config
from .context import MediaCtx
from .lib.prompt import ConsolePrompter, Prompter
from .lib.sync import TreeSync
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, run_pipeline
from .steps import (
    AcquireKitStep,
    AnswerFileStep,
    CleanupStep,
    CopyMediaStep,
    FormatMediaStep,
    PrepareSourcesStep,
    PreconditionsStep,
    ResolveMenuStep,
    SelfUpdateCheckStep,
    UpdateImageStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        SelfUpdateCheckStep(),
        PreconditionsStep(),
        AcquireKitStep(),
        ResolveMenuStep(),
        PrepareSourcesStep(),
        FormatMediaStep(),
        CopyMediaStep(),
        AnswerFileStep(),
        UpdateImageStep(),
    ]


def run(
    cfg: MediaConfig,
    *,
    log_path: str = DEFAULT_LOG_PATH,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    prompter: Optional[Prompter] = None,
    session: Optional[requests.Session] = None,
) -> PipelineResult:
    """Build installation media, cleaning up whatever the run left behind."""

    actual_log_path = configure_logging(log_path=log_path)
    logger.info("srs-media %s (log: %s)", __version__, actual_log_path)

    ctx = MediaCtx(
        cfg=cfg,
        prompter=prompter or ConsolePrompter(),
        session=session or requests.Session(),
        tree_sync=TreeSync(command=cfg.copy_command, dry_run=cfg.dry_run),
    )

    try:
        result = run_pipeline(ctx=ctx, steps=build_steps(), start_at=start_at, stop_after=stop_after)
    except BaseException:
        logger.exception("Media creation failed in step %s", ctx.current_step)
        try:
            CleanupStep().run(ctx)
        except Exception:
            # Keep the step failure as the one propagated.
            logger.exception("Cleanup after the failed run also failed")
        raise

    logger.info("Finished steps: %s", ", ".join(result.ran_steps))
    CleanupStep().run(ctx)
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="srs-media", description="Create SRS installation media")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to the YAML config")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the run log")
    p.add_argument("--iso", dest="iso_path", default=None, help="Windows ISO to build from")
    p.add_argument("--os", dest="os_major", default=None, help="Windows major version (e.g. 10, 11)")
    p.add_argument("--disk", dest="disk_number", type=int, default=None, help="Disk number of the USB drive")
    p.add_argument("--product-key", default=None, help="Product key to pre-seed in the answer file")
    p.add_argument("--language", default=None, help="Language pack to add (e.g. de-de)")
    p.add_argument("--legacy-boot", action="store_true", default=None, help="Build media for BIOS boot")
    p.add_argument("--reboot", action="store_true", help="Reboot instead of shutting down after setup")
    p.add_argument("--skip-updates", action="store_true", default=None)
    p.add_argument("--keep-work", action="store_true", default=None, help="Keep the work directory")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 60_format_media)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id (e.g. 50_prepare_sources)")
    p.add_argument("--dry-run", action="store_true", default=None)
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = p.parse_args(argv)

    cfg = load_media_config(args.config, required=args.config != DEFAULT_CONFIG_PATH).with_overrides(
        iso_path=args.iso_path,
        os_major=args.os_major,
        disk_number=args.disk_number,
        product_key=args.product_key,
        language=args.language,
        legacy_boot=args.legacy_boot,
        shutdown=False if args.reboot else None,
        skip_updates=args.skip_updates,
        keep_work=args.keep_work,
        dry_run=args.dry_run,
    )

    try:
        run(cfg, log_path=args.log, start_at=args.start_at, stop_after=args.stop_after)
    except KeyboardInterrupt:
        return 130
    except Exception:
        # Already logged with its traceback by run().
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
