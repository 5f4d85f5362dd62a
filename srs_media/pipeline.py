from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .context import MediaCtx

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single stage of a media build."""

    step_id: str

    def run(self, ctx: MediaCtx) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]
    skipped_steps: List[str]
    stopped_after: Optional[str]


def run_pipeline(
    *,
    ctx: MediaCtx,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order, bounded by optional start and stop step ids."""

    known = [s.step_id for s in steps]
    for bound in (start_at, stop_after):
        if bound is not None and bound not in known:
            raise ValueError(f"Unknown step {bound!r} (known: {', '.join(known)})")
    if start_at is not None and stop_after is not None and known.index(stop_after) < known.index(start_at):
        raise ValueError(f"Step {stop_after!r} comes before {start_at!r}")

    ran: List[str] = []
    skipped: List[str] = []
    started = start_at is None
    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                skipped.append(step.step_id)
                continue

        ctx.current_step = step.step_id
        logger.info("Running step %s", step.step_id)
        step.run(ctx)
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    ctx.current_step = None
    return PipelineResult(ran_steps=ran, skipped_steps=skipped, stopped_after=stop_after)
