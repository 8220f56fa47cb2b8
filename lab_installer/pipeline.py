from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .logging_utils import log_header
from .state_store import is_step_completed, mark_step_completed, unmark_step_completed, warning_count

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent lab provisioning step.

    Steps that set ``always_run = True`` are re-entered on every invocation;
    they must no-op per target (installed package, downloaded file).
    """

    step_id: str
    title: str

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]
    # Ran, but recorded advisory warnings; retried on the next invocation.
    degraded_steps: List[str]


def select_steps(steps: Sequence[Step], *, start_at: Optional[str], stop_after: Optional[str]) -> List[Step]:
    """Steps between start_at and stop_after (inclusive), in order."""

    ids = [s.step_id for s in steps]
    for bound in (start_at, stop_after):
        if bound is not None and bound not in ids:
            raise ValueError(f"Unknown step id {bound!r}; this platform runs: {', '.join(ids)}")

    first = ids.index(start_at) if start_at is not None else 0
    last = ids.index(stop_after) if stop_after is not None else len(ids) - 1
    return list(steps[first : last + 1])


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> PipelineResult:
    """Run the lab steps in order.

    A step is recorded as completed only when it finishes without adding
    advisory warnings, so a re-run retries notebooks that failed to download
    or a runtime that never became ready.
    """

    ran: List[str] = []
    skipped: List[str] = []
    degraded: List[str] = []
    exe = state.setdefault("execution", {})

    for step in select_steps(steps, start_at=start_at, stop_after=stop_after):
        exe["current_step"] = step.step_id

        rerun = force or bool(getattr(step, "always_run", False))
        if not rerun and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
            continue

        log_header(f"STEP {step.step_id}: {step.title}", logger)
        before = warning_count(state)
        state = step.run(state)
        exe = state.setdefault("execution", {})
        ran.append(step.step_id)

        added = warning_count(state) - before
        if added:
            logger.warning("Step %s finished with %d warning(s); it will run again next time", step.step_id, added)
            unmark_step_completed(state, step.step_id)
            degraded.append(step.step_id)
        else:
            mark_step_completed(state, step.step_id)

    if stop_after is not None:
        logger.info("Stopped after %s", stop_after)
    exe["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped, degraded_steps=degraded)
