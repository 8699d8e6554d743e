# stepchain/core/trace/recorder.py
"""
Trace recorders.

A recorder turns StepHooks notifications into TraceEvents. Recording must
never break a run, so attach() wraps every subscription and logs recorder
failures instead of letting them reach the executor.
"""

from __future__ import annotations

import logging
from typing import Callable, List

from ..context import RunContext
from ..errors import StepChainError, codes
from ..executor.hooks import StepHooks
from ..step import StepMetadata, StepResult
from .events import TraceEvent, TraceEventType, utc_now_iso

logger = logging.getLogger(__name__)


class TraceRecorder:
    """
    Base recorder. Subclasses implement record().
    """

    def record(self, event: TraceEvent) -> None:
        raise NotImplementedError

    # ---- hook adapters ----

    def on_run_start(self, ctx: RunContext) -> None:
        self.record(TraceEvent(
            type=TraceEventType.RUN_START,
            ts=utc_now_iso(),
            run_id=ctx.run_id,
            meta={"name": ctx.name, "policy": ctx.policy.to_dict()},
        ))

    def on_step_start(self, ctx: RunContext, step: StepMetadata) -> None:
        self.record(TraceEvent(
            type=TraceEventType.STEP_START,
            ts=utc_now_iso(),
            run_id=ctx.run_id,
            kind=step.kind,
            title=step.title,
            meta={"phase": step.phase.value, "word": step.word.value},
        ))

    def on_step_end(self, ctx: RunContext, result: StepResult) -> None:
        if result.cancelled:
            event_type = TraceEventType.STEP_CANCELLED
        elif result.passed:
            event_type = TraceEventType.STEP_OK
        else:
            event_type = TraceEventType.STEP_FAIL

        error_message = None
        meta = {}
        if result.error is not None:
            if isinstance(result.error, StepChainError):
                error_message = result.error.message
            else:
                error_message = f"{type(result.error).__name__}: {result.error}"
            if result.error_code in codes.CANCELLATION_CODES:
                # a timeout (or a foreign token) stopped the step, not its own logic
                meta["cancellation"] = True

        self.record(TraceEvent(
            type=event_type,
            ts=utc_now_iso(),
            run_id=ctx.run_id,
            kind=result.kind,
            title=result.title,
            duration_ms=result.duration_ms,
            error_code=result.error_code,
            error_message=error_message,
            meta=meta,
        ))

    def on_run_end(self, ctx: RunContext) -> None:
        self.record(TraceEvent(
            type=TraceEventType.RUN_END,
            ts=utc_now_iso(),
            run_id=ctx.run_id,
            meta={
                "recorded": len(ctx.steps),
                "failed": len(ctx.failed_steps),
                "all_passed": ctx.all_passed,
            },
        ))

    def attach(self, hooks: StepHooks) -> StepHooks:
        """Subscribe this recorder to hooks; returns hooks for chaining."""
        hooks.subscribe_before_run(self._guarded(self.on_run_start))
        hooks.subscribe_before_step(self._guarded(self.on_step_start))
        hooks.subscribe_after_step(self._guarded(self.on_step_end))
        hooks.subscribe_after_run(self._guarded(self.on_run_end))
        return hooks

    def _guarded(self, fn: Callable[..., None]) -> Callable[..., None]:
        def wrapper(*args) -> None:
            try:
                fn(*args)
            except Exception:
                # a broken recorder must not change the run's outcome
                logger.warning(f"{type(self).__name__}.{fn.__name__} failed", exc_info=True)
        return wrapper


class NullTraceRecorder(TraceRecorder):
    def record(self, event: TraceEvent) -> None:
        return


class InMemoryTraceRecorder(TraceRecorder):
    """Keeps events in a list; handy for tests and in-process reporters."""

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def record(self, event: TraceEvent) -> None:
        self.events.append(event)

    def get_events_by_type(self, event_type: TraceEventType) -> List[TraceEvent]:
        return [e for e in self.events if e.type == event_type]

    def clear(self) -> None:
        self.events.clear()
