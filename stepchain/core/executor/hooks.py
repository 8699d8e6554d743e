# stepchain/core/executor/hooks.py
"""
Observer hooks around step execution.

Hooks run synchronously on the executing thread, in subscription order.
Failures in hooks are not caught by the engine: a raising hook aborts the
run like any other error, so hooks that must never interfere should guard
themselves (see core.trace.recorder.TraceRecorder.attach).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List

from ..step import StepMetadata, StepResult

if TYPE_CHECKING:
    from ..context import RunContext


BeforeStepHook = Callable[["RunContext", StepMetadata], None]
AfterStepHook = Callable[["RunContext", StepResult], None]
RunHook = Callable[["RunContext"], None]


@dataclass
class StepHooks:
    """
    Subscriber lists. An empty list means nobody is observing and the
    executor skips the call entirely.
    """
    before_step: List[BeforeStepHook] = field(default_factory=list)
    after_step: List[AfterStepHook] = field(default_factory=list)
    before_run: List[RunHook] = field(default_factory=list)
    after_run: List[RunHook] = field(default_factory=list)

    def subscribe_before_step(self, hook: BeforeStepHook) -> BeforeStepHook:
        self.before_step.append(hook)
        return hook

    def subscribe_after_step(self, hook: AfterStepHook) -> AfterStepHook:
        self.after_step.append(hook)
        return hook

    def subscribe_before_run(self, hook: RunHook) -> RunHook:
        self.before_run.append(hook)
        return hook

    def subscribe_after_run(self, hook: RunHook) -> RunHook:
        self.after_run.append(hook)
        return hook


def record_timing(ctx: "RunContext", result: StepResult) -> None:
    """
    after_step hook storing each step's duration in the run metadata.

    Key format is "timing:<title>", value is milliseconds. Steps sharing a
    title overwrite each other; the last one wins.
    """
    ctx.set_metadata(f"timing:{result.title}", result.duration_ms)
