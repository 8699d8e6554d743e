# tests/unit/test_pipeline.py
from __future__ import annotations

import logging

import pytest

from stepchain.config import ExecutionPolicy
from stepchain.core.context import RunContext
from stepchain.core.errors import StepFault
from stepchain.core.executor import StepPipeline
from stepchain.core.step import StepPhase, StepWord


def passthrough(x, t):
    return x


def test_connectives_inherit_previous_phase():
    p = StepPipeline(RunContext())
    first = p.enqueue_inherit("implicit given", passthrough, StepWord.AND)
    p.enqueue(StepPhase.WHEN, StepWord.PRIMARY, "act", passthrough)
    and_when = p.enqueue_inherit("more", passthrough, StepWord.AND)
    p.enqueue(StepPhase.THEN, StepWord.PRIMARY, "check", passthrough)
    but_then = p.enqueue_inherit("except", passthrough, StepWord.BUT)

    assert first.phase is StepPhase.GIVEN
    assert and_when.phase is StepPhase.WHEN and and_when.kind == "And"
    assert but_then.phase is StepPhase.THEN and but_then.kind == "But"
    assert p.last_phase is StepPhase.THEN
    assert len(p) == 5


async def test_run_uses_context_policy_and_returns_it():
    ctx = RunContext(policy=ExecutionPolicy.lenient())
    p = StepPipeline(ctx)
    p.enqueue(StepPhase.GIVEN, StepWord.PRIMARY, "seed", lambda _, t: 1)
    p.enqueue(StepPhase.WHEN, StepWord.PRIMARY, "boom", lambda x, t: 1 / 0)

    result = await p.run()

    assert result is ctx
    assert len(ctx.failed_steps) == 1


class TestFinallyHandlers:

    async def test_handlers_run_after_queue_with_captured_state(self):
        seen = []
        p = StepPipeline(RunContext())
        p.enqueue(StepPhase.GIVEN, StepWord.PRIMARY, "seed", lambda _, t: "resource")
        p.enqueue_finally("", lambda state, t: seen.append(("cleanup", state)))
        p.enqueue(StepPhase.WHEN, StepWord.PRIMARY, "use", lambda x, t: seen.append("use") or x.upper())

        ctx = await p.run()

        assert seen == ["use", ("cleanup", "resource")]
        assert ctx.current_value == "RESOURCE"
        finally_entry = ctx.steps[1]
        assert finally_entry.title == "Finally"
        assert finally_entry.kind == "Given"

    async def test_handlers_run_after_halting_fault(self):
        seen = []
        p = StepPipeline(RunContext())
        p.enqueue(StepPhase.GIVEN, StepWord.PRIMARY, "seed", lambda _, t: 1)
        p.enqueue_finally("release", lambda state, t: seen.append(state))
        p.enqueue(StepPhase.WHEN, StepWord.PRIMARY, "boom", lambda x, t: 1 / 0)

        with pytest.raises(StepFault):
            await p.run()

        assert seen == [1]

    async def test_unreached_finally_is_not_registered(self):
        seen = []
        p = StepPipeline(RunContext())
        p.enqueue(StepPhase.GIVEN, StepWord.PRIMARY, "boom", lambda _, t: 1 / 0)
        p.enqueue_finally("never", lambda state, t: seen.append(state))

        with pytest.raises(StepFault):
            await p.run()

        assert seen == []

    async def test_failing_handler_does_not_stop_others(self, caplog):
        seen = []

        def broken(state, t):
            raise RuntimeError("cleanup failed")

        async def async_cleanup(state, t):
            seen.append("async")

        p = StepPipeline(RunContext())
        p.enqueue(StepPhase.GIVEN, StepWord.PRIMARY, "seed", lambda _, t: 1)
        p.enqueue_finally("broken", broken)
        p.enqueue_finally("async", async_cleanup)
        p.enqueue_finally("sync", lambda state, t: seen.append("sync"))

        with caplog.at_level(logging.WARNING):
            ctx = await p.run()

        assert ctx.all_passed
        assert seen == ["async", "sync"]
        assert "Finally handler failed" in caplog.text
