# tests/unit/test_executor.py
"""
Executor behavior: ordering, ledger contents and failure policy.
"""

from __future__ import annotations

import asyncio
from collections import deque

import pytest

from stepchain.config import ExecutionPolicy
from stepchain.core.context import RunContext
from stepchain.core.errors import AssertionFault, SkippedFault, StepFault
from stepchain.core.executor import Executor
from stepchain.core.step import StepPhase, StepWord, StepRecord


def step(phase: StepPhase, title: str, fn, word: StepWord = StepWord.PRIMARY) -> StepRecord:
    return StepRecord(phase=phase, word=word, title=title, exec=fn)


def given(title, value):
    return step(StepPhase.GIVEN, title, lambda _, t: value)


def when(title, fn):
    return step(StepPhase.WHEN, title, lambda x, t: fn(x))


def expect(title, predicate, word: StepWord = StepWord.PRIMARY):
    def check(x, t):
        if not predicate(x):
            raise AssertionFault(f"Assertion failed: {title}")
        return x
    return step(StepPhase.THEN, title, check, word)


def boom(x):
    raise ValueError("boom")


async def test_scenario_all_steps_pass():
    ctx = await Executor().run([
        given("seed", 1),
        when("add one", lambda x: x + 1),
        expect("equals two", lambda x: x == 2),
    ])

    assert len(ctx.steps) == 3
    assert ctx.all_passed
    assert ctx.current_value == 2
    assert [s.kind for s in ctx.steps] == ["Given", "When", "Then"]


async def test_no_fault_ledgers_match_queue():
    steps = [given("seed", 0)] + [when(f"inc {i}", lambda x: x + 1) for i in range(5)]
    ctx = await Executor().run(steps)

    assert len(ctx.steps) == len(steps)
    assert len(ctx.io) == len(steps)
    assert all(s.passed for s in ctx.steps)
    assert ctx.current_value == ctx.io[-1].output == 5
    assert [io.input for io in ctx.io] == [None, 0, 1, 2, 3, 4]


async def test_halting_fault_wraps_cause_and_stops():
    ctx = RunContext()
    policy = ExecutionPolicy(continue_on_error=False, halt_on_failed_assertion=True)

    with pytest.raises(StepFault) as exc_info:
        await Executor().run(
            [given("seed", 1), when("boom", boom), expect("unreached", lambda x: x == 2)],
            policy=policy,
            context=ctx,
        )

    fault = exc_info.value
    assert isinstance(fault.cause, ValueError)
    assert fault.__cause__ is fault.cause
    assert fault.context is ctx
    assert fault.failed_step is ctx.steps[1]

    assert len(ctx.steps) == 2
    assert ctx.steps[0].passed
    assert ctx.steps[1].error is fault.cause
    assert "unreached" not in [s.title for s in ctx.steps]
    assert ctx.current_value == 1


async def test_halting_fault_skip_drains_remaining_steps():
    ctx = RunContext()
    policy = ExecutionPolicy(
        continue_on_error=False,
        halt_on_failed_assertion=True,
        mark_remaining_as_skipped_on_failure=True,
    )

    with pytest.raises(StepFault):
        await Executor().run(
            [given("seed", 1), when("boom", boom), expect("unreached", lambda x: x == 2)],
            policy=policy,
            context=ctx,
        )

    assert len(ctx.steps) == 3
    skipped = ctx.steps[2]
    assert skipped.title == "unreached"
    assert isinstance(skipped.error, SkippedFault)
    assert skipped.duration_ms == 0.0
    # skipped steps never ran, so no lineage
    assert len(ctx.io) == 2
    assert ctx.failed_steps == [ctx.steps[1]]


async def test_skip_drain_keeps_queue_order():
    ctx = RunContext(policy=ExecutionPolicy.strict())
    steps = [
        given("seed", 1),
        when("boom", boom),
        when("second", lambda x: x),
        expect("third", lambda x: True),
    ]

    with pytest.raises(StepFault):
        await Executor().run(steps, context=ctx)

    assert [s.title for s in ctx.steps] == ["seed", "boom", "second", "third"]
    assert [s.skipped for s in ctx.steps] == [False, False, True, True]


async def test_all_async_scenario_with_connectives():
    async def double(x):
        await asyncio.sleep(0.01)
        return x * 2

    steps = [
        given("five", 5),
        step(StepPhase.WHEN, "double", lambda x, t: double(x)),
        expect(">=10", lambda x: x >= 10),
        expect("<=20", lambda x: x <= 20, StepWord.AND),
        expect("!=11", lambda x: x != 11, StepWord.BUT),
    ]

    ctx = await Executor().run(steps)

    assert len(ctx.steps) == 5
    assert ctx.all_passed
    assert [s.kind for s in ctx.steps] == ["Given", "When", "Then", "And", "But"]
    assert ctx.current_value == 10
    assert ctx.steps[1].duration_ms >= 5


class TestContinueOnError:

    async def test_fault_does_not_change_state(self):
        ctx = await Executor().run(
            [given("seed", 3), when("boom", boom), when("add one", lambda x: x + 1)],
            policy=ExecutionPolicy.lenient(),
        )

        assert [s.passed for s in ctx.steps] == [True, False, True]
        failed_io = ctx.io[1]
        assert failed_io.input == failed_io.output == 3
        assert ctx.io[2].input == 3
        assert ctx.current_value == 4

    async def test_every_fault_is_collected(self):
        ctx = await Executor().run(
            [given("seed", 1), when("boom", boom), when("boom again", boom)],
            policy=ExecutionPolicy.lenient(),
        )

        assert len(ctx.failed_steps) == 2
        assert ctx.first_failure.title == "boom"

    async def test_skip_drain_has_no_effect(self):
        policy = ExecutionPolicy.lenient().with_updates(mark_remaining_as_skipped_on_failure=True)
        ctx = await Executor().run(
            [given("seed", 1), when("boom", boom), when("next", lambda x: x + 1)],
            policy=policy,
        )

        assert not any(s.skipped for s in ctx.steps)
        assert ctx.current_value == 2


class TestAssertions:

    async def test_halt_rethrows_without_wrapping_or_draining(self):
        ctx = RunContext(policy=ExecutionPolicy.strict())

        with pytest.raises(AssertionFault, match="equals three"):
            await Executor().run(
                [given("seed", 1), expect("equals three", lambda x: x == 3), when("after", lambda x: x)],
                context=ctx,
            )

        assert len(ctx.steps) == 2
        assert isinstance(ctx.steps[1].error, AssertionFault)

    async def test_plain_assert_counts_as_assertion(self):
        def check(x, t):
            assert x == 3, "expected three"
            return x

        ctx = RunContext()
        with pytest.raises(AssertionError, match="expected three"):
            await Executor().run([given("seed", 1), step(StepPhase.THEN, "check", check)], context=ctx)

        assert isinstance(ctx.steps[1].error, AssertionError)

    async def test_no_halt_continues_with_previous_state(self):
        # assertions are gated by halt_on_failed_assertion alone
        policy = ExecutionPolicy(continue_on_error=False, halt_on_failed_assertion=False)
        ctx = await Executor().run(
            [
                given("seed", 1),
                expect("equals three", lambda x: x == 3),
                when("add one", lambda x: x + 1),
            ],
            policy=policy,
        )

        assert [s.passed for s in ctx.steps] == [True, False, True]
        assert ctx.io[2].input == 1
        assert ctx.current_value == 2


class TestQueueHandling:

    async def test_deque_is_drained_in_place(self):
        queue = deque([given("seed", 1), when("add", lambda x: x + 1)])
        await Executor().run(queue)
        assert len(queue) == 0

    async def test_list_is_copied(self):
        steps = [given("seed", 1)]
        await Executor().run(steps)
        assert len(steps) == 1

    async def test_seed_is_initial_state(self):
        ctx = await Executor().run([when("add", lambda x: x + 1)], seed=41)
        assert ctx.io[0].input == 41
        assert ctx.current_value == 42

    async def test_empty_queue_keeps_seed(self):
        ctx = await Executor().run([], seed="seed")
        assert ctx.steps == ()
        assert ctx.current_value == "seed"

    async def test_policy_defaults_to_context_policy(self):
        ctx = RunContext(policy=ExecutionPolicy.lenient())
        await Executor().run([given("seed", 1), when("boom", boom)], context=ctx)
        assert len(ctx.steps) == 2


def test_run_sync():
    ctx = Executor().run_sync([given("seed", 2), when("square", lambda x: x * x)])
    assert ctx.current_value == 4


class TestInterrupts:

    async def test_keyboard_interrupt_is_recorded_as_failure(self):
        ctx = RunContext(policy=ExecutionPolicy.lenient())

        def interrupted(x, t):
            raise KeyboardInterrupt()

        with pytest.raises(KeyboardInterrupt):
            await Executor().run(
                [given("seed", 1), step(StepPhase.WHEN, "ki", interrupted), when("unreached", lambda x: x)],
                context=ctx,
            )

        assert len(ctx.steps) == 2
        entry = ctx.steps[1]
        assert isinstance(entry.error, KeyboardInterrupt)
        assert not entry.passed
        assert not entry.cancelled
        assert ctx.current_value == 1

    async def test_other_base_exceptions_propagate_unwrapped(self):
        class Abort(BaseException):
            pass

        def abort(x, t):
            raise Abort()

        ctx = RunContext()
        with pytest.raises(Abort):
            await Executor().run([given("seed", 1), step(StepPhase.WHEN, "abort", abort)], context=ctx)

        assert isinstance(ctx.steps[1].error, Abort)
        assert len(ctx.io) == 2


class TestPolicyRecording:

    async def test_explicit_policy_is_recorded_on_context(self):
        ctx = RunContext()
        lenient = ExecutionPolicy.lenient()

        await Executor().run([given("seed", 1), when("boom", boom)], policy=lenient, context=ctx)

        assert ctx.policy is lenient
        assert ctx.to_dict()["policy"]["continue_on_error"] is True

    async def test_context_policy_used_when_none_given(self):
        strict = ExecutionPolicy.strict()
        ctx = RunContext(policy=strict)

        await Executor().run([given("seed", 1)], context=ctx)

        assert ctx.policy is strict
