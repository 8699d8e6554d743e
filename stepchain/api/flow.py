# stepchain/api/flow.py
"""
Fluent Given/When/Then chains on top of StepPipeline.

Nothing runs while the chain is being built; awaiting the chain (or calling
run/assert_passed/assert_failed/result) hands the queued steps to the
executor.

Example:
    >>> ctx = RunContext(name="math")
    >>> await (given(ctx, "seed", 1)
    ...        .when("add one", lambda x: x + 1)
    ...        .then("equals two", lambda x: x == 2))
    >>> ctx.current_value
    2

Step functions may take (), (value) or (value, token) and may be sync or
async. In the Then phase (and And/But following a Then) the function is a
predicate: a falsy result fails the step with an AssertionFault, while
None or a truthy result leaves the value unchanged. In every other phase
the return value becomes the new value, except for the *_do variants
(when_do, and_do, but_do), which run for their side effect only.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Generator, Optional, Union

from ..core.context import RunContext
from ..core.errors import AssertionFault, StepFault
from ..core.executor import CancelToken, Executor, StepPipeline
from ..core.step import StepFn, StepPhase, StepWord

TitleOrFn = Union[str, Callable[..., Any]]


def _positional_arity(fn: Callable[..., Any]) -> int:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1
    count = 0
    for p in sig.parameters.values():
        if p.kind is inspect.Parameter.VAR_POSITIONAL:
            return max(count, 1)
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD) \
                and p.default is inspect.Parameter.empty:
            count += 1
    return count


def _bind(fn: Callable[..., Any]) -> StepFn:
    """Normalize a user function to the (value, token) step shape."""
    arity = _positional_arity(fn)
    if arity == 0:
        return lambda value, token: fn()
    if arity == 1:
        return lambda value, token: fn(value)
    return lambda value, token: fn(value, token)


def _bind_setup(setup: Any) -> StepFn:
    if not callable(setup):
        return lambda _, token: setup
    if _positional_arity(setup) == 0:
        return lambda _, token: setup()
    return lambda _, token: setup(token)


def _predicate(fn: Callable[..., Any], title: str, kind: str) -> StepFn:
    call = _bind(fn)
    label = title if title and title.strip() else kind

    async def check(value: Any, token: CancelToken) -> Any:
        outcome = call(value, token)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        if outcome is not None and not outcome:
            raise AssertionFault(f"Assertion failed: {label}")
        return value

    return check


def _effect(fn: Callable[..., Any]) -> StepFn:
    """Run fn for its side effect and keep the current value."""
    call = _bind(fn)

    async def act(value: Any, token: CancelToken) -> Any:
        outcome = call(value, token)
        if inspect.isawaitable(outcome):
            await outcome
        return value

    return act


def _split(title: TitleOrFn, fn: Optional[Callable[..., Any]]) -> tuple:
    if fn is None:
        if not callable(title):
            raise TypeError("a step needs a function")
        return "", title
    return title, fn


class ScenarioChain:
    """
    Builder returned by given(). Every method enqueues one step and returns
    the chain.
    """

    def __init__(self, pipeline: StepPipeline) -> None:
        self._p = pipeline
        self._started = False

    @property
    def context(self) -> RunContext:
        return self._p.context

    # ---- steps ----

    def when(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        title, fn = _split(title, fn)
        self._p.enqueue(StepPhase.WHEN, StepWord.PRIMARY, title, _bind(fn))
        return self

    def then(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        title, fn = _split(title, fn)
        self._p.enqueue(StepPhase.THEN, StepWord.PRIMARY, title, _predicate(fn, title, "Then"))
        return self

    def and_(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        return self._connective(StepWord.AND, title, fn)

    def but(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        return self._connective(StepWord.BUT, title, fn)

    def when_do(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        """When step run for its side effect; the value passes through unchanged."""
        title, fn = _split(title, fn)
        self._p.enqueue(StepPhase.WHEN, StepWord.PRIMARY, title, _effect(fn))
        return self

    def and_do(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        title, fn = _split(title, fn)
        self._p.enqueue_inherit(title, _effect(fn), StepWord.AND)
        return self

    def but_do(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        title, fn = _split(title, fn)
        self._p.enqueue_inherit(title, _effect(fn), StepWord.BUT)
        return self

    def finally_(self, title: TitleOrFn, fn: Optional[Callable[..., Any]] = None) -> "ScenarioChain":
        """Register cleanup that runs after the whole chain, pass or fail."""
        title, fn = _split(title, fn)
        self._p.enqueue_finally(title, _bind(fn))
        return self

    def _connective(self, word: StepWord, title: TitleOrFn, fn: Optional[Callable[..., Any]]) -> "ScenarioChain":
        title, fn = _split(title, fn)
        if self._p.last_phase is StepPhase.THEN:
            self._p.enqueue_inherit(title, _predicate(fn, title, word.value), word)
        else:
            self._p.enqueue_inherit(title, _bind(fn), word)
        return self

    # ---- terminal operations ----

    async def run(self, token: Optional[CancelToken] = None) -> RunContext:
        """Run the chain. A chain runs once; later calls return the recorded context."""
        if self._started:
            return self._p.context
        self._started = True
        return await self._p.run(token)

    def __await__(self) -> Generator[Any, None, RunContext]:
        return self.run().__await__()

    async def assert_passed(self, token: Optional[CancelToken] = None) -> RunContext:
        ctx = await self.run(token)
        if not ctx.all_passed:
            first = ctx.first_failure
            raise AssertionFault(f"Scenario failed at step: {first.kind} {first.title}")
        return ctx

    async def assert_failed(self, token: Optional[CancelToken] = None) -> RunContext:
        try:
            ctx = await self.run(token)
        except (StepFault, AssertionError):
            return self.context
        if ctx.all_passed:
            raise AssertionFault("Expected scenario to fail, but all steps passed.")
        return ctx

    async def result(self, token: Optional[CancelToken] = None) -> Any:
        ctx = await self.run(token)
        return ctx.current_value


def given(
    ctx: Optional[RunContext],
    title: str,
    setup: Any,
    *,
    executor: Optional[Executor] = None,
) -> ScenarioChain:
    """
    Start a chain with a Given step.

    Args:
        ctx: run context to record into (a fresh one when None)
        title: step title
        setup: a value, a zero-argument callable, or a callable taking the
            cancel token; sync or async
        executor: executor to run with (carries the hooks)
    """
    pipeline = StepPipeline(ctx if ctx is not None else RunContext(), executor)
    pipeline.enqueue(StepPhase.GIVEN, StepWord.PRIMARY, title, _bind_setup(setup))
    return ScenarioChain(pipeline)
