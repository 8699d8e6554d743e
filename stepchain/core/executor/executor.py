# stepchain/core/executor/executor.py
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections import deque
from typing import Any, Deque, Iterable, Optional

from ...config.policy import ExecutionPolicy
from ..context import RunContext
from ..errors import CancellationFault, SkippedFault, StepFault, StepTimeoutError
from ..step import StepIO, StepRecord, StepResult
from .cancellation import CancelToken
from .hooks import StepHooks

logger = logging.getLogger(__name__)


class Executor:
    """
    Sequential step runner:
      - dequeues StepRecords in FIFO order, one at a time
      - threads a single state value through the steps
      - records exactly one StepResult (and one StepIO) per attempted step
      - applies ExecutionPolicy on faults (continue / halt / skip-drain)
      - notifies StepHooks subscribers before and after each step

    An Executor holds no per-run state, so one instance can serve many
    concurrent runs as long as each run gets its own RunContext.
    """

    def __init__(self, hooks: Optional[StepHooks] = None) -> None:
        self.hooks = hooks if hooks is not None else StepHooks()

    # ---- public API ----

    async def run(
        self,
        steps: Iterable[StepRecord],
        seed: Any = None,
        policy: Optional[ExecutionPolicy] = None,
        token: Optional[CancelToken] = None,
        context: Optional[RunContext] = None,
    ) -> RunContext:
        """
        Execute steps against seed and return the run's ledger.

        A deque is drained in place; any other iterable is copied first.

        Raises:
            CancellationFault: token was cancelled (always propagates)
            AssertionFault / AssertionError: a step failed an assertion and
                policy.halt_on_failed_assertion is set
            StepFault: a step raised and policy.continue_on_error is not set
        """
        queue: Deque[StepRecord] = steps if isinstance(steps, deque) else deque(steps)
        ctx = context if context is not None else RunContext(policy=policy)
        if policy is None:
            policy = ctx.policy
        else:
            # the ledger reports the policy this run actually applies
            ctx.policy = policy
        token = token or CancelToken.none()

        ctx.current_value = seed
        logger.info(f"Run {ctx.run_id} starting with {len(queue)} step(s)")

        if self.hooks.before_run:
            for hook in self.hooks.before_run:
                hook(ctx)

        try:
            await self._drain(queue, ctx, policy, token)
        finally:
            logger.info(
                f"Run {ctx.run_id} finished: {len(ctx.steps)} recorded, "
                f"{len(ctx.failed_steps)} failed"
            )
            if self.hooks.after_run:
                for hook in self.hooks.after_run:
                    hook(ctx)

        return ctx

    def run_sync(self, *args: Any, **kwargs: Any) -> RunContext:
        """Blocking wrapper around run() for callers without an event loop."""
        return asyncio.run(self.run(*args, **kwargs))

    # ---- internals ----

    async def _drain(
        self,
        queue: Deque[StepRecord],
        ctx: RunContext,
        policy: ExecutionPolicy,
        token: CancelToken,
    ) -> None:
        state = ctx.current_value

        while queue:
            token.raise_if_cancelled()

            step = queue.popleft()
            kind = step.kind
            title = step.display_title

            if self.hooks.before_step:
                meta = step.metadata()
                for hook in self.hooks.before_step:
                    hook(ctx, meta)

            input_value = state
            err: Optional[BaseException] = None
            cancelled = False
            captured = False
            t0 = time.perf_counter()

            def capture() -> None:
                nonlocal captured
                if captured:
                    return
                captured = True

                result = StepResult(
                    kind=kind,
                    title=title,
                    duration_ms=(time.perf_counter() - t0) * 1000,
                    error=err,
                    cancelled=cancelled,
                )
                ctx.add_step(result)
                ctx.add_io(StepIO(kind=kind, title=title, input=input_value, output=state))
                ctx.current_value = state

                if self.hooks.after_step:
                    for hook in self.hooks.after_step:
                        hook(ctx, result)

            try:
                state = await self._invoke(step, state, token, policy.step_timeout)
                logger.debug(f"{kind} {title}: ok")
            except asyncio.CancelledError:
                cancelled = True
                raise
            except AssertionError as e:
                err = e
                logger.warning(f"{kind} {title}: assertion failed: {e}")
                if policy.halt_on_failed_assertion:
                    raise
            except Exception as e:
                if isinstance(e, CancellationFault) and token.cancelled:
                    cancelled = True
                    logger.info(f"{kind} {title}: cancelled by caller")
                    raise

                err = e
                logger.warning(f"{kind} {title}: {type(e).__name__}: {e}")
                if not policy.continue_on_error:
                    capture()
                    if policy.mark_remaining_as_skipped_on_failure:
                        self._drain_as_skipped(queue, ctx)
                    raise StepFault(f"Step failed: {kind} {title}", ctx, e) from e
            except BaseException as e:
                # KeyboardInterrupt, SystemExit: recorded as failed, then propagated
                err = e
                logger.warning(f"{kind} {title}: interrupted by {type(e).__name__}")
                raise
            finally:
                capture()

    async def _invoke(
        self,
        step: StepRecord,
        state: Any,
        token: CancelToken,
        timeout: Optional[float],
    ) -> Any:
        if timeout is None:
            result = step.exec(state, token)
            if inspect.isawaitable(result):
                result = await result
            return result

        linked = token.linked(timeout)
        result = step.exec(state, linked)
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            try:
                done, _ = await asyncio.wait({task}, timeout=linked.remaining())
            except asyncio.CancelledError:
                task.cancel()
                raise
            if task in done:
                # re-raises the step's own errors, TimeoutError included
                return task.result()

            task.cancel()
            await asyncio.wait({task})
            # the deadline passed, but the caller may have cancelled meanwhile
            token.raise_if_cancelled()
            raise StepTimeoutError(timeout, title=step.display_title)

        # sync steps cannot be interrupted; an overrun still counts as a timeout
        if linked.timed_out:
            token.raise_if_cancelled()
            raise StepTimeoutError(timeout, title=step.display_title)
        return result

    def _drain_as_skipped(self, queue: Deque[StepRecord], ctx: RunContext) -> None:
        skipped = 0
        while queue:
            pending = queue.popleft()
            ctx.add_step(StepResult(
                kind=pending.kind,
                title=pending.display_title,
                duration_ms=0.0,
                error=SkippedFault(),
            ))
            skipped += 1
        if skipped:
            logger.info(f"Run {ctx.run_id}: marked {skipped} remaining step(s) as skipped")
