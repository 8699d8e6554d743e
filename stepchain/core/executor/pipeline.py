# stepchain/core/executor/pipeline.py
"""
Step pipeline: the enqueue side of a run.

Builders append StepRecords here; connective steps (And/But) inherit the
phase of whatever was enqueued last. Running the pipeline hands the queue
to an Executor and then runs any finally handlers registered along the way.
"""

from __future__ import annotations

import inspect
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, List, Optional, Union

from ..context import RunContext
from ..step import StepFn, StepPhase, StepRecord, StepWord
from .cancellation import CancelToken
from .executor import Executor

logger = logging.getLogger(__name__)

FinallyHandler = Callable[[Any, CancelToken], Union[None, Awaitable[None]]]


class StepPipeline:

    def __init__(self, context: RunContext, executor: Optional[Executor] = None) -> None:
        self.context = context
        self.executor = executor or Executor()
        self._steps: Deque[StepRecord] = deque()
        self._last_phase = StepPhase.GIVEN
        self._finally_handlers: List[Callable[[CancelToken], Any]] = []

    def __len__(self) -> int:
        return len(self._steps)

    @property
    def last_phase(self) -> StepPhase:
        return self._last_phase

    def enqueue(self, phase: StepPhase, word: StepWord, title: str, exec: StepFn) -> StepRecord:
        record = StepRecord(phase=phase, word=word, title=title or "", exec=exec)
        self._last_phase = phase
        self._steps.append(record)
        return record

    def enqueue_inherit(self, title: str, exec: StepFn, word: StepWord) -> StepRecord:
        """Enqueue a step carrying the phase of the previously enqueued one."""
        return self.enqueue(self._last_phase, word, title, exec)

    def enqueue_finally(self, title: str, handler: FinallyHandler) -> StepRecord:
        """
        Enqueue a pass-through step that registers handler for the end of the run.

        The handler receives the state as it was when this step ran, and is
        only registered if the step is actually reached.
        """
        def register(state: Any, token: CancelToken) -> Any:
            self._finally_handlers.append(lambda t: handler(state, t))
            return state

        return self.enqueue(self._last_phase, StepWord.PRIMARY, title or "Finally", register)

    async def run(self, token: Optional[CancelToken] = None, seed: Any = None) -> RunContext:
        token = token or CancelToken.none()
        try:
            return await self.executor.run(
                self._steps,
                seed=seed,
                policy=self.context.policy,
                token=token,
                context=self.context,
            )
        finally:
            await self._run_finally_handlers(token)

    async def _run_finally_handlers(self, token: CancelToken) -> None:
        handlers, self._finally_handlers = self._finally_handlers, []
        for handler in handlers:
            try:
                result = handler(token)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # every handler gets its turn; the run's own outcome wins
                logger.warning(f"Finally handler failed in run {self.context.run_id}", exc_info=True)
