# stepchain/api/outline.py
"""
Scenario outlines: one chain template, run once per example row.

Every row gets its own RunContext (named after the row label, or
"<title> (Example N)"), so rows never share ledgers or values. A failing
row is collected into the ExamplesResult instead of stopping the others.

Example:
    >>> outline = (scenario_outline("doubling", lambda n, ctx:
    ...                given(ctx, "a number", n)
    ...                .when("doubled", lambda x: x * 2)
    ...                .then("is even", lambda x: x % 2 == 0))
    ...            .examples(1, 2, 3))
    >>> result = await outline.run()
    >>> result.all_passed, result.total_count
    (True, 3)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..config.policy import ExecutionPolicy
from ..core.context import RunContext
from ..core.errors import CancellationFault, ExamplesFault
from ..core.executor import CancelToken
from .flow import ScenarioChain, _positional_arity

logger = logging.getLogger(__name__)

ChainBuilder = Callable[..., ScenarioChain]


@dataclass(frozen=True)
class ExampleRow:
    """One row of example data."""
    index: int
    data: Any
    label: Optional[str] = None

    def __str__(self) -> str:
        return self.label or f"Example {self.index + 1}: {self.data}"


@dataclass(frozen=True)
class ExampleResult:
    index: int
    data: Any
    context: RunContext
    passed: bool
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class ExamplesResult:
    """Aggregated outcome of a scenario outline."""
    results: Tuple[ExampleResult, ...]

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def all_passed(self) -> bool:
        return self.failed_count == 0

    @property
    def failures(self) -> List[ExampleResult]:
        return [r for r in self.results if not r.passed]

    def assert_all_passed(self) -> None:
        """
        Raises:
            ExamplesFault: at least one row failed; carries the failed rows
        """
        if self.all_passed:
            return
        failures = self.failures
        lines = [f"Example {r.index + 1} failed: {r.data} ({r.error})" for r in failures]
        raise ExamplesFault(
            f"{len(failures)} of {self.total_count} examples failed.\n" + "\n".join(lines),
            failures,
        )


class ScenarioOutline:
    """
    Template plus example rows.

    build receives (data, ctx) and returns a ScenarioChain recording into
    ctx, which carries the row name and the outline policy. A
    single-argument build gets only the data and its chain's own context
    is reported. Hooks travel with the chain: pass executor= to given().
    """

    def __init__(
        self,
        title: str,
        build: ChainBuilder,
        *,
        policy: Optional[ExecutionPolicy] = None,
    ) -> None:
        self.title = title
        self.policy = policy
        self._build = build
        self._wants_context = _positional_arity(build) >= 2
        self._rows: List[ExampleRow] = []

    @property
    def rows(self) -> Tuple[ExampleRow, ...]:
        return tuple(self._rows)

    def example(self, data: Any, label: Optional[str] = None) -> "ScenarioOutline":
        self._rows.append(ExampleRow(index=len(self._rows), data=data, label=label))
        return self

    def examples(self, *rows: Any) -> "ScenarioOutline":
        for data in rows:
            self.example(data)
        return self

    def examples_from(self, rows: Iterable[Any]) -> "ScenarioOutline":
        return self.examples(*rows)

    def _context_for(self, row: ExampleRow) -> RunContext:
        return RunContext(
            name=row.label or f"{self.title} (Example {row.index + 1})",
            policy=self.policy,
        )

    async def _run_row(self, row: ExampleRow, token: CancelToken) -> ExampleResult:
        ctx = self._context_for(row)
        try:
            chain = self._build(row.data, ctx) if self._wants_context else self._build(row.data)
            ctx = chain.context
            await chain.assert_passed(token)
        except Exception as e:
            if isinstance(e, CancellationFault) and token.cancelled:
                raise
            logger.info(f"Outline {self.title!r}: {row} failed: {type(e).__name__}: {e}")
            return ExampleResult(row.index, row.data, ctx, False, e)
        return ExampleResult(row.index, row.data, ctx, True)

    async def run(self, token: Optional[CancelToken] = None, *, concurrently: bool = False) -> ExamplesResult:
        """
        Run every row and collect the outcomes in row order.

        Args:
            token: cancellation shared by all rows; a caller cancel stops
                the outline and propagates
            concurrently: run rows with asyncio.gather instead of one by one

        Raises:
            ValueError: no example rows were added
            CancellationFault: the caller cancelled
        """
        if not self._rows:
            raise ValueError("No examples provided. Call examples() before run().")
        token = token or CancelToken.none()

        if concurrently:
            results = await asyncio.gather(*(self._run_row(row, token) for row in self._rows))
        else:
            results = []
            for row in self._rows:
                results.append(await self._run_row(row, token))

        outcome = ExamplesResult(tuple(results))
        logger.info(
            f"Outline {self.title!r}: {outcome.passed_count}/{outcome.total_count} examples passed"
        )
        return outcome

    async def assert_all_passed(self, token: Optional[CancelToken] = None) -> ExamplesResult:
        result = await self.run(token)
        result.assert_all_passed()
        return result


def scenario_outline(
    title: str,
    build: ChainBuilder,
    *,
    policy: Optional[ExecutionPolicy] = None,
) -> ScenarioOutline:
    """Start a scenario outline; add rows with examples() and then run()."""
    return ScenarioOutline(title, build, policy=policy)
