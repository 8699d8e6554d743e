# stepchain/__init__.py
"""
stepchain - Behavior-driven step execution engine

User-facing API (recommended):
- given(): fluent Given/When/Then chains
- scenario_outline(): one chain template run per example row
- RunContext: the ledger of one run (results, I/O lineage, final value)
- ExecutionPolicy: halt vs continue, per-step timeout, skip-remaining

Advanced/Internal API (for integrators and framework authors):
- core.executor.*: Executor, StepPipeline, CancelToken, StepHooks
- core.trace.*: trace recorders that subscribe to StepHooks
- config.*: YAML policy files and their pydantic contract

Basic usage:

Chain API:
    >>> from stepchain import given, RunContext
    >>> ctx = RunContext(name="arithmetic")
    >>> await (given(ctx, "a number", 2)
    ...        .when("doubled", lambda x: x * 2)
    ...        .then("is four", lambda x: x == 4))
    >>> ctx.all_passed, ctx.current_value
    (True, 4)

Keep going after failures:
    >>> ctx = RunContext(policy=ExecutionPolicy.lenient())
    >>> await given(ctx, "seed", 1).when("boom", lambda x: 1 / 0).when("next", lambda x: x + 1)
    >>> [s.passed for s in ctx.steps]
    [True, False, True]

Data-driven outline:
    >>> outline = scenario_outline("doubling", lambda n, ctx: given(ctx, "n", n).when("x2", lambda x: x * 2))
    >>> result = await outline.examples(1, 2, 3).run()
    >>> result.passed_count
    3

Policy from YAML (./stepchain.yml or ~/.stepchain/policy.yml):
    >>> policy = load_policy()

Observing a run:
    >>> hooks = StepHooks()
    >>> recorder = InMemoryTraceRecorder()
    >>> recorder.attach(hooks)
    >>> await given(RunContext(), "seed", 1, executor=Executor(hooks))
"""

__version__ = "0.1.0"

# Configuration (imported first: the core depends on it)
from .config import ExecutionPolicy, load_policy, validate_policy

# Core types
from .core.context import RunContext
from .core.step import StepPhase, StepWord, StepRecord, StepMetadata, StepResult, StepIO, resolve_kind
from .core.errors import (
    StepChainError,
    CancellationFault,
    StepTimeoutError,
    AssertionFault,
    ExamplesFault,
    SkippedFault,
    StepFault,
    PolicyConfigError,
)
from .core.executor import CancelToken, StepHooks, Executor, StepPipeline, record_timing
from .core.trace import TraceEvent, TraceEventType, InMemoryTraceRecorder

# User-facing API
from .api import given, ScenarioChain, scenario_outline, ScenarioOutline, ExamplesResult

__all__ = [
    # Version
    "__version__",

    # API
    "given",
    "ScenarioChain",
    "scenario_outline",
    "ScenarioOutline",
    "ExamplesResult",

    # Configuration
    "ExecutionPolicy",
    "load_policy",
    "validate_policy",

    # Core types
    "RunContext",
    "StepPhase",
    "StepWord",
    "StepRecord",
    "StepMetadata",
    "StepResult",
    "StepIO",
    "resolve_kind",

    # Errors
    "StepChainError",
    "CancellationFault",
    "StepTimeoutError",
    "AssertionFault",
    "ExamplesFault",
    "SkippedFault",
    "StepFault",
    "PolicyConfigError",

    # Execution
    "CancelToken",
    "StepHooks",
    "Executor",
    "StepPipeline",
    "record_timing",

    # Trace
    "TraceEvent",
    "TraceEventType",
    "InMemoryTraceRecorder",
]
