# stepchain/core/errors/__init__.py
"""
Core error types for stepchain.

This package defines the fault taxonomy the executor records and raises:
- Cancellation (caller cancelled, or a step timed out)
- Assertion faults (expected condition not met)
- Step faults (any other exception, wrapped with the run ledger)
- Skipped faults (synthetic, for steps that never ran)

No side effects on import.
"""

from . import codes
from .exceptions import (
    StepChainError,
    CancellationFault,
    StepTimeoutError,
    AssertionFault,
    ExamplesFault,
    SkippedFault,
    StepFault,
    PolicyConfigError,
)

__all__ = [
    "codes",
    "StepChainError",
    "CancellationFault",
    "StepTimeoutError",
    "AssertionFault",
    "ExamplesFault",
    "SkippedFault",
    "StepFault",
    "PolicyConfigError",
]
