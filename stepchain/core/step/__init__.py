# stepchain/core/step/__init__.py
"""
Core step types for stepchain.

This package defines the basic building blocks for expressing
executable steps and the ledger entries they produce.

No side effects on import.
"""

from .types import StepPhase, StepWord, StepFn, StepRecord, StepMetadata, resolve_kind
from .results import StepResult, StepIO

__all__ = [
    "StepPhase",
    "StepWord",
    "StepFn",
    "StepRecord",
    "StepMetadata",
    "resolve_kind",
    "StepResult",
    "StepIO",
]
