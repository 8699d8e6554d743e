# stepchain/core/executor/__init__.py
"""
Core executor types for stepchain.

This package defines the components responsible for:
- Executing queued steps in order
- Cooperative cancellation and per-step timeouts
- Notifying observers around each step

No side effects on import.
"""

from .cancellation import CancelToken
from .hooks import StepHooks, record_timing
from .executor import Executor
from .pipeline import StepPipeline

__all__ = [
    "CancelToken",
    "StepHooks",
    "record_timing",
    "Executor",
    "StepPipeline",
]
