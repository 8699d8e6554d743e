# stepchain/core/trace/__init__.py
"""
Core trace types for stepchain.

This package defines the components responsible for:
- Describing run and step lifecycle events
- Recording events through StepHooks subscriptions

No side effects on import.
"""

from .events import TraceEvent, TraceEventType, utc_now_iso
from .recorder import TraceRecorder, NullTraceRecorder, InMemoryTraceRecorder

__all__ = [
    "TraceEvent",
    "TraceEventType",
    "utc_now_iso",
    "TraceRecorder",
    "NullTraceRecorder",
    "InMemoryTraceRecorder",
]
