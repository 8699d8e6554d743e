# stepchain/config/policy.py
"""
Execution Policy

Failure-handling configuration consumed by the executor. Built once per
run and read-only while steps execute.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ExecutionPolicy:
    """
    continue_on_error: keep running after a non-assertion fault
    halt_on_failed_assertion: rethrow assertion faults immediately
    step_timeout: per-step time limit in seconds (None = unbounded)
    mark_remaining_as_skipped_on_failure: record un-run steps as skipped
        when a fault halts the run

    The two policy switches have no implicit default; use default() for
    the usual combination.
    """

    continue_on_error: bool
    halt_on_failed_assertion: bool
    step_timeout: Optional[float] = None
    mark_remaining_as_skipped_on_failure: bool = False

    @classmethod
    def default(cls) -> "ExecutionPolicy":
        """Stop on the first fault, halt on failed assertions."""
        return cls(
            continue_on_error=False,
            halt_on_failed_assertion=True,
            step_timeout=None,
            mark_remaining_as_skipped_on_failure=False,
        )

    @classmethod
    def strict(cls) -> "ExecutionPolicy":
        """Like default(), but every step after a fault shows up as skipped."""
        return cls(
            continue_on_error=False,
            halt_on_failed_assertion=True,
            step_timeout=None,
            mark_remaining_as_skipped_on_failure=True,
        )

    @classmethod
    def lenient(cls) -> "ExecutionPolicy":
        """Run every step and collect all failures in the ledger."""
        return cls(
            continue_on_error=True,
            halt_on_failed_assertion=False,
            step_timeout=None,
            mark_remaining_as_skipped_on_failure=False,
        )

    def with_updates(self, **changes: Any) -> "ExecutionPolicy":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "continue_on_error": self.continue_on_error,
            "halt_on_failed_assertion": self.halt_on_failed_assertion,
            "step_timeout": self.step_timeout,
            "mark_remaining_as_skipped_on_failure": self.mark_remaining_as_skipped_on_failure,
        }
