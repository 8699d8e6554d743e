# stepchain/core/step/results.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import SkippedFault, StepChainError, codes


@dataclass(frozen=True)
class StepResult:
    """
    Ledger entry for one executed (or skip-drained) step.

    A step cancelled by the caller is recorded with error=None and
    cancelled=True; the cancellation itself propagates out of the run.
    """
    kind: str
    title: str
    duration_ms: float = 0.0
    error: Optional[BaseException] = None
    cancelled: bool = False

    @property
    def passed(self) -> bool:
        return self.error is None

    @property
    def skipped(self) -> bool:
        return isinstance(self.error, SkippedFault)

    @property
    def error_code(self) -> Optional[str]:
        """Stable code for the recorded error; foreign exceptions map by category."""
        if self.error is None:
            return None
        if isinstance(self.error, StepChainError):
            return self.error.error_code
        if isinstance(self.error, AssertionError):
            return codes.ASSERTION_FAILED
        return codes.STEP_FAILED

    def to_dict(self) -> Dict[str, Any]:
        error: Optional[Dict[str, Any]] = None
        if isinstance(self.error, StepChainError):
            error = self.error.to_dict()
        elif self.error is not None:
            error = {"type": type(self.error).__name__, "message": str(self.error)}
        return {
            "kind": self.kind,
            "title": self.title,
            "duration_ms": round(self.duration_ms, 3),
            "passed": self.passed,
            "skipped": self.skipped,
            "cancelled": self.cancelled,
            "error_code": self.error_code,
            "error": error,
        }


@dataclass(frozen=True)
class StepIO:
    """Input/output lineage of one attempted step."""
    kind: str
    title: str
    input: Any = None
    output: Any = None
