# stepchain/core/errors/exceptions.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from . import codes

if TYPE_CHECKING:
    from ..context import RunContext
    from ..step import StepResult


def _safe_str(x: Any) -> str:
    try:
        return str(x)
    except Exception:
        return "<unstringifiable>"


@dataclass(eq=False)
class StepChainError(Exception):
    """
    Base exception for everything the engine raises or records.

    Every fault carries a stable error_code so reporters can group
    failures without inspecting exception types.
    """
    message: str
    error_code: str = codes.UNKNOWN
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class CancellationFault(StepChainError):
    """
    Cooperative cancellation.

    Raised by CancelToken.raise_if_cancelled(). When the caller's own token
    fired, the executor always propagates it; otherwise (e.g. a per-step
    timeout) it is handled like any other step fault.
    """

    def __init__(self, message: str = "Operation was cancelled.", *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code=codes.CANCELLED, details=details or {})


class StepTimeoutError(CancellationFault):
    """A step did not finish within ExecutionPolicy.step_timeout."""

    def __init__(self, timeout: float, *, title: str = ""):
        CancellationFault.__init__(
            self,
            f"Step timed out after {timeout:g}s" + (f": {title}" if title else ""),
            details={"timeout_s": timeout},
        )
        self.error_code = codes.TIMEOUT
        self.timeout = timeout


class AssertionFault(StepChainError, AssertionError):
    """
    An expected condition was not met.

    Subclasses AssertionError so plain `assert` statements inside steps and
    this fault land in the same category.
    """

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code=codes.ASSERTION_FAILED, details=details or {})


class ExamplesFault(AssertionFault):
    """
    One or more rows of a scenario outline failed.

    `failures` holds the failed ExampleResult entries, each with its own
    context and error.
    """

    def __init__(self, message: str, failures: List[Any]):
        AssertionFault.__init__(
            self,
            message,
            details={"failed_indexes": [f.index for f in failures]},
        )
        self.error_code = codes.EXAMPLES_FAILED
        self.failures = failures


class SkippedFault(StepChainError):
    """Synthetic fault attached to steps drained without running."""

    def __init__(self, message: str = "Skipped due to previous failure."):
        super().__init__(message=message, error_code=codes.SKIPPED)


class StepFault(StepChainError):
    """
    A step raised and the policy halted the run.

    The original exception is available as `cause` (and `__cause__`);
    `context` is the run's ledger at the moment of failure.
    """

    def __init__(self, message: str, context: "RunContext", cause: BaseException):
        super().__init__(
            message=message,
            error_code=codes.STEP_FAILED,
            details={"cause_type": type(cause).__name__, "cause": _safe_str(cause)},
        )
        self.context = context
        self.cause = cause

    @property
    def failed_step(self) -> Optional["StepResult"]:
        """The ledger entry of the step that raised."""
        for result in reversed(self.context.steps):
            if result.error is self.cause:
                return result
        return None


class PolicyConfigError(StepChainError):
    """Invalid or unreadable execution policy configuration."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, error_code=codes.INVALID_CONFIG, details=details or {})
