# stepchain/core/context.py
"""
Run context: the ledger of a single run.

One RunContext belongs to exactly one run. It is never shared between
concurrent runs, so nothing here is locked; parallel scenarios each get
their own context.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Tuple

from ..config.policy import ExecutionPolicy
from .step import StepIO, StepResult


def generate_run_id() -> str:
    return uuid.uuid4().hex[:8]


class RunContext:
    """
    Holds everything a run produces:
    - steps: ordered StepResult entries (attempted and skip-drained)
    - io: StepIO lineage for attempted steps only
    - current_value: the last successfully produced value (or the seed)

    The executor is the only writer; everyone else reads after (or during,
    via hooks) the run.
    """

    def __init__(
        self,
        name: str = "",
        policy: Optional[ExecutionPolicy] = None,
        run_id: Optional[str] = None,
    ) -> None:
        self.name = name
        self.policy = policy or ExecutionPolicy.default()
        self.run_id = run_id or generate_run_id()
        self.current_value: Any = None
        self._steps: List[StepResult] = []
        self._io: List[StepIO] = []
        self._metadata: Dict[str, Any] = {}

    # ---- ledger ----

    @property
    def steps(self) -> Tuple[StepResult, ...]:
        return tuple(self._steps)

    @property
    def io(self) -> Tuple[StepIO, ...]:
        return tuple(self._io)

    def add_step(self, result: StepResult) -> None:
        self._steps.append(result)

    def add_io(self, io: StepIO) -> None:
        self._io.append(io)

    @property
    def all_passed(self) -> bool:
        return all(s.passed for s in self._steps)

    @property
    def first_failure(self) -> Optional[StepResult]:
        return next((s for s in self._steps if not s.passed), None)

    @property
    def failed_steps(self) -> List[StepResult]:
        """Steps that ran and failed (skip-drained entries excluded)."""
        return [s for s in self._steps if not s.passed and not s.skipped]

    # ---- metadata ----

    def set_metadata(self, key: str, value: Any) -> None:
        self._metadata[key] = value

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self._metadata.get(key, default)

    @property
    def metadata(self) -> Dict[str, Any]:
        return dict(self._metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "name": self.name,
            "policy": self.policy.to_dict(),
            "all_passed": self.all_passed,
            "steps": [s.to_dict() for s in self._steps],
        }

    def __repr__(self) -> str:
        return f"RunContext(run_id={self.run_id!r}, name={self.name!r}, steps={len(self._steps)})"
