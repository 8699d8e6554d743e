# stepchain/config/contracts.py
"""
PolicyFileV1: on-disk execution policy contract (versioned schema).

YAML policy files are parsed into this model and then compiled into an
ExecutionPolicy.

Design principles:
- Serializable (JSON-compatible)
- Version-controlled
- Unknown keys are rejected
"""

from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .policy import ExecutionPolicy


class ExecutionPolicyV1(BaseModel):
    """
    Execution section of a policy file.

    The two switches mirror ExecutionPolicy.default() when omitted.
    """
    model_config = ConfigDict(extra="forbid")

    continue_on_error: bool = Field(
        default=False,
        description="Keep running steps after a non-assertion fault",
    )
    halt_on_failed_assertion: bool = Field(
        default=True,
        description="Rethrow assertion faults immediately",
    )
    step_timeout: Optional[float] = Field(
        default=None,
        description="Per-step timeout in seconds (null = no timeout)",
    )
    mark_remaining_as_skipped_on_failure: bool = Field(
        default=False,
        description="Record un-run steps as skipped when a fault halts the run",
    )


class PolicyFileV1(BaseModel):
    """
    PolicyFileV1: the canonical policy file layout.

    - version: schema version (for future migrations)
    - execution: failure-handling switches
    - metadata: provenance (author, source, etc.)
    """
    model_config = ConfigDict(extra="forbid")

    version: Literal["v1"] = Field(default="v1", description="Policy schema version")
    execution: ExecutionPolicyV1 = Field(
        default_factory=ExecutionPolicyV1,
        description="Execution policy switches",
    )
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Policy metadata (author, source, etc.)",
    )

    def to_policy(self) -> ExecutionPolicy:
        e = self.execution
        return ExecutionPolicy(
            continue_on_error=e.continue_on_error,
            halt_on_failed_assertion=e.halt_on_failed_assertion,
            step_timeout=e.step_timeout,
            mark_remaining_as_skipped_on_failure=e.mark_remaining_as_skipped_on_failure,
        )

    @classmethod
    def from_policy(cls, policy: ExecutionPolicy) -> "PolicyFileV1":
        return cls(execution=ExecutionPolicyV1(**policy.to_dict()))
