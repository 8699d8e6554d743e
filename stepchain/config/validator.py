# stepchain/config/validator.py
"""
Policy Validator

Validates an ExecutionPolicy for illegal/misleading combinations.
Returns structured issues with level (warn/error), path, message, hint.
"""

from typing import List, Literal
from dataclasses import dataclass

from .policy import ExecutionPolicy


@dataclass(frozen=True)
class ConfigIssue:
    """
    Policy validation issue

    Structured output for logging and callers.
    """
    level: Literal["warn", "error"]
    path: str  # e.g., "execution.step_timeout"
    message: str
    hint: str = ""

    def __str__(self) -> str:
        hint_str = f"\n   Hint: {self.hint}" if self.hint else ""
        return f"[{self.level}] [{self.path}] {self.message}{hint_str}"


def validate_policy(policy: ExecutionPolicy) -> List[ConfigIssue]:
    """
    Validate a policy.

    Returns:
        List of issues (warn/error level)
    """
    issues = []

    if policy.step_timeout is not None and policy.step_timeout <= 0:
        issues.append(ConfigIssue(
            level="error",
            path="execution.step_timeout",
            message=f"step_timeout must be positive, got {policy.step_timeout}",
            hint="Use null to disable the per-step timeout",
        ))

    # Skip-drain only happens on a halting fault
    if policy.continue_on_error and policy.mark_remaining_as_skipped_on_failure:
        issues.append(ConfigIssue(
            level="warn",
            path="execution.mark_remaining_as_skipped_on_failure",
            message="mark_remaining_as_skipped_on_failure has no effect when continue_on_error=true",
            hint="Set continue_on_error=false to skip-drain after a fault",
        ))

    return issues


def has_errors(issues: List[ConfigIssue]) -> bool:
    return any(issue.level == "error" for issue in issues)
