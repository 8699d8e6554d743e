# stepchain/config/loader.py
"""
Policy Loader

Loads an ExecutionPolicy from YAML with code defaults as fallback.

Design principle:
- Code = truth (ExecutionPolicy.default())
- YAML = input parameters (optional)
- An explicitly named file must exist and be valid
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from ..core.errors import PolicyConfigError
from .contracts import PolicyFileV1
from .policy import ExecutionPolicy
from .validator import has_errors, validate_policy

logger = logging.getLogger(__name__)


def default_policy_paths() -> list[Path]:
    """Locations searched when no explicit path is given, in order."""
    return [
        Path.cwd() / "stepchain.yml",
        Path.home() / ".stepchain" / "policy.yml",
    ]


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise PolicyConfigError(f"Invalid YAML in {path}: {e}", details={"path": str(path)}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PolicyConfigError(
            f"Policy file {path} must contain a mapping, got {type(data).__name__}",
            details={"path": str(path)},
        )
    return data


def policy_from_dict(data: Dict[str, Any], *, source: str = "<dict>") -> ExecutionPolicy:
    """Compile raw policy data (as read from YAML) into an ExecutionPolicy."""
    try:
        contract = PolicyFileV1.model_validate(data)
    except ValidationError as e:
        raise PolicyConfigError(
            f"Invalid policy in {source}: {e.error_count()} error(s)",
            details={"source": source, "errors": e.errors(include_url=False)},
        ) from e

    policy = contract.to_policy()
    issues = validate_policy(policy)
    for issue in issues:
        if issue.level == "warn":
            logger.warning("Policy %s: %s", source, issue)
    if has_errors(issues):
        raise PolicyConfigError(
            f"Invalid policy in {source}: " + "; ".join(i.message for i in issues if i.level == "error"),
            details={"source": source},
        )
    return policy


def load_policy(config_path: Optional[Union[str, Path]] = None) -> ExecutionPolicy:
    """
    Load the execution policy.

    Args:
        config_path: Optional path to a YAML file. If None, tries
            default_policy_paths() and falls back to ExecutionPolicy.default().

    Returns:
        ExecutionPolicy instance

    Raises:
        PolicyConfigError: the explicit file is missing, or any file found
            is unreadable or invalid
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise PolicyConfigError(f"Policy file not found: {path}", details={"path": str(path)})
        return policy_from_dict(_read_yaml(path), source=str(path))

    for path in default_policy_paths():
        if path.exists():
            logger.debug("Loading execution policy from %s", path)
            return policy_from_dict(_read_yaml(path), source=str(path))

    return ExecutionPolicy.default()


def dump_policy(policy: ExecutionPolicy) -> str:
    """Render a policy as a YAML document that load_policy() accepts."""
    return yaml.safe_dump(PolicyFileV1.from_policy(policy).model_dump(), sort_keys=False)


__all__ = [
    "load_policy",
    "policy_from_dict",
    "dump_policy",
    "default_policy_paths",
]
