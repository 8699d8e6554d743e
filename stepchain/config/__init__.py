# stepchain/config/__init__.py
"""
stepchain configuration

Design principles:
1. ExecutionPolicy is built once per run and never mutated
2. Code has the defaults; YAML files are optional input
3. Policy files are validated against a versioned pydantic contract
"""

from .policy import ExecutionPolicy
from .validator import validate_policy, ConfigIssue
from .contracts import PolicyFileV1, ExecutionPolicyV1
from .loader import load_policy, policy_from_dict, dump_policy

__all__ = [
    "ExecutionPolicy",
    "validate_policy",
    "ConfigIssue",
    "PolicyFileV1",
    "ExecutionPolicyV1",
    "load_policy",
    "policy_from_dict",
    "dump_policy",
]
