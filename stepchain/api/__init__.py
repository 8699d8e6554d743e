# stepchain/api/__init__.py
"""
User-facing API for stepchain.

- given(): start a Given/When/Then chain
- ScenarioChain: the fluent builder returned by given()
- scenario_outline(): run one chain template per example row

No side effects on import.
"""

from .flow import given, ScenarioChain
from .outline import scenario_outline, ScenarioOutline, ExampleRow, ExampleResult, ExamplesResult

__all__ = [
    "given",
    "ScenarioChain",
    "scenario_outline",
    "ScenarioOutline",
    "ExampleRow",
    "ExampleResult",
    "ExamplesResult",
]
