# stepchain/core/step/types.py
"""
Step records and the phase/connective keyword resolver.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Union

if TYPE_CHECKING:
    from ..executor.cancellation import CancelToken


class StepPhase(str, Enum):
    """Role of a step: setup, action or verification."""
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"


class StepWord(str, Enum):
    """Connective used to introduce a step within its phase."""
    PRIMARY = "Primary"
    AND = "And"
    BUT = "But"


StepFn = Callable[[Any, "CancelToken"], Union[Any, Awaitable[Any]]]


def resolve_kind(phase: StepPhase, word: StepWord) -> str:
    """Display keyword for a step: And/But for connectives, else the phase name."""
    if word is StepWord.AND:
        return "And"
    if word is StepWord.BUT:
        return "But"
    return phase.value


@dataclass(frozen=True)
class StepMetadata:
    """
    What hooks see before a step runs.

    Carries no state value so observers stay state-agnostic.
    """
    kind: str
    title: str
    phase: StepPhase
    word: StepWord


@dataclass(frozen=True)
class StepRecord:
    """
    One unit of declared work.

    exec receives the current state and a cancel token and returns the next
    state, either directly or as an awaitable.
    """
    phase: StepPhase
    word: StepWord
    title: str
    exec: StepFn

    @property
    def kind(self) -> str:
        return resolve_kind(self.phase, self.word)

    @property
    def display_title(self) -> str:
        if not self.title or not self.title.strip():
            return self.phase.value
        return self.title

    def metadata(self) -> StepMetadata:
        return StepMetadata(
            kind=self.kind,
            title=self.display_title,
            phase=self.phase,
            word=self.word,
        )
