# stepchain/core/trace/events.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TraceEventType(str, Enum):
    RUN_START = "RUN_START"
    STEP_START = "STEP_START"
    STEP_OK = "STEP_OK"
    STEP_FAIL = "STEP_FAIL"
    STEP_CANCELLED = "STEP_CANCELLED"
    RUN_END = "RUN_END"


@dataclass(frozen=True)
class TraceEvent:
    """
    Minimal trace event.
    Keep it JSON-serializable.
    """
    type: TraceEventType
    ts: str
    run_id: str

    # Step events only
    kind: Optional[str] = None
    title: Optional[str] = None
    duration_ms: Optional[float] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        return {k: v for k, v in data.items() if v is not None}
