# stepchain/core/errors/codes.py
from __future__ import annotations

from typing import Final


# ---- canonical error codes (stable public contract) ----
UNKNOWN: Final[str] = "UNKNOWN"
INVALID_CONFIG: Final[str] = "INVALID_CONFIG"

# step outcomes
STEP_FAILED: Final[str] = "STEP_FAILED"
ASSERTION_FAILED: Final[str] = "ASSERTION_FAILED"
EXAMPLES_FAILED: Final[str] = "EXAMPLES_FAILED"
SKIPPED: Final[str] = "SKIPPED"

# cancellation
CANCELLED: Final[str] = "CANCELLED"
TIMEOUT: Final[str] = "TIMEOUT"


# ---- semantic groups ----

CANCELLATION_CODES: Final[set[str]] = {
    CANCELLED,
    TIMEOUT,
}
