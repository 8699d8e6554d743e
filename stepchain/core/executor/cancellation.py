# stepchain/core/executor/cancellation.py
"""
Cooperative cancellation tokens.

A token never interrupts running code by itself. Steps poll `cancelled`
or call `raise_if_cancelled()`; the executor checks the caller's token
between steps. Linked tokens add a deadline on top of their parent, which
is how per-step timeouts reach the step.
"""

from __future__ import annotations

import time
from typing import Optional

from ..errors import CancellationFault, StepTimeoutError


class CancelToken:

    def __init__(self, parent: Optional["CancelToken"] = None, timeout: Optional[float] = None) -> None:
        self._parent = parent
        self._cancelled = False
        self._timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    @classmethod
    def none(cls) -> "CancelToken":
        """A fresh token nobody else holds, so it is never cancelled."""
        return cls()

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def timed_out(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        if self._cancelled or self.timed_out:
            return True
        return self._parent is not None and self._parent.cancelled

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None when there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def linked(self, timeout: Optional[float] = None) -> "CancelToken":
        """Child token: cancelled when this one is, or when its own deadline passes."""
        return CancelToken(parent=self, timeout=timeout)

    def raise_if_cancelled(self) -> None:
        # Parent first: an external cancel must not be reported as a timeout.
        if self._parent is not None:
            self._parent.raise_if_cancelled()
        if self._cancelled:
            raise CancellationFault()
        if self.timed_out:
            raise StepTimeoutError(self._timeout or 0.0)

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled}, remaining={self.remaining()})"
