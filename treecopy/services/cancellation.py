"""Run lifecycle and cooperative cancellation."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from ..core.exceptions import CopyInProgressError
from ..core.models import RunPhase


class CancellationToken:
    """Cancellation flag for a single run.

    Once set it stays set; a new run gets a new token. Participants poll
    ``is_cancelled`` at their own checkpoints, nothing is interrupted.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()


class RunController:
    """State machine for the runs of one engine.

    Phases move IDLE -> VALIDATING -> COPYING -> TERMINAL, and TERMINAL
    back to VALIDATING when the next run starts. Phase and configuration
    changes share one lock; the token carries its own synchronization so
    the hot cancellation check never contends with it.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._phase = RunPhase.IDLE
        self._token: Optional[CancellationToken] = None

    @property
    def phase(self) -> RunPhase:
        with self._lock:
            return self._phase

    @property
    def token(self) -> Optional[CancellationToken]:
        """Token of the current (or most recent) run."""
        with self._lock:
            return self._token

    def is_in_progress(self) -> bool:
        with self._lock:
            return self._phase.is_active

    def begin(self) -> Optional[CancellationToken]:
        """Claim the engine for a new run.

        Returns:
            A fresh token, or None if another run is active.
        """
        with self._lock:
            if self._phase.is_active:
                return None
            self._phase = RunPhase.VALIDATING
            self._token = CancellationToken()
            return self._token

    def start_copying(self) -> None:
        with self._lock:
            if self._phase != RunPhase.VALIDATING:
                raise RuntimeError(f"Cannot start copying from phase {self._phase.value}")
            self._phase = RunPhase.COPYING

    def finish(self) -> None:
        with self._lock:
            self._phase = RunPhase.TERMINAL

    def cancel(self) -> bool:
        """Request cancellation of the active run.

        Returns:
            True if a run was active and has been signalled.
        """
        with self._lock:
            if not self._phase.is_active or self._token is None:
                return False
            self._token.cancel()
            return True

    @contextmanager
    def idle(self, action: str = "modify the engine") -> Iterator[None]:
        """Hold the lock for a mutation that is only allowed between runs.

        Raises:
            CopyInProgressError: If a run is active.
        """
        with self._lock:
            if self._phase.is_active:
                raise CopyInProgressError(action)
            yield
