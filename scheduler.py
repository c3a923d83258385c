"""Scheduler — One-shot delayed calls on an explicit clock.

The coordinator owns a single Scheduler for every timer in the game: the
human countdown, bot thinking delays, the roll in flight and the pause
before the next turn. Each pending call has a kind; scheduling a kind again
replaces the pending call of that kind, and a reset is one cancel_all().

Time only moves when advance() or run_next() is called, so frontends drive it
from their frame loop and tests drive it directly.
"""
from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable


@dataclass(order=True)
class ScheduledCall:
    """A pending callback. Ordered by due time, then by scheduling order."""
    due: float
    seq: int
    kind: str = field(compare=False)
    callback: Callable[[], object] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)


class Scheduler:
    """Cancellable delayed calls keyed by kind."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[ScheduledCall] = []
        self._pending: dict[str, ScheduledCall] = {}
        self._seq = itertools.count()

    def schedule(self, kind: str, delay: float, callback: Callable[[], object]) -> ScheduledCall:
        """Call callback after delay seconds, replacing any pending call of this kind."""
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self.cancel(kind)
        call = ScheduledCall(due=self.now + delay, seq=next(self._seq), kind=kind, callback=callback)
        heapq.heappush(self._queue, call)
        self._pending[kind] = call
        return call

    def cancel(self, kind: str) -> bool:
        """Cancel the pending call of this kind. Returns True if one was pending."""
        call = self._pending.pop(kind, None)
        if call is None:
            return False
        call.cancelled = True
        return True

    def cancel_all(self) -> None:
        """Cancel every pending call."""
        for call in self._pending.values():
            call.cancelled = True
        self._pending.clear()
        self._queue.clear()

    def is_pending(self, kind: str) -> bool:
        return kind in self._pending

    def time_until(self, kind: str) -> float | None:
        """Seconds until the pending call of this kind fires, or None."""
        call = self._pending.get(kind)
        if call is None:
            return None
        return max(0.0, call.due - self.now)

    def pending_kinds(self) -> list[str]:
        """Kinds with a pending call, soonest first."""
        return [c.kind for c in sorted(self._pending.values())]

    def _pop_next(self) -> ScheduledCall | None:
        while self._queue:
            call = heapq.heappop(self._queue)
            if not call.cancelled:
                return call
        return None

    def _fire(self, call: ScheduledCall) -> None:
        self.now = max(self.now, call.due)
        if self._pending.get(call.kind) is call:
            del self._pending[call.kind]
        call.callback()

    def advance(self, dt: float) -> int:
        """Move the clock forward by dt, firing every call that falls due.

        Calls scheduled by a callback fire too if they fall inside the window.
        Returns the number of calls fired.
        """
        end = self.now + dt
        fired = 0
        while self._queue:
            call = self._pop_next()
            if call is None:
                break
            if call.due > end:
                heapq.heappush(self._queue, call)
                break
            self._fire(call)
            fired += 1
        self.now = end
        return fired

    def run_next(self) -> str | None:
        """Jump the clock to the earliest pending call and fire it.

        Returns the kind that fired, or None if nothing was pending.
        """
        call = self._pop_next()
        if call is None:
            return None
        self._fire(call)
        return call.kind
