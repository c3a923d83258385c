"""Game event notifications — the core's only outbound interface.

The coordinator calls these at fixed points in the turn cycle. They are
fire-and-forget: implementations play sounds or queue cues for a frontend,
and must not call back into the coordinator.
"""
from abc import ABC, abstractmethod

EVENT_NAMES = (
    "dice_shake", "dice_roll", "bunco", "baby_bunco",
    "round_win", "game_win", "tick", "time_up",
)


class GameEvents(ABC):
    """Abstract event sink — each frontend provides its own implementation."""

    @abstractmethod
    def on_dice_shake(self): ...

    @abstractmethod
    def on_dice_roll(self): ...

    @abstractmethod
    def on_bunco(self): ...

    @abstractmethod
    def on_baby_bunco(self): ...

    @abstractmethod
    def on_round_win(self): ...

    @abstractmethod
    def on_game_win(self): ...

    @abstractmethod
    def on_tick(self): ...

    @abstractmethod
    def on_time_up(self): ...


class NullEvents(GameEvents):
    """Ignores every event (headless play, tests, server-side web)."""

    def on_dice_shake(self): pass
    def on_dice_roll(self): pass
    def on_bunco(self): pass
    def on_baby_bunco(self): pass
    def on_round_win(self): pass
    def on_game_win(self): pass
    def on_tick(self): pass
    def on_time_up(self): pass


class EventRecorder(GameEvents):
    """Queues event names for a frontend to drain, forwarding each to an inner sink."""

    def __init__(self, inner=None):
        self.inner = inner or NullEvents()
        self.pending = []

    def _record(self, name):
        self.pending.append(name)
        getattr(self.inner, f"on_{name}")()

    def on_dice_shake(self): self._record("dice_shake")
    def on_dice_roll(self): self._record("dice_roll")
    def on_bunco(self): self._record("bunco")
    def on_baby_bunco(self): self._record("baby_bunco")
    def on_round_win(self): self._record("round_win")
    def on_game_win(self): self._record("game_win")
    def on_tick(self): self._record("tick")
    def on_time_up(self): self._record("time_up")

    def drain(self):
        """Return and clear the queued event names, oldest first."""
        events, self.pending = self.pending, []
        return events
