"""Game log for Bunco — records rolls and round wins for the recent-rolls feed.

Pure Python, no pygame dependency.
"""
from __future__ import annotations

from dataclasses import dataclass

from bunco_engine import ScoreKind, Team


@dataclass
class LogEntry:
    """A single logged game event."""
    round_number: int                           # 1-6
    player_index: int                           # seat index
    event_type: str                             # "roll", "round_win"
    dice_values: tuple[int, ...] = ()
    kind: ScoreKind | None = None
    points: int | None = None
    team: Team | None = None


class GameLog:
    """Accumulates LogEntry records during a game."""

    def __init__(self) -> None:
        self.entries: list[LogEntry] = []

    def log_roll(self, round_number: int, player_index: int, dice_values, kind: ScoreKind, points: int) -> None:
        """Record a landed roll."""
        self.entries.append(LogEntry(
            round_number=round_number,
            player_index=player_index,
            event_type="roll",
            dice_values=tuple(dice_values),
            kind=kind,
            points=points,
        ))

    def log_round_win(self, round_number: int, player_index: int, team: Team) -> None:
        """Record the roll that took a round."""
        self.entries.append(LogEntry(
            round_number=round_number,
            player_index=player_index,
            event_type="round_win",
            team=team,
        ))

    def recent(self, limit: int = 8) -> list[LogEntry]:
        """Return the most recent entries, newest last."""
        return self.entries[-limit:] if limit > 0 else []

    def clear(self) -> None:
        """Remove all entries."""
        self.entries = []
