"""FrontendAdapter — Shared UI state management for all Bunco frontends.

Owns overlay state, settings persistence, sound toggling, event draining,
the bot "thinking" caption, and the JSON snapshot pushed to the browser.
Pure Python — no pygame or other frontend dependency.

Each frontend (TUI, web) creates a FrontendAdapter wrapping a GameCoordinator
and delegates UI-state logic here, keeping only rendering and input
translation frontend-specific.
"""

from bot_ai import thinking_message
from game_config import PRESET_NAMES, preset_name_for
from game_events import EventRecorder, NullEvents
from settings import load_settings, save_settings


# ── Shared constants ─────────────────────────────────────────────────────────

TEAM_LABELS = {"red": "Red Team", "blue": "Blue Team"}

RULES_TEXT = [
    "Round N: dice showing N score 1 point each, keep rolling.",
    "Three N's is a BUNCO: 21 points, turn over.",
    "Three of any other number is a Baby Bunco: 5 points, turn over.",
    "No N's: turn over.",
    "First to 21 wins the round for their team.",
    "First team to 4 round wins takes the game.",
]


# ── Sound fallback ────────────────────────────────────────────────────────────

class NullSound(NullEvents):
    """Silent sound sink for frontends without audio (server-side web, headless TUI)."""

    def __init__(self):
        self._enabled = False

    def toggle(self):
        self._enabled = not self._enabled
        return self._enabled

    @property
    def enabled(self):
        return self._enabled

    @enabled.setter
    def enabled(self, value):
        self._enabled = bool(value)


# ── Frontend Adapter ──────────────────────────────────────────────────────────

class FrontendAdapter:
    """Shared UI state management for all Bunco frontends.

    Wraps a GameCoordinator, routes its events through an EventRecorder so the
    frontend can react to them, and manages overlays and settings.
    """

    def __init__(self, coordinator, sound=None):
        self.coordinator = coordinator
        self.sound = sound or NullSound()
        self.recorder = EventRecorder(self.sound)
        coordinator.events = self.recorder

        # Overlay state
        self.showing_help = False

        # Settings
        self.dark_mode = False

        # Bot caption, picked once per thinking pause
        self.bot_message = ""

        # Events drained on the latest update(), for the snapshot
        self.last_events = []

    # ── Overlay management ────────────────────────────────────────────────

    def toggle_help(self):
        """Toggle the rules/help overlay."""
        self.showing_help = not self.showing_help

    def close_top_overlay(self):
        """Close the topmost overlay. Returns True if an overlay was closed."""
        if self.showing_help:
            self.showing_help = False
            return True
        return False

    @property
    def is_input_blocked(self):
        """Whether game input should be blocked."""
        return self.showing_help

    # ── Settings ──────────────────────────────────────────────────────────

    def load_settings(self):
        """Load persisted settings and apply to adapter + coordinator."""
        settings = load_settings()
        self.sound.enabled = settings.get("sound_enabled", True)
        self.dark_mode = settings.get("dark_mode", False)
        preset = settings.get("probability_preset")
        if preset in PRESET_NAMES:
            self.coordinator.apply_probability_preset(preset)

    def _save_settings(self):
        """Persist current settings to disk."""
        save_settings({
            "sound_enabled": self.sound.enabled,
            "dark_mode": self.dark_mode,
            "probability_preset": self.preset_name,
        })

    @property
    def preset_name(self):
        """Name of the active probability preset ("custom" if none matches)."""
        return preset_name_for(self.coordinator.config.probabilities) or "custom"

    def toggle_dark_mode(self):
        """Toggle dark mode and save."""
        self.dark_mode = not self.dark_mode
        self._save_settings()

    def toggle_sound(self):
        """Toggle sound and save."""
        self.sound.toggle()
        self._save_settings()

    def cycle_probability_preset(self):
        """Switch to the next roll-override preset and save. Returns its name."""
        current = self.preset_name
        idx = PRESET_NAMES.index(current) if current in PRESET_NAMES else -1
        name = PRESET_NAMES[(idx + 1) % len(PRESET_NAMES)]
        self.coordinator.apply_probability_preset(name)
        self._save_settings()
        return name

    # ── Game actions ──────────────────────────────────────────────────────

    def do_roll(self):
        """Roll for the human player. Returns True if a roll started."""
        if self.is_input_blocked or not self.coordinator.is_current_player_human:
            return False
        return self.coordinator.request_roll()

    def do_reset(self):
        """Start a new game."""
        self.coordinator.reset()
        self.recorder.drain()
        self.bot_message = ""
        self.last_events = []

    # ── Per-frame update ──────────────────────────────────────────────────

    def update(self, dt):
        """Advance game time and collect what happened.

        Returns the list of event names fired during this frame, oldest first.
        """
        coord = self.coordinator
        coord.tick(dt)

        if coord.time_until_bot_roll is not None:
            if not self.bot_message:
                self.bot_message = thinking_message(coord.rng)
        else:
            self.bot_message = ""

        self.last_events = self.recorder.drain()
        return self.last_events

    # ── Full state snapshot (for web frontend) ────────────────────────────

    def get_game_snapshot(self):
        """Return a complete JSON-serializable dict of game + UI state.

        Used by the web frontend to push full state over WebSocket.
        """
        coord = self.coordinator
        state = coord.state
        turn = state.turn

        players = [{
            "id": p.id,
            "name": p.name,
            "team": p.team.value,
            "is_human": p.is_human,
            "seat": p.seat.value,
            "score": p.score,
            "is_current": i == turn.current_player and not coord.game_over,
        } for i, p in enumerate(state.players)]

        last_result = None
        if turn.last_result is not None:
            last_result = {
                "points": turn.last_result.points,
                "kind": turn.last_result.kind.value,
                "ends_turn": turn.last_result.ends_turn,
                "message": turn.last_result.message,
            }

        recent_rolls = [{
            "round": e.round_number,
            "player": state.players[e.player_index].name,
            "dice": list(e.dice_values),
            "kind": e.kind.value,
            "points": e.points,
        } for e in coord.game_log.recent(8) if e.event_type == "roll"]

        return {
            "players": players,
            "round": {
                "number": state.round.number,
                "target": state.round.target,
                "wins": {"red": state.round.red_wins, "blue": state.round.blue_wins},
                "rounds_to_win": coord.config.rules.rounds_to_win_game,
            },
            "turn": {
                "current_player": turn.current_player,
                "turn_score": turn.turn_score,
                "consecutive_rolls": turn.consecutive_rolls,
                "is_rolling": turn.is_rolling,
                "is_turn_ending": turn.is_turn_ending,
                "dice": list(turn.last_roll),
                "matching_indices": list(turn.matches.indices),
                "labels": list(turn.matches.labels),
                "timer": turn.timer,
                "timer_active": turn.timer_active,
            },
            "last_result": last_result,
            "game_over": coord.game_over,
            "winner": coord.winner.value if coord.winner else None,
            "is_human_turn": coord.is_current_player_human,
            "can_roll": coord.is_current_player_human and coord.can_roll_now,
            "bot_message": self.bot_message,
            "events": list(self.last_events),
            "recent_rolls": recent_rolls,
            "preset": self.preset_name,
            "showing_help": self.showing_help,
            "dark_mode": self.dark_mode,
            "sound_enabled": self.sound.enabled,
        }
