#!/usr/bin/env python3
"""
Bunco TUI — Terminal-based frontend using Textual.

Keyboard-driven interface with box-art dice, the four-seat table,
round/team tally, countdown, and a recent-rolls feed.
"""
import logging
import random

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Center, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Static
from textual import on

from bunco_engine import Seat
from game_coordinator import GameCoordinator, coordinator_from_args, parse_args
from frontend_adapter import FrontendAdapter, NullSound, RULES_TEXT, TEAM_LABELS

logger = logging.getLogger(__name__)

FRAME_SECONDS = 1 / 20


# ── Box-art die faces ─────────────────────────────────────────────────────────

BOX_ART = {
    1: ["┌───────┐", "│       │", "│   ●   │", "│       │", "└───────┘"],
    2: ["┌───────┐", "│ ●     │", "│       │", "│     ● │", "└───────┘"],
    3: ["┌───────┐", "│ ●     │", "│   ●   │", "│     ● │", "└───────┘"],
    4: ["┌───────┐", "│ ●   ● │", "│       │", "│ ●   ● │", "└───────┘"],
    5: ["┌───────┐", "│ ●   ● │", "│   ●   │", "│ ●   ● │", "└───────┘"],
    6: ["┌───────┐", "│ ●   ● │", "│ ●   ● │", "│ ●   ● │", "└───────┘"],
}

# Scoring dice get a double border
BOX_ART_MATCH = {
    v: [
        line.replace("┌", "╔").replace("┐", "╗")
        .replace("└", "╚").replace("┘", "╝")
        .replace("─", "═").replace("│", "║")
        for line in lines
    ]
    for v, lines in BOX_ART.items()
}

TEAM_COLORS = {"red": "red", "blue": "dodger_blue1"}


def render_dice_box(dice, matching_indices, labels, is_rolling):
    """Render three dice as box art, side by side, with score labels below."""
    lines = []
    for row in range(5):
        parts = []
        for i, value in enumerate(dice):
            if is_rolling:
                parts.append(BOX_ART[random.randint(1, 6)][row])
            elif i in matching_indices:
                parts.append(f"[green]{BOX_ART_MATCH[value][row]}[/green]")
            else:
                parts.append(BOX_ART[value][row])
        lines.append("  ".join(parts))
    if not is_rolling:
        lines.append("  ".join(f"{label:^9}" for label in labels))
    return "\n".join(lines)


# ── Widgets ──────────────────────────────────────────────────────────────────

class DiceDisplay(Static):
    """Renders the last roll (or tumbling dice while a roll is in flight)."""

    def render(self):
        turn = self.app.coordinator.state.turn
        return render_dice_box(turn.last_roll, turn.matches.indices, turn.matches.labels,
                               turn.is_rolling)


class TableDisplay(Static):
    """Shows the four seats, top row then bottom row, with scores."""

    def render(self):
        coord = self.app.coordinator
        state = coord.state
        by_seat = {p.seat: (i, p) for i, p in enumerate(state.players)}

        def cell(seat):
            i, p = by_seat[seat]
            color = TEAM_COLORS[p.team.value]
            marker = "▸" if i == state.turn.current_player and not coord.game_over else " "
            who = "you" if p.is_human else "bot"
            return f"{marker}[{color}]{p.name:<12}[/{color}] ({who}) {p.score:>2}"

        return "\n".join([
            f"{cell(Seat.TOP_LEFT)}     {cell(Seat.TOP_RIGHT)}",
            "",
            f"{cell(Seat.BOTTOM_LEFT)}     {cell(Seat.BOTTOM_RIGHT)}",
        ])


class StatusDisplay(Static):
    """Shows the last result, the countdown or the bot caption."""

    def render(self):
        app = self.app
        coord = app.coordinator
        turn = coord.state.turn
        lines = []

        if coord.game_over:
            label = TEAM_LABELS[coord.winner.value]
            lines.append(f"[bold]═══ {label.upper()} WINS THE GAME ═══[/bold]")
            lines.append("[dim]Press N for a new game[/dim]")
            return "\n".join(lines)

        if turn.last_result is not None:
            lines.append(f"[bold]{turn.last_result.message}[/bold]")
        if turn.is_rolling:
            lines.append("Rolling...")
        elif coord.is_current_player_human and turn.timer_active:
            style = "bold red" if turn.timer < 3 else "bold"
            lines.append(f"Your roll! [{style}]{turn.timer}s[/{style}]  (Space)")
        elif app.adapter.bot_message:
            lines.append(f"[dim]{coord.current_player.name}: {app.adapter.bot_message}[/dim]")
        return "\n".join(lines)


class RecentRollsDisplay(Static):
    """The last few rolls, newest first."""

    def render(self):
        coord = self.app.coordinator
        players = coord.state.players
        lines = ["[bold]Recent rolls[/bold]"]
        for e in reversed(coord.game_log.recent(10)):
            name = players[e.player_index].name
            if e.event_type == "round_win":
                lines.append(f"[yellow]R{e.round_number} {name} wins the round[/yellow]")
            else:
                dice = ",".join(str(v) for v in e.dice_values)
                lines.append(f"R{e.round_number} {name:<10} [{dice}] +{e.points}")
        return "\n".join(lines)


# ── Modal Screens ────────────────────────────────────────────────────────────

class HelpScreen(ModalScreen):
    """Rules and key bindings overlay."""

    BINDINGS = [
        Binding("escape", "dismiss", "Close"),
        Binding("question_mark", "dismiss", "Close"),
    ]

    def compose(self) -> ComposeResult:
        controls = [
            ("Space", "Roll dice"),
            ("N", "New game"),
            ("S", "Toggle sound"),
            ("P", "Cycle roll preset"),
            ("D", "Dark mode"),
            ("Esc", "Close overlay / Quit"),
            ("?", "This help screen"),
        ]
        text = "[bold]RULES[/bold]\n\n"
        text += "\n".join(f"  {line}" for line in RULES_TEXT)
        text += "\n\n[bold]CONTROLS[/bold]\n\n"
        for key, desc in controls:
            text += f"  {key:<10} {desc}\n"
        text += "\n[dim]Press Esc or ? to close[/dim]"
        yield Center(Static(text, id="help-panel"))


# ── Main App ─────────────────────────────────────────────────────────────────

class BuncoApp(App):
    """Bunco terminal UI application."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #game-area {
        layout: horizontal;
        height: 1fr;
    }

    #table-panel {
        width: 72;
        padding: 1 2;
    }

    #log-panel {
        width: 1fr;
        padding: 1 2;
    }

    #round-display, #dice-display, #status-display, #table-display {
        height: auto;
        margin-bottom: 1;
    }

    #roll-btn {
        width: 20;
    }

    #help-panel {
        padding: 2 4;
        border: thick $accent;
        background: $surface;
        width: 72;
        height: auto;
        max-height: 80vh;
    }
    """

    BINDINGS = [
        Binding("space", "roll", "Roll", show=True),
        Binding("n", "new_game", "New game", show=True),
        Binding("s", "sound", "Sound"),
        Binding("p", "preset", "Preset"),
        Binding("d", "dark", "Dark mode"),
        Binding("question_mark", "help", "Help"),
        Binding("escape", "quit_or_close", "Quit"),
    ]

    def __init__(self, coordinator=None, sound=None, preset=None):
        super().__init__()
        self.coordinator = coordinator or GameCoordinator()
        self.adapter = FrontendAdapter(self.coordinator, sound=sound or NullSound())
        self._preset = preset
        self._tick_timer = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="round-display")
        with Horizontal(id="game-area"):
            with Vertical(id="table-panel"):
                yield TableDisplay(id="table-display")
                yield DiceDisplay(id="dice-display")
                yield StatusDisplay(id="status-display")
                yield Button("ROLL", id="roll-btn", variant="primary")
            with Vertical(id="log-panel"):
                yield RecentRollsDisplay(id="recent-display")
        yield Footer()

    def on_mount(self):
        self.title = "Bunco"
        self.adapter.load_settings()
        # Command-line preset beats the saved one
        if self._preset:
            self.coordinator.apply_probability_preset(self._preset)
        self._apply_theme()
        self._tick_timer = self.set_interval(FRAME_SECONDS, self._game_tick)

    def _apply_theme(self):
        self.theme = "textual-dark" if self.adapter.dark_mode else "textual-light"

    def _game_tick(self):
        """Per-frame game update at ~20 FPS."""
        self.adapter.update(FRAME_SECONDS)
        self._refresh_display()

    def _refresh_display(self):
        """Refresh all display widgets."""
        try:
            for widget_id in ("#table-display", "#dice-display", "#status-display", "#recent-display"):
                self.query_one(widget_id).refresh()
            self.query_one("#round-display", Static).update(self._round_text())
            self.query_one("#roll-btn", Button).disabled = not self._can_play()
        except Exception:
            logger.debug("Refresh error", exc_info=True)

    def _round_text(self):
        """Build the round / team tally line."""
        coord = self.coordinator
        rnd = coord.state.round
        return (f"Round {rnd.number} — roll {rnd.target}s | "
                f"[red]Red {rnd.red_wins}[/red] : [dodger_blue1]Blue {rnd.blue_wins}[/dodger_blue1] "
                f"(first to {coord.config.rules.rounds_to_win_game}) | preset: {self.adapter.preset_name}")

    # ── Actions ──────────────────────────────────────────────────────────

    def _can_play(self):
        """Whether the human may roll right now."""
        coord = self.coordinator
        return coord.is_current_player_human and coord.can_roll_now

    def action_roll(self):
        if self.adapter.do_roll():
            self._refresh_display()

    @on(Button.Pressed, "#roll-btn")
    def on_roll_button(self):
        self.action_roll()

    def action_new_game(self):
        self.adapter.do_reset()
        self._refresh_display()

    def action_sound(self):
        self.adapter.toggle_sound()
        self.notify("Sound on" if self.adapter.sound.enabled else "Sound off")

    def action_preset(self):
        name = self.adapter.cycle_probability_preset()
        self.notify(f"Roll preset: {name}")
        self._refresh_display()

    def action_dark(self):
        self.adapter.toggle_dark_mode()
        self._apply_theme()

    def action_help(self):
        self.push_screen(HelpScreen())

    def action_quit_or_close(self):
        # If any screen is stacked, pop it
        if len(self.screen_stack) > 1:
            self.pop_screen()
        else:
            self.exit()


def main(argv=None):
    """Entry point for the TUI."""
    args = parse_args(argv)

    sound = None
    if not args.no_sound:
        from sounds import SoundManager, init_mixer
        if init_mixer():
            sound = SoundManager()
        else:
            logger.info("No audio device, running silent")

    coordinator = coordinator_from_args(args)
    app = BuncoApp(coordinator=coordinator, sound=sound, preset=args.preset)
    app.run()


if __name__ == "__main__":
    main()
