"""
GameCoordinator — The Bunco turn/round state machine.

Owns the game state, the scheduler holding every pending timer, and the bot
personalities. Drives roll → score → continue/advance and notifies a
GameEvents sink at each step. The frontends (tui.py, web.py) read the state
snapshot, call request_roll()/reset(), and advance time with tick().
"""
from __future__ import annotations

import argparse
import logging
import random
from dataclasses import replace

from bot_ai import BotStrategy, HeuristicStrategy, assign_personalities, get_bot_delay
from bunco_engine import (
    GameState,
    Player,
    ScoreKind,
    Team,
    apply_roll,
    calculate_score,
    can_roll,
    create_initial_players,
    end_round,
    end_turn,
    get_matching_dice,
    is_round_won,
    roll_dice,
)
from game_config import DEFAULT_CONFIG, PRESET_NAMES, BuncoConfig, get_preset
from game_events import GameEvents, NullEvents
from game_log import GameLog
from scheduler import Scheduler

logger = logging.getLogger(__name__)

# Scheduler kinds, at most one pending call of each
TIMER = "timer"           # human countdown tick
AUTO_ROLL = "auto_roll"   # forced roll after the countdown runs out
ROLL = "roll"             # dice in the air
BOT = "bot"               # bot thinking before a roll
ADVANCE = "advance"       # result on display before the next turn starts


class GameCoordinator:
    """Coordinates game state, timers, and bot turns without any frontend dependency.

    The frontend reads `state` (an immutable GameState) to decide what to
    render, and calls request_roll() / reset() in response to user input.
    """

    def __init__(self, config: BuncoConfig | None = None, events: GameEvents | None = None,
                 strategy: BotStrategy | None = None, players: tuple[Player, ...] | None = None,
                 rng=None) -> None:
        """Initialize the coordinator and kick off the first turn.

        Args:
            config: Game configuration (scoring, rules, timing, probabilities).
            events: Sink for sound/visual notifications.
            strategy: Decides whether a bot keeps rolling after a match.
            players: Optional custom table in seat order; defaults to one human and three bots.
            rng: Randomness source for dice and bots (a random.Random by default).
        """
        self.config = config or DEFAULT_CONFIG
        self.events = events or NullEvents()
        self.rng = rng or random.Random()
        self.strategy = strategy or HeuristicStrategy(rng=self.rng)
        self._players = players
        self.scheduler = Scheduler()
        self.game_log = GameLog()
        self.state: GameState = GameState.create_initial(players, self.config)
        self.personalities = {}
        self.reset()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def current_player(self) -> Player:
        return self.state.current_player

    @property
    def is_current_player_human(self) -> bool:
        return self.state.current_player.is_human

    @property
    def game_over(self) -> bool:
        return self.state.outcome.is_over

    @property
    def winner(self) -> Team | None:
        return self.state.outcome.winner

    @property
    def is_rolling(self) -> bool:
        return self.state.turn.is_rolling

    @property
    def can_roll_now(self) -> bool:
        """Whether a roll request would be accepted right now."""
        return can_roll(self.state)

    @property
    def time_until_bot_roll(self) -> float | None:
        """Seconds until the pending bot roll, or None if no bot is thinking."""
        return self.scheduler.time_until(BOT)

    # ── Actions ──────────────────────────────────────────────────────────

    def request_roll(self) -> bool:
        """Start a roll for the current player.

        Ignored (returns False) while a roll is in flight, while a finished
        turn is still on display, or once the game is over. The dice land
        after timing.roll_duration.
        """
        if not can_roll(self.state):
            return False

        self._stop_timer()
        self.scheduler.cancel(AUTO_ROLL)
        self.scheduler.cancel(BOT)
        self._set_turn(is_rolling=True)
        self.events.on_dice_shake()

        delay = self.config.timing.roll_duration
        if delay > 0:
            self.scheduler.schedule(ROLL, delay, self._land_roll)
        else:
            self._land_roll()
        return True

    def reset(self) -> None:
        """Cancel every pending timer and start a new game."""
        self.scheduler.cancel_all()
        self.state = GameState.create_initial(self._players, self.config)
        # Idle until the first kickoff: no rolls before the opening turn starts
        self._set_turn(is_turn_ending=True)
        self.personalities = assign_personalities(self.state.players)
        self.game_log.clear()
        logger.debug("New game: %s", ", ".join(p.name for p in self.state.players))
        self.scheduler.schedule(ADVANCE, self.config.timing.turn_start_delay, self._begin_turn)

    def tick(self, dt: float) -> None:
        """Advance game time by dt seconds, firing any timers that fall due."""
        self.scheduler.advance(dt)

    def apply_probability_preset(self, name: str) -> None:
        """Switch the roll-override probabilities. Raises ValueError if unknown."""
        self.config = replace(self.config, probabilities=get_preset(name))

    # ── Turn cycle ───────────────────────────────────────────────────────

    def _set_turn(self, **changes) -> None:
        self.state = replace(self.state, turn=replace(self.state.turn, **changes))

    def _land_roll(self) -> None:
        """Generate, score and apply a roll, then resolve what happens next."""
        before = self.state
        config = self.config
        target = before.round.target
        index = before.turn.current_player

        dice = roll_dice(target, config.probabilities, self.rng)
        result = calculate_score(dice, target, config.scoring)
        matches = get_matching_dice(dice, target, config.scoring)
        state = apply_roll(before, dice, result, matches)
        player = state.players[index]

        self.events.on_dice_roll()
        if result.kind is ScoreKind.BUNCO:
            self.events.on_bunco()
        elif result.kind is ScoreKind.BABY_BUNCO:
            self.events.on_baby_bunco()
        self.game_log.log_roll(state.round.number, index, dice, result.kind, result.points)
        logger.debug("%s rolled %s: %s (%d points, score %d)",
                     player.name, dice, result.kind.value, result.points, player.score)

        if is_round_won(player, config.rules):
            self._finish_round(state, player, index)
        elif result.ends_turn:
            self.state = end_turn(state)
            self._schedule_next_turn(result.kind)
        elif player.is_human:
            self.state = state
            self._schedule_timer_restart(result.kind)
        # Bots decide on their standing before this roll
        elif self.strategy.should_continue(before.players[index], before, state.turn.consecutive_rolls):
            self.state = state
            self._schedule_bot_roll(player.id)
        else:
            self.state = end_turn(state)
            self._schedule_next_turn(result.kind)

    def _finish_round(self, state: GameState, player: Player, index: int) -> None:
        round_number = state.round.number
        self.events.on_round_win()
        self.game_log.log_round_win(round_number, index, player.team)
        self.state = end_round(state, player.team, self.config.rules)
        logger.debug("%s takes round %d for %s", player.name, round_number, player.team.value)

        if self.state.outcome.is_over:
            self.scheduler.cancel_all()
            self.events.on_game_win()
            logger.debug("Game over: %s wins", self.state.outcome.winner.value)
            return
        self._schedule_next_turn(state.turn.last_result.kind)

    def _schedule_next_turn(self, kind: ScoreKind) -> None:
        """Leave the result on display, then hand the dice to the next player."""
        timing = self.config.timing
        self.scheduler.cancel(TIMER)
        delay = timing.display_duration(kind) + timing.turn_start_delay
        self.scheduler.schedule(ADVANCE, delay, self._begin_turn)

    def _begin_turn(self) -> None:
        if self.game_over:
            return
        self._set_turn(is_turn_ending=False)
        player = self.current_player
        if player.is_human:
            self._start_timer()
        else:
            self._schedule_bot_roll(player.id)

    def _schedule_bot_roll(self, bot_id: int) -> None:
        delay = get_bot_delay(bot_id, self.personalities, self.rng)
        self.scheduler.schedule(BOT, delay, self.request_roll)

    # ── Human countdown ──────────────────────────────────────────────────

    def _start_timer(self) -> None:
        """(Re)start the countdown, cancelling any pending one."""
        timing = self.config.timing
        self.scheduler.cancel(TIMER)
        self._set_turn(timer=timing.human_timer, timer_active=True)
        self.scheduler.schedule(TIMER, timing.tick_interval, self._on_timer_tick)

    def _schedule_timer_restart(self, kind: ScoreKind) -> None:
        """Resume the countdown shortly before a match leaves the screen."""
        delay = self.config.timing.timer_restart_delay(kind)
        if delay > 0:
            self.scheduler.schedule(TIMER, delay, self._start_timer)
        else:
            self._start_timer()

    def _stop_timer(self) -> None:
        self.scheduler.cancel(TIMER)
        if self.state.turn.timer_active:
            self._set_turn(timer_active=False)

    def _on_timer_tick(self) -> None:
        timing = self.config.timing
        remaining = self.state.turn.timer - 1
        if remaining <= 0:
            self._set_turn(timer=0, timer_active=False)
            self.events.on_time_up()
            self.scheduler.schedule(AUTO_ROLL, timing.auto_roll_delay, self.request_roll)
            return

        self._set_turn(timer=remaining)
        if remaining < timing.low_time_threshold:
            self.events.on_tick()
        self.scheduler.schedule(TIMER, timing.tick_interval, self._on_timer_tick)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments shared by the frontends.

    Args:
        argv: Optional list of args (for testing). None uses sys.argv.

    Returns:
        Parsed argparse.Namespace.
    """
    parser = argparse.ArgumentParser(description="Bunco Game")
    parser.add_argument("--preset", choices=PRESET_NAMES, default=None,
                        help="Roll-override probability preset (default: saved setting)")
    parser.add_argument("--name", default="Player 1", help="Display name for the human player")
    parser.add_argument("--seed", type=int, default=None, help="Seed the dice for a repeatable game")
    parser.add_argument("--spectate", action="store_true",
                        help="Replace the human seat with a bot and watch")
    parser.add_argument("--no-sound", action="store_true", help="Disable sound effects")
    return parser.parse_args(argv)


def make_players(name: str = "Player 1", spectate: bool = False) -> tuple[Player, ...]:
    """Default table with the human seat renamed, or turned into a bot."""
    players = create_initial_players()
    human = players[0]
    players = (replace(human, name=name, is_human=not spectate),) + players[1:]
    return players


def coordinator_from_args(args: argparse.Namespace, events: GameEvents | None = None) -> GameCoordinator:
    """Build a coordinator from parsed CLI arguments."""
    config = DEFAULT_CONFIG
    if args.preset:
        config = replace(config, probabilities=get_preset(args.preset))
    rng = random.Random(args.seed)
    return GameCoordinator(config=config, events=events, rng=rng,
                           players=make_players(args.name, args.spectate))
