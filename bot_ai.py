"""
Bunco Bot AI — Personalities, continue/stop strategies, and headless play.

Contains:
- BotPersonality archetypes and the per-game personality mapping
- get_bot_delay() — a fresh "thinking" delay on every call
- BotStrategy abstract base class
- HeuristicStrategy (the in-game bot), RandomStrategy, AlwaysRollStrategy
- play_turn() and play_game() for timer-free simulation
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
import random

from bunco_engine import (
    GameState, Player,
    apply_roll, calculate_score, end_round, end_turn, get_matching_dice,
    is_round_won, roll_dice,
)
from game_config import DEFAULT_CONFIG

FIRST_BOT_ID = 2


# ── Personalities ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BotPersonality:
    """How long a bot takes to "think" before each roll, in seconds."""
    name: str
    min_delay: float
    max_delay: float


PERSONALITIES = (
    BotPersonality("fast", 1.0, 2.5),
    BotPersonality("medium", 2.0, 4.0),
    BotPersonality("slow", 3.0, 5.0),
)
DEFAULT_PERSONALITY = PERSONALITIES[1]

THINKING_MESSAGES = (
    "Thinking...",
    "Deciding...",
    "Considering options...",
    "Planning next move...",
    "Calculating odds...",
)


def personality_for(bot_id, personalities=PERSONALITIES):
    """Deterministic archetype for a bot id, cycling through the archetypes."""
    return personalities[(bot_id - FIRST_BOT_ID) % len(personalities)]


def assign_personalities(players, personalities=PERSONALITIES):
    """Build the {player_id: BotPersonality} mapping for every bot at the table."""
    return {p.id: personality_for(p.id, personalities) for p in players if not p.is_human}


def get_bot_delay(bot_id, personalities, rng=random):
    """Uniform delay within the bot's personality range, redrawn on every call."""
    personality = personalities.get(bot_id, DEFAULT_PERSONALITY)
    return rng.uniform(personality.min_delay, personality.max_delay)


def thinking_message(rng=random):
    """Flavour text shown while a bot waits to roll."""
    return rng.choice(THINKING_MESSAGES)


# ── Strategy Interface ──────────────────────────────────────────────────────

class BotStrategy(ABC):
    """Abstract base class for deciding whether a bot keeps rolling."""

    def __init__(self, rng=None):
        self.rng = rng or random

    @abstractmethod
    def should_continue(self, player: Player, state: GameState, consecutive_rolls: int) -> bool:
        """Called only after a match, when the rules let the turn continue.

        Args:
            player: The bot as it stood before this roll
            state: Game state before this roll
            consecutive_rolls: Rolls taken so far this turn, this one included

        Returns:
            True to roll again, False to pass the dice
        """
        ...


class HeuristicStrategy(BotStrategy):
    """The table bot: presses on when a round is close, otherwise tires slowly.

    Own score >= 18 → continue 90% of the time. An opponent >= 18 → 80%.
    Otherwise the chance to stop grows 5% per consecutive roll, capped at 30%.
    """

    CLOSE_TO_WIN = 18

    def should_continue(self, player, state, consecutive_rolls):
        if player.score >= self.CLOSE_TO_WIN:
            return self.rng.random() > 0.1

        opponent = player.team.opponent
        if any(p.team is opponent and p.score >= self.CLOSE_TO_WIN for p in state.players):
            return self.rng.random() > 0.2

        stop_chance = min(consecutive_rolls * 0.05, 0.3)
        return self.rng.random() > stop_chance


class RandomStrategy(BotStrategy):
    """Baseline: coin flip after every match."""

    def should_continue(self, player, state, consecutive_rolls):
        return self.rng.random() < 0.5


class AlwaysRollStrategy(BotStrategy):
    """Baseline: never passes voluntarily."""

    def should_continue(self, player, state, consecutive_rolls):
        return True


# ── Headless Game Loop ──────────────────────────────────────────────────────

def play_turn(state: GameState, strategy: BotStrategy, config=DEFAULT_CONFIG, rng=random) -> GameState:
    """Play one full turn for the current player with no timers.

    Every player, human seat included, is driven by the strategy. Applies the
    same resolve rules as the coordinator: a round win, a turn-ending result,
    or the strategy stopping all pass the dice.

    Returns:
        Game state after the turn (next seat to play, or game over)
    """
    while True:
        before = state
        target = state.round.target
        dice = roll_dice(target, config.probabilities, rng)
        result = calculate_score(dice, target, config.scoring)
        matches = get_matching_dice(dice, target, config.scoring)
        state = apply_roll(state, dice, result, matches)
        player = state.current_player

        if is_round_won(player, config.rules):
            state = end_round(state, player.team, config.rules)
        elif result.ends_turn:
            state = end_turn(state)
        elif strategy.should_continue(before.current_player, before, state.turn.consecutive_rolls):
            continue
        else:
            state = end_turn(state)
        # No display window between headless turns
        return replace(state, turn=replace(state.turn, is_turn_ending=False))


def play_game(strategy: BotStrategy, config=DEFAULT_CONFIG, rng=random, players=None,
              max_turns=100000) -> GameState:
    """Play a complete game until one team wins.

    Args:
        strategy: Strategy driving every seat
        config: BuncoConfig to play under
        rng: Randomness source for the dice
        players: Optional custom table (defaults to the standard four)
        max_turns: Safety valve against a configuration that never scores

    Returns:
        Final game state with outcome.is_over == True

    Raises:
        RuntimeError: if no team wins within max_turns
    """
    state = GameState.create_initial(players, config)
    for _ in range(max_turns):
        if state.outcome.is_over:
            return state
        state = play_turn(state, strategy, config, rng)
    if state.outcome.is_over:
        return state
    raise RuntimeError(f"No winner after {max_turns} turns")
