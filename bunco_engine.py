"""
Bunco Game Engine - Pure game logic without GUI dependencies

This module contains the scoring rules, dice generation and the immutable
game state for Bunco. Every transition is a pure function returning a new
GameState, so the whole rule set is unit-testable without timers or a GUI.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple
from enum import Enum
from collections import Counter
import random

from game_config import DEFAULT_CONFIG, ProbabilityConfig, RulesConfig, ScoringConfig

DEFAULT_SCORING = ScoringConfig()
DEFAULT_RULES = RulesConfig()
NUM_DICE = 3  # fixed by the rules, not configurable


class Team(Enum):
    """The two fixed teams"""
    RED = "red"
    BLUE = "blue"

    @property
    def opponent(self):
        return Team.BLUE if self is Team.RED else Team.RED


class Seat(Enum):
    """Table positions, listed in clockwise turn order"""
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM_LEFT = "bottom-left"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"


class ScoreKind(Enum):
    """Outcome of a single roll"""
    BUNCO = "bunco"
    BABY_BUNCO = "baby-bunco"
    MATCH = "match"
    NO_MATCH = "no-match"


@dataclass(frozen=True)
class Player:
    """A seated player - immutable, score replaced on every roll"""
    id: int
    name: str
    team: Team
    is_human: bool
    seat: Seat
    score: int = 0  # running score within the current round


@dataclass(frozen=True)
class ScoreResult:
    """What a roll is worth and whether it ends the turn"""
    points: int
    kind: ScoreKind
    ends_turn: bool
    message: str


@dataclass(frozen=True)
class DiceMatches:
    """Which dice scored, with a label per die ("" for dice that did not)"""
    indices: Tuple[int, ...] = ()
    labels: Tuple[str, ...] = ("", "", "")


@dataclass(frozen=True)
class RoundState:
    """Round number, target and round wins per team"""
    number: int = 1  # 1-6
    target: int = 1  # always equals number
    red_wins: int = 0
    blue_wins: int = 0

    def wins_for(self, team: Team) -> int:
        return self.red_wins if team is Team.RED else self.blue_wins


@dataclass(frozen=True)
class TurnState:
    """Per-turn bookkeeping for the current player"""
    current_player: int = 0
    turn_score: int = 0
    consecutive_rolls: int = 0
    is_rolling: bool = False
    is_turn_ending: bool = False    # result on display, next turn not yet started
    last_roll: Tuple[int, ...] = (1, 1, 1)
    matches: DiceMatches = field(default_factory=DiceMatches)
    last_result: Optional[ScoreResult] = None
    timer: int = 10
    timer_active: bool = False


@dataclass(frozen=True)
class GameOutcome:
    """Terminal state - winner is set once a team reaches the round-win target"""
    winner: Optional[Team] = None

    @property
    def is_over(self) -> bool:
        return self.winner is not None


@dataclass(frozen=True)
class GameState:
    """Immutable game state - represents complete game state at a point in time"""
    players: Tuple[Player, ...]  # in seat (turn) order
    round: RoundState
    turn: TurnState
    outcome: GameOutcome = field(default_factory=GameOutcome)

    @property
    def current_player(self) -> Player:
        return self.players[self.turn.current_player]

    @staticmethod
    def create_initial(players=None, config=None):
        """Create a fresh game state: round 1, all scores 0, seat 0 to play"""
        config = config or DEFAULT_CONFIG
        if players is None:
            players = create_initial_players()
        return GameState(
            players=reset_player_scores(players),
            round=RoundState(),
            turn=TurnState(timer=config.timing.human_timer),
            outcome=GameOutcome(),
        )


def create_initial_players() -> Tuple[Player, ...]:
    """The default table: one human and three bots, seated clockwise.

    Teams alternate around the table so partners sit opposite each other.
    """
    return (
        Player(id=1, name="Player 1", team=Team.RED, is_human=True, seat=Seat.BOTTOM_RIGHT),
        Player(id=4, name="Bertha S.", team=Team.BLUE, is_human=False, seat=Seat.BOTTOM_LEFT),
        Player(id=2, name="Minnie X.", team=Team.RED, is_human=False, seat=Seat.TOP_LEFT),
        Player(id=3, name="Grace E.", team=Team.BLUE, is_human=False, seat=Seat.TOP_RIGHT),
    )


# Scoring

def _validate(dice, round_target):
    if len(dice) != NUM_DICE:
        raise ValueError(f"A roll has exactly {NUM_DICE} dice, got {len(dice)}")
    if not all(1 <= value <= 6 for value in dice):
        raise ValueError(f"Dice values must be within 1-6, got {tuple(dice)}")
    if not 1 <= round_target <= 6:
        raise ValueError(f"Round target must be within 1-6, got {round_target}")


def count_values(dice):
    """
    Count occurrences of each face value

    Args:
        dice: Sequence of die values (1-6)

    Returns:
        Counter object with face values as keys
    """
    return Counter(dice)


def _triple_value(counts):
    """Face value showing on all three dice, or None"""
    for value, count in counts.items():
        if count == NUM_DICE:
            return value
    return None


def calculate_score(dice, round_target, scoring=DEFAULT_SCORING):
    """
    Score a roll against the current round target

    Priority: Bunco, then Baby Bunco, then a plain match, then no match.
    With three dice at most one triple can exist.

    Args:
        dice: Three die values
        round_target: Face value that scores this round (1-6)
        scoring: Point values to award

    Returns:
        ScoreResult for the roll

    Raises:
        ValueError: if the roll or target is malformed
    """
    _validate(dice, round_target)
    counts = count_values(dice)
    triple = _triple_value(counts)

    if triple == round_target:
        return ScoreResult(
            points=scoring.bunco,
            kind=ScoreKind.BUNCO,
            ends_turn=True,
            message=f"BUNCO! {scoring.bunco} points!",
        )

    if triple is not None:
        return ScoreResult(
            points=scoring.baby_bunco,
            kind=ScoreKind.BABY_BUNCO,
            ends_turn=True,
            message=f"Baby Bunco! {scoring.baby_bunco} points for three {triple}s!",
        )

    matching = counts[round_target]
    if matching > 0:
        points = matching * scoring.match
        return ScoreResult(
            points=points,
            kind=ScoreKind.MATCH,
            ends_turn=False,
            message=f"{points} point{'s' if points > 1 else ''}! Roll again!",
        )

    return ScoreResult(
        points=0,
        kind=ScoreKind.NO_MATCH,
        ends_turn=True,
        message="No match. Turn over.",
    )


def get_matching_dice(dice, round_target, scoring=DEFAULT_SCORING):
    """
    Annotate which dice scored, using the same priority as calculate_score()

    A Bunco or Baby Bunco labels all three dice with the full point value;
    a plain match labels only the matching dice with the per-die value.

    Returns:
        DiceMatches with scoring indices and one label per die
    """
    _validate(dice, round_target)
    triple = _triple_value(count_values(dice))

    if triple is not None:
        points = scoring.bunco if triple == round_target else scoring.baby_bunco
        return DiceMatches(
            indices=tuple(range(NUM_DICE)),
            labels=tuple(f"+{points}" for _ in dice),
        )

    indices = tuple(i for i, value in enumerate(dice) if value == round_target)
    labels = tuple(f"+{scoring.match}" if i in indices else "" for i in range(NUM_DICE))
    return DiceMatches(indices=indices, labels=labels)


# Roll generation

def force_bunco(round_target):
    """A guaranteed Bunco for this round"""
    return (round_target,) * NUM_DICE


def force_baby_bunco(round_target, rng=random):
    """A guaranteed Baby Bunco: three of a uniformly chosen non-target face"""
    value = rng.choice([v for v in range(1, 7) if v != round_target])
    return (value,) * NUM_DICE


def roll_dice(round_target, probabilities=None, rng=random):
    """
    Roll three dice, honouring the configured override probabilities

    One uniform draw decides the override: below the Bunco probability the
    roll is forced to a Bunco, below Bunco + Baby Bunco to a Baby Bunco.
    Otherwise the roll is three independent uniform draws.

    Args:
        round_target: Current round target (1-6)
        probabilities: ProbabilityConfig, defaults to no overrides
        rng: Object with random(), randint() and choice() (the random module by default)

    Returns:
        Tuple of three die values
    """
    probabilities = probabilities or ProbabilityConfig()
    draw = rng.random()
    if draw < probabilities.bunco:
        return force_bunco(round_target)
    if draw < probabilities.bunco + probabilities.baby_bunco:
        return force_baby_bunco(round_target, rng)
    return tuple(rng.randint(1, 6) for _ in range(NUM_DICE))


# Game Action Functions

def next_player_index(current, num_players):
    """Next seat clockwise - never skips or reorders by team"""
    return (current + 1) % num_players


def next_round_number(number, rounds=DEFAULT_RULES.rounds):
    """Advance the round number, wrapping back to 1 after the last round"""
    return number + 1 if number < rounds else 1


def reset_player_scores(players):
    """Return players with every round score reset to 0"""
    return tuple(replace(p, score=0) for p in players)


def check_game_win(round_state, rounds_to_win=DEFAULT_RULES.rounds_to_win_game):
    """Return the team that reached the round-win target, or None"""
    for team in Team:
        if round_state.wins_for(team) >= rounds_to_win:
            return team
    return None


def is_round_won(player, rules=DEFAULT_RULES):
    return player.score >= rules.win_score


def apply_roll(state: GameState, dice, result: ScoreResult, matches: DiceMatches) -> GameState:
    """
    Record a landed roll for the current player.

    Updates the player's round score, the turn score and the consecutive-roll
    counter, and clears the roll-in-flight flag. Does not decide what happens
    next - see end_turn() and end_round().
    """
    index = state.turn.current_player
    players = list(state.players)
    players[index] = replace(players[index], score=players[index].score + result.points)
    turn = replace(state.turn,
                   turn_score=state.turn.turn_score + result.points,
                   consecutive_rolls=state.turn.consecutive_rolls + 1,
                   is_rolling=False,
                   last_roll=tuple(dice),
                   matches=matches,
                   last_result=result)
    return replace(state, players=tuple(players), turn=turn)


def end_turn(state: GameState) -> GameState:
    """
    Pass the dice to the next seat.

    Resets turn score and consecutive rolls and marks the turn as ending;
    the coordinator clears that flag when the next turn kicks off.
    """
    turn = replace(state.turn,
                   current_player=next_player_index(state.turn.current_player, len(state.players)),
                   turn_score=0,
                   consecutive_rolls=0,
                   is_rolling=False,
                   is_turn_ending=True,
                   timer_active=False)
    return replace(state, turn=turn)


def end_round(state: GameState, winning_team: Team, rules=DEFAULT_RULES) -> GameState:
    """
    Award the round to a team and start the next round.

    Records the round win and resets every score. If the team has now won
    enough rounds the game is over and nothing else changes; otherwise the
    round and target advance (wrapping after the last round) and the dice
    pass to the next seat.
    """
    if winning_team is Team.RED:
        round_state = replace(state.round, red_wins=state.round.red_wins + 1)
    else:
        round_state = replace(state.round, blue_wins=state.round.blue_wins + 1)
    players = reset_player_scores(state.players)

    winner = check_game_win(round_state, rules.rounds_to_win_game)
    if winner is not None:
        return replace(state,
                       players=players,
                       round=round_state,
                       turn=replace(state.turn, is_rolling=False, is_turn_ending=False,
                                    timer_active=False),
                       outcome=GameOutcome(winner=winner))

    number = next_round_number(round_state.number, rules.rounds)
    round_state = replace(round_state, number=number, target=number)
    state = replace(state, players=players, round=round_state)
    return end_turn(state)


def can_roll(state: GameState) -> bool:
    """
    Check if a roll may start right now.

    Rolls are refused while one is in flight, while a finished turn is still
    on display, and once the game is over.
    """
    return not (state.turn.is_rolling or state.turn.is_turn_ending or state.outcome.is_over)
