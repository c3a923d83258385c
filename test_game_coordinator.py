"""
GameCoordinator Test Suite

Tests the turn/round state machine without any frontend dependency.
Covers: kickoff, human countdown, rolling, turn flow, bot turns, round and
game end, reset, presets, and CLI parsing.

Conventions match the other test files:
- Class grouping by topic
- Scripted or seeded randomness for determinism
- No mocking — exercises the real engine and scheduler
"""
import random
from dataclasses import replace

import pytest

from bot_ai import AlwaysRollStrategy, personality_for
from bunco_engine import ScoreKind, Team
from game_config import DEFAULT_CONFIG, BuncoConfig, TimingConfig, get_preset
from game_coordinator import (
    ADVANCE, AUTO_ROLL, BOT, ROLL, TIMER,
    GameCoordinator, coordinator_from_args, make_players, parse_args,
)
from game_events import EventRecorder


# ── Helpers ──────────────────────────────────────────────────────────────────

class ScriptedRandom:
    """Deterministic randomness for the coordinator.

    randint() pops queued dice, random() pops queued floats (0.99 once
    empty: no roll override, bots keep rolling), uniform() returns the low
    bound, choice() the first option.
    """

    def __init__(self, rolls=(), floats=()):
        self.rolls = list(rolls)
        self.floats = list(floats)

    def random(self):
        return self.floats.pop(0) if self.floats else 0.99

    def randint(self, a, b):
        return self.rolls.pop(0)

    def uniform(self, a, b):
        return a

    def choice(self, seq):
        return seq[0]


def make_coordinator(rolls=(), floats=(), **kwargs):
    """Coordinator with scripted dice and an event recorder, first turn started."""
    events = EventRecorder()
    c = GameCoordinator(events=events, rng=ScriptedRandom(rolls, floats), **kwargs)
    assert c.scheduler.run_next() == ADVANCE
    return c, events


def set_score(c, index, score):
    players = list(c.state.players)
    players[index] = replace(players[index], score=score)
    c.state = replace(c.state, players=tuple(players))


def set_round(c, number, **wins):
    c.state = replace(c.state, round=replace(c.state.round, number=number, target=number, **wins))


def roll_and_land(c):
    """Request a roll and let the dice land."""
    assert c.request_roll()
    assert c.scheduler.run_next() == ROLL


# ═══════════════════════════════════════════════════════════════════════════════
# 1. KICKOFF
# ═══════════════════════════════════════════════════════════════════════════════

class TestKickoff:

    def test_first_turn_waits_for_start_delay(self):
        c = GameCoordinator()
        assert c.scheduler.pending_kinds() == [ADVANCE]
        assert c.scheduler.time_until(ADVANCE) == pytest.approx(DEFAULT_CONFIG.timing.turn_start_delay)
        assert not c.state.turn.timer_active

    def test_no_roll_before_first_kickoff(self):
        c = GameCoordinator(rng=ScriptedRandom(rolls=[2, 3, 4]))
        assert c.state.turn.is_turn_ending
        assert not c.can_roll_now
        assert not c.request_roll()
        assert not c.is_rolling
        c.tick(DEFAULT_CONFIG.timing.turn_start_delay)
        assert c.can_roll_now

    def test_countdown_never_leaks_into_bot_turn(self):
        c = GameCoordinator(rng=ScriptedRandom(rolls=[2, 3, 4]))
        assert not c.request_roll()
        c.tick(DEFAULT_CONFIG.timing.turn_start_delay)
        roll_and_land(c)
        assert c.scheduler.run_next() == ADVANCE
        assert not c.is_current_player_human
        assert not c.scheduler.is_pending(TIMER)
        assert c.scheduler.pending_kinds() == [BOT]

    def test_human_turn_starts_countdown(self):
        c, _ = make_coordinator()
        assert c.is_current_player_human
        assert c.state.turn.timer == 10
        assert c.state.turn.timer_active
        assert c.scheduler.is_pending(TIMER)

    def test_tick_drives_kickoff(self):
        c = GameCoordinator()
        c.tick(0.4)
        assert not c.state.turn.timer_active
        c.tick(0.1)
        assert c.state.turn.timer_active

    def test_bot_seat_first_schedules_bot_roll(self):
        players = make_players(spectate=True)
        c, _ = make_coordinator(players=players)
        assert not c.is_current_player_human
        assert c.time_until_bot_roll == pytest.approx(personality_for(1).min_delay)

    def test_personalities_assigned(self):
        c = GameCoordinator()
        assert set(c.personalities) == {2, 3, 4}


# ═══════════════════════════════════════════════════════════════════════════════
# 2. HUMAN COUNTDOWN
# ═══════════════════════════════════════════════════════════════════════════════

class TestCountdown:

    def test_ticks_down_once_per_interval(self):
        c, _ = make_coordinator()
        c.tick(1.0)
        assert c.state.turn.timer == 9
        c.tick(3.0)
        assert c.state.turn.timer == 6

    def test_low_time_ticks_notify(self):
        c, events = make_coordinator(rolls=[2, 3, 4])
        for _ in range(9):
            assert c.scheduler.run_next() == TIMER
        assert c.state.turn.timer == 1
        assert events.drain().count("tick") == 2

    def test_time_up_forces_roll(self):
        c, events = make_coordinator(rolls=[2, 3, 4])
        for _ in range(10):
            c.scheduler.run_next()
        assert c.state.turn.timer == 0
        assert not c.state.turn.timer_active
        assert "time_up" in events.drain()
        assert c.scheduler.run_next() == AUTO_ROLL
        assert c.is_rolling
        assert events.drain() == ["dice_shake"]
        assert c.scheduler.run_next() == ROLL
        assert c.state.turn.last_roll == (2, 3, 4)

    def test_rolling_stops_countdown(self):
        c, _ = make_coordinator()
        c.request_roll()
        assert not c.scheduler.is_pending(TIMER)
        assert not c.state.turn.timer_active

    def test_match_restarts_countdown(self):
        c, _ = make_coordinator(rolls=[1, 5, 6])
        c.tick(4.0)
        assert c.state.turn.timer == 6
        roll_and_land(c)
        assert c.can_roll_now
        assert not c.state.turn.timer_active
        timing = DEFAULT_CONFIG.timing
        expected = timing.display_duration(ScoreKind.MATCH) - timing.timer_restart_lead
        assert c.scheduler.time_until(TIMER) == pytest.approx(expected)
        assert c.scheduler.run_next() == TIMER
        assert c.state.turn.timer == 10
        assert c.state.turn.timer_active
        assert c.scheduler.time_until(TIMER) == pytest.approx(timing.tick_interval)

    def test_restart_lead_longer_than_display_restarts_at_once(self):
        config = BuncoConfig(timing=TimingConfig(timer_restart_lead=5.0))
        c, _ = make_coordinator(rolls=[1, 5, 6], config=config)
        roll_and_land(c)
        assert c.state.turn.timer == 10
        assert c.state.turn.timer_active

    def test_roll_during_restart_wait_cancels_it(self):
        c, _ = make_coordinator(rolls=[1, 5, 6, 2, 3, 4])
        roll_and_land(c)
        assert c.scheduler.is_pending(TIMER)
        assert c.request_roll()
        assert not c.scheduler.is_pending(TIMER)
        assert c.scheduler.run_next() == ROLL
        assert not c.state.turn.timer_active


# ═══════════════════════════════════════════════════════════════════════════════
# 3. ROLLING
# ═══════════════════════════════════════════════════════════════════════════════

class TestRolling:

    def test_roll_in_flight_until_landing(self):
        c, events = make_coordinator(rolls=[1, 2, 3])
        assert c.request_roll()
        assert c.is_rolling
        assert events.drain() == ["dice_shake"]
        assert c.scheduler.time_until(ROLL) == pytest.approx(DEFAULT_CONFIG.timing.roll_duration)
        c.scheduler.run_next()
        assert not c.is_rolling
        assert events.drain() == ["dice_roll"]

    def test_second_request_while_rolling_dropped(self):
        c, events = make_coordinator(rolls=[1, 2, 3])
        assert c.request_roll()
        assert not c.request_roll()
        assert events.drain() == ["dice_shake"]

    def test_match_updates_score(self):
        c, _ = make_coordinator(rolls=[1, 1, 4])
        roll_and_land(c)
        assert c.state.players[0].score == 2
        assert c.state.turn.turn_score == 2
        assert c.state.turn.consecutive_rolls == 1
        assert c.state.turn.matches.indices == (0, 1)
        assert c.state.turn.current_player == 0

    def test_zero_roll_duration_lands_immediately(self):
        config = BuncoConfig(timing=TimingConfig(roll_duration=0))
        c, _ = make_coordinator(rolls=[2, 3, 4], config=config)
        assert c.request_roll()
        assert not c.is_rolling
        assert c.state.turn.last_roll == (2, 3, 4)

    def test_roll_logged(self):
        c, _ = make_coordinator(rolls=[1, 2, 3])
        roll_and_land(c)
        entry = c.game_log.recent(1)[0]
        assert entry.event_type == "roll"
        assert entry.dice_values == (1, 2, 3)
        assert entry.kind is ScoreKind.MATCH
        assert entry.points == 1


# ═══════════════════════════════════════════════════════════════════════════════
# 4. TURN FLOW
# ═══════════════════════════════════════════════════════════════════════════════

class TestTurnFlow:

    def test_no_match_passes_dice(self):
        c, _ = make_coordinator(rolls=[2, 3, 4])
        roll_and_land(c)
        assert c.state.turn.current_player == 1
        assert c.state.turn.turn_score == 0
        assert c.state.turn.consecutive_rolls == 0
        assert c.state.turn.is_turn_ending

    def test_no_roll_while_result_on_display(self):
        c, _ = make_coordinator(rolls=[2, 3, 4])
        roll_and_land(c)
        assert not c.can_roll_now
        assert not c.request_roll()

    def test_next_turn_after_display_duration(self):
        c, _ = make_coordinator(rolls=[2, 3, 4])
        roll_and_land(c)
        timing = DEFAULT_CONFIG.timing
        expected = timing.display_duration(ScoreKind.NO_MATCH) + timing.turn_start_delay
        assert c.scheduler.time_until(ADVANCE) == pytest.approx(expected)
        c.scheduler.run_next()
        assert not c.state.turn.is_turn_ending
        assert c.scheduler.is_pending(BOT)

    def test_baby_bunco_ends_turn(self):
        c, events = make_coordinator(rolls=[4, 4, 4])
        roll_and_land(c)
        assert c.state.players[0].score == 5
        assert c.state.turn.current_player == 1
        assert events.drain() == ["dice_shake", "dice_roll", "baby_bunco"]
        timing = DEFAULT_CONFIG.timing
        assert c.scheduler.time_until(ADVANCE) == pytest.approx(3.0 + timing.turn_start_delay)

    def test_turn_order_cycles(self):
        c, _ = make_coordinator(rolls=[2, 3, 4] * 4, players=make_players(spectate=True))
        seen = []
        for _ in range(4):
            seen.append(c.state.turn.current_player)
            assert c.scheduler.run_next() == BOT
            assert c.scheduler.run_next() == ROLL
            assert c.scheduler.run_next() == ADVANCE
        assert seen == [0, 1, 2, 3]
        assert c.state.turn.current_player == 0


# ═══════════════════════════════════════════════════════════════════════════════
# 5. BOT TURNS
# ═══════════════════════════════════════════════════════════════════════════════

class TestBotTurns:

    def pass_to_bot(self, bot_rolls, floats=()):
        """Human rolls a no-match, then the first bot's turn kicks off."""
        c, events = make_coordinator(rolls=[2, 3, 4] + list(bot_rolls), floats=floats)
        roll_and_land(c)
        assert c.scheduler.run_next() == ADVANCE
        events.drain()
        return c, events

    def test_bot_waits_personality_delay(self):
        c, _ = self.pass_to_bot([])
        bot = c.current_player
        assert not bot.is_human
        assert c.time_until_bot_roll == pytest.approx(c.personalities[bot.id].min_delay)

    def test_bot_rolls_after_delay(self):
        c, events = self.pass_to_bot([1, 5, 6])
        assert c.scheduler.run_next() == BOT
        assert c.is_rolling
        assert c.time_until_bot_roll is None
        c.scheduler.run_next()
        assert c.state.players[1].score == 1
        assert events.drain() == ["dice_shake", "dice_roll"]

    def test_bot_continues_after_match(self):
        c, _ = self.pass_to_bot([1, 5, 6])
        c.scheduler.run_next()
        c.scheduler.run_next()
        assert c.state.turn.current_player == 1
        assert c.scheduler.is_pending(BOT)

    def test_bot_stops_after_match(self):
        # Floats: human roll draw, bot roll draw, then the stop decision
        c, _ = self.pass_to_bot([1, 5, 6], floats=[0.99, 0.99, 0.0])
        c.scheduler.run_next()
        c.scheduler.run_next()
        assert c.state.players[1].score == 1
        assert c.state.turn.current_player == 2
        assert c.state.turn.is_turn_ending
        assert c.scheduler.pending_kinds() == [ADVANCE]

    def test_bot_judged_on_score_before_roll(self):
        # At 17 the bot is not yet close to winning: stop chance is 5%, not 10%
        c, _ = self.pass_to_bot([1, 5, 6], floats=[0.99, 0.99, 0.08])
        set_score(c, 1, 17)
        c.scheduler.run_next()
        c.scheduler.run_next()
        assert c.state.players[1].score == 18
        assert c.state.turn.current_player == 1
        assert c.scheduler.pending_kinds() == [BOT]

    def test_bot_close_to_win_uses_own_score_rule(self):
        c, _ = self.pass_to_bot([1, 5, 6], floats=[0.99, 0.99, 0.08])
        set_score(c, 1, 18)
        c.scheduler.run_next()
        c.scheduler.run_next()
        assert c.state.players[1].score == 19
        assert c.state.turn.current_player == 2

    def test_bot_roll_ignores_human_guard(self):
        # The coordinator itself accepts any roll; the frontend guards the human
        c, _ = self.pass_to_bot([1, 2, 3])
        assert c.request_roll()

    def test_custom_strategy(self):
        c, _ = make_coordinator(rolls=[1, 2, 3], strategy=AlwaysRollStrategy(),
                                players=make_players(spectate=True))
        c.scheduler.run_next()
        c.scheduler.run_next()
        assert c.scheduler.is_pending(BOT)


# ═══════════════════════════════════════════════════════════════════════════════
# 6. ROUND AND GAME END
# ═══════════════════════════════════════════════════════════════════════════════

class TestRoundEnd:

    def test_one_point_from_twenty_wins_round(self):
        c, events = make_coordinator(rolls=[5, 1, 2])
        set_score(c, 0, 20)
        set_round(c, 5)
        roll_and_land(c)
        assert c.state.round.red_wins == 1
        assert c.state.round.blue_wins == 0
        assert all(p.score == 0 for p in c.state.players)
        assert c.state.round.number == 6
        assert c.state.round.target == 6
        assert c.state.turn.current_player == 1
        assert events.drain() == ["dice_shake", "dice_roll", "round_win"]
        assert c.game_log.recent(1)[0].event_type == "round_win"

    def test_round_six_wraps_to_one(self):
        c, _ = make_coordinator(rolls=[6, 1, 2])
        set_score(c, 0, 20)
        set_round(c, 6)
        roll_and_land(c)
        assert c.state.round.number == 1
        assert c.state.round.target == 1

    def test_bunco_wins_round_outright(self):
        c, events = make_coordinator()
        c.apply_probability_preset("bunco_testing")
        roll_and_land(c)
        assert c.state.round.red_wins == 1
        assert events.drain() == ["dice_shake", "dice_roll", "bunco", "round_win"]
        timing = DEFAULT_CONFIG.timing
        assert c.scheduler.time_until(ADVANCE) == pytest.approx(4.0 + timing.turn_start_delay)

    def test_next_round_continues_play(self):
        c, _ = make_coordinator(rolls=[5, 1, 2])
        set_score(c, 0, 20)
        set_round(c, 5)
        roll_and_land(c)
        assert c.scheduler.run_next() == ADVANCE
        assert c.scheduler.is_pending(BOT)


class TestGameEnd:

    def win_game(self):
        c, events = make_coordinator(rolls=[3, 1, 2])
        set_score(c, 0, 20)
        set_round(c, 3, red_wins=3, blue_wins=1)
        roll_and_land(c)
        return c, events

    def test_fourth_round_win_ends_game(self):
        c, events = self.win_game()
        assert c.game_over
        assert c.winner is Team.RED
        assert c.state.round.red_wins == 4
        assert events.drain() == ["dice_shake", "dice_roll", "round_win", "game_win"]

    def test_nothing_pending_after_game_over(self):
        c, _ = self.win_game()
        assert c.scheduler.pending_kinds() == []
        c.tick(100.0)
        assert c.game_over

    def test_rolls_ignored_after_game_over(self):
        c, events = self.win_game()
        events.drain()
        before = c.state
        assert not c.request_roll()
        assert not c.request_roll()
        assert c.state == before
        assert events.drain() == []

    def test_blue_team_can_win(self):
        c, _ = make_coordinator(rolls=[2, 3, 4, 1, 1, 1])
        set_round(c, 1, blue_wins=3)
        roll_and_land(c)
        c.scheduler.run_next()  # kickoff for seat 1 (blue)
        c.scheduler.run_next()  # bot roll
        c.scheduler.run_next()  # dice land: Bunco
        assert c.winner is Team.BLUE


# ═══════════════════════════════════════════════════════════════════════════════
# 7. RESET
# ═══════════════════════════════════════════════════════════════════════════════

class TestReset:

    def test_reset_restores_start_of_game(self):
        c, _ = make_coordinator(rolls=[5, 1, 2])
        set_score(c, 0, 20)
        set_round(c, 5)
        roll_and_land(c)
        c.reset()
        assert c.state.round.number == 1
        assert c.state.round.target == 1
        assert c.state.round.red_wins == 0
        assert c.state.turn.current_player == 0
        assert all(p.score == 0 for p in c.state.players)
        assert c.game_log.entries == []

    def test_reset_cancels_every_timer(self):
        c, _ = make_coordinator(rolls=[1, 2, 3])
        c.request_roll()
        c.reset()
        assert c.scheduler.pending_kinds() == [ADVANCE]
        assert not c.is_rolling

    def test_reset_after_game_over(self):
        c, _ = make_coordinator(rolls=[3, 1, 2])
        set_score(c, 0, 20)
        set_round(c, 3, red_wins=3)
        roll_and_land(c)
        assert c.game_over
        c.reset()
        assert not c.game_over
        c.scheduler.run_next()
        assert c.can_roll_now

    def test_reset_keeps_custom_table(self):
        players = make_players(name="Ada")
        c = GameCoordinator(players=players)
        c.reset()
        assert c.state.players[0].name == "Ada"


# ═══════════════════════════════════════════════════════════════════════════════
# 8. CONFIGURATION AND CLI
# ═══════════════════════════════════════════════════════════════════════════════

class TestConfiguration:

    def test_apply_preset(self):
        c = GameCoordinator()
        c.apply_probability_preset("demo")
        assert c.config.probabilities == get_preset("demo")

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            GameCoordinator().apply_probability_preset("nope")

    def test_seeded_games_repeat(self):
        def play(seed):
            c = GameCoordinator(rng=random.Random(seed), players=make_players(spectate=True))
            for _ in range(200):
                c.scheduler.run_next()
            return c.state

        assert play(3) == play(3)


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.preset is None
        assert args.name == "Player 1"
        assert args.seed is None
        assert args.spectate is False
        assert args.no_sound is False

    def test_all_flags(self):
        args = parse_args(["--preset", "demo", "--name", "Ada", "--seed", "4", "--spectate", "--no-sound"])
        assert args.preset == "demo"
        assert args.name == "Ada"
        assert args.seed == 4
        assert args.spectate
        assert args.no_sound

    def test_bad_preset(self):
        with pytest.raises(SystemExit):
            parse_args(["--preset", "wild"])

    def test_make_players(self):
        players = make_players("Ada")
        assert players[0].name == "Ada"
        assert players[0].is_human
        assert [p.name for p in players[1:]] == ["Bertha S.", "Minnie X.", "Grace E."]

    def test_spectate_makes_all_bots(self):
        assert not any(p.is_human for p in make_players(spectate=True))

    def test_coordinator_from_args(self):
        c = coordinator_from_args(parse_args(["--preset", "demo", "--name", "Ada", "--seed", "1"]))
        assert c.config.probabilities == get_preset("demo")
        assert c.state.players[0].name == "Ada"
