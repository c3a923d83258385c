#!/usr/bin/env python3
"""
Bunco Bot Benchmark — Play N headless games per strategy and compare.

Every seat is driven by the same strategy, so the interesting numbers are
game length and how often the red team (which opens every game) wins.

Usage: python bot_benchmark.py [--games N] [--strategy NAME]
       python bot_benchmark.py --verbose --games 50
       python bot_benchmark.py --csv --preset demo
"""
import argparse
import random
import statistics
import time
from dataclasses import replace

from bot_ai import AlwaysRollStrategy, HeuristicStrategy, RandomStrategy, play_turn
from bunco_engine import GameState, Team
from game_config import DEFAULT_CONFIG, PRESET_NAMES, get_preset

MAX_TURNS = 100000

STRATEGIES = {
    "heuristic": ("Heuristic", HeuristicStrategy),
    "random": ("Random", RandomStrategy),
    "always": ("AlwaysRoll", AlwaysRollStrategy),
}


def play_counted_game(strategy, config, rng):
    """Play one game to the end. Returns (winning team, turns played)."""
    state = GameState.create_initial(config=config)
    turns = 0
    while not state.outcome.is_over:
        if turns >= MAX_TURNS:
            raise RuntimeError(f"No winner after {MAX_TURNS} turns")
        state = play_turn(state, strategy, config, rng)
        turns += 1
    return state.outcome.winner, turns


def benchmark_strategy(strategy_cls, num_games, config=DEFAULT_CONFIG, start_seed=0):
    """Run num_games seeded games. Returns (winners, turn counts, elapsed seconds)."""
    winners = []
    turns = []
    t0 = time.perf_counter()
    for seed in range(start_seed, start_seed + num_games):
        rng = random.Random(seed)
        winner, played = play_counted_game(strategy_cls(rng=rng), config, rng)
        winners.append(winner)
        turns.append(played)
    elapsed = time.perf_counter() - t0
    return winners, turns, elapsed


def summarize(winners, turns):
    """Win rates and turn statistics for one strategy's games."""
    n = len(winners)
    sorted_turns = sorted(turns)
    return {
        "games": n,
        "red_rate": sum(1 for w in winners if w is Team.RED) / n,
        "blue_rate": sum(1 for w in winners if w is Team.BLUE) / n,
        "avg_turns": sum(turns) / n,
        "stdev_turns": statistics.stdev(turns) if n >= 2 else 0.0,
        "median_turns": statistics.median(turns),
        "min_turns": sorted_turns[0],
        "max_turns": sorted_turns[-1],
    }


def print_results(name, summary, elapsed, verbose=False):
    """Print one formatted results line (two with verbose)."""
    per_game = elapsed / summary["games"] * 1000  # ms per game
    print(f"  {name:12s}  red={summary['red_rate']:6.1%}  blue={summary['blue_rate']:6.1%}  "
          f"turns={summary['avg_turns']:6.1f}  "
          f"({summary['games']} games in {elapsed:.2f}s, {per_game:.1f}ms/game)")
    if verbose:
        print(f"  {'':12s}  stdev={summary['stdev_turns']:5.1f}  median={summary['median_turns']:5.0f}  "
              f"min={summary['min_turns']:4d}  max={summary['max_turns']:4d}")


def print_csv_header():
    print("strategy,games,red_rate,blue_rate,avg_turns,stdev_turns,median_turns,min_turns,max_turns,elapsed_s")


def print_csv_row(name, summary, elapsed):
    print(f"{name},{summary['games']},{summary['red_rate']:.3f},{summary['blue_rate']:.3f},"
          f"{summary['avg_turns']:.1f},{summary['stdev_turns']:.1f},{summary['median_turns']:.0f},"
          f"{summary['min_turns']},{summary['max_turns']},{elapsed:.2f}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bunco Bot Benchmark")
    parser.add_argument("--games", type=int, default=200,
                        help="Number of games per strategy (default: 200)")
    parser.add_argument("--strategy", choices=sorted(STRATEGIES),
                        help="Run only a single strategy (default: all)")
    parser.add_argument("--preset", choices=PRESET_NAMES, default=None,
                        help="Roll-override probability preset (default: none)")
    parser.add_argument("--verbose", action="store_true",
                        help="Show extra turn statistics (stdev, median, range)")
    parser.add_argument("--csv", action="store_true",
                        help="Output results as CSV")
    args = parser.parse_args(argv)

    config = DEFAULT_CONFIG
    if args.preset:
        config = replace(config, probabilities=get_preset(args.preset))

    if args.strategy:
        strategies = [STRATEGIES[args.strategy]]
    else:
        strategies = list(STRATEGIES.values())

    if args.csv:
        print_csv_header()
    else:
        print(f"Bunco Bot Benchmark — {args.games} games per strategy")
        print("=" * 80)

    for name, strategy_cls in strategies:
        winners, turns, elapsed = benchmark_strategy(strategy_cls, args.games, config)
        summary = summarize(winners, turns)
        if args.csv:
            print_csv_row(name, summary, elapsed)
        else:
            print_results(name, summary, elapsed, verbose=args.verbose)

    if not args.csv:
        print("=" * 80)


if __name__ == "__main__":
    main()
