#!/usr/bin/env python3
"""Simulate a player working through adaptively recommended scenarios.

The player has a hidden true skill and every scenario a hidden true
difficulty. Each round the adapter recommends a scenario, the player
succeeds with probability 1 / (1 + e^(difficulty - skill)) and answers in a
random fraction of the scenario's time limit, and the adapter updates both
ratings. Writes one TSV line per round.

Usage:
    python3 simulate_player.py --rounds 500 --seed 7 --output sim.tsv
"""
import argparse
import csv
import logging
import logging.handlers
import math
import random
from datetime import datetime, timedelta, timezone

from config.settings import LOG_FILE, LOG_LEVEL
from services.adapter import DifficultyAdapter

logger = logging.getLogger('skillmatch.simulate')

GAME_ID = 'simulation'
PLAYER_ID = 'simulated-player'
TIME_LIMIT_MS = 120000.0


def setup_logging():
    """Console plus daily-rotated debug file, 3-day retention."""
    file_handler = logging.handlers.TimedRotatingFileHandler(
        LOG_FILE, when='midnight', backupCount=3, encoding='utf-8',
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    ))
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[logging.StreamHandler(), file_handler],
    )


class SimulatedClock:
    """Advances a fixed step every time it is read."""

    def __init__(self, start, step):
        self.now = start
        self.step = step

    def __call__(self):
        self.now = self.now + self.step
        return self.now


def build_adapter(true_difficulties, seed, strategy='fuzzy'):
    clock = SimulatedClock(datetime(2020, 1, 1, tzinfo=timezone.utc), timedelta(minutes=5))
    adapter = DifficultyAdapter(seed=seed, clock=clock)
    adapter.matching_strategy = strategy
    adapter.add_player(GAME_ID, PLAYER_ID)
    for scenario_id in true_difficulties:
        adapter.add_scenario(GAME_ID, scenario_id, TIME_LIMIT_MS)
    return adapter


def run(rounds, seed, true_skill=1.0, scenario_count=10, strategy='fuzzy', writer=None):
    """Play `rounds` recommended scenarios. Returns summary statistics."""
    outcome_rng = random.Random(seed)
    true_difficulties = {
        f'scenario-{i + 1:02d}': -2.0 + 4.0 * i / max(scenario_count - 1, 1)
        for i in range(scenario_count)
    }
    adapter = build_adapter(true_difficulties, seed, strategy)

    successes = 0
    for round_no in range(1, rounds + 1):
        scenario_id = adapter.target_scenario_id(GAME_ID, PLAYER_ID)
        if scenario_id is None:
            logger.error("Round %d: no scenario recommended, stopping", round_no)
            break

        p_success = 1.0 / (1.0 + math.exp(true_difficulties[scenario_id] - true_skill))
        correct = 1 if outcome_rng.random() < p_success else 0
        response_time = TIME_LIMIT_MS * outcome_rng.uniform(0.05, 1.0)
        record = adapter.update_ratings(GAME_ID, PLAYER_ID, scenario_id, response_time, correct)
        if record is None:
            continue
        successes += correct
        if writer is not None:
            writer.writerow([round_no, scenario_id, correct, round(response_time),
                             f"{record['player_rating']:.4f}", f"{record['scenario_rating']:.4f}"])

    player = adapter.store.get_player(adapter.adapter_type, GAME_ID, PLAYER_ID)
    return {
        'rounds': len(adapter.history),
        'success_rate': successes / len(adapter.history) if len(adapter.history) else 0.0,
        'final_rating': player['rating'],
        'final_uncertainty': player['uncertainty'],
        'play_counts': {
            sid: adapter.store.get_scenario(adapter.adapter_type, GAME_ID, sid)['play_count']
            for sid in true_difficulties
        },
    }


def main(argv=None):
    parser = argparse.ArgumentParser(description="Simulate adaptive scenario matching")
    parser.add_argument('--rounds', type=int, default=200)
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--skill', type=float, default=1.0, help="hidden true skill")
    parser.add_argument('--scenarios', type=int, default=10)
    parser.add_argument('--strategy', default='fuzzy',
                        choices=['fuzzy', 'legacy_old', 'legacy_new'])
    parser.add_argument('--output', default=None, help="TSV file for per-round ratings")
    args = parser.parse_args(argv)

    setup_logging()

    if args.output:
        with open(args.output, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f, delimiter='\t')
            writer.writerow(['round', 'scenario', 'correct', 'rt_ms',
                             'player_rating', 'scenario_rating'])
            summary = run(args.rounds, args.seed, args.skill, args.scenarios,
                          args.strategy, writer)
    else:
        summary = run(args.rounds, args.seed, args.skill, args.scenarios, args.strategy)

    print("=" * 60)
    print(f"Rounds:        {summary['rounds']}")
    print(f"Success rate:  {summary['success_rate'] * 100:.1f}%")
    print(f"Final rating:  {summary['final_rating']:.4f}")
    print(f"Uncertainty:   {summary['final_uncertainty']:.3f}")
    print("=" * 60)
    for sid, count in summary['play_counts'].items():
        print(f"  {sid}: {count} plays")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
