#!/usr/bin/env python3
"""
Head-to-head evaluator for two genomes.

Example:
  PYTHONPATH=src python3 scripts/eval_genomes.py \
    --challenger 3.1,0.4,7.9,2.2 \
    --baseline 1,1,1,1 \
    --games 20 \
    --depth 4
"""

from __future__ import annotations

import argparse
import math
import os
import sys
from typing import Optional

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from connectevo.ai.agent import Agent, parse_genome
from connectevo.ai.selfplay import play_match
from connectevo.engine import Player


def elo_from_score(score: float) -> float:
    score = min(0.9999, max(0.0001, score))
    return -400.0 * math.log10((1.0 / score) - 1.0)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Evaluate a genome against a baseline genome.")
    parser.add_argument("--challenger", required=True, help="Challenger genome a,b,c,d.")
    parser.add_argument("--baseline", default="1,1,1,1", help="Baseline genome (default: 1,1,1,1).")
    parser.add_argument("--games", type=int, default=20, help="Number of games (default: 20).")
    parser.add_argument("--depth", type=int, default=4, help="Search depth for both sides (default: 4).")
    args = parser.parse_args(argv)

    try:
        challenger_genome = parse_genome(args.challenger)
        baseline_genome = parse_genome(args.baseline)
    except ValueError as exc:
        print(f"error: {exc}")
        return 2
    if challenger_genome is None or baseline_genome is None:
        print("error: both genomes must be given as a,b,c,d")
        return 2
    challenger = Agent(challenger_genome)
    baseline = Agent(baseline_genome)

    wins = 0
    losses = 0
    draws = 0

    # Search is deterministic, so only two distinct games exist; colours alternate.
    for game_idx in range(args.games):
        challenger_first = game_idx % 2 == 0
        first, second = (challenger, baseline) if challenger_first else (baseline, challenger)
        result = play_match(first, second, depth=args.depth)
        if result.winner is None:
            draws += 1
            continue
        challenger_won = (result.winner is Player.ONE) == challenger_first
        if challenger_won:
            wins += 1
        else:
            losses += 1
        print(
            f"[eval] game {game_idx + 1}/{args.games} "
            f"winner={'challenger' if challenger_won else 'baseline'} plies={result.plies}",
            flush=True,
        )

    total = wins + losses + draws
    score = (wins + 0.5 * draws) / max(1, total)
    elo = elo_from_score(score)

    print("Genome head-to-head results")
    print(f"Games: {total}  Wins: {wins}  Losses: {losses}  Draws: {draws}")
    print(f"Score: {score:.4f}")
    print(f"Elo estimate: {elo:+.1f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
