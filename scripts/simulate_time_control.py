#!/usr/bin/env python3
"""
Play out a time control against the time manager and print the allocations.

Usage:
    python3 scripts/simulate_time_control.py INITIAL_SECONDS INCREMENT_SECONDS [options]

Options:
    --moves N          Number of own moves to simulate (default: 80)
    --movestogo N      Moves per time control period, 0 for sudden death (default: 0)
    --overhead N       Move overhead in milliseconds (default: 10)
    --start-ply N      Ply of the first simulated move (default: 0)
    --every N          Print every Nth move (default: 5)

Examples:
    python3 scripts/simulate_time_control.py 60 0
    python3 scripts/simulate_time_control.py 180 2 --moves 120
    python3 scripts/simulate_time_control.py 5400 0 --movestogo 40 --moves 100
"""

import argparse
import os
import sys

# Add the repository root to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chess_timeman.simulation import simulate_game


def main():
    parser = argparse.ArgumentParser(
        description="Simulate a game against the clock",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument("initial", type=float, help="Initial clock time in seconds")
    parser.add_argument("increment", type=float, help="Increment per move in seconds")
    parser.add_argument("--moves", type=int, default=80,
                       help="Number of own moves to simulate")
    parser.add_argument("--movestogo", type=int, default=0,
                       help="Moves per time control period, 0 for sudden death")
    parser.add_argument("--overhead", type=int, default=10,
                       help="Move overhead in milliseconds")
    parser.add_argument("--start-ply", type=int, default=0,
                       help="Ply of the first simulated move")
    parser.add_argument("--every", type=int, default=5,
                       help="Print every Nth move")
    args = parser.parse_args()

    result = simulate_game(int(args.initial * 1000), int(args.increment * 1000), args.moves,
                           movestogo=args.movestogo, overhead_ms=args.overhead,
                           start_ply=args.start_ply)

    print(f"{'ply':>5} {'clock':>10} {'optimum':>9} {'maximum':>9}")
    for i, record in enumerate(result.moves):
        if i % args.every == 0 or i == len(result.moves) - 1:
            print(f"{record.ply:>5} {record.clock_before / 1000:>9.2f}s {record.optimum:>7}ms {record.maximum:>7}ms")

    if result.original_time_adjust >= 0:
        print(f"\n📐 Original time adjust: {result.original_time_adjust:.4f}")
    if result.flagged:
        print(f"❌ Flagged after {len(result.moves)} moves")
        sys.exit(1)
    print(f"✅ Finished {len(result.moves)} moves with {result.final_clock / 1000:.2f}s left")


if __name__ == "__main__":
    main()
