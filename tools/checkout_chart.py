#!/usr/bin/env python3
"""
checkout_chart.py

Print the suggested checkout for every finishable score (2-170) and optionally verify the
whole chart: each path must add up to its score, fit in the dart budget and end on a double
or the bull.

Usage:
  python tools/checkout_chart.py [--darts N] [--double D] [--check]

Run it from an environment where the project is installed (pip install -e .).
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from checkout import MAX_CHECKOUT, MIN_CHECKOUT, CheckoutPath, compute_checkout, format_checkout_path


def path_problems(path: CheckoutPath, darts_left: int) -> list[str]:
    """
    Return a list of human readable problems with a possible checkout path (empty if fine).
    Impossible paths are not problems; the chart simply has no finish for that score.
    """
    if not path.possible:
        return []
    problems = []
    total = sum(d.points for d in path.darts)
    if total != path.score:
        problems.append(f"darts add up to {total}")
    if len(path.darts) > darts_left:
        problems.append(f"uses {len(path.darts)} darts")
    if not path.darts or not path.darts[-1].is_finishing:
        problems.append("does not finish on a double")
    return problems


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Print (and check) the checkout chart for 2-170")
    p.add_argument("--darts", type=int, default=3, choices=(1, 2, 3), help="Darts left in the turn (default 3)")
    p.add_argument("--double", type=int, default=None, help="Preferred finishing double (1-20, or 25 for bull)")
    p.add_argument("--check", action="store_true", help="Verify every path and exit 1 if any is bad")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    failures = 0
    for score in range(MAX_CHECKOUT, MIN_CHECKOUT - 1, -1):
        try:
            path = compute_checkout(score, args.double, args.darts)
        except ValueError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2

        if not args.check:
            print(f"{score:>3}  {format_checkout_path(path)}")
            continue

        problems = path_problems(path, args.darts)
        if problems:
            failures += 1
            print(f"{score:>3}  {format_checkout_path(path)}  <- {', '.join(problems)}", file=sys.stderr)

    if args.check:
        if failures:
            print(f"{failures} bad checkout(s)", file=sys.stderr)
            return 1
        print("All checkouts valid.")
    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
