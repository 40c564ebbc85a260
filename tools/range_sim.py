#!/usr/bin/env python3
"""
Heartbeat simulation for the range-bound operator.

Builds an in-memory system from settings, walks the token feed price randomly
(seeded, so runs are reproducible) and beats the heart once per period,
printing the band, wall capacities and cushion state after each beat.

    python tools/range_sim.py --beats 90 --seed 7 --volatility 400
"""

from __future__ import annotations

import argparse
import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.range_bound.errors import RangeBoundError
from src.core.range_bound.math import ONE_HUNDRED_PERCENT
from src.core.range_bound.types import Side
from src.integration.settings import configure_logging, load_settings
from src.integration.system import FEED_DECIMALS, build_system


def _fmt(price: int, decimals: int) -> str:
    return f"{price / 10**decimals:.4f}"


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Simulate heartbeats of the range-bound operator.")
    ap.add_argument("--config", type=Path, default=None, help="YAML settings file")
    ap.add_argument("--beats", type=int, default=30)
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument("--start-price", type=float, default=10.0, help="token price in reserve units")
    ap.add_argument("--volatility", type=int, default=300, help="max per-beat move in bps")
    ap.add_argument("--drift", type=int, default=0, help="per-beat drift in bps")
    args = ap.parse_args(argv)

    if args.beats <= 0:
        ap.error("--beats must be positive")

    settings = load_settings(args.config)
    configure_logging(settings.log_level)
    rng = random.Random(args.seed)

    answer = int(args.start_price * 10**FEED_DECIMALS)
    system = build_system(settings, token_answer=answer)
    decimals = system.price.decimals

    for i in range(1, args.beats + 1):
        system.clock.set(system.heart.next_beat())
        move = rng.randint(-args.volatility, args.volatility) + args.drift
        answer = max(1, answer * (ONE_HUNDRED_PERCENT + move) // ONE_HUNDRED_PERCENT)
        system.publish_price(answer)
        try:
            report = system.heart.beat("keeper")
        except RangeBoundError as exc:
            print(f"[range-sim] beat {i}: FAIL {type(exc).__name__}: {exc}")
            return 1

        low, high = system.operator.range.low, system.operator.range.high
        events = []
        for label, sides in (
            ("regen", report.regenerated),
            ("down", report.walls_down),
            ("up", report.cushions_opened),
            ("closed", report.cushions_closed),
        ):
            events.extend(f"{label}:{s.value}" for s in sides)
        print(
            f"[range-sim] beat {i:>3} price={_fmt(report.last_price, decimals)} "
            f"ma={_fmt(report.moving_average, decimals)} "
            f"band=[{_fmt(low.wall_price, decimals)} {_fmt(low.cushion_price, decimals)} | "
            f"{_fmt(high.cushion_price, decimals)} {_fmt(high.wall_price, decimals)}] "
            f"cap_low={low.capacity} cap_high={high.capacity} "
            f"low={system.operator.side_mode(Side.LOW).value} high={system.operator.side_mode(Side.HIGH).value}"
            + (f" {' '.join(events)}" if events else "")
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
