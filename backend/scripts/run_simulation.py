#!/usr/bin/env python3
"""Play a headless Beer Game with order policies and report the bullwhip effect."""

from __future__ import annotations

import argparse
import csv
import json
import os
from typing import List, Optional

from beer_sim.core.config import settings
from beer_sim.core.demand_patterns import DemandPatternType
from beer_sim.core.logging import setup_logging
from beer_sim.schemas.game import ROLE_SEQUENCE, ChainState, DemandPattern, GameSettings, PolicyName
from beer_sim.services.metrics import summarize_chain
from beer_sim.services.policies import make_policy
from beer_sim.services.simulation import run_simulation

CSV_COLUMNS = [
    "Week",
    "Node",
    "Order",
    "Shipment",
    "Weekly Cost",
]


def export_history(state: ChainState, output_path: str) -> str:
    """Write one row per participant and week."""
    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(output_path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(CSV_COLUMNS)
        for participant in state.participants:
            rows = zip(participant.weekly_orders, participant.weekly_shipments, participant.weekly_costs)
            for week, (order, shipment, cost) in enumerate(rows, start=1):
                writer.writerow([week, participant.role.value, order, shipment, f"{cost:.2f}"])
    return output_path


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--weeks", type=int, default=settings.TOTAL_WEEKS, help="Number of weeks to play")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in PolicyName],
        default=PolicyName.NAIVE.value,
        help="Order policy used by every role",
    )
    parser.add_argument("--base-stock", type=int, default=20, help="Target inventory position for base_stock")
    parser.add_argument("--inventory", type=int, default=settings.INITIAL_INVENTORY, help="Initial inventory per role")
    parser.add_argument(
        "--pattern",
        choices=[p.value for p in DemandPatternType],
        default=DemandPatternType.CLASSIC.value,
        help="Customer demand pattern",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random demand pattern")
    parser.add_argument("--csv", dest="csv_path", default=None, help="Write weekly history to this CSV file")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger = setup_logging("beer_sim")

    params = {"seed": args.seed} if args.pattern == DemandPatternType.RANDOM.value else {}
    game_settings = GameSettings(
        total_weeks=args.weeks,
        initial_inventory=args.inventory,
        demand_pattern=DemandPattern(type=args.pattern, params=params),
    )
    policies = {role: make_policy(args.policy, base_stock=args.base_stock) for role in ROLE_SEQUENCE}

    state = run_simulation(game_settings, policies)
    summary = summarize_chain(state)

    if args.csv_path:
        logger.info("Weekly history written to %s", export_history(state, args.csv_path))

    if args.json:
        print(json.dumps(summary.model_dump(mode="json"), indent=2))
    else:
        for row in summary.participants:
            print(
                f"{row.role.value:<12} total={row.total_cost:>9.2f} "
                f"avg/week={row.average_weekly_cost:>7.2f} orders={row.min_order}-{row.max_order}"
            )
        print(f"{'chain':<12} total={summary.total_cost:>9.2f} bullwhip={summary.bullwhip_ratio:.2f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
