#!/usr/bin/env python3
"""
Ferry Crossing Simulation - CLI Entry Point

Usage:
    python -m ferry_sim.main                       # Canonical run (180 units, 12/10/8 fleet)
    python -m ferry_sim.main --time-scale 0.05     # Same run, 20x faster
    python -m ferry_sim.main --capacity 24         # Bigger ferry
    python -m ferry_sim.main --cars 20 --trucks 4  # Different fleet
    python -m ferry_sim.main --seed 7              # Reproducible random choices
    python -m ferry_sim.main --json                # Print the report as JSON
    python -m ferry_sim.main --verbose             # Per-vehicle lifecycle logs

Settings can also come from FERRY_SIM_* environment variables
(FERRY_SIM_CAPACITY, FERRY_SIM_FLEET_TRUCK, ...); flags win.
"""

import argparse
import json
import logging
import sys

from ferry_sim.config.settings import SimulationConfig
from ferry_sim.services.simulation import FerrySimulation
from ferry_sim.utils.logger import get_logger, set_level

logger = get_logger("ferry_sim.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Simulate a two-sided ferry crossing with toll booths.",
    )
    parser.add_argument("--duration", type=float, help="Run time limit in time units (default 180)")
    parser.add_argument("--capacity", type=int, help="Ferry capacity in quota units (default 20)")
    parser.add_argument("--booths", type=int, dest="booths_per_side",
                        help="Toll booths per side (default 2)")
    parser.add_argument("--container-limit", type=int,
                        help="Max vehicles per queue / waiting area (default 30)")
    parser.add_argument("--cars", type=int, help="Number of cars (quota 1)")
    parser.add_argument("--minibuses", type=int, help="Number of minibuses (quota 2)")
    parser.add_argument("--trucks", type=int, help="Number of trucks (quota 3)")
    parser.add_argument("--time-scale", type=float,
                        help="Wall-clock seconds per time unit (default 1.0)")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--start-side", help="Side the ferry and fleet start at (default random)")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--verbose", action="store_true", help="Log every vehicle event")
    return parser


def config_from_args(args) -> SimulationConfig:
    """Environment settings, overridden by whatever flags were given."""
    base = SimulationConfig.from_env()
    fleet = dict(base.fleet)
    for type_name, value in (("CAR", args.cars), ("MINIBUS", args.minibuses),
                             ("TRUCK", args.trucks)):
        if value is not None:
            fleet[type_name] = value

    return SimulationConfig.from_env(
        duration=args.duration,
        capacity=args.capacity,
        booths_per_side=args.booths_per_side,
        container_limit=args.container_limit,
        time_scale=args.time_scale,
        seed=args.seed,
        fleet=fleet,
    )


def print_report(report) -> None:
    """Print the end-of-run summary and the per-vehicle table."""
    print()
    print("=" * 72)
    print("  FERRY SIMULATION REPORT")
    print("=" * 72)
    print(f"Total simulation time: {report.elapsed:.2f} units")
    print(f"Number of trips completed: {report.trips}")
    if report.time_limit_reached:
        print("Time limit reached before every vehicle completed its round trip.")

    print()
    print("Transported Vehicles:")
    print(f"  Total: {report.transported} / {report.total_vehicles} vehicles "
          f"({report.completion_rate:.1%})")
    for type_name, total in report.fleet.items():
        done = report.transported_by_class.get(type_name, 0)
        print(f"  {type_name.capitalize():<9}: {done} / {total} vehicles")

    print()
    print("Remaining Vehicles:")
    print(f"  Total remaining vehicles: {report.remaining_total}")
    for location, counts in report.remaining.items():
        detail = ", ".join(f"{k.replace('_', ' ')}: {v}" for k, v in counts.items())
        print(f"  {location:<8} {detail}")
    print(f"  Current ferry location: {report.ferry_location}")
    if report.dropped:
        print(f"  Dropped on overflow: {len(report.dropped)}")

    print()
    print("Quota Usage:")
    print(f"  Total quotas transported: {report.quota_transported} / {report.quota_total} "
          f"({report.quota_utilisation:.1%})")
    print(f"  Total remaining quotas: {report.quota_total - report.quota_transported} / "
          f"{report.quota_total}")

    if report.records:
        print()
        print("Detailed Vehicle Statistics:")
        print("-" * 72)
        print(f"{'ID':>3} {'Type':<8} {'Origin':<7} {'Outbound':>9} {'Return':>9} "
              f"{'At Dest.':>9} {'Trips':>8}  Status")
        print("-" * 72)
        for r in sorted(report.records, key=lambda r: r.id):
            status = "Round trip" if r.completed_round_trip else "One-way"
            trips = f"{r.outbound_trip_number}->{r.return_trip_number}"
            print(f"{r.id:>3} {r.type_name:<8} {r.origin:<7} {r.outbound_journey_time:>9.1f} "
                  f"{r.return_journey_time:>9.1f} {r.time_at_destination:>9.1f} {trips:>8}  {status}")
        if report.records_dropped:
            print(f"  ({report.records_dropped} more records not kept)")

        averages = report.averages()
        print()
        print("Average Transport Times:")
        for key, value in averages.items():
            if key == "vehicles_per_trip":
                continue
            print(f"  {key.replace('_', ' ').capitalize():<20} {value:.2f} units")
        if "vehicles_per_trip" in averages:
            print(f"\nVehicles per Trip: {averages['vehicles_per_trip']:.2f} vehicles/trip")

    print("=" * 72)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_level(logging.DEBUG)

    try:
        config = config_from_args(args)
        simulation = FerrySimulation(config, start_side=args.start_side)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    fleet = ", ".join(f"{count} {name.lower()}" for name, count in config.fleet.items())
    logger.info("Starting simulation: capacity %d, %d booths per side, fleet %s",
                config.capacity, config.booths_per_side, fleet)

    try:
        report = simulation.run()
    except KeyboardInterrupt:
        print("\nInterrupted; stopping workers...")
        simulation.stop()
        report = simulation.report()

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
