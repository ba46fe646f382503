"""
Simulation service - builds a crossing, runs it, and reports on it.
"""

from __future__ import annotations

from collections import Counter

from ferry_sim.config.constants import SIDE_NAMES, VEHICLE_QUOTAS
from ferry_sim.config.settings import SimulationConfig
from ferry_sim.models.ferry import Ferry
from ferry_sim.models.side import Side
from ferry_sim.models.vehicle import JourneyState, Vehicle, VehicleType
from ferry_sim.services.context import SimulationContext
from ferry_sim.services.controller import FerryController
from ferry_sim.services.errands import ErrandScheduler
from ferry_sim.services.stats import SimulationReport, build_report
from ferry_sim.services.toll_booth import TollBoothWorker
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


def create_default_sides(config: SimulationConfig, on_drop=None) -> list[Side]:
    """
    Creates the two sides of the crossing.

    Args:
        config: Run settings (booth count, container limit)
        on_drop: Callback for vehicles dropped by a full container

    Returns:
        List of two Side objects
    """
    return [
        Side(name, config.booths_per_side, config.container_limit, on_drop=on_drop)
        for name in SIDE_NAMES
    ]


def find_side_by_name(sides, side_name):
    """
    Finds a side by name (case-insensitive).

    Returns:
        The Side if found, otherwise None
    """
    side_name_lower = side_name.lower()
    for side in sides:
        if side.name.lower() == side_name_lower:
            return side
    return None


class FerrySimulation:
    """
    One run of the crossing: two sides, one ferry, a fleet, and the
    workers that move it.

    The ferry starts at a random side; the whole fleet is created there,
    queued, and the queue shuffled.
    """

    def __init__(self, config: SimulationConfig | None = None, start_side: str | None = None):
        self.config = config or SimulationConfig()
        self.context = SimulationContext.create(self.config)
        stats = self.context.stats

        self.sides = create_default_sides(self.config, on_drop=stats.record_drop)
        if start_side is None:
            start = self.context.rng.choice(self.sides)
        else:
            start = find_side_by_name(self.sides, start_side)
            if start is None:
                raise ValueError(f"Unknown side: {start_side}")

        self.ferry = Ferry(self.config.capacity, docked_at=start)
        self.start_side = start
        self.vehicles = self.create_vehicles(start)

        self.errands = ErrandScheduler(self.context)
        self.booth_workers = [
            TollBoothWorker(side, index, self.context)
            for side in self.sides
            for index in range(len(side.booths))
        ]
        self.controller = FerryController(
            self.ferry, self.sides, self.context, self.errands, fleet_origin=start
        )
        self._started = False
        self.elapsed = 0.0
        self.time_limit_reached = False

    def create_vehicles(self, side: Side) -> list[Vehicle]:
        """Create the fleet at `side`, cars first, then shuffle the queue."""
        vehicles = []
        next_id = 1
        now = self.context.clock.now()
        for type_name in VEHICLE_QUOTAS:
            for _ in range(self.config.fleet.get(type_name, 0)):
                vehicle = Vehicle(next_id, VehicleType.from_name(type_name), side.name)
                next_id += 1
                vehicles.append(vehicle)
                side.enqueue_arrival(vehicle, now)

        side.shuffle_queue(self.context.rng)
        logger.info("Created and randomized %d vehicles at %s",
                    side.counts().queued, side.name)
        return vehicles

    def start(self) -> None:
        if self._started:
            raise RuntimeError("Simulation already started")
        self._started = True
        for worker in self.booth_workers:
            worker.start()
        self.controller.start()

    def stop(self) -> None:
        """Raise the stop signal and wait for every worker to finish its step."""
        self.context.stop()
        self.controller.join()
        for worker in self.booth_workers:
            worker.join()
        self.errands.shutdown(wait=True)

    def run(self) -> SimulationReport:
        """
        Run until every vehicle completed its round trip or time runs out.

        Returns:
            SimulationReport of the finished run
        """
        clock = self.context.clock
        stats = self.context.stats
        config = self.config

        logger.info("Simulation running (max %.0f units). Ferry starts at %s "
                    "with capacity %d", config.duration, self.start_side.name, config.capacity)
        started_at = clock.now()
        self.start()

        while True:
            if stats.all_settled:
                logger.info("All %d vehicles have been transported!", stats.transported)
                break
            if clock.now() - started_at >= config.duration:
                self.time_limit_reached = True
                logger.info("Simulation time limit reached.")
                break
            if clock.wait(self.context.stop_event, config.monitor_interval):
                logger.warning("Simulation stopped early by a failed worker")
                break

        logger.info("Stopping all workers...")
        self.stop()
        self.elapsed = clock.now() - started_at
        return self.report()

    def report(self) -> SimulationReport:
        return build_report(
            self.context.stats,
            self.vehicles,
            self.sides,
            self.ferry,
            self.config.fleet,
            self.elapsed,
            time_limit_reached=self.time_limit_reached,
        )

    def location_counts(self) -> Counter:
        """How many vehicles are in each journey state right now."""
        return Counter(v.state for v in self.vehicles)

    def accounted_vehicles(self) -> int:
        """
        Vehicles found in some container, on an errand, finished or dropped.

        Equals the fleet size whenever the workers are at rest.
        """
        held = sum(side.counts().total for side in self.sides)
        held += self.ferry.vehicle_count
        states = self.location_counts()
        held += states[JourneyState.UNLOADED] + states[JourneyState.ERRAND_PENDING]
        held += states[JourneyState.COMPLETE] + states[JourneyState.DROPPED]
        return held
