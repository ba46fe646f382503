"""
Ferry model - the single ferry shuttling between the two sides
"""

from __future__ import annotations

import threading

from ferry_sim.config.constants import FERRY_CAPACITY
from ferry_sim.models.vehicle import Vehicle
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


class Ferry:
    """
    The ferry: a capacity in quota units and the vehicles on board.

    Invariant after every transition: load == sum of boarded quotas and
    load <= capacity.
    """

    def __init__(self, capacity=FERRY_CAPACITY, docked_at=None, name="Ferry"):
        """
        Creates an empty ferry.

        Args:
            capacity: Maximum load in quota units
            docked_at: Side where the ferry starts (None = in transit)
            name: Name used in log messages
        """
        self.name = name
        self.capacity = capacity
        self.docked_at = docked_at
        self.load = 0
        self.vehicles: list[Vehicle] = []
        self.lock = threading.Lock()

    @property
    def vehicle_count(self) -> int:
        with self.lock:
            return len(self.vehicles)

    @property
    def free_capacity(self) -> int:
        with self.lock:
            return self.capacity - self.load

    def load_vehicle(self, vehicle: Vehicle, now: float, trip_number: int) -> bool:
        """
        Boards a vehicle if it fits.

        Args:
            vehicle: The vehicle to board
            now: Boarding time
            trip_number: Number of the crossing this vehicle will ride

        Returns:
            True if the vehicle boarded, False if it would exceed capacity
        """
        with self.lock:
            if self.load + vehicle.quota > self.capacity:
                return False
            leg = vehicle.leg.value
            vehicle.board(now, trip_number)
            self.vehicles.append(vehicle)
            self.load += vehicle.quota
            load = self.load
        logger.debug("%s (%d quota) boarded for %s journey (Used: %d/%d, Remaining: %d)",
                     vehicle.label, vehicle.quota, leg, load, self.capacity, self.capacity - load)
        return True

    def depart(self):
        """
        Leaves the current side; vehicles on board go in transit.

        Returns:
            The side the ferry left
        """
        with self.lock:
            origin = self.docked_at
            self.docked_at = None
            for vehicle in self.vehicles:
                vehicle.depart()
        return origin

    def dock(self, side) -> None:
        with self.lock:
            self.docked_at = side
        logger.debug("%s docked at %s", self.name, side.name)

    def unload_all(self) -> list[Vehicle]:
        """
        Takes every vehicle off and resets the load.

        Returns:
            The vehicles that were on board, in boarding order
        """
        with self.lock:
            unloaded = self.vehicles
            self.vehicles = []
            self.load = 0
        return unloaded

    def snapshot(self) -> tuple[int, int]:
        """(load, vehicle_count) read atomically."""
        with self.lock:
            return self.load, len(self.vehicles)

    def check_invariants(self) -> bool:
        with self.lock:
            return (self.load == sum(v.quota for v in self.vehicles)
                    and 0 <= self.load <= self.capacity)

    def __repr__(self):
        where = self.docked_at.name if self.docked_at is not None else "in transit"
        return f"Ferry({self.load}/{self.capacity}, {len(self.vehicles)} vehicles, {where})"
