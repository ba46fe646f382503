"""
Side model - one end of the crossing.

A side owns an arrival queue, a fixed set of toll booth slots and a
waiting area for tolled vehicles. Every container is mutated only while
holding the side's lock. When the ferry is involved the lock order is
side first, then ferry; a side lock is never held while taking the other
side's lock.
"""

from __future__ import annotations

import random
import threading
from collections import deque
from dataclasses import dataclass

from ferry_sim.config.constants import CONTAINER_LIMIT
from ferry_sim.models.vehicle import Vehicle
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class TollBooth:
    """A booth slot: idle, or serving exactly one vehicle."""
    name: str
    vehicle: Vehicle | None = None

    @property
    def is_occupied(self) -> bool:
        return self.vehicle is not None


@dataclass
class SideCounts:
    queued: int
    at_toll: int
    waiting: int

    @property
    def total(self) -> int:
        return self.queued + self.at_toll + self.waiting


class Side:
    """
    One end of the crossing and its queueing pipeline.

    Args:
        name: Side name, e.g. "Side_A"
        booth_count: Number of toll booths
        container_limit: Max vehicles in the queue and in the waiting area
        on_drop: Called with (vehicle, container) when a vehicle is
                 dropped because a container is full
    """

    def __init__(self, name, booth_count=2, container_limit=CONTAINER_LIMIT, on_drop=None):
        self.name = name
        self.container_limit = container_limit
        self.booths = [TollBooth(f"{name}_Booth_{i + 1}") for i in range(booth_count)]
        self.queue: deque[Vehicle] = deque()
        self.waiting_area: deque[Vehicle] = deque()
        self.lock = threading.Lock()
        self._on_drop = on_drop

    # -- arrivals ---------------------------------------------------------

    def enqueue_arrival(self, vehicle: Vehicle, now: float) -> bool:
        """
        Append a vehicle to the arrival queue.

        Returns False (and drops the vehicle) if the queue is full.
        """
        with self.lock:
            if len(self.queue) >= self.container_limit:
                self._drop(vehicle, "queue")
                return False
            vehicle.mark_queued(self.name, now)
            self.queue.append(vehicle)
        logger.debug("%s (%d quota) arrived at %s and joined the queue",
                     vehicle.label, vehicle.quota, self.name)
        return True

    def shuffle_queue(self, rng: random.Random) -> None:
        with self.lock:
            order = list(self.queue)
            rng.shuffle(order)
            self.queue = deque(order)

    # -- toll booths -------------------------------------------------------

    def claim_for_booth(self, booth_index: int, now: float) -> Vehicle | None:
        """Move the queue head into an idle booth. None if nothing to do."""
        booth = self.booths[booth_index]
        with self.lock:
            if booth.is_occupied or not self.queue:
                return None
            vehicle = self.queue.popleft()
            booth.vehicle = vehicle
            vehicle.enter_toll(booth.name, now)
        logger.debug("%s (%d quota) is being processed at %s",
                     vehicle.label, vehicle.quota, booth.name)
        return vehicle

    def release_from_booth(self, booth_index: int, now: float) -> Vehicle | None:
        """Clear a booth and admit its vehicle to the waiting area."""
        booth = self.booths[booth_index]
        with self.lock:
            vehicle = booth.vehicle
            if vehicle is None:
                return None
            booth.vehicle = None
            self._admit_locked(vehicle, now)
        return vehicle

    def admit_to_waiting_area(self, vehicle: Vehicle, now: float) -> bool:
        """Append a tolled vehicle to the waiting area (False if full)."""
        with self.lock:
            return self._admit_locked(vehicle, now)

    def _admit_locked(self, vehicle: Vehicle, now: float) -> bool:
        if len(self.waiting_area) >= self.container_limit:
            self._drop(vehicle, "waiting area")
            return False
        vehicle.enter_waiting_area(now)
        self.waiting_area.append(vehicle)
        logger.debug("%s (%d quota) completed toll at %s and entered the waiting area",
                     vehicle.label, vehicle.quota, vehicle.booth_name)
        return True

    def _drop(self, vehicle: Vehicle, container: str) -> None:
        logger.warning("%s full at %s, cannot add vehicle %s",
                       container.capitalize(), self.name, vehicle.label)
        vehicle.drop()
        if self._on_drop is not None:
            self._on_drop(vehicle, f"{self.name} {container}")

    # -- ferry side ---------------------------------------------------------

    def board_waiting(self, ferry, now: float, trip_number: int) -> list[Vehicle]:
        """
        Board every waiting vehicle that still fits, in arrival order.

        Vehicles that do not fit keep their place in the waiting area.
        """
        boarded = []
        with self.lock:
            kept: deque[Vehicle] = deque()
            while self.waiting_area:
                vehicle = self.waiting_area.popleft()
                if ferry.load_vehicle(vehicle, now, trip_number):
                    boarded.append(vehicle)
                else:
                    kept.append(vehicle)
            self.waiting_area = kept
        return boarded

    def visible_quotas(self) -> list[int]:
        """Quotas of every vehicle at this side: waiting, in toll, queued."""
        with self.lock:
            quotas = [v.quota for v in self.waiting_area]
            quotas += [b.vehicle.quota for b in self.booths if b.vehicle is not None]
            quotas += [v.quota for v in self.queue]
        return quotas

    def has_work(self) -> bool:
        """True if any vehicle is queued, in a booth, or waiting here."""
        with self.lock:
            return bool(self.queue or self.waiting_area
                        or any(b.is_occupied for b in self.booths))

    def waiting_count(self) -> int:
        with self.lock:
            return len(self.waiting_area)

    def counts(self) -> SideCounts:
        with self.lock:
            return SideCounts(
                queued=len(self.queue),
                at_toll=sum(1 for b in self.booths if b.is_occupied),
                waiting=len(self.waiting_area),
            )

    def vehicles(self) -> list[Vehicle]:
        """Snapshot of every vehicle held by this side."""
        with self.lock:
            held = list(self.queue)
            held += [b.vehicle for b in self.booths if b.vehicle is not None]
            held += list(self.waiting_area)
        return held

    def __repr__(self):
        return f"Side({self.name})"
