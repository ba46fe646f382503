"""
Simulation statistics.

SimulationStats holds the run-wide counters (trips, transported vehicles,
drops) and the per-vehicle completion records. It has its own lock; the
lock is a leaf: nothing else is acquired while it is held.

build_report() turns the final state of a run into a SimulationReport
that the CLI prints or dumps as JSON.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field

from ferry_sim.config.constants import MAX_VEHICLE_RECORDS, VEHICLE_QUOTAS
from ferry_sim.models.vehicle import JourneyState, Vehicle, elapsed
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class VehicleRecord:
    """Lifecycle record of one vehicle, with repaired, non-negative durations."""
    id: int
    type_name: str
    quota: int
    origin: str
    outbound_queue_time: float
    outbound_journey_time: float
    outbound_trip_number: int
    return_queue_time: float
    return_journey_time: float
    return_trip_number: int
    total_round_trip_time: float
    time_at_destination: float
    completed_round_trip: bool

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle) -> VehicleRecord:
        outbound, back = vehicle.repaired_times()
        completed = vehicle.state is JourneyState.COMPLETE

        if completed:
            return_queue = back.queue_time
            return_journey = back.journey_time
            round_trip = elapsed(back.unload, outbound.arrival)
            at_destination = float(vehicle.errand_time)
        else:
            return_queue = return_journey = at_destination = 0.0
            round_trip = outbound.journey_time

        return cls(
            id=vehicle.id,
            type_name=vehicle.type_name,
            quota=vehicle.quota,
            origin=vehicle.origin,
            outbound_queue_time=outbound.queue_time,
            outbound_journey_time=outbound.journey_time,
            outbound_trip_number=vehicle.outbound_trip_number,
            return_queue_time=return_queue,
            return_journey_time=return_journey,
            return_trip_number=vehicle.return_trip_number if completed else 0,
            total_round_trip_time=round_trip,
            time_at_destination=at_destination,
            completed_round_trip=completed,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type_name,
            "quota": self.quota,
            "origin": self.origin,
            "outbound_queue_time": round(self.outbound_queue_time, 2),
            "outbound_journey_time": round(self.outbound_journey_time, 2),
            "outbound_trip": self.outbound_trip_number,
            "return_queue_time": round(self.return_queue_time, 2),
            "return_journey_time": round(self.return_journey_time, 2),
            "return_trip": self.return_trip_number,
            "total_round_trip_time": round(self.total_round_trip_time, 2),
            "time_at_destination": round(self.time_at_destination, 2),
            "completed_round_trip": self.completed_round_trip,
        }


class SimulationStats:
    """
    Thread-safe run counters and completion records.

    Args:
        total_vehicles: Size of the fleet
        max_records: Completion records kept; later ones are dropped
    """

    def __init__(self, total_vehicles: int, max_records: int = MAX_VEHICLE_RECORDS):
        self.total_vehicles = total_vehicles
        self.max_records = max_records
        self._lock = threading.Lock()
        self._transported = 0
        self._trip_count = 0
        self._records: list[VehicleRecord] = []
        self._records_dropped = 0
        self._drops: list[tuple[str, str]] = []

    @property
    def transported(self) -> int:
        with self._lock:
            return self._transported

    @property
    def trip_count(self) -> int:
        with self._lock:
            return self._trip_count

    @property
    def remaining_vehicles(self) -> int:
        """Vehicles still in play: not transported and not dropped."""
        with self._lock:
            return self.total_vehicles - self._transported - len(self._drops)

    @property
    def records(self) -> list[VehicleRecord]:
        with self._lock:
            return list(self._records)

    @property
    def drops(self) -> list[tuple[str, str]]:
        with self._lock:
            return list(self._drops)

    @property
    def records_dropped(self) -> int:
        with self._lock:
            return self._records_dropped

    def next_trip_number(self) -> int:
        with self._lock:
            return self._trip_count + 1

    def complete_trip(self) -> int:
        """Count a finished crossing and return its number."""
        with self._lock:
            self._trip_count += 1
            return self._trip_count

    def record_completion(self, vehicle: Vehicle) -> bool:
        """
        Count a vehicle that finished its round trip and keep its record.

        Returns False if the record store is full (the vehicle still counts
        as transported).
        """
        record = VehicleRecord.from_vehicle(vehicle)
        with self._lock:
            self._transported += 1
            if len(self._records) < self.max_records:
                self._records.append(record)
                return True
            self._records_dropped += 1
            first_overflow = self._records_dropped == 1
        if first_overflow:
            logger.warning("Maximum vehicle record count (%d) reached; further records dropped",
                           self.max_records)
        return False

    def record_drop(self, vehicle: Vehicle, container: str) -> None:
        with self._lock:
            self._drops.append((vehicle.label, container))

    @property
    def all_settled(self) -> bool:
        """Every vehicle either completed its round trip or was dropped."""
        with self._lock:
            return self._transported + len(self._drops) >= self.total_vehicles


@dataclass
class SimulationReport:
    """Run-level aggregates handed to the reporting layer."""
    elapsed: float
    trips: int
    total_vehicles: int
    transported: int
    transported_by_class: dict[str, int]
    fleet: dict[str, int]
    quota_transported: int
    quota_total: int
    remaining: dict[str, dict[str, int]]
    ferry_location: str
    dropped: list[tuple[str, str]]
    records: list[VehicleRecord] = field(default_factory=list)
    records_dropped: int = 0
    time_limit_reached: bool = False

    @property
    def completion_rate(self) -> float:
        return self.transported / self.total_vehicles if self.total_vehicles else 0.0

    @property
    def quota_utilisation(self) -> float:
        return self.quota_transported / self.quota_total if self.quota_total else 0.0

    @property
    def remaining_total(self) -> int:
        return sum(sum(counts.values()) for counts in self.remaining.values())

    def averages(self) -> dict[str, float]:
        """Mean journey times over the completion records."""
        result: dict[str, float] = {}
        if not self.records:
            return result

        result["outbound"] = sum(r.outbound_journey_time for r in self.records) / len(self.records)
        round_trips = [r for r in self.records if r.completed_round_trip]
        if round_trips:
            result["return"] = sum(r.return_journey_time for r in round_trips) / len(round_trips)
            result["round_trip"] = sum(r.total_round_trip_time for r in round_trips) / len(round_trips)

        for type_name in VEHICLE_QUOTAS:
            of_type = [r for r in self.records if r.type_name == type_name]
            if of_type:
                key = f"{type_name.lower()}_outbound"
                result[key] = sum(r.outbound_journey_time for r in of_type) / len(of_type)

        if self.trips:
            result["vehicles_per_trip"] = len(self.records) / self.trips
        return result

    def to_dict(self) -> dict:
        return {
            "elapsed": round(self.elapsed, 2),
            "trips": self.trips,
            "total_vehicles": self.total_vehicles,
            "transported": self.transported,
            "completion_rate": round(self.completion_rate, 3),
            "transported_by_class": {
                name: {"transported": self.transported_by_class.get(name, 0), "total": total}
                for name, total in self.fleet.items()
            },
            "quota": {
                "transported": self.quota_transported,
                "total": self.quota_total,
                "utilisation": round(self.quota_utilisation, 3),
            },
            "remaining": self.remaining,
            "remaining_total": self.remaining_total,
            "ferry_location": self.ferry_location,
            "dropped": [{"vehicle": label, "container": where} for label, where in self.dropped],
            "records_dropped": self.records_dropped,
            "time_limit_reached": self.time_limit_reached,
            "averages": {k: round(v, 2) for k, v in self.averages().items()},
            "vehicles": [r.to_dict() for r in sorted(self.records, key=lambda r: r.id)],
        }


def build_report(
    stats: SimulationStats,
    vehicles: list[Vehicle],
    sides: list,
    ferry,
    fleet: dict[str, int],
    elapsed: float,
    time_limit_reached: bool = False,
) -> SimulationReport:
    """
    Summarise a finished run.

    Vehicle states are read after every worker has stopped, so no lock
    beyond the containers' own is needed.
    """
    completed = [v for v in vehicles if v.is_complete]
    by_class = Counter(v.type_name for v in completed)

    remaining: dict[str, dict[str, int]] = {}
    for side in sides:
        counts = side.counts()
        remaining[side.name] = {
            "queued": counts.queued,
            "at_toll": counts.at_toll,
            "waiting": counts.waiting,
        }
    remaining["ferry"] = {"on_board": ferry.vehicle_count}
    remaining["errand"] = {
        "pending": sum(1 for v in vehicles
                       if v.state in (JourneyState.UNLOADED, JourneyState.ERRAND_PENDING)),
    }

    quota_total = sum(VEHICLE_QUOTAS[name] * count for name, count in fleet.items())
    quota_transported = sum(v.quota for v in completed)
    location = ferry.docked_at.name if ferry.docked_at is not None else "in transit"

    return SimulationReport(
        elapsed=elapsed,
        trips=stats.trip_count,
        total_vehicles=len(vehicles),
        transported=stats.transported,
        transported_by_class=dict(by_class),
        fleet=dict(fleet),
        quota_transported=quota_transported,
        quota_total=quota_total,
        remaining=remaining,
        ferry_location=location,
        dropped=stats.drops,
        records=stats.records,
        records_dropped=stats.records_dropped,
        time_limit_reached=time_limit_reached,
    )
