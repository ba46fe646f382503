"""
Vehicle model - a vehicle making a round trip across the crossing
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum

from ferry_sim.config.constants import VEHICLE_QUOTAS


class VehicleType(Enum):
    """Vehicle class; the value is the quota it takes on the ferry."""
    CAR = VEHICLE_QUOTAS["CAR"]
    MINIBUS = VEHICLE_QUOTAS["MINIBUS"]
    TRUCK = VEHICLE_QUOTAS["TRUCK"]

    @property
    def quota(self) -> int:
        return self.value

    @classmethod
    def from_name(cls, name: str) -> VehicleType:
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown vehicle class: {name}") from None


class Leg(Enum):
    OUTBOUND = "outbound"
    RETURN = "return"


class JourneyState(Enum):
    NOT_STARTED = "not_started"
    QUEUED = "queued"
    AT_TOLL = "at_toll"
    WAITING = "waiting"
    BOARDED = "boarded"
    IN_TRANSIT = "in_transit"
    UNLOADED = "unloaded"
    ERRAND_PENDING = "errand_pending"
    COMPLETE = "complete"
    DROPPED = "dropped"


def elapsed(end: float | None, start: float | None) -> float:
    """Duration between two stamps, never negative; 0 if either is unset."""
    if end is None or start is None:
        return 0.0
    return max(0.0, end - start)


@dataclass
class LegTimes:
    """
    Timestamps of one leg, in the order they happen.

    For the return leg, `unload` is the time the round trip completed.
    """
    arrival: float | None = None
    toll_entry: float | None = None
    waiting_entry: float | None = None
    boarding: float | None = None
    unload: float | None = None

    def repaired(self, floor: float | None = None) -> LegTimes:
        """
        Copy with every stamp set and in non-decreasing order.

        Unset or out-of-order stamps are clamped forward to their
        predecessor; `floor` bounds the arrival from below.
        """
        stamps = {}
        previous = floor
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or (previous is not None and value < previous):
                value = previous
            stamps[f.name] = value
            previous = value
        return replace(self, **stamps)

    def is_ordered(self) -> bool:
        stamps = [getattr(self, f.name) for f in fields(self)]
        present = [s for s in stamps if s is not None]
        return all(a <= b for a, b in zip(present, present[1:]))

    @property
    def queue_time(self) -> float:
        return elapsed(self.toll_entry, self.arrival)

    @property
    def waiting_time(self) -> float:
        return elapsed(self.boarding, self.waiting_entry)

    @property
    def journey_time(self) -> float:
        return elapsed(self.unload, self.arrival)


class Vehicle:
    """
    A vehicle travelling from its origin side and back.

    The vehicle does not lock itself; it is mutated only by whoever holds
    the lock of the container it currently sits in.
    """

    def __init__(self, vehicle_id: int, vehicle_type: VehicleType, origin: str):
        self.id = vehicle_id
        self.type = vehicle_type
        self.origin = origin
        self.current_side = origin
        self.state = JourneyState.NOT_STARTED

        self.outbound = LegTimes()
        self.return_leg = LegTimes()
        self.outbound_trip_number = 0
        self.return_trip_number = 0
        self.errand_time = 0
        self.booth_name: str | None = None

    @property
    def quota(self) -> int:
        return self.type.quota

    @property
    def type_name(self) -> str:
        return self.type.name

    @property
    def label(self) -> str:
        return f"{self.type_name}_{self.id}"

    @property
    def leg(self) -> Leg:
        """Leg currently being travelled (or about to be)."""
        if self.outbound.unload is None:
            return Leg.OUTBOUND
        return Leg.RETURN

    @property
    def times(self) -> LegTimes:
        """Timestamps of the current leg."""
        return self.outbound if self.leg is Leg.OUTBOUND else self.return_leg

    @property
    def is_complete(self) -> bool:
        return self.state is JourneyState.COMPLETE

    # -- lifecycle transitions -------------------------------------------

    def mark_queued(self, side_name: str, now: float) -> None:
        self.current_side = side_name
        if self.times.arrival is None:
            self.times.arrival = now
        self.state = JourneyState.QUEUED

    def enter_toll(self, booth_name: str, now: float) -> None:
        self.booth_name = booth_name
        self.times.toll_entry = now
        self.state = JourneyState.AT_TOLL

    def enter_waiting_area(self, now: float) -> None:
        self.times.waiting_entry = now
        self.state = JourneyState.WAITING

    def board(self, now: float, trip_number: int) -> None:
        if self.leg is Leg.OUTBOUND:
            self.outbound_trip_number = trip_number
        else:
            self.return_trip_number = trip_number
        self.times.boarding = now
        self.state = JourneyState.BOARDED

    def depart(self) -> None:
        self.state = JourneyState.IN_TRANSIT

    def unload(self, side_name: str, now: float) -> Leg:
        """Finish the current leg at `side_name`; returns the leg finished."""
        finished = self.leg
        self.current_side = side_name
        self.times.unload = now
        if finished is Leg.OUTBOUND:
            self.state = JourneyState.UNLOADED
        else:
            self.state = JourneyState.COMPLETE
        return finished

    def start_errand(self, dwell: int) -> None:
        self.errand_time = dwell
        self.state = JourneyState.ERRAND_PENDING

    def begin_return(self, now: float) -> None:
        """Reset the return-leg stamps and record the return arrival."""
        self.return_leg = LegTimes(arrival=now)

    def drop(self) -> None:
        self.state = JourneyState.DROPPED

    def repaired_times(self) -> tuple[LegTimes, LegTimes]:
        """Both legs with clamped, ordered stamps (return after outbound)."""
        outbound = self.outbound.repaired()
        if self.return_leg.arrival is None and self.state is not JourneyState.COMPLETE:
            return outbound, self.return_leg
        return outbound, self.return_leg.repaired(floor=outbound.unload)

    def __repr__(self):
        return f"Vehicle({self.label}, quota={self.quota}, {self.state.value}, side={self.current_side})"
