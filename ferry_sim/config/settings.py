"""
Run settings for one simulation.

SimulationConfig gathers every tunable of a run. Defaults come from
constants.py; from_env() lets FERRY_SIM_* environment variables override
them, and the CLI overrides on top of that.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields

from ferry_sim.config.constants import (
    BOOTH_POLL_INTERVAL,
    BOOTHS_PER_SIDE,
    CONTAINER_LIMIT,
    DEFAULT_FLEET,
    DEPARTURE_GRACE,
    ENV_PREFIX,
    ERRAND_TIME_RANGE,
    FERRY_CAPACITY,
    FERRY_IDLE_INTERVAL,
    FERRY_POLL_INTERVAL,
    MAX_VEHICLE_RECORDS,
    MONITOR_INTERVAL,
    SIMULATION_TIME,
    STATUS_INTERVAL,
    TOLL_TIME_RANGE,
    TRAVEL_TIME_RANGE,
    UNLOAD_TIME_PER_VEHICLE,
    VEHICLE_QUOTAS,
    quota_for,
)


@dataclass
class SimulationConfig:
    """All parameters of a simulation run (times in simulation units)."""
    duration: float = SIMULATION_TIME
    fleet: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_FLEET))
    capacity: int = FERRY_CAPACITY
    booths_per_side: int = BOOTHS_PER_SIDE
    container_limit: int = CONTAINER_LIMIT
    max_records: int = MAX_VEHICLE_RECORDS

    toll_time: tuple[float, float] = TOLL_TIME_RANGE
    travel_time: tuple[float, float] = TRAVEL_TIME_RANGE
    errand_time: tuple[int, int] = ERRAND_TIME_RANGE
    unload_time_per_vehicle: float = UNLOAD_TIME_PER_VEHICLE

    departure_grace: float = DEPARTURE_GRACE
    booth_poll: float = BOOTH_POLL_INTERVAL
    ferry_poll: float = FERRY_POLL_INTERVAL
    ferry_idle: float = FERRY_IDLE_INTERVAL
    monitor_interval: float = MONITOR_INTERVAL
    status_interval: float = STATUS_INTERVAL

    time_scale: float = 1.0     # wall-clock seconds per simulation unit
    seed: int | None = None

    def __post_init__(self):
        self.fleet = {name.upper(): int(count) for name, count in self.fleet.items()}
        self.validate()

    @property
    def total_vehicles(self) -> int:
        return sum(self.fleet.values())

    def validate(self) -> None:
        """Raise ValueError if the settings cannot produce a sensible run."""
        if self.duration <= 0:
            raise ValueError(f"duration must be positive, got {self.duration}")
        if self.capacity <= 0:
            raise ValueError(f"capacity must be positive, got {self.capacity}")
        if self.booths_per_side <= 0:
            raise ValueError(f"booths_per_side must be positive, got {self.booths_per_side}")
        if self.container_limit <= 0:
            raise ValueError(f"container_limit must be positive, got {self.container_limit}")
        if self.max_records < 0:
            raise ValueError(f"max_records cannot be negative, got {self.max_records}")
        if self.time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {self.time_scale}")

        for name, count in self.fleet.items():
            quota_for(name)
            if count < 0:
                raise ValueError(f"Fleet count for {name} cannot be negative")
        if self.total_vehicles == 0:
            raise ValueError("Fleet is empty")
        largest = max(VEHICLE_QUOTAS[name] for name, count in self.fleet.items() if count)
        if largest > self.capacity:
            raise ValueError(
                f"capacity {self.capacity} cannot carry a vehicle of quota {largest}"
            )

        for label in ("toll_time", "travel_time", "errand_time"):
            lo, hi = getattr(self, label)
            if lo < 0 or hi < lo:
                raise ValueError(f"{label} must be a range 0 <= lo <= hi, got ({lo}, {hi})")

    @classmethod
    def from_env(cls, environ: dict | None = None, **overrides) -> SimulationConfig:
        """
        Build a config from FERRY_SIM_* environment variables.

        Scalars map by upper-cased field name (FERRY_SIM_CAPACITY=24).
        Fleet counts use FERRY_SIM_FLEET_<CLASS> (FERRY_SIM_FLEET_TRUCK=4).
        Keyword overrides win over the environment.
        """
        environ = os.environ if environ is None else environ
        values: dict = {}

        scalar_types = {
            "duration": float,
            "capacity": int,
            "booths_per_side": int,
            "container_limit": int,
            "max_records": int,
            "time_scale": float,
            "seed": int,
        }
        for name, cast in scalar_types.items():
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None or raw == "":
                continue
            try:
                values[name] = cast(raw)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}{name.upper()}={raw!r} is not a valid {cast.__name__}") from None

        fleet = dict(DEFAULT_FLEET)
        for vehicle_class in VEHICLE_QUOTAS:
            raw = environ.get(f"{ENV_PREFIX}FLEET_{vehicle_class}")
            if raw:
                fleet[vehicle_class] = int(raw)
        values["fleet"] = fleet

        known = {f.name for f in fields(cls)}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"Unknown setting: {key}")
            if value is not None:
                values[key] = value

        return cls(**values)

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "fleet": dict(self.fleet),
            "capacity": self.capacity,
            "booths_per_side": self.booths_per_side,
            "container_limit": self.container_limit,
            "time_scale": self.time_scale,
            "seed": self.seed,
        }
