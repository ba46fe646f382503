"""
Shared run state passed to every worker.

Nothing in the simulation reads module-level globals: the config, clock,
random source, stop signal and statistics of a run travel together in one
SimulationContext.
"""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass, field

from ferry_sim.config.settings import SimulationConfig
from ferry_sim.services.stats import SimulationStats
from ferry_sim.utils.clock import SimClock


@dataclass
class SimulationContext:
    config: SimulationConfig
    clock: SimClock
    rng: random.Random
    stats: SimulationStats
    stop_event: threading.Event = field(default_factory=threading.Event)

    @classmethod
    def create(cls, config: SimulationConfig) -> SimulationContext:
        return cls(
            config=config,
            clock=SimClock(config.time_scale),
            rng=random.Random(config.seed),
            stats=SimulationStats(config.total_vehicles, config.max_records),
        )

    @property
    def running(self) -> bool:
        return not self.stop_event.is_set()

    def stop(self) -> None:
        self.stop_event.set()
