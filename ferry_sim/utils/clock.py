"""
Simulation clock.

All durations in the simulation are abstract time units. The clock maps
units to wall-clock seconds through a time scale, so the same run can be
watched in real time (scale 1.0) or squeezed into milliseconds in tests.
"""

import threading
import time


class SimClock:
    """Scaled monotonic clock shared by every worker of one run."""

    def __init__(self, time_scale: float = 1.0):
        if time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {time_scale}")
        self.time_scale = time_scale
        self._origin = time.monotonic()

    def now(self) -> float:
        """Elapsed simulation time in units since the clock was created."""
        return (time.monotonic() - self._origin) / self.time_scale

    def sleep(self, units: float) -> None:
        """Block the calling thread for `units` of simulation time."""
        if units > 0:
            time.sleep(units * self.time_scale)

    def wait(self, event: threading.Event, units: float) -> bool:
        """
        Wait up to `units` for `event`.

        Returns True if the event was set before the time ran out.
        """
        return event.wait(max(0.0, units) * self.time_scale)
