"""
Errand scheduler.

A vehicle that finished its outbound leg spends some time at the
destination before queueing for the return leg. Each errand is a task on a
thread pool that owns its vehicle until it hands it back to the side's
arrival queue.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor

from ferry_sim.models.side import Side
from ferry_sim.models.vehicle import Vehicle
from ferry_sim.services.context import SimulationContext
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


class ErrandScheduler:
    """Runs destination dwell times and re-queues vehicles for the return leg."""

    def __init__(self, context: SimulationContext, max_workers: int | None = None):
        self.context = context
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or max(1, context.config.total_vehicles),
            thread_name_prefix="errand",
        )
        self._lock = threading.Lock()
        self._pending: set[int] = set()

    @property
    def pending(self) -> int:
        """Vehicles currently on an errand."""
        with self._lock:
            return len(self._pending)

    def pick_dwell(self) -> int:
        lo, hi = self.context.config.errand_time
        return self.context.rng.randint(int(lo), int(hi))

    def schedule(self, vehicle: Vehicle, side: Side, dwell: int | None = None) -> Future:
        """
        Start an errand for a vehicle unloaded at `side`.

        Args:
            vehicle: Vehicle that just finished its outbound leg
            side: Side it was unloaded at (and will return from)
            dwell: Time units at the destination (random if None)

        Returns:
            Future resolving to True once the vehicle is back in a queue,
            False if the run stopped first or the queue was full.
        """
        if dwell is None:
            dwell = self.pick_dwell()
        vehicle.start_errand(dwell)
        with self._lock:
            self._pending.add(vehicle.id)

        logger.debug("%s will spend %d units at %s before returning",
                     vehicle.label, dwell, side.name)
        return self._executor.submit(self._run_errand, vehicle, side, dwell)

    def _run_errand(self, vehicle: Vehicle, side: Side, dwell: int) -> bool:
        try:
            if self.context.clock.wait(self.context.stop_event, dwell):
                return False

            vehicle.begin_return(self.context.clock.now())
            logger.debug("After spending %d units at %s, %s is now joining the return queue",
                         dwell, side.name, vehicle.label)
            return side.enqueue_arrival(vehicle, self.context.clock.now())
        finally:
            with self._lock:
                self._pending.discard(vehicle.id)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting errands; running ones end as soon as the run stops."""
        self._executor.shutdown(wait=wait)
