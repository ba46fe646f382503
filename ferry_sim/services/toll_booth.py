"""
Toll booth worker.

One thread per booth. Each turn it claims the head of its side's queue
under the side lock, serves the vehicle for a random interval with the lock
released, then hands it to the waiting area under the lock again. An idle
booth polls at a short fixed interval so the stop signal is seen promptly.
"""

from __future__ import annotations

import threading

from ferry_sim.models.side import Side
from ferry_sim.services.context import SimulationContext
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


class TollBoothWorker:
    """
    Serves vehicles at one booth of a side.

    Args:
        side: The side the booth belongs to
        booth_index: Index into side.booths
        context: Shared run context
    """

    def __init__(self, side: Side, booth_index: int, context: SimulationContext):
        self.side = side
        self.booth_index = booth_index
        self.context = context
        self.served = 0
        self._thread: threading.Thread | None = None

    @property
    def name(self) -> str:
        return self.side.booths[self.booth_index].name

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def serve_one(self) -> bool:
        """
        Run one booth turn.

        Returns True if a vehicle was served, False if the queue was empty.
        """
        clock = self.context.clock
        vehicle = self.side.claim_for_booth(self.booth_index, clock.now())
        if vehicle is None:
            return False

        lo, hi = self.context.config.toll_time
        clock.sleep(self.context.rng.uniform(lo, hi))

        self.side.release_from_booth(self.booth_index, clock.now())
        self.served += 1
        return True

    def run(self) -> None:
        poll = self.context.config.booth_poll
        try:
            while self.context.running:
                if not self.serve_one():
                    self.context.clock.sleep(poll)
        except Exception:
            logger.exception("%s stopped unexpectedly", self.name)
            self.context.stop()
