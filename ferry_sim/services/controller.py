"""
Ferry controller - the loop that runs the ferry.

Every tick the controller either departs (when the admission engine says
so), boards vehicles from the waiting area at its side, crosses empty to a
side that has work, or idles for a bounded poll interval.

A crossing is: undock, travel for a random time, dock, count the trip,
unload. Outbound vehicles go off on an errand; returning vehicles complete
their round trip and are recorded.

One-shot rule: right after the first crossing away from the fleet's origin
side is unloaded, the ferry makes one immediate empty crossing back to the
origin side, without loading anything.
"""

from __future__ import annotations

import threading

from ferry_sim.models.ferry import Ferry
from ferry_sim.models.side import Side
from ferry_sim.models.vehicle import Leg, elapsed
from ferry_sim.services.admission import (
    AdmissionSnapshot,
    DepartureDecision,
    StatusThrottle,
    can_depart,
)
from ferry_sim.services.context import SimulationContext
from ferry_sim.services.errands import ErrandScheduler
from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)


class FerryController:
    """
    Drives the ferry between two sides.

    Args:
        ferry: The ferry, docked at one of `sides`
        sides: The two sides of the crossing
        context: Shared run context
        errands: Scheduler for vehicles unloaded on their outbound leg
        fleet_origin: Side the fleet starts from (default: where the ferry is)
    """

    def __init__(
        self,
        ferry: Ferry,
        sides,
        context: SimulationContext,
        errands: ErrandScheduler,
        fleet_origin: Side | None = None,
    ):
        self.ferry = ferry
        self.sides = tuple(sides)
        if len(self.sides) != 2:
            raise ValueError(f"A crossing has exactly two sides, got {len(self.sides)}")
        self.context = context
        self.errands = errands
        self.fleet_origin = fleet_origin or ferry.docked_at

        self.first_outbound_done = False
        self.first_return_done = False

        interval = context.config.status_interval
        self._decision_status = StatusThrottle(context.clock, interval)
        self._idle_status = StatusThrottle(context.clock, interval)
        self._thread: threading.Thread | None = None

    def other_side(self, side: Side) -> Side:
        return self.sides[1] if side is self.sides[0] else self.sides[0]

    # -- decision ----------------------------------------------------------

    def snapshot(self) -> AdmissionSnapshot:
        """
        Capture the admission inputs.

        The ferry, the docked side and the other side are each read under
        their own lock, one after the other.
        """
        side = self.ferry.docked_at
        load, count = self.ferry.snapshot()
        visible = side.visible_quotas()
        other_has_work = self.other_side(side).has_work()
        return AdmissionSnapshot(
            load=load,
            capacity=self.ferry.capacity,
            boarded_count=count,
            visible_quotas=tuple(visible),
            remaining_vehicles=self.context.stats.remaining_vehicles,
            other_side_has_work=other_has_work,
        )

    def evaluate(self) -> DepartureDecision:
        return can_depart(self.snapshot())

    # -- loop --------------------------------------------------------------

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="ferry-controller", daemon=True)
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        try:
            while self.context.running:
                delay = self.step()
                if delay:
                    self.context.clock.sleep(delay)
        except Exception:
            logger.exception("Ferry controller stopped unexpectedly")
            self.context.stop()

    def step(self) -> float:
        """
        Run one controller tick.

        Returns:
            Time units to idle before the next tick (0 after a crossing)
        """
        config = self.context.config
        clock = self.context.clock
        side = self.ferry.docked_at

        if self.ferry.vehicle_count > 0:
            decision = self.evaluate()
            self._decision_status.report(decision)
            if decision.depart:
                clock.sleep(config.departure_grace)
                if (self.context.running and self.ferry.vehicle_count > 0
                        and self.evaluate().depart):
                    self.cross(self.other_side(side))
                    return 0.0

        if side.waiting_count() > 0:
            boarded = side.board_waiting(
                self.ferry, clock.now(), self.context.stats.next_trip_number()
            )
            if boarded:
                self._idle_status.reset()
            return config.ferry_poll

        other = self.other_side(side)
        if self.ferry.vehicle_count == 0 and other.has_work():
            logger.info("No vehicles at %s, but vehicles waiting at %s. Ferry departing empty.",
                        side.name, other.name)
            self.cross(other)
            return 0.0

        if self.ferry.vehicle_count > 0:
            return config.ferry_poll

        if self._idle_status.should_emit("idle"):
            logger.info("Ferry remains docked at %s - no vehicles to transport", side.name)
        return config.ferry_idle

    # -- crossing ------------------------------------------------------------

    def cross(self, destination: Side) -> None:
        """Travel to `destination`, unload, then apply the first-return rule."""
        origin = self.travel(destination)
        carried = self.ferry.vehicle_count > 0
        if carried:
            self.unload()
        self._decision_status.reset()
        self._idle_status.reset()

        if carried and not self.first_outbound_done and origin is self.fleet_origin:
            self.first_outbound_done = True
            logger.info("First outbound trip completed. Vehicles will spend some time at %s "
                        "before returning.", destination.name)
            if self.context.running:
                logger.info("First return trip: Ferry returning empty from %s to %s",
                            destination.name, origin.name)
                self.travel(origin)
                self.first_return_done = True

    def travel(self, destination: Side) -> Side:
        """
        Cross to `destination` and count the trip.

        Returns:
            The side the ferry left
        """
        stats = self.context.stats
        load, count = self.ferry.snapshot()
        origin = self.ferry.depart()
        logger.info("Ferry departing from %s to %s (Trip #%d) carrying %d vehicles (%d/%d quotas)",
                    origin.name, destination.name, stats.next_trip_number(),
                    count, load, self.ferry.capacity)

        lo, hi = self.context.config.travel_time
        self.context.clock.sleep(self.context.rng.uniform(lo, hi))

        self.ferry.dock(destination)
        trip = stats.complete_trip()
        logger.info("Trip #%d completed: %s -> %s", trip, origin.name, destination.name)
        return origin

    def unload(self) -> list:
        """
        Take every vehicle off at the docked side.

        Returns:
            The unloaded vehicles
        """
        side = self.ferry.docked_at
        clock = self.context.clock
        count = self.ferry.vehicle_count
        logger.info("Unloading %d vehicles at %s", count, side.name)

        clock.sleep(count * self.context.config.unload_time_per_vehicle)

        now = clock.now()
        vehicles = self.ferry.unload_all()
        completed = 0
        for vehicle in vehicles:
            finished = vehicle.unload(side.name, now)
            if finished is Leg.OUTBOUND:
                logger.debug("%s transported (outbound): total %.1f, ferry ride %.1f",
                             vehicle.label, vehicle.outbound.journey_time,
                             elapsed(now, vehicle.outbound.boarding))
                self.errands.schedule(vehicle, side)
            else:
                completed += 1
                logger.debug("%s completed round trip: outbound %.1f, return %.1f",
                             vehicle.label, vehicle.outbound.journey_time,
                             vehicle.return_leg.journey_time)
                self.context.stats.record_completion(vehicle)

        logger.info("Ferry has been completely unloaded (%d round trips completed)", completed)
        return vehicles
