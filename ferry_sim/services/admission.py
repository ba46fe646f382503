"""
Ferry admission engine: should the ferry leave now, or wait for a better load?

The decision is a pure function of a snapshot of the ferry and of what is
visible at its side (waiting area, toll booths, queue). Packing is a
largest-first greedy approximation, not an exact solver.

Rules, in order:
  - Nothing on board: never depart
  - Full: depart
  - A visible vehicle fills the gap exactly, or largest-first packing of
    the visible vehicles reaches it: wait for them
  - Nothing visible fits any more, and
      * 1-3 quota units are left: depart (a sliver is not worth stalling over)
      * every vehicle still in play is on board: depart (final trip)
      * the other side has work: depart
      * otherwise both sides are empty: depart with a partial load
  - Some visible vehicles fit but cannot fill the gap: wait for them to board
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ferry_sim.utils.logger import get_logger

logger = get_logger(__name__)

# Unfilled capacity small enough to leave behind when nothing fits
SLIVER_QUOTAS = (1, 2, 3)

# Decision codes, used to detect status changes
EMPTY = "empty"
FULL = "full"
EXACT_FIT = "exact_fit"
PACKING = "packing"
SLIVER = "sliver"
FINAL_TRIP = "final_trip"
OTHER_SIDE = "other_side"
PARTIAL = "partial"
BOARDING = "boarding"


@dataclass(frozen=True)
class AdmissionSnapshot:
    """Everything can_depart() looks at, captured at one instant."""
    load: int
    capacity: int
    boarded_count: int
    visible_quotas: tuple[int, ...] = ()
    remaining_vehicles: int = 0     # vehicles not yet through their round trip
    other_side_has_work: bool = False

    @property
    def unfilled(self) -> int:
        return self.capacity - self.load


@dataclass(frozen=True)
class DepartureDecision:
    """Output of can_depart(). `reason` is for humans only."""
    depart: bool
    code: str
    reason: str
    fitting: tuple[int, ...] = field(default=())

    def __bool__(self) -> bool:
        return self.depart

    def to_dict(self) -> dict:
        return {
            "depart": self.depart,
            "code": self.code,
            "reason": self.reason,
            "fitting": list(self.fitting),
        }


def plan_fill(unfilled: int, quotas) -> tuple[int, ...]:
    """
    Pick visible vehicles to fill `unfilled` quota units.

    Returns the chosen quotas: a single exact fit if one exists, otherwise
    a largest-first greedy selection.
    """
    candidates = sorted((q for q in quotas if q <= unfilled), reverse=True)

    for quota in candidates:
        if quota == unfilled:
            return (quota,)

    chosen = []
    remaining = unfilled
    for quota in candidates:
        if quota <= remaining:
            chosen.append(quota)
            remaining -= quota
            if remaining == 0:
                break
    return tuple(chosen)


def can_depart(snapshot: AdmissionSnapshot) -> DepartureDecision:
    """
    Decide whether the ferry should depart.

    Args:
        snapshot: Ferry load and the vehicles visible at its side

    Returns:
        DepartureDecision; deterministic for a given snapshot.
    """
    if snapshot.boarded_count == 0:
        return DepartureDecision(False, EMPTY, "No vehicles on board")

    if snapshot.load >= snapshot.capacity:
        return DepartureDecision(True, FULL, "Ferry is at full capacity and ready to depart")

    unfilled = snapshot.unfilled
    fitting = plan_fill(unfilled, snapshot.visible_quotas)
    fitted = sum(fitting)

    if fitted >= unfilled:
        code = EXACT_FIT if len(fitting) == 1 else PACKING
        return DepartureDecision(
            False, code,
            f"Waiting for {len(fitting)} more vehicle(s) to reach full capacity "
            f"({snapshot.load}/{snapshot.capacity} quotas filled)",
            fitting,
        )

    if fitted == 0:
        if unfilled in SLIVER_QUOTAS:
            return DepartureDecision(
                True, SLIVER,
                f"Only {unfilled} quota(s) left unfilled and no fitting vehicles available",
            )
        if snapshot.boarded_count == snapshot.remaining_vehicles:
            return DepartureDecision(
                True, FINAL_TRIP,
                f"Final trip: ferry has all remaining {snapshot.remaining_vehicles} vehicles",
            )
        if snapshot.other_side_has_work:
            return DepartureDecision(
                True, OTHER_SIDE,
                "No more vehicles at current side, but vehicles waiting at other side",
            )
        return DepartureDecision(
            True, PARTIAL,
            f"Both sides empty, departing with partial load: "
            f"{snapshot.load}/{snapshot.capacity} quotas",
        )

    return DepartureDecision(
        False, BOARDING,
        f"Waiting for {len(fitting)} visible vehicle(s) ({fitted} quotas) to board "
        f"({snapshot.load}/{snapshot.capacity} quotas filled)",
        fitting,
    )


class StatusThrottle:
    """
    Lets a status message through only when it changes, or when the same
    status has been quiet for `min_interval` time units.
    """

    def __init__(self, clock, min_interval: float):
        self.clock = clock
        self.min_interval = min_interval
        self._last_key = None
        self._last_time: float | None = None

    def should_emit(self, key) -> bool:
        now = self.clock.now()
        if (key != self._last_key or self._last_time is None
                or now - self._last_time >= self.min_interval):
            self._last_key = key
            self._last_time = now
            return True
        return False

    def reset(self) -> None:
        self._last_key = None
        self._last_time = None

    def report(self, decision: DepartureDecision) -> bool:
        """Log a departure decision if it is news. Returns True if logged."""
        key = (decision.code, decision.fitting)
        if not self.should_emit(key):
            return False
        logger.info("%s", decision.reason)
        return True
