"""
Core constants for the ferry crossing simulation.

Vehicle classes and their quotas, the canonical fleet, ferry and side
sizing, and the delay ranges of every simulated activity. All delays are
in abstract time units.
"""

# ---------------------------------------------------------------------------
# Vehicle classes: quota = capacity units a vehicle takes on the ferry
# ---------------------------------------------------------------------------
VEHICLE_QUOTAS = {
    "CAR":     1,
    "MINIBUS": 2,
    "TRUCK":   3,
}

# Canonical fleet composition (12 cars, 10 minibuses, 8 trucks)
DEFAULT_FLEET = {
    "CAR":     12,
    "MINIBUS": 10,
    "TRUCK":   8,
}

# ---------------------------------------------------------------------------
# Crossing layout
# ---------------------------------------------------------------------------
SIDE_NAMES = ("Side_A", "Side_B")

FERRY_CAPACITY = 20          # quota units
BOOTHS_PER_SIDE = 2
CONTAINER_LIMIT = 30         # max vehicles in one queue / waiting area
MAX_VEHICLE_RECORDS = 100    # completed-vehicle records kept for the report

SIMULATION_TIME = 180        # 3 minutes at time_scale 1.0

# ---------------------------------------------------------------------------
# Delays (time units)
# ---------------------------------------------------------------------------
TOLL_TIME_RANGE = (0.5, 1.5)     # toll processing per vehicle
TRAVEL_TIME_RANGE = (3.0, 5.0)   # one crossing
ERRAND_TIME_RANGE = (10, 30)     # dwell at destination, whole units
UNLOAD_TIME_PER_VEHICLE = 0.5

DEPARTURE_GRACE = 0.5        # last-minute boarding window before departure
BOOTH_POLL_INTERVAL = 0.1    # idle booth retry
FERRY_POLL_INTERVAL = 0.1    # ferry retry while holding vehicles
FERRY_IDLE_INTERVAL = 1.0    # ferry retry when nothing is anywhere
MONITOR_INTERVAL = 1.0       # run monitor progress check
STATUS_INTERVAL = 5.0        # min gap between repeated status messages

# ---------------------------------------------------------------------------
# Environment variable prefix for SimulationConfig.from_env()
# ---------------------------------------------------------------------------
ENV_PREFIX = "FERRY_SIM_"


def quota_for(vehicle_class: str) -> int:
    """Quota of a vehicle class name (case-insensitive)."""
    try:
        return VEHICLE_QUOTAS[vehicle_class.upper()]
    except KeyError:
        raise ValueError(f"Unknown vehicle class: {vehicle_class}") from None


def total_quota(fleet: dict[str, int]) -> int:
    """Total quota units of a fleet composition."""
    return sum(quota_for(name) * count for name, count in fleet.items())
