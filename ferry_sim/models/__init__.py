"""
Models package - contains domain models (Vehicle, Side, Ferry)
"""

from .ferry import Ferry
from .side import Side, SideCounts, TollBooth
from .vehicle import JourneyState, Leg, LegTimes, Vehicle, VehicleType

__all__ = [
    "Ferry",
    "JourneyState",
    "Leg",
    "LegTimes",
    "Side",
    "SideCounts",
    "TollBooth",
    "Vehicle",
    "VehicleType",
]
