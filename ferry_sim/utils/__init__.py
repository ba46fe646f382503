"""
Utilities package - logging and the simulation clock
"""

from .clock import SimClock
from .logger import get_logger, set_level

__all__ = ["SimClock", "get_logger", "set_level"]
