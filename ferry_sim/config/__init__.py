"""
Config package - simulation constants and run settings
"""

from .settings import SimulationConfig

__all__ = ["SimulationConfig"]
