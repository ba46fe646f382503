"""
Services package - workers, the admission engine and the simulation runner
"""

from .admission import AdmissionSnapshot, DepartureDecision, can_depart
from .simulation import FerrySimulation
from .stats import SimulationReport, SimulationStats, VehicleRecord

__all__ = [
    "AdmissionSnapshot",
    "DepartureDecision",
    "FerrySimulation",
    "SimulationReport",
    "SimulationStats",
    "VehicleRecord",
    "can_depart",
]
