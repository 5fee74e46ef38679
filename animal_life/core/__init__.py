"""
Animal Life — Core Module
Contains the shared context, economy, registry, subsystem base and simulation engine.
"""

from .errors import (
    SimulationError,
    NotFoundError,
    AnimalNotFoundError,
    TreatmentNotFoundError,
    CareTypeNotFoundError,
    SpecializationNotFoundError,
)
from .store import Store, Economy, Cost, ResourceType
from .context import SimulationContext, Clock, Environment, Notification, NotificationKind
from .module import Subsystem, SubsystemManager, SubsystemState
from .registry import AnimalRegistry
from .simulation import AnimalSimulation, SimulationState

__all__ = [
    # Errors
    "SimulationError",
    "NotFoundError",
    "AnimalNotFoundError",
    "TreatmentNotFoundError",
    "CareTypeNotFoundError",
    "SpecializationNotFoundError",

    # Economy
    "Store",
    "Economy",
    "Cost",
    "ResourceType",

    # Context
    "SimulationContext",
    "Clock",
    "Environment",
    "Notification",
    "NotificationKind",

    # Subsystems
    "Subsystem",
    "SubsystemManager",
    "SubsystemState",
    "AnimalRegistry",

    # Simulation
    "AnimalSimulation",
    "SimulationState",
]
