"""
Animal Life — Farm Animal Simulation Engine

Genetics, breeding, disease, care and production for a herd of farm
animals, driven by an external scheduler through explicit ticks.
"""

__version__ = "1.0.0"

from .config import (
    SIMULATION,
    GENETICS,
    CARE,
    HEALTH,
    BREEDING,
    PRODUCTION,
    SPECIES,
    BASE_SPECIES,
    HOUR_MS,
    DAY_MS,
    YEAR_MS,
    SimulationConfig,
    Weather,
    Season,
    Personality,
    Mood,
    Severity,
)

from .core import (
    AnimalSimulation,
    SimulationState,
    SimulationContext,
    AnimalRegistry,
    Economy,
    Cost,
    Subsystem,
    SubsystemManager,
    NotificationKind,
    SimulationError,
    NotFoundError,
    AnimalNotFoundError,
    TreatmentNotFoundError,
    CareTypeNotFoundError,
    SpecializationNotFoundError,
)

from .animals import Animal, Gender, Product, Pregnancy, DiseaseInstance

from .reporting import export_herd_workbook

__all__ = [
    # Version info
    "__version__",

    # Config
    "SIMULATION",
    "GENETICS",
    "CARE",
    "HEALTH",
    "BREEDING",
    "PRODUCTION",
    "SPECIES",
    "BASE_SPECIES",
    "HOUR_MS",
    "DAY_MS",
    "YEAR_MS",
    "SimulationConfig",
    "Weather",
    "Season",
    "Personality",
    "Mood",
    "Severity",

    # Core classes
    "AnimalSimulation",
    "SimulationState",
    "SimulationContext",
    "AnimalRegistry",
    "Economy",
    "Cost",
    "Subsystem",
    "SubsystemManager",
    "NotificationKind",

    # Errors
    "SimulationError",
    "NotFoundError",
    "AnimalNotFoundError",
    "TreatmentNotFoundError",
    "CareTypeNotFoundError",
    "SpecializationNotFoundError",

    # Animals
    "Animal",
    "Gender",
    "Product",
    "Pregnancy",
    "DiseaseInstance",

    # Reports
    "export_herd_workbook",
]
