"""
Animal Life — Systems Package
Genetics, care, health, breeding and production engines.
"""

from .genetics import GeneticsEngine, GeneticCompatibility, ParentGenes
from .care import CareEngine, CareAction, CareRequirement, CareResult, default_care_actions
from .health import HealthEngine, HealthReport, TreatmentResult
from .breeding import BreedingCoordinator, BreedResult, CompatibilityResult
from .production import ProductionEngine, CollectionResult

__all__ = [
    # Genetics
    'GeneticsEngine', 'GeneticCompatibility', 'ParentGenes',
    # Care
    'CareEngine', 'CareAction', 'CareRequirement', 'CareResult', 'default_care_actions',
    # Health
    'HealthEngine', 'HealthReport', 'TreatmentResult',
    # Breeding
    'BreedingCoordinator', 'BreedResult', 'CompatibilityResult',
    # Production
    'ProductionEngine', 'CollectionResult',
]
