"""
Animal Life — Animal Factory
Builds new animals for purchase and birth and registers them.
"""

from typing import Optional
import logging

from .animal import (
    Animal,
    Behavior,
    BreedingState,
    CareState,
    Gender,
    Genetics,
    Position,
    ProductionState,
    Stats,
)
from ..config import Personality, get_breed, get_species_profile
from ..core.context import NotificationKind, SimulationContext
from ..core.registry import AnimalRegistry

logger = logging.getLogger(__name__)


class AnimalFactory:
    """
    Creates animals with species defaults and optional overrides.

    Supported overrides: name, gender, age (ms), genetics, stats (dict),
    personality, position, food_type.
    """

    def __init__(self, context: SimulationContext, registry: AnimalRegistry, genetics_engine):
        self.context = context
        self.registry = registry
        self.genetics = genetics_engine

    def create(self, species: str, **overrides) -> Animal:
        rng = self.context.rng
        now = self.context.now
        breed = get_breed(species)
        profile = get_species_profile(species)

        genetics: Optional[Genetics] = overrides.get("genetics")
        if genetics is None:
            genetics = self.genetics.generate_genetics(species)

        gender = overrides.get("gender")
        if gender is None:
            gender = Gender.FEMALE if rng.random() < breed.female_ratio else Gender.MALE

        personality = overrides.get("personality") or rng.choice(list(Personality))
        position = overrides.get("position") or Position(
            rng.uniform(0, self.context.config.pen_size), 0.0,
            rng.uniform(0, self.context.config.pen_size),
        )

        stats = Stats()
        for stat, value in overrides.get("stats", {}).items():
            stats.set(stat, value)

        age = overrides.get("age", 0.0)
        animal = Animal(
            animal_id=self.registry.new_id(),
            species=species,
            name=overrides.get("name") or rng.choice(profile.names),
            gender=gender,
            age=age,
            born_at=int(now - age),
            stats=stats,
            genetics=genetics,
            behavior=Behavior(personality=personality, position=position),
            care=CareState(
                last_fed=now,
                last_cleaned=now,
                food_type=overrides.get("food_type", "basic"),
            ),
            breeding=BreedingState(
                maturity_age_days=breed.maturity_days,
                breeding_value=self.genetics.calculate_breeding_value(genetics),
            ),
            production=ProductionState(
                product_type=profile.product.product_type if profile.product else None,
                last_produced=now,
                last_secondary=now if profile.secondary_product else None,
            ),
        )

        self.registry.add(animal)
        logger.info(f"Created {animal}")
        self.context.emit(
            NotificationKind.ANIMAL_CREATED,
            animal_id=animal.animal_id,
            species=species,
            name=animal.name,
        )
        return animal
