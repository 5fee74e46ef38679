"""
Animal Life — Breeding Coordinator

Pairing, pregnancy and birth:
- can_breed runs ordered gates and returns the first failing reason
- breed rolls against the success rate; both parents get a cooldown
  whether or not a pregnancy results
- update advances pregnancies and delivers litters when due
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from ..animals.animal import Activity, Animal, Gender, Medication, MedicationType, Position
from ..animals.factory import AnimalFactory
from ..animals.records import LitterEstimate, Pregnancy
from ..config import (
    DAY_MS,
    BreedingConfig,
    BREEDING,
    Mood,
    Personality,
    get_breed,
    get_species_profile,
)
from ..core.context import NotificationKind
from ..core.module import Subsystem
from .genetics import GeneticsEngine, ParentGenes

logger = logging.getLogger(__name__)


@dataclass
class CompatibilityResult:
    can_breed: bool
    reason: str = ""
    success_rate: float = 0.0
    estimated_offspring: Optional[LitterEstimate] = None
    gestation_period: int = 0

    def to_dict(self) -> dict:
        return {
            "can_breed": self.can_breed,
            "reason": self.reason,
            "success_rate": self.success_rate,
            "estimated_offspring": self.estimated_offspring.to_dict() if self.estimated_offspring else None,
            "gestation_period": self.gestation_period,
        }


@dataclass
class BreedResult:
    success: bool
    reason: str = ""
    pregnancy: Optional[Pregnancy] = None
    mother: Optional[str] = None
    father: Optional[str] = None
    due_time: Optional[int] = None
    estimated_offspring: int = 0
    next_attempt: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "reason": self.reason,
            "pregnancy": self.pregnancy.to_dict() if self.pregnancy else None,
            "mother": self.mother,
            "father": self.father,
            "due_time": self.due_time,
            "estimated_offspring": self.estimated_offspring,
            "next_attempt": self.next_attempt,
        }


class BreedingCoordinator(Subsystem):
    """Compatibility checks, pregnancies and litters."""

    name = "breeding"

    def __init__(self, context, registry, genetics: GeneticsEngine, factory: AnimalFactory,
                 config: BreedingConfig = BREEDING):
        super().__init__(context, registry)
        self.genetics = genetics
        self.factory = factory
        self.config = config

        self.cooldowns: Dict[str, int] = {}     # animal id -> time breeding is allowed again
        self.pregnancy_count = 0

        # Statistics
        self.total_attempts = 0
        self.total_conceptions = 0
        self.total_births = 0

    # -------------------------------------------------------------------------
    # Compatibility
    # -------------------------------------------------------------------------

    def can_breed(self, parent1_id: str, parent2_id: str) -> CompatibilityResult:
        """
        Run the breeding gates in order.

        Raises:
            AnimalNotFoundError if either id is unknown.
        """
        parent1 = self.registry.get(parent1_id)
        parent2 = self.registry.get(parent2_id)

        reason = (
            self._check_pair(parent1, parent2)
            or self._check_maturity(parent1, parent2)
            or self._check_condition(parent1, parent2)
            or self._check_cooldowns(parent1, parent2)
            or self._check_pregnancy(parent1, parent2)
        )
        if reason:
            return CompatibilityResult(False, reason)

        compatibility = self.genetics.are_compatible(
            parent1.genetics, parent2.genetics, parent1.species, parent2.species,
            animal_ids=(parent1.animal_id, parent2.animal_id),
        )
        if not compatibility.compatible:
            return CompatibilityResult(False, compatibility.reason)

        return CompatibilityResult(
            True,
            success_rate=self.calculate_success_rate(parent1, parent2),
            estimated_offspring=self.estimate_offspring(parent1, parent2),
            gestation_period=self.gestation_period(parent1.species),
        )

    def _check_pair(self, parent1: Animal, parent2: Animal) -> str:
        if parent1.animal_id == parent2.animal_id:
            return "Cannot breed animal with itself"
        if not self.genetics.species_compatible(parent1.species, parent2.species):
            return "Species not compatible for breeding"
        if parent1.gender == parent2.gender:
            return "Both animals are the same gender"
        return ""

    def _check_maturity(self, parent1: Animal, parent2: Animal) -> str:
        for animal in (parent1, parent2):
            maturity = animal.breeding.maturity_age_days
            if animal.age_days < maturity:
                return f"{animal.name} is too young to breed ({int(animal.age_days)}/{maturity} days)"
        return ""

    def _check_condition(self, parent1: Animal, parent2: Animal) -> str:
        for animal in (parent1, parent2):
            if animal.stats.health < self.config.min_health:
                return f"{animal.name} is not healthy enough to breed"
        for animal in (parent1, parent2):
            if animal.stats.happiness < self.config.min_happiness:
                return f"{animal.name} is not happy enough to breed"
        return ""

    def _check_cooldowns(self, parent1: Animal, parent2: Animal) -> str:
        now = self.context.now
        for animal in (parent1, parent2):
            ready_at = self.cooldowns.get(animal.animal_id)
            if ready_at is not None and now < ready_at:
                days = -(-(ready_at - now) // DAY_MS)
                return f"{animal.name} must wait {int(days)} more days to breed again"
        return ""

    def _check_pregnancy(self, parent1: Animal, parent2: Animal) -> str:
        for animal in (parent1, parent2):
            if self.registry.pregnancy_for(animal.animal_id) is not None:
                return f"{animal.name} is already pregnant"
        return ""

    def calculate_success_rate(self, parent1: Animal, parent2: Animal) -> float:
        cfg = self.config
        rate = cfg.base_success_rate

        avg_health = (parent1.stats.health + parent2.stats.health) / 2
        rate *= 0.5 + avg_health * 0.5

        avg_happiness = (parent1.stats.happiness + parent2.stats.happiness) / 2
        rate *= 0.8 + avg_happiness * 0.2

        rate *= self.age_factor(parent1, parent2)

        inbreeding = self.genetics.calculate_inbreeding_level(
            parent1.genetics, parent2.genetics, parent1.animal_id, parent2.animal_id,
        )
        rate *= max(cfg.min_inbreeding_factor, 1.0 - inbreeding)

        rate *= self.care_quality(parent1, parent2)
        rate *= self.environment_factor()
        rate *= get_species_profile(parent1.species).seasonal_behavior(self.context.season).breeding_bonus

        return max(cfg.min_success_rate, min(cfg.max_success_rate, rate))

    def age_factor(self, parent1: Animal, parent2: Animal) -> float:
        low, high = get_species_profile(parent1.species).optimal_breeding_age
        return (self._individual_age_factor(parent1.age_days, low, high)
                + self._individual_age_factor(parent2.age_days, low, high)) / 2

    @staticmethod
    def _individual_age_factor(age_days: float, low: int, high: int) -> float:
        if age_days < low:
            return max(0.5, age_days / low)
        if age_days > high:
            decline = (age_days - high) / (high * 0.5)
            return max(0.2, 1.0 - decline)
        return 1.0

    def care_quality(self, parent1: Animal, parent2: Animal) -> float:
        cfg = self.config
        now = self.context.now
        score = cfg.base_care_quality
        for animal in (parent1, parent2):
            if animal.care.last_fed is not None and now - animal.care.last_fed < cfg.fed_window_ms:
                score += cfg.fed_bonus
            if animal.care.last_cleaned is not None and now - animal.care.last_cleaned < cfg.cleaned_window_ms:
                score += cfg.cleaned_bonus
        return min(1.0, score)

    def environment_factor(self) -> float:
        return (self.config.weather_modifiers.get(self.context.weather, 1.0)
                * self.config.season_modifiers.get(self.context.season, 1.0))

    def estimate_offspring(self, parent1: Animal, parent2: Animal) -> LitterEstimate:
        litter = get_species_profile(parent1.species).litter
        avg_health = (parent1.stats.health + parent2.stats.health) / 2
        if avg_health > 0.8:
            bonus = self.config.healthy_litter_bonus
        elif avg_health < 0.5:
            bonus = self.config.sickly_litter_penalty
        else:
            bonus = 1.0

        estimated = int(round(litter.typical * bonus))
        return LitterEstimate(
            litter.minimum, litter.maximum,
            max(litter.minimum, min(litter.maximum, estimated)),
        )

    @staticmethod
    def gestation_period(species: str) -> int:
        return get_species_profile(species).gestation_days * DAY_MS

    @staticmethod
    def cooldown_period(species: str) -> int:
        return get_species_profile(species).breeding_cooldown_days * DAY_MS

    # -------------------------------------------------------------------------
    # Breeding
    # -------------------------------------------------------------------------

    def breed(self, parent1_id: str, parent2_id: str) -> BreedResult:
        check = self.can_breed(parent1_id, parent2_id)
        if not check.can_breed:
            return BreedResult(False, check.reason)

        parent1 = self.registry.get(parent1_id)
        parent2 = self.registry.get(parent2_id)
        mother, father = (parent1, parent2) if parent1.gender == Gender.FEMALE else (parent2, parent1)
        now = self.context.now

        self.total_attempts += 1
        self._apply_cooldowns(parent1, parent2)

        if self.context.rng.random() >= check.success_rate:
            logger.info(f"Breeding {mother.name} x {father.name} was unsuccessful")
            self.context.emit(
                NotificationKind.BREEDING_FAILED,
                mother_id=mother.animal_id,
                father_id=father.animal_id,
            )
            return BreedResult(
                False, "Breeding attempt was unsuccessful",
                next_attempt=self.cooldowns.get(parent1.animal_id),
            )

        self.pregnancy_count += 1
        pregnancy = Pregnancy(
            pregnancy_id=f"pregnancy_{self.pregnancy_count:04d}",
            mother_id=mother.animal_id,
            father_id=father.animal_id,
            species=mother.species,
            conception_time=now,
            due_time=now + check.gestation_period,
            estimated_offspring=check.estimated_offspring,
        )
        self.registry.add_pregnancy(pregnancy)
        mother.breeding.last_bred = now
        father.breeding.last_bred = now
        self._apply_pregnancy_effects(mother)

        self.total_conceptions += 1
        logger.info(f"{mother.name} is pregnant by {father.name}, due at {pregnancy.due_time}")
        return BreedResult(
            True,
            pregnancy=pregnancy,
            mother=mother.name,
            father=father.name,
            due_time=pregnancy.due_time,
            estimated_offspring=pregnancy.estimated_offspring.estimated,
        )

    def _apply_cooldowns(self, parent1: Animal, parent2: Animal):
        ready_at = self.context.now + self.cooldown_period(parent1.species)
        self.cooldowns[parent1.animal_id] = ready_at
        self.cooldowns[parent2.animal_id] = ready_at

    def _apply_pregnancy_effects(self, mother: Animal):
        mother.stats.adjust("hunger", self.config.pregnancy_hunger)
        mother.stats.adjust("energy", -self.config.pregnancy_energy)
        mother.behavior.activity = Activity.RESTING

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def update(self, delta_time: float) -> Dict:
        now = self.context.now
        births = 0
        for pregnancy in self.registry.pregnancies():
            if now >= pregnancy.due_time:
                births += len(self.deliver(pregnancy))
            else:
                self._update_pregnancy_effects(pregnancy, delta_time)

        self._cleanup_cooldowns()
        return {"pregnancies": len(self.registry.pregnancies()), "births": births}

    def _update_pregnancy_effects(self, pregnancy: Pregnancy, delta_time: float):
        mother = self.registry.find(pregnancy.mother_id)
        if mother is None:
            return

        cfg = self.config
        progress = pregnancy.progress(self.context.now)
        if progress > cfg.late_progress:
            mother.stats.adjust("hunger", cfg.late_hunger_rate * delta_time)
            mother.stats.adjust("energy", -cfg.late_energy_rate * delta_time)
        if progress > cfg.resting_progress:
            mother.behavior.activity = Activity.RESTING

    def deliver(self, pregnancy: Pregnancy) -> List[Animal]:
        """Resolve a due pregnancy into a litter."""
        mother = self.registry.find(pregnancy.mother_id)
        if mother is None:
            logger.warning(f"Dropping {pregnancy.pregnancy_id}: mother {pregnancy.mother_id} is gone")
            self.registry.remove_pregnancy(pregnancy.mother_id)
            return []

        father = self.registry.find(pregnancy.father_id)
        if father is None:
            logger.warning(f"Father {pregnancy.father_id} is gone; {mother.name}'s litter inherits from her alone")

        logger.info(f"{mother.name} is giving birth!")
        estimate = pregnancy.estimated_offspring
        variation = self.context.rng.randint(-1, 1)
        count = max(estimate.minimum, min(estimate.maximum, estimate.estimated + variation))

        offspring = [self._create_offspring(mother, father, pregnancy, i, count) for i in range(count)]
        pregnancy.genetics = [baby.genetics for baby in offspring]

        offspring_ids = [baby.animal_id for baby in offspring]
        mother.breeding.offspring.extend(offspring_ids)
        if father is not None:
            father.breeding.offspring.extend(offspring_ids)

        self.registry.remove_pregnancy(mother.animal_id)
        self._apply_post_birth_effects(mother)
        self.total_births += count

        plural = "baby" if count == 1 else "babies"
        self.context.emit(
            NotificationKind.ANIMAL_BIRTH,
            mother=mother.name,
            father=father.name if father else None,
            offspring=[
                {"name": baby.name, "gender": baby.gender.name.lower(), "id": baby.animal_id}
                for baby in offspring
            ],
            message=f"{mother.name} gave birth to {count} {plural}!",
        )
        return offspring

    def _create_offspring(self, mother: Animal, father: Optional[Animal],
                          pregnancy: Pregnancy, index: int, litter_size: int) -> Animal:
        rng = self.context.rng
        sire = father or mother
        genetics = self.genetics.generate_genetics(pregnancy.species, (
            ParentGenes(pregnancy.father_id, sire.genetics),
            ParentGenes(mother.animal_id, mother.genetics),
        ))

        gender = Gender.FEMALE if rng.random() < get_breed(pregnancy.species).female_ratio else Gender.MALE
        base_name = rng.choice(get_species_profile(pregnancy.species).names)
        name = f"{base_name} Jr.{index + 1}" if litter_size > 1 else f"{base_name} Jr."

        spot = mother.behavior.position
        baby = self.factory.create(
            pregnancy.species,
            name=name,
            gender=gender,
            age=0.0,
            genetics=genetics,
            personality=self.inherit_personality(mother, sire),
            position=Position(spot.x + (rng.random() - 0.5) * 2, spot.y, spot.z + (rng.random() - 0.5) * 2),
        )

        baby.stats.set("energy", self.config.newborn_energy)
        baby.stats.set("hunger", self.config.newborn_hunger)
        baby.behavior.mood = Mood.CONTENT
        baby.behavior.activity = Activity.RESTING
        baby.care.needs_special_care = True
        baby.care.weaning_age_days = get_species_profile(pregnancy.species).weaning_days
        return baby

    def inherit_personality(self, mother: Animal, father: Animal) -> Personality:
        rng = self.context.rng
        if rng.random() < self.config.personality_inheritance:
            return rng.choice([mother.behavior.personality, father.behavior.personality])
        return rng.choice(list(Personality))

    def _apply_post_birth_effects(self, mother: Animal):
        cfg = self.config
        mother.stats.set("energy", max(cfg.mother_min_energy, mother.stats.energy - cfg.mother_energy_loss))
        mother.stats.adjust("happiness", cfg.mother_happiness_gain)
        mother.stats.adjust("health", -cfg.mother_health_loss)
        mother.add_medication(Medication(
            MedicationType.POST_BIRTH_RECOVERY,
            cfg.recovery_production_penalty,
            self.context.now,
            cfg.recovery_duration_ms,
        ))

    def _cleanup_cooldowns(self):
        now = self.context.now
        for animal_id in [a for a, ready_at in self.cooldowns.items() if now >= ready_at]:
            del self.cooldowns[animal_id]

    # -------------------------------------------------------------------------
    # Queries and persistence
    # -------------------------------------------------------------------------

    def get_breeding_status(self, animal_id: str) -> Dict[str, Any]:
        animal = self.registry.get(animal_id)
        now = self.context.now
        status = {
            "can_breed": False,
            "is_pregnant": False,
            "cooldown_remaining": 0,
            "next_breeding_time": None,
            "pregnancy_progress": 0.0,
            "due_time": None,
        }

        pregnancy = self.registry.pregnancy_for(animal_id)
        if pregnancy is not None:
            status["is_pregnant"] = True
            status["pregnancy_progress"] = pregnancy.progress(now)
            status["due_time"] = pregnancy.due_time

        ready_at = self.cooldowns.get(animal_id)
        if ready_at is not None and ready_at > now:
            status["cooldown_remaining"] = ready_at - now
            status["next_breeding_time"] = ready_at

        if not status["is_pregnant"] and status["cooldown_remaining"] <= 0:
            status["can_breed"] = (
                animal.age_days >= animal.breeding.maturity_age_days
                and animal.stats.health >= self.config.min_health
                and animal.stats.happiness >= self.config.min_happiness
            )
        return status

    def get_all_pregnancies(self) -> List[Dict]:
        now = self.context.now
        return [
            {**p.to_dict(), "progress": p.progress(now)}
            for p in self.registry.pregnancies()
        ]

    def save(self) -> dict:
        return {
            "pregnancies": [p.to_dict() for p in self.registry.pregnancies()],
            "cooldowns": dict(self.cooldowns),
            "pregnancy_count": self.pregnancy_count,
        }

    def load(self, state: dict):
        self.registry.clear_pregnancies()
        for animal in self.registry:
            animal.breeding.pregnancy_id = None
        for data in state.get("pregnancies", []):
            pregnancy = Pregnancy.from_dict(data)
            if pregnancy.mother_id not in self.registry:
                logger.warning(f"Dropping {pregnancy.pregnancy_id}: unknown mother {pregnancy.mother_id}")
                continue
            self.registry.add_pregnancy(pregnancy)

        self.cooldowns = dict(state.get("cooldowns", {}))
        self.pregnancy_count = state.get("pregnancy_count", len(self.registry.pregnancies()))

    def get_status(self) -> Dict:
        status = super().get_status()
        status.update({
            "active_pregnancies": len(self.registry.pregnancies()),
            "animals_on_cooldown": len(self.cooldowns),
            "total_attempts": self.total_attempts,
            "total_conceptions": self.total_conceptions,
            "total_births": self.total_births,
        })
        return status
