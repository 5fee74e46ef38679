"""
Animal Life — Production Engine

Per-animal product generation:
- Interval: species frequency scaled by genetics, health, happiness,
  care quality and season, never below one hour
- Quantity, quality and value computed at production time; value uses a
  six-tier quality step function
- Secondary products (sheep milk, manure, feathers) run on their own timer
- Specializations are unlocked per animal and multiply the products they boost
- Pending products lose freshness linearly until collected; collection
  pays value x freshness into the economy
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..animals.animal import Animal, MedicationType
from ..animals.records import Product
from ..config import (
    DAY_MS,
    HOUR_MS,
    ProductionConfig,
    PRODUCTION,
    ProductSpec,
    SeasonalBehavior,
    Specialization,
    get_species_profile,
)
from ..core.context import NotificationKind
from ..core.errors import SpecializationNotFoundError
from ..core.module import Subsystem
from ..core.store import Cost, ResourceType

logger = logging.getLogger(__name__)


@dataclass
class CollectionResult:
    success: bool
    reason: str = ""
    products: List[Dict[str, Any]] = field(default_factory=list)
    total_value: float = 0.0

    @property
    def count(self) -> int:
        return len(self.products)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "reason": self.reason,
            "products": list(self.products),
            "total_value": self.total_value,
            "count": self.count,
        }


@dataclass
class SpecializationResult:
    success: bool
    reason: str = ""
    specialization_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "reason": self.reason,
            "specialization_id": self.specialization_id,
        }


class ProductionEngine(Subsystem):
    """Production timing, product generation, spoilage and collection."""

    name = "production"

    def __init__(self, context, registry, health=None, config: ProductionConfig = PRODUCTION):
        super().__init__(context, registry)
        self.health = health
        self.config = config
        self.pending: Dict[str, List[Product]] = {}
        self.product_count = 0

        # Statistics
        self.total_produced = 0
        self.total_collected_value = 0.0

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def update(self, delta_time: float) -> Dict:
        produced = 0
        for animal in self.registry:
            if self.update_production(animal) is not None:
                produced += 1
            if self.update_secondary_production(animal) is not None:
                produced += 1
        for products in self.pending.values():
            for product in products:
                product.update_freshness(self.context.now)
        return {"produced": produced, "pending": sum(len(p) for p in self.pending.values())}

    def update_production(self, animal: Animal) -> Optional[Product]:
        """Produce once if the animal is of age and its interval has elapsed."""
        if not self.is_production_ready(animal):
            return None

        last = animal.production.last_produced
        if last is None:
            animal.production.last_produced = self.context.now
            return None

        if self.context.now - last >= self.get_production_rate(animal):
            return self.generate_product(animal)
        return None

    def update_secondary_production(self, animal: Animal) -> Optional[Product]:
        """Same as update_production, for the species' by-product."""
        if not self.is_production_ready(animal) or self.product_spec(animal, secondary=True) is None:
            return None

        last = animal.production.last_secondary
        if last is None:
            animal.production.last_secondary = self.context.now
            return None

        if self.context.now - last >= self.get_production_rate(animal, secondary=True):
            return self.generate_product(animal, secondary=True)
        return None

    def is_production_ready(self, animal: Animal) -> bool:
        profile = get_species_profile(animal.species)
        return profile.product is not None and animal.age_days >= profile.min_production_age_days

    @staticmethod
    def product_spec(animal: Animal, secondary: bool = False) -> Optional[ProductSpec]:
        profile = get_species_profile(animal.species)
        return profile.secondary_product if secondary else profile.product

    def production_trait(self, animal: Animal) -> float:
        return animal.genetics.trait(get_species_profile(animal.species).production_trait)

    def seasonal_behavior(self, animal: Animal) -> SeasonalBehavior:
        return get_species_profile(animal.species).seasonal_behavior(self.context.season)

    def get_production_rate(self, animal: Animal, secondary: bool = False) -> float:
        """Milliseconds between productions."""
        spec = self.product_spec(animal, secondary)
        if spec is None:
            return float(DAY_MS)

        rate = spec.frequency_ms / max(self.config.min_trait, self.production_trait(animal))

        health = animal.stats.health
        if health < 0.5:
            rate *= 2.0
        elif health > 0.8:
            rate *= 0.8

        happiness = animal.stats.happiness
        if happiness > 0.8:
            rate *= 0.9
        elif happiness < 0.4:
            rate *= 1.5

        rate *= 2.0 - self.calculate_care_quality(animal)
        rate *= self.config.season_rate_modifiers.get(self.context.season, 1.0)
        rate /= self.seasonal_behavior(animal).production_speed
        rate *= self.specialization_bonus(animal, spec, "interval_multiplier")

        return max(float(self.config.min_interval_ms), rate)

    def calculate_care_quality(self, animal: Animal) -> float:
        cfg = self.config
        quality = cfg.base_care_quality

        last_fed = animal.care.last_fed
        since_fed = self.context.now - last_fed if last_fed is not None else None
        if since_fed is not None and since_fed < cfg.recently_fed_ms:
            quality += cfg.recently_fed_bonus
        elif since_fed is None or since_fed > cfg.hungry_after_ms:
            quality -= cfg.hungry_penalty

        quality += animal.stats.cleanliness * 0.3
        quality += animal.stats.health * 0.3
        quality += animal.stats.happiness * 0.2
        return max(0.1, min(1.0, quality))

    @staticmethod
    def age_factor(animal: Animal) -> float:
        """Ramp up to the peak window, decline to 60%, then to 20% in old age."""
        start, peak, decline = get_species_profile(animal.species).production_age_curve
        age = animal.age_days
        if age < start:
            return 0.3 + (age / start) * 0.7
        if age <= peak:
            return 1.0
        if age <= decline:
            return 1.0 - ((age - peak) / (decline - peak)) * 0.4
        return 0.6 - min(1.0, (age - decline) / decline) * 0.4

    def production_bonus(self, animal: Animal) -> float:
        return sum(m.strength for m in animal.medications_of(MedicationType.PRODUCTION_BOOST, self.context.now))

    def production_penalty(self, animal: Animal) -> float:
        penalties = animal.medications_of(MedicationType.POST_BIRTH_RECOVERY, self.context.now)
        return min(1.0, max((m.strength for m in penalties), default=0.0))

    def calculate_quantity(self, animal: Animal, spec: ProductSpec) -> float:
        cfg = self.config
        quantity = spec.base_quantity
        quantity *= 0.5 + self.production_trait(animal)
        quantity *= max(0.3, animal.stats.health)
        quantity *= self.calculate_care_quality(animal)
        quantity *= 1.0 + self.production_bonus(animal)
        quantity *= self.age_factor(animal)
        quantity *= 1.0 - self.production_penalty(animal)
        quantity *= self.seasonal_behavior(animal).production_quantity
        quantity *= self.specialization_bonus(animal, spec, "quantity_multiplier")
        if self.health is not None:
            quantity *= self.health.production_modifier(animal, get_species_profile(animal.species).production_trait)
        quantity *= self.context.rng.uniform(*cfg.variation_range)
        return max(cfg.min_quantity, round(quantity, 1))

    def calculate_quality(self, animal: Animal, spec: Optional[ProductSpec] = None) -> float:
        cfg = self.config
        quality = 0.5
        quality += (self.production_trait(animal) - 0.5) * 0.4
        quality += (animal.stats.health - 0.5) * 0.6
        quality += (animal.stats.happiness - 0.5) * 0.3
        quality += (self.calculate_care_quality(animal) - 0.5) * 0.4
        quality += (animal.genetics.trait("disease_resistance") - 0.5) * 0.2

        quality += cfg.weather_quality_bonus.get(self.context.weather, 0.0)
        quality += cfg.season_quality_bonus.get(self.context.season, 0.0)
        quality += cfg.feed_quality_bonus.get(animal.care.food_type, 0.0)
        quality += self.premium_care_bonus(animal)
        quality *= self.specialization_bonus(animal, spec or self.product_spec(animal), "quality_multiplier")
        return max(0.1, min(1.0, quality))

    def premium_care_bonus(self, animal: Animal) -> float:
        bonus = 0.0
        last_vet = animal.care.last_vet_visit
        if last_vet is not None and self.context.now - last_vet < self.config.recent_vet_ms:
            bonus += 0.05
        if animal.care.vaccinations:
            bonus += 0.03
        if animal.behavior.social_bonds:
            bonus += min(0.05, len(animal.behavior.social_bonds) * 0.01)
        return bonus

    def quality_tier(self, quality: float):
        for tier in self.config.quality_tiers:
            if quality < tier.upper_bound:
                return tier
        return self.config.quality_tiers[-1]

    def calculate_value(self, spec: ProductSpec, quality: float, quantity: float,
                        multiplier: float = 1.0) -> float:
        return round(spec.base_value * quantity * self.quality_tier(quality).multiplier * multiplier, 2)

    def generate_product(self, animal: Animal, secondary: bool = False) -> Optional[Product]:
        spec = self.product_spec(animal, secondary)
        if spec is None:
            return None

        now = self.context.now
        quantity = self.calculate_quantity(animal, spec)
        quality = self.calculate_quality(animal, spec)
        self.product_count += 1

        product = Product(
            product_id=f"product_{self.product_count:05d}",
            product_type=spec.product_type,
            name=spec.name,
            quantity=quantity,
            quality=quality,
            tier=self.quality_tier(quality).name,
            animal_id=animal.animal_id,
            produced_at=now,
            base_value=spec.base_value,
            value=self.calculate_value(
                spec, quality, quantity,
                self.specialization_bonus(animal, spec, "value_multiplier"),
            ),
            spoilage_rate=spec.spoilage_rate,
            time_to_spoil=spec.time_to_spoil_ms,
        )
        self.pending.setdefault(animal.animal_id, []).append(product)

        if secondary:
            animal.production.last_secondary = now
        else:
            animal.production.last_produced = now
        animal.production.total_lifetime_production += quantity
        self._apply_production_effects(animal, spec, quantity)
        self.total_produced += 1

        logger.info(f"{animal.name} produced {quantity} {spec.name} ({product.tier})")
        self.context.emit(
            NotificationKind.PRODUCT_READY,
            animal_id=animal.animal_id,
            product_id=product.product_id,
            product_type=product.product_type,
            quantity=quantity,
            tier=product.tier,
        )
        return product

    def _apply_production_effects(self, animal: Animal, spec: ProductSpec, quantity: float):
        cfg = self.config
        animal.stats.adjust("energy", -spec.energy_cost)
        if quantity > spec.base_quantity * cfg.overproduction_ratio:
            animal.stats.adjust("energy", -cfg.overproduction_energy)
        if spec.product_type in cfg.hunger_products:
            animal.stats.adjust("hunger", cfg.hunger_cost)
        animal.stats.adjust("happiness", cfg.happiness_gain)

    # -------------------------------------------------------------------------
    # Specializations
    # -------------------------------------------------------------------------

    def specialization_of(self, animal: Animal) -> Optional[Specialization]:
        return self.config.specializations.get(animal.production.specialization)

    def specialization_bonus(self, animal: Animal, spec: Optional[ProductSpec], bonus: str) -> float:
        specialization = self.specialization_of(animal)
        if specialization is None or spec is None or not specialization.boosts(spec.product_type):
            return 1.0
        return getattr(specialization, bonus)

    def get_specialization(self, specialization_id: str) -> Specialization:
        specialization = self.config.specializations.get(specialization_id)
        if specialization is None:
            raise SpecializationNotFoundError(specialization_id)
        return specialization

    def check_specialization_requirements(self, animal: Animal,
                                          specialization: Specialization) -> Tuple[bool, str]:
        """Species, genetic trait and current stat minimums, checked in that order."""
        if animal.base_species not in specialization.species:
            return False, f"{specialization.name} is not available for {animal.base_species}"

        for trait, minimum in specialization.trait_minimums.items():
            value = animal.genetics.trait(trait, 0.0)
            if value < minimum:
                return False, f"{trait} trait too low ({value:.0%} < {minimum:.0%})"

        for stat, minimum in specialization.stat_minimums.items():
            value = animal.stats.get(stat)
            if value < minimum:
                return False, f"{stat} too low ({value:.0%} < {minimum:.0%})"

        return True, ""

    def get_available_specializations(self, animal_id: str) -> List[Dict[str, Any]]:
        """
        Specializations open to an animal's species, with whether it
        currently qualifies.

        Raises:
            AnimalNotFoundError for unknown ids.
        """
        animal = self.registry.get(animal_id)
        available = []
        for specialization in self.config.specializations.values():
            if animal.base_species not in specialization.species:
                continue
            eligible, reason = self.check_specialization_requirements(animal, specialization)
            available.append({
                "specialization_id": specialization.specialization_id,
                "name": specialization.name,
                "eligible": eligible,
                "reason": reason,
                "cost": Cost(specialization.cost, dict(specialization.items)).to_dict(),
                "active": animal.production.specialization == specialization.specialization_id,
            })
        return available

    def apply_specialization(self, animal_id: str, specialization_id: str) -> SpecializationResult:
        """
        Unlock a specialization, paying its coins and items.

        An animal holds one specialization; applying another replaces it.

        Raises:
            AnimalNotFoundError / SpecializationNotFoundError for unknown ids.
        """
        animal = self.registry.get(animal_id)
        specialization = self.get_specialization(specialization_id)

        if animal.production.specialization == specialization_id:
            return SpecializationResult(False, f"{animal.name} already has {specialization.name}")

        eligible, reason = self.check_specialization_requirements(animal, specialization)
        if not eligible:
            return SpecializationResult(False, reason)

        cost = Cost(specialization.cost, dict(specialization.items))
        affordable, why = self.context.economy.can_afford(cost)
        if not affordable:
            return SpecializationResult(False, f"Insufficient resources: {why}")
        self.context.economy.spend(cost, reason=f"specialization:{specialization_id}")

        animal.production.specialization = specialization_id
        logger.info(f"{animal.name} is now a {specialization.name}")
        self.context.emit(
            NotificationKind.SPECIALIZATION_APPLIED,
            animal_id=animal_id,
            specialization_id=specialization_id,
        )
        return SpecializationResult(True, specialization_id=specialization_id)

    # -------------------------------------------------------------------------
    # Collection and queries
    # -------------------------------------------------------------------------

    def collect_products(self, animal_id: str) -> CollectionResult:
        """
        Pay out an animal's pending products at value x freshness.

        Raises:
            AnimalNotFoundError for unknown ids.
        """
        animal = self.registry.get(animal_id)
        products = self.pending.get(animal_id, [])
        if not products:
            return CollectionResult(False, "No products available for collection")

        now = self.context.now
        collected = []
        total = 0.0
        for product in products:
            freshness = product.update_freshness(now)
            adjusted = product.value * freshness
            total += adjusted
            collected.append({**product.to_dict(), "adjusted_value": adjusted})
            self.context.economy.add_item(product.product_type, product.quantity, ResourceType.SUPPLY)

        del self.pending[animal_id]
        self.context.economy.credit(total, reason=f"products:{animal_id}")
        self.total_collected_value += total

        logger.info(f"Collected {len(collected)} products from {animal.name} for {total:.2f} coins")
        self.context.emit(
            NotificationKind.PRODUCTS_COLLECTED,
            animal_id=animal_id,
            count=len(collected),
            total_value=total,
        )
        return CollectionResult(True, products=collected, total_value=total)

    def get_pending(self, animal_id: str) -> List[Product]:
        return list(self.pending.get(animal_id, []))

    def get_all_pending_products(self) -> List[Product]:
        now = self.context.now
        products = [p for pending in self.pending.values() for p in pending]
        for product in products:
            product.update_freshness(now)
        return products

    def production_efficiency(self, animal: Animal) -> float:
        return (animal.stats.health * 0.3
                + animal.stats.happiness * 0.2
                + self.production_trait(animal) * 0.3
                + self.calculate_care_quality(animal) * 0.2)

    def get_production_stats(self, animal_id: str) -> Dict[str, Any]:
        animal = self.registry.get(animal_id)
        rate = self.get_production_rate(animal)
        last = animal.production.last_produced
        secondary = self.product_spec(animal, secondary=True)
        return {
            "animal_id": animal_id,
            "name": animal.name,
            "species": animal.species,
            "product_type": animal.production.product_type,
            "secondary_product_type": secondary.product_type if secondary else None,
            "specialization": animal.production.specialization,
            "production_ready": self.is_production_ready(animal),
            "total_lifetime_production": animal.production.total_lifetime_production,
            "current_production_rate": rate,
            "current_production_rate_hours": rate / HOUR_MS,
            "next_production": (last if last is not None else self.context.now) + rate,
            "pending_products": len(self.pending.get(animal_id, [])),
            "current_quality": self.calculate_quality(animal),
            "production_efficiency": self.production_efficiency(animal),
        }

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self) -> dict:
        return {
            "pending_products": {
                animal_id: [p.to_dict() for p in products]
                for animal_id, products in self.pending.items()
            },
            "product_count": self.product_count,
        }

    def load(self, state: dict):
        self.pending = {
            animal_id: [Product.from_dict(p) for p in products]
            for animal_id, products in state.get("pending_products", {}).items()
            if products
        }
        self.product_count = state.get("product_count", sum(len(p) for p in self.pending.values()))

    def get_status(self) -> Dict:
        status = super().get_status()
        status.update({
            "pending_products": sum(len(p) for p in self.pending.values()),
            "total_produced": self.total_produced,
            "total_collected_value": self.total_collected_value,
        })
        return status
