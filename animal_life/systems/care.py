"""
Animal Life — Care Engine

Player care actions and continuous need decay:
- feed / clean / pet / veterinary actions with cooldowns, costs and
  requirements, scaled by an effectiveness multiplier
- special effects (disease healing and prevention, production and mood
  boosts, social bonding)
- per-tick hunger/cleanliness/energy/social decay, care-driven health drift,
  happiness aggregation, medication expiry and aging
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from ..animals.animal import Animal, Medication, MedicationType, Vaccination, clamp
from ..animals.effects import (
    SpecialEffect,
    HealDisease,
    PreventDisease,
    BoostProduction,
    ImproveMood,
    SocialBonding,
)
from ..config import CareConfig, CARE, DAY_MS, HOUR_MS, get_species_profile
from ..core.errors import CareTypeNotFoundError
from ..core.module import Subsystem
from ..core.store import Cost

logger = logging.getLogger(__name__)


# =============================================================================
# CARE CATALOGUE
# =============================================================================

@dataclass
class CareRequirement:
    """
    A gate on a care action.

    kind is one of stat_min, stat_max, age_min, age_max (days) or has_item.
    """
    kind: str
    value: float = 0.0
    stat: Optional[str] = None
    item: Optional[str] = None
    description: str = ""

    def is_met(self, animal: Animal, economy) -> bool:
        if self.kind == "stat_min":
            return animal.stats.get(self.stat) >= self.value
        if self.kind == "stat_max":
            return animal.stats.get(self.stat) <= self.value
        if self.kind == "age_min":
            return animal.age_days >= self.value
        if self.kind == "age_max":
            return animal.age_days <= self.value
        if self.kind == "has_item":
            return economy.has_item(self.item, self.value or 1)
        return True


@dataclass
class CareAction:
    care_type: str
    name: str
    cooldown_ms: int
    cost: Cost = field(default_factory=Cost)
    stat_effects: Dict[str, float] = field(default_factory=dict)
    special_effects: List[SpecialEffect] = field(default_factory=list)
    requirements: List[CareRequirement] = field(default_factory=list)
    message: str = "{name} received care."


def default_care_actions() -> Dict[str, CareAction]:
    actions = [
        CareAction(
            "feed", "Feed Animal", 4 * HOUR_MS, Cost(coins=1),
            {"hunger": -0.4, "happiness": 0.1, "energy": 0.1},
            message="{name} enjoyed the meal! Hunger reduced.",
        ),
        CareAction(
            "clean", "Clean Animal", 6 * HOUR_MS, Cost(coins=1),
            {"cleanliness": 0.5, "happiness": 0.15, "health": 0.05},
            message="{name} feels much cleaner and happier!",
        ),
        CareAction(
            "pet", "Pet Animal", HOUR_MS, Cost(),
            {"happiness": 0.2, "social": 0.1},
            [SocialBonding(range=3.0)],
            message="{name} loved the attention and affection!",
        ),
        CareAction(
            "veterinary", "Veterinary Care", DAY_MS, Cost(coins=10),
            {"health": 0.3, "happiness": -0.1},
            [PreventDisease(target="general", duration_ms=7 * DAY_MS)],
            message="{name} received professional veterinary care.",
        ),
    ]
    return {action.care_type: action for action in actions}


@dataclass
class CareResult:
    success: bool
    reason: str = ""
    effectiveness: float = 0.0
    effects: List[Dict[str, Any]] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "reason": self.reason,
            "effectiveness": self.effectiveness,
            "effects": list(self.effects),
            "messages": list(self.messages),
        }


# =============================================================================
# ENGINE
# =============================================================================

class CareEngine(Subsystem):
    """Applies care actions and advances animal needs each tick."""

    name = "care"

    def __init__(self, context, registry, config: CareConfig = CARE,
                 actions: Optional[Dict[str, CareAction]] = None):
        super().__init__(context, registry)
        self.config = config
        self.actions = actions if actions is not None else default_care_actions()

        self.actions_performed = 0
        self.actions_refused = 0

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def get_action(self, care_type: str) -> CareAction:
        action = self.actions.get(care_type)
        if action is None:
            raise CareTypeNotFoundError(care_type)
        return action

    def perform_care(self, animal_id: str, care_type: str,
                     options: Optional[Dict[str, Any]] = None) -> CareResult:
        """
        Perform a care action.

        Raises:
            AnimalNotFoundError / CareTypeNotFoundError for unknown ids.

        Returns:
            CareResult; success=False with a reason when a precondition fails.
        """
        options = options or {}
        animal = self.registry.get(animal_id)
        action = self.get_action(care_type)

        allowed, reason = self.can_perform_care(animal, action, options)
        if not allowed:
            self.actions_refused += 1
            logger.debug(f"Care {care_type} refused for {animal.name}: {reason}")
            return CareResult(False, reason)

        result = self._apply_care(animal, action, options)
        self._update_care_history(animal, care_type, options)
        self.actions_performed += 1
        logger.info(f"{animal.name}: {care_type} (effectiveness {result.effectiveness:.2f})")
        return result

    def can_perform_care(self, animal: Animal, action: CareAction, options: Dict[str, Any]):
        """Cooldown, then requirements, then cost; first failure wins."""
        last = animal.care.last_care.get(action.care_type)
        if action.cooldown_ms and last is not None and self.context.now - last < action.cooldown_ms:
            return False, "Care action on cooldown"

        for requirement in action.requirements:
            if not requirement.is_met(animal, self.context.economy):
                return False, f"Requirement not met: {requirement.description or requirement.kind}"

        if options.get("check_cost", True):
            affordable, why = self.context.economy.can_afford(self._cost_of(animal, action, options))
            if not affordable:
                return False, f"Insufficient resources: {why}"

        return True, ""

    def _cost_of(self, animal: Animal, action: CareAction, options: Dict[str, Any]) -> Cost:
        if action.care_type == "feed":
            feed = self.config.feed_types.get(options.get("food_type", "basic"))
            if feed is not None:
                return Cost(coins=feed.cost, items=dict(action.cost.items))
        return action.cost

    def calculate_effectiveness(self, animal: Animal, action: CareAction,
                                options: Optional[Dict[str, Any]] = None) -> float:
        options = options or {}
        cfg = self.config

        effectiveness = cfg.mood_modifiers.get(animal.behavior.mood, 1.0)
        if action.care_type == "feed" and options.get("food_type"):
            effectiveness *= self.food_factor(options["food_type"], animal.species)
        effectiveness *= cfg.personality_modifiers.get(animal.behavior.personality, 1.0)
        effectiveness *= cfg.weather_modifiers.get(self.context.weather, 1.0)
        effectiveness *= cfg.season_modifiers.get(self.context.season, 1.0)

        return clamp(effectiveness, cfg.min_effectiveness, cfg.max_effectiveness)

    def food_factor(self, food_type: str, species: str) -> float:
        """Feed quality times species preference, relative to the reference feed."""
        cfg = self.config
        reference = cfg.feed_types[cfg.reference_feed].quality
        feed = cfg.feed_types.get(food_type)
        if feed is None:
            return cfg.unknown_feed_quality / reference

        base = species.split("_")[0]
        preference = feed.preferences.get(base, feed.default_preference)
        return feed.quality * preference / reference

    def _apply_care(self, animal: Animal, action: CareAction, options: Dict[str, Any]) -> CareResult:
        effectiveness = self.calculate_effectiveness(animal, action, options)
        result = CareResult(True, effectiveness=effectiveness)

        for stat, change in action.stat_effects.items():
            old_value = animal.stats.get(stat)
            actual_change = change * effectiveness
            new_value = animal.stats.adjust(stat, actual_change)
            result.effects.append({
                "type": "stat",
                "stat": stat,
                "old_value": old_value,
                "new_value": new_value,
                "change": actual_change,
            })

        for effect in action.special_effects:
            result.effects.append(self.apply_effect(animal, effect))

        cost = self._cost_of(animal, action, options)
        if not cost.is_free and options.get("check_cost", True):
            self.context.economy.spend(cost, reason=f"{action.care_type}:{animal.animal_id}")
            result.messages.append(f"Spent {cost.coins:g} coins")

        result.messages.append(action.message.format(name=animal.name))
        return result

    def apply_effect(self, animal: Animal, effect: SpecialEffect) -> Dict[str, Any]:
        """Apply one special effect; every variant has a branch."""
        now = self.context.now
        cfg = self.config

        if isinstance(effect, HealDisease):
            diseases = self.registry.diseases_of(animal.animal_id)
            if effect.disease_id is not None:
                diseases = [d for d in diseases if d.disease_id == effect.disease_id]
            if not diseases:
                return {"type": "disease_healed", "disease": None}
            healed = self.registry.remove_disease(animal.animal_id, diseases[0].disease_id)
            logger.info(f"{animal.name}: {healed.name} healed by care")
            return {"type": "disease_healed", "disease": healed.disease_id}

        if isinstance(effect, PreventDisease):
            duration = effect.duration_ms or cfg.default_prevention_days * DAY_MS
            animal.add_medication(Medication(
                MedicationType.DISEASE_PREVENTION, effect.strength, now, duration, effect.target,
            ))
            return {"type": "disease_prevention", "prevention": effect.target, "duration": duration}

        if isinstance(effect, BoostProduction):
            duration = effect.duration_ms or cfg.default_boost_hours * HOUR_MS
            existing = animal.medications_of(MedicationType.PRODUCTION_BOOST, now)
            if existing:
                existing[0].duration += duration
                existing[0].strength = max(existing[0].strength, effect.boost)
            else:
                animal.add_medication(Medication(MedicationType.PRODUCTION_BOOST, effect.boost, now, duration))
            return {"type": "production_boost", "boost": effect.boost, "duration": duration}

        if isinstance(effect, ImproveMood):
            duration = effect.duration_ms or cfg.default_mood_boost_hours * HOUR_MS
            animal.add_medication(Medication(MedicationType.MOOD_BOOST, effect.bonus, now, duration))
            return {"type": "mood_improvement", "bonus": effect.bonus, "duration": duration}

        if isinstance(effect, SocialBonding):
            nearby = self.registry.neighbors(animal, effect.range)
            for other in nearby:
                animal.behavior.social_bonds.add(other.animal_id)
                other.behavior.social_bonds.add(animal.animal_id)
            return {"type": "social_bonding", "bonds_formed": len(nearby)}

        raise TypeError(f"Unhandled special effect: {effect!r}")

    def _update_care_history(self, animal: Animal, care_type: str, options: Dict[str, Any]):
        now = self.context.now
        animal.care.last_care[care_type] = now

        if care_type == "feed":
            animal.care.last_fed = now
            animal.care.food_type = options.get("food_type", "basic")
        elif care_type == "clean":
            animal.care.last_cleaned = now
        elif care_type == "veterinary":
            animal.care.last_vet_visit = now
            if options.get("vaccination"):
                self._vaccinate(animal, options["vaccination"])

    def _vaccinate(self, animal: Animal, name: str):
        vaccine = get_species_profile(animal.species).vaccine(name)
        if vaccine is None:
            logger.warning(f"{animal.name}: no {name} vaccine on the {animal.base_species} schedule")
            return
        animal.care.vaccinations.append(Vaccination.from_spec(vaccine, self.context.now))

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def update(self, delta_time: float) -> Dict:
        for animal in self.registry:
            self.update_needs(animal, delta_time)
        return {"animals": len(self.registry)}

    def update_needs(self, animal: Animal, delta_time: float):
        rates = self.decay_rates(animal)
        stats = animal.stats

        stats.adjust("hunger", rates["hunger"] * delta_time)
        stats.adjust("cleanliness", -rates["cleanliness"] * delta_time)
        stats.adjust("energy", -rates["energy"] * delta_time)
        stats.adjust("social", -rates["social"] * delta_time)

        self._update_health_from_care(animal, delta_time)
        self._update_happiness(animal)
        self._purge_medications(animal)

        animal.age += delta_time

    def decay_rates(self, animal: Animal) -> Dict[str, float]:
        """Per-ms decay rate for each need after age, personality, environment and season."""
        cfg = self.config
        age_factor = cfg.young_decay_factor if animal.age_days < cfg.young_age_days else 1.0
        personality = cfg.personality_decay.get(animal.behavior.personality, {})
        environment = self.environment_decay_factor(animal)
        appetite = get_species_profile(animal.species).seasonal_behavior(self.context.season).appetite

        return {
            stat: base * age_factor * personality.get(stat, 1.0) * environment * (appetite if stat == "hunger" else 1.0)
            for stat, base in cfg.decay_rates.items()
        }

    def environment_decay_factor(self, animal: Animal) -> float:
        cfg = self.config
        factor = cfg.weather_decay.get(self.context.weather, 1.0)
        if len(self.registry.neighbors(animal, cfg.crowding_radius)) > cfg.crowding_threshold:
            factor *= cfg.crowding_factor
        return factor

    def _update_health_from_care(self, animal: Animal, delta_time: float):
        cfg = self.config
        stats = animal.stats
        change = 0.0

        if stats.hunger < 0.3 and stats.cleanliness > 0.7:
            change += cfg.good_care_health_rate * delta_time
        if stats.hunger > 0.8 or stats.cleanliness < 0.2:
            change -= cfg.poor_care_health_rate * delta_time

        age_ratio = animal.age_days / get_species_profile(animal.species).lifespan_days
        if age_ratio > cfg.old_age_ratio:
            change -= cfg.old_age_health_rate * delta_time * (age_ratio - cfg.old_age_ratio) * 5

        stats.adjust("health", change)

    def _update_happiness(self, animal: Animal):
        cfg = self.config
        stats = animal.stats
        weights = cfg.happiness_weights

        happiness = (
            stats.health * weights["health"]
            + (1.0 - stats.hunger) * weights["hunger"]
            + stats.cleanliness * weights["cleanliness"]
            + stats.energy * weights["energy"]
            + stats.social * weights["social"]
        )
        happiness += min(cfg.max_bond_bonus, len(animal.behavior.social_bonds) * cfg.bond_bonus_per_bond)
        happiness += sum(m.strength for m in animal.medications_of(MedicationType.MOOD_BOOST, self.context.now))
        happiness *= cfg.personality_happiness.get(animal.behavior.personality, 1.0)

        stats.set("happiness", happiness)

    def _purge_medications(self, animal: Animal):
        now = self.context.now
        animal.care.medications = [m for m in animal.care.medications if not m.is_expired(now)]

    def get_status(self) -> Dict:
        status = super().get_status()
        status.update({
            "actions_performed": self.actions_performed,
            "actions_refused": self.actions_refused,
        })
        return status
