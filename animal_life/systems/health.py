"""
Animal Life — Health Engine

Disease lifecycle per animal:
- Onset: a per-tick roll scaled by elapsed time and a multiplicative risk
  profile (poor health, hygiene, stress, age, genetics, weather)
- Progression: onset (<25%) -> active (25-75%) -> recovery (>75%) ->
  removed at 100% of the disease's recovery time, leaving temporary immunity
- Contagion: each tick, neighbors within the contagion radius roll against
  the source's contagiousness, discounted by their own resistance
- Treatment: time-boxed; heals while active and steps severity down one
  band once past the halfway mark
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List
import logging

from ..animals.animal import Animal, Medication, MedicationType, Vaccination
from ..animals.records import ActiveTreatment, DiseaseInstance, DiseaseStage
from ..config import (
    DAY_MS,
    HealthConfig,
    HEALTH,
    Severity,
    Weather,
    get_species_profile,
)
from ..core.context import NotificationKind
from ..core.errors import TreatmentNotFoundError
from ..core.module import Subsystem
from ..core.store import Cost

logger = logging.getLogger(__name__)


PROTECTIVE_MEDICATIONS = (MedicationType.DISEASE_PREVENTION, MedicationType.DISEASE_IMMUNITY)


@dataclass
class TreatmentResult:
    success: bool
    reason: str = ""
    treated: List[str] = field(default_factory=list)
    effects: List[Dict[str, Any]] = field(default_factory=list)
    cost: float = 0.0

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "reason": self.reason,
            "treated": list(self.treated),
            "effects": list(self.effects),
            "cost": self.cost,
        }


@dataclass
class HealthReport:
    """Read-only snapshot produced by check_health."""
    animal_id: str
    name: str
    overall_health: float
    active_diseases: List[Dict[str, Any]] = field(default_factory=list)
    health_risks: List[Dict[str, str]] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    next_vet_visit: int = 0
    immunizations: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "animal_id": self.animal_id,
            "name": self.name,
            "overall_health": self.overall_health,
            "active_diseases": list(self.active_diseases),
            "health_risks": list(self.health_risks),
            "recommendations": list(self.recommendations),
            "next_vet_visit": self.next_vet_visit,
            "immunizations": list(self.immunizations),
        }


class HealthEngine(Subsystem):
    """Disease onset, progression, contagion and treatment."""

    name = "health"

    def __init__(self, context, registry, config: HealthConfig = HEALTH):
        super().__init__(context, registry)
        self.config = config
        self.health_history: Dict[str, List[Dict]] = {}

        # Statistics
        self.total_infections = 0
        self.total_contagions = 0
        self.total_recoveries = 0
        self.total_treatments = 0

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def update(self, delta_time: float) -> Dict:
        for animal in self.registry:
            self.update_health(animal, delta_time)
        return {
            "infected_animals": len(self.registry.all_diseases()),
            "total_infections": self.total_infections,
        }

    def update_health(self, animal: Animal, delta_time: float):
        self._update_active_diseases(animal, delta_time)
        self._check_for_new_diseases(animal, delta_time)
        self._update_health_history(animal)
        self._apply_age_effects(animal, delta_time)

    def _update_active_diseases(self, animal: Animal, delta_time: float):
        for instance in self.registry.diseases_of(animal.animal_id):
            definition = self.config.diseases.get(instance.disease_id)
            if definition is None:
                self.registry.remove_disease(animal.animal_id, instance.disease_id)
                continue

            instance.duration += delta_time
            if instance.is_recovered:
                self._recover(animal, instance)
                continue

            self._apply_disease_effects(animal, instance, delta_time)
            self.refresh_stage(instance)
            if instance.current_treatment is not None:
                self._apply_treatment_effects(animal, instance, delta_time)

    def _apply_disease_effects(self, animal: Animal, instance: DiseaseInstance, delta_time: float):
        definition = self.config.diseases[instance.disease_id]
        severity = self.config.severity_multipliers[instance.severity]

        for effect, value in definition.effects.items():
            if effect in ("health", "happiness", "energy"):
                animal.stats.adjust(effect, value * severity * delta_time * self.config.effect_scale)
            elif effect == "contagiousness":
                self._check_contagion(animal, instance, value * severity, delta_time)
            # Production trait effects are read by the production engine

    def refresh_stage(self, instance: DiseaseInstance):
        """Derive stage and symptoms from duration / recovery time."""
        cfg = self.config
        progress = instance.progress
        if progress < cfg.onset_stage_end:
            instance.stage = DiseaseStage.ONSET
            instance.symptoms = list(cfg.onset_symptoms)
        elif progress < cfg.active_stage_end:
            instance.stage = DiseaseStage.ACTIVE
            definition = cfg.diseases.get(instance.disease_id)
            instance.symptoms = list(definition.symptoms) if definition else []
        else:
            instance.stage = DiseaseStage.RECOVERY
            instance.symptoms = list(cfg.recovery_symptoms)

    def _check_contagion(self, source: Animal, instance: DiseaseInstance,
                         contagiousness: float, delta_time: float):
        if contagiousness <= 0:
            return

        definition = self.config.diseases[instance.disease_id]
        for neighbor in self.registry.neighbors(source, self.config.contagion_radius):
            if self.registry.has_disease(neighbor.animal_id, instance.disease_id):
                continue
            if neighbor.base_species not in definition.species:
                continue

            resistance = neighbor.genetics.trait("disease_resistance")
            rate = contagiousness * self.config.contagion_scale * (1.0 - resistance) * delta_time
            rate *= 1.0 - self.protection(neighbor, instance.disease_id)

            if self.context.rng.random() < rate:
                if self.infect(neighbor.animal_id, instance.disease_id, Severity.MILD):
                    self.total_contagions += 1
                    logger.warning(f"{neighbor.name} contracted {instance.name} from {source.name}")
                    self.context.emit(
                        NotificationKind.DISEASE_CONTAGION,
                        animal_id=neighbor.animal_id,
                        source_id=source.animal_id,
                        disease_id=instance.disease_id,
                    )

    def _check_for_new_diseases(self, animal: Animal, delta_time: float):
        risk = self.calculate_risk_factors(animal)["total"]
        probability = self.config.base_onset_rate * risk * delta_time
        probability *= 1.0 - self.protection(animal, "general")

        if self.context.rng.random() >= probability:
            return

        candidates = [
            d for d in self.possible_diseases(animal)
            if self.context.rng.random() >= self.protection(animal, d.disease_id)
        ]
        if not candidates:
            return

        disease = self.context.rng.choice(candidates)
        severity = self.initial_severity(animal)
        if self.infect(animal.animal_id, disease.disease_id, severity):
            self.context.emit(
                NotificationKind.DISEASE_ONSET,
                animal_id=animal.animal_id,
                disease_id=disease.disease_id,
                severity=severity.name.lower(),
            )

    def calculate_risk_factors(self, animal: Animal) -> Dict[str, float]:
        """Multiplicative disease risk profile; "total" is the product."""
        cfg = self.config
        stats = animal.stats
        factors: Dict[str, float] = {}
        total = 1.0

        if stats.health < cfg.poor_health_threshold:
            factors["poor_health"] = cfg.poor_health_factor
        if stats.cleanliness < cfg.poor_hygiene_threshold:
            factors["poor_hygiene"] = cfg.poor_hygiene_factor
        if stats.happiness < cfg.stress_threshold:
            factors["stress"] = cfg.stress_factor

        lifespan = get_species_profile(animal.species).lifespan_days
        if animal.age_days < cfg.young_age_days:
            factors["young_age"] = cfg.young_factor
        elif animal.age_days > lifespan * cfg.old_age_ratio:
            factors["old_age"] = cfg.old_factor

        if self.context.weather == Weather.STORMY:
            factors["bad_weather"] = cfg.storm_factor

        for value in factors.values():
            total *= value

        resistance = animal.genetics.trait("disease_resistance")
        factors["genetic_resistance"] = 1.0 - resistance
        total *= 1.0 - resistance * cfg.resistance_discount

        factors["total"] = total
        return factors

    def possible_diseases(self, animal: Animal):
        return [
            d for d in self.config.diseases.values()
            if animal.base_species in d.species
            and not self.registry.has_disease(animal.animal_id, d.disease_id)
        ]

    def initial_severity(self, animal: Animal) -> Severity:
        score = (1.0 - animal.genetics.trait("disease_resistance")) + (1.0 - animal.stats.health)
        for upper, severity in self.config.severity_bands:
            if score < upper:
                return severity
        return Severity.CRITICAL

    def protection(self, animal: Animal, disease_id: str) -> float:
        """
        Strongest active protection against a disease id (or "general").

        Prevention and immunity medications count when they target the disease,
        "general" or "all"; vaccinations only count for the diseases they target.
        """
        now = self.context.now
        strengths = [
            m.strength for m in animal.care.medications
            if m.kind in PROTECTIVE_MEDICATIONS and not m.is_expired(now)
            and m.target in (disease_id, "general", "all")
        ]
        strengths += [v.strength for v in animal.care.vaccinations if v.protects_against(disease_id, now)]
        return min(1.0, max(strengths, default=0.0))

    def infect(self, animal_id: str, disease_id: str, severity: Severity = Severity.MILD) -> bool:
        """
        Attach a disease to an animal.

        Returns:
            False for unknown diseases or if the animal already carries it.
        """
        definition = self.config.diseases.get(disease_id)
        if definition is None:
            logger.debug(f"Ignoring unknown disease {disease_id}")
            return False

        animal = self.registry.get(animal_id)
        instance = DiseaseInstance(
            disease_id=disease_id,
            name=definition.name,
            severity=severity,
            onset_time=self.context.now,
            recovery_time=definition.recovery_time_ms,
        )
        self.refresh_stage(instance)
        if not self.registry.add_disease(animal_id, instance):
            return False

        self.total_infections += 1
        logger.warning(f"{animal.name} infected with {definition.name} ({severity.name.lower()})")
        return True

    def _recover(self, animal: Animal, instance: DiseaseInstance):
        cfg = self.config
        self.registry.remove_disease(animal.animal_id, instance.disease_id)

        animal.stats.adjust("health", cfg.recovery_health_bonus)
        animal.stats.adjust("happiness", cfg.recovery_happiness_bonus)
        animal.add_medication(Medication(
            MedicationType.DISEASE_IMMUNITY,
            cfg.immunity_strength,
            self.context.now,
            cfg.immunity_duration_ms,
            instance.disease_id,
        ))

        self.total_recoveries += 1
        logger.info(f"{animal.name} recovered from {instance.name}")
        self.context.emit(
            NotificationKind.DISEASE_RECOVERED,
            animal_id=animal.animal_id,
            disease_id=instance.disease_id,
        )

    def _apply_age_effects(self, animal: Animal, delta_time: float):
        cfg = self.config
        if animal.age_days < cfg.young_age_days:
            animal.stats.adjust("health", -cfg.young_frailty_rate * delta_time)

        age_ratio = animal.age_days / get_species_profile(animal.species).lifespan_days
        if age_ratio > cfg.old_age_ratio:
            decline = (age_ratio - cfg.old_age_ratio) * cfg.old_age_decline_rate * delta_time
            animal.stats.adjust("health", -decline)
            animal.stats.adjust("energy", -decline * 0.5)

    def _update_health_history(self, animal: Animal):
        day = int(self.context.now // DAY_MS)
        history = self.health_history.setdefault(animal.animal_id, [])
        if history and history[-1]["day"] == day:
            return

        history.append({
            "day": day,
            "health": animal.stats.health,
            "active_diseases": len(self.registry.diseases_of(animal.animal_id)),
            "treatments": sum(
                1 for d in self.registry.diseases_of(animal.animal_id) if d.current_treatment
            ),
        })
        limit = self.context.config.health_history_days
        if len(history) > limit:
            del history[:len(history) - limit]

    # -------------------------------------------------------------------------
    # Treatment
    # -------------------------------------------------------------------------

    def treat_disease(self, animal_id: str, treatment_id: str) -> TreatmentResult:
        """
        Apply a treatment to an animal.

        Raises:
            AnimalNotFoundError / TreatmentNotFoundError for unknown ids.
        """
        animal = self.registry.get(animal_id)
        treatment = self.config.treatments.get(treatment_id)
        if treatment is None:
            raise TreatmentNotFoundError(treatment_id)

        allowed, reason = self.can_apply_treatment(animal, treatment)
        if not allowed:
            logger.warning(f"Treatment {treatment_id} refused for {animal.name}: {reason}")
            return TreatmentResult(False, reason)

        now = self.context.now
        result = TreatmentResult(True, cost=treatment.cost)

        for instance in self._treatable(animal, treatment):
            instance.current_treatment = ActiveTreatment(
                treatment.treatment_id, now, treatment.duration_ms, treatment.effectiveness,
            )
            instance.treatment_history.append({
                "treatment_id": treatment.treatment_id,
                "applied_at": now,
                "effectiveness": treatment.effectiveness,
            })
            result.treated.append(instance.name)

        for stat, change in treatment.effects.items():
            old_value = animal.stats.get(stat)
            new_value = animal.stats.adjust(stat, change)
            result.effects.append({"stat": stat, "old_value": old_value, "new_value": new_value, "change": change})

        if treatment.prevention_strength > 0:
            animal.add_medication(Medication(
                MedicationType.DISEASE_PREVENTION, treatment.prevention_strength,
                now, treatment.duration_ms, "all",
            ))
            result.effects.append({"type": "disease_prevention", "strength": treatment.prevention_strength})

        if treatment.cost > 0:
            self.context.economy.spend(Cost(coins=treatment.cost), reason=f"{treatment_id}:{animal_id}")

        self.total_treatments += 1
        logger.info(f"{animal.name}: {treatment.name} applied ({', '.join(result.treated) or 'preventive'})")
        return result

    def _treatable(self, animal: Animal, treatment) -> List[DiseaseInstance]:
        return [
            d for d in self.registry.diseases_of(animal.animal_id)
            if d.disease_id in treatment.treats or "all" in treatment.treats
        ]

    def can_apply_treatment(self, animal: Animal, treatment):
        if not self._treatable(animal, treatment) and not treatment.is_preventive:
            return False, "No compatible diseases to treat"

        requirements = treatment.requirements
        if "min_health" in requirements and animal.stats.health < requirements["min_health"]:
            return False, "Requirement not met: min_health"
        if "max_age" in requirements and animal.age_days > requirements["max_age"]:
            return False, "Requirement not met: max_age"
        if "has_disease" in requirements and not self.registry.has_disease(
                animal.animal_id, requirements["has_disease"]):
            return False, "Requirement not met: has_disease"

        affordable, _ = self.context.economy.can_afford(Cost(coins=treatment.cost))
        if not affordable:
            return False, "Insufficient coins"

        return True, ""

    def _apply_treatment_effects(self, animal: Animal, instance: DiseaseInstance, delta_time: float):
        treatment = instance.current_treatment
        now = self.context.now
        if treatment.is_expired(now):
            instance.current_treatment = None
            return

        animal.stats.adjust("health", treatment.effectiveness * self.config.treatment_health_scale * delta_time)

        past_midpoint = treatment.progress(now) > self.config.treatment_step_down_progress
        if past_midpoint and not treatment.stepped_down and instance.severity != Severity.MILD:
            instance.severity = instance.severity.step_down()
            treatment.stepped_down = True
            logger.debug(f"{animal.name}: {instance.name} eased to {instance.severity.name.lower()}")

    # -------------------------------------------------------------------------
    # Reports and preventive care
    # -------------------------------------------------------------------------

    def check_health(self, animal_id: str) -> HealthReport:
        animal = self.registry.get(animal_id)
        now = self.context.now

        report = HealthReport(
            animal_id=animal_id,
            name=animal.name,
            overall_health=animal.stats.health,
            next_vet_visit=(animal.care.last_vet_visit or 0) + self.config.vet_interval_ms,
            immunizations=[v.to_dict() for v in animal.care.vaccinations],
        )

        for instance in self.registry.diseases_of(animal_id):
            treatment = instance.current_treatment
            report.active_diseases.append({
                "disease_id": instance.disease_id,
                "name": instance.name,
                "severity": instance.severity.name.lower(),
                "stage": instance.stage.name.lower(),
                "duration": instance.duration,
                "symptoms": list(instance.symptoms),
                "treatment": treatment.treatment_id if treatment else None,
            })

        report.health_risks = self.assess_health_risks(animal)
        report.recommendations = self._recommendations(animal, report, now)
        return report

    def assess_health_risks(self, animal: Animal) -> List[Dict[str, str]]:
        risks = []
        if animal.stats.health < 0.4:
            risks.append({"type": "poor_health", "severity": "high",
                          "description": "Animal health is critically low"})
        if animal.stats.cleanliness < 0.3:
            risks.append({"type": "poor_hygiene", "severity": "medium",
                          "description": "Poor hygiene increases disease risk"})
        lifespan = get_species_profile(animal.species).lifespan_days
        if animal.age_days > lifespan * self.config.old_age_ratio:
            risks.append({"type": "old_age", "severity": "medium",
                          "description": "Advanced age increases health risks"})
        if animal.genetics.trait("disease_resistance") < 0.3:
            risks.append({"type": "genetic_vulnerability", "severity": "low",
                          "description": "Genetic predisposition to diseases"})
        return risks

    def _recommendations(self, animal: Animal, report: HealthReport, now: int) -> List[str]:
        recommendations = [
            f"Treat {d['name']} immediately" for d in report.active_diseases if not d["treatment"]
        ]
        if animal.stats.health < 0.6:
            recommendations.append("Schedule veterinary checkup")
        if animal.stats.cleanliness < 0.5:
            recommendations.append("Improve hygiene and cleaning routine")
        if animal.stats.happiness < 0.5:
            recommendations.append("Increase social interaction and environmental enrichment")

        last_visit = animal.care.last_vet_visit
        if last_visit is None or now - last_visit > self.config.vet_interval_ms:
            recommendations.append("Schedule routine veterinary checkup")
        return recommendations

    def apply_preventive_care(self, animal_id: str) -> Dict[str, Any]:
        """Vaccinate (with boosters), boost health, and screen for disease."""
        animal = self.registry.get(animal_id)
        now = self.context.now
        cfg = self.config

        vaccinated = []
        for vaccine in get_species_profile(animal.species).vaccines:
            current = [v for v in animal.care.vaccinations if v.name == vaccine.name and not v.is_expired(now)]
            if not current:
                animal.care.vaccinations.append(Vaccination.from_spec(vaccine, now))
                vaccinated.append(vaccine.name)

        animal.stats.adjust("health", cfg.recovery_health_bonus)
        animal.add_medication(Medication(
            MedicationType.HEALTH_BOOST, cfg.booster_strength, now, cfg.booster_duration_ms,
        ))

        screening = {
            "early_detection": [
                d.name for d in self.registry.diseases_of(animal_id) if d.stage == DiseaseStage.ONSET
            ],
            "risks_detected": [],
            "recommendations": [],
        }
        if self.calculate_risk_factors(animal)["total"] > cfg.high_risk_threshold:
            screening["risks_detected"].append("High disease risk detected")
            screening["recommendations"].append("Improve animal care routine")

        animal.care.last_vet_visit = now
        logger.info(f"{animal.name} received preventive care ({len(vaccinated)} vaccinations)")

        return {
            "success": True,
            "vaccinations": vaccinated,
            "health_booster": {"boost": cfg.recovery_health_bonus, "duration": cfg.booster_duration_ms},
            "screening": screening,
            "message": f"{animal.name} received comprehensive preventive care",
        }

    def production_modifier(self, animal: Animal, trait: str) -> float:
        """Multiplier on production from diseases that target a production trait."""
        modifier = 1.0
        for instance in self.registry.diseases_of(animal.animal_id):
            definition = self.config.diseases.get(instance.disease_id)
            if definition and trait in definition.effects:
                severity = self.config.severity_multipliers[instance.severity]
                modifier *= max(0.0, 1.0 + definition.effects[trait] * severity)
        return modifier

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self) -> dict:
        return {
            "active_diseases": {
                animal_id: [d.to_dict() for d in diseases]
                for animal_id, diseases in self.registry.all_diseases().items()
            },
            "health_history": {animal_id: [dict(e) for e in h] for animal_id, h in self.health_history.items()},
        }

    def load(self, state: dict):
        self.registry.clear_diseases()
        for animal_id, diseases in state.get("active_diseases", {}).items():
            if animal_id not in self.registry:
                logger.warning(f"Dropping diseases for unknown animal {animal_id}")
                continue
            for data in diseases:
                if data["disease_id"] not in self.config.diseases:
                    continue
                self.registry.add_disease(animal_id, DiseaseInstance.from_dict(data))

        self.health_history = {
            animal_id: [dict(e) for e in history]
            for animal_id, history in state.get("health_history", {}).items()
        }

    def get_status(self) -> Dict:
        status = super().get_status()
        status.update({
            "infected_animals": len(self.registry.all_diseases()),
            "total_infections": self.total_infections,
            "total_contagions": self.total_contagions,
            "total_recoveries": self.total_recoveries,
            "total_treatments": self.total_treatments,
        })
        return status
