"""
Animal Life — Animal Model
The Animal record and the sub-records each subsystem owns.

Write access by subsystem:
- CareEngine: stats (needs, happiness), care, behavior.social_bonds
- HealthEngine: stats.health, care.medications, care.vaccinations
- BreedingCoordinator: breeding, pregnancy-related stat effects
- ProductionEngine: production, production-related stat effects
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set
from enum import Enum, auto
import math
import logging

from ..config import DAY_MS, Mood, Personality, VaccineSpec, base_species_of

logger = logging.getLogger(__name__)


STAT_NAMES = ("health", "happiness", "hunger", "cleanliness", "energy", "social")


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(high, max(low, value))


class Gender(Enum):
    MALE = auto()
    FEMALE = auto()


class Activity(Enum):
    IDLE = auto()
    GRAZING = auto()
    RESTING = auto()
    SOCIALIZING = auto()
    EXPLORING = auto()


class MedicationType(Enum):
    """Time-boxed buffs and debuffs carried in care.medications."""
    DISEASE_PREVENTION = auto()
    DISEASE_IMMUNITY = auto()
    PRODUCTION_BOOST = auto()
    MOOD_BOOST = auto()
    HEALTH_BOOST = auto()
    POST_BIRTH_RECOVERY = auto()


@dataclass
class Stats:
    """Six need/condition values, each kept within [0, 1]."""
    health: float = 1.0
    happiness: float = 0.8
    hunger: float = 0.5
    cleanliness: float = 0.8
    energy: float = 0.9
    social: float = 0.6

    def __post_init__(self):
        for name in STAT_NAMES:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                logger.warning(f"Stat {name}={value} outside [0, 1], clamping")
                setattr(self, name, clamp(value))

    def get(self, name: str) -> float:
        return getattr(self, name)

    def set(self, name: str, value: float) -> float:
        value = clamp(value)
        setattr(self, name, value)
        return value

    def adjust(self, name: str, delta: float) -> float:
        return self.set(name, getattr(self, name) + delta)

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in STAT_NAMES}

    @classmethod
    def from_dict(cls, data: dict) -> "Stats":
        return cls(**{name: data[name] for name in STAT_NAMES if name in data})


@dataclass
class Pedigree:
    father_id: Optional[str] = None
    mother_id: Optional[str] = None
    generation: int = 1

    @property
    def parents(self) -> List[str]:
        return [p for p in (self.father_id, self.mother_id) if p is not None]


@dataclass
class Genetics:
    traits: Dict[str, float] = field(default_factory=dict)
    dominant_genes: List[str] = field(default_factory=list)
    recessive_genes: List[str] = field(default_factory=list)
    pedigree: Pedigree = field(default_factory=Pedigree)
    mutations: List[str] = field(default_factory=list)

    def trait(self, name: str, default: float = 0.5) -> float:
        return self.traits.get(name, default)

    def to_dict(self) -> dict:
        return {
            "traits": dict(self.traits),
            "dominant_genes": list(self.dominant_genes),
            "recessive_genes": list(self.recessive_genes),
            "pedigree": {
                "father_id": self.pedigree.father_id,
                "mother_id": self.pedigree.mother_id,
                "generation": self.pedigree.generation,
            },
            "mutations": list(self.mutations),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Genetics":
        return cls(
            traits=dict(data.get("traits", {})),
            dominant_genes=list(data.get("dominant_genes", [])),
            recessive_genes=list(data.get("recessive_genes", [])),
            pedigree=Pedigree(**data.get("pedigree", {})),
            mutations=list(data.get("mutations", [])),
        )


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_to(self, other: "Position") -> float:
        """Ground distance; height is ignored."""
        return math.hypot(self.x - other.x, self.z - other.z)


@dataclass
class Behavior:
    personality: Personality = Personality.CALM
    mood: Mood = Mood.CONTENT
    activity: Activity = Activity.IDLE
    social_bonds: Set[str] = field(default_factory=set)
    position: Position = field(default_factory=Position)

    def to_dict(self) -> dict:
        return {
            "personality": self.personality.name,
            "mood": self.mood.name,
            "activity": self.activity.name,
            "social_bonds": sorted(self.social_bonds),
            "position": {"x": self.position.x, "y": self.position.y, "z": self.position.z},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Behavior":
        return cls(
            personality=Personality[data.get("personality", Personality.CALM.name)],
            mood=Mood[data.get("mood", Mood.CONTENT.name)],
            activity=Activity[data.get("activity", Activity.IDLE.name)],
            social_bonds=set(data.get("social_bonds", [])),
            position=Position(**data.get("position", {})),
        )


@dataclass
class Medication:
    """A time-boxed effect; purged once now - applied_at >= duration."""
    kind: MedicationType
    strength: float
    applied_at: int
    duration: int
    target: str = "general"     # Disease id for prevention/immunity

    def is_expired(self, now: int) -> bool:
        return now - self.applied_at >= self.duration

    def remaining(self, now: int) -> int:
        return max(0, self.applied_at + self.duration - now)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.name,
            "strength": self.strength,
            "applied_at": self.applied_at,
            "duration": self.duration,
            "target": self.target,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Medication":
        return cls(
            kind=MedicationType[data["kind"]],
            strength=data["strength"],
            applied_at=data["applied_at"],
            duration=data["duration"],
            target=data.get("target", "general"),
        )


@dataclass
class Vaccination:
    name: str
    applied_at: int
    strength: float = 0.8
    duration: int = 365 * DAY_MS
    targets: List[str] = field(default_factory=list)    # Disease ids it protects against

    @classmethod
    def from_spec(cls, spec: VaccineSpec, now: int) -> "Vaccination":
        return cls(spec.name, now, spec.strength, spec.duration_ms, list(spec.targets))

    def is_expired(self, now: int) -> bool:
        return now - self.applied_at >= self.duration

    def protects_against(self, disease_id: str, now: int) -> bool:
        return disease_id in self.targets and not self.is_expired(now)

    def to_dict(self) -> dict:
        return {"name": self.name, "applied_at": self.applied_at,
                "strength": self.strength, "duration": self.duration,
                "targets": list(self.targets)}


@dataclass
class CareState:
    last_fed: Optional[int] = None
    last_cleaned: Optional[int] = None
    last_vet_visit: Optional[int] = None
    food_type: str = "basic"
    medications: List[Medication] = field(default_factory=list)
    vaccinations: List[Vaccination] = field(default_factory=list)
    last_care: Dict[str, int] = field(default_factory=dict)    # care type -> time
    needs_special_care: bool = False
    weaning_age_days: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "last_fed": self.last_fed,
            "last_cleaned": self.last_cleaned,
            "last_vet_visit": self.last_vet_visit,
            "food_type": self.food_type,
            "medications": [m.to_dict() for m in self.medications],
            "vaccinations": [v.to_dict() for v in self.vaccinations],
            "last_care": dict(self.last_care),
            "needs_special_care": self.needs_special_care,
            "weaning_age_days": self.weaning_age_days,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CareState":
        return cls(
            last_fed=data.get("last_fed"),
            last_cleaned=data.get("last_cleaned"),
            last_vet_visit=data.get("last_vet_visit"),
            food_type=data.get("food_type", "basic"),
            medications=[Medication.from_dict(m) for m in data.get("medications", [])],
            vaccinations=[Vaccination(**v) for v in data.get("vaccinations", [])],
            last_care=dict(data.get("last_care", {})),
            needs_special_care=data.get("needs_special_care", False),
            weaning_age_days=data.get("weaning_age_days"),
        )


@dataclass
class BreedingState:
    maturity_age_days: int = 365
    pregnancy_id: Optional[str] = None
    last_bred: Optional[int] = None
    breeding_value: float = 0.5
    offspring: List[str] = field(default_factory=list)


@dataclass
class ProductionState:
    product_type: Optional[str] = None
    last_produced: Optional[int] = None
    total_lifetime_production: float = 0.0
    last_secondary: Optional[int] = None
    specialization: Optional[str] = None


@dataclass
class Animal:
    """
    A single farm animal.

    `age` is an elapsed-ms accumulator advanced by the care tick, not a
    birth timestamp, so loaded animals keep aging from where they were.
    """
    animal_id: str
    species: str
    name: str
    gender: Gender
    age: float = 0.0
    born_at: int = 0

    stats: Stats = field(default_factory=Stats)
    genetics: Genetics = field(default_factory=Genetics)
    behavior: Behavior = field(default_factory=Behavior)
    care: CareState = field(default_factory=CareState)
    breeding: BreedingState = field(default_factory=BreedingState)
    production: ProductionState = field(default_factory=ProductionState)

    @property
    def base_species(self) -> str:
        return base_species_of(self.species)

    @property
    def age_days(self) -> float:
        return self.age / DAY_MS

    @property
    def is_female(self) -> bool:
        return self.gender == Gender.FEMALE

    @property
    def is_pregnant(self) -> bool:
        return self.breeding.pregnancy_id is not None

    def medications_of(self, kind: MedicationType, now: Optional[int] = None) -> List[Medication]:
        """Medications of a kind, optionally only those still active at `now`."""
        return [
            m for m in self.care.medications
            if m.kind == kind and (now is None or not m.is_expired(now))
        ]

    def add_medication(self, medication: Medication):
        self.care.medications.append(medication)

    def to_dict(self) -> dict:
        return {
            "animal_id": self.animal_id,
            "species": self.species,
            "name": self.name,
            "gender": self.gender.name,
            "age": self.age,
            "born_at": self.born_at,
            "stats": self.stats.to_dict(),
            "genetics": self.genetics.to_dict(),
            "behavior": self.behavior.to_dict(),
            "care": self.care.to_dict(),
            "breeding": {
                "maturity_age_days": self.breeding.maturity_age_days,
                "pregnancy_id": self.breeding.pregnancy_id,
                "last_bred": self.breeding.last_bred,
                "breeding_value": self.breeding.breeding_value,
                "offspring": list(self.breeding.offspring),
            },
            "production": {
                "product_type": self.production.product_type,
                "last_produced": self.production.last_produced,
                "total_lifetime_production": self.production.total_lifetime_production,
                "last_secondary": self.production.last_secondary,
                "specialization": self.production.specialization,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Animal":
        breeding = dict(data.get("breeding", {}))
        breeding["offspring"] = list(breeding.get("offspring", []))
        return cls(
            animal_id=data["animal_id"],
            species=data["species"],
            name=data["name"],
            gender=Gender[data["gender"]],
            age=data.get("age", 0.0),
            born_at=data.get("born_at", 0),
            stats=Stats.from_dict(data.get("stats", {})),
            genetics=Genetics.from_dict(data.get("genetics", {})),
            behavior=Behavior.from_dict(data.get("behavior", {})),
            care=CareState.from_dict(data.get("care", {})),
            breeding=BreedingState(**breeding),
            production=ProductionState(**data.get("production", {})),
        )

    def __repr__(self) -> str:
        return f"Animal({self.animal_id}: {self.name} the {self.species}, {self.gender.name.lower()})"
