"""
Animal Life — Subsystem Records
Pregnancies, disease instances and products, with plain-dict persistence.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum, auto

from .animal import Genetics
from ..config import Severity


# =============================================================================
# BREEDING
# =============================================================================

@dataclass
class LitterEstimate:
    minimum: int
    maximum: int
    estimated: int

    def to_dict(self) -> dict:
        return {"min": self.minimum, "max": self.maximum, "estimated": self.estimated}

    @classmethod
    def from_dict(cls, data: dict) -> "LitterEstimate":
        return cls(data["min"], data["max"], data["estimated"])


@dataclass
class Pregnancy:
    pregnancy_id: str
    mother_id: str
    father_id: str
    species: str
    conception_time: int
    due_time: int
    estimated_offspring: LitterEstimate
    genetics: Optional[List[Genetics]] = None   # Resolved at delivery

    def progress(self, now: int) -> float:
        span = self.due_time - self.conception_time
        if span <= 0:
            return 1.0
        return min(1.0, max(0.0, (now - self.conception_time) / span))

    def to_dict(self) -> dict:
        return {
            "pregnancy_id": self.pregnancy_id,
            "mother_id": self.mother_id,
            "father_id": self.father_id,
            "species": self.species,
            "conception_time": self.conception_time,
            "due_time": self.due_time,
            "estimated_offspring": self.estimated_offspring.to_dict(),
            "genetics": [g.to_dict() for g in self.genetics] if self.genetics is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Pregnancy":
        genetics = data.get("genetics")
        return cls(
            pregnancy_id=data["pregnancy_id"],
            mother_id=data["mother_id"],
            father_id=data["father_id"],
            species=data["species"],
            conception_time=data["conception_time"],
            due_time=data["due_time"],
            estimated_offspring=LitterEstimate.from_dict(data["estimated_offspring"]),
            genetics=[Genetics.from_dict(g) for g in genetics] if genetics is not None else None,
        )


# =============================================================================
# HEALTH
# =============================================================================

class DiseaseStage(Enum):
    ONSET = auto()
    ACTIVE = auto()
    RECOVERY = auto()


@dataclass
class ActiveTreatment:
    treatment_id: str
    start_time: int
    duration: int
    effectiveness: float
    stepped_down: bool = False

    def progress(self, now: int) -> float:
        if self.duration <= 0:
            return 1.0
        return (now - self.start_time) / self.duration

    def is_expired(self, now: int) -> bool:
        return now - self.start_time >= self.duration


@dataclass
class DiseaseInstance:
    """
    One disease carried by one animal.

    `stage` and `symptoms` are refreshed from `duration / recovery_time`
    by the health engine; they are never set independently.
    """
    disease_id: str
    name: str
    severity: Severity
    onset_time: int
    recovery_time: int
    duration: float = 0.0
    stage: DiseaseStage = DiseaseStage.ONSET
    symptoms: List[str] = field(default_factory=list)
    current_treatment: Optional[ActiveTreatment] = None
    treatment_history: List[Dict] = field(default_factory=list)

    @property
    def progress(self) -> float:
        if self.recovery_time <= 0:
            return 1.0
        return self.duration / self.recovery_time

    @property
    def is_recovered(self) -> bool:
        return self.duration >= self.recovery_time

    def to_dict(self) -> dict:
        treatment = self.current_treatment
        return {
            "disease_id": self.disease_id,
            "name": self.name,
            "severity": self.severity.name,
            "onset_time": self.onset_time,
            "recovery_time": self.recovery_time,
            "duration": self.duration,
            "stage": self.stage.name,
            "symptoms": list(self.symptoms),
            "current_treatment": None if treatment is None else {
                "treatment_id": treatment.treatment_id,
                "start_time": treatment.start_time,
                "duration": treatment.duration,
                "effectiveness": treatment.effectiveness,
                "stepped_down": treatment.stepped_down,
            },
            "treatment_history": [dict(entry) for entry in self.treatment_history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DiseaseInstance":
        treatment = data.get("current_treatment")
        return cls(
            disease_id=data["disease_id"],
            name=data["name"],
            severity=Severity[data["severity"]],
            onset_time=data["onset_time"],
            recovery_time=data["recovery_time"],
            duration=data.get("duration", 0.0),
            stage=DiseaseStage[data.get("stage", DiseaseStage.ONSET.name)],
            symptoms=list(data.get("symptoms", [])),
            current_treatment=ActiveTreatment(**treatment) if treatment else None,
            treatment_history=[dict(entry) for entry in data.get("treatment_history", [])],
        )


# =============================================================================
# PRODUCTION
# =============================================================================

@dataclass
class Product:
    product_id: str
    product_type: str
    name: str
    quantity: float
    quality: float
    tier: str
    animal_id: str
    produced_at: int
    base_value: float
    value: float
    freshness: float = 1.0
    spoilage_rate: float = 0.0
    time_to_spoil: Optional[int] = None

    @property
    def spoils(self) -> bool:
        return self.spoilage_rate > 0 and self.time_to_spoil is not None

    def update_freshness(self, now: int) -> float:
        """Linear decay toward 0 over time_to_spoil; never increases."""
        if self.spoils:
            elapsed = max(0, now - self.produced_at)
            self.freshness = min(self.freshness, max(0.0, 1.0 - elapsed / self.time_to_spoil))
        return self.freshness

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_type": self.product_type,
            "name": self.name,
            "quantity": self.quantity,
            "quality": self.quality,
            "tier": self.tier,
            "animal_id": self.animal_id,
            "produced_at": self.produced_at,
            "base_value": self.base_value,
            "value": self.value,
            "freshness": self.freshness,
            "spoilage_rate": self.spoilage_rate,
            "time_to_spoil": self.time_to_spoil,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(**data)
