"""
Animal Life — Animal Registry
Canonical store of Animal records plus the pregnancy and disease indices.

Index invariants:
- at most one active Pregnancy per mother id
- at most one DiseaseInstance per disease id per animal
- index entries only exist for animals held in the registry
"""

from typing import Dict, Iterator, List, Optional
import logging

from .errors import AnimalNotFoundError
from ..animals.animal import Animal
from ..animals.records import Pregnancy, DiseaseInstance

logger = logging.getLogger(__name__)


class AnimalRegistry:
    """Arena of animals keyed by id."""

    def __init__(self):
        self.animals: Dict[str, Animal] = {}
        self.next_id = 1

        self._pregnancies: Dict[str, Pregnancy] = {}                 # mother id -> pregnancy
        self._diseases: Dict[str, Dict[str, DiseaseInstance]] = {}   # animal id -> disease id -> instance

    # -------------------------------------------------------------------------
    # Animals
    # -------------------------------------------------------------------------

    def new_id(self) -> str:
        animal_id = f"animal_{self.next_id:04d}"
        self.next_id += 1
        while animal_id in self.animals:
            animal_id = f"animal_{self.next_id:04d}"
            self.next_id += 1
        return animal_id

    def add(self, animal: Animal) -> Animal:
        if animal.animal_id in self.animals:
            raise ValueError(f"Duplicate animal id: {animal.animal_id}")
        self.animals[animal.animal_id] = animal
        logger.debug(f"Registered {animal}")
        return animal

    def get(self, animal_id: str) -> Animal:
        animal = self.animals.get(animal_id)
        if animal is None:
            raise AnimalNotFoundError(animal_id)
        return animal

    def find(self, animal_id: str) -> Optional[Animal]:
        return self.animals.get(animal_id)

    def all(self) -> List[Animal]:
        return list(self.animals.values())

    def ids(self) -> List[str]:
        return list(self.animals.keys())

    def remove(self, animal_id: str) -> Animal:
        animal = self.get(animal_id)
        del self.animals[animal_id]
        self._pregnancies.pop(animal_id, None)
        self._diseases.pop(animal_id, None)
        for other in self.animals.values():
            other.behavior.social_bonds.discard(animal_id)
        return animal

    def __len__(self) -> int:
        return len(self.animals)

    def __contains__(self, animal_id: str) -> bool:
        return animal_id in self.animals

    def __iter__(self) -> Iterator[Animal]:
        return iter(list(self.animals.values()))

    def neighbors(self, animal: Animal, radius: float) -> List[Animal]:
        """Other animals within `radius` ground distance."""
        position = animal.behavior.position
        return [
            other for other in self.animals.values()
            if other.animal_id != animal.animal_id
            and position.distance_to(other.behavior.position) <= radius
        ]

    # -------------------------------------------------------------------------
    # Pregnancy index
    # -------------------------------------------------------------------------

    def add_pregnancy(self, pregnancy: Pregnancy):
        mother = self.get(pregnancy.mother_id)
        if pregnancy.mother_id in self._pregnancies:
            raise ValueError(f"{pregnancy.mother_id} already has an active pregnancy")
        self._pregnancies[pregnancy.mother_id] = pregnancy
        mother.breeding.pregnancy_id = pregnancy.pregnancy_id

    def pregnancy_for(self, mother_id: str) -> Optional[Pregnancy]:
        return self._pregnancies.get(mother_id)

    def remove_pregnancy(self, mother_id: str) -> Optional[Pregnancy]:
        pregnancy = self._pregnancies.pop(mother_id, None)
        mother = self.animals.get(mother_id)
        if mother is not None:
            mother.breeding.pregnancy_id = None
        return pregnancy

    def pregnancies(self) -> List[Pregnancy]:
        return list(self._pregnancies.values())

    def clear_pregnancies(self):
        for mother_id in list(self._pregnancies):
            self.remove_pregnancy(mother_id)

    # -------------------------------------------------------------------------
    # Disease index
    # -------------------------------------------------------------------------

    def diseases_of(self, animal_id: str) -> List[DiseaseInstance]:
        return list(self._diseases.get(animal_id, {}).values())

    def has_disease(self, animal_id: str, disease_id: str) -> bool:
        return disease_id in self._diseases.get(animal_id, {})

    def add_disease(self, animal_id: str, instance: DiseaseInstance) -> bool:
        """Attach a disease; False if the animal already carries that disease."""
        self.get(animal_id)
        carried = self._diseases.setdefault(animal_id, {})
        if instance.disease_id in carried:
            return False
        carried[instance.disease_id] = instance
        return True

    def remove_disease(self, animal_id: str, disease_id: str) -> Optional[DiseaseInstance]:
        carried = self._diseases.get(animal_id)
        if not carried:
            return None
        instance = carried.pop(disease_id, None)
        if not carried:
            del self._diseases[animal_id]
        return instance

    def all_diseases(self) -> Dict[str, List[DiseaseInstance]]:
        return {animal_id: list(carried.values()) for animal_id, carried in self._diseases.items()}

    def clear_diseases(self):
        self._diseases.clear()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_records(self) -> List[dict]:
        return [animal.to_dict() for animal in self.animals.values()]

    def from_records(self, records: List[dict]):
        """Replace the herd; indices are cleared and restored by their owners."""
        self.animals.clear()
        self._pregnancies.clear()
        self._diseases.clear()
        for record in records:
            self.add(Animal.from_dict(record))

        # Keep issuing ids past anything loaded
        numbers = [
            int(animal_id.rsplit("_", 1)[1]) for animal_id in self.animals
            if animal_id.startswith("animal_") and animal_id.rsplit("_", 1)[1].isdigit()
        ]
        self.next_id = max(numbers, default=0) + 1
