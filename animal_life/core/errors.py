"""
Animal Life — Exceptions
Lookup failures are raised; expected precondition failures are returned as results.
"""


class SimulationError(Exception):
    """Base class for engine errors."""
    pass


class NotFoundError(SimulationError, LookupError):
    """An identifier does not resolve to a known record."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"Unknown {kind}: {identifier}")


class AnimalNotFoundError(NotFoundError):
    def __init__(self, animal_id: str):
        super().__init__("animal", animal_id)


class TreatmentNotFoundError(NotFoundError):
    def __init__(self, treatment_id: str):
        super().__init__("treatment", treatment_id)


class CareTypeNotFoundError(NotFoundError):
    def __init__(self, care_type: str):
        super().__init__("care type", care_type)


class SpecializationNotFoundError(NotFoundError):
    def __init__(self, specialization_id: str):
        super().__init__("specialization", specialization_id)
