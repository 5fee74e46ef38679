"""
Animal Life — Animals Package
Animal records, subsystem records and care effects.
"""

from .animal import (
    Animal,
    Stats,
    Genetics,
    Pedigree,
    Behavior,
    Position,
    CareState,
    BreedingState,
    ProductionState,
    Medication,
    MedicationType,
    Vaccination,
    Gender,
    Activity,
    STAT_NAMES,
    clamp,
)
from .records import (
    Pregnancy,
    LitterEstimate,
    DiseaseInstance,
    DiseaseStage,
    ActiveTreatment,
    Product,
)
from .effects import (
    EffectKind,
    HealDisease,
    PreventDisease,
    BoostProduction,
    ImproveMood,
    SocialBonding,
    SpecialEffect,
    EFFECT_TYPES,
    effect_from_dict,
)

__all__ = [
    # Animal
    'Animal', 'Stats', 'Genetics', 'Pedigree', 'Behavior', 'Position',
    'CareState', 'BreedingState', 'ProductionState',
    'Medication', 'MedicationType', 'Vaccination', 'Gender', 'Activity',
    'STAT_NAMES', 'clamp',
    # Records
    'Pregnancy', 'LitterEstimate', 'DiseaseInstance', 'DiseaseStage',
    'ActiveTreatment', 'Product',
    # Effects
    'EffectKind', 'HealDisease', 'PreventDisease', 'BoostProduction',
    'ImproveMood', 'SocialBonding', 'SpecialEffect', 'EFFECT_TYPES',
    'effect_from_dict',
]
