"""
Animal Life — Special Effects
The closed set of side effects a care action can carry.

Each variant is its own dataclass with a typed payload; `EFFECT_TYPES` maps
every EffectKind to exactly one class and the care engine dispatches on the
class, so adding a kind without a handler fails loudly.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Type, Union
from enum import Enum, auto


class EffectKind(Enum):
    HEAL_DISEASE = auto()
    PREVENT_DISEASE = auto()
    BOOST_PRODUCTION = auto()
    IMPROVE_MOOD = auto()
    SOCIAL_BONDING = auto()


@dataclass(frozen=True)
class HealDisease:
    """Clear one active disease (a specific one, or the oldest)."""
    disease_id: Optional[str] = None
    kind = EffectKind.HEAL_DISEASE


@dataclass(frozen=True)
class PreventDisease:
    """Lower onset probability for a disease, or all of them with "general"."""
    target: str = "general"
    strength: float = 0.5
    duration_ms: Optional[int] = None
    kind = EffectKind.PREVENT_DISEASE


@dataclass(frozen=True)
class BoostProduction:
    """Multiply production quantity by (1 + boost); stacks by extending duration."""
    boost: float
    duration_ms: Optional[int] = None
    kind = EffectKind.BOOST_PRODUCTION


@dataclass(frozen=True)
class ImproveMood:
    bonus: float
    duration_ms: Optional[int] = None
    kind = EffectKind.IMPROVE_MOOD


@dataclass(frozen=True)
class SocialBonding:
    """Form mutual bonds with every animal within `range` (ground distance)."""
    range: float = 3.0
    kind = EffectKind.SOCIAL_BONDING


SpecialEffect = Union[HealDisease, PreventDisease, BoostProduction, ImproveMood, SocialBonding]

EFFECT_TYPES: Dict[EffectKind, Type] = {
    EffectKind.HEAL_DISEASE: HealDisease,
    EffectKind.PREVENT_DISEASE: PreventDisease,
    EffectKind.BOOST_PRODUCTION: BoostProduction,
    EffectKind.IMPROVE_MOOD: ImproveMood,
    EffectKind.SOCIAL_BONDING: SocialBonding,
}


def effect_from_dict(data: dict) -> SpecialEffect:
    """Build an effect from {"kind": "boost_production", ...payload}."""
    payload = dict(data)
    kind = EffectKind[payload.pop("kind").upper()]
    return EFFECT_TYPES[kind](**payload)
