from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from .contracts import Attribute


# =========================
# EVOLUTION (tagged variant)
# =========================

@dataclass(frozen=True)
class NoEvolution:
    def __bool__(self):
        return False


@dataclass(frozen=True)
class EvolvesTo:
    ability_id: str


Evolution = Union[NoEvolution, EvolvesTo]

NO_EVOLUTION = NoEvolution()


# =========================
# ABILITY TYPES
# =========================

@dataclass(frozen=True)
class AbilityTier:
    level: int
    effect_description: str
    cooldown: Optional[str] = None
    duration: Optional[str] = None


@dataclass(frozen=True)
class Ability:
    id: str
    name: str
    description: str
    max_level: int
    tiers: tuple[AbilityTier, ...] = ()
    evolution: Evolution = NO_EVOLUTION

    def tier(self, level: int) -> AbilityTier | None:
        return next((t for t in self.tiers if t.level == level), None)


@dataclass(frozen=True)
class CharacterClass:
    name: str
    description: str
    starting_item: str
    primary_attribute: Attribute
    secondary_attribute: Attribute
    abilities: tuple[Ability, ...] = ()
    upgrades: tuple[str, ...] = field(default_factory=tuple)


def generate_linear_tiers(max_level: int, base_val: float, step: float, unit: str, kind: str) -> tuple[AbilityTier, ...]:
    """
    Evenly spaced tiers, every tier on a 30s cooldown with an instant duration.
    kind is "Damage", "Heal" or "Effect".
    """
    tiers = []
    for i in range(1, max_level + 1):
        val = base_val + step * (i - 1)
        # 10.0 -> 10, 1.2 stays 1.2
        shown = int(val) if float(val).is_integer() else round(val, 2)
        tiers.append(AbilityTier(
            level=i,
            effect_description=f"{kind}: {shown}{unit}",
            cooldown="30s",
            duration="Instant",
        ))
    return tuple(tiers)
