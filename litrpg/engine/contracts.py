from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Any


class Attribute(str, Enum):
    STR = "STR"
    PER = "PER"
    DEX = "DEX"
    MEM = "MEM"
    INT = "INT"
    CHA = "CHA"


MONSTER_RANKS = ("Trash", "Regular", "Champion", "Boss")


def base_attributes(value: int = 3) -> Dict[Attribute, int]:
    return {attr: value for attr in Attribute}


@dataclass(frozen=True)
class Character:
    name: str
    level: int = 1
    xp: int = 0
    credits: int = 0
    class_name: str = "Recruit"
    attributes: Dict[Attribute, int] = field(default_factory=base_attributes)
    abilities: Dict[str, int] = field(default_factory=dict)  # ability name -> level
    inventory: tuple[str, ...] = ()
    history: tuple[str, ...] = ()  # newest first
    header_image_url: str | None = None

    def attr(self, attribute: Attribute | str) -> int:
        return self.attributes.get(Attribute(attribute), 0)

    def evolve(self, **changes) -> "Character":
        """New character with the given fields swapped out. Never mutates self."""
        return replace(self, **changes)


def default_character(name: str = "Operative-7") -> Character:
    return Character(
        name=name,
        header_image_url="./images/banner.webp",
        inventory=("Standard Issue Kinetic Pistol",),
        history=("Initialized in the Nexus.",),
    )


@dataclass(frozen=True)
class Monster:
    id: str
    name: str
    level: int
    rank: str
    xp_reward: int
    credits: int
    description: str = ""
    stats: Dict[Attribute, int] = field(default_factory=dict)
    abilities: tuple[str, ...] = ()


# =========================
# TRANSIENT CALCULATOR STATE
# =========================

@dataclass(frozen=True)
class MonsterSelection:
    monster_id: str
    quantity: int = 1


@dataclass(frozen=True)
class LootSelection:
    item: str
    quantity: int = 1


@dataclass(frozen=True)
class BattleLogEntry:
    id: int
    xp: int
    credits: int
    description: str
    loot: tuple[str, ...] = ()  # flattened, one entry per item
    loot_summary: str = ""
    timestamp: int = 0
    chapter_ref: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "xp": self.xp,
            "credits": self.credits,
            "description": self.description,
            "loot": list(self.loot),
            "loot_summary": self.loot_summary,
            "timestamp": self.timestamp,
            "chapter_ref": self.chapter_ref,
        }


@dataclass(frozen=True)
class LevelUp:
    old_level: int
    new_level: int
    attribute_points: int = 0
    ability_points: int = 0
    unlocks: tuple[str, ...] = ()

    @property
    def leveled(self) -> bool:
        return self.new_level > self.old_level
