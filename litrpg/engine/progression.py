from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache

from .contracts import Character, LevelUp
from .rules import ATTRIBUTE_FLOOR, validate_counter, validate_xp_grant

logger = logging.getLogger(__name__)

# =========================
# CONFIG
# =========================

XP_BASE = 200
XP_MULTIPLIER = 1.15
MAX_LEVEL = 200  # XP floor of the next level still fits MAX_SAFE_INTEGER

# level -> (attribute points, ability point bonus, unlock label)
MILESTONES = {
    10: (5, 4, "Advanced Class Selection"),
    16: (5, 5, "Profession Class Selection"),
    32: (10, 5, "Combat Class Upgrade"),
}
REGULAR_ATTRIBUTE_POINTS = 2
LATE_ATTRIBUTE_POINTS = 4      # every level after the combat upgrade
LATE_GAME_FROM = 33


def round_half_up(value: float) -> int:
    """0.5 always rounds up (Python's round() would go to even)."""
    return int(math.floor(value + 0.5))


# =========================
# XP CURVE
# =========================

def xp_for_level_step(level: int) -> int:
    """XP needed to go from `level` to `level + 1`."""
    if level < 1:
        return 0
    return round_half_up(XP_BASE * XP_MULTIPLIER ** (level - 1))


@lru_cache(maxsize=None)
def total_xp_required(level: int) -> int:
    """Total accumulated XP at which a character reaches `level`."""
    return sum(xp_for_level_step(lv) for lv in range(1, level))


def level_for_xp(xp: int, start_level: int = 1) -> int:
    level = max(1, start_level)
    while level < MAX_LEVEL and xp >= total_xp_required(level + 1):
        level += 1
    return level


def xp_progress(character: Character) -> dict:
    floor = total_xp_required(character.level)
    ceiling = total_xp_required(character.level + 1)
    span = ceiling - floor
    percent = 0.0 if span <= 0 else (character.xp - floor) / span * 100
    return {
        "current_level_xp": floor,
        "next_level_xp": ceiling,
        "xp_into_level": character.xp - floor,
        "percent": min(100.0, max(0.0, percent)),
    }


# =========================
# POINT BUDGETS
# =========================

@dataclass(frozen=True)
class LevelRewards:
    attribute_points: int
    ability_points: int
    unlocks: tuple[str, ...] = ()


@dataclass(frozen=True)
class PointBudget:
    attribute_points: int
    ability_points: int


def level_rewards(level: int) -> LevelRewards:
    """What reaching exactly `level` grants."""
    if level <= 1:
        return LevelRewards(0, 0)

    unlocks: tuple[str, ...] = ()
    abil = 1 if level % 2 != 0 else 0

    if level in MILESTONES:
        attr, bonus, label = MILESTONES[level]
        abil += bonus
        unlocks = (label,)
    elif level >= LATE_GAME_FROM:
        attr = LATE_ATTRIBUTE_POINTS
    else:
        attr = REGULAR_ATTRIBUTE_POINTS

    return LevelRewards(attribute_points=attr, ability_points=abil, unlocks=unlocks)


@lru_cache(maxsize=None)
def cumulative_points(level: int) -> PointBudget:
    """Everything earned from level 1 through `level`, summed from level_rewards."""
    rewards = [level_rewards(lv) for lv in range(1, level + 1)]
    return PointBudget(
        attribute_points=sum(r.attribute_points for r in rewards),
        ability_points=sum(r.ability_points for r in rewards),
    )


def spent_attribute_points(character: Character) -> int:
    # the 3-per-attribute floor is free, only what sits above it counts
    return sum(character.attributes.values()) - ATTRIBUTE_FLOOR * len(character.attributes)


def spent_ability_points(character: Character) -> int:
    return sum(character.abilities.values())


def available_attribute_points(character: Character) -> int:
    budget = cumulative_points(character.level).attribute_points
    return max(0, budget - spent_attribute_points(character))


def available_ability_points(character: Character) -> int:
    budget = cumulative_points(character.level).ability_points
    return max(0, budget - spent_ability_points(character))


# =========================
# LEVEL-UP
# =========================

def resolve_level_ups(level: int, xp: int) -> LevelUp:
    """
    Walk the level up one step at a time while the XP total covers the next
    threshold, collecting every intermediate level's rewards (oldest first).
    """
    new_level = level_for_xp(xp, start_level=level)

    attr = 0
    abil = 0
    unlocks: list[str] = []
    for lv in range(level + 1, new_level + 1):
        r = level_rewards(lv)
        attr += r.attribute_points
        abil += r.ability_points
        unlocks.extend(r.unlocks)

    return LevelUp(
        old_level=level,
        new_level=new_level,
        attribute_points=attr,
        ability_points=abil,
        unlocks=tuple(unlocks),
    )


def grant_xp(character: Character, amount: int) -> tuple[Character, LevelUp]:
    validate_xp_grant(amount)

    new_xp = character.xp + amount
    validate_counter("xp", new_xp)
    level_up = resolve_level_ups(character.level, new_xp)
    if level_up.leveled:
        logger.info(
            "%s leveled %d -> %d (+%d attr, +%d abil)",
            character.name, level_up.old_level, level_up.new_level,
            level_up.attribute_points, level_up.ability_points,
        )

    return character.evolve(xp=new_xp, level=level_up.new_level), level_up
