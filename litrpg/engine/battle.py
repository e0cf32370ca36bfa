from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from .contracts import (
    BattleLogEntry,
    Character,
    LevelUp,
    LootSelection,
    MonsterSelection,
)
from .kits import Registry
from .progression import grant_xp, round_half_up
from .rules import RuleError, validate_counter, validate_party_size

logger = logging.getLogger(__name__)

# =========================
# CONFIG
# =========================

MODE_COMBAT = "combat"
MODE_REWARD = "reward"

# (upper bound on monster level - character level, multiplier); first match wins
DISPARITY_TABLE = (
    (-11, 0.0),
    (-6, 0.5),
    (-1, 0.8),
    (4, 1.0),
    (9, 1.2),
    (14, 1.5),
)
DISPARITY_CEILING = 2.0

PRIMARY_WEIGHT = 1.0
SECONDARY_WEIGHT = 0.6

DEFAULT_CUSTOM_DESCRIPTION = "Custom Reward"


# =========================
# MULTIPLIERS
# =========================

def level_disparity_multiplier(monster_level: int, character_level: int) -> float:
    diff = monster_level - character_level
    for upper, mult in DISPARITY_TABLE:
        if diff <= upper:
            return mult
    return DISPARITY_CEILING


def class_bonus_multiplier(character: Character, registry: Registry) -> float:
    """1 + primary/100 + 0.6 * secondary/100, attributes picked by current class."""
    cls = registry.get_class(character.class_name)
    primary = character.attr(cls.primary_attribute)
    secondary = character.attr(cls.secondary_attribute)
    return 1 + PRIMARY_WEIGHT * primary / 100 + SECONDARY_WEIGHT * secondary / 100


# =========================
# LOOT
# =========================

def expand_loot(selections: Iterable[LootSelection], catalog: Optional[Sequence[str]] = None) -> tuple[tuple[str, ...], str]:
    """
    Returns (flat list for the inventory, "Item (x2), Other (x1)" summary).
    Blank items, unknown items (when a catalog is given) and zero quantities are dropped.
    """
    known = set(catalog) if catalog is not None else None
    flat: list[str] = []
    parts: list[str] = []

    for sel in selections:
        item = (sel.item or "").strip()
        if not item or sel.quantity < 1:
            continue
        if known is not None and item not in known:
            logger.debug("skipping unknown loot item %r", item)
            continue
        flat.extend([item] * sel.quantity)
        parts.append(f"{item} (x{sel.quantity})")

    return tuple(flat), ", ".join(parts)


def _new_entry(xp, credits, description, loot, chapter_ref, now=None) -> BattleLogEntry:
    validate_counter("xp", xp)
    validate_counter("credits", credits)
    flat, summary = loot
    ts = int((now if now is not None else time.time()) * 1000)
    return BattleLogEntry(
        id=ts,
        xp=xp,
        credits=credits,
        description=description,
        loot=flat,
        loot_summary=summary,
        timestamp=ts,
        chapter_ref=(chapter_ref or "").strip(),
    )


# =========================
# CALCULATORS
# =========================

def calculate_combat(
    character: Character,
    registry: Registry,
    selections: Iterable[Optional[MonsterSelection]],
    party_size: int = 1,
    loot: Iterable[LootSelection] = (),
    chapter_ref: str = "",
    now: float | None = None,
) -> BattleLogEntry | None:
    """
    XP/credits for a set of monster groups. Unknown monster ids are skipped;
    if nothing resolves there is nothing to log and None comes back.
    """
    validate_party_size(party_size)

    total_xp = 0.0
    total_credits = 0
    parts: list[str] = []

    for sel in selections:
        if not sel or sel.quantity < 1:
            continue
        monster = registry.monsters.get(sel.monster_id)
        if monster is None:
            logger.debug("skipping unknown monster %r", sel.monster_id)
            continue

        mult = level_disparity_multiplier(monster.level, character.level)
        total_xp += monster.xp_reward * sel.quantity * mult
        total_credits += monster.credits * sel.quantity
        parts.append(f"{sel.quantity}x {monster.name}")

    if not parts:
        return None

    split_xp = total_xp / party_size
    split_credits = total_credits // party_size

    final_xp = round_half_up(split_xp * class_bonus_multiplier(character, registry))

    return _new_entry(
        final_xp,
        split_credits,
        f"Defeated: {', '.join(parts)}",
        expand_loot(loot, registry.loot),
        chapter_ref,
        now,
    )


def calculate_custom_reward(
    registry: Registry,
    xp: int,
    credits: int,
    party_size: int = 1,
    description: str = "",
    loot: Iterable[LootSelection] = (),
    chapter_ref: str = "",
    now: float | None = None,
) -> BattleLogEntry:
    # manual rewards are split by party but never get the class bonus
    validate_party_size(party_size)
    if xp < 0 or credits < 0:
        raise RuleError(
            code="NEGATIVE_REWARD",
            message="Rewards cannot be negative.",
            details={"xp": xp, "credits": credits},
        )

    return _new_entry(
        xp // party_size,
        credits // party_size,
        description.strip() or DEFAULT_CUSTOM_DESCRIPTION,
        expand_loot(loot, registry.loot),
        chapter_ref,
        now,
    )


# =========================
# APPLY
# =========================

def compose_history_line(entry: BattleLogEntry) -> str:
    prefix = f"[{entry.chapter_ref}] " if entry.chapter_ref else ""
    label = "Battle" if entry.description.startswith("Defeated") else "Event"

    line = f"{label}: {prefix}{entry.description}. Rewards: {entry.xp} XP, {entry.credits} Credits."
    if entry.loot_summary:
        line += f" Loot: {entry.loot_summary}."
    return line


def apply_reward(character: Character, entry: BattleLogEntry) -> tuple[Character, LevelUp]:
    """XP (with level-ups), credits, history and loot in one new Character."""
    validate_counter("credits", character.credits + entry.credits)
    leveled, level_up = grant_xp(character, entry.xp)
    updated = leveled.evolve(
        credits=character.credits + entry.credits,
        history=(compose_history_line(entry),) + character.history,
        inventory=character.inventory + tuple(entry.loot),
    )
    return updated, level_up


def apply_entry(
    character: Character,
    pending: Sequence[BattleLogEntry],
    entry_id: int,
) -> tuple[Character, list[BattleLogEntry], LevelUp]:
    """
    Apply one queued result and drop it from the queue. Either everything
    comes back updated or RuleError is raised and nothing changed.
    """
    entry = next((e for e in pending if e.id == entry_id), None)
    if entry is None:
        raise RuleError(
            code="NO_SUCH_ENTRY",
            message="That result is no longer pending.",
            details={"entry_id": entry_id},
        )

    updated, level_up = apply_reward(character, entry)
    remaining = [e for e in pending if e.id != entry_id]

    logger.info("%s: %s", character.name, compose_history_line(entry))
    return updated, remaining, level_up


def queue_entry(pending: Sequence[BattleLogEntry], entry: BattleLogEntry, limit: int | None = None) -> list[BattleLogEntry]:
    """
    Newest first. Entry ids stay unique even when two land in the same millisecond.
    Nothing is ever pushed out: a full queue refuses the new entry.
    """
    if limit is not None and len(pending) >= limit:
        raise RuleError(
            code="BATTLE_LOG_FULL",
            message=f"Pending results are capped at {limit}. Apply or discard some first.",
            details={"limit": limit},
        )

    taken = {e.id for e in pending}
    new_id = entry.id
    while new_id in taken:
        new_id += 1
    if new_id != entry.id:
        entry = replace(entry, id=new_id)

    return [entry, *pending]
