"""
Player actions on the character sheet.

Every function takes a Character and returns a Character. Refused point
spending (nothing available, floor reached, max level) is not an error: the
same Character comes back unchanged. Structural mistakes (unknown class, not
an upgrade, locked tier) raise RuleError.
"""
from __future__ import annotations

import logging

from .abilities import EvolvesTo
from .contracts import Attribute, Character
from .kits import Registry, max_level_for
from .progression import (
    MAX_LEVEL,
    available_ability_points,
    available_attribute_points,
    total_xp_required,
)
from .rules import (
    ATTRIBUTE_FLOOR,
    ADVANCED_CLASS_LEVEL,
    BASE_CLASS,
    RuleError,
    get_class_unlock_level,
)

logger = logging.getLogger(__name__)


def change_attribute(character: Character, attribute: Attribute | str, delta: int) -> Character:
    attribute = Attribute(attribute)
    current = character.attributes.get(attribute, ATTRIBUTE_FLOOR)

    if delta > 0 and available_attribute_points(character) < delta:
        return character
    if delta < 0 and current + delta < ATTRIBUTE_FLOOR:
        return character
    if delta == 0:
        return character

    attrs = dict(character.attributes)
    attrs[attribute] = current + delta
    return character.evolve(attributes=attrs)


def change_ability_level(character: Character, registry: Registry, ability_name: str, delta: int) -> Character:
    current = character.abilities.get(ability_name, 0)
    max_level = max_level_for(registry, ability_name)

    if delta > 0:
        if available_ability_points(character) < delta:
            return character
        if current + delta > max_level:
            return character
    elif delta < 0:
        if current <= 0:
            return character
    else:
        return character

    abilities = dict(character.abilities)
    new_level = current + delta
    if new_level <= 0:
        abilities.pop(ability_name, None)
    else:
        abilities[ability_name] = new_level
    return character.evolve(abilities=abilities)


def install_ability_disk(character: Character, ability_name: str) -> Character:
    """Level 1 for free. Already-learned abilities are left alone."""
    ability_name = ability_name.strip()
    if not ability_name or character.abilities.get(ability_name):
        return character

    abilities = dict(character.abilities)
    abilities[ability_name] = 1
    logger.info("%s installed ability disk %s", character.name, ability_name)
    return character.evolve(
        abilities=abilities,
        history=(f"Installed Ability Disk: {ability_name}",) + character.history,
    )


def can_evolve(character: Character, registry: Registry, ability_id: str) -> bool:
    ability = registry.abilities.get(ability_id)
    if ability is None or not isinstance(ability.evolution, EvolvesTo):
        return False
    return (
        character.abilities.get(ability.name, 0) == ability.max_level
        and available_ability_points(character) > 0
    )


def evolve_ability(character: Character, registry: Registry, ability_id: str) -> Character:
    """Swap a maxed ability for its evolution at level 1."""
    if not can_evolve(character, registry, ability_id):
        return character

    old = registry.abilities[ability_id]
    new = registry.abilities[old.evolution.ability_id]

    abilities = dict(character.abilities)
    abilities.pop(old.name, None)
    abilities[new.name] = 1
    return character.evolve(abilities=abilities)


def select_class(character: Character, registry: Registry, class_name: str) -> Character:
    target = registry.get_class(class_name)
    current = registry.get_class(character.class_name)

    if target.name not in current.upgrades:
        raise RuleError(
            code="NOT_AN_UPGRADE",
            message=f"{current.name} cannot upgrade into {target.name}.",
            details={"from": current.name, "to": target.name},
        )

    required = get_class_unlock_level(current.name)
    if character.level < required:
        raise RuleError(
            code="CLASS_LOCKED",
            message=f"Next class upgrade available at Level {required}.",
            details={"required_level": required},
        )

    inventory = character.inventory
    if target.starting_item not in inventory:
        inventory = inventory + (target.starting_item,)

    logger.info("%s became %s", character.name, target.name)
    return character.evolve(class_name=target.name, inventory=inventory)


def adjust_level(character: Character, delta: int) -> Character:
    """
    Manual level override (admin/debug). Raising the level lifts XP to the
    new level's floor; dropping under the advanced-class level resets to Recruit.
    The result stays within 1..MAX_LEVEL.
    """
    new_level = min(MAX_LEVEL, max(1, character.level + delta))
    xp = character.xp
    class_name = character.class_name

    if delta > 0 and xp < total_xp_required(new_level):
        xp = total_xp_required(new_level)
    if new_level < ADVANCED_CLASS_LEVEL and class_name != BASE_CLASS:
        class_name = BASE_CLASS

    return character.evolve(level=new_level, xp=xp, class_name=class_name)
