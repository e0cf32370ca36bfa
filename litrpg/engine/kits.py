from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from .abilities import Ability, CharacterClass, EvolvesTo
from .catalog import default_classes, default_loot, default_monsters, extra_abilities
from .contracts import Character, Monster
from .rules import RegistryError, UNKNOWN_ABILITY_MAX_LEVEL

logger = logging.getLogger(__name__)

MAX_LINEAGE_DEPTH = 8


@dataclass(frozen=True)
class Registry:
    classes: Mapping[str, CharacterClass]
    abilities: Mapping[str, Ability]      # by id
    monsters: Mapping[str, Monster]
    loot: tuple[str, ...]

    def get_class(self, name: str) -> CharacterClass:
        cls = self.classes.get(name)
        if cls is None:
            raise RegistryError(
                code="UNKNOWN_CLASS",
                message=f"Unknown class: {name}",
                details={"class_name": name},
            )
        return cls

    def ability_by_name(self, name: str) -> Ability | None:
        return next((a for a in self.abilities.values() if a.name == name), None)

    def with_monsters(self, monsters: Iterable[Monster]) -> "Registry":
        """Copy with extra monsters layered over the built-in ones."""
        merged = dict(self.monsters)
        merged.update({m.id: m for m in monsters})
        return Registry(
            classes=self.classes,
            abilities=self.abilities,
            monsters=MappingProxyType(merged),
            loot=self.loot,
        )


# =========================
# BUILDER
# =========================

def build_registry(
    classes: Iterable[CharacterClass] | None = None,
    abilities: Iterable[Ability] | None = None,
    monsters: Iterable[Monster] | None = None,
    loot: Iterable[str] | None = None,
) -> Registry:
    """
    Build the lookup tables once. Class abilities are collected automatically;
    `abilities` adds ones no class teaches (evolution targets).
    Raises RegistryError when the data does not hang together.
    """
    classes = tuple(default_classes() if classes is None else classes)
    abilities = tuple(extra_abilities() if abilities is None else abilities)
    monsters = tuple(default_monsters() if monsters is None else monsters)
    loot = tuple(default_loot() if loot is None else loot)

    class_map: dict[str, CharacterClass] = {}
    for cls in classes:
        if cls.name in class_map:
            raise RegistryError(code="DUPLICATE_CLASS", message=f"Duplicate class: {cls.name}")
        class_map[cls.name] = cls

    ability_map: dict[str, Ability] = {}
    for ab in [a for cls in classes for a in cls.abilities] + list(abilities):
        existing = ability_map.get(ab.id)
        if existing is not None and existing != ab:
            raise RegistryError(code="DUPLICATE_ABILITY", message=f"Duplicate ability id: {ab.id}")
        ability_map[ab.id] = ab

    for cls in classes:
        for target in cls.upgrades:
            if target not in class_map:
                raise RegistryError(
                    code="DANGLING_UPGRADE",
                    message=f"{cls.name} upgrades into unknown class {target}",
                    details={"class_name": cls.name, "upgrade": target},
                )

    for ab in ability_map.values():
        if isinstance(ab.evolution, EvolvesTo) and ab.evolution.ability_id not in ability_map:
            raise RegistryError(
                code="DANGLING_EVOLUTION",
                message=f"{ab.id} evolves into unknown ability {ab.evolution.ability_id}",
                details={"ability_id": ab.id},
            )

    registry = Registry(
        classes=MappingProxyType(class_map),
        abilities=MappingProxyType(ability_map),
        monsters=MappingProxyType({m.id: m for m in monsters}),
        loot=loot,
    )

    # every class must have a finite, acyclic lineage
    for name in class_map:
        class_lineage(registry, name)

    return registry


# =========================
# LINEAGE
# =========================

def find_parent(registry: Registry, class_name: str) -> CharacterClass | None:
    """Whoever lists `class_name` in its upgrades (first match in registry order)."""
    return next((c for c in registry.classes.values() if class_name in c.upgrades), None)


def class_lineage(registry: Registry, class_name: str) -> list[CharacterClass]:
    """
    Ancestor chain, root first (Recruit -> Scout -> Assassin).
    Bounded walk; a cycle or an over-deep chain is a data error.
    """
    lineage = [registry.get_class(class_name)]
    seen = {class_name}
    curr = class_name

    for _ in range(MAX_LINEAGE_DEPTH):
        parent = find_parent(registry, curr)
        if parent is None:
            return lineage
        if parent.name in seen:
            logger.error("class lineage cycle at %s -> %s", parent.name, curr)
            raise RegistryError(
                code="LINEAGE_CYCLE",
                message=f"Class lineage of {class_name} loops back to {parent.name}.",
                details={"class_name": class_name, "at": parent.name},
            )
        seen.add(parent.name)
        lineage.insert(0, parent)
        curr = parent.name

    raise RegistryError(
        code="LINEAGE_TOO_DEEP",
        message=f"Class lineage of {class_name} exceeds {MAX_LINEAGE_DEPTH} steps.",
        details={"class_name": class_name},
    )


# =========================
# WHAT A CHARACTER CAN SEE
# =========================

def _placeholder(name: str) -> Ability:
    return Ability(
        id=name,
        name=name,
        description="Unknown Ability",
        max_level=UNKNOWN_ABILITY_MAX_LEVEL,
    )


def get_kit_for(registry: Registry, character: Character) -> list[Ability]:
    """
    Abilities shown on the sheet: every lineage class's abilities (root first),
    then anything learned elsewhere (disks, evolutions, custom entries).
    """
    out: list[Ability] = []
    added: set[str] = set()

    for cls in class_lineage(registry, character.class_name):
        for ab in cls.abilities:
            if ab.name not in added:
                out.append(ab)
                added.add(ab.name)

    for learned in character.abilities:
        if learned in added:
            continue
        out.append(registry.ability_by_name(learned) or _placeholder(learned))
        added.add(learned)

    return out


def unlearned_abilities(registry: Registry, character: Character, search: str = "") -> list[Ability]:
    """Disk candidates: registry abilities not yet learned, filtered by name."""
    needle = search.lower()
    return [
        a for a in registry.abilities.values()
        if a.name not in character.abilities and needle in a.name.lower()
    ]


def max_level_for(registry: Registry, ability_name: str) -> int:
    ab = registry.ability_by_name(ability_name)
    return ab.max_level if ab else UNKNOWN_ABILITY_MAX_LEVEL
