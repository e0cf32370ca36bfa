from __future__ import annotations

import re

from .contracts import Character
from .kits import Registry, class_lineage
from .progression import total_xp_required


def status_filename(character: Character) -> str:
    slug = re.sub(r"\s+", "_", character.name)
    return f"{slug}_Status.md"


def render_status_sheet(character: Character, registry: Registry) -> str:
    """
    Plain-text status block for pasting into a chapter:
    [Status], [Attributes], then [Abilities] grouped by lineage class,
    with disk/evolved/custom abilities under "General / Advanced".
    """
    next_xp = total_xp_required(character.level + 1)

    lines = [
        "[Status]",
        f"Name: {character.name}",
        f"Level: {character.level}",
        f"Combat Path: {character.class_name}",
        "Professional Path: None",
        f"Experience Points Total/Needed for next level: {character.xp:,} / {next_xp:,}",
        f"Credits: {character.credits:,}",
        "",
        "[Attributes]",
    ]
    for attr, val in character.attributes.items():
        lines.append(f"{attr.value}: {val}")

    lines += ["", "[Abilities]"]

    printed: set[str] = set()
    for cls in class_lineage(registry, character.class_name):
        learned = [a for a in cls.abilities if character.abilities.get(a.name) and a.name not in printed]
        if not learned:
            continue
        lines += ["", f"-- {cls.name} --"]
        for ab in learned:
            lines += [f"{ab.name} (Lvl {character.abilities[ab.name]})", ab.description, ""]
            printed.add(ab.name)

    leftovers = [name for name in character.abilities if name not in printed and character.abilities[name]]
    if leftovers:
        lines += ["", "-- General / Advanced --"]
        for name in leftovers:
            known = registry.ability_by_name(name)
            desc = known.description if known else "Custom/Unknown Ability"
            lines += [f"{name} (Lvl {character.abilities[name]})", desc, ""]

    return "\n".join(lines) + "\n"
