"""
JSON save documents.

Layout (camelCase keys, same as the browser tool writes):

{
  "version": "1.0",
  "timestamp": 1718000000000,
  "character": {"name", "headerImageUrl", "level", "xp", "credits",
                "className", "attributes", "abilities", "inventory", "history"},
  "quests": [...],          # carried through untouched
  "monsters": [...]         # optional
}

load_save() either returns a fully built SaveData or raises SaveFileError;
callers swap their character only after it returns.
"""
from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .contracts import Attribute, Character, Monster, MONSTER_RANKS
from .progression import MAX_LEVEL
from .rules import ATTRIBUTE_FLOOR, MAX_SAFE_INTEGER, SaveFileError

logger = logging.getLogger(__name__)

SAVE_VERSION = "1.0"

INVALID_FORMAT = "Invalid save file format."
PARSE_FAILED = "Failed to parse save file."


@dataclass(frozen=True)
class SaveData:
    character: Character
    version: str = SAVE_VERSION
    timestamp: int = 0
    quests: tuple = ()
    monsters: Optional[tuple[Monster, ...]] = None


# =========================
# EXPORT
# =========================

def character_to_dict(c: Character) -> Dict[str, Any]:
    out = {
        "name": c.name,
        "level": c.level,
        "xp": c.xp,
        "credits": c.credits,
        "className": c.class_name,
        "attributes": {Attribute(k).value: v for k, v in c.attributes.items()},
        "abilities": dict(c.abilities),
        "inventory": list(c.inventory),
        "history": list(c.history),
    }
    if c.header_image_url is not None:
        out["headerImageUrl"] = c.header_image_url
    return out


def monster_to_dict(m: Monster) -> Dict[str, Any]:
    return {
        "id": m.id,
        "name": m.name,
        "description": m.description,
        "level": m.level,
        "rank": m.rank,
        "xpReward": m.xp_reward,
        "credits": m.credits,
        "stats": {Attribute(k).value: v for k, v in m.stats.items()},
        "abilities": list(m.abilities),
    }


def export_save(
    character: Character,
    quests: List[Any] | tuple = (),
    monsters: Optional[List[Monster]] = None,
    version: str = SAVE_VERSION,
    now: float | None = None,
) -> Dict[str, Any]:
    doc = {
        "version": version,
        "timestamp": int((now if now is not None else time.time()) * 1000),
        "character": character_to_dict(character),
        "quests": list(quests),
    }
    if monsters is not None:
        doc["monsters"] = [monster_to_dict(m) for m in monsters]
    return doc


def dump_save(character: Character, **kwargs) -> str:
    return json.dumps(export_save(character, **kwargs), indent=2)


# =========================
# IMPORT
# =========================

def _bad(reason: str, **details) -> SaveFileError:
    return SaveFileError(code="INVALID_SAVE", message=INVALID_FORMAT, details={"reason": reason, **details})


def _int(d: dict, key: str, minimum: int, default: int | None = None, maximum: int | None = None) -> int:
    v = d.get(key, default)
    if isinstance(v, bool) or not isinstance(v, int) or v < minimum:
        raise _bad(f"'{key}' must be an integer >= {minimum}")
    if maximum is not None and v > maximum:
        raise _bad(f"'{key}' must be at most {maximum}")
    return v


def _str_list(d: dict, key: str) -> tuple[str, ...]:
    v = d.get(key, [])
    if not isinstance(v, list) or not all(isinstance(x, str) for x in v):
        raise _bad(f"'{key}' must be a list of strings")
    return tuple(v)


def _int_map(raw: Any, key: str) -> dict:
    if not isinstance(raw, dict):
        raise _bad(f"'{key}' must be an object")
    for k, v in raw.items():
        if isinstance(v, bool) or not isinstance(v, int):
            raise _bad(f"'{key}.{k}' must be an integer")
    return raw


def _attributes(raw: Any) -> Dict[Attribute, int]:
    raw = _int_map(raw, "attributes")
    out = {}
    for attr in Attribute:
        out[attr] = raw.get(attr.value, ATTRIBUTE_FLOOR)
    unknown = set(raw) - {a.value for a in Attribute}
    if unknown:
        raise _bad("unknown attributes", attributes=sorted(unknown))
    return out


def character_from_dict(d: Any, known_classes=None) -> Character:
    if not isinstance(d, dict):
        raise _bad("'character' must be an object")

    name = d.get("name")
    class_name = d.get("className")
    if not isinstance(name, str) or not name.strip():
        raise _bad("'name' is required")
    if not isinstance(class_name, str):
        raise _bad("'className' is required")
    if known_classes is not None and class_name not in known_classes:
        raise _bad("unknown class", className=class_name)

    header = d.get("headerImageUrl")
    if header is not None and not isinstance(header, str):
        raise _bad("'headerImageUrl' must be a string")

    return Character(
        name=name,
        level=_int(d, "level", 1, maximum=MAX_LEVEL),
        xp=_int(d, "xp", 0, maximum=MAX_SAFE_INTEGER),
        credits=_int(d, "credits", 0, default=0, maximum=MAX_SAFE_INTEGER),
        class_name=class_name,
        attributes=_attributes(d.get("attributes", {})),
        abilities=dict(_int_map(d.get("abilities", {}), "abilities")),
        inventory=_str_list(d, "inventory"),
        history=_str_list(d, "history"),
        header_image_url=header,
    )


def monster_from_dict(d: Any) -> Monster:
    if not isinstance(d, dict) or not isinstance(d.get("id"), str) or not isinstance(d.get("name"), str):
        raise _bad("monster entries need an id and a name")
    if d.get("rank") not in MONSTER_RANKS:
        raise _bad("unknown monster rank", rank=d.get("rank"))
    stats = _int_map(d.get("stats", {}), "stats")
    return Monster(
        id=d["id"],
        name=d["name"],
        description=d.get("description", ""),
        level=_int(d, "level", 1, maximum=MAX_LEVEL),
        rank=d["rank"],
        xp_reward=_int(d, "xpReward", 0, maximum=MAX_SAFE_INTEGER),
        credits=_int(d, "credits", 0, maximum=MAX_SAFE_INTEGER),
        stats={Attribute(k): v for k, v in stats.items() if k in Attribute.__members__},
        abilities=_str_list(d, "abilities"),
    )


def load_save(raw: str | bytes | Dict[str, Any], known_classes=None) -> SaveData:
    """Parse and validate a save document. Raises SaveFileError, never returns half a save."""
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            doc = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as e:
            logger.warning("save file did not parse: %s", e)
            raise SaveFileError(code="UNPARSEABLE_SAVE", message=PARSE_FAILED, details={"error": str(e)}) from e
    else:
        doc = raw

    if not isinstance(doc, dict) or not doc.get("character"):
        raise _bad("missing 'character'")

    character = character_from_dict(doc["character"], known_classes=known_classes)

    quests = doc.get("quests") or []
    if not isinstance(quests, list):
        raise _bad("'quests' must be a list")

    monsters = None
    if doc.get("monsters") is not None:
        if not isinstance(doc["monsters"], list):
            raise _bad("'monsters' must be a list")
        monsters = tuple(monster_from_dict(m) for m in doc["monsters"])

    timestamp = doc.get("timestamp", 0)
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise _bad("'timestamp' must be a number")

    return SaveData(
        character=character,
        version=str(doc.get("version", SAVE_VERSION)),
        timestamp=int(timestamp),
        quests=tuple(quests),
        monsters=monsters,
    )


def save_filename(character: Character) -> str:
    slug = re.sub(r"\s+", "_", character.name)
    return f"{slug}_SaveData.json"
