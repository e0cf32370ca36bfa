# litrpg/engine/rules.py

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class RuleError(Exception):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self):
        return self.message


@dataclass
class RegistryError(RuleError):
    """Static class/ability data is inconsistent (dangling ref, lineage cycle...)."""


@dataclass
class SaveFileError(RuleError):
    """An imported save document could not be used."""


# ============================================================
# EASY TO CHANGE STUFF (keep it here)
# ============================================================

ATTRIBUTE_FLOOR = 3           # every attribute starts (and bottoms out) here
BASE_CLASS = "Recruit"

ADVANCED_CLASS_LEVEL = 10     # Recruit -> tier 2
COMBAT_UPGRADE_LEVEL = 32     # tier 2 -> tier 3

UNKNOWN_ABILITY_MAX_LEVEL = 10

# largest XP/credit counter a sheet or save may carry (JavaScript's Number.MAX_SAFE_INTEGER)
MAX_SAFE_INTEGER = 2 ** 53 - 1


def get_class_unlock_level(current_class: str) -> int:
    """
    Level needed before the current class may upgrade.
    Recruit opens at 10, everything after that at 32.
    """
    if current_class == BASE_CLASS:
        return ADVANCED_CLASS_LEVEL
    return COMBAT_UPGRADE_LEVEL


# ============================================================
# VALIDATION
# ============================================================

def validate_party_size(party_size: int) -> None:
    if party_size is None or int(party_size) < 1:
        raise RuleError(
            code="INVALID_PARTY_SIZE",
            message="Party size must be at least 1.",
            details={"party_size": party_size},
        )


def validate_xp_grant(amount: int) -> None:
    if amount < 0:
        raise RuleError(
            code="NEGATIVE_XP",
            message="Experience can only be granted, never taken away.",
            details={"amount": amount},
        )


def validate_counter(name: str, value: int) -> None:
    if value > MAX_SAFE_INTEGER:
        raise RuleError(
            code="VALUE_TOO_LARGE",
            message=f"{name} is capped at {MAX_SAFE_INTEGER}.",
            details={name: value},
        )
