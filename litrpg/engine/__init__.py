"""
Pure progression rules for the character sheet. No Django in here.
"""
from .contracts import Attribute, Character, Monster, default_character
from .kits import Registry, build_registry, class_lineage
from .rules import RuleError, RegistryError, SaveFileError

__all__ = [
    "Attribute",
    "Character",
    "Monster",
    "Registry",
    "RuleError",
    "RegistryError",
    "SaveFileError",
    "build_registry",
    "class_lineage",
    "default_character",
]
