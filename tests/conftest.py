"""
Shared pytest fixtures.

Engine fixtures need no database; API tests pull in `api_client`
(which implies django_db through pytest-django's `db` fixture).
"""

import pytest

from litrpg.engine import build_registry, default_character
from litrpg.engine.contracts import Attribute, Character, Monster, base_attributes


@pytest.fixture(scope="session")
def registry():
    """The built-in class tree, bestiary and loot."""
    return build_registry()


@pytest.fixture
def character() -> Character:
    return default_character()


@pytest.fixture
def make_character():
    """
    Build a Character with a few overrides.

    attrs takes {"PER": 10}-style keys; anything not given stays at 3.
    """
    def _make(level=1, xp=0, class_name="Recruit", attrs=None, abilities=None, **kwargs):
        attributes = base_attributes()
        for k, v in (attrs or {}).items():
            attributes[Attribute(k)] = v
        return Character(
            name=kwargs.pop("name", "Tester"),
            level=level,
            xp=xp,
            class_name=class_name,
            attributes=attributes,
            abilities=dict(abilities or {}),
            **kwargs,
        )
    return _make


@pytest.fixture
def training_dummy() -> Monster:
    return Monster(id="dummy", name="Training Dummy", level=15, rank="Regular", xp_reward=100, credits=50)


@pytest.fixture
def api_client(db):
    from rest_framework.test import APIClient
    return APIClient()
