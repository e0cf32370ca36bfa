from __future__ import annotations

import math
import re
from dataclasses import replace

from .abilities import Ability, AbilityTier
from .contracts import Attribute
from .progression import round_half_up

MEM_CDR_DIMINISHING_FACTOR = 200      # MEM at which cooldowns are halved
INT_DURATION_SCALING_FACTOR = 0.005   # +0.5% duration per INT point

NON_SCALING = ("Instant", "Passive", "Toggle")

_TIME_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*([smh])$", re.IGNORECASE)


def cooldown_reduction(mem: int) -> float:
    """MEM / (MEM + 200): 0 at zero MEM, approaches but never hits 100%."""
    if mem <= 0:
        return 0.0
    return mem / (mem + MEM_CDR_DIMINISHING_FACTOR)


def duration_extension(int_stat: int) -> float:
    return max(0, int_stat) * INT_DURATION_SCALING_FACTOR


def _format_time(value: float, unit: str) -> str:
    # one decimal, half-up; "30.0" is shown as "30"
    rounded = math.floor(value * 10 + 0.5) / 10
    text = f"{rounded:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text}{unit}"


def _scale(value: str | None, factor: float) -> str | None:
    if not value or value in NON_SCALING:
        return value
    match = _TIME_RE.match(value.strip())
    if not match:
        return value
    number = float(match.group(1))
    unit = match.group(2).lower()
    return _format_time(number * factor, unit)


def apply_cooldown_reduction(cooldown: str | None, mem: int) -> str | None:
    """
    "30s" with MEM 200 -> "15s". Keeps the unit; sentinels and anything
    without a leading number come back untouched.
    """
    if cooldown_reduction(mem) == 0:
        return cooldown
    return _scale(cooldown, 1 - cooldown_reduction(mem))


def apply_duration_extension(duration: str | None, int_stat: int) -> str | None:
    if duration_extension(int_stat) == 0:
        return duration
    return _scale(duration, 1 + duration_extension(int_stat))


def effective_tier(ability: Ability, level: int, attributes: dict) -> AbilityTier | None:
    """The tier at `level`, with MEM/INT already applied to its timings."""
    tier = ability.tier(level)
    if tier is None:
        return None
    mem = attributes.get(Attribute.MEM, 0)
    int_stat = attributes.get(Attribute.INT, 0)
    return replace(
        tier,
        cooldown=apply_cooldown_reduction(tier.cooldown, mem),
        duration=apply_duration_extension(tier.duration, int_stat),
    )


def to_percent(fraction: float) -> float:
    """0.0025 -> 0.3 (one decimal, half-up like every other rounding here)."""
    return round_half_up(fraction * 1000) / 10


def calc_modifiers(attributes: dict) -> dict:
    """Percentages for the sheet header."""
    return {
        "cooldown_reduction_pct": to_percent(cooldown_reduction(attributes.get(Attribute.MEM, 0))),
        "duration_extension_pct": to_percent(duration_extension(attributes.get(Attribute.INT, 0))),
    }
