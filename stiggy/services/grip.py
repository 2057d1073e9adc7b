"""Tire compound reference data.

Grip coefficients are dimensionless multipliers relative to a neutral
compound (1.0). They scale every frequency and downforce formula in the
calculators. Keys are stored uppercase; lookups are case-insensitive.
"""

from types import MappingProxyType
from typing import Mapping

from stiggy.core.enums import TireCompound

# Unknown compounds resolve to this instead of raising
NEUTRAL_GRIP = 1.0

GRIP_BY_COMPOUND: Mapping[str, float] = MappingProxyType(
    {
        TireCompound.COMFORT_HARD.value: 0.82,
        TireCompound.COMFORT_MEDIUM.value: 0.90,
        TireCompound.COMFORT_SOFT.value: 0.99,
        TireCompound.SPORTS_HARD.value: 1.05,
        TireCompound.SPORTS_MEDIUM.value: 1.09,
        TireCompound.SPORTS_SOFT.value: 1.16,
        TireCompound.RACING_HARD.value: 1.25,
        TireCompound.RACING_MEDIUM.value: 1.29,
        TireCompound.RACING_SOFT.value: 1.33,
    }
)

TIRE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        TireCompound.COMFORT_HARD.value: "Comfort Hard",
        TireCompound.COMFORT_MEDIUM.value: "Comfort Medium",
        TireCompound.COMFORT_SOFT.value: "Comfort Soft",
        TireCompound.SPORTS_HARD.value: "Sports Hard",
        TireCompound.SPORTS_MEDIUM.value: "Sports Medium",
        TireCompound.SPORTS_SOFT.value: "Sports Soft",
        TireCompound.RACING_HARD.value: "Racing Hard",
        TireCompound.RACING_MEDIUM.value: "Racing Medium",
        TireCompound.RACING_SOFT.value: "Racing Soft",
    }
)


def resolve_grip(tire: str) -> float:
    """Grip coefficient for a compound code; unknown codes give NEUTRAL_GRIP."""
    return GRIP_BY_COMPOUND.get(tire.upper(), NEUTRAL_GRIP)


def tire_display_name(tire: str) -> str:
    """Human-readable compound label, falling back to the uppercased code."""
    code = tire.upper()
    return TIRE_NAMES.get(code, code)
