"""Scalar scores feeding the utility function.

All functions are pure and return values in [0, 1]; the engine multiplies
them by the agent's utility weights.
"""

import math

from ..schemas import EnergyState, UrgencyCurve, clamp


def need_urgency(value: float, high: float, need_max: float, curve: UrgencyCurve = UrgencyCurve.LINEAR) -> float:
    """Urgency of a need: 0 at or below ``high``, rising to 1 at ``need_max``."""
    if value <= high or need_max <= high:
        return 0.0
    ratio = clamp((value - high) / (need_max - high), 0.0, 1.0)
    if curve == UrgencyCurve.QUADRATIC:
        return ratio * ratio
    return ratio


def energy_deficit(energy: EnergyState, low_energy_pct: float) -> float:
    """How far energy sits below the low-energy percentage, scaled to [0, 1]."""
    percent = energy.fraction * 100.0
    if low_energy_pct <= 0 or percent >= low_energy_pct:
        return 0.0
    return clamp((low_energy_pct - percent) / low_energy_pct, 0.0, 1.0)


def distance_factor(distance: float, radius: float, penalty: float = 1.0) -> float:
    """1 for something at hand, falling linearly to 0 at ``radius``.

    ``penalty`` stretches the distance by the terrain cost multiplier;
    infinite penalty means unreachable.
    """
    if radius <= 0 or math.isinf(penalty):
        return 0.0
    return max(0.0, 1.0 - (distance * penalty) / radius)


def wealth_pressure(currency: float, comfortable_wealth: float) -> float:
    """1 when broke, 0 once ``comfortable_wealth`` is reached."""
    return 1.0 - clamp(currency / comfortable_wealth, 0.0, 1.0)


def skill_match(level: float, max_level: float) -> float:
    return clamp(level / max_level, 0.0, 1.0)
