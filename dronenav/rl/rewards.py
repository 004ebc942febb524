"""Potential-based reward shaping (PBRS) for the target-reaching task.

The shaping term for a transition ``s -> s'`` is::

    F(s, s') = gamma * phi(s') - phi(s)

Over any trajectory without terminal bonuses the discounted sum of the
shaping terms telescopes to ``gamma**N * phi(s_N) - phi(s_0)``; it depends
only on the end points, so the optimal policy of the underlying task is
unchanged. With ``gamma == 1`` the plain sum is ``phi(s_N) - phi(s_0)``.

The potential decays exponentially with normalized distance::

    phi = exp(-2 * d / max_distance)

which is 1.0 at the target, ~0.37 at half ``max_distance`` and ~0.135 at
``max_distance``.
"""
from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Optional, Sequence

from ..sim.frames import distance
from .config import RewardConfig

_EPS = 1e-6

__all__ = ["potential", "RewardShaper", "SuccessCounter"]


def potential(
    position: Sequence[float], target: Optional[Sequence[float]], max_distance: float
) -> float:
    """Return phi in (0, 1] for a drone at *position*; 0.0 when there is no target."""
    if target is None:
        return 0.0
    normalized = max(0.0, distance(position, target) / max(max_distance, _EPS))
    # exp underflows to 0.0 far past max_distance; keep phi strictly positive.
    return max(math.exp(-2.0 * normalized), sys.float_info.min)


@dataclass
class SuccessCounter:
    """Process-wide success metric. Monotonic; only grows on success."""

    value: int = 0

    def increment(self) -> int:
        self.value += 1
        return self.value


class RewardShaper:
    def __init__(self, cfg: Optional[RewardConfig] = None) -> None:
        self.cfg = cfg or RewardConfig()
        self._last_potential = 0.0

    @property
    def last_potential(self) -> float:
        return self._last_potential

    def reset(self, initial_potential: float) -> None:
        self._last_potential = initial_potential

    def shape(self, current_potential: float) -> float:
        reward = self.cfg.discount_factor * current_potential - self._last_potential
        self._last_potential = current_potential
        return reward
