from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ..sim.drone import AgentState
from ..sim.frames import UP, forward_axis, right_axis
from ..sim.world import WorldState
from .config import EnvConfig

# Offsets relative to the target's own frame, in schedule order.
SPAWN_SLOTS = ("behind", "front", "left", "right")


class SpawnScheduler:
    """Places the vehicle (and optionally the target) at episode start.

    With ``use_spawn_scheduler`` the vehicle cycles behind, front, left and
    right of the target so every approach angle is trained equally often.
    Otherwise it returns to the start pose and the target may be relocated.
    """

    def __init__(self, rng: np.random.Generator) -> None:
        self.rng = rng
        self.spawn_index = 0

    def place(self, cfg: EnvConfig, state: AgentState, world: WorldState) -> Optional[int]:
        """Position *state* (and maybe the target). Returns the slot used, if any."""
        if cfg.use_spawn_scheduler and world.target is not None:
            return self._place_scheduled(cfg, state, world)
        self._place_random(cfg, state, world)
        return None

    def _place_scheduled(self, cfg: EnvConfig, state: AgentState, world: WorldState) -> int:
        target = world.target
        fwd = forward_axis(target.yaw)
        right = right_axis(target.yaw)
        index = self.spawn_index
        if index == 0:
            direction = [-c for c in fwd]
        elif index == 1:
            direction = fwd
        elif index == 2:
            direction = [-c for c in right]
        else:
            direction = right

        state.position = [
            target.position[i] + direction[i] * cfg.spawn_distance + UP[i] * cfg.spawn_lift
            for i in range(3)
        ]
        state.yaw = cfg.start_yaw
        self.spawn_index = (index + 1) % len(SPAWN_SLOTS)
        return index

    def _place_random(self, cfg: EnvConfig, state: AgentState, world: WorldState) -> None:
        state.position = list(cfg.start_position)
        if cfg.use_random_rotation:
            state.yaw = math.radians(float(self.rng.uniform(0.0, 360.0)))
        else:
            state.yaw = 0.0

        if world.target is None or cfg.use_easy_mode:
            return
        offset = [float(self.rng.uniform(lo, hi)) for lo, hi in zip(cfg.target_box_min, cfg.target_box_max)]
        world.target.position = [cfg.start_position[i] + offset[i] for i in range(3)]
