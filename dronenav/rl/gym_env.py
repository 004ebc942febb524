"""Gymnasium adapter around :class:`DroneEnv`.

Exposes the v26+ ``reset``/``step`` signatures so the environment can be fed
straight to Gymnasium-compatible trainers. ``truncated`` is only set when the
episode hits its step limit; every other terminal reason is a termination.
Actions are passed through unclipped.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from ..sim.physics import PhysicsConfig
from .config import EnvConfig, RewardConfig
from .env import DroneEnv
from .episode import TerminalReason
from .rewards import SuccessCounter


class DroneGymEnv(gym.Env):
    metadata = {"render_modes": []}

    def __init__(
        self,
        cfg: Optional[EnvConfig] = None,
        physics: Optional[PhysicsConfig] = None,
        rewards: Optional[RewardConfig] = None,
        success_counter: Optional[SuccessCounter] = None,
    ) -> None:
        super().__init__()
        self.env = DroneEnv(cfg=cfg, physics=physics, rewards=rewards, success_counter=success_counter)
        obs_size = self.env.config.obs_size
        act_size = self.env.config.action_size
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(obs_size,), dtype=np.float32
        )
        self.action_space = spaces.Box(
            low=-np.ones(act_size, dtype=np.float32),
            high=np.ones(act_size, dtype=np.float32),
            dtype=np.float32,
        )

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        super().reset(seed=seed)
        obs = self.env.reset(seed=seed)
        info = {
            "spawn_index": self.env.spawner.spawn_index,
            "potential": self.env.episode.last_potential,
        }
        return obs, info

    def step(self, action: np.ndarray) -> Tuple[np.ndarray, float, bool, bool, Dict[str, Any]]:
        result = self.env.step(np.asarray(action, dtype=np.float64))
        truncated = result.reason is TerminalReason.TIMEOUT
        terminated = result.done and not truncated
        info = dict(result.info)
        info["reason"] = result.reason.value if result.reason is not None else None
        return result.obs, float(result.reward), terminated, truncated, info
