from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Union

import numpy as np

from ..sim.core import SimCore
from ..sim.drone import ActionCommand, AgentState
from ..sim.frames import distance, world_to_local
from ..sim.physics import PhysicsConfig
from ..sim.world import ContactTag, Target, WorldState
from .config import EnvConfig, RewardConfig
from .episode import EpisodeController, TerminalReason
from .rewards import SuccessCounter, potential
from .settings import ConfigUpdate
from .spawn import SpawnScheduler

logger = logging.getLogger(__name__)

_EPS = 1e-6


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def build_observation(
    state: AgentState,
    target: Optional[Sequence[float]],
    max_distance: float,
    force_multiplier: float,
) -> np.ndarray:
    max_distance = max(max_distance, _EPS)
    max_speed = max(force_multiplier * 0.2, _EPS)

    direction = [0.0, 0.0, 0.0]
    dist_obs = 0.0
    if target is not None:
        delta = [target[i] - state.position[i] for i in range(3)]
        dist = distance(state.position, target)
        if dist > 0.0:
            direction = world_to_local(state.yaw, [c / dist for c in delta])
        dist_obs = _clamp01(dist / max_distance)

    local_vel = world_to_local(state.yaw, state.velocity)
    obs = [
        direction[0],
        direction[1],
        direction[2],
        dist_obs,
        local_vel[0] / max_speed,
        local_vel[1] / max_speed,
        local_vel[2] / max_speed,
        state.position[1] / max_distance,
    ]
    return np.array(obs, dtype=np.float32)


@dataclass
class StepResult:
    obs: np.ndarray
    reward: float
    done: bool
    reason: Optional[TerminalReason] = None
    info: Dict[str, object] = field(default_factory=dict)


class DroneEnv:
    def __init__(
        self,
        cfg: Optional[EnvConfig] = None,
        physics: Optional[PhysicsConfig] = None,
        rewards: Optional[RewardConfig] = None,
        world: Optional[WorldState] = None,
        success_counter: Optional[SuccessCounter] = None,
    ) -> None:
        self._cfg = cfg or EnvConfig()
        self._sim = SimCore()
        self._sim.physics = physics or PhysicsConfig()
        self._sim.world = world or WorldState(
            target=Target(position=list(self._cfg.target_position), yaw=self._cfg.target_yaw)
        )
        self._rng = np.random.default_rng(self._cfg.seed)
        self._spawner = SpawnScheduler(self._rng)
        self._episode = EpisodeController(self._cfg, rewards or RewardConfig(), success_counter)
        self._last_spawn: Optional[int] = None

    # -- accessors ---------------------------------------------------------

    @property
    def config(self) -> EnvConfig:
        return self._cfg

    @property
    def physics(self) -> PhysicsConfig:
        return self._sim.physics

    @property
    def rewards(self) -> RewardConfig:
        return self._episode.reward_cfg

    @property
    def state(self) -> AgentState:
        return self._sim.drone

    @property
    def world(self) -> WorldState:
        return self._sim.world

    @property
    def episode(self) -> EpisodeController:
        return self._episode

    @property
    def spawner(self) -> SpawnScheduler:
        return self._spawner

    @property
    def success_count(self) -> int:
        return self._episode.success_counter.value

    # -- configuration -----------------------------------------------------

    def configure(self, update: ConfigUpdate) -> None:
        """Apply validated settings; they take effect from the next tick."""
        cfg, physics, rewards = update.apply(self._cfg, self._sim.physics, self._episode.reward_cfg)
        self._cfg = cfg
        self._sim.physics = physics
        self._episode.env_cfg = cfg
        self._episode.reward_cfg = rewards
        if update.target_position is not None and self._sim.world.target is not None:
            self._sim.world.target.position = list(cfg.target_position)

    # -- episode -----------------------------------------------------------

    def reset(self, seed: Optional[int] = None) -> np.ndarray:
        if seed is not None:
            self._rng = np.random.default_rng(seed)
            self._spawner.rng = self._rng
        self._sim.reset()
        self._last_spawn = self._spawner.place(self._cfg, self._sim.drone, self._sim.world)
        self._episode.reset(self._potential())
        return self._observe()

    def step(self, action: Union[ActionCommand, Sequence[float]]) -> StepResult:
        if self._episode.done:
            logger.warning("step() called on a terminated episode; call reset() first")
            return self._result()

        self._sim.command = action if isinstance(action, ActionCommand) else ActionCommand.from_array(action)
        contacts = self._sim.step(self._cfg.dt)

        target = self._target_position()
        self._episode.tick(self._sim.drone.position, target, self._potential())
        for tag in contacts:
            self._episode.resolve_contact(tag)
        return self._result()

    def resolve_contact(self, tag: ContactTag) -> StepResult:
        """Entry point for an external collision system, between ticks."""
        self._episode.resolve_contact(tag)
        return self._result()

    # -- helpers -----------------------------------------------------------

    def _target_position(self) -> Optional[Sequence[float]]:
        target = self._sim.world.target
        return target.position if target is not None else None

    def _potential(self) -> float:
        return potential(self._sim.drone.position, self._target_position(), self._cfg.max_distance)

    def _observe(self) -> np.ndarray:
        return build_observation(
            self._sim.drone,
            self._target_position(),
            self._cfg.max_distance,
            self._sim.physics.force_multiplier,
        )

    def _result(self) -> StepResult:
        target = self._target_position()
        dist = distance(self._sim.drone.position, target) if target is not None else None
        info = {
            "distance": dist,
            "step_count": self._episode.step_count,
            "ground_hits": self._episode.ground_hit_count,
            "episode_reward": self._episode.episode_reward,
            "potential": self._episode.last_potential,
            "success_count": self.success_count,
            "spawn_index": self._last_spawn,
            "state": self._sim.drone.to_telemetry(),
        }
        return StepResult(
            obs=self._observe(),
            reward=self._episode.collect_reward(),
            done=self._episode.done,
            reason=self._episode.terminal_reason,
            info=info,
        )
