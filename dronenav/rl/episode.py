"""Episode lifecycle.

Two entry points drive the state machine:

* :meth:`EpisodeController.tick` runs once per fixed tick. It adds the PBRS
  term and checks success, boundary and timeout in that order.
* :meth:`EpisodeController.resolve_contact` is called by the collision system
  between ticks for every contact that begins (target, ground, obstacle).

A terminated episode stays terminated until :meth:`reset`.
"""
from __future__ import annotations

import enum
import logging
from typing import Optional, Sequence

from ..sim.frames import distance
from ..sim.world import ContactTag
from .config import EnvConfig, RewardConfig
from .rewards import RewardShaper, SuccessCounter

logger = logging.getLogger(__name__)


class TerminalReason(str, enum.Enum):
    SUCCESS = "success"
    CRASH = "crash"
    GROUND_OUT = "ground_out"
    BOUNDARY = "boundary"
    TIMEOUT = "timeout"


class EpisodeController:
    def __init__(
        self,
        env_cfg: EnvConfig,
        reward_cfg: RewardConfig,
        success_counter: Optional[SuccessCounter] = None,
    ) -> None:
        self.env_cfg = env_cfg
        self.shaper = RewardShaper(reward_cfg)
        self.success_counter = success_counter if success_counter is not None else SuccessCounter()
        self.step_count = 0
        self.ground_hit_count = 0
        self.episode_reward = 0.0
        self.pending_reward = 0.0
        self.terminal_reason: Optional[TerminalReason] = None

    @property
    def reward_cfg(self) -> RewardConfig:
        return self.shaper.cfg

    @reward_cfg.setter
    def reward_cfg(self, cfg: RewardConfig) -> None:
        self.shaper.cfg = cfg

    @property
    def last_potential(self) -> float:
        return self.shaper.last_potential

    @property
    def done(self) -> bool:
        return self.terminal_reason is not None

    def reset(self, initial_potential: float) -> None:
        self.step_count = 0
        self.ground_hit_count = 0
        self.episode_reward = 0.0
        self.pending_reward = 0.0
        self.terminal_reason = None
        self.shaper.reset(initial_potential)

    # -- rewards -----------------------------------------------------------

    def add_reward(self, value: float) -> None:
        self.pending_reward += value
        self.episode_reward += value

    def set_reward(self, value: float) -> None:
        """Replace everything accrued this episode with *value*."""
        self.pending_reward = value
        self.episode_reward = value

    def collect_reward(self) -> float:
        reward = self.pending_reward
        self.pending_reward = 0.0
        return reward

    # -- transitions -------------------------------------------------------

    def tick(
        self,
        position: Sequence[float],
        target: Optional[Sequence[float]],
        current_potential: float,
    ) -> Optional[TerminalReason]:
        if self.done:
            return self.terminal_reason

        self.step_count += 1
        self.add_reward(self.shaper.shape(current_potential))

        if target is not None:
            dist = distance(position, target)
            if dist < self.env_cfg.success_radius:
                return self._register_success("proximity")
            if dist > self.env_cfg.max_distance:
                self.add_reward(self.reward_cfg.boundary_penalty)
                return self._end(TerminalReason.BOUNDARY)
        if self.step_count >= self.env_cfg.max_episode_length:
            return self._end(TerminalReason.TIMEOUT)
        return None

    def resolve_contact(self, tag: ContactTag) -> Optional[TerminalReason]:
        if self.done:
            return self.terminal_reason

        if tag is ContactTag.TARGET:
            return self._register_success("collision")
        if tag is ContactTag.GROUND:
            self.ground_hit_count += 1
            if self.ground_hit_count >= self.env_cfg.ground_hit_limit:
                self.add_reward(self.reward_cfg.ground_penalty)
                return self._end(TerminalReason.GROUND_OUT)
            return None
        if tag is ContactTag.OBSTACLE:
            self.set_reward(self.reward_cfg.crash_penalty)
            return self._end(TerminalReason.CRASH)
        return None

    def _register_success(self, method: str) -> TerminalReason:
        total = self.success_counter.increment()
        self.add_reward(self.reward_cfg.success_reward)
        logger.info("SUCCESS (%s)! Total: %d", method, total)
        return self._end(TerminalReason.SUCCESS)

    def _end(self, reason: TerminalReason) -> TerminalReason:
        self.terminal_reason = reason
        logger.debug(
            "episode ended: %s after %d steps, return %.4f",
            reason.value,
            self.step_count,
            self.episode_reward,
        )
        return reason
