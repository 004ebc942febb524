from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Optional

import numpy as np

from ..sim.physics import PhysicsConfig
from .config import EnvConfig, RewardConfig
from .env import DroneEnv
from .policy import PolicyModel, PolicyParams
from .rewards import SuccessCounter

logger = logging.getLogger(__name__)


@dataclass
class RLStatus:
    running: bool = False
    iterations: int = 0
    episodes: int = 0
    last_reward: float = 0.0
    best_reward: float = -1e9
    success_count: int = 0
    terminal_reasons: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "running": self.running,
            "iterations": self.iterations,
            "episodes": self.episodes,
            "last_reward": self.last_reward,
            "best_reward": self.best_reward,
            "success_count": self.success_count,
            "terminal_reasons": dict(self.terminal_reasons),
        }


class RLTrainer:
    """Random-search trainer driving a single :class:`DroneEnv`.

    Each iteration scores ``population`` perturbations of the current policy
    for one episode each and keeps the best one. The trainer owns the success
    metric shared by every episode it runs.
    """

    def __init__(
        self,
        cfg: Optional[EnvConfig] = None,
        physics: Optional[PhysicsConfig] = None,
        rewards: Optional[RewardConfig] = None,
        population: int = 10,
        sigma: float = 0.15,
        seed: int = 123,
    ) -> None:
        self._successes = SuccessCounter()
        self._env = DroneEnv(
            cfg=cfg or EnvConfig(), physics=physics, rewards=rewards, success_counter=self._successes
        )
        self._policy = PolicyModel(self._env.config.obs_size, self._env.config.action_size)
        self._population = population
        self._sigma = sigma
        self._status = RLStatus()
        self._reasons: Counter = Counter()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._rng = np.random.default_rng(seed)

    @property
    def policy(self) -> PolicyModel:
        return self._policy

    @property
    def env(self) -> DroneEnv:
        return self._env

    @property
    def successes(self) -> SuccessCounter:
        return self._successes

    @property
    def status(self) -> RLStatus:
        return self._status

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._status.running = True
        self._thread = threading.Thread(target=self._train_loop, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                return
        self._status.running = False

    def _train_loop(self) -> None:
        while not self._stop_event.is_set():
            self.train_iteration()
            time.sleep(0.01)
        self._status.running = False

    def train_iteration(self) -> float:
        best_reward = -1e9
        best_params: Optional[PolicyParams] = None

        base_params = self._policy.get_params()
        for _ in range(self._population):
            params = base_params.perturbed(self._rng, self._sigma)
            reward = self.evaluate(params)
            if reward > best_reward:
                best_reward = reward
                best_params = params

        if best_params is not None:
            self._policy.set_params(best_params)
            if best_reward > self._status.best_reward:
                self._status.best_reward = best_reward

        self._status.last_reward = best_reward
        self._status.iterations += 1
        self._status.success_count = self._successes.value
        self._status.terminal_reasons = dict(self._reasons)
        logger.info(
            "iteration %d: best return %.3f, successes %d",
            self._status.iterations,
            best_reward,
            self._successes.value,
        )
        return best_reward

    def evaluate(self, params: PolicyParams) -> float:
        """Run one episode with *params* and return the episode's return.

        The env's own step limit ends every episode. The return is read
        from the episode controller, so a crash scores ``crash_penalty``
        alone rather than the shaping already paid out plus the penalty.
        """
        obs = self._env.reset()
        while True:
            action = PolicyModel.act_with_params(obs, params)
            step = self._env.step(action)
            obs = step.obs
            if step.done:
                self._reasons[step.reason.value] += 1
                break
        self._status.episodes += 1
        return self._env.episode.episode_reward
