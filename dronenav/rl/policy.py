from __future__ import annotations

import threading
from dataclasses import dataclass

import numpy as np

from ..sim.drone import ActionCommand


@dataclass
class PolicyParams:
    weights: np.ndarray  # (action_size, obs_size)
    bias: np.ndarray  # (action_size,)

    def perturbed(self, rng: np.random.Generator, sigma: float) -> "PolicyParams":
        noise_w = rng.normal(0.0, sigma, size=self.weights.shape).astype(np.float32)
        noise_b = rng.normal(0.0, sigma, size=self.bias.shape).astype(np.float32)
        return PolicyParams(weights=self.weights + noise_w, bias=self.bias + noise_b)


class PolicyModel:
    """Linear layer squashed by tanh: one output per action channel in [-1, 1]."""

    def __init__(self, obs_size: int, action_size: int, seed: int = 7) -> None:
        rng = np.random.default_rng(seed)
        self._params = PolicyParams(
            weights=rng.normal(0.0, 0.2, size=(action_size, obs_size)).astype(np.float32),
            bias=np.zeros((action_size,), dtype=np.float32),
        )
        self._lock = threading.Lock()

    def get_params(self) -> PolicyParams:
        with self._lock:
            return PolicyParams(self._params.weights.copy(), self._params.bias.copy())

    def set_params(self, params: PolicyParams) -> None:
        with self._lock:
            self._params = PolicyParams(params.weights.copy(), params.bias.copy())

    def act(self, obs: np.ndarray) -> np.ndarray:
        with self._lock:
            return self.act_with_params(obs, self._params)

    def command(self, obs: np.ndarray) -> ActionCommand:
        return ActionCommand.from_array(self.act(obs))

    @staticmethod
    def act_with_params(obs: np.ndarray, params: PolicyParams) -> np.ndarray:
        return np.tanh(params.weights @ obs + params.bias)
