from .config import EnvConfig, RewardConfig
from .env import DroneEnv, StepResult, build_observation
from .episode import EpisodeController, TerminalReason
from .gym_env import DroneGymEnv
from .policy import PolicyModel, PolicyParams
from .rewards import RewardShaper, SuccessCounter, potential
from .settings import ConfigUpdate
from .spawn import SpawnScheduler
from .trainer import RLStatus, RLTrainer

__all__ = [
    "EnvConfig",
    "RewardConfig",
    "DroneEnv",
    "StepResult",
    "build_observation",
    "EpisodeController",
    "TerminalReason",
    "DroneGymEnv",
    "PolicyModel",
    "PolicyParams",
    "RewardShaper",
    "SuccessCounter",
    "potential",
    "ConfigUpdate",
    "SpawnScheduler",
    "RLStatus",
    "RLTrainer",
]
