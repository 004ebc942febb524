from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RewardConfig:
    discount_factor: float = 0.99
    success_reward: float = 1.0
    crash_penalty: float = -1.0
    ground_penalty: float = -1.0
    boundary_penalty: float = -1.0


@dataclass
class EnvConfig:
    dt: float = 0.02
    max_distance: float = 50.0
    max_episode_length: int = 1000
    success_radius: float = 2.0
    ground_hit_limit: int = 10
    use_easy_mode: bool = True
    use_random_rotation: bool = False
    use_spawn_scheduler: bool = False
    spawn_distance: float = 10.0
    spawn_lift: float = 2.0
    start_position: List[float] = field(default_factory=lambda: [0.0, 2.0, 0.0])
    start_yaw: float = 0.0
    target_position: List[float] = field(default_factory=lambda: [0.0, 0.5, 20.0])
    target_yaw: float = 0.0
    target_box_min: List[float] = field(default_factory=lambda: [-10.0, 0.5, 10.0])
    target_box_max: List[float] = field(default_factory=lambda: [10.0, 0.5, 30.0])
    seed: Optional[int] = 42
    obs_size: int = 8
    action_size: int = 4
