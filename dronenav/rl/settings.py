from __future__ import annotations

from dataclasses import fields, replace
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from ..sim.physics import PhysicsConfig
from .config import EnvConfig, RewardConfig


class ConfigUpdate(BaseModel):
    """Settings a driver may change before or between episodes.

    Unset fields keep their current value. Out-of-range values are rejected
    with ``pydantic.ValidationError``.
    """

    # PhysicsConfig
    force_multiplier: Optional[float] = Field(default=None, gt=0.0)
    yaw_speed: Optional[float] = None
    yaw_response: Optional[float] = Field(default=None, ge=0.0)
    reverse_efficiency: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    strafe_efficiency: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    hover_height: Optional[float] = None
    ceiling_height: Optional[float] = None
    hover_spring: Optional[float] = Field(default=None, ge=0.0)
    hover_damp: Optional[float] = Field(default=None, ge=0.0)
    use_auto_hover: Optional[bool] = None

    # RewardConfig
    discount_factor: Optional[float] = Field(default=None, gt=0.0, le=1.0)
    success_reward: Optional[float] = None
    crash_penalty: Optional[float] = None
    ground_penalty: Optional[float] = None
    boundary_penalty: Optional[float] = None

    # EnvConfig
    max_distance: Optional[float] = Field(default=None, gt=0.0)
    max_episode_length: Optional[int] = Field(default=None, ge=1)
    use_easy_mode: Optional[bool] = None
    use_random_rotation: Optional[bool] = None
    use_spawn_scheduler: Optional[bool] = None
    spawn_distance: Optional[float] = Field(default=None, ge=0.0)
    target_position: Optional[List[float]] = Field(default=None, min_length=3, max_length=3)

    @model_validator(mode="after")
    def _check_hover_band(self) -> "ConfigUpdate":
        if self.hover_height is not None and self.ceiling_height is not None:
            _check_band(self.hover_height, self.ceiling_height)
        return self

    def apply(
        self, env: EnvConfig, physics: PhysicsConfig, rewards: RewardConfig
    ) -> Tuple[EnvConfig, PhysicsConfig, RewardConfig]:
        """Merge onto the current configs. Raises ``ValueError`` if the hover band inverts."""
        values = self.model_dump(exclude_none=True)
        new_physics = replace(physics, **_pick(values, PhysicsConfig))
        _check_band(new_physics.hover_height, new_physics.ceiling_height)
        return (
            replace(env, **_pick(values, EnvConfig)),
            new_physics,
            replace(rewards, **_pick(values, RewardConfig)),
        )


def _check_band(hover_height: float, ceiling_height: float) -> None:
    if hover_height > ceiling_height:
        raise ValueError(
            f"hover_height ({hover_height}) must not exceed ceiling_height ({ceiling_height})"
        )


def _pick(values: dict, cls) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in values.items() if k in names}
