from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List

from .drone import ActionCommand, AgentState
from .frames import UP, forward_axis, right_axis, wrap_angle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhysicsConfig:
    force_multiplier: float = 50.0
    yaw_speed: float = 3.0  # rad/s at full yaw input
    yaw_response: float = 5.0
    reverse_efficiency: float = 1.0  # 0..1
    strafe_efficiency: float = 1.0  # 0..1
    hover_height: float = 2.0
    ceiling_height: float = 500.0
    hover_spring: float = 20.0
    hover_damp: float = 5.0
    use_auto_hover: bool = True
    gravity: float = 9.81


@dataclass
class ForceOutput:
    # Acceleration (m/s^2), independent of mass.
    acceleration: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    hover_correction: float = 0.0


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def apply_movement(
    state: AgentState, action: ActionCommand, cfg: PhysicsConfig, dt: float
) -> ForceOutput:
    """Turn one action into the body acceleration for this tick.

    Sets ``state.yaw_rate`` directly. The returned acceleration is handed to
    the integrator; position and velocity are left untouched here.
    """
    strafe = action.strafe * cfg.strafe_efficiency
    forward = action.forward
    if forward < 0:
        forward = forward * cfg.reverse_efficiency

    target_yaw_rate = action.yaw * cfg.yaw_speed
    state.yaw_rate = _lerp(state.yaw_rate, target_yaw_rate, _clamp01(cfg.yaw_response * dt))

    fwd = forward_axis(state.yaw)
    right = right_axis(state.yaw)
    thrust = [
        (fwd[i] * forward + right[i] * strafe + UP[i] * action.vertical) * cfg.force_multiplier
        for i in range(3)
    ]
    magnitude = math.sqrt(sum(c * c for c in thrust))
    if magnitude <= 0.01 and (abs(action.forward) > 0.1 or abs(action.vertical) > 0.1):
        logger.warning(
            "Thrust is zero despite inputs (forward=%.2f, vertical=%.2f); check force_multiplier",
            action.forward,
            action.vertical,
        )

    out = ForceOutput(acceleration=thrust)
    if cfg.use_auto_hover:
        out.hover_correction = hover_correction(state, cfg)
        out.acceleration[1] += out.hover_correction
    return out


def hover_correction(state: AgentState, cfg: PhysicsConfig) -> float:
    height = state.position[1]
    damping = state.velocity[1] * cfg.hover_damp
    if height < cfg.hover_height:
        # PD around gravity compensation
        return cfg.gravity + (cfg.hover_height - height) * cfg.hover_spring - damping
    if height > cfg.ceiling_height:
        return -(height - cfg.ceiling_height) * cfg.hover_spring - damping
    return 0.0


def integrate(state: AgentState, force: ForceOutput, cfg: PhysicsConfig, dt: float) -> None:
    """Semi-implicit Euler step: velocity first, then position and yaw."""
    ax, ay, az = force.acceleration
    ay -= cfg.gravity

    state.velocity[0] += ax * dt
    state.velocity[1] += ay * dt
    state.velocity[2] += az * dt

    state.position[0] += state.velocity[0] * dt
    state.position[1] += state.velocity[1] * dt
    state.position[2] += state.velocity[2] * dt

    state.yaw = wrap_angle(state.yaw + state.yaw_rate * dt)
