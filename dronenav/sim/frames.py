"""Yaw-only body frame helpers.

World axes: X right, Y up, Z forward. A yaw of ``psi`` rotates the body
clockwise when seen from above, so at ``psi = 0`` the body forward axis is +Z
and the body right axis is +X.
"""
from __future__ import annotations

import math
from typing import List, Sequence

UP: List[float] = [0.0, 1.0, 0.0]


def forward_axis(yaw: float) -> List[float]:
    return [math.sin(yaw), 0.0, math.cos(yaw)]


def right_axis(yaw: float) -> List[float]:
    return [math.cos(yaw), 0.0, -math.sin(yaw)]


def world_to_local(yaw: float, vec: Sequence[float]) -> List[float]:
    """Express a world-space direction in the body frame (right, up, forward)."""
    cos_yaw = math.cos(yaw)
    sin_yaw = math.sin(yaw)
    x_body = cos_yaw * vec[0] - sin_yaw * vec[2]
    z_body = sin_yaw * vec[0] + cos_yaw * vec[2]
    return [x_body, float(vec[1]), z_body]


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    dz = a[2] - b[2]
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def wrap_angle(angle: float) -> float:
    return (angle + math.pi) % (2.0 * math.pi) - math.pi
