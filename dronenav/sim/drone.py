from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence


@dataclass
class ActionCommand:
    strafe: float = 0.0  # -1..1, not clamped
    vertical: float = 0.0
    forward: float = 0.0
    yaw: float = 0.0

    @classmethod
    def from_array(cls, action: Sequence[float]) -> "ActionCommand":
        if len(action) != 4:
            raise ValueError(f"expected 4 action values, got {len(action)}")
        return cls(
            strafe=float(action[0]),
            vertical=float(action[1]),
            forward=float(action[2]),
            yaw=float(action[3]),
        )


@dataclass
class AgentState:
    position: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    velocity: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    yaw: float = 0.0  # radians about the vertical (y) axis
    yaw_rate: float = 0.0  # rad/s, smoothed

    def stop(self) -> None:
        self.velocity = [0.0, 0.0, 0.0]
        self.yaw_rate = 0.0

    def to_telemetry(self) -> Dict[str, object]:
        return {
            "pos": list(self.position),
            "vel": list(self.velocity),
            "yaw": self.yaw,
            "yaw_rate": self.yaw_rate,
        }
