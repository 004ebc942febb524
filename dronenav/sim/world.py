from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .drone import AgentState
from .frames import distance


class ContactTag(str, enum.Enum):
    TARGET = "target"
    GROUND = "ground"
    OBSTACLE = "obstacle"


@dataclass
class SphereObstacle:
    center: List[float]
    radius: float


@dataclass
class Target:
    position: List[float] = field(default_factory=lambda: [0.0, 0.5, 20.0])
    yaw: float = 0.0
    radius: float = 0.5


@dataclass
class WorldState:
    ground_height: float = 0.0
    drone_radius: float = 0.3
    target: Optional[Target] = field(default_factory=Target)
    obstacles: List[SphereObstacle] = field(default_factory=list)

    def clamp_to_ground(self, state: AgentState) -> bool:
        floor = self.ground_height + self.drone_radius
        if state.position[1] > floor:
            return False
        state.position[1] = floor
        if state.velocity[1] < 0.0:
            state.velocity[1] = 0.0
        return True

    def check_obstacles(self, pos: List[float]) -> bool:
        for obstacle in self.obstacles:
            reach = obstacle.radius + self.drone_radius
            dx = pos[0] - obstacle.center[0]
            dy = pos[1] - obstacle.center[1]
            dz = pos[2] - obstacle.center[2]
            if (dx * dx + dy * dy + dz * dz) <= reach * reach:
                return True
        return False

    def touches_target(self, pos: List[float]) -> bool:
        if self.target is None:
            return False
        return distance(pos, self.target.position) <= self.target.radius + self.drone_radius

    def contacts(self, state: AgentState) -> Set[ContactTag]:
        """Tags currently in contact with the vehicle. Resolves ground penetration."""
        touching: Set[ContactTag] = set()
        if self.clamp_to_ground(state):
            touching.add(ContactTag.GROUND)
        if self.check_obstacles(state.position):
            touching.add(ContactTag.OBSTACLE)
        if self.touches_target(state.position):
            touching.add(ContactTag.TARGET)
        return touching
