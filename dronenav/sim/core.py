from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Set

from .drone import ActionCommand, AgentState
from .physics import ForceOutput, PhysicsConfig, apply_movement, integrate
from .world import ContactTag, WorldState

# Deterministic dispatch order when several contacts begin on the same tick.
_CONTACT_ORDER = (ContactTag.TARGET, ContactTag.OBSTACLE, ContactTag.GROUND)


@dataclass
class SimCore:
    world: WorldState = field(default_factory=WorldState)
    drone: AgentState = field(default_factory=AgentState)
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    command: ActionCommand = field(default_factory=ActionCommand)
    time_s: float = 0.0
    last_force: ForceOutput = field(default_factory=ForceOutput)
    _touching: Set[ContactTag] = field(default_factory=set, repr=False)

    def reset(self) -> None:
        self.drone.stop()
        self.command = ActionCommand()
        self.time_s = 0.0
        self.last_force = ForceOutput()
        self._touching = set()

    def step(self, dt: float) -> List[ContactTag]:
        """Advance one tick and return the contacts that began during it."""
        self.last_force = apply_movement(self.drone, self.command, self.physics, dt)
        integrate(self.drone, self.last_force, self.physics, dt)
        touching = self.world.contacts(self.drone)
        started = [tag for tag in _CONTACT_ORDER if tag in touching and tag not in self._touching]
        self._touching = touching
        self.time_s += dt
        return started
