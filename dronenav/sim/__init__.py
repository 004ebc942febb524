from .core import SimCore
from .drone import ActionCommand, AgentState
from .physics import ForceOutput, PhysicsConfig, apply_movement, integrate
from .world import ContactTag, SphereObstacle, Target, WorldState

__all__ = [
    "SimCore",
    "ActionCommand",
    "AgentState",
    "ForceOutput",
    "PhysicsConfig",
    "apply_movement",
    "integrate",
    "ContactTag",
    "SphereObstacle",
    "Target",
    "WorldState",
]
