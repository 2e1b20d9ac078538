"""Physics system for the chase platformer.

Gravity integration and axis-aligned bounding box (AABB) collision
resolution against static platforms. Everything here is a plain function
of a body and a platform list: no hidden state, no allocation beyond the
body itself.

Coordinates are screen-style (y grows downward), velocities are px per
nominal frame and ``dt`` is the frame clock's delta-time multiplier.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING

from pymunk import Vec2d

from .config import PhysicsConfig

if TYPE_CHECKING:
    from .entities import Platform


@dataclass
class DynamicBody:
    """Position, velocity and grounding state of a moving actor.

    grounded_platform is an index into the platform list the body was last
    resolved against, not a reference: it never keeps a platform alive and
    must be looked up through grounded_on().
    """
    x: float
    y: float
    width: float
    height: float
    velocity_x: float = 0.0
    velocity_y: float = 0.0
    is_grounded: bool = False
    grounded_platform: Optional[int] = None

    @property
    def center(self) -> Vec2d:
        return Vec2d(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def grounded_on(self, platforms: Sequence["Platform"]) -> Optional["Platform"]:
        """Platform this body stands on, if the handle is still live."""
        index = self.grounded_platform
        if not self.is_grounded or index is None or not 0 <= index < len(platforms):
            return None
        platform = platforms[index]
        if not platform.alive:
            return None
        return platform


def overlaps(a, b) -> bool:
    """Strict AABB intersection. Touching edges do not overlap."""
    return (
        a.x < b.x + b.width
        and a.x + a.width > b.x
        and a.y < b.y + b.height
        and a.y + a.height > b.y
    )


def check_overlap(a, b) -> bool:
    """Pickup/catch test between any two boxes with x, y, width, height."""
    return overlaps(a, b)


def apply_gravity(body: DynamicBody, physics: PhysicsConfig, dt: float) -> None:
    """Accelerate downward, clamp to terminal velocity and integrate y."""
    body.velocity_y += physics.gravity * dt
    if body.velocity_y > physics.max_fall_speed:
        body.velocity_y = physics.max_fall_speed
    body.y += body.velocity_y * dt


def move_horizontal(body: DynamicBody, dt: float, world_width: float) -> None:
    """Integrate x and keep the body inside [0, world_width - width]."""
    body.x += body.velocity_x * dt
    body.x = max(0.0, min(body.x, world_width - body.width))


def resolve_collisions(body: DynamicBody, platforms: Sequence["Platform"]) -> None:
    """Push the body out of every platform it overlaps.

    For each overlapping platform the side with the smallest penetration
    is chosen as the separation axis. Ties keep the first minimum in the
    order left, right, top, bottom. Landing on top requires a falling or
    resting body; a head bump requires a rising one.

    Platforms are resolved one at a time in list order, so a later
    platform may override an earlier resolution.
    """
    body.is_grounded = False
    body.grounded_platform = None

    for index, plat in enumerate(platforms):
        if not overlaps(body, plat):
            continue

        penetration = (
            ("left", (body.x + body.width) - plat.x),
            ("right", (plat.x + plat.width) - body.x),
            ("top", (body.y + body.height) - plat.y),
            ("bottom", (plat.y + plat.height) - body.y),
        )
        # min() keeps the first of equal values
        side, _ = min(penetration, key=lambda p: p[1])

        if side == "top":
            if body.velocity_y >= 0:
                # Landing
                body.y = plat.y - body.height
                body.velocity_y = 0.0
                body.is_grounded = True
                body.grounded_platform = index
        elif side == "bottom":
            if body.velocity_y < 0:
                # Head bump
                body.y = plat.y + plat.height
                body.velocity_y = 0.0
        elif side == "left":
            body.x = plat.x - body.width
            body.velocity_x = 0.0
        else:
            body.x = plat.x + plat.width
            body.velocity_x = 0.0
