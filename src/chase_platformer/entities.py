"""Game entities: platforms, collectibles, bonus object and the player.

Entities own numeric state only. Visual output goes through a RenderProxy
handle, and animation bookkeeping through the shared AnimatedStateMachine.
"""

import math
import random
from typing import Dict, Optional, Tuple

from .animation import AnimatedStateMachine, AnimationClip
from .config import PhysicsConfig
from .input import InputProvider
from .physics import DynamicBody, move_horizontal
from .render import RenderProxy


class Box:
    """Plain axis-aligned box, e.g. an attack hitbox."""

    def __init__(self, x: float, y: float, width: float, height: float):
        self.x = x
        self.y = y
        self.width = width
        self.height = height


class Platform:
    """Static platform. Sinkable platforms descend while stood on."""

    def __init__(
        self,
        x: float,
        y: float,
        width: float,
        height: float = 20.0,
        sinkable: bool = True,
        proxy: Optional[RenderProxy] = None,
    ):
        """Create platform at given position.

        Args:
            x, y: Top-left corner
            width: Platform width
            height: Platform height (thickness)
            sinkable: Whether the platform sinks under a standing actor
            proxy: Render handle, defaults to a no-op proxy
        """
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.sinkable = sinkable
        self.alive = True
        self.proxy = proxy or RenderProxy()
        self.proxy.set_position(self.x, self.y)

    def sink(self, dt: float, speed: float, ground_y: float) -> float:
        """Descend by speed*dt, never below ground level.

        Returns:
            The y-delta actually applied this frame.
        """
        if not self.sinkable:
            return 0.0
        old_y = self.y
        self.y = min(self.y + speed * dt, ground_y - self.height)
        if self.y < old_y:
            # Already below the clamp line; leave it where it is
            self.y = old_y
        self.proxy.set_position(self.x, self.y)
        return self.y - old_y

    def destroy(self) -> None:
        """Level teardown: invalidate all index handles to this platform."""
        self.alive = False
        self.proxy.set_visible(False)

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Get (left, top, right, bottom) bounds."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def __repr__(self) -> str:
        return f"Platform(x={self.x:.1f}, y={self.y:.1f}, width={self.width:.1f}, sinkable={self.sinkable})"


class Collectible:
    """Pickup item. Flips to collected exactly once."""

    BOB_SPEED = 0.05
    BOB_AMPLITUDE = 3.0

    def __init__(
        self,
        x: float,
        y: float,
        width: float = 24.0,
        height: float = 24.0,
        proxy: Optional[RenderProxy] = None,
        bob_phase: Optional[float] = None,
    ):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self._collected = False
        self.bob_phase = random.uniform(0, 2 * math.pi) if bob_phase is None else bob_phase
        self.proxy = proxy or RenderProxy()
        self.proxy.set_position(self.x, self.y)

    @property
    def collected(self) -> bool:
        """Whether this collectible has been picked up."""
        return self._collected

    def collect(self) -> bool:
        """Mark as collected. Returns True only on the first call."""
        if self._collected:
            return False
        self._collected = True
        self.proxy.set_visible(False)
        return True

    @property
    def display_y(self) -> float:
        """Visual y including the idle bob. The pickup box never moves."""
        return self.y + math.sin(self.bob_phase) * self.BOB_AMPLITUDE

    def update(self, dt: float) -> None:
        if self._collected:
            return
        self.bob_phase += self.BOB_SPEED * dt
        self.proxy.set_position(self.x, self.display_y)


class BonusObject:
    """One-shot bonus (paint bucket). Triggering it shocks the pursuer."""

    def __init__(
        self,
        x: float,
        y: float,
        width: float = 24.0,
        height: float = 24.0,
        clip: Optional[AnimationClip] = None,
        proxy: Optional[RenderProxy] = None,
    ):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.triggered = False
        self.done = False
        self.proxy = proxy or RenderProxy()
        clips = {"splash": clip} if clip else {}
        self.anim = AnimatedStateMachine(clips, self.proxy, display_height=height, initial_state="idle")
        self.proxy.set_position(self.x, self.y)

    def trigger(self) -> bool:
        """Start the one-shot animation. Returns True only on the first call."""
        if self.triggered:
            return False
        self.triggered = True
        self.anim.set_state("splash", loop=False)
        return True

    def update(self, dt: float) -> None:
        if not self.triggered or self.done:
            return
        self.anim.update(dt)
        if self.anim.finished:
            self.done = True
            self.proxy.set_visible(False)


# Display-scale multipliers per animation state
HERO_SCALES = {"jumping": 1.25, "transform": 1.25, "die": 1.25}
ROBOT_SCALES = {
    "standing": 1.2, "running": 1.4, "jumping": 1.3,
    "transform": 1.25, "die": 1.25, "attack": 1.25,
}


def split_player_animations(
    animations: Optional[Dict[str, AnimationClip]],
) -> Tuple[Dict[str, AnimationClip], Dict[str, AnimationClip]]:
    """Split a flat animation dict into hero and robot clip sets.

    Robot clips are keyed with a ``robot_`` prefix. The robot set falls
    back to the hero's celebration clip.
    """
    animations = animations or {}
    hero = {k: animations[k] for k in ("standing", "running", "jumping", "winning") if k in animations}
    robot = {}
    for state in ("standing", "running", "jumping", "attack", "die"):
        clip = animations.get(f"robot_{state}")
        if clip is not None:
            robot[state] = clip
    if "robot_transform" in animations:
        hero["transform"] = animations["robot_transform"]
    if "robot_transform_back" in animations:
        robot["transform"] = animations["robot_transform_back"]
    if "robot_die" in animations:
        hero["die"] = animations["robot_die"]
    if "winning" in animations:
        robot["winning"] = animations["winning"]
    return hero, robot


class Player:
    """Player-controlled actor.

    Runs at constant speed, jumps only when grounded, and has two
    extensions: transforming between hero and robot forms, and a robot
    attack. Gravity and collisions are applied by the caller after
    update(), like for every DynamicBody.
    """

    def __init__(
        self,
        x: float,
        y: float,
        physics: Optional[PhysicsConfig] = None,
        animations: Optional[Dict[str, AnimationClip]] = None,
        proxy: Optional[RenderProxy] = None,
    ):
        self.physics = physics or PhysicsConfig()
        self.body = DynamicBody(x, y, self.physics.player_width, self.physics.player_height)
        self.proxy = proxy or RenderProxy()

        self.hero_clips, self.robot_clips = split_player_animations(animations)
        self.anim = AnimatedStateMachine(
            self.hero_clips, self.proxy,
            display_height=self.physics.player_height,
            scale_multipliers=HERO_SCALES,
        )

        self.facing_right = True
        self.just_jumped = False
        self.is_robot = False
        self.transforming = False
        self.transform_timer = 0.0
        self.attacking = False
        self.sync()

    @property
    def state(self) -> str:
        return self.anim.state

    def update(self, dt: float, controls: InputProvider, world_width: float) -> None:
        """Apply one frame of player control and horizontal movement."""
        self.just_jumped = False

        if self.transforming:
            self.body.velocity_x = 0.0
            self.update_transform(dt)
            return

        if controls.is_transform() and not self.attacking:
            self.start_transform()
            return
        if controls.is_attack():
            self.start_attack()

        if controls.is_left():
            self.body.velocity_x = -self.physics.player_speed
            self.facing_right = False
        elif controls.is_right():
            self.body.velocity_x = self.physics.player_speed
            self.facing_right = True
        else:
            self.body.velocity_x = 0.0

        if controls.is_jump() and self.body.is_grounded:
            self.body.velocity_y = self.physics.jump_force
            self.body.is_grounded = False
            self.just_jumped = True

        move_horizontal(self.body, dt, world_width)

        self.anim.update(dt)
        if self.attacking:
            if self.anim.finished:
                self.attacking = False
                self.anim.set_state("standing")
            return

        if not self.body.is_grounded:
            self.anim.set_state("jumping")
        elif self.body.velocity_x != 0:
            self.anim.set_state("running")
        else:
            self.anim.set_state("standing")

    def start_transform(self) -> bool:
        """Begin the hero <-> robot transformation. Freezes horizontal motion."""
        if self.transforming:
            return False
        self.transforming = True
        self.transform_timer = 0.0
        self.body.velocity_x = 0.0
        self.anim.set_state("transform", loop=False, restart=True)
        return True

    def update_transform(self, dt: float) -> bool:
        """Advance the transformation. Returns True on the completing frame."""
        self.transform_timer += dt
        self.anim.update(dt)
        if self.transform_timer < self.physics.transform_duration:
            return False
        self.transforming = False
        self.is_robot = not self.is_robot
        if self.is_robot:
            self.anim.use_clips(self.robot_clips, ROBOT_SCALES)
        else:
            self.anim.use_clips(self.hero_clips, HERO_SCALES)
        self.anim.set_state("standing", restart=True)
        return True

    def start_attack(self) -> bool:
        """Robot-only attack, ends when its animation finishes."""
        if not self.is_robot or self.attacking or self.transforming:
            return False
        self.attacking = True
        self.anim.set_state("attack", loop=False, restart=True)
        return True

    def attack_box(self) -> Box:
        """Hitbox one body-width deep in the facing direction."""
        b = self.body
        if self.facing_right:
            return Box(b.x, b.y, b.width * 2, b.height)
        return Box(b.x - b.width, b.y, b.width * 2, b.height)

    def freeze_horizontal(self) -> None:
        self.body.velocity_x = 0.0

    def play_celebration(self) -> None:
        self.anim.set_state("winning", loop=True, restart=True)

    def play_die(self) -> None:
        self.anim.set_state("die", loop=False, restart=True)

    def sync(self) -> None:
        """Push the current position/facing/scale to the render proxy."""
        self.anim.apply(self.body.x, self.body.y, self.facing_right)
