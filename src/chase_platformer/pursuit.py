"""Pursuit AI for the antagonist.

Two interchangeable strategies share the same external contract
(activate, update, distance_to, active, play_arrest, play_shock):

- Pursuer: live heuristic. Runs toward the target at constant speed under
  its own physics and decides jumps from a short lookahead over the
  platform list. This is the default.
- TrailPursuer: replays a breadcrumb trail of the target's past positions
  at a fixed lag, skipping samples where the target stood still.

The jump decision is a pure function of its inputs (should_jump) so the
same situation always produces the same answer.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pymunk import Vec2d

from .animation import AnimatedStateMachine, AnimationClip
from .config import GameConfig, PursuerConfig
from .entities import Platform
from .physics import DynamicBody, apply_gravity, move_horizontal, resolve_collisions
from .render import RenderProxy

logger = logging.getLogger(__name__)

RUNNING = "running"
JUMPING = "jumping"
ARREST = "arrest"
SHOCK = "shock"

# Target counts as airborne once its feet are this far above the ground line
AIRBORNE_MARGIN = 5.0
# Pursuer counts as on the ground within this distance of the ground line
GROUND_TOLERANCE = 2.0

PURSUER_SCALES = {RUNNING: 1.2, JUMPING: 1.2, ARREST: 1.2, SHOCK: 1.25}


def distance_ahead(body: DynamicBody, plat: Platform, direction: int) -> float:
    """Edge-to-edge distance from the body to a platform in the travel direction."""
    if direction > 0:
        return plat.x - (body.x + body.width)
    return body.x - (plat.x + plat.width)


def target_airborne(target: DynamicBody, ground_y: float) -> bool:
    return target.y + target.height < ground_y - AIRBORNE_MARGIN


def find_platform_ahead(
    body: DynamicBody,
    platforms: Sequence[Platform],
    direction: int,
    ground_y: float,
    config: PursuerConfig,
) -> Optional[Platform]:
    """Nearest floating platform within look_ahead in the travel direction.

    Platforms overlapping the body by less than adjacency_tolerance still
    count as ahead.
    """
    nearest = None
    nearest_dist = float("inf")
    for plat in platforms:
        if plat.y >= ground_y:
            continue
        dist = distance_ahead(body, plat, direction)
        if -config.adjacency_tolerance < dist < config.look_ahead and dist < nearest_dist:
            nearest = plat
            nearest_dist = dist
    return nearest


def has_reachable_platform(
    body: DynamicBody,
    platforms: Sequence[Platform],
    direction: int,
    ground_y: float,
    config: PursuerConfig,
    current: Optional[Platform] = None,
) -> bool:
    """Whether a floating platform ahead is within one jump of the body."""
    for plat in platforms:
        if plat is current or plat.y >= ground_y:
            continue
        dist = distance_ahead(body, plat, direction)
        if 0 < dist < config.max_jump_dist and plat.y >= body.y - config.max_jump_height:
            return True
    return False


def platform_under(body: DynamicBody, platforms: Sequence[Platform]) -> Optional[int]:
    """Index of the live platform the body's feet rest on, if any."""
    feet_y = body.y + body.height
    for index, plat in enumerate(platforms):
        if (plat.alive and abs(plat.y - feet_y) <= GROUND_TOLERANCE
                and body.x < plat.x + plat.width and body.x + body.width > plat.x):
            return index
    return None


def should_jump(
    body: DynamicBody,
    direction: int,
    platforms: Sequence[Platform],
    target: DynamicBody,
    config: PursuerConfig,
    ground_y: float,
) -> bool:
    """Decide whether a grounded pursuer should jump this frame.

    Two situations trigger a jump:
    1. Standing on the ground with a floating platform close ahead: jump if
       the platform blocks the pursuer's vertical span, or if the target is
       airborne (follow it upward).
    2. Standing near the leading edge of a floating platform: jump only if
       the target is airborne and another platform is within jump range.

    Otherwise the pursuer keeps running and drops off edges under gravity.
    """
    if not body.is_grounded:
        return False

    feet_y = body.y + body.height
    on_ground = feet_y >= ground_y - GROUND_TOLERANCE
    current = body.grounded_on(platforms)
    on_floating = current is not None and current.y < ground_y
    airborne_target = target_airborne(target, ground_y)

    if on_ground:
        ahead = find_platform_ahead(body, platforms, direction, ground_y, config)
        if ahead is not None:
            if ahead.y < feet_y and ahead.y + ahead.height > body.y:
                return True
            if airborne_target:
                return True

    if on_floating:
        if direction > 0:
            near_edge = body.x + body.width >= current.x + current.width - config.edge_margin
        else:
            near_edge = body.x <= current.x + config.edge_margin
        if near_edge and airborne_target and has_reachable_platform(
            body, platforms, direction, ground_y, config, current
        ):
            return True

    return False


class PursuerBase:
    """Activation, scripted states and rendering shared by both strategies."""

    def __init__(
        self,
        x: float,
        y: float,
        config: Optional[GameConfig] = None,
        animations: Optional[Dict[str, AnimationClip]] = None,
        proxy: Optional[RenderProxy] = None,
    ):
        self.config = config or GameConfig()
        pc = self.config.pursuer
        self.body = DynamicBody(x, y, pc.width, pc.height)
        self.proxy = proxy or RenderProxy()

        self.activated = False
        self.activation_timer = 0.0
        self.active = False
        self.shocked = False
        self.shock_timer = 0.0
        self.facing_right = True

        self.anim = AnimatedStateMachine(
            animations or {}, self.proxy,
            display_height=pc.height,
            scale_multipliers=PURSUER_SCALES,
            initial_state=RUNNING,
        )
        self.proxy.set_visible(False)
        self.sync()

    @property
    def current_state(self) -> str:
        return self.anim.state

    def activate(self) -> None:
        """Arm the pursuer. It appears after the activation delay."""
        if self.activated:
            return
        self.activated = True
        self.activation_timer = 0.0

    def _tick_activation(self, dt: float) -> bool:
        """Advance the activation delay. Returns whether the pursuer is acting."""
        if not self.activated:
            return False
        if self.active:
            return True
        self.activation_timer += dt
        if self.activation_timer < self.config.pursuer.activation_delay:
            return False
        self.active = True
        self.proxy.set_visible(True)
        logger.info("Pursuer active at x=%.0f", self.body.x)
        return True

    def distance_to(self, target) -> float:
        """Euclidean distance between body centers."""
        return (self.body.center - target.body.center).length

    def freeze_horizontal(self) -> None:
        self.body.velocity_x = 0.0

    def settle(self, dt: float, platforms: Sequence[Platform]) -> None:
        """Fall under gravity with no horizontal motion."""
        self.body.velocity_x = 0.0
        apply_gravity(self.body, self.config.physics, dt)
        resolve_collisions(self.body, platforms)
        self.anim.update(dt)
        self.sync()

    def play_arrest(self) -> None:
        """Lock into the non-looping capture animation."""
        self.shocked = False
        self.anim.set_state(ARREST, loop=False, restart=True)

    def play_shock(self, duration: Optional[float] = None) -> None:
        """Stun the pursuer: it stands still until the shock wears off."""
        self.shocked = True
        self.shock_timer = self.config.pursuer.shock_duration if duration is None else duration
        self.body.velocity_x = 0.0
        self.anim.set_state(SHOCK, loop=False, restart=True)
        logger.info("Pursuer shocked for %.0f frames", self.shock_timer)

    def _update_shock(self, dt: float, platforms: Sequence[Platform]) -> None:
        self.shock_timer -= dt
        self.settle(dt, platforms)
        if self.shock_timer <= 0:
            self.shocked = False
            self.anim.set_state(RUNNING)

    def sync(self) -> None:
        self.anim.apply(self.body.x, self.body.y, self.facing_right)


class Pursuer(PursuerBase):
    """Live heuristic pursuer with its own physics."""

    @property
    def speed(self) -> float:
        return self.config.pursuer_speed

    def should_jump(self, platforms: Sequence[Platform], target, direction: int) -> bool:
        return should_jump(
            self.body, direction, platforms, target.body,
            self.config.pursuer, self.config.world.ground_y,
        )

    def update(self, dt: float, platforms: Sequence[Platform], target) -> None:
        """One frame of chasing. Inert until activated and the delay elapses."""
        if self.shocked:
            self._update_shock(dt, platforms)
            return
        if not self._tick_activation(dt):
            return

        body = self.body
        direction = 1 if target.body.x > body.x else -1
        body.velocity_x = self.speed * direction

        if body.is_grounded and self.should_jump(platforms, target, direction):
            logger.debug("Pursuer jumps at x=%.0f", body.x)
            body.velocity_y = self.config.physics.jump_force
            body.is_grounded = False

        apply_gravity(body, self.config.physics, dt)
        move_horizontal(body, dt, self.config.world.world_width)
        resolve_collisions(body, platforms)

        if body.velocity_x > 0:
            self.facing_right = True
        elif body.velocity_x < 0:
            self.facing_right = False

        self.anim.set_state(RUNNING if body.is_grounded else JUMPING)
        self.anim.update(dt)
        self.sync()


@dataclass
class TrailSample:
    """One recorded breadcrumb."""
    x: float
    y: float
    state: str
    facing_right: bool

    @property
    def idle(self) -> bool:
        return self.state == "standing"


class Trail:
    """Append-only breadcrumb trail sampled every `interval` frames."""

    def __init__(self, interval: float = 3.0):
        self.interval = interval
        self.samples: List[TrailSample] = []
        self._elapsed = 0.0

    def record(self, target, dt: float) -> int:
        """Account for dt frames of time. Returns the number of samples added."""
        self._elapsed += dt
        added = 0
        while self._elapsed >= self.interval:
            self._elapsed -= self.interval
            self.samples.append(TrailSample(
                target.body.x, target.body.y, target.state, target.facing_right,
            ))
            added += 1
        return added

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, index: int) -> TrailSample:
        return self.samples[index]

    def get(self, index: float) -> TrailSample:
        """Sample at floor(index), clamped to the last one."""
        i = min(int(index), len(self.samples) - 1)
        return self.samples[i]

    def reset(self) -> None:
        self.samples = []
        self._elapsed = 0.0


class TrailPursuer(PursuerBase):
    """Follows the target's recorded path, trail_lag samples behind.

    The replay index advances one sample per recording interval of elapsed
    time. Idle samples (target standing still) are skipped, so a
    stationary target is reached instead of waited for.
    """

    # TODO: confirm whether idle skipping is meant as difficulty balancing or
    # compensates for replay running slower than recording on long frames.

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.trail = Trail(self.config.pursuer.trail_record_interval)
        self.replay_index = 0.0

    def update(self, dt: float, platforms: Sequence[Platform], target) -> None:
        self.trail.record(target, dt)

        if self.shocked:
            self._update_shock(dt, platforms)
            return
        if not self._tick_activation(dt):
            return

        limit = len(self.trail) - 1 - self.config.pursuer.trail_lag
        if limit < 0:
            return

        index = self.replay_index + dt / self.trail.interval
        while index < limit and self.trail.get(index).idle:
            index += 1.0
        index = min(index, float(limit))
        self.replay_index = index

        i = int(index)
        frac = index - i
        a = self.trail[i]
        b = self.trail[min(i + 1, len(self.trail) - 1)]
        pos = Vec2d(a.x, a.y) + (Vec2d(b.x, b.y) - Vec2d(a.x, a.y)) * frac

        body = self.body
        if dt > 0:
            body.velocity_x = (pos.x - body.x) / dt
            body.velocity_y = (pos.y - body.y) / dt
        body.x, body.y = pos.x, pos.y

        sample = b if frac >= 0.5 else a
        self.facing_right = sample.facing_right
        # Replayed positions bypass collision resolution, so look up the support
        body.grounded_platform = platform_under(body, platforms)
        body.is_grounded = body.grounded_platform is not None
        self.anim.set_state(JUMPING if sample.state == JUMPING else RUNNING)
        self.anim.update(dt)
        self.sync()


def create_pursuer(
    x: float,
    y: float,
    config: Optional[GameConfig] = None,
    animations: Optional[Dict[str, AnimationClip]] = None,
    proxy: Optional[RenderProxy] = None,
) -> PursuerBase:
    """Build the pursuer strategy selected by config.pursuer.mode."""
    config = config or GameConfig()
    mode = config.pursuer.mode
    if mode == "heuristic":
        return Pursuer(x, y, config, animations, proxy)
    if mode == "trail":
        return TrailPursuer(x, y, config, animations, proxy)
    raise ValueError(f"Unknown pursuer mode: {mode!r}")
