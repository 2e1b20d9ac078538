"""Configuration system for the chase platformer.

All values are expressed in world pixels and nominal frames: the frame
clock hands the simulation a delta-time multiplier that is 1.0 at 60 fps,
so a speed of 4.0 means 4 px per nominal frame.

Configuration is split into groups:
- PhysicsConfig: gravity, jump, run speed, actor sizes
- WorldConfig: screen and world extents, ground line
- LayoutConfig: procedural level generation
- PursuerConfig: pursuit AI tuning (heuristic or trail replay)
- CameraConfig / CutsceneConfig: view follow and scripted sequences
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Tuple, Dict, Any, ClassVar, Optional
import copy
import random


@dataclass
class PhysicsConfig:
    """Movement constants shared by the player and the pursuer."""

    gravity: float = 0.5  # px/frame^2, positive = down
    max_fall_speed: float = 12.0  # px/frame terminal velocity
    jump_force: float = -11.0  # Initial vertical velocity of a jump (negative = up)
    player_speed: float = 4.0  # px/frame, constant run speed (no acceleration curve)

    player_width: float = 32.0
    player_height: float = 48.0

    # Transform/attack extensions
    transform_duration: float = 90.0  # frames (1.5s at 60fps)

    GRAVITY_RANGE: ClassVar[Tuple[float, float]] = (0.35, 0.7)
    PLAYER_SPEED_RANGE: ClassVar[Tuple[float, float]] = (3.0, 5.5)

    @property
    def jump_apex(self) -> float:
        """Height the feet rise on a full jump: v0^2 / 2g."""
        return self.jump_force ** 2 / (2 * self.gravity)

    @property
    def sink_speed(self) -> float:
        """Sinking platforms descend one player height per second."""
        return self.player_height / 60.0

    @classmethod
    def sample(cls) -> "PhysicsConfig":
        """Sample gravity and run speed, keeping the jump force."""
        return cls(
            gravity=random.uniform(*cls.GRAVITY_RANGE),
            player_speed=random.uniform(*cls.PLAYER_SPEED_RANGE),
        )


@dataclass
class WorldConfig:
    """Screen and world geometry."""
    screen_width: int = 800
    screen_height: int = 600
    world_width: float = 4000.0
    world_height: float = 600.0
    ground_y: float = 540.0  # Top edge of the ground slab
    ground_height: float = 60.0
    pit_margin: float = 100.0  # Player below world_height + margin is lost
    fps: int = 60


@dataclass
class LayoutConfig:
    """Level generation parameters.

    Reachability constants describe the vertical band a new platform may
    occupy relative to an already placed reference platform.
    """
    platform_count: int = 10
    safe_zone: float = 400.0  # Platform-free strip at the left edge
    platform_min_width: float = 80.0
    platform_max_width: float = 200.0
    platform_height: float = 20.0
    max_attempts: int = 20

    max_jump_height: float = 50.0  # New platform at most this far above the reference
    max_horizontal: float = 100.0  # Reference must be within this horizontal gap
    max_fall: float = 300.0  # New platform at most this far below the reference
    min_platform_y: float = 60.0  # Ceiling for platform tops

    # Deterministic placement used when every attempt in a column fails
    fallback_offset: float = 20.0
    fallback_width: float = 120.0
    fallback_height: float = 40.0  # Distance above ground_y

    collectible_count: int = 8
    collectible_width: float = 24.0
    collectible_height: float = 24.0

    bonus_enabled: bool = True
    bonus_width: float = 24.0
    bonus_height: float = 24.0

    start_x: float = 100.0

    PLATFORM_COUNT_RANGE: ClassVar[Tuple[int, int]] = (6, 16)
    COLLECTIBLE_COUNT_RANGE: ClassVar[Tuple[int, int]] = (3, 12)

    @classmethod
    def sample(cls) -> "LayoutConfig":
        """Sample random layout config."""
        return cls(
            platform_count=random.randint(*cls.PLATFORM_COUNT_RANGE),
            collectible_count=random.randint(*cls.COLLECTIBLE_COUNT_RANGE),
        )


@dataclass
class PursuerConfig:
    """Pursuit AI parameters.

    mode selects the pursuit strategy: "heuristic" runs the live jump
    planner with its own physics, "trail" replays the target's recorded
    path at a fixed lag.
    """
    mode: str = "heuristic"
    width: float = 32.0
    height: float = 48.0
    speed: Optional[float] = None  # None = same as player_speed
    activation_delay: float = 120.0  # frames between arming and appearing

    look_ahead: float = 150.0
    adjacency_tolerance: float = 10.0  # Overlap still counted as "ahead"
    edge_margin: float = 8.0
    max_jump_dist: float = 100.0
    max_jump_height: float = 50.0
    catch_distance: float = 30.0
    shock_duration: float = 180.0

    # Trail replay
    trail_record_interval: float = 3.0  # frames between recorded samples
    trail_lag: int = 20  # samples kept between pursuer and target

    MODES: ClassVar[Tuple[str, ...]] = ("heuristic", "trail")


@dataclass
class CameraConfig:
    """View follow parameters."""
    zoom: float = 1.25
    lerp: float = 0.1  # Per-frame smoothing rate at dt=1
    offset_x: float = 0.3  # Focus sits this fraction from the left edge
    vertical_follow: float = 0.3  # Fraction of vertical deviation tracked


@dataclass
class CutsceneConfig:
    """Timings (frames) and zoom targets for scripted sequences."""
    intro_open_duration: float = 30.0
    intro_hold_duration: float = 40.0
    intro_reveal_duration: float = 60.0
    intro_zoom: float = 3.0
    intro_small_radius: float = 60.0

    arrest_duration: float = 150.0
    arrest_zoom: float = 2.5
    celebration_duration: float = 150.0
    celebration_zoom: float = 2.5
    zoom_lerp: float = 0.05


@dataclass
class GameConfig:
    """Complete game configuration combining all parameter groups."""
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
    world: WorldConfig = field(default_factory=WorldConfig)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    pursuer: PursuerConfig = field(default_factory=PursuerConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    cutscene: CutsceneConfig = field(default_factory=CutsceneConfig)

    @property
    def pursuer_speed(self) -> float:
        if self.pursuer.speed is None:
            return self.physics.player_speed
        return self.pursuer.speed

    @classmethod
    def sample_full(cls) -> "GameConfig":
        """Sample physics and layout, keeping everything else default."""
        return cls(physics=PhysicsConfig.sample(), layout=LayoutConfig.sample())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to nested dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GameConfig":
        """Create from nested dictionary. Missing groups/keys use defaults."""
        groups = {}
        for f in fields(cls):
            group_cls = f.default_factory
            values = d.get(f.name, {})
            known = {g.name for g in fields(group_cls)}
            groups[f.name] = group_cls(**{k: v for k, v in values.items() if k in known})
        return cls(**groups)


# Predefined configurations for play and testing
CONFIGS = {
    "default": GameConfig(),

    # Fewer pickups, slower and later pursuer
    "easy": GameConfig(
        layout=LayoutConfig(collectible_count=5),
        pursuer=PursuerConfig(speed=3.2, activation_delay=240.0),
    ),

    # More pickups, pursuer slightly faster than the player
    "hard": GameConfig(
        layout=LayoutConfig(platform_count=14, collectible_count=12),
        pursuer=PursuerConfig(speed=4.4, activation_delay=60.0),
    ),

    # Breadcrumb replay pursuer
    "trail": GameConfig(pursuer=PursuerConfig(mode="trail")),

    # Small world for quick runs
    "tiny": GameConfig(
        world=WorldConfig(world_width=1600.0),
        layout=LayoutConfig(platform_count=4, collectible_count=3),
    ),
}


def get_config(name: str) -> GameConfig:
    """Return a private copy of a named preset."""
    if name not in CONFIGS:
        raise ValueError(f"Unknown config preset: {name!r} (choose from {sorted(CONFIGS)})")
    return copy.deepcopy(CONFIGS[name])
