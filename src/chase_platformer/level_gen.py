"""Procedural level generation under a jump-reachability constraint.

The world is a full-width ground slab plus one floating platform per
column. Each new platform is anchored to an already placed platform that
is horizontally close: its height is drawn from the band the player can
jump up to or drop down to from that reference. Since every reference is
itself reachable, the whole level is traversable by induction on
placement order. No validation pass is needed afterwards, though
reachable_platforms() re-checks it for tests and tooling.

A column whose attempts all fail gets a deterministic low platform, so
generation never fails and never loops forever.
"""

import logging
import math
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Set, Tuple

from .animation import AnimationClip
from .config import GameConfig, LayoutConfig, WorldConfig, PhysicsConfig
from .entities import Platform, Collectible, BonusObject
from .render import RenderProxy

logger = logging.getLogger(__name__)

ProxyFactory = Callable[[str], RenderProxy]


@dataclass
class Level:
    """A generated level.

    platforms[0] is always the ground. Only platform y (sinking) and
    collectible flags change after generation.
    """
    platforms: List[Platform]
    collectibles: List[Collectible]
    start_position: Tuple[float, float]
    ground_y: float
    bonus: Optional[BonusObject] = None
    seed: Optional[int] = None
    fallback_columns: List[int] = field(default_factory=list)

    @property
    def ground(self) -> Platform:
        return self.platforms[0]

    @property
    def floating_platforms(self) -> List[Platform]:
        return [p for p in self.platforms if p.y < self.ground_y]

    @property
    def total_collectibles(self) -> int:
        return len(self.collectibles)

    @property
    def collected_count(self) -> int:
        return sum(1 for c in self.collectibles if c.collected)

    @property
    def all_collected(self) -> bool:
        """False for a level with nothing to collect."""
        return bool(self.collectibles) and self.collected_count >= len(self.collectibles)

    def teardown(self) -> None:
        """Invalidate every platform handle held by actors."""
        for plat in self.platforms:
            plat.destroy()


def horizontal_gap(x: float, width: float, other: Platform) -> float:
    """Gap between [x, x+width] and a platform, 0 when they overlap."""
    return max(0.0, x - (other.x + other.width), other.x - (x + width))


class LevelGenerator:
    """Generates levels column by column with constructive reachability."""

    def __init__(
        self,
        layout: Optional[LayoutConfig] = None,
        world: Optional[WorldConfig] = None,
        physics: Optional[PhysicsConfig] = None,
        proxy_factory: Optional[ProxyFactory] = None,
        bonus_clip: Optional[AnimationClip] = None,
    ):
        """Create a generator.

        Args:
            layout: Placement parameters. Uses defaults if None.
            world: World geometry. Uses defaults if None.
            physics: Player dimensions for the start position.
            proxy_factory: Called with "platform", "collectible" or "bonus"
                to create a render handle for each new entity.
            bonus_clip: Animation handed to the bonus object.
        """
        self.layout = layout or LayoutConfig()
        self.world = world or WorldConfig()
        self.physics = physics or PhysicsConfig()
        self.proxy_factory = proxy_factory
        self.bonus_clip = bonus_clip
        self.rng = random.Random()

    @classmethod
    def from_config(cls, config: GameConfig, **kwargs) -> "LevelGenerator":
        """Create generator from full game config."""
        return cls(layout=config.layout, world=config.world, physics=config.physics, **kwargs)

    def _proxy(self, kind: str) -> Optional[RenderProxy]:
        if self.proxy_factory is None:
            return None
        return self.proxy_factory(kind)

    def find_reachable_y(
        self, new_x: float, new_width: float, platforms: Sequence[Platform]
    ) -> Optional[float]:
        """Pick a height for a new platform relative to a nearby reference.

        Returns:
            A y inside the reachability band of a randomly chosen nearby
            platform, or None when no platform is near or the band is empty.
        """
        layout = self.layout
        candidates = [
            p for p in platforms
            if horizontal_gap(new_x, new_width, p) < layout.max_horizontal
        ]
        if not candidates:
            return None

        ref = self.rng.choice(candidates)
        min_y = max(layout.min_platform_y, ref.y - layout.max_jump_height)
        max_y = min(self.world.ground_y - layout.platform_height, ref.y + layout.max_fall)
        if min_y >= max_y:
            return None
        return self.rng.uniform(min_y, max_y)

    def generate(self, seed: Optional[int] = None) -> Level:
        """Generate a complete level.

        Args:
            seed: Random seed for reproducibility

        Returns:
            Level with ground + platform_count platforms and up to
            collectible_count collectibles.
        """
        self.rng = random.Random(seed)
        layout = self.layout
        ground_y = self.world.ground_y

        ground = Platform(
            0.0, ground_y, self.world.world_width, self.world.ground_height,
            sinkable=False, proxy=self._proxy("platform"),
        )
        platforms = [ground]
        fallback_columns = self._generate_platforms(platforms)

        collectibles, bonus = self._place_collectibles(platforms)

        start_position = (layout.start_x, ground_y - self.physics.player_height)

        logger.info(
            "Generated level: %d platforms, %d collectibles, %d fallback columns (seed=%s)",
            len(platforms), len(collectibles), len(fallback_columns), seed,
        )
        return Level(
            platforms=platforms,
            collectibles=collectibles,
            start_position=start_position,
            ground_y=ground_y,
            bonus=bonus,
            seed=seed,
            fallback_columns=fallback_columns,
        )

    def _generate_platforms(self, platforms: List[Platform]) -> List[int]:
        """Append one floating platform per column. Returns fallback columns."""
        layout = self.layout
        fallback_columns = []
        if layout.platform_count <= 0:
            return fallback_columns

        column_width = (self.world.world_width - layout.safe_zone) / layout.platform_count

        for i in range(layout.platform_count):
            col_x = layout.safe_zone + i * column_width
            placed = False

            for _ in range(layout.max_attempts):
                width = self.rng.uniform(layout.platform_min_width, layout.platform_max_width)
                x = col_x + self.rng.random() * max(0.0, column_width - width)
                y = self.find_reachable_y(x, width, platforms)
                if y is not None:
                    platforms.append(Platform(
                        x, y, width, layout.platform_height, proxy=self._proxy("platform"),
                    ))
                    placed = True
                    break

            if not placed:
                logger.debug("Column %d: no reachable placement, using fallback", i)
                platforms.append(Platform(
                    col_x + layout.fallback_offset,
                    self.world.ground_y - layout.fallback_height,
                    layout.fallback_width,
                    layout.platform_height,
                    proxy=self._proxy("platform"),
                ))
                fallback_columns.append(i)

        return fallback_columns

    def _place_collectibles(
        self, platforms: List[Platform]
    ) -> Tuple[List[Collectible], Optional[BonusObject]]:
        """One collectible centered on each of K shuffled floating platforms."""
        layout = self.layout
        floating = [p for p in platforms if p.y < self.world.ground_y]
        self.rng.shuffle(floating)
        count = min(layout.collectible_count, len(floating))

        collectibles = []
        for plat in floating[:count]:
            cx = plat.x + plat.width / 2 - layout.collectible_width / 2
            cy = plat.y - layout.collectible_height
            collectibles.append(Collectible(
                cx, cy, layout.collectible_width, layout.collectible_height,
                proxy=self._proxy("collectible"),
                bob_phase=self.rng.uniform(0, math.tau),
            ))

        bonus = None
        if layout.bonus_enabled and count > 0:
            # Bonus sits on the last selected platform, its collectible floats above it
            plat = floating[count - 1]
            bonus = BonusObject(
                plat.x + plat.width / 2 - layout.bonus_width / 2,
                plat.y - layout.bonus_height,
                layout.bonus_width,
                layout.bonus_height,
                clip=self.bonus_clip,
                proxy=self._proxy("bonus"),
            )
            last = collectibles[-1]
            last.y -= layout.bonus_height
            last.proxy.set_position(last.x, last.y)

        return collectibles, bonus


def reachable_platforms(
    platforms: Sequence[Platform],
    layout: Optional[LayoutConfig] = None,
    tolerance: float = 1e-6,
) -> Set[int]:
    """Indices of platforms reachable from the ground (index 0).

    Breadth-first search using the same horizontal-gap and vertical-band
    rules the generator places platforms with.
    """
    layout = layout or LayoutConfig()
    if not platforms:
        return set()

    reached = {0}
    queue = deque([0])
    while queue:
        ref = platforms[queue.popleft()]
        for index, plat in enumerate(platforms):
            if index in reached:
                continue
            if horizontal_gap(plat.x, plat.width, ref) >= layout.max_horizontal:
                continue
            if ref.y - layout.max_jump_height - tolerance <= plat.y <= ref.y + layout.max_fall + tolerance:
                reached.add(index)
                queue.append(index)
    return reached
