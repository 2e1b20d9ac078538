"""Camera controller: smoothed pan and zoom over a focus point.

The camera stores a pan offset (x, y) in world pixels, added to world
coordinates before scaling by zoom, so a world point p lands on screen at
(p + pan) * zoom. The visible world rectangle therefore starts at -pan.
"""

import logging
from typing import Optional, Tuple

from pymunk import Vec2d

from .config import GameConfig

logger = logging.getLogger(__name__)


def smoothing_factor(rate: float, dt: float) -> float:
    """Fraction of the remaining distance covered in dt frames.

    1 - (1 - rate)^dt, so two half-frames cover the same distance as one
    full frame.
    """
    if rate >= 1.0:
        return 1.0
    return 1.0 - (1.0 - rate) ** dt


class Camera:
    """Follows the player with a forward bias and supports scripted zooms."""

    def __init__(self, config: Optional[GameConfig] = None):
        self.config = config or GameConfig()
        self.reset()

    def reset(self) -> None:
        cam = self.config.camera
        self.x = 0.0
        self.y = 0.0
        self.zoom = cam.zoom
        self.target_zoom = cam.zoom
        self.focus_override: Optional[Vec2d] = None
        self.zoom_lerp = self.config.cutscene.zoom_lerp
        # Vertical follow is measured against a standing player's top edge
        self.baseline_y = self.config.world.ground_y - self.config.physics.player_height

    @property
    def view_width(self) -> float:
        return self.config.world.screen_width / self.zoom

    @property
    def view_height(self) -> float:
        return self.config.world.screen_height / self.zoom

    def _target(self, focus: Vec2d) -> Tuple[float, float]:
        if self.focus_override is not None:
            point = self.focus_override
            return (-point.x + self.view_width / 2, -point.y + self.view_height / 2)

        follow_y = self.baseline_y + (focus.y - self.baseline_y) * self.config.camera.vertical_follow
        return (
            -focus.x + self.view_width * self.config.camera.offset_x,
            -follow_y + self.view_height / 2,
        )

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        """Clamp a pan offset so the view stays inside the world."""
        world = self.config.world
        min_x = min(0.0, -(world.world_width - self.view_width))
        min_y = min(0.0, -(world.world_height - self.view_height))
        return (max(min_x, min(0.0, x)), max(min_y, min(0.0, y)))

    def update(self, focus: Vec2d, dt: float) -> None:
        """Advance zoom, then pan, toward their targets."""
        self.zoom += (self.target_zoom - self.zoom) * smoothing_factor(self.zoom_lerp, dt)

        tx, ty = self.clamp(*self._target(focus))
        f = smoothing_factor(self.config.camera.lerp, dt)
        self.x += (tx - self.x) * f
        self.y += (ty - self.y) * f
        # Zoom may have grown the view since last frame
        self.x, self.y = self.clamp(self.x, self.y)

    def snap_to(self, focus: Vec2d) -> None:
        """Jump straight to the follow position with no smoothing."""
        self.x, self.y = self.clamp(*self._target(focus))

    def set_zoom(self, zoom: float) -> None:
        """Set zoom immediately, keeping it as the target."""
        self.zoom = zoom
        self.target_zoom = zoom

    def zoom_to(
        self,
        target_zoom: float,
        focus_point: Optional[Vec2d] = None,
        lerp: Optional[float] = None,
    ) -> None:
        """Start a scripted zoom, centered on focus_point until cleared."""
        self.target_zoom = target_zoom
        if focus_point is not None:
            self.focus_override = Vec2d(focus_point[0], focus_point[1])
        if lerp is not None:
            self.zoom_lerp = lerp
        logger.debug("Camera zoom to %.2f focus=%s", target_zoom, self.focus_override)

    def clear_focus(self) -> None:
        """Return to normal follow at base zoom."""
        self.focus_override = None
        self.target_zoom = self.config.camera.zoom
        self.zoom_lerp = self.config.cutscene.zoom_lerp

    def view_rect(self) -> Tuple[float, float, float, float]:
        """Visible world area as (left, top, width, height)."""
        return (-self.x, -self.y, self.view_width, self.view_height)

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        return ((wx + self.x) * self.zoom, (wy + self.y) * self.zoom)
