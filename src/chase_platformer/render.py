"""Contracts between the simulation core and its visual collaborators.

The core only ever pushes numeric state outward. It never reads back from
a proxy or the UI, so the base classes double as do-nothing implementations
for headless runs and tests.
"""

from typing import Optional


class RenderProxy:
    """Handle to whatever draws one entity, platform or the world layer."""

    def set_position(self, x: float, y: float) -> None:
        pass

    def set_scale(self, sx: float, sy: float) -> None:
        pass

    def select_animation(self, name: str, frames=None, loop: bool = True) -> None:
        """Switch to a named frame sequence. frames is the opaque clip handle."""
        pass

    def set_frame(self, index: int) -> None:
        pass

    def set_visible(self, visible: bool) -> None:
        pass


class RectProxy(RenderProxy):
    """Proxy that simply remembers the last state pushed to it.

    engine.draw_scene() reads these values back to place and hide the
    rectangles it draws, so the pygame window and the Gymnasium frames
    show exactly what the simulation pushed.
    """

    def __init__(self, visible: bool = True):
        self.x = 0.0
        self.y = 0.0
        self.scale = (1.0, 1.0)
        self.animation: Optional[str] = None
        self.loop = True
        self.frame = 0
        self.visible = visible

    def set_position(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def set_scale(self, sx: float, sy: float) -> None:
        self.scale = (sx, sy)

    def select_animation(self, name: str, frames=None, loop: bool = True) -> None:
        self.animation = name
        self.loop = loop
        self.frame = 0

    def set_frame(self, index: int) -> None:
        self.frame = index

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    @property
    def facing_right(self) -> bool:
        return self.scale[0] >= 0


class GameUI:
    """HUD, end-screen overlay and touch-control collaborator."""

    def update_hud(self, collected: int, total: int) -> None:
        pass

    def show(self, message: str) -> None:
        pass

    def hide(self) -> None:
        pass

    def show_touch_controls(self) -> None:
        pass

    def hide_touch_controls(self) -> None:
        pass
