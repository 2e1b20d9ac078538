"""Pygame front end: window, keyboard, rectangle renderer and HUD.

The simulation core never draws. This module reads the GameContext after
each update and paints it; draw_scene() is shared with the Gymnasium env
so observations look exactly like the playable game.
"""

import logging
from typing import Optional, Tuple, Dict, Any

import pygame

from .config import GameConfig
from .game import GameContext, GameMode, GameStateMachine
from .input import KeyboardInput
from .render import GameUI, RectProxy, RenderProxy

logger = logging.getLogger(__name__)


# Colors (RGB)
COLOR_BG = (40, 44, 52)
COLOR_PLAYER = (97, 175, 239)
COLOR_ROBOT = (198, 120, 221)
COLOR_PURSUER = (224, 108, 117)
COLOR_PURSUER_SHOCKED = (255, 255, 255)
COLOR_PLATFORM = (152, 195, 121)
COLOR_GROUND = (92, 99, 112)
COLOR_COLLECTIBLE = (255, 215, 0)
COLOR_BONUS = (255, 200, 100)
COLOR_TEXT = (255, 255, 255)
COLOR_IRIS = (0, 0, 0)

# Longest frame the simulation is allowed to integrate in one step
MAX_DT = 3.0


def frame_dt(elapsed_ms: float, fps: int = 60) -> float:
    """Delta-time multiplier for a frame that took elapsed_ms, 1.0 at fps."""
    return min(elapsed_ms / (1000.0 / fps), MAX_DT)


def _draw_box(surface: pygame.Surface, ctx: GameContext, color, x, y, w, h, border: int = 0) -> None:
    cam = ctx.camera
    sx, sy = cam.world_to_screen(x, y)
    rect = pygame.Rect(int(sx), int(sy), max(1, int(w * cam.zoom)), max(1, int(h * cam.zoom)))
    pygame.draw.rect(surface, color, rect, border)


def _proxy_origin(proxy: RenderProxy, x: float, y: float) -> Optional[Tuple[float, float]]:
    """Where to draw an entity, or None while its proxy is hidden.

    RectProxy handles carry the last state the simulation pushed; any
    other proxy falls back to the entity's own coordinates.
    """
    if isinstance(proxy, RectProxy):
        return (proxy.x, proxy.y) if proxy.visible else None
    return (x, y)


def draw_scene(surface: pygame.Surface, ctx: GameContext) -> None:
    """Paint the world as seen through ctx.camera onto surface."""
    surface.fill(COLOR_BG)
    if ctx.level is None:
        return

    level = ctx.level
    for index, plat in enumerate(level.platforms):
        origin = _proxy_origin(plat.proxy, plat.x, plat.y)
        if origin is not None:
            color = COLOR_GROUND if index == 0 else COLOR_PLATFORM
            _draw_box(surface, ctx, color, *origin, plat.width, plat.height)

    for item in level.collectibles:
        origin = _proxy_origin(item.proxy, item.x, item.display_y)
        if origin is not None and not item.collected:
            _draw_box(surface, ctx, COLOR_COLLECTIBLE, *origin, item.width, item.height)

    bonus = level.bonus
    if bonus is not None and not bonus.done:
        origin = _proxy_origin(bonus.proxy, bonus.x, bonus.y)
        if origin is not None:
            _draw_box(surface, ctx, COLOR_BONUS, *origin, bonus.width, bonus.height,
                      border=2 if bonus.triggered else 0)

    pursuer = ctx.pursuer
    if pursuer is not None and pursuer.active:
        b = pursuer.body
        origin = _proxy_origin(pursuer.proxy, b.x, b.y)
        if origin is not None:
            color = COLOR_PURSUER_SHOCKED if pursuer.shocked else COLOR_PURSUER
            _draw_box(surface, ctx, color, *origin, b.width, b.height)

    player = ctx.player
    if player is not None:
        b = player.body
        # Hidden while the arrest clip shows both actors
        origin = _proxy_origin(player.proxy, b.x, b.y)
        if origin is not None:
            color = COLOR_ROBOT if player.is_robot else COLOR_PLAYER
            _draw_box(surface, ctx, color, *origin, b.width, b.height)
            if player.attacking:
                hit = player.attack_box()
                _draw_box(surface, ctx, COLOR_TEXT, hit.x, hit.y, hit.width, hit.height, border=1)

    if ctx.mode == GameMode.INTRO:
        draw_iris(surface, ctx)


def draw_iris(surface: pygame.Surface, ctx: GameContext) -> None:
    """Black out everything outside the aperture circle around the player."""
    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    overlay.fill((*COLOR_IRIS, 255))
    center = ctx.player.body.center
    sx, sy = ctx.camera.world_to_screen(center.x, center.y)
    radius = int(ctx.aperture_radius)
    if radius > 0:
        pygame.draw.circle(overlay, (0, 0, 0, 0), (int(sx), int(sy)), radius)
    surface.blit(overlay, (0, 0))


class PygameUI(GameUI):
    """HUD counter, end-screen message and touch-control flag."""

    def __init__(self):
        self.collected = 0
        self.total = 0
        self.message: Optional[str] = None
        self.touch_controls = False

    def update_hud(self, collected: int, total: int) -> None:
        self.collected = collected
        self.total = total

    def show(self, message: str) -> None:
        self.message = message

    def hide(self) -> None:
        self.message = None

    def show_touch_controls(self) -> None:
        self.touch_controls = True

    def hide_touch_controls(self) -> None:
        self.touch_controls = False

    def draw(self, surface: pygame.Surface) -> None:
        font = pygame.font.Font(None, 28)
        hud = font.render(f"Metal: {self.collected}/{self.total}", True, COLOR_COLLECTIBLE)
        surface.blit(hud, hud.get_rect(topright=(surface.get_width() - 10, 10)))
        if self.message:
            draw_centered_text(surface, self.message, COLOR_TEXT)
            small = pygame.font.Font(None, 28)
            hint = small.render("Press R to restart", True, COLOR_TEXT)
            surface.blit(hint, hint.get_rect(
                center=(surface.get_width() // 2, surface.get_height() // 2 + 40)))


def draw_centered_text(surface: pygame.Surface, text: str, color: Tuple[int, int, int]) -> None:
    """Draw centered text on a surface."""
    font = pygame.font.Font(None, 48)
    text_surface = font.render(text, True, color)
    text_rect = text_surface.get_rect(
        center=(surface.get_width() // 2, surface.get_height() // 2)
    )
    surface.blit(text_surface, text_rect)


class ChaseEngine:
    """Main game engine coordinating window, input and the state machine.

    Handles:
    - Variable-timestep game loop (dt multiplier capped at MAX_DT)
    - Pygame rendering
    - Keyboard input
    """

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        """Initialize game engine.

        Args:
            config: Game configuration. Uses defaults if None.
            seed: Base seed for level generation.
        """
        self.config = config or GameConfig()
        world = self.config.world

        pygame.init()
        self.screen = pygame.display.set_mode((world.screen_width, world.screen_height))
        pygame.display.set_caption("Chase Platformer")
        self.clock = pygame.time.Clock()

        self.controls = KeyboardInput()
        self.ui = PygameUI()
        self.game = GameStateMachine(
            self.config,
            controls=self.controls,
            ui=self.ui,
            proxy_factory=lambda kind: RectProxy(),
            seed=seed,
        )
        self.running = False

    @property
    def ctx(self) -> GameContext:
        return self.game.ctx

    def handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self.running = False
            else:
                self.controls.handle_event(event)

    def update(self, dt: float) -> GameContext:
        """Advance the game by dt nominal frames."""
        ctx = self.game.update(dt)
        self.controls.end_frame()
        return ctx

    def render(self) -> None:
        """Render current game state."""
        ctx = self.ctx
        if ctx.mode == GameMode.MENU:
            self.screen.fill(COLOR_BG)
            draw_centered_text(self.screen, "PRESS ENTER TO START", COLOR_TEXT)
        else:
            draw_scene(self.screen, ctx)
            self.ui.draw(self.screen)
        pygame.display.flip()

    def run(self, max_frames: Optional[int] = None) -> None:
        """Main game loop. Stops on quit, Escape, or after max_frames."""
        self.running = True
        frames = 0
        self.clock.tick(self.config.world.fps)

        while self.running:
            elapsed = self.clock.tick(self.config.world.fps)
            self.handle_events()
            self.update(frame_dt(elapsed, self.config.world.fps))
            self.render()
            frames += 1
            if max_frames is not None and frames >= max_frames:
                self.running = False

        logger.info("Engine stopped after %d frames in mode %s", frames, self.ctx.mode.name)
        pygame.quit()

    def get_state(self) -> Dict[str, Any]:
        """Get current game state for observation/logging."""
        ctx = self.ctx
        state = {
            "mode": ctx.mode.value,
            "collected": ctx.collected,
            "total": ctx.total,
            "outcome": ctx.outcome,
        }
        if ctx.player:
            state["player_position"] = (ctx.player.body.x, ctx.player.body.y)
            state["player_velocity"] = (ctx.player.body.velocity_x, ctx.player.body.velocity_y)
            state["player_grounded"] = ctx.player.body.is_grounded
        if ctx.pursuer:
            state["pursuer_active"] = ctx.pursuer.active
            state["pursuer_position"] = (ctx.pursuer.body.x, ctx.pursuer.body.y)
        return state
