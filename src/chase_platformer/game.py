"""Top-level game state machine.

Sequences MENU -> INTRO -> PLAYING -> (ARREST | CELEBRATION) -> LOSE/WIN,
with restart from the end screens straight back into PLAYING. All session
state lives in one GameContext that each mode handler receives and
mutates; nothing is kept in module globals.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from .animation import AnimationClip
from .camera import Camera
from .config import GameConfig
from .constraints import ConfigConstraints
from .entities import Player
from .input import InputProvider, ScriptedInput
from .level_gen import Level, LevelGenerator
from .physics import apply_gravity, check_overlap, resolve_collisions
from .pursuit import PursuerBase, create_pursuer
from .render import GameUI, RenderProxy

logger = logging.getLogger(__name__)

WIN_MESSAGE = "ALL METAL COLLECTED!"
CAUGHT_MESSAGE = "CAUGHT BY THE POLICE!"
FELL_MESSAGE = "FELL INTO THE PIT!"


class GameMode(Enum):
    MENU = "menu"
    INTRO = "intro"
    PLAYING = "playing"
    ARREST = "arrest"
    CELEBRATION = "celebration"
    WIN = "win"
    LOSE = "lose"


# Modes in which the outcome of the round is already decided
DECIDED_MODES = (GameMode.ARREST, GameMode.CELEBRATION, GameMode.WIN, GameMode.LOSE)


@dataclass
class GameContext:
    """Everything one game session needs, replaced wholesale on restart.

    events collects what happened during the latest update() call
    ("collect", "bonus", "shock", "caught", "fell", "win") for consumers
    such as reward functions. It is cleared at the start of every update.
    """
    mode: GameMode = GameMode.MENU
    level: Optional[Level] = None
    player: Optional[Player] = None
    pursuer: Optional[PursuerBase] = None
    camera: Optional[Camera] = None
    collected: int = 0
    total: int = 0
    mode_timer: float = 0.0
    intro_phase: int = 0
    aperture_radius: float = 0.0
    capture_started: bool = False
    pursuer_armed: bool = False
    outcome: Optional[str] = None
    message: str = ""
    frame: int = 0
    events: List[str] = field(default_factory=list)

    @property
    def decided(self) -> bool:
        return self.mode in DECIDED_MODES


class GameStateMachine:
    """Drives one game session frame by frame.

    Args:
        config: Game configuration, validated on construction.
        controls: Input provider polled every frame.
        ui: HUD/overlay collaborator.
        proxy_factory: Called with an entity kind ("platform", "collectible",
            "bonus", "player", "pursuer") to create its render handle.
        animations: Clip sets keyed by entity kind ("player", "pursuer")
            plus an optional "bonus" clip.
        seed: Base seed. Each new level draws its seed from it.

    Raises:
        ValueError: If the configuration has error-level violations.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        controls: Optional[InputProvider] = None,
        ui: Optional[GameUI] = None,
        proxy_factory: Optional[Callable[[str], RenderProxy]] = None,
        animations: Optional[Dict[str, object]] = None,
        seed: Optional[int] = None,
    ):
        self.config = config or GameConfig()
        result = ConfigConstraints.validate(self.config)
        for w in result.warnings:
            logger.warning("Config %s: %s", w.param, w.message)
        if not result:
            raise ValueError(
                "Invalid game config: " + "; ".join(f"{e.param}: {e.message}" for e in result.errors)
            )

        self.controls = controls or ScriptedInput()
        self.ui = ui or GameUI()
        self.proxy_factory = proxy_factory
        self.animations = animations or {}

        bonus_clip = self.animations.get("bonus")
        self.generator = LevelGenerator.from_config(
            self.config,
            proxy_factory=proxy_factory,
            bonus_clip=bonus_clip if isinstance(bonus_clip, AnimationClip) else None,
        )
        self.rng = random.Random(seed)
        self.ctx = GameContext()

        self._handlers = {
            GameMode.MENU: self._update_menu,
            GameMode.INTRO: self._update_intro,
            GameMode.PLAYING: self._update_playing,
            GameMode.ARREST: self._update_arrest,
            GameMode.CELEBRATION: self._update_celebration,
            GameMode.WIN: self._update_end,
            GameMode.LOSE: self._update_end,
        }

    @property
    def mode(self) -> GameMode:
        return self.ctx.mode

    def update(self, dt: float = 1.0) -> GameContext:
        """Advance the active mode by dt frames."""
        ctx = self.ctx
        ctx.events.clear()
        ctx.frame += 1
        self._handlers[ctx.mode](ctx, dt)
        return self.ctx

    # --- Session setup ---

    def _proxy(self, kind: str) -> Optional[RenderProxy]:
        if self.proxy_factory is None:
            return None
        return self.proxy_factory(kind)

    def new_game(self, seed: Optional[int] = None) -> GameContext:
        """Tear down the current level and build a fresh session in MENU."""
        old = self.ctx
        if old.level is not None:
            old.level.teardown()

        if seed is None:
            seed = self.rng.randrange(2 ** 31)
        level = self.generator.generate(seed)

        x, y = level.start_position
        player = Player(
            x, y, self.config.physics,
            animations=self.animations.get("player"),
            proxy=self._proxy("player"),
        )
        pursuer = create_pursuer(
            0.0, self.config.world.ground_y - self.config.pursuer.height, self.config,
            animations=self.animations.get("pursuer"),
            proxy=self._proxy("pursuer"),
        )
        camera = Camera(self.config)
        camera.snap_to(player.body.center)

        self.ctx = GameContext(
            level=level,
            player=player,
            pursuer=pursuer,
            camera=camera,
            total=level.total_collectibles,
        )
        self.ui.update_hud(0, level.total_collectibles)
        return self.ctx

    def _enter(self, ctx: GameContext, mode: GameMode) -> None:
        """Switch mode. Every mode starts with fresh timers."""
        logger.info("Mode %s -> %s", ctx.mode.name, mode.name)
        ctx.mode = mode
        ctx.mode_timer = 0.0
        ctx.capture_started = False

    def start(self, seed: Optional[int] = None) -> GameContext:
        """Build a level and begin the intro sequence."""
        ctx = self.new_game(seed)
        cutscene = self.config.cutscene
        ctx.camera.set_zoom(cutscene.intro_zoom)
        ctx.camera.zoom_to(cutscene.intro_zoom, ctx.player.body.center)
        ctx.camera.snap_to(ctx.player.body.center)
        ctx.intro_phase = 1
        ctx.aperture_radius = 0.0
        self._enter(ctx, GameMode.INTRO)
        return ctx

    def start_playing(self, seed: Optional[int] = None) -> GameContext:
        """Build a level and go straight to PLAYING, skipping the intro."""
        ctx = self.new_game(seed)
        ctx.aperture_radius = self.full_aperture
        self._enter(ctx, GameMode.PLAYING)
        return ctx

    def restart(self, seed: Optional[int] = None) -> GameContext:
        self.ui.hide()
        ctx = self.start_playing(seed)
        self.ui.show_touch_controls()
        return ctx

    @property
    def full_aperture(self) -> float:
        world = self.config.world
        return math.hypot(world.screen_width, world.screen_height)

    # --- Mode handlers ---

    def _update_menu(self, ctx: GameContext, dt: float) -> None:
        if self.controls.is_start():
            self.start()

    def _update_intro(self, ctx: GameContext, dt: float) -> None:
        cutscene = self.config.cutscene
        ctx.mode_timer += dt
        t = ctx.mode_timer
        open_end = cutscene.intro_open_duration
        hold_end = open_end + cutscene.intro_hold_duration
        reveal_end = hold_end + cutscene.intro_reveal_duration

        if t < open_end:
            ctx.intro_phase = 1
            ctx.aperture_radius = cutscene.intro_small_radius * t / open_end
        elif t < hold_end:
            ctx.intro_phase = 2
            ctx.aperture_radius = cutscene.intro_small_radius
        elif t < reveal_end:
            ctx.intro_phase = 3
            p = (t - hold_end) / cutscene.intro_reveal_duration
            ctx.aperture_radius = cutscene.intro_small_radius + (
                self.full_aperture - cutscene.intro_small_radius) * p
            base = self.config.camera.zoom
            ctx.camera.set_zoom(cutscene.intro_zoom + (base - cutscene.intro_zoom) * p)
        else:
            ctx.aperture_radius = self.full_aperture
            ctx.camera.clear_focus()
            ctx.camera.set_zoom(self.config.camera.zoom)
            self._enter(ctx, GameMode.PLAYING)
            self.ui.show_touch_controls()

        ctx.player.sync()
        ctx.camera.update(ctx.player.body.center, dt)

    def _update_playing(self, ctx: GameContext, dt: float) -> None:
        level, player, pursuer = ctx.level, ctx.player, ctx.pursuer
        platforms = level.platforms
        world = self.config.world

        if not ctx.pursuer_armed and self.controls.any_action():
            ctx.pursuer_armed = True
            pursuer.activate()

        player.update(dt, self.controls, world.world_width)
        apply_gravity(player.body, self.config.physics, dt)
        resolve_collisions(player.body, platforms)

        pursuer.update(dt, platforms, player)
        self._sink_platforms(ctx, dt)
        player.sync()
        pursuer.sync()

        picked_up = False
        for item in level.collectibles:
            item.update(dt)
            if not item.collected and check_overlap(player.body, item) and item.collect():
                picked_up = True
                ctx.collected += 1
                ctx.events.append("collect")
                self.ui.update_hud(ctx.collected, ctx.total)
                logger.info("Collected %d/%d", ctx.collected, ctx.total)

        bonus = level.bonus
        if bonus is not None:
            if not bonus.triggered and check_overlap(player.body, bonus):
                bonus.trigger()
                ctx.events.append("bonus")
                if pursuer.active:
                    pursuer.play_shock()
            bonus.update(dt)

        if (player.attacking and pursuer.active and not pursuer.shocked
                and check_overlap(player.attack_box(), pursuer.body)):
            pursuer.play_shock()
            ctx.events.append("shock")

        if (pursuer.active and not pursuer.shocked
                and pursuer.distance_to(player) < self.config.pursuer.catch_distance):
            ctx.outcome = "caught"
            ctx.events.append("caught")
            self._enter(ctx, GameMode.ARREST)
        elif player.body.y > world.world_height + world.pit_margin:
            ctx.outcome = "fell"
            ctx.events.append("fell")
            self._finish(ctx, GameMode.LOSE, FELL_MESSAGE)
        elif picked_up and ctx.collected >= ctx.total:
            # Only a pickup can win, so an empty level never does
            ctx.outcome = "win"
            ctx.events.append("win")
            self._enter(ctx, GameMode.CELEBRATION)

        ctx.camera.update(player.body.center, dt)

    def _sink_platforms(self, ctx: GameContext, dt: float) -> None:
        """Sink occupied platforms, carrying whoever stands on them."""
        platforms = ctx.level.platforms
        bodies = [ctx.player.body, ctx.pursuer.body]
        occupied = {}
        for body in bodies:
            plat = body.grounded_on(platforms)
            if plat is not None and plat.sinkable:
                occupied.setdefault(body.grounded_platform, []).append(body)

        speed = self.config.physics.sink_speed
        for index, riders in occupied.items():
            delta = platforms[index].sink(dt, speed, self.config.world.ground_y)
            for body in riders:
                body.y += delta

    def _settle_player(self, ctx: GameContext, dt: float) -> None:
        player = ctx.player
        player.freeze_horizontal()
        apply_gravity(player.body, self.config.physics, dt)
        resolve_collisions(player.body, ctx.level.platforms)
        player.anim.update(dt)
        player.sync()

    def _below_pit(self, body) -> bool:
        world = self.config.world
        return body.y > world.world_height + world.pit_margin

    def _update_arrest(self, ctx: GameContext, dt: float) -> None:
        player, pursuer = ctx.player, ctx.pursuer
        self._settle_player(ctx, dt)
        pursuer.settle(dt, ctx.level.platforms)

        if not ctx.capture_started:
            landed = all(
                b.is_grounded or self._below_pit(b) for b in (player.body, pursuer.body)
            )
            if landed:
                ctx.capture_started = True
                ctx.mode_timer = 0.0
                pursuer.play_arrest()
                # The arrest clip shows both actors
                player.proxy.set_visible(False)
                midpoint = (player.body.center + pursuer.body.center) / 2
                ctx.camera.zoom_to(self.config.cutscene.arrest_zoom, midpoint)
        else:
            ctx.mode_timer += dt
            if ctx.mode_timer >= self.config.cutscene.arrest_duration:
                self._finish(ctx, GameMode.LOSE, CAUGHT_MESSAGE)

        ctx.camera.update(player.body.center, dt)

    def _update_celebration(self, ctx: GameContext, dt: float) -> None:
        player = ctx.player
        self._settle_player(ctx, dt)
        ctx.pursuer.settle(dt, ctx.level.platforms)

        if not ctx.capture_started:
            if self._below_pit(player.body):
                ctx.outcome = "fell"
                ctx.events.append("fell")
                self._finish(ctx, GameMode.LOSE, FELL_MESSAGE)
                return
            if player.body.is_grounded:
                ctx.capture_started = True
                ctx.mode_timer = 0.0
                player.play_celebration()
                ctx.camera.zoom_to(self.config.cutscene.celebration_zoom, player.body.center)
        else:
            ctx.mode_timer += dt
            if ctx.mode_timer >= self.config.cutscene.celebration_duration:
                self._finish(ctx, GameMode.WIN, WIN_MESSAGE)

        ctx.camera.update(player.body.center, dt)

    def _finish(self, ctx: GameContext, mode: GameMode, message: str) -> None:
        ctx.message = message
        self.ui.hide_touch_controls()
        self.ui.show(message)
        self._enter(ctx, mode)

    def _update_end(self, ctx: GameContext, dt: float) -> None:
        if self.controls.is_restart():
            self.restart()
