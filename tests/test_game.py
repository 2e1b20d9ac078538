"""Tests for the game state machine."""

import pytest

from chase_platformer.config import GameConfig, LayoutConfig, PhysicsConfig, get_config
from chase_platformer.game import (
    CAUGHT_MESSAGE, FELL_MESSAGE, WIN_MESSAGE, GameMode, GameStateMachine,
)
from chase_platformer.input import ScriptedInput
from chase_platformer.render import GameUI


class RecordingUI(GameUI):
    def __init__(self):
        self.hud = []
        self.shown = []
        self.hidden = 0
        self.touch = None

    def update_hud(self, collected, total):
        self.hud.append((collected, total))

    def show(self, message):
        self.shown.append(message)

    def hide(self):
        self.hidden += 1

    def show_touch_controls(self):
        self.touch = True

    def hide_touch_controls(self):
        self.touch = False


@pytest.fixture
def ui():
    return RecordingUI()


@pytest.fixture
def config():
    config = get_config("tiny")
    config.pursuer.activation_delay = 0.0
    return config


@pytest.fixture
def game(config, controls, ui):
    return GameStateMachine(config, controls=controls, ui=ui, seed=7)


def run_until(game, mode, limit=1000):
    for _ in range(limit):
        if game.mode == mode:
            return True
        game.update(1.0)
    return game.mode == mode


def stand_player_on(player, x, top):
    player.body.x = x
    player.body.y = top - player.body.height
    player.body.velocity_y = 0.0


class TestConstruction:
    def test_starts_in_menu(self, game):
        assert game.mode == GameMode.MENU
        game.update(1.0)
        assert game.mode == GameMode.MENU
        assert game.ctx.level is None

    def test_invalid_config_raises(self):
        with pytest.raises(ValueError):
            GameStateMachine(GameConfig(physics=PhysicsConfig(jump_force=5.0)))

    def test_same_seed_same_levels(self, config):
        a = GameStateMachine(config, seed=3).start_playing()
        b = GameStateMachine(config, seed=3).start_playing()
        assert [(p.x, p.y) for p in a.level.platforms] == [(p.x, p.y) for p in b.level.platforms]


class TestIntro:
    def test_start_input_enters_intro(self, game, controls, ui):
        controls.start = True
        game.update(1.0)
        assert game.mode == GameMode.INTRO
        assert game.ctx.level is not None
        assert ui.hud[-1] == (0, game.ctx.total)

    def test_intro_phases(self, game, config):
        ctx = game.start()
        cutscene = config.cutscene
        for _ in range(15):
            game.update(1.0)
        assert ctx.intro_phase == 1
        assert ctx.aperture_radius == pytest.approx(cutscene.intro_small_radius / 2)

        for _ in range(35):
            game.update(1.0)
        assert ctx.intro_phase == 2
        assert ctx.aperture_radius == pytest.approx(cutscene.intro_small_radius)

        for _ in range(50):
            game.update(1.0)
        assert ctx.intro_phase == 3
        assert config.camera.zoom < ctx.camera.zoom < cutscene.intro_zoom

    def test_intro_ends_in_playing(self, game, config, ui):
        ctx = game.start()
        total = (config.cutscene.intro_open_duration + config.cutscene.intro_hold_duration
                 + config.cutscene.intro_reveal_duration)
        for _ in range(int(total)):
            game.update(1.0)
        assert game.mode == GameMode.PLAYING
        assert ui.touch is True
        assert ctx.aperture_radius == pytest.approx(game.full_aperture)
        assert ctx.camera.zoom == config.camera.zoom
        assert ctx.camera.focus_override is None

    def test_intro_ignores_controls(self, game, controls):
        ctx = game.start()
        x = ctx.player.body.x
        controls.right = True
        for _ in range(20):
            game.update(1.0)
        assert ctx.player.body.x == x
        assert not ctx.pursuer_armed


class TestPlaying:
    def test_pursuer_armed_on_first_input(self, game, controls):
        ctx = game.start_playing()
        for _ in range(10):
            game.update(1.0)
        assert not ctx.pursuer_armed
        assert not ctx.pursuer.activated
        controls.right = True
        game.update(1.0)
        assert ctx.pursuer_armed
        assert ctx.pursuer.activated

    def test_player_moves_and_lands(self, game, controls):
        ctx = game.start_playing()
        controls.right = True
        for _ in range(10):
            game.update(1.0)
        assert ctx.player.body.x > ctx.level.start_position[0]
        assert ctx.player.body.is_grounded

    def test_collect_once(self, game, ui):
        ctx = game.start_playing()
        item = ctx.level.collectibles[0]
        stand_player_on(ctx.player, item.x, item.y + item.height)
        game.update(1.0)
        assert item.collected
        assert ctx.collected == 1
        assert "collect" in ctx.events
        assert ui.hud[-1] == (1, ctx.total)

        game.update(1.0)
        assert ctx.collected == 1
        assert "collect" not in ctx.events

    def test_collecting_all_wins(self, game, ui, config):
        ctx = game.start_playing()
        for item in ctx.level.collectibles:
            stand_player_on(ctx.player, item.x, item.y + item.height)
            game.update(1.0)
            assert item.collected
        assert game.mode == GameMode.CELEBRATION
        assert ctx.collected == ctx.total
        assert run_until(game, GameMode.WIN)
        assert ctx.message == WIN_MESSAGE
        assert ui.shown[-1] == WIN_MESSAGE
        assert ctx.player.state == "winning"

    @pytest.mark.parametrize("layout", [
        LayoutConfig(collectible_count=0),
        LayoutConfig(platform_count=0),
    ])
    def test_empty_level_never_wins(self, layout):
        game = GameStateMachine(GameConfig(layout=layout), seed=2)
        ctx = game.start_playing()
        assert ctx.total == 0
        for _ in range(30):
            game.update(1.0)
        assert game.mode == GameMode.PLAYING
        assert ctx.outcome is None

    def test_catch_leads_to_arrest_then_lose(self, game, controls, ui, config):
        ctx = game.start_playing()
        controls.right = True
        game.update(1.0)
        controls.right = False
        assert ctx.pursuer.active

        ctx.pursuer.body.x = ctx.player.body.x
        ctx.pursuer.body.y = ctx.player.body.y
        game.update(1.0)
        assert game.mode == GameMode.ARREST
        assert "caught" in ctx.events

        game.update(1.0)
        assert ctx.capture_started
        assert ctx.pursuer.current_state == "arrest"
        assert ctx.camera.focus_override is not None

        for _ in range(int(config.cutscene.arrest_duration) - 2):
            game.update(1.0)
        assert game.mode == GameMode.ARREST
        assert run_until(game, GameMode.LOSE, limit=5)
        assert ctx.message == CAUGHT_MESSAGE
        assert ui.touch is False

    def test_arrest_freezes_horizontal_motion(self, game, controls):
        ctx = game.start_playing()
        controls.right = True
        game.update(1.0)
        ctx.pursuer.body.x = ctx.player.body.x - 10
        game.update(1.0)
        assert game.mode == GameMode.ARREST
        x = ctx.player.body.x
        for _ in range(5):
            game.update(1.0)
        assert ctx.player.body.x == x
        assert ctx.player.body.velocity_x == 0.0

    def test_falling_into_pit_loses(self, game, ui):
        ctx = game.start_playing()
        ctx.player.body.y = 5000.0
        game.update(1.0)
        assert game.mode == GameMode.LOSE
        assert ctx.outcome == "fell"
        assert ui.shown[-1] == FELL_MESSAGE

    def test_sinking_platform_carries_player(self, game, config):
        ctx = game.start_playing()
        plat = ctx.level.platforms[1]
        other = ctx.level.platforms[2]
        other_y = other.y
        stand_player_on(ctx.player, plat.x + 1, plat.y)
        game.update(1.0)
        y_after_first = plat.y
        game.update(1.0)
        assert plat.y == pytest.approx(y_after_first + config.physics.sink_speed)
        assert ctx.player.body.y + ctx.player.body.height == pytest.approx(plat.y)
        assert other.y == other_y

    def test_bonus_shocks_pursuer(self, game, controls):
        ctx = game.start_playing()
        controls.right = True
        game.update(1.0)
        controls.right = False
        assert ctx.pursuer.active

        bonus = ctx.level.bonus
        stand_player_on(ctx.player, bonus.x, bonus.y + bonus.height)
        game.update(1.0)
        assert bonus.triggered
        assert "bonus" in ctx.events
        assert ctx.pursuer.shocked

    def test_robot_attack_shocks_pursuer(self, game, controls):
        ctx = game.start_playing()
        controls.right = True
        game.update(1.0)
        controls.right = False
        player = ctx.player
        player.is_robot = True
        player.facing_right = True
        # Inside the attack box but beyond catch distance
        ctx.pursuer.body.x = player.body.x + player.body.width + 10
        controls.attack = True
        game.update(1.0)
        assert ctx.pursuer.shocked
        assert "shock" in ctx.events
        assert game.mode == GameMode.PLAYING

    def test_camera_stays_in_world(self, game, controls):
        ctx = game.start_playing()
        controls.right = True
        world = game.config.world
        for i in range(400):
            controls.jump = i % 30 == 0
            game.update(1.0)
            if ctx.decided:
                break
            left, top, width, height = ctx.camera.view_rect()
            assert -1e-6 <= left and left + width <= world.world_width + 1e-6
            assert -1e-6 <= top and top + height <= world.world_height + 1e-6


class TestRestart:
    def test_restart_from_lose(self, game, controls, ui):
        ctx = game.start_playing()
        old_platforms = ctx.level.platforms
        ctx.player.body.y = 5000.0
        game.update(1.0)
        assert game.mode == GameMode.LOSE

        game.update(1.0)
        assert game.mode == GameMode.LOSE

        controls.restart = True
        game.update(1.0)
        assert game.mode == GameMode.PLAYING
        assert game.ctx is not ctx
        assert game.ctx.collected == 0
        assert not game.ctx.pursuer_armed
        assert not any(p.alive for p in old_platforms)
        assert ui.hidden == 1
        assert ui.hud[-1] == (0, game.ctx.total)
