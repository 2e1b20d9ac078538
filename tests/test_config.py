"""Tests for configuration system."""

import pytest

from chase_platformer.config import (
    PhysicsConfig, WorldConfig, LayoutConfig, PursuerConfig,
    CameraConfig, CutsceneConfig, GameConfig, CONFIGS, get_config,
)


class TestPhysicsConfig:
    def test_defaults(self):
        p = PhysicsConfig()
        assert p.gravity == 0.5
        assert p.jump_force < 0
        assert p.player_speed == 4.0

    def test_jump_apex(self):
        p = PhysicsConfig(gravity=0.5, jump_force=-10.0)
        assert p.jump_apex == pytest.approx(100.0)

    def test_sink_speed_is_one_height_per_second(self):
        p = PhysicsConfig(player_height=60.0)
        assert p.sink_speed == pytest.approx(1.0)

    def test_sample_within_ranges(self):
        for _ in range(20):
            p = PhysicsConfig.sample()
            assert PhysicsConfig.GRAVITY_RANGE[0] <= p.gravity <= PhysicsConfig.GRAVITY_RANGE[1]
            assert PhysicsConfig.PLAYER_SPEED_RANGE[0] <= p.player_speed <= PhysicsConfig.PLAYER_SPEED_RANGE[1]


class TestLayoutConfig:
    def test_sample_within_ranges(self):
        for _ in range(20):
            layout = LayoutConfig.sample()
            lo, hi = LayoutConfig.PLATFORM_COUNT_RANGE
            assert lo <= layout.platform_count <= hi
            lo, hi = LayoutConfig.COLLECTIBLE_COUNT_RANGE
            assert lo <= layout.collectible_count <= hi

    def test_generator_step_matches_pursuer_jump(self):
        # Every generated step up must be one the pursuer plans jumps for
        assert LayoutConfig().max_jump_height == PursuerConfig().max_jump_height == 50.0


class TestGameConfig:
    def test_groups_present(self):
        config = GameConfig()
        assert isinstance(config.physics, PhysicsConfig)
        assert isinstance(config.world, WorldConfig)
        assert isinstance(config.layout, LayoutConfig)
        assert isinstance(config.pursuer, PursuerConfig)
        assert isinstance(config.camera, CameraConfig)
        assert isinstance(config.cutscene, CutsceneConfig)

    def test_pursuer_speed_defaults_to_player_speed(self):
        config = GameConfig(physics=PhysicsConfig(player_speed=5.0))
        assert config.pursuer_speed == 5.0

    def test_pursuer_speed_override(self):
        config = GameConfig(pursuer=PursuerConfig(speed=3.0))
        assert config.pursuer_speed == 3.0

    def test_to_dict_from_dict_preserves_values(self):
        config = GameConfig(
            physics=PhysicsConfig(gravity=0.6),
            pursuer=PursuerConfig(mode="trail", trail_lag=5),
        )
        restored = GameConfig.from_dict(config.to_dict())
        assert restored == config

    def test_from_dict_fills_missing_and_ignores_unknown(self):
        config = GameConfig.from_dict({
            "layout": {"platform_count": 3, "bogus": 1},
        })
        assert config.layout.platform_count == 3
        assert config.physics == PhysicsConfig()

    def test_sample_full(self):
        config = GameConfig.sample_full()
        assert isinstance(config, GameConfig)


class TestPresets:
    def test_expected_presets(self):
        assert {"default", "easy", "hard", "trail", "tiny"} <= set(CONFIGS)

    def test_trail_preset_mode(self):
        assert get_config("trail").pursuer.mode == "trail"

    def test_unknown_preset_raises(self):
        with pytest.raises(ValueError):
            get_config("nope")

    def test_get_config_returns_copy(self):
        config = get_config("default")
        config.physics.gravity = 99.0
        assert get_config("default").physics.gravity != 99.0
