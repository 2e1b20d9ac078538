"""Tests for level generation."""

import pytest

from chase_platformer.config import GameConfig, LayoutConfig, WorldConfig, get_config
from chase_platformer.level_gen import LevelGenerator, Level, horizontal_gap, reachable_platforms
from chase_platformer.entities import Platform
from chase_platformer.render import RectProxy


@pytest.fixture
def generator(game_config):
    return LevelGenerator.from_config(game_config)


class TestHorizontalGap:
    def test_overlapping_is_zero(self):
        assert horizontal_gap(10, 50, Platform(40, 0, 50)) == 0.0

    def test_gap_either_side(self):
        assert horizontal_gap(200, 50, Platform(100, 0, 50)) == 50
        assert horizontal_gap(0, 50, Platform(100, 0, 50)) == 50


class TestLevelGenerator:
    def test_generate_returns_level(self, generator):
        level = generator.generate(seed=1)
        assert isinstance(level, Level)
        assert level.ground is level.platforms[0]
        assert not level.ground.sinkable

    def test_platform_count(self, generator):
        level = generator.generate(seed=42)
        # 10 floating + ground
        assert len(level.platforms) == 11

    def test_collectible_count(self, generator, game_config):
        level = generator.generate(seed=42)
        assert len(level.collectibles) == game_config.layout.collectible_count

    def test_collectibles_capped_by_platforms(self):
        config = GameConfig(layout=LayoutConfig(platform_count=3, collectible_count=10))
        level = LevelGenerator.from_config(config).generate(seed=3)
        assert len(level.collectibles) == 3

    def test_seed_is_reproducible(self, generator):
        a = generator.generate(seed=42)
        b = generator.generate(seed=42)
        assert [(p.x, p.y, p.width) for p in a.platforms] == [(p.x, p.y, p.width) for p in b.platforms]
        assert [(c.x, c.y) for c in a.collectibles] == [(c.x, c.y) for c in b.collectibles]

    def test_different_seeds_differ(self, generator):
        a = generator.generate(seed=1)
        b = generator.generate(seed=2)
        assert [p.y for p in a.platforms] != [p.y for p in b.platforms]

    def test_platforms_respect_safe_zone_and_bounds(self, generator, game_config):
        layout = game_config.layout
        for seed in range(20):
            level = generator.generate(seed=seed)
            for plat in level.platforms[1:]:
                assert plat.x >= layout.safe_zone
                assert plat.x + plat.width <= game_config.world.world_width + 1e-6
                assert layout.min_platform_y <= plat.y <= game_config.world.ground_y - layout.platform_height

    def test_one_platform_per_column(self, generator, game_config):
        layout = game_config.layout
        column_width = (game_config.world.world_width - layout.safe_zone) / layout.platform_count
        level = generator.generate(seed=5)
        for i, plat in enumerate(level.platforms[1:]):
            col_x = layout.safe_zone + i * column_width
            assert col_x <= plat.x < col_x + column_width

    def test_start_position_on_ground(self, generator, game_config):
        level = generator.generate(seed=0)
        x, y = level.start_position
        assert x == game_config.layout.start_x
        assert y + game_config.physics.player_height == game_config.world.ground_y

    @pytest.mark.parametrize("name", ["default", "hard", "tiny"])
    def test_all_platforms_reachable(self, name):
        config = get_config(name)
        gen = LevelGenerator.from_config(config)
        for seed in range(50):
            level = gen.generate(seed=seed)
            reached = reachable_platforms(level.platforms, config.layout)
            assert reached == set(range(len(level.platforms))), f"seed {seed}"

    def test_fallback_when_no_reference_nearby(self):
        # Empty reachability band: no placement attempt can succeed
        config = GameConfig(
            world=WorldConfig(world_width=1400.0),
            layout=LayoutConfig(platform_count=2, max_jump_height=0.0, max_fall=0.0),
        )
        level = LevelGenerator.from_config(config).generate(seed=9)
        assert len(level.platforms) == 3
        assert level.fallback_columns == [0, 1]
        for plat in level.platforms[1:]:
            assert plat.y == config.world.ground_y - config.layout.fallback_height
            assert plat.width == config.layout.fallback_width

    def test_collectibles_centered_on_platforms(self, game_config):
        config = GameConfig(layout=LayoutConfig(bonus_enabled=False))
        level = LevelGenerator.from_config(config).generate(seed=11)
        tops = {(p.x + p.width / 2, p.y) for p in level.platforms[1:]}
        for c in level.collectibles:
            center = c.x + c.width / 2
            assert any(abs(center - cx) < 1e-6 and abs(c.y + c.height - py) < 1e-6 for cx, py in tops)

    def test_bonus_object_placed(self, generator):
        level = generator.generate(seed=4)
        assert level.bonus is not None
        assert not level.bonus.triggered

    def test_proxy_factory_called_per_entity(self, game_config):
        kinds = []

        def factory(kind):
            kinds.append(kind)
            return RectProxy()

        level = LevelGenerator.from_config(game_config, proxy_factory=factory).generate(seed=0)
        assert kinds.count("platform") == len(level.platforms)
        assert kinds.count("collectible") == len(level.collectibles)
        assert kinds.count("bonus") == 1


class TestLevel:
    def test_collected_count(self, generator):
        level = generator.generate(seed=0)
        assert level.collected_count == 0
        level.collectibles[0].collect()
        assert level.collected_count == 1
        assert not level.all_collected
        for c in level.collectibles:
            c.collect()
        assert level.all_collected

    def test_empty_level_is_not_all_collected(self):
        config = GameConfig(layout=LayoutConfig(collectible_count=0))
        level = LevelGenerator.from_config(config).generate(seed=0)
        assert level.collectibles == []
        assert not level.all_collected

    def test_teardown_invalidates_platforms(self, generator):
        level = generator.generate(seed=0)
        level.teardown()
        assert not any(p.alive for p in level.platforms)


class TestReachablePlatforms:
    def test_unreachable_platform_detected(self):
        layout = LayoutConfig()
        platforms = [
            Platform(0, 540, 1000, 60, sinkable=False),
            Platform(100, 500, 100),
            Platform(100, 100, 100),  # far too high
        ]
        assert reachable_platforms(platforms, layout) == {0, 1}
