"""Pytest configuration and shared fixtures."""

import os

# Ensure headless pygame for all tests
os.environ['SDL_VIDEODRIVER'] = 'dummy'

import pytest

from chase_platformer.config import GameConfig, get_config
from chase_platformer.entities import Platform
from chase_platformer.input import ScriptedInput
from chase_platformer.physics import DynamicBody


@pytest.fixture
def game_config():
    """Default game configuration."""
    return GameConfig()


@pytest.fixture
def tiny_config():
    """Small world for quick whole-game runs."""
    return get_config("tiny")


@pytest.fixture
def controls():
    return ScriptedInput()


@pytest.fixture
def ground(game_config):
    """Full-width ground slab, not sinkable."""
    world = game_config.world
    return Platform(0.0, world.ground_y, world.world_width, world.ground_height, sinkable=False)


@pytest.fixture
def standing_body(game_config):
    """Player-sized body resting on the default ground line."""
    physics = game_config.physics
    return DynamicBody(
        100.0, game_config.world.ground_y - physics.player_height,
        physics.player_width, physics.player_height,
        is_grounded=True, grounded_platform=0,
    )
