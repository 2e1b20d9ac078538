"""chase-platformer: 2D side-scrolling chase platformer simulation core.

The player collects items across a procedurally generated, always
traversable platform field while a pursuer gives chase. The package
provides the headless simulation (physics, level generation, pursuit AI,
camera and game state machine), a pygame front end and a
Gymnasium-compatible environment.
"""

from .config import (
    PhysicsConfig, WorldConfig, LayoutConfig, PursuerConfig,
    CameraConfig, CutsceneConfig, GameConfig, CONFIGS, get_config,
)
from .constraints import ConfigConstraints, ConstraintResult, ConstraintViolation
from .physics import DynamicBody, apply_gravity, resolve_collisions, check_overlap
from .animation import AnimationClip, AnimatedStateMachine
from .entities import Player, Platform, Collectible, BonusObject
from .level_gen import LevelGenerator, Level, reachable_platforms
from .pursuit import Pursuer, TrailPursuer, Trail, should_jump, create_pursuer
from .camera import Camera
from .game import GameMode, GameContext, GameStateMachine

__all__ = [
    "PhysicsConfig",
    "WorldConfig",
    "LayoutConfig",
    "PursuerConfig",
    "CameraConfig",
    "CutsceneConfig",
    "GameConfig",
    "CONFIGS",
    "get_config",
    "ConfigConstraints",
    "ConstraintResult",
    "ConstraintViolation",
    "DynamicBody",
    "apply_gravity",
    "resolve_collisions",
    "check_overlap",
    "AnimationClip",
    "AnimatedStateMachine",
    "Player",
    "Platform",
    "Collectible",
    "BonusObject",
    "LevelGenerator",
    "Level",
    "reachable_platforms",
    "Pursuer",
    "TrailPursuer",
    "Trail",
    "should_jump",
    "create_pursuer",
    "Camera",
    "GameMode",
    "GameContext",
    "GameStateMachine",
]
