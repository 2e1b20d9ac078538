"""Configuration constraints for solvable chase levels.

Checks that a GameConfig describes a game that can be played:
1. Individual parameters are in a sane range
2. Cross-parameter consistency (generated platforms must be jumpable
   with the configured physics)

A "valid" config means the level is POSSIBLE to complete, not that it is
easy. Warnings flag configurations that work but feel wrong.
"""

from dataclasses import dataclass
from typing import List

from .config import GameConfig, PhysicsConfig, LayoutConfig, WorldConfig


@dataclass
class ConstraintViolation:
    """Describes a constraint violation."""
    param: str
    message: str
    severity: str  # "error" = unplayable, "warning" = playable but odd


@dataclass
class ConstraintResult:
    """Result of constraint validation."""
    valid: bool
    violations: List[ConstraintViolation]

    def __bool__(self) -> bool:
        return self.valid

    @property
    def errors(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == "warning"]


def _result(violations: List[ConstraintViolation]) -> ConstraintResult:
    errors = [v for v in violations if v.severity == "error"]
    return ConstraintResult(valid=len(errors) == 0, violations=violations)


class ConfigConstraints:
    """Defines and checks constraints on game parameters."""

    @classmethod
    def validate_physics(cls, physics: PhysicsConfig) -> ConstraintResult:
        """Validate physics config."""
        violations = []

        if physics.gravity <= 0:
            violations.append(ConstraintViolation(
                "gravity", f"Gravity {physics.gravity} must be positive (down)", "error"
            ))
        if physics.jump_force >= 0:
            violations.append(ConstraintViolation(
                "jump_force", f"Jump force {physics.jump_force} must be negative (up)", "error"
            ))
        if physics.max_fall_speed <= 0:
            violations.append(ConstraintViolation(
                "max_fall_speed", f"Max fall speed {physics.max_fall_speed} must be positive", "error"
            ))
        if physics.player_speed <= 0:
            violations.append(ConstraintViolation(
                "player_speed", f"Player speed {physics.player_speed} must be positive", "error"
            ))

        return _result(violations)

    @classmethod
    def validate_layout(
        cls, layout: LayoutConfig, world: WorldConfig, physics: PhysicsConfig
    ) -> ConstraintResult:
        """Validate layout config against world size and physics capabilities."""
        violations = []

        if layout.platform_count < 0:
            violations.append(ConstraintViolation(
                "platform_count", f"Platform count {layout.platform_count} < 0", "error"
            ))
        if layout.collectible_count < 0:
            violations.append(ConstraintViolation(
                "collectible_count", f"Collectible count {layout.collectible_count} < 0", "error"
            ))
        if layout.platform_min_width > layout.platform_max_width:
            violations.append(ConstraintViolation(
                "platform_min_width",
                f"Min width {layout.platform_min_width} > max width {layout.platform_max_width}",
                "error"
            ))

        if layout.platform_count > 0:
            column_width = (world.world_width - layout.safe_zone) / layout.platform_count
            if column_width < layout.platform_min_width:
                violations.append(ConstraintViolation(
                    "platform_count",
                    f"Column width {column_width:.0f} < min platform width {layout.platform_min_width}",
                    "error"
                ))

        # Platforms placed up to max_jump_height above a reference must be jumpable
        if physics.gravity > 0 and physics.jump_apex < layout.max_jump_height:
            violations.append(ConstraintViolation(
                "max_jump_height",
                f"Jump apex {physics.jump_apex:.0f} < generator max jump height {layout.max_jump_height}",
                "error"
            ))

        return _result(violations)

    @classmethod
    def validate(cls, config: GameConfig) -> ConstraintResult:
        """Validate complete game config."""
        violations = []
        violations.extend(cls.validate_physics(config.physics).violations)
        violations.extend(
            cls.validate_layout(config.layout, config.world, config.physics).violations
        )

        if config.pursuer.mode not in config.pursuer.MODES:
            violations.append(ConstraintViolation(
                "pursuer.mode", f"Unknown pursuer mode {config.pursuer.mode!r}", "error"
            ))
        if config.physics.gravity > 0 and config.physics.jump_apex < config.pursuer.max_jump_height:
            violations.append(ConstraintViolation(
                "pursuer.max_jump_height",
                f"Pursuer plans jumps of {config.pursuer.max_jump_height} "
                f"but apex is {config.physics.jump_apex:.0f}",
                "warning"
            ))
        if config.camera.zoom <= 0:
            violations.append(ConstraintViolation(
                "camera.zoom", f"Zoom {config.camera.zoom} must be positive", "error"
            ))
        if config.world.world_width < config.world.screen_width:
            violations.append(ConstraintViolation(
                "world.world_width",
                f"World width {config.world.world_width} narrower than screen",
                "warning"
            ))

        return _result(violations)
