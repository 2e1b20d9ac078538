"""Input providers polled once per frame by the state machine."""

from dataclasses import dataclass
from typing import Dict, Set

import pygame


class InputProvider:
    """Polled boolean controls. Subclasses override what they support."""

    def is_left(self) -> bool:
        return False

    def is_right(self) -> bool:
        return False

    def is_jump(self) -> bool:
        return False

    def is_transform(self) -> bool:
        return False

    def is_attack(self) -> bool:
        return False

    def is_start(self) -> bool:
        return False

    def is_restart(self) -> bool:
        return False

    def any_action(self) -> bool:
        """Whether the player deliberately did something this frame."""
        return (
            self.is_left() or self.is_right() or self.is_jump()
            or self.is_transform() or self.is_attack()
        )

    def end_frame(self) -> None:
        """Called once after every simulation frame."""
        pass


@dataclass
class ScriptedInput(InputProvider):
    """Input whose buttons are plain attributes. Used by tests, the gym env and bots."""
    left: bool = False
    right: bool = False
    jump: bool = False
    transform: bool = False
    attack: bool = False
    start: bool = False
    restart: bool = False

    def is_left(self) -> bool:
        return self.left

    def is_right(self) -> bool:
        return self.right

    def is_jump(self) -> bool:
        return self.jump

    def is_transform(self) -> bool:
        return self.transform

    def is_attack(self) -> bool:
        return self.attack

    def is_start(self) -> bool:
        return self.start

    def is_restart(self) -> bool:
        return self.restart

    def release_all(self) -> None:
        self.left = self.right = self.jump = False
        self.transform = self.attack = False
        self.start = self.restart = False


class KeyboardInput(InputProvider):
    """Keyboard state collected from pygame KEYDOWN/KEYUP events."""

    LEFT_KEYS = (pygame.K_LEFT, pygame.K_a)
    RIGHT_KEYS = (pygame.K_RIGHT, pygame.K_d)
    JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_w)

    def __init__(self):
        self._keys_pressed: Dict[int, bool] = {}
        # Keys that went down since the last end_frame(); transform and
        # attack fire on these so holding the key triggers once
        self._just_pressed: Set[int] = set()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            if not self._keys_pressed.get(event.key, False):
                self._just_pressed.add(event.key)
            self._keys_pressed[event.key] = True
        elif event.type == pygame.KEYUP:
            self._keys_pressed[event.key] = False

    def _any(self, keys) -> bool:
        return any(self._keys_pressed.get(k, False) for k in keys)

    def is_left(self) -> bool:
        return self._any(self.LEFT_KEYS)

    def is_right(self) -> bool:
        return self._any(self.RIGHT_KEYS)

    def is_jump(self) -> bool:
        return self._any(self.JUMP_KEYS)

    def is_transform(self) -> bool:
        return pygame.K_t in self._just_pressed

    def is_attack(self) -> bool:
        return pygame.K_f in self._just_pressed

    def is_start(self) -> bool:
        return self._any((pygame.K_RETURN, pygame.K_KP_ENTER))

    def is_restart(self) -> bool:
        return self._keys_pressed.get(pygame.K_r, False)

    def end_frame(self) -> None:
        self._just_pressed.clear()
