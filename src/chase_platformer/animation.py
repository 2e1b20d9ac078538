"""Shared animated-state machine for every animated entity.

An entity owns a mapping of state name -> AnimationClip and drives it
through one generic set_state() call. Frame advance, looping and
completion tracking live here so entities never re-derive them.

Clips are optional: a state without a clip is still tracked (the state
name changes and non-looping states still finish), it is just never sent
to the render proxy.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .render import RenderProxy

ANIM_RATE = 24 / 60  # 24 fps relative to the 60 fps frame clock
MISSING_CLIP_FRAMES = 24


@dataclass
class AnimationClip:
    """Pre-extracted frame sequence.

    frames is opaque to the core (textures, surfaces, ...). Only
    frame_height is read, to compute the display scale.
    """
    frames: Any = None
    frame_count: int = 1
    frame_width: float = 1.0
    frame_height: float = 1.0
    rate: float = ANIM_RATE
    loop: bool = True

    @property
    def duration(self) -> float:
        """Frames of game time needed to play the clip once."""
        return self.frame_count / self.rate


class AnimatedStateMachine:
    """Tracks the current animation state of one entity."""

    def __init__(
        self,
        clips: Optional[Dict[str, AnimationClip]] = None,
        proxy: Optional[RenderProxy] = None,
        display_height: float = 1.0,
        scale_multipliers: Optional[Dict[str, float]] = None,
        initial_state: str = "standing",
    ):
        self.clips = clips or {}
        self.proxy = proxy or RenderProxy()
        self.display_height = display_height
        self.scale_multipliers = scale_multipliers or {}

        self.state = initial_state
        self.frame = 0.0
        self.loop = True
        self.finished = False
        self._select(initial_state)

    def use_clips(
        self,
        clips: Dict[str, AnimationClip],
        scale_multipliers: Optional[Dict[str, float]] = None,
    ) -> None:
        """Swap the whole clip set (e.g. hero -> robot) without changing state."""
        self.clips = clips or {}
        if scale_multipliers is not None:
            self.scale_multipliers = scale_multipliers

    def has_clip(self, name: str) -> bool:
        return name in self.clips

    def set_state(self, name: str, loop: Optional[bool] = None, restart: bool = False) -> bool:
        """Switch to a named state. Returns False if already in it."""
        if name == self.state and not restart:
            return False
        self.state = name
        self._select(name, loop)
        return True

    def _select(self, name: str, loop: Optional[bool] = None) -> None:
        clip = self.clips.get(name)
        if loop is None:
            loop = clip.loop if clip else True
        self.loop = loop
        self.frame = 0.0
        self.finished = False
        if clip is not None:
            self.proxy.select_animation(name, clip.frames, loop)

    @property
    def frame_count(self) -> int:
        clip = self.clips.get(self.state)
        return clip.frame_count if clip else MISSING_CLIP_FRAMES

    @property
    def rate(self) -> float:
        clip = self.clips.get(self.state)
        return clip.rate if clip else ANIM_RATE

    def update(self, dt: float) -> None:
        """Advance playback by dt frames of game time."""
        if self.finished:
            return
        self.frame += self.rate * dt
        count = self.frame_count
        if self.frame >= count:
            if self.loop:
                self.frame %= count
            else:
                self.frame = count - 1
                self.finished = True
        if self.state in self.clips:
            self.proxy.set_frame(int(self.frame))

    @property
    def scale(self) -> float:
        """Display scale so one frame is display_height tall."""
        multiplier = self.scale_multipliers.get(self.state, 1.0)
        clip = self.clips.get(self.state)
        if clip is None or clip.frame_height <= 0:
            return multiplier
        return self.display_height / clip.frame_height * multiplier

    def apply(self, x: float, y: float, facing_right: bool) -> None:
        """Push position, scale and facing to the render proxy."""
        s = self.scale
        self.proxy.set_scale(s if facing_right else -s, s)
        self.proxy.set_position(x, y)
