"""Tests for the shared animated-state machine."""

import pytest

from chase_platformer.animation import (
    ANIM_RATE, MISSING_CLIP_FRAMES, AnimatedStateMachine, AnimationClip,
)
from chase_platformer.render import RectProxy


def clip(frames=4, height=100.0, loop=True, rate=1.0):
    return AnimationClip(frames=object(), frame_count=frames, frame_height=height, rate=rate, loop=loop)


class TestAnimationClip:
    def test_duration(self):
        assert clip(frames=8, rate=0.5).duration == 16


class TestAnimatedStateMachine:
    def test_set_state_selects_clip_on_proxy(self):
        proxy = RectProxy()
        anim = AnimatedStateMachine({"running": clip()}, proxy)
        assert anim.set_state("running")
        assert proxy.animation == "running"

    def test_same_state_is_noop(self):
        anim = AnimatedStateMachine({"standing": clip()})
        assert not anim.set_state("standing")
        assert anim.set_state("standing", restart=True)

    def test_looping_wraps(self):
        anim = AnimatedStateMachine({"standing": clip(frames=4, rate=1.0)})
        for _ in range(5):
            anim.update(1.0)
        assert anim.frame == pytest.approx(1.0)
        assert not anim.finished

    def test_non_looping_finishes_on_last_frame(self):
        anim = AnimatedStateMachine({"attack": clip(frames=3, rate=1.0)})
        anim.set_state("attack", loop=False)
        for _ in range(10):
            anim.update(1.0)
        assert anim.finished
        assert anim.frame == 2

    def test_missing_clip_still_tracks_state(self):
        proxy = RectProxy()
        anim = AnimatedStateMachine({}, proxy)
        anim.set_state("winning", loop=False)
        assert anim.state == "winning"
        assert proxy.animation is None
        frames_needed = MISSING_CLIP_FRAMES / ANIM_RATE
        anim.update(frames_needed + 1)
        assert anim.finished

    def test_scale_from_frame_height(self):
        anim = AnimatedStateMachine(
            {"standing": clip(height=96.0)}, display_height=48.0,
            scale_multipliers={"standing": 1.5},
        )
        assert anim.scale == pytest.approx(0.75)

    def test_apply_flips_when_facing_left(self):
        proxy = RectProxy()
        anim = AnimatedStateMachine({"standing": clip(height=48.0)}, proxy, display_height=48.0)
        anim.apply(10, 20, facing_right=False)
        assert proxy.scale == (-1.0, 1.0)
        assert (proxy.x, proxy.y) == (10, 20)
        assert not proxy.facing_right

    def test_use_clips_swaps_set(self):
        anim = AnimatedStateMachine({"standing": clip()})
        anim.use_clips({"attack": clip()})
        assert anim.has_clip("attack")
        assert not anim.has_clip("standing")
