"""Scripted policies for automated play.

Each policy takes an observation and returns an action dict
compatible with ChaseEnv's action space.
"""

import numpy as np
from typing import Dict, Any, Optional


class BasePolicy:
    """Base class for scripted policies."""

    name: str = "base"

    def __call__(self, obs: Dict[str, np.ndarray]) -> Dict[str, Any]:
        return self.act(obs)

    def act(self, obs: Dict[str, np.ndarray]) -> Dict[str, Any]:
        raise NotImplementedError

    def reset(self):
        """Called at the start of each episode."""
        pass

    def _make_action(self, move_x: float, jump: int) -> Dict[str, Any]:
        return {
            "move_x": np.array([np.clip(move_x, -1.0, 1.0)], dtype=np.float32),
            "jump": int(jump),
        }


class RandomPolicy(BasePolicy):
    """Uniform random actions each step.

    Broad state coverage, usually caught early.
    """

    name = "random"

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self.rng = rng or np.random.default_rng()

    def act(self, obs):
        move_x = self.rng.uniform(-1.0, 1.0)
        jump = int(self.rng.random() < 0.15)  # 15% jump chance per step
        return self._make_action(move_x, jump)


class RushPolicy(BasePolicy):
    """Always run right, jump when blocked or on a timer.

    Outruns the pursuer for a while, picks up collectibles only by luck.
    """

    name = "rush"

    def __init__(self, jump_interval: int = 25):
        self.jump_interval = jump_interval
        self._step = 0

    def reset(self):
        self._step = 0

    def act(self, obs):
        state = obs["state"]
        vx = state[2]
        grounded = state[4] > 0.5

        self._step += 1

        # Blocked by a platform side shows up as zero horizontal speed
        should_jump = grounded and (
            self._step % self.jump_interval == 0
            or abs(vx) < 0.5
        )

        return self._make_action(1.0, int(should_jump))


class CollectorPolicy(BasePolicy):
    """Heads for the nearest collectible and jumps when it is above.

    Uses the collectible offset in state[11:13]. Jumps are rate-limited
    so the policy does not hop in place under a platform edge.
    """

    name = "collector"

    def __init__(self, jump_cooldown: int = 20, reach: float = 12.0):
        self.jump_cooldown = jump_cooldown
        self.reach = reach
        self._since_jump = 0

    def reset(self):
        self._since_jump = 0

    def act(self, obs):
        state = obs["state"]
        vx = state[2]
        grounded = state[4] > 0.5
        dx, dy = state[11], state[12]

        self._since_jump += 1

        if dx == 0.0 and dy == 0.0:
            return self._make_action(1.0, 0)

        if dx > self.reach:
            move_x = 1.0
        elif dx < -self.reach:
            move_x = -1.0
        else:
            move_x = 0.0

        target_above = dy < -self.reach
        stalled = move_x != 0.0 and abs(vx) < 0.5
        should_jump = (
            grounded
            and self._since_jump >= self.jump_cooldown
            and (target_above or stalled)
        )
        if should_jump:
            self._since_jump = 0

        return self._make_action(move_x, int(should_jump))


POLICIES = {
    "random": RandomPolicy,
    "rush": RushPolicy,
    "collector": CollectorPolicy,
}
