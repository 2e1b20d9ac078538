"""Gymnasium environment wrapper for the chase platformer.

Drives GameStateMachine headlessly, one nominal frame per step.
Observations include both RGB frames and a structured state vector.
"""

import numpy as np
import gymnasium
from gymnasium import spaces
from typing import Optional, Dict, Any, Tuple

import pygame

from .config import GameConfig
from .engine import COLOR_COLLECTIBLE, draw_centered_text, draw_scene
from .game import GameContext, GameStateMachine
from .input import ScriptedInput
from .render import RectProxy

# Dead zone for the continuous move_x action
MOVE_THRESHOLD = 0.1

STATE_SIZE = 14


class ChaseEnv(gymnasium.Env):
    """Gymnasium wrapper for the chase platformer.

    Observation space (Dict):
        'rgb': uint8 array of shape (H, W, 3) - rendered frame
        'state': float32 array of shape (14,) - state vector containing:
            [0-1] player position (x, y)
            [2-3] player velocity (vx, vy)
            [4]   player grounded (0/1)
            [5-6] pursuer position (x, y)
            [7]   pursuer active (0/1)
            [8]   pursuer distance to player
            [9]   collected count
            [10]  total collectibles
            [11-12] offset to nearest uncollected collectible (dx, dy), 0 if none
            [13]  episode progress (steps / max_steps)

    Action space (Dict):
        'move_x': float in [-1, 1] - run direction (|move_x| < 0.1 stands still)
        'jump':   int in {0, 1} - jump trigger

    Reward = weighted sum of raw signals (stored in info['reward_signals']):
        collect: number of collectibles picked up this step
        caught:  1.0 when the pursuer catches the player
        fell:    1.0 when the player falls into the pit
        win:     1.0 when the last collectible is picked up
        step:    1.0 every step

    The episode terminates as soon as the outcome is decided, i.e. when the
    arrest or celebration sequence begins. Reset skips menu and intro.
    """

    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": 60}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        obs_resolution: Tuple[int, int] = (256, 256),
        max_episode_steps: int = 3000,
        reward_weights: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.obs_height, self.obs_width = obs_resolution
        self.max_episode_steps = max_episode_steps

        self.reward_weights = reward_weights or {
            "collect": 10.0,
            "caught": -50.0,
            "fell": -50.0,
            "win": 100.0,
            "step": -0.01,
        }

        # Action space: hybrid continuous + discrete
        self.action_space = spaces.Dict({
            "move_x": spaces.Box(
                low=-1.0, high=1.0, shape=(1,), dtype=np.float32,
            ),
            "jump": spaces.Discrete(2),
        })

        self.observation_space = spaces.Dict({
            "rgb": spaces.Box(
                low=0, high=255,
                shape=(self.obs_height, self.obs_width, 3),
                dtype=np.uint8,
            ),
            "state": spaces.Box(
                low=-np.inf, high=np.inf,
                shape=(STATE_SIZE,),
                dtype=np.float32,
            ),
        })

        # Initialize pygame (caller sets SDL_VIDEODRIVER for headless)
        if not pygame.get_init():
            pygame.init()

        world = self.config.world
        self._surface = pygame.Surface((world.screen_width, world.screen_height))

        self._display = None
        if render_mode == "human":
            self._display = pygame.display.set_mode((world.screen_width, world.screen_height))
            pygame.display.set_caption("ChaseEnv")

        self._controls = ScriptedInput()
        # Validates the config eagerly
        self._game = GameStateMachine(
            self.config,
            controls=self._controls,
            proxy_factory=lambda kind: RectProxy(),
        )
        self._ctx: Optional[GameContext] = None
        self._episode_steps = 0
        self._level_seed: int = 0

    def reset(self, *, seed=None, options=None):
        super().reset(seed=seed)

        if seed is not None:
            self._level_seed = seed
        else:
            self._level_seed = int(self.np_random.integers(0, 2**31 - 1))

        self._controls.release_all()
        self._ctx = self._game.start_playing(self._level_seed)
        self._episode_steps = 0

        obs = self._get_obs()
        info = self._get_info()
        return obs, info

    def step(self, action):
        assert self._ctx is not None, "Must call reset() before step()"

        self._apply_action(action)
        self._ctx = self._game.update(1.0)
        self._episode_steps += 1

        reward_signals = self._compute_rewards()
        reward = sum(
            self.reward_weights.get(k, 0.0) * v
            for k, v in reward_signals.items()
        )

        terminated = self._ctx.decided
        truncated = self._episode_steps >= self.max_episode_steps

        obs = self._get_obs()
        info = self._get_info()
        info["reward_signals"] = reward_signals

        if self.render_mode == "human":
            self.render()

        return obs, float(reward), terminated, truncated, info

    # ------------------------------------------------------------------
    # Action handling
    # ------------------------------------------------------------------

    def _apply_action(self, action):
        controls = self._controls
        controls.release_all()
        if self._ctx.decided:
            return

        move_x = action["move_x"]
        if isinstance(move_x, np.ndarray):
            move_x = float(move_x.item())
        move_x = float(move_x)

        jump = action["jump"]
        if isinstance(jump, np.ndarray):
            jump = int(jump.item())

        controls.left = move_x < -MOVE_THRESHOLD
        controls.right = move_x > MOVE_THRESHOLD
        controls.jump = bool(jump)

    # ------------------------------------------------------------------
    # Reward computation
    # ------------------------------------------------------------------

    def _compute_rewards(self):
        events = self._ctx.events
        return {
            "collect": float(events.count("collect")),
            "caught": 1.0 if "caught" in events else 0.0,
            "fell": 1.0 if "fell" in events else 0.0,
            "win": 1.0 if "win" in events else 0.0,
            "step": 1.0,
        }

    # ------------------------------------------------------------------
    # Observations
    # ------------------------------------------------------------------

    def _get_obs(self):
        # Only render RGB when someone will actually use it
        if self.render_mode in ("rgb_array", "human"):
            rgb = self._render_frame()
        else:
            rgb = np.zeros(
                (self.obs_height, self.obs_width, 3), dtype=np.uint8
            )
        state = self._get_state_vector()
        return {"rgb": rgb, "state": state}

    def _nearest_collectible(self):
        player = self._ctx.player.body
        best = None
        best_dist = float("inf")
        for item in self._ctx.level.collectibles:
            if item.collected:
                continue
            dist = abs(item.x - player.x) + abs(item.y - player.y)
            if dist < best_dist:
                best, best_dist = item, dist
        return best

    def _get_state_vector(self):
        state = np.zeros(STATE_SIZE, dtype=np.float32)
        ctx = self._ctx

        body = ctx.player.body
        state[0] = body.x
        state[1] = body.y
        state[2] = body.velocity_x
        state[3] = body.velocity_y
        state[4] = float(body.is_grounded)

        pursuer = ctx.pursuer
        state[5] = pursuer.body.x
        state[6] = pursuer.body.y
        state[7] = float(pursuer.active)
        state[8] = pursuer.distance_to(ctx.player)

        state[9] = float(ctx.collected)
        state[10] = float(ctx.total)

        target = self._nearest_collectible()
        if target is not None:
            state[11] = target.x - body.x
            state[12] = target.y - body.y

        state[13] = float(self._episode_steps) / max(self.max_episode_steps, 1)
        return state

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render_frame(self):
        """Render current state to numpy array (H, W, 3) uint8."""
        draw_scene(self._surface, self._ctx)

        scaled = pygame.transform.scale(
            self._surface, (self.obs_width, self.obs_height)
        )
        # surfarray gives (W, H, 3); transpose to (H, W, 3)
        array = pygame.surfarray.array3d(scaled)
        return np.transpose(array, (1, 0, 2)).astype(np.uint8)

    def render(self):
        if self.render_mode == "rgb_array":
            return self._render_frame()
        elif self.render_mode == "human" and self._display:
            self._render_frame()  # updates self._surface
            self._display.blit(self._surface, (0, 0))
            # HUD on display only (not in observation RGB)
            self._draw_hud()
            pygame.display.flip()

    def _draw_hud(self):
        font = pygame.font.Font(None, 28)
        text = f"Metal: {self._ctx.collected}/{self._ctx.total}"
        surface = font.render(text, True, COLOR_COLLECTIBLE)
        rect = surface.get_rect(topright=(self.config.world.screen_width - 10, 10))
        self._display.blit(surface, rect)
        if self._ctx.message:
            draw_centered_text(self._display, self._ctx.message, (255, 255, 255))

    def _get_info(self):
        ctx = self._ctx
        info = {
            "collected": ctx.collected,
            "total": ctx.total,
            "episode_steps": self._episode_steps,
            "mode": ctx.mode.value,
            "outcome": ctx.outcome,
            "pursuer_active": ctx.pursuer.active,
            "player_position": (ctx.player.body.x, ctx.player.body.y),
            "level_seed": self._level_seed,
        }
        return info

    def close(self):
        if self._display:
            pygame.display.quit()
            self._display = None
