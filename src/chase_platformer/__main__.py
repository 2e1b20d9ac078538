import argparse
import logging
from typing import List, Optional

from .config import CONFIGS, get_config

logger = logging.getLogger(__name__)

SMOKE_STEPS = 600


def run_smoke(preset: str, seed: Optional[int]) -> str:
    """Play one headless episode with the rush policy and return its outcome."""
    from .gym_env import ChaseEnv
    from .policies import RushPolicy

    env = ChaseEnv(config=get_config(preset), max_episode_steps=SMOKE_STEPS)
    policy = RushPolicy()
    policy.reset()
    obs, info = env.reset(seed=seed)
    total = 0.0
    terminated = truncated = False
    while not (terminated or truncated):
        obs, reward, terminated, truncated, info = env.step(policy(obs))
        total += reward
    env.close()

    outcome = info["outcome"] or "timeout"
    logger.info(
        "Smoke run: outcome=%s steps=%d collected=%d/%d reward=%.2f",
        outcome, info["episode_steps"], info["collected"], info["total"], total,
    )
    return outcome


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="chase_platformer", description="Chase platformer runner")
    parser.add_argument(
        "--preset",
        default="default",
        choices=sorted(CONFIGS),
        help="Named configuration preset.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed for level generation.",
    )
    parser.add_argument(
        "--smoke",
        action="store_true",
        help="Run one headless scripted episode and exit (for quick verification).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.smoke:
        run_smoke(args.preset, args.seed)
        return

    from .engine import ChaseEngine

    ChaseEngine(get_config(args.preset), seed=args.seed).run()


if __name__ == "__main__":
    main()
