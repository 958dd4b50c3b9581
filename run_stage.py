"""
Run boss stage episodes with a random policy, or play one interactively
"""

import argparse
import logging

from game.stage import run_random_episode
from game.stage.config import ENV_CONFIG


def main():
    parser = argparse.ArgumentParser(description="Run boss stage episodes")
    parser.add_argument(
        "--episodes",
        type=int,
        default=5,
        help="Number of random-policy episodes",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Seed of the first episode (incremented per episode)",
    )
    parser.add_argument(
        "--stage-level",
        type=int,
        default=ENV_CONFIG["stage_level"],
        help="Stage level used for spawn scaling",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=ENV_CONFIG["max_steps"],
        help="Step limit per episode",
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Show episodes in an arcade window",
    )
    parser.add_argument(
        "--play",
        action="store_true",
        help="Play interactively (mouse moves, click taps, space pauses)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log stage lifecycle events",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format="[%(name)s] %(message)s")

    if args.play:
        from game.stage.render import play
        play(stage_level=args.stage_level, seed=args.seed)
        return

    outcomes = {"boss_defeat": 0, "defeat": 0, None: 0}
    for ep in range(args.episodes):
        info = run_random_episode(
            render=args.render,
            seed=args.seed + ep,
            stage_level=args.stage_level,
            max_steps=args.max_steps,
        )
        outcomes[info["outcome"]] = outcomes.get(info["outcome"], 0) + 1
        print(f"[run_stage] episode {ep + 1}/{args.episodes}: outcome={info['outcome']} "
              f"return={info['return']:.2f} hp={info['hp']} exp={info['exp']} "
              f"energy={info['pending_energy']} steps={info['step']}")

    print(f"[run_stage] boss defeated: {outcomes['boss_defeat']}  "
          f"defeated: {outcomes['defeat']}  timed out: {outcomes[None]}")


if __name__ == "__main__":
    main()
