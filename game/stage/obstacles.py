"""
Obstacle interaction: proximity prompts and tap-to-destroy rewards
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from .config import StageConfig
from .entities import EntityStore, Obstacle
from .host import Reward
from .utils import distance


class ObstacleInteraction:
    def __init__(self, store: EntityStore, field, config: StageConfig, rng: random.Random):
        self.store = store
        self.field = field
        self.config = config
        self.rng = rng

    def update_bubbles(self, player_pos: Tuple[float, float]):
        """Show a prompt on obstacles near the player, hide it on the rest"""
        px, py = player_pos
        for o in self.store.obstacles:
            near = distance(o.x, o.y, px, py) <= self.config.bubble_radius

            if near and o.bubble is None:
                o.bubble = self.field.create_visual("bubble", color=o.color)
            elif not near and o.bubble is not None:
                self.store.hide_bubble(o)

            if o.bubble is not None:
                self.field.place(o.bubble, o.x - 40, o.y - 44, 80, 24)

    def find_target(self, x: float, y: float, player_pos: Tuple[float, float]) -> Optional[Obstacle]:
        """Newest obstacle within reach of the player whose box contains (x, y)"""
        px, py = player_pos
        half = self.config.tap_half_extent
        for o in reversed(self.store.obstacles):
            if distance(o.x, o.y, px, py) > self.config.tap_reach:
                continue
            if abs(x - o.x) <= half and abs(y - o.y) <= half:
                return o
        return None

    def tap(self, x: float, y: float, player_pos: Tuple[float, float]) -> Optional[Reward]:
        """Destroy at most one obstacle and roll its reward"""
        o = self.find_target(x, y, player_pos)
        if o is None:
            return None

        self.store.remove_obstacle(o)
        lo, hi = self.config.reward_energy_range
        return Reward(energy=self.rng.randint(lo, hi), cat=self.rng.choice(self.config.reward_categories))
