"""
Stage configuration: tuning constants and level scaling formulas
"""

import math
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class StageConfig:
    """All stage constants. Level-dependent values are methods of `level`."""

    # Timing
    max_dt: float = 0.033  # seconds, upper bound on one simulation step

    # Player bullets
    player_shot_base: float = 0.20  # seconds
    player_shot_jitter: float = 0.05  # seconds, uniform extra delay
    player_bullet_speed: float = 520.0  # px/s, straight up
    bullet_radius: float = 4.0
    bullet_cull_margin: float = 30.0

    # Enemies
    enemy_radius: float = 11.0
    enemy_damage: int = 10
    enemy_spawn_offset: float = 20.0  # spawn this far outside the visible field
    enemy_cull_margin: float = 60.0

    # Boss
    boss_y: float = 60.0
    boss_radius: float = 36.0
    boss_edge: float = 50.0  # patrol turns around this close to a side
    boss_damage_per_bullet: int = 6  # damage one player bullet deals to the boss
    boss_bullet_radius: float = 5.0
    boss_bullet_y_offset: float = 10.0
    boss_bullet_cull_margin: float = 30.0

    # Obstacles
    obstacle_radius: float = 23.0
    obstacle_margin_x: float = 40.0
    obstacle_y_range: Tuple[float, float] = (0.45, 0.90)  # fraction of field height
    obstacle_colors: Tuple[str, ...] = ("red", "blue", "green")
    bubble_radius: float = 70.0
    tap_reach: float = 80.0
    tap_half_extent: float = 23.0

    # Player
    player_radius: float = 18.0  # interaction radius for incoming hits
    exp_per_kill: int = 5

    # Deferred rewards
    reward_energy_range: Tuple[int, int] = (5, 10)  # inclusive
    reward_categories: Tuple[str, ...] = ("1", "2", "3", "4", "8")

    def __post_init__(self):
        if self.max_dt <= 0:
            raise ValueError(f"max_dt must be positive, got {self.max_dt}")
        for f in fields(self):
            if f.name.endswith("_radius") and getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} must be non-negative")
        lo, hi = self.reward_energy_range
        if lo > hi:
            raise ValueError(f"reward_energy_range is empty: {self.reward_energy_range}")

    @classmethod
    def from_dict(cls, overrides: Dict[str, Any]) -> "StageConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown stage config keys: {sorted(unknown)}")
        return replace(cls(), **overrides)

    # ----------------------------
    # Level scaling
    # ----------------------------

    def enemy_interval(self, level: int) -> float:
        return max(0.25, 1.0 - level * 0.05)

    def enemy_cap(self, level: int) -> int:
        return 3 + math.floor((level - 1) * 0.8)

    def enemy_speed(self, level: int) -> float:
        return 90.0 + level * 10

    def boss_hp(self, level: int) -> int:
        return 250 + level * 120

    def boss_speed(self, level: int) -> float:
        return 140.0 + level * 6

    def boss_shot_interval(self, level: int) -> float:
        return max(0.35, 1.2 - level * 0.05)

    def radial_count(self, level: int) -> int:
        return 10 + math.floor(level * 0.8)

    def radial_speed(self, level: int) -> float:
        return 120.0 + level * 8

    def radial_damage(self, level: int) -> int:
        return 8 + level

    def summon_interval(self, level: int) -> float:
        return max(1.2, 3.5 - level * 0.1)

    def obstacle_count(self, level: int) -> int:
        return 1 + level // 3

    def obstacle_life(self, level: int) -> float:
        return 4.0 + level * 0.3


# Overrides applied on top of StageConfig defaults (empty: stock tuning)
STAGE_CONFIG: Dict[str, Any] = {}

DEFAULT_CONFIG = StageConfig.from_dict(STAGE_CONFIG)

# Headless gymnasium host parameters
ENV_CONFIG = {
    "width": 480,
    "height": 800,
    "dt": 1 / 30,
    "max_steps": 3600,  # 120 seconds at 30 FPS
    "k_enemies": 4,
    "m_boss_bullets": 6,
    "player_speed": 180.0,
    "stage_level": 1,
    "start_hp": 100,
}

# Reward shaping for the gymnasium host
REWARD_CONFIG = {
    "R_KILL": 1.0,        # Enemy destroyed by a player bullet
    "R_BOSS_HIT": 0.05,   # Player bullet landed on the boss
    "R_DAMAGE": 0.05,     # Penalty per hp lost
    "R_ENERGY": 0.1,      # Per energy point from destroyed obstacles
    "R_BOSS_DEFEAT": 20.0,
    "R_DEATH": 10.0,
    "R_TIME": 0.001,
}
