"""
Stage entity dataclasses and the entity store
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

# Nominal visual sizes (width, height) reported to the host
VISUAL_SIZES = {
    "bullet": (8, 8),
    "enemy": (22, 22),
    "boss": (90, 46),
    "boss_bullet": (10, 10),
    "obstacle": (46, 46),
}


def sync_visual(field, handle, kind: str, x: float, y: float):
    """Report a centre position to the host as top-left placement plus nominal size"""
    if handle is None:
        return
    w, h = VISUAL_SIZES[kind]
    field.place(handle, x - w / 2, y - h / 2, w, h)


@dataclass(eq=False)
class Bullet:
    """Player bullet, constant velocity"""
    x: float
    y: float
    vx: float
    vy: float
    radius: float = 4.0
    el: Any = None


@dataclass(eq=False)
class Enemy:
    """Enemy aimed at the player's position at spawn time"""
    x: float
    y: float
    vx: float
    vy: float
    radius: float = 11.0
    damage: int = 10
    el: Any = None


@dataclass(eq=False)
class Boss:
    """Stage boss patrolling horizontally near the top of the field"""
    x: float
    y: float
    vx: float
    hp: int
    hp_max: int
    radius: float = 36.0
    el: Any = None

    @property
    def defeated(self) -> bool:
        return self.hp <= 0


@dataclass(eq=False)
class BossBullet:
    """Projectile from a boss radial attack"""
    x: float
    y: float
    vx: float
    vy: float
    radius: float = 5.0
    damage: int = 9
    el: Any = None


@dataclass(eq=False)
class Obstacle:
    """Tappable obstacle"""
    x: float
    y: float
    color: str
    radius: float = 23.0
    life: Optional[float] = None  # seconds left; None for infinite
    from_boss: bool = False
    el: Any = None
    bubble: Any = None  # prompt shown while the player is near


@dataclass
class Timers:
    """Countdowns in seconds; a timer fires when it reaches zero"""
    player_shot: float = 0.0
    enemy: float = 0.0
    boss_shot: float = 0.0
    boss_summon: float = 0.0


class EntityStore:
    """
    Homogeneous entity lists plus the (optional) boss.

    Lists are kept in spawn order; collision passes walk them newest first.
    Every removal releases the entity's visual through `release`.
    """

    def __init__(self, release: Callable[[Any], None]):
        self._release = release
        self.bullets: List[Bullet] = []
        self.enemies: List[Enemy] = []
        self.boss_bullets: List[BossBullet] = []
        self.obstacles: List[Obstacle] = []
        self.boss: Optional[Boss] = None
        self.timers = Timers()

    def __len__(self) -> int:
        n = len(self.bullets) + len(self.enemies) + len(self.boss_bullets) + len(self.obstacles)
        return n + (1 if self.boss is not None else 0)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def _drop(self, handle):
        if handle is not None:
            self._release(handle)

    def remove_bullet(self, b: Bullet):
        self.bullets.remove(b)
        self._drop(b.el)

    def remove_enemy(self, e: Enemy):
        self.enemies.remove(e)
        self._drop(e.el)

    def remove_boss_bullet(self, bb: BossBullet):
        self.boss_bullets.remove(bb)
        self._drop(bb.el)

    def remove_obstacle(self, o: Obstacle):
        self.obstacles.remove(o)
        self._drop(o.el)
        self.hide_bubble(o)

    def hide_bubble(self, o: Obstacle):
        if o.bubble is not None:
            self._release(o.bubble)
            o.bubble = None

    def remove_boss(self):
        if self.boss is not None:
            self._drop(self.boss.el)
            self.boss = None

    def clear(self):
        """Release every entity and zero all timers. Safe to call repeatedly."""
        for b in self.bullets:
            self._drop(b.el)
        for e in self.enemies:
            self._drop(e.el)
        for o in self.obstacles:
            self._drop(o.el)
            self._drop(o.bubble)
        for bb in self.boss_bullets:
            self._drop(bb.el)
        self.remove_boss()

        self.bullets = []
        self.enemies = []
        self.obstacles = []
        self.boss_bullets = []
        self.timers = Timers()
