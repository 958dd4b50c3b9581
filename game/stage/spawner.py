"""
Spawner: creates player bullets, enemies, the boss, obstacle packs and
boss radial bursts, scaled by stage level
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, List, Tuple

from .config import StageConfig
from .entities import Boss, BossBullet, Bullet, Enemy, EntityStore, Obstacle, sync_visual
from .utils import vec_len

logger = logging.getLogger(__name__)


class Spawner:
    def __init__(
        self,
        store: EntityStore,
        field,
        player_pos: Callable[[], Tuple[float, float]],
        config: StageConfig,
        rng: random.Random,
    ):
        self.store = store
        self.field = field
        self.player_pos = player_pos
        self.config = config
        self.rng = rng

    # ----------------------------
    # Timed spawns
    # ----------------------------

    def update(self, dt: float, level: int):
        """Advance the player-shot and enemy timers, spawning when they fire"""
        t = self.store.timers
        cfg = self.config

        t.player_shot -= dt
        if t.player_shot <= 0:
            t.player_shot = cfg.player_shot_base + self.rng.random() * cfg.player_shot_jitter
            self.fire_player_bullet()

        # Timer keeps running down while capped, so a slot frees up immediately
        t.enemy -= dt
        if t.enemy <= 0 and len(self.store.enemies) < cfg.enemy_cap(level):
            t.enemy = cfg.enemy_interval(level)
            self.spawn_enemy(level)

    # ----------------------------
    # Individual spawns
    # ----------------------------

    def fire_player_bullet(self) -> Bullet:
        x, y = self.player_pos()
        el = self.field.create_visual("bullet")
        b = Bullet(x=x, y=y, vx=0.0, vy=-self.config.player_bullet_speed,
                   radius=self.config.bullet_radius, el=el)
        self.store.bullets.append(b)
        sync_visual(self.field, el, "bullet", x, y)
        return b

    def spawn_enemy(self, level: int) -> Enemy:
        # Spawn just outside a random edge, aimed at where the player is now
        w, h = self.field.size()
        off = self.config.enemy_spawn_offset
        side = self.rng.choice(("top", "right", "bottom", "left"))

        if side == "top":
            x, y = self.rng.random() * w, -off
        elif side == "right":
            x, y = w + off, self.rng.random() * h
        elif side == "bottom":
            x, y = self.rng.random() * w, h + off
        else:
            x, y = -off, self.rng.random() * h

        px, py = self.player_pos()
        dx, dy = px - x, py - y
        dist = max(1.0, vec_len(dx, dy))
        speed = self.config.enemy_speed(level)

        el = self.field.create_visual("enemy")
        e = Enemy(x=x, y=y, vx=dx / dist * speed, vy=dy / dist * speed,
                  radius=self.config.enemy_radius, damage=self.config.enemy_damage, el=el)
        self.store.enemies.append(e)
        sync_visual(self.field, el, "enemy", x, y)
        logger.debug("enemy spawned on %s edge at (%.1f, %.1f)", side, x, y)
        return e

    def spawn_boss(self, level: int) -> Boss:
        """Spawn the stage boss; also drops the first obstacle pack"""
        w, _ = self.field.size()
        hp_max = self.config.boss_hp(level)
        el = self.field.create_visual("boss")
        boss = Boss(x=w / 2, y=self.config.boss_y, vx=self.config.boss_speed(level),
                    hp=hp_max, hp_max=hp_max, radius=self.config.boss_radius, el=el)
        self.store.remove_boss()
        self.store.boss = boss
        sync_visual(self.field, el, "boss", boss.x, boss.y)
        logger.debug("boss spawned with %d hp", hp_max)

        self.spawn_obstacle_pack(level, from_boss=True)
        return boss

    def spawn_obstacle_pack(self, level: int, from_boss: bool = False) -> List[Obstacle]:
        w, h = self.field.size()
        cfg = self.config
        lo, hi = cfg.obstacle_y_range
        life = cfg.obstacle_life(level) if from_boss else None

        pack = []
        for _ in range(cfg.obstacle_count(level)):
            x = cfg.obstacle_margin_x + self.rng.random() * (w - 2 * cfg.obstacle_margin_x)
            y = h * (lo + self.rng.random() * (hi - lo))
            color = self.rng.choice(cfg.obstacle_colors)

            el = self.field.create_visual("obstacle", color=color)
            o = Obstacle(x=x, y=y, color=color, radius=cfg.obstacle_radius,
                         life=life, from_boss=from_boss, el=el)
            self.store.obstacles.append(o)
            sync_visual(self.field, el, "obstacle", x, y)
            pack.append(o)
        return pack

    def fire_boss_radial(self, level: int) -> List[BossBullet]:
        """Burst of n bullets at angles 2*pi*i/n, all at the same speed"""
        boss = self.store.boss
        if boss is None:
            return []

        n = self.config.radial_count(level)
        speed = self.config.radial_speed(level)
        dmg = self.config.radial_damage(level)
        y = boss.y + self.config.boss_bullet_y_offset

        burst = []
        for i in range(n):
            ang = (math.pi * 2) * (i / n)
            el = self.field.create_visual("boss_bullet")
            bb = BossBullet(x=boss.x, y=y, vx=math.cos(ang) * speed, vy=math.sin(ang) * speed,
                            radius=self.config.boss_bullet_radius, damage=dmg, el=el)
            self.store.boss_bullets.append(bb)
            sync_visual(self.field, el, "boss_bullet", bb.x, bb.y)
            burst.append(bb)
        return burst
