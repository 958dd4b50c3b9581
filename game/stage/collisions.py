"""
Collision resolution. All tests are circle vs circle.

Passes run in a fixed order each tick:

1. player bullets vs enemies: per enemy (newest first) the first overlapping
   bullet (newest first) is consumed together with the enemy
2. player bullets vs boss: every overlapping bullet deals damage; the pass
   stops the moment the boss drops to 0 hp
3. enemies vs player
4. boss bullets vs player

State changes go through the host's ``StateAccess.mutate``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .config import StageConfig
from .entities import EntityStore
from .host import StageHost
from .utils import circle_collide


def _grant_exp(amount: int):
    def mutate(d):
        d["exp"] = (d.get("exp") or 0) + amount
    return mutate


def _take_damage(amount: int):
    def mutate(d):
        d["hp"] = max(0, (d.get("hp") or 0) - amount)
    return mutate


@dataclass
class CollisionReport:
    kills: int = 0
    boss_hits: int = 0
    damage: int = 0
    boss_defeated: bool = False


class CollisionResolver:
    def __init__(self, store: EntityStore, host: StageHost, config: StageConfig):
        self.store = store
        self.host = host
        self.config = config

    def resolve(self, player_pos: Tuple[float, float]) -> CollisionReport:
        """Run all passes. Returns early once the boss is defeated."""
        report = CollisionReport()
        report.kills = self.bullets_vs_enemies()
        report.boss_hits, report.boss_defeated = self.bullets_vs_boss()
        if report.boss_defeated:
            return report
        report.damage += self.enemies_vs_player(player_pos)
        report.damage += self.boss_bullets_vs_player(player_pos)
        return report

    def bullets_vs_enemies(self) -> int:
        kills = 0
        for e in reversed(list(self.store.enemies)):
            hit = next(
                (b for b in reversed(self.store.bullets)
                 if circle_collide(e.x, e.y, e.radius, b.x, b.y, b.radius)),
                None,
            )
            if hit is None:
                continue

            self.store.remove_bullet(hit)
            self.store.remove_enemy(e)
            kills += 1

            self.host.state.mutate(_grant_exp(self.config.exp_per_kill))
            self.host.on_request_hud_refresh()
        return kills

    def bullets_vs_boss(self) -> Tuple[int, bool]:
        """Returns (bullets consumed, boss defeated)"""
        boss = self.store.boss
        if boss is None:
            return 0, False

        hits = 0
        for b in reversed(list(self.store.bullets)):
            if not circle_collide(boss.x, boss.y, boss.radius, b.x, b.y, b.radius):
                continue
            self.store.remove_bullet(b)
            hits += 1

            boss.hp -= self.config.boss_damage_per_bullet
            if boss.defeated:
                return hits, True
        return hits, False

    def enemies_vs_player(self, player_pos: Tuple[float, float]) -> int:
        px, py = player_pos
        pr = self.config.player_radius
        damage = 0
        for e in reversed(list(self.store.enemies)):
            if not circle_collide(e.x, e.y, e.radius, px, py, pr):
                continue
            self.store.remove_enemy(e)
            damage += e.damage

            self.host.state.mutate(_take_damage(e.damage))
            self.host.on_request_hud_refresh()
        return damage

    def boss_bullets_vs_player(self, player_pos: Tuple[float, float]) -> int:
        px, py = player_pos
        pr = self.config.player_radius
        damage = 0
        for bb in reversed(list(self.store.boss_bullets)):
            if not circle_collide(bb.x, bb.y, bb.radius, px, py, pr):
                continue
            self.store.remove_boss_bullet(bb)
            damage += bb.damage

            self.host.state.mutate(_take_damage(bb.damage))
            self.host.on_request_hud_refresh()
        return damage
