"""
Kinematic integration: move entities by velocity * dt, cull anything that
left the field, count down obstacle lifetimes
"""

from .config import StageConfig
from .entities import EntityStore, sync_visual
from .utils import out_of_bounds


class PhysicsIntegrator:
    def __init__(self, store: EntityStore, field, config: StageConfig):
        self.store = store
        self.field = field
        self.config = config

    def step(self, dt: float):
        """Advance bullets, enemies, boss bullets and obstacle lifetimes"""
        self._step_bullets(dt)
        self._step_enemies(dt)
        self._step_boss_bullets(dt)
        self._step_obstacles(dt)

    def step_boss(self, dt: float):
        """Patrol: move horizontally, bouncing off the field's side edges"""
        boss = self.store.boss
        if boss is None:
            return
        w, _ = self.field.size()
        edge = self.config.boss_edge

        boss.x += boss.vx * dt
        if boss.x < edge:
            boss.x = edge
            boss.vx = abs(boss.vx)
        if boss.x > w - edge:
            boss.x = w - edge
            boss.vx = -abs(boss.vx)
        sync_visual(self.field, boss.el, "boss", boss.x, boss.y)

    def _step_bullets(self, dt: float):
        w, h = self.field.size()
        margin = self.config.bullet_cull_margin
        for b in list(self.store.bullets):
            b.x += b.vx * dt
            b.y += b.vy * dt
            sync_visual(self.field, b.el, "bullet", b.x, b.y)

            if out_of_bounds(b.x, b.y, w, h, margin):
                self.store.remove_bullet(b)

    def _step_enemies(self, dt: float):
        w, h = self.field.size()
        margin = self.config.enemy_cull_margin
        for e in list(self.store.enemies):
            e.x += e.vx * dt
            e.y += e.vy * dt
            sync_visual(self.field, e.el, "enemy", e.x, e.y)

            if out_of_bounds(e.x, e.y, w, h, margin):
                self.store.remove_enemy(e)

    def _step_boss_bullets(self, dt: float):
        w, h = self.field.size()
        margin = self.config.boss_bullet_cull_margin
        for bb in list(self.store.boss_bullets):
            bb.x += bb.vx * dt
            bb.y += bb.vy * dt
            sync_visual(self.field, bb.el, "boss_bullet", bb.x, bb.y)

            if out_of_bounds(bb.x, bb.y, w, h, margin):
                self.store.remove_boss_bullet(bb)

    def _step_obstacles(self, dt: float):
        for o in list(self.store.obstacles):
            if o.life is None:
                continue
            o.life -= dt
            if o.life <= 0:
                self.store.remove_obstacle(o)
