"""Unit tests for the PhysicsIntegrator."""

from __future__ import annotations

import pytest

from game.stage.entities import EntityStore
from game.stage.physics import PhysicsIntegrator

from conftest import CFG, FIELD_H, FIELD_W, add_boss_bullet, add_bullet, add_enemy, add_obstacle, set_boss


@pytest.fixture
def store(field) -> EntityStore:
    return EntityStore(release=field.release)


@pytest.fixture
def physics(store, field) -> PhysicsIntegrator:
    return PhysicsIntegrator(store, field, CFG)


class TestKinematics:
    def test_position_advances_by_velocity_dt(self, physics, store, field):
        b = add_bullet(store, field, 100, 400, vy=-520)
        e = add_enemy(store, field, 50, 50, vx=30, vy=40)
        bb = add_boss_bullet(store, field, 200, 100, vx=-128, vy=0)
        physics.step(0.02)
        assert (b.x, b.y) == pytest.approx((100, 400 - 10.4))
        assert (e.x, e.y) == pytest.approx((50.6, 50.8))
        assert (bb.x, bb.y) == pytest.approx((200 - 2.56, 100))

    def test_visual_follows_entity(self, physics, store, field):
        e = add_enemy(store, field, 50, 50, vx=100)
        physics.step(0.03)
        assert e.el.center == pytest.approx((53, 50))
        assert (e.el.width, e.el.height) == (22, 22)


class TestCulling:
    def test_bullet_culled_past_margin(self, physics, store, field):
        add_bullet(store, field, 100, -29, vy=-100)
        physics.step(0.02)
        assert store.bullets == []
        assert field.count("bullet") == 0

    def test_bullet_kept_within_margin(self, physics, store, field):
        add_bullet(store, field, 100, -20, vy=-100)
        physics.step(0.02)
        assert len(store.bullets) == 1

    def test_enemy_uses_wider_margin(self, physics, store, field):
        kept = add_enemy(store, field, -50, 100, vx=-100)
        gone = add_enemy(store, field, FIELD_W + 59, 100, vx=100)
        physics.step(0.02)
        assert store.enemies == [kept]
        assert gone.el not in field.visuals

    def test_boss_bullet_culled(self, physics, store, field):
        add_boss_bullet(store, field, 100, FIELD_H + 29.5, vy=100)
        physics.step(0.01)
        assert store.boss_bullets == []


class TestBossPatrol:
    def test_moves_horizontally(self, physics, store, field):
        boss = set_boss(store, field, 200, 60, hp=100, vx=146)
        physics.step_boss(0.01)
        assert boss.x == pytest.approx(201.46)
        assert boss.y == 60

    def test_bounces_at_right_edge(self, physics, store, field):
        boss = set_boss(store, field, FIELD_W - 51, 60, hp=100, vx=146)
        physics.step_boss(0.033)
        assert boss.x == FIELD_W - 50
        assert boss.vx == -146

    def test_bounces_at_left_edge(self, physics, store, field):
        boss = set_boss(store, field, 51, 60, hp=100, vx=-146)
        physics.step_boss(0.033)
        assert boss.x == 50
        assert boss.vx == 146

    def test_no_boss_is_noop(self, physics, store):
        physics.step_boss(0.033)
        assert store.boss is None


class TestObstacleLifetime:
    def test_boss_obstacle_expires(self, physics, store, field):
        o = add_obstacle(store, field, 200, 500, life=4.0, from_boss=True)
        elapsed = 0.0
        while elapsed < 4.0 - 1e-9:
            assert o in store.obstacles
            physics.step(0.033)
            elapsed += 0.033
        physics.step(0.033)
        assert o not in store.obstacles
        assert field.count("obstacle") == 0

    def test_unlimited_obstacle_never_expires(self, physics, store, field):
        o = add_obstacle(store, field, 200, 500, life=None)
        for _ in range(10_000):
            physics.step(0.033)
        assert store.obstacles == [o]

    def test_expiry_releases_bubble(self, physics, store, field):
        o = add_obstacle(store, field, 200, 500, life=0.01, from_boss=True)
        o.bubble = field.create_visual("bubble", color=o.color)
        physics.step(0.02)
        assert field.count("bubble") == 0
