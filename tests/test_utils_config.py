"""Unit tests for geometry/timing helpers and stage configuration."""

from __future__ import annotations

import pytest

from game.stage.config import DEFAULT_CONFIG, ENV_CONFIG, STAGE_CONFIG, StageConfig
from game.stage.utils import circle_collide, clamp, clamp_dt, distance, out_of_bounds


class TestGeometry:
    def test_clamp(self):
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0
        assert clamp(2, 0, 3) == 2

    def test_distance(self):
        assert distance(0, 0, 3, 4) == pytest.approx(5.0)

    def test_circles_touching_collide(self):
        assert circle_collide(0, 0, 4, 15, 0, 11)

    def test_circles_apart_do_not_collide(self):
        assert not circle_collide(0, 0, 4, 15.01, 0, 11)

    def test_out_of_bounds_margin(self):
        assert not out_of_bounds(-30, 10, 100, 100, 30)
        assert out_of_bounds(-30.5, 10, 100, 100, 30)
        assert out_of_bounds(50, 131, 100, 100, 30)
        assert not out_of_bounds(130, 130, 100, 100, 30)


class TestClampDt:
    def test_small_interval_passes_through(self):
        assert clamp_dt(0.016) == pytest.approx(0.016)

    def test_stall_is_clamped(self):
        assert clamp_dt(5.0) == pytest.approx(0.033)

    def test_negative_interval_is_zero(self):
        assert clamp_dt(-0.5) == 0.0


class TestLevelScaling:
    def test_level_one_values(self):
        cfg = DEFAULT_CONFIG
        assert cfg.enemy_interval(1) == pytest.approx(0.95)
        assert cfg.enemy_cap(1) == 3
        assert cfg.enemy_speed(1) == 100
        assert cfg.boss_hp(1) == 370
        assert cfg.boss_speed(1) == 146
        assert cfg.boss_shot_interval(1) == pytest.approx(1.15)
        assert cfg.radial_count(1) == 10
        assert cfg.radial_speed(1) == 128
        assert cfg.radial_damage(1) == 9
        assert cfg.summon_interval(1) == pytest.approx(3.4)
        assert cfg.obstacle_count(1) == 1
        assert cfg.obstacle_life(1) == pytest.approx(4.3)

    def test_floors_at_high_level(self):
        cfg = DEFAULT_CONFIG
        assert cfg.enemy_interval(30) == 0.25
        assert cfg.boss_shot_interval(30) == 0.35
        assert cfg.summon_interval(30) == 1.2

    def test_enemy_cap_grows(self):
        assert DEFAULT_CONFIG.enemy_cap(2) == 3
        assert DEFAULT_CONFIG.enemy_cap(3) == 4

    def test_obstacle_count_steps_every_three_levels(self):
        assert [DEFAULT_CONFIG.obstacle_count(lv) for lv in (2, 3, 5, 6)] == [1, 2, 2, 3]


class TestStageConfig:
    def test_from_dict_overrides(self):
        cfg = StageConfig.from_dict({"max_dt": 0.05, "exp_per_kill": 7})
        assert cfg.max_dt == 0.05
        assert cfg.exp_per_kill == 7
        assert cfg.player_bullet_speed == 520.0

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError):
            StageConfig.from_dict({"warp_speed": 9})

    def test_rejects_non_positive_max_dt(self):
        with pytest.raises(ValueError):
            StageConfig(max_dt=0)

    def test_rejects_negative_radius(self):
        with pytest.raises(ValueError):
            StageConfig(enemy_radius=-1)

    def test_default_config_built_from_overrides(self):
        assert DEFAULT_CONFIG == StageConfig.from_dict(STAGE_CONFIG)

    def test_env_config_keys_match_env_keywords(self):
        import inspect

        from game.stage.stage_env import BossStageEnv

        params = inspect.signature(BossStageEnv.__init__).parameters
        assert set(ENV_CONFIG) <= set(params)
