"""Tests for the headless gymnasium host."""

from __future__ import annotations

import numpy as np
import pytest

from game.stage.session import StagePhase
from game.stage.config import ENV_CONFIG
from game.stage.stage_env import BossStageEnv, run_random_episode

from conftest import add_obstacle, clear_entities


@pytest.fixture
def env():
    e = BossStageEnv(max_steps=200)
    yield e
    e.close()


class TestReset:
    def test_observation_matches_space(self, env):
        obs, info = env.reset(seed=0)
        assert obs.shape == env.observation_space.shape
        assert obs.dtype == np.float32
        assert env.observation_space.contains(obs)

    def test_stage_running_after_reset(self, env):
        _, info = env.reset(seed=0)
        assert env.session.phase == StagePhase.RUNNING
        assert info["hp"] == 100
        assert info["boss_hp"] == 370
        assert info["outcome"] is None

    def test_reset_releases_previous_stage(self, env):
        env.reset(seed=0)
        old_field = env.field
        for _ in range(10):
            env.step([0, 0])
        env.reset(seed=1)
        assert old_field.visuals == []
        assert env.field is not old_field


class TestStep:
    def test_step_contract(self, env):
        env.reset(seed=0)
        obs, reward, terminated, truncated, info = env.step([0, 0])
        assert env.observation_space.contains(obs)
        assert isinstance(reward, float)
        assert terminated is False
        assert truncated is False
        assert info["step"] == 1
        assert info["num_bullets"] == 1

    def test_move_changes_player(self, env):
        env.reset(seed=0)
        x0 = env.player_x
        env.step([4, 0])
        assert env.player_x == pytest.approx(x0 + 180.0 / 30)

    def test_player_stays_on_field(self, env):
        env.reset(seed=0)
        for _ in range(120):
            env.step([3, 0])
            if env.session.phase != StagePhase.RUNNING:
                break
        assert env.player_x >= 0.0

    def test_tap_queues_reward(self, env):
        env.reset(seed=0)
        store = env.session.store
        clear_entities(store)
        add_obstacle(store, env.field, env.player_x, env.player_y - 40)

        _, _, _, _, info = env.step([0, 1])
        assert 5 <= info["pending_energy"] <= 10
        assert len(env.rewards) == 1

    def test_invalid_action_rejected(self, env):
        env.reset(seed=0)
        with pytest.raises(AssertionError):
            env.step([7, 0])

    def test_truncates_at_max_steps(self):
        e = BossStageEnv(max_steps=5)
        e.reset(seed=0)
        truncated = False
        for _ in range(5):
            _, _, terminated, truncated, _ = e.step([0, 0])
        assert truncated
        e.close()


class TestEpisode:
    def test_random_episode_finishes(self):
        info = run_random_episode(render=False, seed=3, max_steps=300)
        assert info["step"] <= 300
        assert info["outcome"] in (None, "defeat", "boss_defeat")
        assert "return" in info

    def test_random_episode_reads_env_config(self, monkeypatch):
        monkeypatch.setitem(ENV_CONFIG, "max_steps", 3)
        info = run_random_episode(render=False, seed=3)
        assert info["step"] <= 3

    def test_episode_overrides_take_precedence(self, monkeypatch):
        monkeypatch.setitem(ENV_CONFIG, "max_steps", 3)
        info = run_random_episode(render=False, seed=3, max_steps=5)
        assert info["step"] == 5
