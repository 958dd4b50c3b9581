"""
BossStageEnv - headless gymnasium host for a boss stage
-------------------------------------------------------
- Hosts a StageSession with an in-memory field, dict state and manual scheduler
- Gymnasium API
- The agent only moves and taps; shooting is automatic
- Vector observation: player state + boss + top-K enemies + top-M boss bullets
  + nearest obstacle
- Discrete MultiDiscrete action space: [move(5), tap(2)]

Quick test:
    python -m game.stage.stage_env
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .config import DEFAULT_CONFIG, ENV_CONFIG, REWARD_CONFIG, StageConfig
from .host import DictState, HeadlessField, Reward, StageHost
from .scheduler import ManualScheduler
from .session import StagePhase, StageSession
from .utils import clamp, distance, seed_everything


class BossStageEnv(gym.Env):
    """Boss stage exposed as a gymnasium environment"""

    metadata = {"render_modes": ["human"], "render_fps": 30}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        width: int = 480,
        height: int = 800,
        dt: float = 1 / 30,
        max_steps: int = 3600,
        k_enemies: int = 4,
        m_boss_bullets: int = 6,
        player_speed: float = 180.0,
        stage_level: int = 1,
        start_hp: int = 100,
        config: StageConfig = DEFAULT_CONFIG,
        reward_config: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        self.render_mode = render_mode
        self.width = width
        self.height = height
        self.dt = dt
        self.max_steps = max_steps
        self.k_enemies = k_enemies
        self.m_boss_bullets = m_boss_bullets
        self.player_speed = player_speed
        self.stage_level = stage_level
        self.start_hp = start_hp
        self.config = config
        self.reward_config = dict(REWARD_CONFIG if reward_config is None else reward_config)

        # move: 0 stay, 1 up, 2 down, 3 left, 4 right
        # tap: 0/1 (tap the nearest reachable obstacle)
        self.action_space = spaces.MultiDiscrete([5, 2])

        # Player: pos(2) hp(1)
        # Boss: rel pos(2) hp fraction(1)
        # Each enemy: rel pos(2) rel vel(2)
        # Each boss bullet: rel pos(2)
        # Nearest obstacle: rel pos(2)
        obs_dim = 3 + 3 + (self.k_enemies * 4) + (self.m_boss_bullets * 2) + 2
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self.field = HeadlessField(width, height)
        self.state = DictState()
        self.scheduler = ManualScheduler()
        self.session: Optional[StageSession] = None

        self.player_x = width * 0.5
        self.player_y = height * 0.85
        self.rewards: List[Reward] = []
        self.outcome: Optional[str] = None
        self._step_count = 0
        self._window = None

    # ----------------------------
    # Host callbacks
    # ----------------------------

    def _player_pos(self):
        return self.player_x, self.player_y

    def _on_reward(self, reward: Reward):
        self.rewards.append(reward)

    def _on_defeat(self):
        self.outcome = "defeat"

    def _on_boss_defeat(self):
        self.outcome = "boss_defeat"

    def _make_host(self) -> StageHost:
        return StageHost(
            field=self.field,
            state=self.state,
            get_player_pos=self._player_pos,
            on_reward=self._on_reward,
            on_defeat=self._on_defeat,
            on_boss_defeat=self._on_boss_defeat,
        )

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)

        if self.session is not None:
            self.session.unmount()

        self.field = HeadlessField(self.width, self.height)
        self.state = DictState({"hp": self.start_hp, "exp": 0, "stageLv": self.stage_level})
        self.scheduler = ManualScheduler()
        self.player_x = self.width * 0.5
        self.player_y = self.height * 0.85
        self.rewards = []
        self.outcome = None
        self._step_count = 0

        self.session = StageSession(
            self.scheduler,
            clock=self.scheduler.now,
            rng=random.Random(seed),
            config=self.config,
        ).mount(self._make_host())
        self.session.start_stage()

        return self._get_obs(), self._get_info()

    def step(self, action):
        assert self.action_space.contains(np.asarray(action, dtype=np.int64)), f"invalid action {action!r}"
        move, tap = int(action[0]), int(action[1])
        energy_before = sum(r.energy for r in self.rewards)

        self._apply_move(move)
        if tap:
            self._apply_tap()

        # No frame runs once the stage has ended
        ran = self.scheduler.advance(self.dt)
        events = self.session.events if ran else {}
        energy = sum(r.energy for r in self.rewards) - energy_before

        reward = self._compute_reward(events, energy)

        terminated = self.session.phase != StagePhase.RUNNING
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        obs = self._get_obs()
        info = self._get_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # ----------------------------
    # Core mechanics
    # ----------------------------

    def _apply_move(self, move: int):
        vx, vy = 0.0, 0.0
        if move == 1:
            vy = -1.0
        elif move == 2:
            vy = 1.0
        elif move == 3:
            vx = -1.0
        elif move == 4:
            vx = 1.0

        self.player_x = clamp(self.player_x + vx * self.player_speed * self.dt, 0.0, self.width)
        self.player_y = clamp(self.player_y + vy * self.player_speed * self.dt, 0.0, self.height)

    def _apply_tap(self):
        store = self.session.store
        reach = self.config.tap_reach
        near = [o for o in store.obstacles
                if distance(o.x, o.y, self.player_x, self.player_y) <= reach]
        if not near:
            return
        target = min(near, key=lambda o: distance(o.x, o.y, self.player_x, self.player_y))
        self.session.on_tap(target.x, target.y)

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _rel(self, x: float, y: float):
        return (clamp((x - self.player_x) / self.width, -1, 1),
                clamp((y - self.player_y) / self.height, -1, 1))

    def _get_obs(self) -> np.ndarray:
        store = self.session.store
        hp = self.state.read().get("hp") or 0

        obs_parts = [self.player_x / self.width * 2 - 1,
                     self.player_y / self.height * 2 - 1,
                     clamp(hp / max(1, self.start_hp), 0, 1) * 2 - 1]

        boss = store.boss
        if boss is not None:
            obs_parts += [*self._rel(boss.x, boss.y), boss.hp / boss.hp_max * 2 - 1]
        else:
            obs_parts += [0.0, 0.0, -1.0]

        def by_distance(items):
            return sorted(items, key=lambda e: (e.x - self.player_x) ** 2 + (e.y - self.player_y) ** 2)

        enemies_sorted = by_distance(store.enemies)
        speed_norm = max(1e-6, self.config.enemy_speed(self.stage_level))
        for i in range(self.k_enemies):
            if i < len(enemies_sorted):
                e = enemies_sorted[i]
                obs_parts += [*self._rel(e.x, e.y),
                              clamp(e.vx / speed_norm, -1, 1),
                              clamp(e.vy / speed_norm, -1, 1)]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        bullets_sorted = by_distance(store.boss_bullets)
        for i in range(self.m_boss_bullets):
            if i < len(bullets_sorted):
                obs_parts += [*self._rel(bullets_sorted[i].x, bullets_sorted[i].y)]
            else:
                obs_parts += [0.0, 0.0]

        obstacles_sorted = by_distance(store.obstacles)
        if obstacles_sorted:
            obs_parts += [*self._rel(obstacles_sorted[0].x, obstacles_sorted[0].y)]
        else:
            obs_parts += [0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _compute_reward(self, events: Dict[str, float], energy: float) -> float:
        rc = self.reward_config
        reward = 0.0

        reward += rc["R_KILL"] * events.get("kill", 0.0)
        reward += rc["R_BOSS_HIT"] * events.get("boss_hit", 0.0)
        reward += rc["R_ENERGY"] * energy
        reward -= rc["R_DAMAGE"] * events.get("damage", 0.0)
        reward -= rc["R_TIME"]

        if events.get("boss_defeat"):
            reward += rc["R_BOSS_DEFEAT"]
        if events.get("defeat"):
            reward -= rc["R_DEATH"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        d = self.state.read()
        store = self.session.store
        boss = store.boss
        return {
            "hp": d.get("hp", 0),
            "exp": d.get("exp", 0),
            "num_enemies": len(store.enemies),
            "num_bullets": len(store.bullets),
            "num_boss_bullets": len(store.boss_bullets),
            "num_obstacles": len(store.obstacles),
            "boss_hp": boss.hp if boss is not None else 0,
            "pending_energy": sum(r.energy for r in self.rewards),
            "outcome": self.outcome,
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            # Imported lazily so headless use never needs a display
            from .render import StageWindow
            self._window = StageWindow(self)

        self._window.on_draw()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None
        if self.session is not None:
            self.session.unmount()
            self.session = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = False, seed: Optional[int] = 42, stage_level: Optional[int] = None,
                       max_steps: Optional[int] = None) -> Dict[str, Any]:
    """Run a random-policy episode on ENV_CONFIG and return the final info"""
    env_config = dict(ENV_CONFIG)
    if stage_level is not None:
        env_config["stage_level"] = stage_level
    if max_steps is not None:
        env_config["max_steps"] = max_steps
    env = BossStageEnv(render_mode="human" if render else None, **env_config)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    import time
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

        if render and env._window:
            env._window.dispatch_events()
            env._window.flip()
            time.sleep(env.dt)

    info["return"] = total
    env.close()
    return info


if __name__ == "__main__":
    result = run_random_episode(render=False)
    print(f"[stage_env] outcome={result['outcome']} return={result['return']:.2f} "
          f"hp={result['hp']} exp={result['exp']} steps={result['step']}")
