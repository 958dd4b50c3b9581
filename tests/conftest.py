"""Shared fixtures: a headless host wired to a manual scheduler."""

from __future__ import annotations

import random

import pytest

from game.stage.config import DEFAULT_CONFIG
from game.stage.entities import Boss, BossBullet, Bullet, Enemy, Obstacle
from game.stage.host import DictState, HeadlessField, StageHost
from game.stage.scheduler import ManualScheduler
from game.stage.session import StageSession

FIELD_W = 480
FIELD_H = 800


class Recorder:
    """Collects every host callback."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.hud_refreshes = 0
        self.rewards = []
        self.defeats = 0
        self.boss_defeats = 0

    def on_message(self, text: str) -> None:
        self.messages.append(text)

    def on_request_hud_refresh(self) -> None:
        self.hud_refreshes += 1

    def on_reward(self, reward) -> None:
        self.rewards.append(reward)

    def on_defeat(self) -> None:
        self.defeats += 1

    def on_boss_defeat(self) -> None:
        self.boss_defeats += 1


class Player:
    def __init__(self, x: float = FIELD_W / 2, y: float = FIELD_H * 0.85) -> None:
        self.x = x
        self.y = y

    def pos(self):
        return self.x, self.y


@pytest.fixture
def field() -> HeadlessField:
    return HeadlessField(FIELD_W, FIELD_H)


@pytest.fixture
def state() -> DictState:
    return DictState({"hp": 100, "exp": 0, "stageLv": 1, "energy": 40})


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def player() -> Player:
    return Player()


@pytest.fixture
def host(field, state, recorder, player) -> StageHost:
    return StageHost(
        field=field,
        state=state,
        get_player_pos=player.pos,
        on_message=recorder.on_message,
        on_request_hud_refresh=recorder.on_request_hud_refresh,
        on_reward=recorder.on_reward,
        on_defeat=recorder.on_defeat,
        on_boss_defeat=recorder.on_boss_defeat,
    )


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def session(host, scheduler) -> StageSession:
    s = StageSession(scheduler, clock=scheduler.now, rng=random.Random(1234)).mount(host)
    yield s
    s.unmount()


# --------------------------------------------------------------------------
# Entity builders that register a visual on the field like the spawner does
# --------------------------------------------------------------------------

def add_bullet(store, field, x, y, vx=0.0, vy=0.0) -> Bullet:
    b = Bullet(x=x, y=y, vx=vx, vy=vy, el=field.create_visual("bullet"))
    store.bullets.append(b)
    return b


def add_enemy(store, field, x, y, vx=0.0, vy=0.0, damage=10) -> Enemy:
    e = Enemy(x=x, y=y, vx=vx, vy=vy, damage=damage, el=field.create_visual("enemy"))
    store.enemies.append(e)
    return e


def add_boss_bullet(store, field, x, y, vx=0.0, vy=0.0, damage=9) -> BossBullet:
    bb = BossBullet(x=x, y=y, vx=vx, vy=vy, damage=damage, el=field.create_visual("boss_bullet"))
    store.boss_bullets.append(bb)
    return bb


def add_obstacle(store, field, x, y, color="red", life=None, from_boss=False) -> Obstacle:
    o = Obstacle(x=x, y=y, color=color, life=life, from_boss=from_boss,
                 el=field.create_visual("obstacle", color=color))
    store.obstacles.append(o)
    return o


def set_boss(store, field, x, y, hp, vx=0.0) -> Boss:
    store.remove_boss()
    boss = Boss(x=x, y=y, vx=vx, hp=hp, hp_max=max(hp, 1), el=field.create_visual("boss"))
    store.boss = boss
    return boss


def clear_entities(store) -> None:
    """Drop everything the stage spawned on start, keeping timers."""
    timers = store.timers
    store.clear()
    store.timers = timers


def quiet_timers(store, seconds: float = 1e9) -> None:
    """Push every spawn timer far into the future."""
    store.timers.player_shot = seconds
    store.timers.enemy = seconds
    store.timers.boss_shot = seconds
    store.timers.boss_summon = seconds


CFG = DEFAULT_CONFIG
