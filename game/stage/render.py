"""
Arcade presentation for a stage: draws the visuals a HeadlessField records
and drives a session from arcade's clock
"""

from __future__ import annotations

import itertools
import random
import time
from typing import Dict, Optional

import arcade

from .host import DictState, HeadlessField, StageHost
from .session import StageSession

BG = (18, 18, 22)
HUD_C = (220, 220, 220)
PLAYER_C = (80, 200, 120)
KIND_COLORS = {
    "bullet": (220, 220, 235),
    "enemy": (220, 80, 80),
    "boss": (200, 200, 255),
    "boss_bullet": (255, 170, 90),
}
OBSTACLE_COLORS = {
    "red": (255, 80, 80),
    "blue": (80, 160, 255),
    "green": (100, 255, 140),
}


class ArcadeScheduler:
    """FrameScheduler on top of arcade's (pyglet's) clock"""

    def __init__(self):
        self._tokens = itertools.count(1)
        self._callbacks: Dict[int, object] = {}

    def now(self) -> float:
        return time.perf_counter()

    def schedule(self, callback) -> int:
        token = next(self._tokens)

        def fire(_delta_time: float):
            self._callbacks.pop(token, None)
            callback(self.now())

        self._callbacks[token] = fire
        arcade.schedule_once(fire, 0)
        return token

    def unschedule(self, token: int) -> None:
        fire = self._callbacks.pop(token, None)
        if fire is not None:
            arcade.unschedule(fire)


def draw_field(field: HeadlessField, player=None):
    """Draw every visual; field y grows downward, arcade y grows upward"""
    h = field.height
    for v in field.visuals:
        cx, cy = v.center
        y = h - cy
        if v.kind == "obstacle":
            color = OBSTACLE_COLORS.get(v.attrs.get("color"), HUD_C)
            arcade.draw_lrbt_rectangle_outline(v.left, v.left + v.width, h - v.top - v.height, h - v.top, color, 2)
        elif v.kind == "boss":
            arcade.draw_lrbt_rectangle_filled(v.left, v.left + v.width, h - v.top - v.height, h - v.top,
                                              KIND_COLORS["boss"])
        elif v.kind == "bubble":
            arcade.draw_text("tap to break", v.left, h - v.top - 12, HUD_C, 10)
        else:
            arcade.draw_circle_filled(cx, y, v.width / 2, KIND_COLORS.get(v.kind, HUD_C))

    if player is not None:
        px, py = player
        arcade.draw_circle_filled(px, h - py, 14, PLAYER_C)


def draw_hud(session: StageSession, state, width: int, height: int):
    d = state.read()
    boss = session.store.boss if session.store is not None else None
    if boss is not None:
        bar_w, bar_h = width - 24, 8
        x0, y0 = 12, height - 16
        arcade.draw_lrbt_rectangle_filled(x0, x0 + bar_w, y0, y0 + bar_h, (60, 60, 60))
        fill = bar_w * max(0, boss.hp) / boss.hp_max
        if fill > 0:
            arcade.draw_lrbt_rectangle_filled(x0, x0 + fill, y0, y0 + bar_h, KIND_COLORS["enemy"])

    txt = (f"HP: {d.get('hp', 0)}  "
           f"EXP: {d.get('exp', 0)}  "
           f"Stage: {d.get('stageLv', 1)}  "
           f"[{session.phase.value}]")
    arcade.draw_text(txt, 12, 12, HUD_C, 14)


class StageWindow(arcade.Window):
    """Viewer for a BossStageEnv"""

    def __init__(self, env):
        super().__init__(env.width, env.height, "BossStageEnv - Arcade")
        self.background_color = BG
        self.env = env

    def on_draw(self):
        self.clear()
        draw_field(self.env.field, (self.env.player_x, self.env.player_y))
        draw_hud(self.env.session, self.env.state, self.width, self.height)


class PlayWindow(arcade.Window):
    """Interactive stage: the player follows the mouse, clicks are taps"""

    def __init__(self, width: int = 480, height: int = 800, stage_level: int = 1, hp: int = 100,
                 seed: Optional[int] = None):
        super().__init__(width, height, "Boss Stage")
        self.background_color = BG
        self.field = HeadlessField(width, height)
        self.state = DictState({"hp": hp, "exp": 0, "stageLv": stage_level})
        self.player = (width * 0.5, height * 0.85)
        self.log = []

        host = StageHost(
            field=self.field,
            state=self.state,
            get_player_pos=lambda: self.player,
            on_message=self.log.append,
            on_reward=lambda r: self.log.append(f"reward queued: {r.to_dict()}"),
        )
        scheduler = ArcadeScheduler()
        self.session = StageSession(scheduler, clock=scheduler.now, rng=random.Random(seed)).mount(host)

    def on_draw(self):
        self.clear()
        draw_field(self.field, self.player)
        draw_hud(self.session, self.state, self.width, self.height)
        if self.log:
            arcade.draw_text(self.log[-1], 12, 34, HUD_C, 12)

    def on_mouse_motion(self, x, y, dx, dy):
        self.player = (x, self.height - y)

    def on_mouse_press(self, x, y, button, modifiers):
        self.session.on_tap(x, self.height - y)

    def on_key_press(self, key, modifiers):
        if key == arcade.key.SPACE:
            self.session.set_paused(not self.session.is_paused())
        elif key == arcade.key.ENTER and not self.session.running:
            self.session.start_stage()
        elif key == arcade.key.ESCAPE:
            self.close()

    def on_close(self):
        self.session.unmount()
        super().on_close()


def play(stage_level: int = 1, seed: Optional[int] = None):
    window = PlayWindow(stage_level=stage_level, seed=seed)
    window.session.start_stage()
    arcade.run()
