"""
StageSession - one mounted combat stage
---------------------------------------
- Lifecycle: IDLE -> RUNNING <-> PAUSED, RUNNING -> STOPPED (stop, defeat, boss defeat)
- Frames come from a FrameScheduler; each frame clamps dt and runs ``tick``
- Pausing keeps frames scheduled but skips simulation, so resuming never
  produces a large time jump
- Boss behavior: patrol, radial attack and obstacle summon on separate timers
- All persistent state (hp, exp, stageLv) lives in the host and is changed
  only through ``host.state.mutate``

Typical host usage::

    session = mount(StageHost(field=..., state=..., get_player_pos=...), scheduler)
    session.start_stage()
    ...
    session.unmount()
"""

from __future__ import annotations

import enum
import logging
import random
import time
from typing import Callable, Dict, Optional

from .collisions import CollisionResolver
from .config import DEFAULT_CONFIG, StageConfig
from .entities import EntityStore
from .host import StageHost
from .obstacles import ObstacleInteraction
from .physics import PhysicsIntegrator
from .scheduler import FrameScheduler
from .spawner import Spawner
from .utils import clamp_dt

logger = logging.getLogger(__name__)


class StagePhase(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


def _empty_events() -> Dict[str, float]:
    return {"kill": 0.0, "boss_hit": 0.0, "damage": 0.0, "boss_defeat": 0.0, "defeat": 0.0}


class StageSession:
    """A single stage session bound to one host between mount and unmount"""

    def __init__(
        self,
        scheduler: FrameScheduler,
        clock: Callable[[], float] = time.perf_counter,
        rng: Optional[random.Random] = None,
        config: StageConfig = DEFAULT_CONFIG,
    ):
        self.scheduler = scheduler
        self.clock = clock
        self.rng = rng if rng is not None else random.Random()
        self.config = config

        self.host: Optional[StageHost] = None
        self.store: Optional[EntityStore] = None
        self.spawner: Optional[Spawner] = None
        self.physics: Optional[PhysicsIntegrator] = None
        self.collisions: Optional[CollisionResolver] = None
        self.obstacles: Optional[ObstacleInteraction] = None

        self._running = False
        self._paused = False
        self._started_once = False
        self._token: Optional[int] = None
        self._last_t = 0.0

        # Per-tick event counters (read by the gymnasium host)
        self.events: Dict[str, float] = _empty_events()

    # ----------------------------
    # Mount / unmount
    # ----------------------------

    @property
    def mounted(self) -> bool:
        return self.host is not None

    def mount(self, host: StageHost) -> "StageSession":
        if self.mounted:
            raise RuntimeError("StageSession is already mounted")
        self.host = host
        self.store = EntityStore(release=host.field.release)
        self.spawner = Spawner(self.store, host.field, host.player_pos, self.config, self.rng)
        self.physics = PhysicsIntegrator(self.store, host.field, self.config)
        self.collisions = CollisionResolver(self.store, host, self.config)
        self.obstacles = ObstacleInteraction(self.store, host.field, self.config, self.rng)
        return self

    def unmount(self):
        if not self.mounted:
            return
        self.stop_stage()
        self._paused = False
        self._started_once = False

        self.host = None
        self.store = None
        self.spawner = None
        self.physics = None
        self.collisions = None
        self.obstacles = None

    def __enter__(self) -> "StageSession":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unmount()

    # ----------------------------
    # Lifecycle
    # ----------------------------

    @property
    def phase(self) -> StagePhase:
        if self._running:
            return StagePhase.PAUSED if self._paused else StagePhase.RUNNING
        return StagePhase.STOPPED if self._started_once else StagePhase.IDLE

    @property
    def running(self) -> bool:
        return self._running

    def stage_level(self) -> int:
        return int(self.host.state.read().get("stageLv") or 1)

    def start_stage(self) -> bool:
        """Start a fresh stage. Refuses (returns False) while host hp <= 0."""
        if not self.mounted:
            return False

        d = self.host.state.read()
        if (d.get("hp") or 0) <= 0:
            logger.info("stage start refused: hp is %s", d.get("hp"))
            self.host.on_message("HP is 0, the stage cannot start (recover first)")
            return False

        self._cancel_frame()
        self.store.clear()
        self._paused = False
        self._running = True
        self._started_once = True
        self._last_t = self.clock()

        level = self.stage_level()
        logger.info("stage %d started", level)
        self.host.on_message(f"Stage {level} start!")

        self.spawner.spawn_boss(level)
        self._schedule_frame()
        return True

    def stop_stage(self):
        """Stop and release everything. Safe to call in any state."""
        was_running = self._running
        self._running = False
        self._cancel_frame()
        if self.store is not None:
            self.store.clear()
        if was_running:
            logger.info("stage stopped")

    def set_paused(self, value: bool):
        self._paused = bool(value)

    def is_paused(self) -> bool:
        return self._paused

    # ----------------------------
    # Frame loop
    # ----------------------------

    def _schedule_frame(self):
        self._token = self.scheduler.schedule(self._on_frame)

    def _cancel_frame(self):
        if self._token is not None:
            self.scheduler.unschedule(self._token)
            self._token = None

    def _on_frame(self, t: float):
        self._token = None
        if not self.mounted or not self._running:
            return

        dt = clamp_dt(t - self._last_t, self.config.max_dt)
        self._last_t = t

        if not self._paused:
            self.tick(dt)

        # A host callback may already have restarted the stage during the tick
        if self._running and self._token is None:
            self._schedule_frame()

    def tick(self, dt: float):
        """Advance the simulation by one (already clamped) step of dt seconds"""
        if not self._running:
            return
        self.events = _empty_events()
        level = self.stage_level()

        self.spawner.update(dt, level)
        if self.store.boss is not None:
            self._update_boss(dt, level)

        self.physics.step(dt)

        report = self.collisions.resolve(self.host.player_pos())
        self.events["kill"] += report.kills
        self.events["boss_hit"] += report.boss_hits
        self.events["damage"] += report.damage
        if report.boss_defeated:
            self._on_boss_defeat()
            return

        self.obstacles.update_bubbles(self.host.player_pos())

        if (self.host.state.read().get("hp") or 0) <= 0:
            self._on_defeat("HP reached 0...")

    def _update_boss(self, dt: float, level: int):
        t = self.store.timers
        cfg = self.config

        self.physics.step_boss(dt)

        t.boss_shot -= dt
        if t.boss_shot <= 0:
            t.boss_shot = cfg.boss_shot_interval(level)
            self.spawner.fire_boss_radial(level)

        t.boss_summon -= dt
        if t.boss_summon <= 0:
            t.boss_summon = cfg.summon_interval(level)
            self.spawner.spawn_obstacle_pack(level, from_boss=True)

    # ----------------------------
    # Input
    # ----------------------------

    def on_tap(self, x: float, y: float) -> bool:
        """Tap at field coordinates. Returns True if an obstacle was destroyed."""
        if not self.mounted or self._paused or not self._running:
            return False

        reward = self.obstacles.tap(x, y, self.host.player_pos())
        if reward is None:
            return False

        # Deferred: the host decides when the reward is actually applied
        self.host.on_reward(reward)
        self.host.on_message(f"Obstacle destroyed! +{reward.energy} energy / card category {reward.cat}")
        self.host.on_request_hud_refresh()
        return True

    # ----------------------------
    # Terminal outcomes
    # ----------------------------

    def _on_defeat(self, reason: str):
        # Economy penalties on defeat are the host's call; only notify here
        logger.info("stage lost: %s", reason)
        self.events["defeat"] = 1.0
        self.host.on_message(reason)
        self.host.on_request_hud_refresh()

        host = self.host
        self.stop_stage()
        host.on_defeat()

    def _on_boss_defeat(self):
        logger.info("boss defeated")
        self.events["boss_defeat"] = 1.0
        self.host.on_message("Boss defeated! Continue or escape?")

        for o in list(self.store.obstacles):
            if o.from_boss:
                self.store.remove_obstacle(o)

        host = self.host
        self.stop_stage()
        host.on_boss_defeat()


def mount(
    host: StageHost,
    scheduler: FrameScheduler,
    clock: Optional[Callable[[], float]] = None,
    rng: Optional[random.Random] = None,
    config: StageConfig = DEFAULT_CONFIG,
) -> StageSession:
    """Create a session and mount it on `host`"""
    if clock is None:
        clock = getattr(scheduler, "now", time.perf_counter)
    session = StageSession(scheduler, clock=clock, rng=rng, config=config)
    return session.mount(host)
