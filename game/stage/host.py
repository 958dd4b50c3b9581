"""
Host capabilities handed to a stage session at mount time.

The stage never owns persistent game state or presentation. It talks to the
host through:

- a ``Field``: field size plus creation, placement and release of visuals
- a ``StateAccess``: ``read()`` for the current state mapping and
  ``mutate(fn)`` for transactional in-place changes (``hp``, ``exp``,
  ``stageLv`` are the only keys the stage touches)
- fire-and-forget callbacks for messages, HUD refresh, deferred rewards
  and terminal outcomes
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Protocol, Tuple

Mutator = Callable[[MutableMapping[str, Any]], None]


class Field(Protocol):
    def size(self) -> Tuple[float, float]: ...

    def create_visual(self, kind: str, **attrs: Any) -> Any: ...

    def place(self, handle: Any, left: float, top: float, width: float, height: float) -> None: ...

    def release(self, handle: Any) -> None: ...


class StateAccess(Protocol):
    def read(self) -> Mapping[str, Any]: ...

    def mutate(self, fn: Mutator) -> None: ...


@dataclass(frozen=True)
class Reward:
    """Reward computed by the stage; the host decides when and how to apply it."""

    energy: int
    cat: str

    def to_dict(self) -> dict:
        return {"energy": self.energy, "cat": self.cat}


def _noop(*_args, **_kwargs) -> None:
    return None


@dataclass
class StageHost:
    """Capability set a host passes to ``mount``."""

    field: Field
    state: StateAccess
    get_player_pos: Optional[Callable[[], Tuple[float, float]]] = None
    player_el: Any = None  # informational only
    on_message: Callable[[str], None] = _noop
    on_request_hud_refresh: Callable[[], None] = _noop
    on_reward: Callable[[Reward], None] = _noop
    on_defeat: Callable[[], None] = _noop
    on_boss_defeat: Callable[[], None] = _noop

    def __post_init__(self):
        # Hosts may pass None explicitly for callbacks they don't care about
        for name in ("on_message", "on_request_hud_refresh", "on_reward", "on_defeat", "on_boss_defeat"):
            if getattr(self, name) is None:
                setattr(self, name, _noop)

    def player_pos(self) -> Tuple[float, float]:
        if self.get_player_pos is None:
            return 0.0, 0.0
        x, y = self.get_player_pos()
        return float(x), float(y)


# ----------------------------
# State adapters
# ----------------------------

class DictState:
    """In-memory state store. ``mutate`` applies to a draft and commits it."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def read(self) -> Mapping[str, Any]:
        return self._data

    def mutate(self, fn: Mutator) -> None:
        draft = copy.deepcopy(self._data)
        fn(draft)
        self._data = draft


class CallbackState:
    """Adapter for hosts that expose a ``get_state`` / ``set_state(fn)`` pair."""

    def __init__(self, get_state: Callable[[], Mapping[str, Any]], set_state: Callable[[Mutator], None]):
        self._get_state = get_state
        self._set_state = set_state

    def read(self) -> Mapping[str, Any]:
        return self._get_state() or {}

    def mutate(self, fn: Mutator) -> None:
        self._set_state(fn)


# ----------------------------
# Headless field
# ----------------------------

@dataclass(eq=False)
class Visual:
    """A visual record kept by ``HeadlessField``."""

    kind: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    left: float = 0.0
    top: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.left + self.width / 2, self.top + self.height / 2


class HeadlessField:
    """Field that records visuals in memory; used without a display."""

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self.visuals: List[Visual] = []

    def size(self) -> Tuple[float, float]:
        return self.width, self.height

    def create_visual(self, kind: str, **attrs: Any) -> Visual:
        v = Visual(kind=kind, attrs=dict(attrs))
        self.visuals.append(v)
        return v

    def place(self, handle: Visual, left: float, top: float, width: float, height: float) -> None:
        handle.left, handle.top = left, top
        handle.width, handle.height = width, height

    def release(self, handle: Visual) -> None:
        # Releasing twice is harmless
        if handle in self.visuals:
            self.visuals.remove(handle)

    def count(self, kind: str) -> int:
        return sum(1 for v in self.visuals if v.kind == kind)
