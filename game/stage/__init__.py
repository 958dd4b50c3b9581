"""Boss stage module - real-time combat core and its hosts"""

from .config import StageConfig, DEFAULT_CONFIG
from .host import StageHost, DictState, CallbackState, HeadlessField, Reward
from .scheduler import ManualScheduler
from .session import StageSession, StagePhase, mount
from .stage_env import BossStageEnv, run_random_episode

__all__ = [
    'StageConfig', 'DEFAULT_CONFIG',
    'StageHost', 'DictState', 'CallbackState', 'HeadlessField', 'Reward',
    'ManualScheduler',
    'StageSession', 'StagePhase', 'mount',
    'BossStageEnv', 'run_random_episode',
]
