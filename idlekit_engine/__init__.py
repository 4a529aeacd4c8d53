"""
idlekit engine - runtime for idlekit game templates.

Two forms share the core registries:
- GameEngine: multi-resource economy with buildings, one-shot upgrades,
  achievements, prestige and a logic graph
- ClickerGame: leveled single-resource form
"""

from idlekit_engine.clicker import ClickerGame
from idlekit_engine.clock import SimulationClock
from idlekit_engine.config import EngineConfig
from idlekit_engine.engine import GameEngine
from idlekit_engine.interpreter import LogicInterpreter
from idlekit_engine.notifications import NotificationQueue
from idlekit_engine.scheduler import ScheduledTask, Scheduler
from idlekit_engine.world_state import StateView

__all__ = [
    "ClickerGame",
    "SimulationClock",
    "EngineConfig",
    "GameEngine",
    "LogicInterpreter",
    "NotificationQueue",
    "ScheduledTask",
    "Scheduler",
    "StateView",
]
