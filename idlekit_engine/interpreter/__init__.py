"""Logic graph interpreter and its per-node-kind executors."""

from idlekit_engine.interpreter.actions import ActionExecutor
from idlekit_engine.interpreter.conditions import ConditionExecutor, compare_values
from idlekit_engine.interpreter.counters import EventCounters
from idlekit_engine.interpreter.events import EventExecutor
from idlekit_engine.interpreter.interpreter import LogicInterpreter
from idlekit_engine.interpreter.logic import LogicNodeExecutor

__all__ = [
    "ActionExecutor",
    "ConditionExecutor",
    "compare_values",
    "EventCounters",
    "EventExecutor",
    "LogicInterpreter",
    "LogicNodeExecutor",
]
