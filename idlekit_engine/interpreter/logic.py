"""Control-flow nodes: sequence, branch, random, loop and delay."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from idlekit_core.graph import LogicNode
from idlekit_core.utils.logging import get_logger
from idlekit_engine.interpreter.work import WorkItem, visit, walk

if TYPE_CHECKING:
    from idlekit_engine.interpreter.interpreter import LogicInterpreter

logger = get_logger("engine.interpreter.logic")


class LogicNodeExecutor:
    """Turns a control node into the work it continues with.
    
    ``execute`` never runs successors itself; it returns work items in the
    order they should run and the interpreter stacks them.
    """
    
    def __init__(self, interpreter: "LogicInterpreter"):
        self.interpreter = interpreter
    
    def execute(self, node: LogicNode, context: Dict[str, Any]) -> List[WorkItem]:
        handler = {
            "sequence": self._pass_through,
            "branch": self._pass_through,
            "random": self._random,
            "loop": self._loop,
            "delay": self._delay,
        }.get(node.tag or "")
        if handler is None:
            logger.warning(f"Node {node.id}: unknown logic type {node.tag!r}")
            return []
        return handler(node, context)
    
    def _pass_through(self, node: LogicNode, context: Dict[str, Any]) -> List[WorkItem]:
        return [walk(node.id, context)]
    
    def _random(self, node: LogicNode, context: Dict[str, Any]) -> List[WorkItem]:
        chance = node.number("chance")
        if chance is None:
            logger.warning(f"Node {node.id}: random node without chance")
            return []
        roll = self.interpreter.rng.random() * 100
        handle = "true" if roll < chance else "false"
        return [
            visit(edge.target, context)
            for edge in self.interpreter.graph.outgoing(node.id)
            if edge.source_handle == handle
        ]
    
    def _loop(self, node: LogicNode, context: Dict[str, Any]) -> List[WorkItem]:
        iterations = node.number("iterations", "repeatCount", "count")
        if iterations is None:
            logger.warning(f"Node {node.id}: loop node without iterations")
            return []
        count = max(0, int(iterations))
        limit = self.interpreter.max_loop_iterations
        if count > limit:
            logger.warning(f"Node {node.id}: loop of {count} capped at {limit} iterations")
            count = limit
        return [walk(node.id, {**context, "loopIteration": i}) for i in range(count)]
    
    def _delay(self, node: LogicNode, context: Dict[str, Any]) -> List[WorkItem]:
        seconds = node.number("seconds", "duration")
        if seconds is None or seconds <= 0:
            logger.warning(f"Node {node.id}: delay node needs a positive number of seconds")
            return []
        self.interpreter.schedule_continuation(node.id, seconds, context)
        return []
