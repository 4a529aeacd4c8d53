"""LogicInterpreter - runs the authored logic graph against a GameEngine.

Traversal is depth-first over an explicit stack instead of host recursion:

- WALK(n) stacks a VISIT for every outgoing edge of ``n`` in authored order.
- VISIT of an action runs it and continues with WALK of that action.
- VISIT of a condition evaluates it and visits the targets of the matching
  "true"/"false" edges.
- VISIT of a logic node asks ``LogicNodeExecutor`` for its continuation.

Events raised by managers while a traversal is active (an addResource
action crossing a cap, a buyBuilding action) are queued onto the running
stack in the order they were raised and run before the rest of the graph,
which is the order a recursive walk would produce. Every outermost dispatch
has a step budget, so a cyclic graph without an exit stops with a warning
instead of hanging the simulation.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from idlekit_core.graph import LogicGraph, NodeKind
from idlekit_core.utils.logging import get_logger, log_error
from idlekit_engine.interpreter.actions import ActionExecutor
from idlekit_engine.interpreter.conditions import ConditionExecutor
from idlekit_engine.interpreter.counters import EventCounters
from idlekit_engine.interpreter.events import EventExecutor
from idlekit_engine.interpreter.logic import LogicNodeExecutor
from idlekit_engine.interpreter.work import Step, WorkItem, visit, walk

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.interpreter")


class LogicInterpreter:
    """Dispatches game events into the logic graph.

    Usage:
        interpreter = LogicInterpreter(engine)
        interpreter.trigger_event("onClick")
        interpreter.check_event_counter("afterXClicks", "global", 10)
    """

    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self.graph = LogicGraph(engine.template.logic)
        self.counters = EventCounters()
        self.rng: random.Random = engine.rng
        self.max_steps = engine.config.max_steps_per_dispatch
        self.max_loop_iterations = engine.config.max_loop_iterations

        self.events = EventExecutor(self)
        self.actions = ActionExecutor(self)
        self.conditions = ConditionExecutor(self)
        self.logic = LogicNodeExecutor(self)

        self._stack: Optional[List[WorkItem]] = None
        self._queued: List[WorkItem] = []
        self.last_dispatch_steps = 0

    @property
    def is_running(self) -> bool:
        return self._stack is not None

    # ------------------------------------------------------------------ #
    # Entry points
    # ------------------------------------------------------------------ #

    def trigger_event(self, event_name: str, context: Optional[Dict[str, Any]] = None) -> int:
        return self.events.trigger_event(event_name, context)

    def check_event_counter(self, event_type: str, target_id: str, current_value: float) -> int:
        return self.events.check_event_counter(event_type, target_id, current_value)

    def execute_graph_from_node(self, node_id: str, context: Optional[Dict[str, Any]] = None) -> None:
        """Follow every outgoing edge of ``node_id``."""
        if node_id not in self.graph.nodes:
            logger.warning(f"Unknown node: {node_id}")
            return
        self.dispatch([walk(node_id, dict(context or {}))])

    def schedule_continuation(self, node_id: str, seconds: float, context: Dict[str, Any]) -> None:
        """Resume the walk after ``node_id`` once ``seconds`` of simulation time pass."""
        snapshot = dict(context)
        self.engine.scheduler.schedule(
            seconds,
            lambda: self.dispatch([walk(node_id, snapshot)]),
            key=node_id,
        )

    def dispatch(self, items: List[WorkItem]) -> None:
        """Run ``items`` in order, or queue them if a traversal is active."""
        if not items:
            return
        if self._stack is not None:
            self._queued.extend(items)
            return
        self._run(items)

    # ------------------------------------------------------------------ #
    # Traversal
    # ------------------------------------------------------------------ #

    def _run(self, items: List[WorkItem]) -> None:
        stack = list(reversed(items))
        self._stack = stack
        steps = 0
        try:
            while stack:
                if steps >= self.max_steps:
                    logger.warning(
                        f"Dispatch stopped after {steps} steps; "
                        f"{len(stack)} pending item(s) dropped (cycle without exit?)"
                    )
                    stack.clear()
                    break
                steps += 1
                item = stack.pop()
                self._queued = []
                try:
                    self._step(item, stack)
                except Exception as e:
                    log_error(logger, f"node {item.node_id}", e, {"step": item.step.value})
                if self._queued:
                    stack.extend(reversed(self._queued))
                    self._queued = []
        finally:
            self._stack = None
            self._queued = []
            self.last_dispatch_steps = steps

    def _step(self, item: WorkItem, stack: List[WorkItem]) -> None:
        if item.step is Step.WALK:
            edges = self.graph.outgoing(item.node_id)
            stack.extend(visit(edge.target, item.context) for edge in reversed(edges))
            return

        node = self.graph.get(item.node_id)
        if node is None:
            return

        if node.type == NodeKind.ACTION.value:
            # continuation first, so events the action raises run before it
            stack.append(walk(node.id, item.context))
            self.actions.execute(node, item.context)
        elif node.type == NodeKind.CONDITION.value:
            result = self.conditions.evaluate(node, item.context)
            handle = "true" if result else "false"
            matching = [edge for edge in self.graph.outgoing(node.id) if edge.source_handle == handle]
            stack.extend(visit(edge.target, item.context) for edge in reversed(matching))
        elif node.type == NodeKind.LOGIC.value:
            stack.extend(reversed(self.logic.execute(node, item.context)))
        elif node.type == NodeKind.EVENT.value:
            logger.debug(f"Edge into event node {node.id} ignored")
        else:
            logger.warning(f"Node {node.id}: unknown node type {node.type!r}")
