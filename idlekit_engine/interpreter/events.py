"""Event node selection: plain events and latched threshold events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from idlekit_core.events import COUNTER_THRESHOLD_FIELDS, GENERIC_THRESHOLD_FIELDS, GLOBAL_TARGET
from idlekit_core.graph import TARGET_FIELDS, LogicNode
from idlekit_engine.interpreter.work import walk

if TYPE_CHECKING:
    from idlekit_engine.interpreter.interpreter import LogicInterpreter


class EventExecutor:
    def __init__(self, interpreter: "LogicInterpreter"):
        self.interpreter = interpreter
    
    @staticmethod
    def _matches_context(node: LogicNode, context: Dict[str, Any]) -> bool:
        for field in TARGET_FIELDS:
            wanted = node.data.get(field)
            actual = context.get(field)
            if wanted and actual and wanted != actual:
                return False
        return True
    
    def trigger_event(self, event_name: str, context: Optional[Dict[str, Any]] = None) -> int:
        """Start a walk from every event node listening for ``event_name``.
        
        Nodes that name a resource/building/upgrade/achievement only run
        when the context carries the same id (or none at all).
        
        Returns:
            Number of event nodes started
        """
        context = dict(context or {})
        items = [
            walk(node.id, dict(context))
            for node in self.interpreter.graph.event_nodes(event_name)
            if self._matches_context(node, context)
        ]
        self.interpreter.dispatch(items)
        return len(items)
    
    @staticmethod
    def threshold(node: LogicNode, event_type: str) -> float:
        fields = COUNTER_THRESHOLD_FIELDS.get(event_type, ()) + GENERIC_THRESHOLD_FIELDS
        return node.number(*fields, default=0.0)
    
    def check_event_counter(self, event_type: str, target_id: str, current_value: float) -> int:
        """Fire threshold event nodes that ``current_value`` has reached.
        
        Each (event type, node) pair fires at most once; repeated calls with
        values at or above the threshold are no-ops after the first.
        
        Returns:
            Number of event nodes fired by this call
        """
        counters = self.interpreter.counters
        items = []
        for node in self.interpreter.graph.event_nodes(event_type):
            node_target = node.target_id
            if node_target and node_target != target_id and target_id != GLOBAL_TARGET:
                continue
            if counters.is_latched(event_type, node.id):
                continue
            if current_value >= self.threshold(node, event_type):
                counters.latch(event_type, node.id)
                items.append(walk(node.id, {"targetId": target_id, "currentValue": current_value}))
        self.interpreter.dispatch(items)
        return len(items)
