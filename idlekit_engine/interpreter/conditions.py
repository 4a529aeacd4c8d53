"""Condition nodes: boolean checks that pick the "true" or "false" edge."""

from __future__ import annotations

import operator
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from idlekit_core.graph import LogicNode
from idlekit_core.utils.logging import get_logger

if TYPE_CHECKING:
    from idlekit_engine.interpreter.interpreter import LogicInterpreter

logger = get_logger("engine.interpreter.conditions")

COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
    "==": operator.eq,
    "!=": operator.ne,
    "greaterEqual": operator.ge,
    "greater": operator.gt,
    "lessEqual": operator.le,
    "less": operator.lt,
    "equal": operator.eq,
    "notEqual": operator.ne,
}

RESOURCE_FIELDS = {
    "amount": "amount",
    "total": "total",
    "totalProduced": "total_produced",
    "totalSpent": "total_spent",
    "perSecond": "per_second",
}


def compare_values(a: float, comparison: str, b: float) -> bool:
    fn = COMPARATORS.get(comparison)
    if fn is None:
        logger.warning(f"Unknown comparison operator: {comparison}")
        return False
    return fn(a, b)


class ConditionExecutor:
    def __init__(self, interpreter: "LogicInterpreter"):
        self.interpreter = interpreter
        self.engine = interpreter.engine
        self._checks: Dict[str, Callable[[LogicNode, Dict[str, Any]], bool]] = {
            "ifResource": self._if_resource,
            "ifBuilding": self._if_building,
            "ifBuildingOwned": self._if_building_owned,
            "ifUpgradeOwned": self._if_upgrade_owned,
            "ifAchievementUnlocked": self._if_achievement_unlocked,
            "ifProductionRate": self._if_production_rate,
            "ifPrestigeLevel": self._if_prestige_level,
            "ifPlaytime": self._if_playtime,
            "ifClicks": self._if_clicks,
            "registry": self._registry,
        }
    
    def evaluate(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        """Result of a condition node; unknown or incomplete nodes are False."""
        check = self._checks.get(node.tag or "")
        if check is None:
            logger.warning(f"Node {node.id}: unknown condition type {node.tag!r}")
            return False
        return bool(check(node, context))
    
    @staticmethod
    def _operator(node: LogicNode) -> str:
        return node.value("operator", "comparison", default=">=")
    
    def _compare(self, node: LogicNode, current: Optional[float], *threshold_fields: str) -> bool:
        if current is None:
            return False
        threshold = node.number(*threshold_fields)
        if threshold is None:
            logger.warning(f"Node {node.id}: missing {threshold_fields[0]}")
            return False
        return compare_values(current, self._operator(node), threshold)
    
    def _if_resource(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        state = self.engine.resources.get_resource(node.value("resourceId", default=""))
        if state is None:
            logger.warning(f"Node {node.id}: unknown resource {node.value('resourceId')!r}")
            return False
        attribute = RESOURCE_FIELDS.get(node.value("field", default="amount"), "amount")
        return self._compare(node, getattr(state, attribute), "amount", "value")
    
    def _if_building(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        owned = self.engine.buildings.owned(node.value("buildingId", default=""))
        return self._compare(node, owned, "amount", "count")
    
    def _if_building_owned(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        owned = self.engine.buildings.owned(node.value("buildingId", default=""))
        return bool(owned)
    
    def _if_upgrade_owned(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        return self.engine.upgrades.is_purchased(node.value("upgradeId", default=""))
    
    def _if_achievement_unlocked(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        return self.engine.achievements.is_unlocked(node.value("achievementId", default=""))
    
    def _if_production_rate(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        state = self.engine.resources.get_resource(node.value("resourceId", default=""))
        if state is None:
            return False
        return self._compare(node, state.per_second, "amount", "perSecond")
    
    def _if_prestige_level(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        return self._compare(node, self.engine.prestige.level, "level", "amount")
    
    def _if_playtime(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        return self._compare(node, self.engine.elapsed_seconds / 60, "minutes", "amount")
    
    def _if_clicks(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        return self._compare(node, self.engine.production.total_clicks, "amount", "count", "clickCount")
    
    def _registry(self, node: LogicNode, context: Dict[str, Any]) -> bool:
        return self.engine.conditions.check(self.engine.view, node.value("condition"))
