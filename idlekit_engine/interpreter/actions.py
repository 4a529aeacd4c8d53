"""Action nodes: the graph's only way to change simulation state.

Every action delegates to a manager operation; nothing here writes a state
record directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict

from idlekit_core.graph import LogicNode
from idlekit_core.utils.logging import get_logger

if TYPE_CHECKING:
    from idlekit_engine.interpreter.interpreter import LogicInterpreter

logger = get_logger("engine.interpreter.actions")


@dataclass
class EffectMetrics:
    """Click/production pair an ``applyEffect`` action runs an effect against."""

    click_power: float
    points_per_second: float


class ActionExecutor:
    def __init__(self, interpreter: "LogicInterpreter"):
        self.interpreter = interpreter
        self.engine = interpreter.engine
        self._actions: Dict[str, Callable[[LogicNode, Dict[str, Any]], None]] = {
            "addResource": self._add_resource,
            "removeResource": self._remove_resource,
            "setResource": self._set_resource,
            "multiplyResource": self._multiply_resource,
            "unlockUpgrade": self._unlock_upgrade,
            "unlockBuilding": self._unlock_building,
            "unlockAchievement": self._unlock_achievement,
            "showNotification": self._show_notification,
            "addProduction": self._add_production,
            "multiplyProduction": self._multiply_production,
            "setClickPower": self._set_click_power,
            "forcePrestige": self._force_prestige,
            "buyBuilding": self._buy_building,
            "buyUpgrade": self._buy_upgrade,
            "applyEffect": self._apply_effect,
        }

    def execute(self, node: LogicNode, context: Dict[str, Any]) -> None:
        action = self._actions.get(node.tag or "")
        if action is None:
            logger.warning(f"Node {node.id}: unknown action type {node.tag!r}")
            return
        action(node, context)

    def _require(self, node: LogicNode, *fields: str, number: bool = False) -> Any:
        value = node.number(*fields) if number else node.value(*fields)
        if value is None:
            logger.warning(f"Node {node.id}: {node.tag} needs {fields[0]}")
        return value

    # ------------------------------------------------------------------ #
    # Resources
    # ------------------------------------------------------------------ #

    def _add_resource(self, node: LogicNode, context: Dict[str, Any]) -> None:
        resource_id = self._require(node, "resourceId")
        amount = self._require(node, "amount", "value", number=True)
        if resource_id and amount:
            self.engine.resources.add_resource(resource_id, amount)

    def _remove_resource(self, node: LogicNode, context: Dict[str, Any]) -> None:
        resource_id = self._require(node, "resourceId")
        amount = self._require(node, "amount", "value", number=True)
        if resource_id and amount:
            self.engine.resources.remove_resource(resource_id, amount)

    def _set_resource(self, node: LogicNode, context: Dict[str, Any]) -> None:
        resource_id = self._require(node, "resourceId")
        amount = self._require(node, "amount", "value", number=True)
        if resource_id and amount is not None:
            self.engine.resources.set_resource(resource_id, amount)

    def _multiply_resource(self, node: LogicNode, context: Dict[str, Any]) -> None:
        resource_id = self._require(node, "resourceId")
        factor = self._require(node, "multiplier", "factor", number=True)
        if resource_id and factor is not None:
            self.engine.resources.multiply_resource(resource_id, factor)

    # ------------------------------------------------------------------ #
    # Unlocks and purchases
    # ------------------------------------------------------------------ #

    def _unlock_upgrade(self, node: LogicNode, context: Dict[str, Any]) -> None:
        if upgrade_id := self._require(node, "upgradeId"):
            self.engine.upgrades.unlock_upgrade(upgrade_id)

    def _unlock_building(self, node: LogicNode, context: Dict[str, Any]) -> None:
        if building_id := self._require(node, "buildingId"):
            self.engine.buildings.unlock_building(building_id)

    def _unlock_achievement(self, node: LogicNode, context: Dict[str, Any]) -> None:
        if achievement_id := self._require(node, "achievementId"):
            self.engine.achievements.unlock_achievement(achievement_id)

    def _buy_building(self, node: LogicNode, context: Dict[str, Any]) -> None:
        if building_id := self._require(node, "buildingId"):
            self.engine.buildings.buy_building(building_id, int(node.number("amount", default=1)))

    def _buy_upgrade(self, node: LogicNode, context: Dict[str, Any]) -> None:
        if upgrade_id := self._require(node, "upgradeId"):
            self.engine.upgrades.buy_upgrade(upgrade_id)

    def _force_prestige(self, node: LogicNode, context: Dict[str, Any]) -> None:
        self.engine.prestige.perform_prestige(force=True)

    # ------------------------------------------------------------------ #
    # Production and click power
    # ------------------------------------------------------------------ #

    def _add_production(self, node: LogicNode, context: Dict[str, Any]) -> None:
        resource_id = self._require(node, "resourceId")
        per_second = self._require(node, "perSecond", "amount", number=True)
        if resource_id and per_second:
            self.engine.production.add_production(resource_id, per_second)

    def _multiply_production(self, node: LogicNode, context: Dict[str, Any]) -> None:
        resource_id = self._require(node, "resourceId")
        factor = self._require(node, "multiplier", "factor", number=True)
        if resource_id and factor is not None:
            self.engine.production.multiply_production(resource_id, factor)

    def _set_click_power(self, node: LogicNode, context: Dict[str, Any]) -> None:
        amount = self._require(node, "amount", "clickAmount", number=True)
        if amount is not None:
            self.engine.production.set_click_power(amount)

    def _apply_effect(self, node: LogicNode, context: Dict[str, Any]) -> None:
        effect = self._require(node, "effect")
        if effect is None:
            return
        production = self.engine.production
        currency = self.engine.template.currency_id
        before = EffectMetrics(
            click_power=production.base_click_amount,
            points_per_second=self.engine.resources.get_resource(currency).per_second,
        )
        after = EffectMetrics(before.click_power, before.points_per_second)
        level = int(node.number("level", default=1))
        if not self.engine.effects.execute(after, effect, level):
            return
        if after.click_power != before.click_power:
            production.set_click_power(after.click_power)
        if after.points_per_second != before.points_per_second:
            production.add_production(currency, after.points_per_second - before.points_per_second)

    # ------------------------------------------------------------------ #
    # Presentation
    # ------------------------------------------------------------------ #

    def _show_notification(self, node: LogicNode, context: Dict[str, Any]) -> None:
        message = self._require(node, "message")
        if message:
            duration = node.number("duration", default=3.0)
            self.engine.notifications.push(str(message), duration)
