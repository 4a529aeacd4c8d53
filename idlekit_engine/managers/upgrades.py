"""One-shot upgrades: unlocking, purchase and multiplier stacking."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from idlekit_core.effects import EffectType, multiply_factor
from idlekit_core.events import GLOBAL_TARGET, CounterEvent, GameEvent
from idlekit_core.requirements import requirements_met
from idlekit_core.state import UpgradeState
from idlekit_core.template import UpgradeDefinition
from idlekit_core.utils.logging import get_logger, log_operation

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.upgrades")

PRESTIGE_BONUS_PER_LEVEL = 0.1


class UpgradeManager:
    """Owns every ``UpgradeState`` of the economy form.
    
    An upgrade is unlocked while its requirement list holds and its optional
    unlock condition checks true; ``unlock_upgrade`` pins it unlocked for
    good. Purchased upgrades stay purchased until a reset.
    """
    
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self._upgrades: Dict[str, UpgradeState] = {}
        self.total_upgrades_purchased = 0
        self.reset()
    
    def reset(self) -> None:
        self._upgrades = {u.id: UpgradeState() for u in self.engine.template.upgrades}
        self.total_upgrades_purchased = 0
    
    def get_upgrade(self, upgrade_id: str) -> Optional[UpgradeState]:
        state = self._upgrades.get(upgrade_id)
        return state.model_copy() if state is not None else None
    
    def is_purchased(self, upgrade_id: str) -> bool:
        state = self._upgrades.get(upgrade_id)
        return state is not None and state.purchased
    
    def purchased_count(self) -> int:
        return sum(1 for state in self._upgrades.values() if state.purchased)
    
    def get_cost(self, upgrade_id: str) -> Dict[str, float]:
        definition = self.engine.template.get_upgrade(upgrade_id)
        if definition is None:
            return {}
        return self._cost(definition)
    
    @staticmethod
    def _cost(definition: UpgradeDefinition) -> Dict[str, float]:
        costs: Dict[str, float] = {}
        for entry in definition.cost:
            costs[entry.resource_id] = costs.get(entry.resource_id, 0) + entry.amount
        return costs
    
    def buy_upgrade(self, upgrade_id: str) -> bool:
        """Purchase an unlocked, unpurchased, affordable upgrade.
        
        Returns:
            False, with no state changed, when any gate fails
        """
        definition = self.engine.template.get_upgrade(upgrade_id)
        if definition is None:
            logger.warning(f"Unknown upgrade: {upgrade_id}")
            return False
        
        state = self._upgrades[upgrade_id]
        if state.purchased or not state.unlocked:
            return False
        previous = self.engine.resources.deduct(self._cost(definition))
        if previous is None:
            return False
        
        state.purchased = True
        self.total_upgrades_purchased += 1
        log_operation(logger, "Bought upgrade", {"id": upgrade_id}, sim_time=self.engine.elapsed_seconds)
        
        self.engine.resources.notify_spent(previous)
        interpreter = self.engine.interpreter
        interpreter.trigger_event(GameEvent.AFTER_BOUGHT_UPGRADE.value, {"upgradeId": upgrade_id})
        interpreter.check_event_counter(
            CounterEvent.AFTER_X_BOUGHT_UPGRADES.value, GLOBAL_TARGET, self.total_upgrades_purchased
        )
        return True
    
    def unlock_upgrade(self, upgrade_id: str) -> bool:
        state = self._upgrades.get(upgrade_id)
        if state is None:
            logger.warning(f"Unknown upgrade: {upgrade_id}")
            return False
        state.forced = True
        state.unlocked = True
        return True
    
    def update_unlocked_upgrades(self) -> None:
        """Re-evaluate unlock state of every upgrade not yet purchased."""
        view = self.engine.view
        conditions = self.engine.conditions
        for definition in self.engine.template.upgrades:
            state = self._upgrades[definition.id]
            if state.purchased or state.forced:
                continue
            unlocked = requirements_met(definition.requirements, view)
            if unlocked and definition.unlock_condition is not None:
                unlocked = conditions.check(view, definition.unlock_condition)
            state.unlocked = unlocked
    
    def get_prestige_multiplier(self) -> float:
        return 1 + self.engine.prestige.level * PRESTIGE_BONUS_PER_LEVEL
    
    def get_total_multiplier(self, resource_id: str, kind: str) -> float:
        """Product of purchased ``multiply`` effects for ``kind`` and the prestige factor.
        
        Args:
            resource_id: Resource being produced or clicked
            kind: "click" or "production"
        """
        multiplier = 1.0
        for definition in self.engine.template.upgrades:
            if not self._upgrades[definition.id].purchased:
                continue
            for effect in definition.effects:
                if effect.type != EffectType.MULTIPLY.value or effect.param("target") != kind:
                    continue
                scoped = effect.param("resourceId")
                if scoped is None or scoped == resource_id:
                    multiplier *= multiply_factor(effect)
        return multiplier * self.get_prestige_multiplier()
    
    def snapshot(self) -> Dict[str, dict]:
        return {uid: state.model_dump() for uid, state in self._upgrades.items()}
