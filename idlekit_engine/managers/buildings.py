"""Building purchases and the geometric cost curve."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, Optional

from idlekit_core.events import CounterEvent, GameEvent
from idlekit_core.requirements import requirements_met
from idlekit_core.state import BuildingState
from idlekit_core.template import BuildingDefinition
from idlekit_core.utils.logging import get_logger, log_operation

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.buildings")


def calculate_scaled_cost(base: float, scaling: float, owned: int, amount: int = 1) -> int:
    """Total price of ``amount`` buildings when ``owned`` are already owned.
    
    floor(sum(base * scaling^(owned + i) for i in range(amount)))
    """
    total = 0.0
    for i in range(amount):
        total += base * scaling ** (owned + i)
    return math.floor(total)


class BuildingManager:
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self._buildings: Dict[str, BuildingState] = {}
        self.total_buildings_purchased = 0
        self.reset()
    
    def reset(self) -> None:
        self._buildings = {b.id: BuildingState() for b in self.engine.template.buildings}
        self.total_buildings_purchased = 0
    
    def get_building(self, building_id: str) -> Optional[BuildingState]:
        state = self._buildings.get(building_id)
        return state.model_copy() if state is not None else None
    
    def owned(self, building_id: str) -> Optional[int]:
        state = self._buildings.get(building_id)
        return state.owned if state is not None else None
    
    def get_cost(self, building_id: str, amount: int = 1) -> Dict[str, int]:
        """Price of the next ``amount`` buildings, per resource."""
        definition = self.engine.template.get_building(building_id)
        if definition is None:
            return {}
        return self._cost(definition, self._buildings[building_id].owned, amount)
    
    @staticmethod
    def _cost(definition: BuildingDefinition, owned: int, amount: int) -> Dict[str, int]:
        costs: Dict[str, int] = {}
        for entry in definition.cost:
            price = calculate_scaled_cost(entry.base_amount, definition.cost_scaling, owned, amount)
            costs[entry.resource_id] = costs.get(entry.resource_id, 0) + price
        return costs
    
    def buy_building(self, building_id: str, amount: int = 1) -> bool:
        """Buy ``amount`` buildings, all or nothing.
        
        Returns:
            False if the building is unknown, locked, would exceed
            ``maxOwned``, or any cost resource is short. Nothing is deducted
            in that case.
        """
        definition = self.engine.template.get_building(building_id)
        if definition is None:
            logger.warning(f"Unknown building: {building_id}")
            return False
        if amount < 1:
            return False
        
        state = self._buildings[building_id]
        if not state.unlocked:
            return False
        if definition.max_owned is not None and state.owned + amount > definition.max_owned:
            return False
        
        costs = self._cost(definition, state.owned, amount)
        previous = self.engine.resources.deduct(costs)
        if previous is None:
            return False
        
        state.owned += amount
        state.total_bought += amount
        self.total_buildings_purchased += amount
        log_operation(logger, "Bought building", {"id": building_id, "amount": amount, "owned": state.owned},
                      sim_time=self.engine.elapsed_seconds)
        
        self.engine.resources.notify_spent(previous)
        interpreter = self.engine.interpreter
        interpreter.trigger_event(
            GameEvent.AFTER_BOUGHT_BUILDING.value, {"buildingId": building_id, "amount": amount}
        )
        interpreter.check_event_counter(CounterEvent.AFTER_X_BUILDINGS.value, building_id, state.owned)
        if definition.max_owned is not None and state.owned == definition.max_owned:
            interpreter.trigger_event(GameEvent.ON_BUILDING_MAXED.value, {"buildingId": building_id})
        return True
    
    def unlock_building(self, building_id: str) -> bool:
        state = self._buildings.get(building_id)
        if state is None:
            logger.warning(f"Unknown building: {building_id}")
            return False
        state.unlocked = True
        return True
    
    def update_unlocked(self) -> None:
        """Unlock buildings whose requirements now hold; unlocks are permanent."""
        view = self.engine.view
        for definition in self.engine.template.buildings:
            state = self._buildings[definition.id]
            if not state.unlocked and requirements_met(definition.requirements, view):
                state.unlocked = True
    
    def snapshot(self) -> Dict[str, dict]:
        return {bid: state.model_dump() for bid, state in self._buildings.items()}
