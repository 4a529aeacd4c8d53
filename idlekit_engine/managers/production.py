"""Continuous production, clicks and time-based threshold events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from idlekit_core.events import GLOBAL_TARGET, CounterEvent, GameEvent
from idlekit_core.utils.logging import get_logger

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.production")


class ProductionManager:
    """Integrates building output into balances every tick.
    
    Besides buildings, action nodes can add a flat per-second bonus
    (``add_production``) or scale a resource's whole output
    (``multiply_production``). Both persist until reset and apply on every
    subsequent ``calculate_production``.
    """
    
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self.total_clicks = 0
        self._flat: Dict[str, float] = {}
        self._factors: Dict[str, float] = {}
        self._click_override: Optional[float] = None
        self.reset()
    
    def reset(self) -> None:
        self.total_clicks = 0
        self._flat = {}
        self._factors = {}
        self._click_override = None
    
    @property
    def base_click_amount(self) -> float:
        if self._click_override is not None:
            return self._click_override
        clickable = self.engine.template.clickable_resource
        return clickable.click_amount if clickable else 0.0
    
    def click_value(self) -> float:
        """What one click yields right now, multipliers included."""
        clickable = self.engine.template.clickable_resource
        if clickable is None:
            return 0.0
        return self.base_click_amount * self.engine.upgrades.get_total_multiplier(clickable.id, "click")
    
    def calculate_production(self) -> None:
        """Recompute every ``per_second`` rate and credit one tick of output."""
        resources = self.engine.resources
        upgrades = self.engine.upgrades
        dt = self.engine.tick_seconds
        
        resources.reset_production()
        
        for definition in self.engine.template.buildings:
            owned = self.engine.buildings.owned(definition.id)
            if not owned:
                continue
            for entry in definition.produces:
                multiplier = upgrades.get_total_multiplier(entry.resource_id, "production")
                amount = entry.amount * owned * multiplier * self._factors.get(entry.resource_id, 1.0)
                resources.add_rate(entry.resource_id, amount)
                resources.add_resource(entry.resource_id, amount * dt, produced=True)
        
        for resource_id, bonus in self._flat.items():
            amount = bonus * self._factors.get(resource_id, 1.0)
            resources.add_rate(resource_id, amount)
            if amount > 0:
                resources.add_resource(resource_id, amount * dt, produced=True)
    
    def click(self) -> float:
        """Register one manual click.
        
        Returns:
            Amount credited to the clickable resource
        """
        self.total_clicks += 1
        interpreter = self.engine.interpreter
        interpreter.trigger_event(GameEvent.ON_CLICK.value, {})
        interpreter.check_event_counter(CounterEvent.AFTER_X_CLICKS.value, GLOBAL_TARGET, self.total_clicks)
        
        clickable = self.engine.template.clickable_resource
        if clickable is None:
            return 0.0
        amount = self.click_value()
        self.engine.resources.add_resource(clickable.id, amount)
        return amount
    
    def check_time_based_events(self) -> None:
        elapsed = self.engine.elapsed_seconds
        interpreter = self.engine.interpreter
        interpreter.check_event_counter(CounterEvent.AFTER_X_SECONDS.value, GLOBAL_TARGET, elapsed)
        interpreter.check_event_counter(CounterEvent.AFTER_PLAYTIME.value, GLOBAL_TARGET, elapsed / 60)
    
    def set_click_power(self, amount: float) -> None:
        self._click_override = max(0.0, amount)
    
    def add_production(self, resource_id: str, per_second: float) -> bool:
        if self.engine.resources.amount(resource_id) is None:
            logger.warning(f"Unknown resource: {resource_id}")
            return False
        self._flat[resource_id] = self._flat.get(resource_id, 0.0) + per_second
        return True
    
    def multiply_production(self, resource_id: str, factor: float) -> bool:
        if self.engine.resources.amount(resource_id) is None:
            logger.warning(f"Unknown resource: {resource_id}")
            return False
        self._factors[resource_id] = self._factors.get(resource_id, 1.0) * factor
        return True
    
    def modifiers(self) -> Dict[str, dict]:
        return {
            "flat": dict(self._flat),
            "factors": dict(self._factors),
            "click_override": self._click_override,
        }
