"""Resource balances and the edge-triggered full/empty events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Mapping, Optional

from idlekit_core.events import CounterEvent, GameEvent
from idlekit_core.state import ResourceState
from idlekit_core.utils.logging import get_logger

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.resources")


class ResourceManager:
    """Owns every ``ResourceState``.
    
    All balance changes go through this class so that ``onResourceFull`` /
    ``onResourceEmpty`` fire on the tick where the balance crosses the cap or
    zero, and the cumulative threshold counters stay current.
    """
    
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self._resources: Dict[str, ResourceState] = {}
        self.reset()
    
    def reset(self) -> None:
        self._resources = {
            definition.id: ResourceState(
                amount=definition.start_amount,
                total=definition.start_amount,
                max_amount=definition.cap,
            )
            for definition in self.engine.template.resources
        }
    
    # ------------------------------------------------------------------ #
    # Read surface
    # ------------------------------------------------------------------ #
    
    def get_resource(self, resource_id: str) -> Optional[ResourceState]:
        """Copy of a resource's state, or None if unknown."""
        state = self._resources.get(resource_id)
        return state.model_copy() if state is not None else None
    
    def amount(self, resource_id: str) -> Optional[float]:
        state = self._resources.get(resource_id)
        return state.amount if state is not None else None
    
    def ids(self) -> list[str]:
        return list(self._resources.keys())
    
    def can_afford(self, costs: Mapping[str, float]) -> bool:
        """True if every resource in ``costs`` covers its amount."""
        for resource_id, needed in costs.items():
            state = self._resources.get(resource_id)
            if state is None:
                logger.warning(f"Cost references unknown resource: {resource_id}")
                return False
            if state.amount < needed:
                return False
        return True
    
    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    
    def _lookup(self, resource_id: str) -> Optional[ResourceState]:
        state = self._resources.get(resource_id)
        if state is None:
            logger.warning(f"Unknown resource: {resource_id}")
        return state
    
    def _fire_edges(self, resource_id: str, old: float, new: float) -> None:
        state = self._resources[resource_id]
        interpreter = self.engine.interpreter
        if old < state.max_amount <= new:
            interpreter.trigger_event(GameEvent.ON_RESOURCE_FULL.value, {"resourceId": resource_id})
        if old > 0 >= new:
            interpreter.trigger_event(GameEvent.ON_RESOURCE_EMPTY.value, {"resourceId": resource_id})
    
    def add_resource(self, resource_id: str, amount: float, produced: bool = False) -> bool:
        """Add to a balance, clamped at the resource's cap.
        
        Args:
            resource_id: Resource to credit
            amount: Non-negative amount
            produced: True when the gain comes from production, which also
                advances ``total_produced``
                
        Returns:
            False if the resource is unknown or the amount is negative
        """
        state = self._lookup(resource_id)
        if state is None:
            return False
        if amount < 0:
            logger.warning(f"add_resource({resource_id}) with negative amount {amount}")
            return False
        
        old = state.amount
        state.amount = min(old + amount, state.max_amount)
        gained = state.amount - old
        state.total += gained
        if produced:
            state.total_produced += gained
        
        self._fire_edges(resource_id, old, state.amount)
        
        interpreter = self.engine.interpreter
        interpreter.check_event_counter(CounterEvent.AFTER_X_RESOURCES.value, resource_id, state.amount)
        if produced:
            interpreter.check_event_counter(
                CounterEvent.AFTER_X_PRODUCTION.value, resource_id, state.total_produced
            )
        return True
    
    def remove_resource(self, resource_id: str, amount: float) -> bool:
        """Spend from a balance.
        
        Returns:
            False, with nothing changed, if the balance does not cover ``amount``
        """
        state = self._lookup(resource_id)
        if state is None or amount < 0:
            return False
        if state.amount < amount:
            return False
        
        old = state.amount
        state.amount = old - amount
        state.total_spent += amount
        
        self._after_spend(resource_id, old)
        return True
    
    def _after_spend(self, resource_id: str, old: float) -> None:
        state = self._resources[resource_id]
        self.engine.interpreter.check_event_counter(
            CounterEvent.AFTER_X_RESOURCES_SPENT.value, resource_id, state.total_spent
        )
        self._fire_edges(resource_id, old, state.amount)
    
    def deduct(self, costs: Mapping[str, float]) -> Optional[Dict[str, float]]:
        """Deduct several costs atomically, without firing any event.
        
        Graph reactions to the spending must not run between two deductions,
        so the caller finishes its purchase and then hands the returned
        balances to ``notify_spent``.
        
        Returns:
            Balances before the deduction, or None (nothing deducted) if any
            cost is not covered
        """
        if not self.can_afford(costs):
            return None
        previous: Dict[str, float] = {}
        for resource_id, needed in costs.items():
            state = self._resources[resource_id]
            previous[resource_id] = state.amount
            state.amount -= needed
            state.total_spent += needed
        return previous
    
    def notify_spent(self, previous: Mapping[str, float]) -> None:
        """Fire the spent counters and empty/full edges for a finished ``deduct``."""
        for resource_id, old in previous.items():
            self._after_spend(resource_id, old)
    
    def set_resource(self, resource_id: str, amount: float) -> bool:
        """Overwrite a balance (clamped to [0, cap]); increases count toward ``total``."""
        state = self._lookup(resource_id)
        if state is None:
            return False
        old = state.amount
        state.amount = min(max(0.0, amount), state.max_amount)
        if state.amount > old:
            state.total += state.amount - old
        self._fire_edges(resource_id, old, state.amount)
        return True
    
    def multiply_resource(self, resource_id: str, factor: float) -> bool:
        state = self._lookup(resource_id)
        if state is None:
            return False
        return self.set_resource(resource_id, state.amount * factor)
    
    def reset_production(self) -> None:
        for state in self._resources.values():
            state.per_second = 0.0
    
    def add_rate(self, resource_id: str, per_second: float) -> None:
        state = self._lookup(resource_id)
        if state is not None:
            state.per_second += per_second
    
    def snapshot(self) -> Dict[str, dict]:
        return {rid: state.model_dump() for rid, state in self._resources.items()}
