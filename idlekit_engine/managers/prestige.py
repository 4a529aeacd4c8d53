"""Prestige: meta-progression that survives resets."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict

from idlekit_core.events import GameEvent
from idlekit_core.state import PrestigeState
from idlekit_core.utils.logging import get_logger, log_operation

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.prestige")


class PrestigeManager:
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self.state = PrestigeState()
    
    def reset(self) -> None:
        self.state = PrestigeState()
    
    @property
    def level(self) -> int:
        return self.state.level
    
    @property
    def currency(self) -> int:
        return self.state.currency
    
    def calculate_prestige_currency(self) -> int:
        """Currency a prestige right now would be worth."""
        config = self.engine.template.prestige
        resource = self.engine.resources.get_resource(config.base_resource)
        if resource is None:
            return 0
        total = resource.total
        
        if config.formula == "log":
            currency = math.floor(math.log10(total) * config.multiplier) if total > 0 else 0
        elif config.formula == "linear":
            currency = math.floor(total / config.divisor)
        else:
            currency = math.floor(math.sqrt(total / config.divisor))
        return max(0, currency)
    
    def can_prestige(self) -> bool:
        if not self.engine.template.prestige.enabled:
            return False
        return self.calculate_prestige_currency() > self.state.currency
    
    def get_prestige_bonus(self) -> Dict[str, float]:
        return {
            "level": self.state.level,
            "currency": self.state.currency,
            "productionMultiplier": 1 + self.state.level * 0.1,
            "clickMultiplier": 1 + self.state.currency * 0.05,
        }
    
    def perform_prestige(self, force: bool = False) -> bool:
        """Gain a prestige level and restart the run.
        
        Args:
            force: Skip the ``can_prestige`` gate (forcePrestige actions)
            
        Returns:
            True if the prestige happened
        """
        if not force and not self.can_prestige():
            return False
        
        earned = self.calculate_prestige_currency()
        self.state.level += 1
        self.state.currency = max(self.state.currency, earned)
        log_operation(logger, "Prestige", {"level": self.state.level, "currency": self.state.currency},
                      sim_time=self.engine.elapsed_seconds)
        
        self.engine.reset(keep_prestige=True)
        self.engine.interpreter.trigger_event(GameEvent.ON_PRESTIGE.value, {"level": self.state.level})
        return True
