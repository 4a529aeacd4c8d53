"""Read-only view of a running GameEngine.

Condition checkers and requirement predicates never see the managers; they
query this view, which answers both the condition and requirement
contexts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine


class StateView:
    """Query surface over a GameEngine's current state.
    
    Upgrades in the economy form are one-shot, so an upgrade's "level" is
    1 once purchased and 0 before.
    """
    
    def __init__(self, engine: "GameEngine"):
        """Initialize the view.
        
        Args:
            engine: Parent game engine
        """
        self.engine = engine
    
    # ------------------------------------------------------------------ #
    # Condition context
    # ------------------------------------------------------------------ #
    
    @property
    def points(self) -> float:
        return self.engine.resources.amount(self.engine.template.currency_id) or 0.0
    
    @property
    def total_points_earned(self) -> float:
        state = self.engine.resources.get_resource(self.engine.template.currency_id)
        return state.total if state else 0.0
    
    @property
    def points_per_second(self) -> float:
        state = self.engine.resources.get_resource(self.engine.template.currency_id)
        return state.per_second if state else 0.0
    
    @property
    def total_clicks(self) -> int:
        return self.engine.production.total_clicks
    
    @property
    def click_power(self) -> float:
        return self.engine.production.click_value()
    
    @property
    def playtime_seconds(self) -> float:
        return self.engine.elapsed_seconds
    
    def upgrade_level(self, upgrade_id: str) -> int:
        return 1 if self.engine.upgrades.is_purchased(upgrade_id) else 0
    
    def upgrade_max_level(self, upgrade_id: str) -> Optional[float]:
        return 1 if self.engine.template.get_upgrade(upgrade_id) else None
    
    def upgrade_levels(self) -> List[int]:
        return [self.upgrade_level(u.id) for u in self.engine.template.upgrades]
    
    def has_achievement(self, achievement_id: str) -> bool:
        return self.engine.achievements.is_unlocked(achievement_id)
    
    def achievement_count(self) -> int:
        return sum(
            1 for a in self.engine.template.achievements
            if self.engine.achievements.is_unlocked(a.id)
        )
    
    # ------------------------------------------------------------------ #
    # Requirement context
    # ------------------------------------------------------------------ #
    
    @property
    def prestige_level(self) -> int:
        return self.engine.prestige.level
    
    def resource_amount(self, resource_id: str) -> float:
        return self.engine.resources.amount(resource_id) or 0.0
    
    def building_owned(self, building_id: str) -> int:
        return self.engine.buildings.owned(building_id) or 0
    
    def upgrade_purchased(self, upgrade_id: str) -> bool:
        return self.engine.upgrades.is_purchased(upgrade_id)
    
    def achievement_unlocked(self, achievement_id: str) -> bool:
        return self.engine.achievements.is_unlocked(achievement_id)
