"""ClickerGame - the leveled single-resource form.

One currency ("points"), a click power and a passive rate. Upgrades are
leveled: every purchase raises the level and the next cost by
``costMultiplier``. Click power and rate are never stored incrementally;
``recalculate()`` rebuilds them from base values by applying every owned
upgrade's effects in template order, so the result is independent of
purchase history.

Buildings, the logic graph and prestige belong to the economy form
(``GameEngine``) and are ignored here.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from idlekit_core.conditions import ConditionRegistry
from idlekit_core.effects import EffectRegistry
from idlekit_core.loader import load_default_template
from idlekit_core.requirements import requirements_met
from idlekit_core.template import GameTemplate, UpgradeDefinition
from idlekit_core.utils.logging import get_logger, log_operation

logger = get_logger("engine.clicker")

BASE_CLICK_POWER = 1.0
BASE_POINTS_PER_SECOND = 0.0


class ClickerGame:
    """Leveled idle game driven by effect and condition descriptors.
    
    Usage:
        game = ClickerGame()
        game.click()
        game.buy_upgrade("clickPower")
        game.tick(1.0)
    """
    
    # no prestige in the leveled form
    prestige_level = 0
    
    def __init__(
        self,
        template: Optional[GameTemplate] = None,
        effects: Optional[EffectRegistry] = None,
        conditions: Optional[ConditionRegistry] = None,
    ):
        """Initialize the game.
        
        Args:
            template: Game template (the bundled default when omitted)
            effects: Effect registry (defaults to the built-in effects)
            conditions: Condition registry (defaults to the built-in conditions)
        """
        self.template = template or load_default_template()
        self.effects = effects or EffectRegistry.with_builtins()
        self.conditions = conditions or ConditionRegistry.with_builtins()
        self.tick_seconds = self.template.settings.tick_rate / 1000
        
        self.points: float = 0.0
        self.total_points_earned: float = 0.0
        self.total_clicks: int = 0
        self.click_power: float = BASE_CLICK_POWER
        self.points_per_second: float = BASE_POINTS_PER_SECOND
        self.playtime_seconds: float = 0.0
        
        self.levels: Dict[str, int] = {}
        self.unlocked: Dict[str, bool] = {}
        self.achievements: List[str] = []
        self.reset()
    
    def reset(self) -> None:
        self.points = 0.0
        self.total_points_earned = 0.0
        self.total_clicks = 0
        self.playtime_seconds = 0.0
        self.levels = {u.id: 0 for u in self.template.upgrades}
        self.unlocked = {u.id: self._unlock_gate_empty(u) for u in self.template.upgrades}
        self.achievements = []
        self.recalculate()
        self.refresh_unlocks()
    
    @staticmethod
    def _unlock_gate_empty(definition: UpgradeDefinition) -> bool:
        return definition.unlock_condition is None and not definition.requirements
    
    # ------------------------------------------------------------------ #
    # Player intents
    # ------------------------------------------------------------------ #
    
    def click(self) -> float:
        """Earn one click's worth of points; returns the amount earned."""
        self.total_clicks += 1
        self._earn(self.click_power)
        self.refresh_unlocks()
        return self.click_power
    
    def tick(self, dt: Optional[float] = None) -> None:
        """Advance ``dt`` seconds (one template tick when omitted)."""
        dt = self.tick_seconds if dt is None else dt
        if dt <= 0:
            return
        self.playtime_seconds += dt
        self._earn(self.points_per_second * dt)
        self.refresh_unlocks()
    
    def buy_upgrade(self, upgrade_id: str) -> bool:
        """Buy the next level of an upgrade.
        
        Returns:
            False, with nothing changed, unless the upgrade is unlocked,
            affordable and below its max level
        """
        definition = self.template.get_upgrade(upgrade_id)
        if definition is None:
            logger.warning(f"Unknown upgrade: {upgrade_id}")
            return False
        if not self.can_afford(upgrade_id):
            return False
        
        cost = self.get_cost(upgrade_id)
        self.points -= cost
        self.levels[upgrade_id] += 1
        log_operation(logger, "Upgrade bought", {"id": upgrade_id, "level": self.levels[upgrade_id], "cost": cost},
                      sim_time=self.playtime_seconds)
        
        self.recalculate()
        self.refresh_unlocks()
        return True
    
    # ------------------------------------------------------------------ #
    # Upgrade queries
    # ------------------------------------------------------------------ #
    
    def get_cost(self, upgrade_id: str) -> Optional[int]:
        definition = self.template.get_upgrade(upgrade_id)
        if definition is None:
            return None
        return definition.get_current_cost(self.levels[upgrade_id])
    
    def can_afford(self, upgrade_id: str) -> bool:
        definition = self.template.get_upgrade(upgrade_id)
        if definition is None:
            return False
        level = self.levels[upgrade_id]
        return (
            self.unlocked[upgrade_id]
            and self.points >= definition.get_current_cost(level)
            and level < definition.level_cap
        )
    
    def unlock_description(self, upgrade_id: str) -> Optional[str]:
        """Player-facing unlock text; authored text wins over the generated one."""
        definition = self.template.get_upgrade(upgrade_id)
        if definition is None:
            return None
        if definition.unlock_description:
            return definition.unlock_description
        if definition.unlock_condition is None:
            return None
        return self.conditions.describe(definition.unlock_condition)
    
    # ------------------------------------------------------------------ #
    # Derived state
    # ------------------------------------------------------------------ #
    
    def recalculate(self) -> None:
        """Rebuild click power and rate from base values and owned levels."""
        self.click_power = BASE_CLICK_POWER
        self.points_per_second = BASE_POINTS_PER_SECOND
        for definition in self.template.upgrades:
            level = self.levels[definition.id]
            if level <= 0:
                continue
            for effect in definition.effects:
                self.effects.execute(self, effect, level)
    
    def refresh_unlocks(self) -> List[str]:
        """Unlock upgrades and achievements whose conditions now hold.
        
        Unlocks are permanent.
        
        Returns:
            Ids unlocked by this call
        """
        newly: List[str] = []
        for definition in self.template.upgrades:
            if self.unlocked[definition.id]:
                continue
            met = requirements_met(definition.requirements, self)
            if met and definition.unlock_condition is not None:
                met = self.conditions.check(self, definition.unlock_condition)
            if met:
                self.unlocked[definition.id] = True
                newly.append(definition.id)
                logger.debug(f"Upgrade unlocked: {definition.id}")
        
        for achievement in self.template.achievements:
            if achievement.id in self.achievements:
                continue
            met = requirements_met(achievement.requirements, self)
            if met and achievement.condition is not None:
                met = self.conditions.check(self, achievement.condition)
            if met:
                self.achievements.append(achievement.id)
                newly.append(achievement.id)
                log_operation(logger, "Achievement unlocked", {"id": achievement.id},
                              sim_time=self.playtime_seconds)
        return newly
    
    def _earn(self, amount: float) -> None:
        self.points += amount
        self.total_points_earned += amount
    
    # ------------------------------------------------------------------ #
    # Condition and requirement context
    # ------------------------------------------------------------------ #
    
    def upgrade_level(self, upgrade_id: str) -> int:
        return self.levels.get(upgrade_id, 0)
    
    def upgrade_max_level(self, upgrade_id: str) -> Optional[float]:
        definition = self.template.get_upgrade(upgrade_id)
        return definition.level_cap if definition else None
    
    def upgrade_levels(self) -> List[int]:
        return list(self.levels.values())
    
    def has_achievement(self, achievement_id: str) -> bool:
        return achievement_id in self.achievements
    
    def achievement_count(self) -> int:
        return len(self.achievements)
    
    def resource_amount(self, resource_id: str) -> float:
        return self.points if resource_id == self.template.currency_id else 0.0
    
    def building_owned(self, building_id: str) -> int:
        return 0
    
    def upgrade_purchased(self, upgrade_id: str) -> bool:
        return self.upgrade_level(upgrade_id) > 0
    
    def achievement_unlocked(self, achievement_id: str) -> bool:
        return self.has_achievement(achievement_id)
    
    def snapshot(self) -> Dict[str, Any]:
        return {
            "points": self.points,
            "total_points_earned": self.total_points_earned,
            "total_clicks": self.total_clicks,
            "click_power": self.click_power,
            "points_per_second": self.points_per_second,
            "playtime_seconds": self.playtime_seconds,
            "levels": dict(self.levels),
            "unlocked": dict(self.unlocked),
            "achievements": list(self.achievements),
        }
