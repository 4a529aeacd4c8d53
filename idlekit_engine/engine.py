"""idlekit Engine - economy-form simulation runtime.

The GameEngine owns one run of a validated GameTemplate:
1. Builds the managers (resources, buildings, upgrades, achievements,
   production, prestige) and the logic interpreter
2. Advances simulated time one fixed tick at a time
3. Routes player intents (click, buy, prestige) to the managers
4. Lets the logic graph react to the events the managers raise

Architecture:
- Managers are the only writers of simulation state
- Condition and effect behavior comes from injected registries
- Delays run on a simulation-time Scheduler, cancelled on reset and shutdown
"""

from __future__ import annotations

import random
from typing import Any, Dict, Mapping, Optional, Union

from idlekit_core.conditions import ConditionRegistry
from idlekit_core.effects import EffectRegistry
from idlekit_core.events import GameEvent
from idlekit_core.template import GameTemplate
from idlekit_core.utils.logging import get_logger, log_operation
from idlekit_engine.config import EngineConfig
from idlekit_engine.interpreter import LogicInterpreter
from idlekit_engine.managers import (
    AchievementManager,
    BuildingManager,
    PrestigeManager,
    ProductionManager,
    ResourceManager,
    UpgradeManager,
)
from idlekit_engine.notifications import NotificationQueue
from idlekit_engine.scheduler import Scheduler
from idlekit_engine.world_state import StateView

logger = get_logger("engine")


class GameEngine:
    """Core runtime for one template.
    
    Responsibilities:
    - Tick loop step (production, achievements, unlocks, time events)
    - Player intents
    - Reset and teardown
    
    Usage:
        engine = GameEngine(load_template("game.yaml"))
        engine.start()
        engine.click()
        for _ in range(100):
            engine.tick()
    """
    
    def __init__(
        self,
        template: Union[GameTemplate, Mapping[str, Any]],
        config: Optional[EngineConfig] = None,
        effects: Optional[EffectRegistry] = None,
        conditions: Optional[ConditionRegistry] = None,
    ):
        """Initialize engine with a template.
        
        Args:
            template: Validated GameTemplate, or raw template data to validate
            config: Engine configuration (defaults to EngineConfig())
            effects: Effect registry (defaults to the built-in effects)
            conditions: Condition registry (defaults to the built-in conditions)
            
        Raises:
            TemplateValidationError: If the template is invalid
        """
        if isinstance(template, GameTemplate):
            template.check_references()
        else:
            template = GameTemplate.from_dict(template)
        self.template = template
        self.config = config or EngineConfig()
        self.effects = effects or EffectRegistry.with_builtins()
        self.conditions = conditions or ConditionRegistry.with_builtins()
        
        self.tick_rate: int = self.config.tick_rate_ms or template.settings.tick_rate
        self.rng = random.Random(self.config.seed)
        self.scheduler = Scheduler()
        self.notifications = NotificationQueue(self)
        self.view = StateView(self)
        
        # Simulation clock
        self.current_tick: int = 0
        self.elapsed_seconds: float = 0.0
        self.is_started: bool = False
        
        # Interpreter first: managers raise events from their operations
        self.interpreter = LogicInterpreter(self)
        self.resources = ResourceManager(self)
        self.buildings = BuildingManager(self)
        self.upgrades = UpgradeManager(self)
        self.achievements = AchievementManager(self)
        self.production = ProductionManager(self)
        self.prestige = PrestigeManager(self)
        
        self._refresh_unlocks()
        logger.info(
            f"Loaded template '{template.meta.name}' "
            f"({len(template.resources)} resources, {len(template.buildings)} buildings, "
            f"{len(template.upgrades)} upgrades, {self.interpreter.graph.node_count} nodes)"
        )
    
    @property
    def tick_seconds(self) -> float:
        return self.tick_rate / 1000
    
    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    
    def start(self) -> None:
        """Fire ``onGameStart`` once per run."""
        if self.is_started:
            return
        self.is_started = True
        self.interpreter.trigger_event(GameEvent.ON_GAME_START.value, {})
        self._refresh_unlocks()
    
    def tick(self) -> None:
        """Advance the simulation by one tick."""
        self.current_tick += 1
        # derived from the tick count so thresholds do not drift
        self.elapsed_seconds = self.current_tick * self.tick_seconds
        self.scheduler.advance_to(self.elapsed_seconds)
        
        self.interpreter.trigger_event(GameEvent.ON_TICK.value, {})
        self.production.calculate_production()
        self.achievements.check_achievements()
        self._refresh_unlocks()
        self.production.check_time_based_events()
    
    def reset(self, keep_prestige: bool = False) -> None:
        """Restart the run.
        
        Args:
            keep_prestige: Keep prestige state, event counters and playtime
                (used by prestige itself)
        """
        self.resources.reset()
        self.buildings.reset()
        self.upgrades.reset()
        self.achievements.reset()
        self.production.reset()
        
        if keep_prestige:
            self.scheduler.cancel_all()
        else:
            self.scheduler.reset()
            self.prestige.reset()
            self.interpreter.counters.clear()
            self.notifications.clear()
            self.current_tick = 0
            self.elapsed_seconds = 0.0
            self.is_started = False
        
        self._refresh_unlocks()
        log_operation(logger, "Reset", {"keep_prestige": keep_prestige}, sim_time=self.elapsed_seconds)
    
    def stop(self) -> None:
        """Cancel pending delayed continuations; state is kept."""
        cancelled = self.scheduler.cancel_all()
        if cancelled:
            logger.info(f"Stopped with {cancelled} delayed continuation(s) cancelled")
    
    def shutdown(self) -> None:
        """Final teardown; nothing scheduled survives."""
        self.stop()
        self.notifications.clear()
        self.is_started = False
    
    def _refresh_unlocks(self) -> None:
        self.upgrades.update_unlocked_upgrades()
        self.buildings.update_unlocked()
    
    # ------------------------------------------------------------------ #
    # Player intents
    # ------------------------------------------------------------------ #
    
    def click(self) -> float:
        """One manual click; returns the amount credited."""
        return self.production.click()
    
    def buy_building(self, building_id: str, amount: int = 1) -> bool:
        return self.buildings.buy_building(building_id, amount)
    
    def buy_upgrade(self, upgrade_id: str) -> bool:
        return self.upgrades.buy_upgrade(upgrade_id)
    
    def perform_prestige(self) -> bool:
        return self.prestige.perform_prestige()
    
    # ------------------------------------------------------------------ #
    # Read surface
    # ------------------------------------------------------------------ #
    
    def get_resource(self, resource_id: str):
        return self.resources.get_resource(resource_id)
    
    def get_building(self, building_id: str):
        return self.buildings.get_building(building_id)
    
    def get_upgrade(self, upgrade_id: str):
        return self.upgrades.get_upgrade(upgrade_id)
    
    def get_achievement(self, achievement_id: str):
        return self.achievements.get_achievement(achievement_id)
    
    def snapshot(self) -> Dict[str, Any]:
        """Plain-data copy of the whole run, for display or persistence."""
        return {
            "template": self.template.meta.id,
            "tick": self.current_tick,
            "elapsed_seconds": self.elapsed_seconds,
            "total_clicks": self.production.total_clicks,
            "resources": self.resources.snapshot(),
            "buildings": self.buildings.snapshot(),
            "upgrades": self.upgrades.snapshot(),
            "achievements": self.achievements.snapshot(),
            "prestige": self.prestige.state.model_dump(),
            "modifiers": self.production.modifiers(),
            "counters": self.interpreter.counters.snapshot(),
            "pending_delays": self.scheduler.pending,
            "notifications": [n.model_dump() for n in self.notifications.pending],
        }
