"""Achievement evaluation; unlocks are permanent and fire once."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from idlekit_core.events import GLOBAL_TARGET, CounterEvent, GameEvent
from idlekit_core.requirements import requirements_met, requirements_progress
from idlekit_core.state import AchievementState
from idlekit_core.utils.logging import get_logger, log_operation

if TYPE_CHECKING:
    from idlekit_engine.engine import GameEngine

logger = get_logger("engine.achievements")


class AchievementManager:
    def __init__(self, engine: "GameEngine"):
        self.engine = engine
        self._achievements: Dict[str, AchievementState] = {}
        self.total_achievements_unlocked = 0
        self.reset()
    
    def reset(self) -> None:
        self._achievements = {a.id: AchievementState() for a in self.engine.template.achievements}
        self.total_achievements_unlocked = 0
    
    def get_achievement(self, achievement_id: str) -> Optional[AchievementState]:
        state = self._achievements.get(achievement_id)
        return state.model_copy() if state is not None else None
    
    def is_unlocked(self, achievement_id: str) -> bool:
        state = self._achievements.get(achievement_id)
        return state is not None and state.unlocked
    
    def check_achievements(self) -> int:
        """Unlock every locked achievement whose requirements now hold.
        
        Returns:
            Number of achievements unlocked by this call
        """
        view = self.engine.view
        unlocked = 0
        for definition in self.engine.template.achievements:
            state = self._achievements[definition.id]
            if state.unlocked:
                continue
            state.progress = requirements_progress(definition.requirements, view)
            met = requirements_met(definition.requirements, view)
            if met and definition.condition is not None:
                met = self.engine.conditions.check(view, definition.condition)
            if met and self.unlock_achievement(definition.id):
                unlocked += 1
        return unlocked
    
    def unlock_achievement(self, achievement_id: str) -> bool:
        """Unlock an achievement; False if unknown or already unlocked."""
        state = self._achievements.get(achievement_id)
        if state is None:
            logger.warning(f"Unknown achievement: {achievement_id}")
            return False
        if state.unlocked:
            return False
        
        state.unlocked = True
        state.progress = 100.0
        self.total_achievements_unlocked += 1
        log_operation(logger, "Achievement unlocked", {"id": achievement_id}, sim_time=self.engine.elapsed_seconds)
        
        interpreter = self.engine.interpreter
        interpreter.trigger_event(GameEvent.ON_ACHIEVEMENT_UNLOCK.value, {"achievementId": achievement_id})
        interpreter.check_event_counter(
            CounterEvent.AFTER_X_ACHIEVEMENTS.value, GLOBAL_TARGET, self.total_achievements_unlocked
        )
        return True
    
    def snapshot(self) -> Dict[str, dict]:
        return {aid: state.model_dump() for aid, state in self._achievements.items()}
