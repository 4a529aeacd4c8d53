"""Economy managers - each owns one slice of the runtime state."""

from idlekit_engine.managers.achievements import AchievementManager
from idlekit_engine.managers.buildings import BuildingManager, calculate_scaled_cost
from idlekit_engine.managers.prestige import PrestigeManager
from idlekit_engine.managers.production import ProductionManager
from idlekit_engine.managers.resources import ResourceManager
from idlekit_engine.managers.upgrades import UpgradeManager

__all__ = [
    "AchievementManager",
    "BuildingManager",
    "calculate_scaled_cost",
    "PrestigeManager",
    "ProductionManager",
    "ResourceManager",
    "UpgradeManager",
]
