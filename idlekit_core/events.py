"""Event names dispatched into the logic graph.

Two families exist. Plain events (``onClick``, ``afterBoughtBuilding`` ...)
fire every time they happen. Threshold events (``afterXClicks`` ...) are
checked through event counters and fire once per event node.
"""

from enum import Enum
from typing import Dict, Tuple


class GameEvent(str, Enum):
    """Events fired on every occurrence."""

    ON_GAME_START = "onGameStart"
    ON_TICK = "onTick"
    ON_CLICK = "onClick"
    ON_RESOURCE_FULL = "onResourceFull"
    ON_RESOURCE_EMPTY = "onResourceEmpty"
    AFTER_BOUGHT_BUILDING = "afterBoughtBuilding"
    ON_BUILDING_MAXED = "onBuildingMaxed"
    AFTER_BOUGHT_UPGRADE = "afterBoughtUpgrade"
    ON_ACHIEVEMENT_UNLOCK = "onAchievementUnlock"
    ON_PRESTIGE = "onPrestige"


class CounterEvent(str, Enum):
    """Threshold events latched by event counters."""

    AFTER_X_CLICKS = "afterXClicks"
    AFTER_X_SECONDS = "afterXSeconds"
    AFTER_PLAYTIME = "afterPlaytime"
    AFTER_X_RESOURCES = "afterXResources"
    AFTER_X_PRODUCTION = "afterXProduction"
    AFTER_X_RESOURCES_SPENT = "afterXResourcesSpent"
    AFTER_X_BUILDINGS = "afterXBuildings"
    AFTER_X_BOUGHT_UPGRADES = "afterXBoughtUpgrades"
    AFTER_X_ACHIEVEMENTS = "afterXAchievements"


# Counter target id used for events that are not tied to one resource/building
GLOBAL_TARGET = "global"

# Authored threshold field names per counter event, tried before the generic ones
COUNTER_THRESHOLD_FIELDS: Dict[str, Tuple[str, ...]] = {
    CounterEvent.AFTER_X_CLICKS.value: ("clickCount",),
    CounterEvent.AFTER_X_SECONDS.value: ("seconds",),
    CounterEvent.AFTER_PLAYTIME.value: ("minutes",),
    CounterEvent.AFTER_X_RESOURCES.value: (),
    CounterEvent.AFTER_X_PRODUCTION.value: ("totalProduced",),
    CounterEvent.AFTER_X_RESOURCES_SPENT.value: ("amountSpent",),
    CounterEvent.AFTER_X_BUILDINGS.value: ("buildingCount",),
    CounterEvent.AFTER_X_BOUGHT_UPGRADES.value: ("upgradeCount",),
    CounterEvent.AFTER_X_ACHIEVEMENTS.value: ("achievementCount",),
}

GENERIC_THRESHOLD_FIELDS: Tuple[str, ...] = ("amount", "count")


def is_counter_event(name: str) -> bool:
    return name in COUNTER_THRESHOLD_FIELDS


def known_event_names() -> set[str]:
    return {e.value for e in GameEvent} | {e.value for e in CounterEvent}
