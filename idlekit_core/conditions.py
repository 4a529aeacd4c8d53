"""Condition Registry - whitelisted predicates over simulation state.

Every condition type registers a checker AND a describer so that the text
shown to a player always matches what is evaluated. Compound types
(``and``/``or``/``not``) recurse through the same registry.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from idlekit_core.utils.formatting import format_number
from idlekit_core.utils.logging import get_logger, log_error

logger = get_logger("core.conditions")


class ConditionContext(Protocol):
    """Read-only view of the state conditions are evaluated against."""

    points: float
    total_points_earned: float
    total_clicks: int
    points_per_second: float
    click_power: float
    playtime_seconds: float

    def upgrade_level(self, upgrade_id: str) -> int: ...

    def upgrade_max_level(self, upgrade_id: str) -> Optional[float]: ...

    def upgrade_levels(self) -> Iterable[int]: ...

    def has_achievement(self, achievement_id: str) -> bool: ...

    def achievement_count(self) -> int: ...


class ConditionDescriptor(BaseModel):
    """A typed condition; compound types nest through ``conditions``/``condition``."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1)
    conditions: Optional[List["ConditionDescriptor"]] = None
    condition: Optional["ConditionDescriptor"] = None

    def param(self, name: str, default: Any = None) -> Any:
        value = (self.model_extra or {}).get(name)
        return default if value is None else value


ConditionDescriptor.model_rebuild()

ConditionLike = Union[ConditionDescriptor, Mapping[str, Any], None]
Checker = Callable[[ConditionContext, ConditionDescriptor], bool]
Describer = Callable[[ConditionDescriptor], str]


# ============================================================================
# Registry
# ============================================================================


class ConditionRegistry:
    """Maps condition type tags to (checker, describer) pairs."""

    def __init__(self):
        self._checkers: Dict[str, Checker] = {}
        self._describers: Dict[str, Describer] = {}

    @classmethod
    def with_builtins(cls) -> "ConditionRegistry":
        registry = cls()
        _register_builtins(registry)
        return registry

    def register(self, condition_type: str, checker: Checker, describer: Describer) -> None:
        """Register a condition type.

        Raises:
            ValueError: If the checker or describer is missing
        """
        if not callable(checker) or not callable(describer):
            raise ValueError(f"Condition '{condition_type}' needs both a checker and a describer")
        self._checkers[condition_type] = checker
        self._describers[condition_type] = describer

    def has(self, condition_type: str) -> bool:
        return condition_type in self._checkers

    def available_types(self) -> List[str]:
        return list(self._checkers.keys())

    def check(self, ctx: ConditionContext, condition: ConditionLike) -> bool:
        """Evaluate a condition; unknown or malformed conditions are False."""
        descriptor = coerce_condition(condition)
        if descriptor is None:
            return False

        checker = self._checkers.get(descriptor.type)
        if checker is None:
            logger.warning(f"Unknown condition type: {descriptor.type}")
            return False

        try:
            return bool(checker(ctx, descriptor))
        except Exception as e:
            log_error(logger, f"condition {descriptor.type}", e)
            return False

    def describe(self, condition: ConditionLike) -> str:
        """Render a condition tree as player-facing text."""
        if not condition:
            return "No condition"
        descriptor = coerce_condition(condition)
        if descriptor is None:
            return "No condition"

        describer = self._describers.get(descriptor.type)
        if describer is None:
            return f"Unlock: {descriptor.type}"
        return describer(descriptor)


def coerce_condition(condition: ConditionLike) -> Optional[ConditionDescriptor]:
    if isinstance(condition, ConditionDescriptor):
        return condition
    if not isinstance(condition, Mapping) or not condition.get("type"):
        logger.warning(f"Invalid condition: {condition!r}")
        return None
    try:
        return ConditionDescriptor.model_validate(condition)
    except ValidationError:
        logger.warning(f"Malformed condition: {dict(condition)!r}")
        return None


# ============================================================================
# Built-in conditions
# ============================================================================


def _register_builtins(registry: ConditionRegistry) -> None:
    def value(cond: ConditionDescriptor, default: float = 0) -> float:
        return cond.param("value", default)

    registry.register(
        "always",
        lambda ctx, c: True,
        lambda c: "Always available",
    )
    registry.register(
        "never",
        lambda ctx, c: False,
        lambda c: "Never available",
    )
    registry.register(
        "points_current",
        lambda ctx, c: ctx.points >= value(c),
        lambda c: f"Have {format_number(value(c))} points",
    )
    registry.register(
        "points_total",
        lambda ctx, c: ctx.total_points_earned >= value(c),
        lambda c: f"Earn {format_number(value(c))} points total",
    )
    registry.register(
        "total_clicks",
        lambda ctx, c: ctx.total_clicks >= value(c),
        lambda c: f"Click {value(c)} times",
    )
    registry.register(
        "points_per_second",
        lambda ctx, c: ctx.points_per_second >= value(c),
        lambda c: f"Reach {value(c)} points/second",
    )
    registry.register(
        "click_power",
        lambda ctx, c: ctx.click_power >= value(c),
        lambda c: f"Reach {value(c)} click power",
    )

    def upgrade_level(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        upgrade_id = c.param("upgradeId")
        if not upgrade_id:
            return False
        return ctx.upgrade_level(upgrade_id) >= value(c, 1)

    registry.register(
        "upgrade_level",
        upgrade_level,
        lambda c: f'Buy "{c.param("upgradeId")}" {value(c, 1)} times',
    )
    registry.register(
        "total_upgrades_bought",
        lambda ctx, c: sum(ctx.upgrade_levels()) >= value(c, 1),
        lambda c: f"Buy {value(c, 1)} upgrade levels in total",
    )
    registry.register(
        "unique_upgrades_owned",
        lambda ctx, c: sum(1 for level in ctx.upgrade_levels() if level > 0) >= value(c, 1),
        lambda c: f"Own {value(c, 1)} different upgrades",
    )

    def upgrade_maxed(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        upgrade_id = c.param("upgradeId")
        if not upgrade_id:
            return False
        max_level = ctx.upgrade_max_level(upgrade_id)
        if max_level is None:
            return False
        return ctx.upgrade_level(upgrade_id) >= max_level

    registry.register(
        "upgrade_maxed",
        upgrade_maxed,
        lambda c: f'Max out "{c.param("upgradeId")}"',
    )
    registry.register(
        "playtime",
        lambda ctx, c: ctx.playtime_seconds >= value(c),
        lambda c: f"Play for {value(c)} seconds",
    )

    def achievement_unlocked(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        achievement_id = c.param("achievementId")
        if not achievement_id:
            return False
        return ctx.has_achievement(achievement_id)

    registry.register(
        "achievement_unlocked",
        achievement_unlocked,
        lambda c: f'Unlock achievement "{c.param("achievementId")}"',
    )
    registry.register(
        "total_achievements",
        lambda ctx, c: ctx.achievement_count() >= value(c, 1),
        lambda c: f"Unlock {value(c, 1)} achievements",
    )

    # Compound
    def all_of(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        if c.conditions is None:
            return False
        return all(registry.check(ctx, sub) for sub in c.conditions)

    def any_of(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        if c.conditions is None:
            return False
        return any(registry.check(ctx, sub) for sub in c.conditions)

    def negate(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        if c.condition is None:
            return False
        return not registry.check(ctx, c.condition)

    registry.register(
        "and",
        all_of,
        lambda c: " AND ".join(registry.describe(sub) for sub in c.conditions or []) or "No condition",
    )
    registry.register(
        "or",
        any_of,
        lambda c: " OR ".join(registry.describe(sub) for sub in c.conditions or []) or "No condition",
    )
    registry.register(
        "not",
        negate,
        lambda c: f"NOT ({registry.describe(c.condition)})",
    )

    # Ratios; a zero denominator never satisfies
    def pps_click_ratio(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        if ctx.click_power == 0:
            return False
        return ctx.points_per_second / ctx.click_power >= c.param("ratio", 1.0)

    def click_pps_ratio(ctx: ConditionContext, c: ConditionDescriptor) -> bool:
        if ctx.points_per_second == 0:
            return False
        return ctx.click_power / ctx.points_per_second >= c.param("ratio", 1.0)

    registry.register(
        "pps_click_ratio",
        pps_click_ratio,
        lambda c: f"Production at least {c.param('ratio', 1.0)}x click power",
    )
    registry.register(
        "click_pps_ratio",
        click_pps_ratio,
        lambda c: f"Click power at least {c.param('ratio', 1.0)}x production",
    )
