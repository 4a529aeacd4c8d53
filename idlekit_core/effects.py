"""Effect Registry - whitelisted state mutators for upgrades and action nodes.

An effect is authored as a typed descriptor (``{"type": "add_click_power",
"value": 2}``). The registry maps the type tag to a registered mutator; there
is no path from a template to arbitrary Python code. Unknown tags are logged
and ignored.

Mutators operate on any object exposing ``click_power`` and
``points_per_second`` (see ``EffectTarget``).
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from idlekit_core.utils.logging import get_logger, log_error

logger = get_logger("core.effects")


class EffectTarget(Protocol):
    """Anything an effect can mutate."""

    click_power: float
    points_per_second: float


# ============================================================================
# Descriptor
# ============================================================================


class EffectDescriptor(BaseModel):
    """A typed effect with free-form parameters.

    Parameters other than ``type`` are kept as extra fields and read through
    ``param()``.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, description="Registered effect type tag")

    def param(self, name: str, default: Any = None) -> Any:
        """Return a parameter, falling back to ``default`` when absent or null."""
        value = (self.model_extra or {}).get(name)
        return default if value is None else value

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


EffectFn = Callable[[EffectTarget, EffectDescriptor, int], None]


class EffectType(str, Enum):
    """Built-in effect tags."""

    ADD_CLICK_POWER = "add_click_power"
    ADD_PER_SECOND = "add_per_second"
    ADD_CLICK_POWER_FLAT = "add_click_power_flat"
    ADD_PER_SECOND_FLAT = "add_per_second_flat"
    MULTIPLY_CLICK_POWER = "multiply_click_power"
    MULTIPLY_PER_SECOND = "multiply_per_second"
    MULTIPLY_ALL = "multiply_all"
    INCREASE_CLICK_POWER_PERCENT = "increase_click_power_percent"
    INCREASE_PER_SECOND_PERCENT = "increase_per_second_percent"
    EXPONENTIAL_CLICK_POWER = "exponential_click_power"
    EXPONENTIAL_PER_SECOND = "exponential_per_second"
    COMPOUND_CLICK_AND_IDLE = "compound_click_and_idle"
    CLICK_POWER_FROM_PPS = "click_power_from_pps"
    PPS_FROM_CLICK_POWER = "pps_from_click_power"
    DOUBLE_EVERYTHING = "double_everything"
    # Economy-form multiplier, read by UpgradeManager.get_total_multiplier
    MULTIPLY = "multiply"


# ============================================================================
# Built-in mutators
# ============================================================================


def _add_click_power(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    state.click_power += effect.param("value", 1) * level


def _add_per_second(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    state.points_per_second += effect.param("value", 1) * level


def _add_click_power_flat(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        state.click_power += effect.param("value", 1)


def _add_per_second_flat(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        state.points_per_second += effect.param("value", 1)


def _multiply_click_power(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        state.click_power = math.floor(state.click_power * effect.param("multiplier", 1.5) ** level)


def _multiply_per_second(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        state.points_per_second *= effect.param("multiplier", 1.5) ** level


def _multiply_all(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        factor = effect.param("multiplier", 2.0) ** level
        state.click_power = math.floor(state.click_power * factor)
        state.points_per_second *= factor


def _increase_click_power_percent(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        bonus = effect.param("percent", 10) / 100 * level
        state.click_power = math.floor(state.click_power * (1 + bonus))


def _increase_per_second_percent(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        bonus = effect.param("percent", 10) / 100 * level
        state.points_per_second *= 1 + bonus


def _exponential_click_power(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        base = effect.param("base", 2)
        exponent = effect.param("exponent", 1.1)
        state.click_power += math.floor(base * level ** exponent)


def _exponential_per_second(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        base = effect.param("base", 2)
        exponent = effect.param("exponent", 1.1)
        state.points_per_second += base * level ** exponent


def _compound_click_and_idle(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    add_click = effect.param("addClickPower")
    multiply_pps = effect.param("multiplyPPS")
    if add_click:
        state.click_power += add_click * level
    if multiply_pps:
        state.points_per_second *= multiply_pps ** level


def _click_power_from_pps(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        ratio = effect.param("ratio", 0.1)
        state.click_power += math.floor(state.points_per_second * ratio * level)


def _pps_from_click_power(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        ratio = effect.param("ratio", 0.1)
        state.points_per_second += state.click_power * ratio * level


def _double_everything(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level > 0:
        factor = 2 ** level
        state.click_power = math.floor(state.click_power * factor)
        state.points_per_second *= factor


def multiply_factor(effect: EffectDescriptor) -> float:
    """Per-level factor of a ``multiply`` effect (``value``, or ``multiplier``)."""
    return effect.param("value", effect.param("multiplier", 1))


def _multiply(state: EffectTarget, effect: EffectDescriptor, level: int) -> None:
    if level <= 0:
        return
    factor = multiply_factor(effect) ** level
    if effect.param("target") == "click":
        state.click_power = math.floor(state.click_power * factor)
    else:
        state.points_per_second *= factor


_BUILTINS: Dict[EffectType, EffectFn] = {
    EffectType.ADD_CLICK_POWER: _add_click_power,
    EffectType.ADD_PER_SECOND: _add_per_second,
    EffectType.ADD_CLICK_POWER_FLAT: _add_click_power_flat,
    EffectType.ADD_PER_SECOND_FLAT: _add_per_second_flat,
    EffectType.MULTIPLY_CLICK_POWER: _multiply_click_power,
    EffectType.MULTIPLY_PER_SECOND: _multiply_per_second,
    EffectType.MULTIPLY_ALL: _multiply_all,
    EffectType.INCREASE_CLICK_POWER_PERCENT: _increase_click_power_percent,
    EffectType.INCREASE_PER_SECOND_PERCENT: _increase_per_second_percent,
    EffectType.EXPONENTIAL_CLICK_POWER: _exponential_click_power,
    EffectType.EXPONENTIAL_PER_SECOND: _exponential_per_second,
    EffectType.COMPOUND_CLICK_AND_IDLE: _compound_click_and_idle,
    EffectType.CLICK_POWER_FROM_PPS: _click_power_from_pps,
    EffectType.PPS_FROM_CLICK_POWER: _pps_from_click_power,
    EffectType.DOUBLE_EVERYTHING: _double_everything,
    EffectType.MULTIPLY: _multiply,
}

_METADATA: Dict[str, Dict[str, Any]] = {
    "add_click_power": {
        "name": "Add Click Power",
        "description": "Adds value x level to click power",
        "params": {"value": "Number: click power per level"},
        "category": "additive",
    },
    "add_per_second": {
        "name": "Add Per Second",
        "description": "Adds value x level to points per second",
        "params": {"value": "Number: points/second per level"},
        "category": "additive",
    },
    "add_click_power_flat": {
        "name": "Flat Click Power",
        "description": "Adds a fixed amount once owned",
        "params": {"value": "Number: flat click power"},
        "category": "additive",
    },
    "add_per_second_flat": {
        "name": "Flat Per Second",
        "description": "Adds a fixed rate once owned",
        "params": {"value": "Number: flat points/second"},
        "category": "additive",
    },
    "multiply_click_power": {
        "name": "Multiply Click Power",
        "description": "Multiplies click power by multiplier^level",
        "params": {"multiplier": "Number: factor per level (default 1.5)"},
        "category": "multiplicative",
    },
    "multiply_per_second": {
        "name": "Multiply Per Second",
        "description": "Multiplies points per second by multiplier^level",
        "params": {"multiplier": "Number: factor per level (default 1.5)"},
        "category": "multiplicative",
    },
    "multiply_all": {
        "name": "Multiply All",
        "description": "Multiplies click power and points per second",
        "params": {"multiplier": "Number: factor per level (default 2)"},
        "category": "multiplicative",
    },
    "increase_click_power_percent": {
        "name": "Click Power Percent",
        "description": "Raises click power by percent x level",
        "params": {"percent": "Number: percent per level (default 10)"},
        "category": "multiplicative",
    },
    "increase_per_second_percent": {
        "name": "Per Second Percent",
        "description": "Raises points per second by percent x level",
        "params": {"percent": "Number: percent per level (default 10)"},
        "category": "multiplicative",
    },
    "exponential_click_power": {
        "name": "Exponential Click Power",
        "description": "Adds floor(base x level^exponent) to click power",
        "params": {"base": "Number (default 2)", "exponent": "Number (default 1.1)"},
        "category": "exponential",
    },
    "exponential_per_second": {
        "name": "Exponential Per Second",
        "description": "Adds base x level^exponent to points per second",
        "params": {"base": "Number (default 2)", "exponent": "Number (default 1.1)"},
        "category": "exponential",
    },
    "compound_click_and_idle": {
        "name": "Click And Idle",
        "description": "Adds click power and multiplies points per second",
        "params": {"addClickPower": "Number", "multiplyPPS": "Number"},
        "category": "compound",
    },
    "click_power_from_pps": {
        "name": "Click Power From Production",
        "description": "Adds a share of points per second to click power",
        "params": {"ratio": "Number (default 0.1)"},
        "category": "special",
    },
    "pps_from_click_power": {
        "name": "Production From Click Power",
        "description": "Adds a share of click power to points per second",
        "params": {"ratio": "Number (default 0.1)"},
        "category": "special",
    },
    "double_everything": {
        "name": "Double Everything",
        "description": "Doubles all production per level",
        "params": {},
        "category": "special",
    },
    "multiply": {
        "name": "Multiplier",
        "description": "Stacking click or production multiplier",
        "params": {
            "target": "String: click | production",
            "value": "Number: factor",
            "resourceId": "String: optional resource filter",
        },
        "category": "multiplicative",
    },
}


# ============================================================================
# Registry
# ============================================================================


class EffectRegistry:
    """Maps effect type tags to mutators.

    Instances are independent; build one per simulation with
    ``EffectRegistry.with_builtins()``.
    """

    def __init__(self):
        self._effects: Dict[str, EffectFn] = {}
        self._metadata: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def with_builtins(cls) -> "EffectRegistry":
        registry = cls()
        for effect_type, fn in _BUILTINS.items():
            registry.register(effect_type.value, fn, _METADATA.get(effect_type.value))
        return registry

    def register(
        self,
        effect_type: str,
        fn: EffectFn,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Register (or replace) a mutator for ``effect_type``."""
        self._effects[effect_type] = fn
        if metadata is not None:
            self._metadata[effect_type] = metadata

    def has(self, effect_type: str) -> bool:
        return effect_type in self._effects

    def execute(
        self,
        state: EffectTarget,
        effect: Union[EffectDescriptor, Mapping[str, Any], None],
        level: int = 1,
    ) -> bool:
        """Apply ``effect`` to ``state`` at ``level``.

        Args:
            state: Object carrying ``click_power`` and ``points_per_second``
            effect: Descriptor or raw mapping
            level: Upgrade level (1 for one-shot sources such as action nodes)

        Returns:
            True if a mutator ran, False if the effect was skipped
        """
        descriptor = coerce_effect(effect)
        if descriptor is None:
            return False

        fn = self._effects.get(descriptor.type)
        if fn is None:
            logger.warning(f"Unknown effect type: {descriptor.type}")
            return False

        try:
            fn(state, descriptor, level)
        except Exception as e:
            log_error(logger, f"effect {descriptor.type}", e, {"level": level})
            return False
        return True

    def available_types(self) -> List[str]:
        return list(self._effects.keys())

    def metadata(self, effect_type: str) -> Dict[str, Any]:
        return self._metadata.get(
            effect_type,
            {"name": effect_type, "description": "No metadata available", "params": {}, "category": "unknown"},
        )


def coerce_effect(effect: Union[EffectDescriptor, Mapping[str, Any], None]) -> Optional[EffectDescriptor]:
    """Turn a raw mapping into an ``EffectDescriptor``, or None if malformed."""
    if isinstance(effect, EffectDescriptor):
        return effect
    if not isinstance(effect, Mapping):
        logger.warning(f"Invalid effect: {effect!r}")
        return None
    try:
        return EffectDescriptor.model_validate(effect)
    except ValidationError:
        logger.warning(f"Invalid effect: {dict(effect)!r}")
        return None
