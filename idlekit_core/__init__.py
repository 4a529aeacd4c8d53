"""
idlekit core - data model and sandboxed rule registries.

Templates, requirement and condition predicates, effect mutators and the
logic graph model shared by every engine form.
"""

from idlekit_core.conditions import ConditionContext, ConditionDescriptor, ConditionRegistry
from idlekit_core.effects import EffectDescriptor, EffectRegistry, EffectType
from idlekit_core.events import GLOBAL_TARGET, CounterEvent, GameEvent
from idlekit_core.graph import GraphReport, LogicDefinition, LogicEdge, LogicGraph, LogicNode, NodeKind
from idlekit_core.loader import load_default_template, load_template
from idlekit_core.requirements import Requirement, requirements_met
from idlekit_core.state import (
    AchievementState,
    BuildingState,
    Notification,
    PrestigeState,
    ResourceState,
    UpgradeState,
)
from idlekit_core.template import (
    GameTemplate,
    TemplateValidationError,
    UpgradeDefinition,
    validate_template,
)

__version__ = "0.1.0"

__all__ = [
    "ConditionContext",
    "ConditionDescriptor",
    "ConditionRegistry",
    "EffectDescriptor",
    "EffectRegistry",
    "EffectType",
    "GLOBAL_TARGET",
    "CounterEvent",
    "GameEvent",
    "GraphReport",
    "LogicDefinition",
    "LogicEdge",
    "LogicGraph",
    "LogicNode",
    "NodeKind",
    "load_default_template",
    "load_template",
    "Requirement",
    "requirements_met",
    "AchievementState",
    "BuildingState",
    "Notification",
    "PrestigeState",
    "ResourceState",
    "UpgradeState",
    "GameTemplate",
    "TemplateValidationError",
    "UpgradeDefinition",
    "validate_template",
]
