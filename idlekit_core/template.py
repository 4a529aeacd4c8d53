"""Game template - the validated, versioned description of one game.

Templates are authored in camelCase JSON/YAML; every model here accepts the
camelCase keys and also the snake_case field names. A template is only handed
to an engine after both schema validation and cross-reference checks pass;
failures are reported together in one ``TemplateValidationError``.
"""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from idlekit_core.conditions import ConditionDescriptor
from idlekit_core.effects import EffectDescriptor
from idlekit_core.events import GLOBAL_TARGET, is_counter_event
from idlekit_core.graph import LogicDefinition, NodeKind
from idlekit_core.requirements import Requirement, referenced_ids


class TemplateValidationError(ValueError):
    """Raised when a template fails validation; ``errors`` lists every reason."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("Invalid template: " + "; ".join(self.errors))


class _TemplateModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================================
# Identity and presentation
# ============================================================================


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "game"


class TemplateMeta(_TemplateModel):
    id: str = ""
    name: str = Field(..., min_length=1)
    description: str = ""
    author: str = "Anonymous"
    version: str = Field(..., min_length=1)
    created: Optional[datetime] = None
    updated: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("created", "updated", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        # Epoch milliseconds as written by browser-based editors
        if isinstance(v, (int, float)):
            return datetime.fromtimestamp(v / 1000, UTC)
        return v

    @model_validator(mode="after")
    def default_id(self) -> "TemplateMeta":
        if not self.id:
            self.id = _slugify(self.name)
        return self


class PrimaryResource(_TemplateModel):
    """How the main currency is presented to the player."""

    name: str = Field(..., min_length=1)
    name_plural: str = Field(..., min_length=1)
    icon: str = ""
    click_verb: str = Field(..., min_length=1)


class ThemeSettings(_TemplateModel):
    """Presentation only; the engine never reads it."""

    model_config = ConfigDict(extra="allow")

    colors: Dict[str, str] = Field(default_factory=dict)


class TemplateSettings(_TemplateModel):
    tick_rate: int = Field(100, ge=10, description="Milliseconds between ticks")
    save_interval: int = Field(5000, ge=1000, description="Milliseconds between saves")
    max_offline_time: int = Field(86400, ge=0, description="Seconds of offline progress")


# ============================================================================
# Economy definitions
# ============================================================================


class ResourceDefinition(_TemplateModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    icon: str = ""
    start_amount: float = Field(0, ge=0)
    max_amount: Optional[float] = Field(None, gt=0)
    clickable: bool = False
    click_amount: float = Field(1, ge=0)

    @property
    def cap(self) -> float:
        return self.max_amount if self.max_amount is not None else math.inf


class BuildingCost(_TemplateModel):
    resource_id: str
    base_amount: float = Field(..., ge=0, validation_alias=AliasChoices("baseAmount", "base_amount", "amount"))


class ProductionEntry(_TemplateModel):
    resource_id: str
    amount: float = Field(..., validation_alias=AliasChoices("amount", "perSecond", "per_second"))


class BuildingDefinition(_TemplateModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    cost: List[BuildingCost] = Field(..., min_length=1)
    cost_scaling: float = Field(1.15, gt=1)
    produces: List[ProductionEntry] = Field(
        default_factory=list,
        validation_alias=AliasChoices("produces", "production"),
    )
    max_owned: Optional[int] = Field(None, ge=1)
    requirements: List[Requirement] = Field(
        default_factory=list,
        validation_alias=AliasChoices("requirements", "unlockRequirements", "unlock_requirements"),
    )


class UpgradeCost(_TemplateModel):
    resource_id: str
    amount: float = Field(..., ge=0)


class UpgradeDefinition(_TemplateModel):
    """One upgrade, usable both leveled (ClickerGame) and one-shot (GameEngine).

    ``effect`` and ``effects`` are merged into ``effects``; at least one is
    required. Either ``baseCost`` or an explicit ``cost`` list is required.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    icon: Optional[str] = None
    base_cost: Optional[float] = Field(None, ge=0)
    cost_multiplier: float = Field(1.15, ge=1)
    max_level: Optional[int] = Field(None, ge=1)
    effects: List[EffectDescriptor] = Field(default_factory=list)
    unlock_condition: Optional[ConditionDescriptor] = None
    unlock_description: Optional[str] = None
    cost: List[UpgradeCost] = Field(default_factory=list)
    requirements: List[Requirement] = Field(
        default_factory=list,
        validation_alias=AliasChoices("requirements", "unlockRequirements", "unlock_requirements"),
    )

    @model_validator(mode="before")
    @classmethod
    def merge_effect(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and data.get("effect") is not None:
            data = dict(data)
            effect = data.pop("effect")
            data["effects"] = [effect] + list(data.get("effects") or [])
        return data

    @model_validator(mode="after")
    def check_cost_and_effect(self) -> "UpgradeDefinition":
        if not self.effects:
            raise ValueError("an effect is required")
        if self.base_cost is None:
            if not self.cost:
                raise ValueError("baseCost is required")
            self.base_cost = self.cost[0].amount
        return self

    @property
    def effect(self) -> EffectDescriptor:
        return self.effects[0]

    @property
    def level_cap(self) -> float:
        return self.max_level if self.max_level is not None else math.inf

    def get_current_cost(self, level: int) -> int:
        """Cost of the next level: floor(baseCost * costMultiplier^level)."""
        return math.floor(self.base_cost * self.cost_multiplier ** level)


class AchievementDefinition(_TemplateModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    description: str = ""
    icon: Optional[str] = None
    requirements: List[Requirement] = Field(default_factory=list)
    condition: Optional[ConditionDescriptor] = None


class PrestigeConfig(_TemplateModel):
    enabled: bool = False
    base_resource: Optional[str] = None
    formula: Literal["sqrt", "log", "linear"] = "sqrt"
    divisor: float = Field(1000, gt=0)
    multiplier: float = Field(1, gt=0)


# ============================================================================
# Template
# ============================================================================


class GameTemplate(_TemplateModel):
    meta: TemplateMeta
    primary: PrimaryResource
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    settings: TemplateSettings = Field(default_factory=TemplateSettings)
    resources: List[ResourceDefinition] = Field(default_factory=list)
    buildings: List[BuildingDefinition] = Field(default_factory=list)
    upgrades: List[UpgradeDefinition] = Field(default_factory=list)
    achievements: List[AchievementDefinition] = Field(default_factory=list)
    prestige: PrestigeConfig = Field(default_factory=PrestigeConfig)
    logic: LogicDefinition = Field(default_factory=LogicDefinition)

    @model_validator(mode="before")
    @classmethod
    def lift_primary(cls, data: Any) -> Any:
        # Authored shape: resources: {primary: {...}, list: [...]}
        if isinstance(data, Mapping) and isinstance(data.get("resources"), Mapping):
            data = dict(data)
            block = dict(data["resources"])
            if "primary" in block and "primary" not in data:
                data["primary"] = block.pop("primary")
            data["resources"] = block.get("list", block.get("items", []))
        return data

    @model_validator(mode="after")
    def derive_defaults(self) -> "GameTemplate":
        if not self.resources:
            self.resources = [
                ResourceDefinition(
                    id="points",
                    name=self.primary.name_plural,
                    icon=self.primary.icon,
                    clickable=True,
                    click_amount=1,
                )
            ]

        clickable = [r.id for r in self.resources if r.clickable]
        if len(clickable) > 1:
            raise ValueError(f"only one resource may be clickable, found: {', '.join(clickable)}")

        currency = self.currency_id
        for upgrade in self.upgrades:
            if not upgrade.cost:
                upgrade.cost = [UpgradeCost(resource_id=currency, amount=upgrade.base_cost)]

        if self.prestige.base_resource is None:
            self.prestige.base_resource = currency
        return self

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    @property
    def clickable_resource(self) -> Optional[ResourceDefinition]:
        return next((r for r in self.resources if r.clickable), None)

    @property
    def currency_id(self) -> str:
        """The clickable resource, or the first resource when none is clickable."""
        clickable = self.clickable_resource
        return clickable.id if clickable else self.resources[0].id

    def get_resource(self, resource_id: str) -> Optional[ResourceDefinition]:
        return next((r for r in self.resources if r.id == resource_id), None)

    def get_building(self, building_id: str) -> Optional[BuildingDefinition]:
        return next((b for b in self.buildings if b.id == building_id), None)

    def get_upgrade(self, upgrade_id: str) -> Optional[UpgradeDefinition]:
        return next((u for u in self.upgrades if u.id == upgrade_id), None)

    def get_achievement(self, achievement_id: str) -> Optional[AchievementDefinition]:
        return next((a for a in self.achievements if a.id == achievement_id), None)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.meta.id,
            "name": self.meta.name,
            "version": self.meta.version,
            "resources": len(self.resources),
            "buildings": len(self.buildings),
            "upgrades": len(self.upgrades),
            "achievements": len(self.achievements),
            "nodes": len(self.logic.nodes),
            "edges": len(self.logic.edges),
            "prestige": self.prestige.enabled,
        }

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def reference_errors(self) -> List[str]:
        """Cross-reference problems schema validation cannot see."""
        errors: List[str] = []
        ids = {
            "resource": [r.id for r in self.resources],
            "building": [b.id for b in self.buildings],
            "upgrade": [u.id for u in self.upgrades],
            "achievement": [a.id for a in self.achievements],
        }
        for kind, values in ids.items():
            seen = set()
            for value in values:
                if value in seen:
                    errors.append(f"Duplicate {kind} id: {value}")
                seen.add(value)
        known = {kind: set(values) for kind, values in ids.items()}

        def check(owner: str, kind: str, ref: str) -> None:
            if ref not in known[kind]:
                errors.append(f"{owner}: unknown {kind} '{ref}'")

        for building in self.buildings:
            owner = f"Building {building.id}"
            for cost in building.cost:
                check(owner, "resource", cost.resource_id)
            for entry in building.produces:
                check(owner, "resource", entry.resource_id)
            for kind, ref in referenced_ids(building.requirements):
                check(owner, kind, ref)

        for upgrade in self.upgrades:
            owner = f"Upgrade {upgrade.id}"
            for cost in upgrade.cost:
                check(owner, "resource", cost.resource_id)
            for kind, ref in referenced_ids(upgrade.requirements):
                check(owner, kind, ref)

        for achievement in self.achievements:
            for kind, ref in referenced_ids(achievement.requirements):
                check(f"Achievement {achievement.id}", kind, ref)

        if self.prestige.base_resource not in known["resource"]:
            errors.append(f"Prestige: unknown base resource '{self.prestige.base_resource}'")

        node_ids = set()
        for node in self.logic.nodes:
            if node.id in node_ids:
                errors.append(f"Duplicate logic node id: {node.id}")
            node_ids.add(node.id)
            if node.type == NodeKind.EVENT.value and not node.tag:
                errors.append(f"Logic node {node.id}: eventType is required")
            if node.type == NodeKind.EVENT.value and is_counter_event(node.tag or ""):
                target = node.target_id
                if target and target != GLOBAL_TARGET and not any(target in values for values in known.values()):
                    errors.append(f"Logic node {node.id}: unknown target '{target}'")
        return errors

    def check_references(self) -> None:
        """Raise ``TemplateValidationError`` if any cross-reference is broken."""
        errors = self.reference_errors()
        if errors:
            raise TemplateValidationError(errors)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GameTemplate":
        """Validate raw template data.

        Raises:
            TemplateValidationError: With every schema and reference problem found
        """
        try:
            template = cls.model_validate(data)
        except ValidationError as e:
            raise TemplateValidationError(format_validation_errors(e)) from e
        template.check_references()
        return template

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_validation_errors(error: ValidationError) -> List[str]:
    """Flatten a pydantic error into ``"path: message"`` lines."""
    lines = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"]) or "template"
        lines.append(f"{path}: {item['msg']}")
    return lines


def validate_template(data: Mapping[str, Any]) -> Tuple[bool, List[str]]:
    """Non-raising validation.

    Returns:
        (is_valid, errors)
    """
    try:
        GameTemplate.from_dict(data)
    except TemplateValidationError as e:
        return False, e.errors
    return True, []
