"""Typed unlock requirements shared by buildings, upgrades and achievements.

A requirement list is conjunctive: every entry must hold. An empty list is
always satisfied.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Protocol, Sequence, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RequirementContext(Protocol):
    """Lookups a requirement needs; unknown ids answer None/False."""

    prestige_level: int
    total_clicks: int

    def resource_amount(self, resource_id: str) -> Optional[float]: ...

    def building_owned(self, building_id: str) -> Optional[int]: ...

    def upgrade_purchased(self, upgrade_id: str) -> bool: ...

    def achievement_unlocked(self, achievement_id: str) -> bool: ...


class _RequirementBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def is_met(self, ctx: RequirementContext) -> bool:
        raise NotImplementedError


class ResourceRequirement(_RequirementBase):
    type: Literal["resource"] = "resource"
    resource_id: str = Field(..., validation_alias=AliasChoices("resourceId", "resource_id"))
    amount: float = Field(0, ge=0)

    def is_met(self, ctx: RequirementContext) -> bool:
        current = ctx.resource_amount(self.resource_id)
        return current is not None and current >= self.amount


class BuildingRequirement(_RequirementBase):
    type: Literal["building"] = "building"
    building_id: str = Field(..., validation_alias=AliasChoices("buildingId", "building_id"))
    amount: int = Field(1, ge=0)

    def is_met(self, ctx: RequirementContext) -> bool:
        owned = ctx.building_owned(self.building_id)
        return owned is not None and owned >= self.amount


class UpgradeRequirement(_RequirementBase):
    type: Literal["upgrade"] = "upgrade"
    upgrade_id: str = Field(..., validation_alias=AliasChoices("upgradeId", "upgrade_id"))

    def is_met(self, ctx: RequirementContext) -> bool:
        return ctx.upgrade_purchased(self.upgrade_id)


class AchievementRequirement(_RequirementBase):
    type: Literal["achievement"] = "achievement"
    achievement_id: str = Field(..., validation_alias=AliasChoices("achievementId", "achievement_id"))

    def is_met(self, ctx: RequirementContext) -> bool:
        return ctx.achievement_unlocked(self.achievement_id)


class PrestigeRequirement(_RequirementBase):
    type: Literal["prestige"] = "prestige"
    level: int = Field(1, ge=0)

    def is_met(self, ctx: RequirementContext) -> bool:
        return ctx.prestige_level >= self.level


class TotalClicksRequirement(_RequirementBase):
    type: Literal["totalClicks"] = "totalClicks"
    amount: int = Field(..., ge=0)

    def is_met(self, ctx: RequirementContext) -> bool:
        return ctx.total_clicks >= self.amount


Requirement = Annotated[
    Union[
        ResourceRequirement,
        BuildingRequirement,
        UpgradeRequirement,
        AchievementRequirement,
        PrestigeRequirement,
        TotalClicksRequirement,
    ],
    Field(discriminator="type"),
]


def requirements_met(requirements: Sequence[Requirement], ctx: RequirementContext) -> bool:
    return all(req.is_met(ctx) for req in requirements)


def requirements_progress(requirements: Sequence[Requirement], ctx: RequirementContext) -> float:
    """Percentage (0-100) of requirements currently met."""
    if not requirements:
        return 100.0
    met = sum(1 for req in requirements if req.is_met(ctx))
    return met / len(requirements) * 100


def referenced_ids(requirements: Sequence[Requirement]) -> List[tuple[str, str]]:
    """(kind, id) pairs a requirement list points at, for cross-reference checks."""
    refs = []
    for req in requirements:
        if isinstance(req, ResourceRequirement):
            refs.append(("resource", req.resource_id))
        elif isinstance(req, BuildingRequirement):
            refs.append(("building", req.building_id))
        elif isinstance(req, UpgradeRequirement):
            refs.append(("upgrade", req.upgrade_id))
        elif isinstance(req, AchievementRequirement):
            refs.append(("achievement", req.achievement_id))
    return refs
