"""Runtime state records owned by the economy managers."""

from __future__ import annotations

import math

from pydantic import BaseModel, Field


class ResourceState(BaseModel):
    amount: float = 0.0
    total: float = Field(0.0, description="Everything ever gained, from any source")
    total_produced: float = Field(0.0, description="Gained through production only")
    total_spent: float = 0.0
    per_second: float = 0.0
    max_amount: float = math.inf


class BuildingState(BaseModel):
    owned: int = 0
    total_bought: int = 0
    unlocked: bool = False


class UpgradeState(BaseModel):
    purchased: bool = False
    unlocked: bool = False
    # Set by unlockUpgrade actions; survives requirement re-evaluation
    forced: bool = False


class AchievementState(BaseModel):
    unlocked: bool = False
    progress: float = Field(0.0, description="Percent of requirements met, 0-100")


class PrestigeState(BaseModel):
    level: int = 0
    currency: int = 0


class Notification(BaseModel):
    """A message queued by a showNotification action."""

    message: str
    timestamp: float = Field(..., description="Simulation time in seconds when queued")
    duration: float = Field(3.0, description="Seconds the message should stay visible")

    def expired(self, now: float) -> bool:
        return now >= self.timestamp + self.duration
