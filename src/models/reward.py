"""Reward catalog models"""
from pydantic import BaseModel, ConfigDict, Field


class RewardTier(BaseModel):
    """Catalog entry unlocked once the reward value reaches min_value"""
    model_config = ConfigDict(frozen=True)

    rank: int = Field(ge=1)
    min_value: int = Field(ge=0)
    # Display metadata, opaque to the engine
    name: str = ""
    brand: str = ""
    icon: str = ""


class TierState(BaseModel):
    """A tier as seen for one reward value"""
    tier: RewardTier
    unlocked: bool
    is_next: bool
