"""Challenge-related Pydantic models"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class ChallengeStatus(str, Enum):
    """Challenge lifecycle status (active is the only non-terminal state)"""
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not ChallengeStatus.ACTIVE


class Challenge(BaseModel):
    """A user's commitment contract"""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: str
    sessions_per_week: int = Field(ge=1, le=7)
    duration_months: int = Field(ge=1, le=12)
    bet_amount: float = Field(gt=0)
    # Derived once at creation from the three fields above
    odds_multiplier: float = Field(gt=0)
    coins_reward: int = Field(ge=0)
    status: ChallengeStatus = ChallengeStatus.ACTIVE
    start_date: date
    end_date: date
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


class RiskQuote(BaseModel):
    """Numbers shown on the challenge setup screen"""
    model_config = ConfigDict(frozen=True)

    odds_multiplier: float
    coins_reward: int = Field(ge=0)
    difficulty: str  # easy, medium, hard, extreme
    reward_value: int = Field(ge=0)
    projected_payout: int = Field(ge=0)


class ProgressReport(BaseModel):
    """Progress of a challenge against its session target"""
    approved_count: int = Field(ge=0)
    total_target: int = Field(ge=0)
    completion_percent: float = Field(ge=0)
    remaining_sessions: int = Field(ge=0)


class WeekDay(BaseModel):
    """One day of the dashboard's week strip"""
    day: date
    done: bool
    is_today: bool = False


class ChallengeSnapshot(BaseModel):
    """Dashboard view of a challenge at a point in time"""
    challenge_id: UUID
    status: ChallengeStatus
    progress: ProgressReport
    current_streak: int = Field(ge=0)
    best_streak: int = Field(ge=0)
    days_remaining: int = Field(ge=0)
    week: list[WeekDay]
    odds_multiplier: float
    projected_payout: int = Field(ge=0)
