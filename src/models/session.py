"""Session attestation models"""
from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator

from src.utils.datetime_helpers import ensure_utc


class AttestationVerdict(BaseModel):
    """
    Verdict returned by the gym-photo attestation oracle

    Strict types: a verdict with a missing field or a string "true" is
    malformed and rejected rather than coerced.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    approved: StrictBool
    confidence: StrictInt = Field(ge=0, le=100)
    reason: str = Field(max_length=1000)


class SessionEvent(BaseModel):
    """One attested gym visit (immutable)"""
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    challenge_id: UUID
    user_id: str
    approved: bool
    confidence: int = Field(ge=0, le=100)
    reason: str = ""
    verified_at: datetime

    @field_validator('verified_at')
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        """Store timestamps as aware UTC (naive input is read as UTC)"""
        return ensure_utc(v)
