"""
Centralized Pydantic Input Validation Layer

Validates the commitment parameters a user submits before any reward math
runs. Out-of-range values are rejected, never clamped, because a clamped
value would silently change the odds and coin reward.

Constraints (UI ranges):
- sessions_per_week: 1-7
- duration_months: 1-12
- bet_amount: positive, finite
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from src.exceptions import ValidationError


# ============================================================================
# COMMITMENT PARAMETERS
# ============================================================================

class CommitmentParameters(BaseModel):
    """
    Validate the parameters of a new challenge

    Constraints:
    - Sessions per week: 1-7 (integer)
    - Duration: 1-12 months (integer)
    - Bet amount: strictly positive currency amount
    """
    model_config = ConfigDict(frozen=True)

    sessions_per_week: int = Field(ge=1, le=7, strict=True, description="Gym sessions per week")
    duration_months: int = Field(ge=1, le=12, strict=True, description="Challenge duration in months")
    bet_amount: float = Field(gt=0, allow_inf_nan=False, description="Monthly stake")

    @field_validator('bet_amount', mode='before')
    @classmethod
    def no_boolean_stake(cls, v):
        """Reject booleans, which pydantic would otherwise read as 0/1"""
        if isinstance(v, bool):
            raise ValueError("Bet amount must be a number")
        return v


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

def format_validation_error(e: Exception) -> str:
    """
    Format Pydantic validation error for user-friendly display

    Args:
        e: ValidationError from Pydantic

    Returns:
        User-friendly error message
    """
    if not isinstance(e, PydanticValidationError):
        return f"Error: {str(e)}"

    errors = e.errors()
    if not errors:
        return "Validation failed"

    # Get first error for simplicity
    first_error = errors[0]
    loc = first_error.get('loc') or ('input',)
    field = loc[0]
    msg = first_error.get('msg', 'Invalid value')

    if isinstance(field, str):
        field_name = field.replace('_', ' ').title()
    else:
        field_name = 'Input'

    return f"Invalid {field_name}: {msg}"


def validate_commitment(
    sessions_per_week: int,
    duration_months: int,
    bet_amount: float,
    user_id: Optional[str] = None,
) -> CommitmentParameters:
    """
    Validate commitment parameters, failing fast

    Raises:
        ValidationError: naming the first offending field
    """
    try:
        return CommitmentParameters(
            sessions_per_week=sessions_per_week,
            duration_months=duration_months,
            bet_amount=bet_amount,
        )
    except PydanticValidationError as e:
        first_error = e.errors()[0]
        loc = first_error.get('loc') or ('input',)
        field = str(loc[0])
        raise ValidationError(
            message=first_error.get('msg', 'Invalid value'),
            field=field,
            value=first_error.get('input'),
            user_message=format_validation_error(e),
            user_id=user_id,
            operation="validate_commitment",
            cause=e,
        ) from e
