"""
Challenge Lifecycle

State machine of a challenge:

    active ──► completed   approved sessions (on or before end_date) reach the target
       │
       └─────► failed      current_date > end_date and the target was missed

Both terminal states are final. Evaluating a terminal challenge again is a
no-op. The scheduler that decides *when* to evaluate lives outside the
engine; this module only exposes the decision and the transition.
"""

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional, Union
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

from pydantic import ValidationError as PydanticValidationError

from src.commitment import risk_model
from src.commitment.progress_tracker import progress_for, total_target
from src.commitment.session_ledger import SessionLedger
from src.commitment.streak_calculator import StreakCalculator
from src.exceptions import LifecycleError, ValidationError
from src.models.challenge import Challenge, ChallengeSnapshot, ChallengeStatus
from src.utils.datetime_helpers import add_months, ensure_utc, local_date, now_utc
from src.validators import validate_commitment

logger = logging.getLogger(__name__)


def create_challenge(
    user_id: str,
    sessions_per_week: int,
    duration_months: int,
    bet_amount: float,
    start_date: Optional[date] = None,
    challenge_id: Optional[UUID] = None,
    tz: Union[str, ZoneInfo] = "UTC",
) -> Challenge:
    """
    Create an active challenge from submitted commitment parameters

    odds_multiplier and coins_reward are computed here, once.

    Raises:
        ValidationError: If a parameter is outside its allowed range
    """
    params = validate_commitment(sessions_per_week, duration_months, bet_amount, user_id=user_id)
    if start_date is None:
        start_date = local_date(now_utc(), tz)

    challenge = Challenge(
        id=challenge_id or uuid4(),
        user_id=user_id,
        sessions_per_week=params.sessions_per_week,
        duration_months=params.duration_months,
        bet_amount=params.bet_amount,
        odds_multiplier=risk_model.odds_multiplier(params.sessions_per_week, params.duration_months),
        coins_reward=risk_model.coins_reward(params.bet_amount, params.duration_months, params.sessions_per_week),
        status=ChallengeStatus.ACTIVE,
        start_date=start_date,
        end_date=add_months(start_date, params.duration_months),
    )

    logger.info(
        f"Created challenge {challenge.id} for user {user_id}: "
        f"{challenge.sessions_per_week}x/week for {challenge.duration_months} months, "
        f"stake {challenge.bet_amount}, odds {challenge.odds_multiplier}x, "
        f"{challenge.coins_reward} coins"
    )
    return challenge


def challenge_from_record(record: Mapping[str, Any]) -> Challenge:
    """
    Rebuild a Challenge from a stored record

    The derived fields must match what the formulas give for the stored
    parameters; a record where they were edited independently is rejected.

    Raises:
        ValidationError: If the record is malformed or its derived fields disagree
    """
    try:
        challenge = Challenge.model_validate(dict(record))
    except PydanticValidationError as e:
        raise ValidationError(
            message=f"Malformed challenge record: {e.errors()[0].get('msg')}",
            field=str((e.errors()[0].get('loc') or ('record',))[0]),
            operation="challenge_from_record",
            cause=e,
        ) from e

    expected = {
        "odds_multiplier": risk_model.odds_multiplier(challenge.sessions_per_week, challenge.duration_months),
        "coins_reward": risk_model.coins_reward(
            challenge.bet_amount, challenge.duration_months, challenge.sessions_per_week
        ),
        "end_date": add_months(challenge.start_date, challenge.duration_months),
    }
    for field, value in expected.items():
        if getattr(challenge, field) != value:
            raise ValidationError(
                message=f"{field} does not match commitment parameters (expected {value})",
                field=field,
                value=getattr(challenge, field),
                user_id=challenge.user_id,
                operation="challenge_from_record",
            )
    return challenge


def decide_status(challenge: Challenge, approved_count: int, current_date: date) -> ChallengeStatus:
    """
    Status a challenge should have, given its approved sessions

    Args:
        approved_count: Approved sessions recorded on or before end_date
        current_date: Today, in the same calendar as end_date
    """
    if challenge.status.is_terminal:
        return challenge.status
    if approved_count >= total_target(challenge.sessions_per_week, challenge.duration_months):
        return ChallengeStatus.COMPLETED
    if current_date > challenge.end_date:
        return ChallengeStatus.FAILED
    return ChallengeStatus.ACTIVE


def transition(
    challenge: Challenge,
    new_status: ChallengeStatus,
    at: Optional[datetime] = None,
) -> Challenge:
    """
    Move a challenge forward

    Same-status requests return the challenge unchanged.

    Raises:
        LifecycleError: If the move is not active → completed/failed
    """
    if new_status == challenge.status:
        return challenge
    if challenge.status.is_terminal or new_status is ChallengeStatus.ACTIVE:
        raise LifecycleError(
            f"Cannot move challenge {challenge.id} from {challenge.status.value} to {new_status.value}",
            challenge_id=str(challenge.id),
            current_status=challenge.status.value,
            requested_status=new_status.value,
            user_id=challenge.user_id,
            operation="transition",
        )

    at = ensure_utc(at) if at else now_utc()
    update: dict[str, Any] = {"status": new_status}
    if new_status is ChallengeStatus.COMPLETED:
        update["completed_at"] = at
    else:
        update["failed_at"] = at

    logger.info(f"Challenge {challenge.id} for user {challenge.user_id}: active → {new_status.value}")
    return challenge.model_copy(update=update)


def evaluate(
    challenge: Challenge,
    ledger: SessionLedger,
    current_date: date,
    at: Optional[datetime] = None,
) -> Challenge:
    """
    Apply the transition policy to a challenge

    Idempotent: terminal challenges come back unchanged.

    Raises:
        ValidationError: If the ledger belongs to another challenge
    """
    ledger.require_owner(challenge, operation="evaluate")
    if challenge.status.is_terminal:
        logger.debug(f"Challenge {challenge.id} already {challenge.status.value}, nothing to evaluate")
        return challenge

    counted = ledger.approved_count(until=challenge.end_date)
    new_status = decide_status(challenge, counted, current_date)
    return transition(challenge, new_status, at)


def snapshot(
    challenge: Challenge,
    ledger: SessionLedger,
    as_of: datetime,
    streaks: Optional[StreakCalculator] = None,
) -> ChallengeSnapshot:
    """Dashboard view: progress, streaks, week strip, odds and projected payout"""
    ledger.require_owner(challenge, operation="snapshot")
    streaks = streaks or StreakCalculator(tz=ledger.tz)
    today = local_date(as_of, ledger.tz)
    return ChallengeSnapshot(
        challenge_id=challenge.id,
        status=challenge.status,
        progress=progress_for(challenge, ledger),
        current_streak=streaks.current_streak(ledger, as_of),
        best_streak=streaks.best_streak(ledger),
        days_remaining=max(0, (challenge.end_date - today).days),
        week=ledger.week_presence(as_of),
        odds_multiplier=challenge.odds_multiplier,
        projected_payout=risk_model.projected_payout(
            challenge.bet_amount, challenge.duration_months, challenge.odds_multiplier
        ),
    )
