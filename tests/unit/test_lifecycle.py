"""Unit tests for the Challenge Lifecycle (src/commitment/lifecycle.py)"""
import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from src.commitment.lifecycle import (
    create_challenge,
    challenge_from_record,
    decide_status,
    transition,
    evaluate,
    snapshot,
)
from src.commitment.session_ledger import SessionLedger
from src.exceptions import LifecycleError, ValidationError
from src.models.challenge import ChallengeStatus


def _daily_sessions(session_factory, start, count):
    return [
        session_factory(datetime(start.year, start.month, start.day, 12, 0, tzinfo=timezone.utc) + timedelta(days=i))
        for i in range(count)
    ]


# ============================================================================
# Creation Tests
# ============================================================================

def test_create_challenge_derives_odds_and_coins(challenge, test_user_id):
    assert challenge.user_id == test_user_id
    assert challenge.status == ChallengeStatus.ACTIVE
    assert challenge.odds_multiplier == 2.7
    assert challenge.coins_reward == 205
    assert challenge.start_date == date(2026, 1, 1)
    assert challenge.end_date == date(2026, 4, 1)
    assert challenge.completed_at is None
    assert challenge.failed_at is None


def test_create_challenge_end_date_clamps_month_end(test_user_id):
    challenge = create_challenge(test_user_id, 3, 1, 50, start_date=date(2026, 1, 31))

    assert challenge.end_date == date(2026, 2, 28)


def test_create_challenge_defaults_start_to_today(test_user_id, fixed_now):
    with patch('src.commitment.lifecycle.now_utc', return_value=fixed_now):
        challenge = create_challenge(test_user_id, 2, 6, 100)

    assert challenge.start_date == date(2026, 3, 18)
    assert challenge.end_date == date(2026, 9, 18)


@pytest.mark.parametrize("sessions,months,bet,field", [
    (0, 3, 50, "sessions_per_week"),
    (8, 3, 50, "sessions_per_week"),
    (3, 0, 50, "duration_months"),
    (3, 13, 50, "duration_months"),
    (3, 3, 0, "bet_amount"),
    (3, 3, -10, "bet_amount"),
])
def test_create_challenge_rejects_out_of_range(test_user_id, sessions, months, bet, field):
    """Test invalid parameters fail fast instead of being clamped"""
    with pytest.raises(ValidationError) as exc_info:
        create_challenge(test_user_id, sessions, months, bet)

    assert exc_info.value.field == field


def test_challenge_is_immutable(challenge):
    with pytest.raises(PydanticValidationError):
        challenge.coins_reward = 10_000


# ============================================================================
# Record Rehydration Tests
# ============================================================================

def test_challenge_from_record_round_trip(challenge):
    record = challenge.model_dump(mode="json")

    assert challenge_from_record(record) == challenge


def test_challenge_from_record_rejects_tampered_reward(challenge):
    record = challenge.model_dump(mode="json")
    record["coins_reward"] = 9999

    with pytest.raises(ValidationError) as exc_info:
        challenge_from_record(record)
    assert exc_info.value.field == "coins_reward"


def test_challenge_from_record_rejects_tampered_end_date(challenge):
    record = challenge.model_dump(mode="json")
    record["end_date"] = "2026-12-31"

    with pytest.raises(ValidationError) as exc_info:
        challenge_from_record(record)
    assert exc_info.value.field == "end_date"


def test_challenge_from_record_rejects_malformed(challenge):
    record = challenge.model_dump(mode="json")
    del record["user_id"]

    with pytest.raises(ValidationError) as exc_info:
        challenge_from_record(record)
    assert exc_info.value.field == "user_id"


# ============================================================================
# Transition Tests
# ============================================================================

def test_decide_status(challenge):
    assert decide_status(challenge, 0, date(2026, 3, 18)) == ChallengeStatus.ACTIVE
    assert decide_status(challenge, 36, date(2026, 3, 18)) == ChallengeStatus.COMPLETED
    assert decide_status(challenge, 35, date(2026, 4, 1)) == ChallengeStatus.ACTIVE
    assert decide_status(challenge, 35, date(2026, 4, 2)) == ChallengeStatus.FAILED


def test_evaluate_active_without_sessions(challenge, ledger_factory):
    result = evaluate(challenge, ledger_factory(), date(2026, 3, 18))

    assert result is challenge
    assert result.status == ChallengeStatus.ACTIVE


def test_evaluate_completes_when_target_reached(challenge, ledger_factory, session_factory, fixed_now):
    ledger = ledger_factory(_daily_sessions(session_factory, date(2026, 1, 2), 36))

    result = evaluate(challenge, ledger, date(2026, 3, 18), at=fixed_now)

    assert result.status == ChallengeStatus.COMPLETED
    assert result.completed_at == fixed_now
    assert result.failed_at is None
    # Input record untouched
    assert challenge.status == ChallengeStatus.ACTIVE


def test_evaluate_completes_after_end_if_target_reached_in_time(challenge, ledger_factory, session_factory):
    ledger = ledger_factory(_daily_sessions(session_factory, date(2026, 2, 1), 36))

    result = evaluate(challenge, ledger, date(2026, 4, 10))

    assert result.status == ChallengeStatus.COMPLETED


def test_evaluate_fails_after_end_date(challenge, ledger_factory, session_factory, fixed_now):
    ledger = ledger_factory(_daily_sessions(session_factory, date(2026, 1, 2), 10))

    on_end_date = evaluate(challenge, ledger, date(2026, 4, 1))
    after_end_date = evaluate(challenge, ledger, date(2026, 4, 2), at=fixed_now)

    assert on_end_date.status == ChallengeStatus.ACTIVE
    assert after_end_date.status == ChallengeStatus.FAILED
    assert after_end_date.failed_at == fixed_now


def test_sessions_after_end_date_do_not_count(challenge, ledger_factory, session_factory):
    events = _daily_sessions(session_factory, date(2026, 3, 3), 30)   # through April 1
    events += _daily_sessions(session_factory, date(2026, 4, 2), 6)
    ledger = ledger_factory(events)

    result = evaluate(challenge, ledger, date(2026, 4, 10))

    assert result.status == ChallengeStatus.FAILED


def test_snapshot_progress_matches_lifecycle_after_end_date(challenge, ledger_factory, session_factory):
    """Test a failed challenge never reports the late sessions as progress"""
    events = _daily_sessions(session_factory, date(2026, 3, 3), 30)
    events += _daily_sessions(session_factory, date(2026, 4, 2), 6)
    ledger = ledger_factory(events)
    failed = evaluate(challenge, ledger, date(2026, 4, 10))

    view = snapshot(failed, ledger, datetime(2026, 4, 10, 12, 0, tzinfo=timezone.utc))

    assert view.status == ChallengeStatus.FAILED
    assert view.progress.approved_count == 30
    assert view.progress.remaining_sessions == 6
    assert view.progress.completion_percent < 100
    assert view.days_remaining == 0


def test_rejected_sessions_do_not_complete(challenge, ledger_factory, session_factory):
    events = [
        session_factory(datetime(2026, 1, 2, 12, tzinfo=timezone.utc) + timedelta(days=i), approved=False)
        for i in range(40)
    ]

    result = evaluate(challenge, ledger_factory(events), date(2026, 3, 1))

    assert result.status == ChallengeStatus.ACTIVE


def test_evaluate_terminal_is_noop(challenge, ledger_factory, session_factory):
    full = ledger_factory(_daily_sessions(session_factory, date(2026, 1, 2), 36))
    completed = evaluate(challenge, full, date(2026, 3, 18))

    again = evaluate(completed, ledger_factory(), date(2026, 5, 1))

    assert again is completed
    assert again.status == ChallengeStatus.COMPLETED


def test_evaluate_failed_stays_failed(challenge, ledger_factory, session_factory):
    failed = evaluate(challenge, ledger_factory(), date(2026, 4, 2))
    full = ledger_factory(_daily_sessions(session_factory, date(2026, 1, 2), 36))

    again = evaluate(failed, full, date(2026, 4, 3))

    assert again is failed
    assert again.status == ChallengeStatus.FAILED


def test_evaluate_rejects_foreign_ledger(challenge):
    with pytest.raises(ValidationError):
        evaluate(challenge, SessionLedger(uuid4()), date(2026, 3, 18))


def test_transition_same_status_is_noop(challenge):
    assert transition(challenge, ChallengeStatus.ACTIVE) is challenge


def test_transition_never_goes_backward(challenge, fixed_now):
    completed = transition(challenge, ChallengeStatus.COMPLETED, at=fixed_now)

    with pytest.raises(LifecycleError):
        transition(completed, ChallengeStatus.ACTIVE)
    with pytest.raises(LifecycleError) as exc_info:
        transition(completed, ChallengeStatus.FAILED)

    assert exc_info.value.current_status == "completed"
    assert exc_info.value.requested_status == "failed"
    assert transition(completed, ChallengeStatus.COMPLETED) is completed


# ============================================================================
# Snapshot Tests
# ============================================================================

def test_snapshot(challenge, ledger_factory, session_factory, days_ago, fixed_now):
    ledger = ledger_factory([
        session_factory(days_ago(0, hours=1)),
        session_factory(days_ago(1, hours=1)),
        session_factory(days_ago(3, hours=1)),
        session_factory(days_ago(2), approved=False),
    ])

    view = snapshot(challenge, ledger, fixed_now)

    assert view.challenge_id == challenge.id
    assert view.status == ChallengeStatus.ACTIVE
    assert view.progress.approved_count == 3
    assert view.progress.total_target == 36
    assert view.progress.remaining_sessions == 33
    assert view.current_streak == 2
    assert view.best_streak == 2
    assert view.days_remaining == 14
    assert [d.done for d in view.week] == [False, True, True, False, False, False, False]
    assert view.odds_multiplier == 2.7
    assert view.projected_payout == 405


def test_snapshot_of_new_challenge(challenge, ledger_factory, fixed_now):
    view = snapshot(challenge, ledger_factory(), fixed_now)

    assert view.progress.completion_percent == 0.0
    assert view.current_streak == 0
    assert view.best_streak == 0


def test_snapshot_rejects_foreign_ledger(challenge, session_factory, fixed_now):
    other_id = uuid4()
    foreign = SessionLedger(other_id, [session_factory(fixed_now, challenge_id=other_id)])

    with pytest.raises(ValidationError) as exc_info:
        snapshot(challenge, foreign, fixed_now)
    assert exc_info.value.field == "challenge_id"
