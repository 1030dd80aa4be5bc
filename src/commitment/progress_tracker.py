"""
Progress Tracker

Session target and completion for a challenge. A month is counted as
exactly 4 weeks for the target (3 sessions/week over 3 months = 36).
"""

import logging

from src.models.challenge import Challenge, ProgressReport
from src.commitment.session_ledger import SessionLedger

logger = logging.getLogger(__name__)

WEEKS_PER_MONTH = 4


def total_target(sessions_per_week: int, duration_months: int) -> int:
    """Sessions required to complete a challenge"""
    return sessions_per_week * WEEKS_PER_MONTH * duration_months


def completion_percent(approved_count: int, target: int) -> float:
    """100 × approved / target, or 0.0 when the target is 0"""
    if target == 0:
        return 0.0
    return 100 * approved_count / target


def remaining_sessions(approved_count: int, target: int) -> int:
    return max(0, target - approved_count)


def progress_for(challenge: Challenge, ledger: SessionLedger) -> ProgressReport:
    """
    Progress report for a challenge from its ledger

    Only sessions on or before end_date count, as in the lifecycle decision.

    Raises:
        ValidationError: If the ledger belongs to another challenge
    """
    ledger.require_owner(challenge, operation="progress_for")
    target = total_target(challenge.sessions_per_week, challenge.duration_months)
    count = ledger.approved_count(until=challenge.end_date)
    report = ProgressReport(
        approved_count=count,
        total_target=target,
        completion_percent=completion_percent(count, target),
        remaining_sessions=remaining_sessions(count, target),
    )
    logger.debug(f"Challenge {challenge.id}: {count}/{target} sessions ({report.completion_percent:.1f}%)")
    return report
