"""
Streak Calculator

Derives the consecutive-day attendance streak from approved session events.

Walk (current streak):
- Start at `as_of`, visit approved sessions newest first
- gap = floor(days between the cursor and the session)
- gap ≤ 1: the session extends the streak and becomes the cursor
- gap ≥ 2: the chain is broken, stop (the walk never resumes past a break)

Same-day sessions:
- collapse_same_day=True: several sessions on one calendar day count once
- collapse_same_day=False: every session encountered counts
Either way the cursor still moves to each session, so the point where the
chain breaks is the same in both modes.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from src.commitment.session_ledger import sort_most_recent_first
from src.models.session import SessionEvent
from src.utils.datetime_helpers import ensure_utc, local_date, resolve_timezone, whole_days_between

logger = logging.getLogger(__name__)

MAX_GAP_DAYS = 1


class StreakCalculator:
    """Streak queries over a sequence of session events"""

    def __init__(self, tz: Union[str, ZoneInfo] = "UTC", collapse_same_day: bool = True):
        self.tz = resolve_timezone(tz)
        self.collapse_same_day = collapse_same_day

    def _counts(self, day, previous_day) -> bool:
        return not (self.collapse_same_day and day == previous_day)

    def current_streak(self, events: Iterable[SessionEvent], as_of: datetime) -> int:
        """
        Current streak walked backward from `as_of`

        Sessions timestamped after `as_of` are ignored.

        Returns:
            0 for no approved sessions or a most recent session 2+ days old
        """
        as_of = ensure_utc(as_of)
        approved = [e for e in events if e.approved]
        future = [e for e in approved if e.verified_at > as_of]
        if future:
            logger.debug(f"Ignoring {len(future)} session(s) after {as_of.isoformat()}")

        streak = 0
        cursor = as_of
        previous_day = None
        for event in sort_most_recent_first(e for e in approved if e.verified_at <= as_of):
            if whole_days_between(cursor, event.verified_at) > MAX_GAP_DAYS:
                break
            day = local_date(event.verified_at, self.tz)
            if self._counts(day, previous_day):
                streak += 1
            previous_day = day
            cursor = event.verified_at

        return streak

    def best_streak(self, events: Iterable[SessionEvent]) -> int:
        """Longest unbroken chain of approved sessions over the whole history"""
        best = 0
        current = 0
        previous: Optional[SessionEvent] = None
        previous_day = None

        for event in reversed(sort_most_recent_first(e for e in events if e.approved)):
            if previous is not None and whole_days_between(event.verified_at, previous.verified_at) > MAX_GAP_DAYS:
                current = 0
                previous_day = None
            day = local_date(event.verified_at, self.tz)
            if self._counts(day, previous_day):
                current += 1
            best = max(best, current)
            previous = event
            previous_day = day

        return best


def current_streak(
    events: Iterable[SessionEvent],
    as_of: datetime,
    tz: Union[str, ZoneInfo] = "UTC",
    collapse_same_day: bool = True,
) -> int:
    """Shortcut for StreakCalculator(tz, collapse_same_day).current_streak(events, as_of)"""
    return StreakCalculator(tz, collapse_same_day).current_streak(events, as_of)
