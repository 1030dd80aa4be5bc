"""
Session Ledger

Read view over the attested session events of one challenge. The caller's
store owns persistence; the ledger only answers aggregate questions and
never mutates the events it was given. `append` returns a new ledger.

Only approved events count toward progress, streaks and rewards.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Optional, Union
from uuid import UUID
from zoneinfo import ZoneInfo

from src.exceptions import ValidationError
from src.models.challenge import WeekDay
from src.models.session import SessionEvent
from src.utils.datetime_helpers import local_date, resolve_timezone, start_of_week

logger = logging.getLogger(__name__)


def sort_most_recent_first(events: Iterable[SessionEvent]) -> list[SessionEvent]:
    """Newest first; equal timestamps ordered by event id so walks are reproducible"""
    return sorted(events, key=lambda e: (e.verified_at, e.id.int), reverse=True)


class SessionLedger:
    """
    Append-only collection of SessionEvents for one challenge

    Args:
        challenge_id: Owning challenge; every event must reference it
        events: Events supplied by the caller's store
        tz: IANA timezone defining calendar days (must match how the
            caller reasons about "today")
    """

    def __init__(
        self,
        challenge_id: UUID,
        events: Iterable[SessionEvent] = (),
        tz: Union[str, ZoneInfo] = "UTC",
    ):
        self.challenge_id = challenge_id
        self.tz = resolve_timezone(tz)
        collected: list[SessionEvent] = []
        seen: set[UUID] = set()
        for event in events:
            self._check(event, seen)
            collected.append(event)
            seen.add(event.id)
        self._events: tuple[SessionEvent, ...] = tuple(collected)
        self._ids: frozenset[UUID] = frozenset(seen)

    def _check(self, event: SessionEvent, seen) -> None:
        if event.challenge_id != self.challenge_id:
            raise ValidationError(
                f"Session {event.id} belongs to challenge {event.challenge_id}, "
                f"not {self.challenge_id}",
                field="challenge_id",
                value=str(event.challenge_id),
                user_id=event.user_id,
                operation="ledger_append",
            )
        if event.id in seen:
            raise ValidationError(
                f"Session {event.id} is already in the ledger",
                field="id",
                value=str(event.id),
                user_id=event.user_id,
                operation="ledger_append",
            )

    def require_owner(self, challenge, operation: str) -> None:
        """
        Fail unless this ledger holds the sessions of `challenge`

        Raises:
            ValidationError: If the ledger belongs to another challenge
        """
        if self.challenge_id != challenge.id:
            raise ValidationError(
                f"Ledger of challenge {self.challenge_id} cannot be used for challenge {challenge.id}",
                field="challenge_id",
                value=str(self.challenge_id),
                user_id=challenge.user_id,
                operation=operation,
            )

    def append(self, event: SessionEvent) -> "SessionLedger":
        """Return a new ledger with `event` added"""
        self._check(event, self._ids)
        ledger = SessionLedger(self.challenge_id, tz=self.tz)
        ledger._events = self._events + (event,)
        ledger._ids = self._ids | {event.id}
        logger.debug(
            f"Ledger {self.challenge_id}: appended session {event.id} "
            f"(approved={event.approved})"
        )
        return ledger

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[SessionEvent]:
        return iter(self._events)

    @property
    def events(self) -> tuple[SessionEvent, ...]:
        """All events, approved or not, in insertion order"""
        return self._events

    def approved_events(self) -> list[SessionEvent]:
        return [event for event in self._events if event.approved]

    def approved_count(self, until: Optional[date] = None) -> int:
        """
        Number of approved sessions

        Args:
            until: Only count sessions whose calendar day is on or before this date
        """
        approved = self.approved_events()
        if until is not None:
            approved = [e for e in approved if self.day_of(e) <= until]
        return len(approved)

    def day_of(self, event: SessionEvent) -> date:
        """Calendar day of an event in the ledger's timezone"""
        return local_date(event.verified_at, self.tz)

    def approved_on_day(self, day: Union[date, datetime]) -> bool:
        """True if an approved session falls on the same calendar day as `day`"""
        if isinstance(day, datetime):
            day = local_date(day, self.tz)
        return any(self.day_of(event) == day for event in self.approved_events())

    def approved_days(self) -> set[date]:
        return {self.day_of(event) for event in self.approved_events()}

    def most_recent_first(self) -> list[SessionEvent]:
        """Approved sessions, newest first (ties broken by id)"""
        return sort_most_recent_first(self.approved_events())

    def most_recent(self) -> Optional[SessionEvent]:
        ordered = self.most_recent_first()
        return ordered[0] if ordered else None

    def week_presence(self, as_of: datetime) -> list[WeekDay]:
        """Monday-to-Sunday attendance flags for the week containing `as_of`"""
        today = local_date(as_of, self.tz)
        monday = start_of_week(today)
        attended = self.approved_days()
        week = [monday + timedelta(days=offset) for offset in range(7)]
        return [WeekDay(day=day, done=day in attended, is_today=day == today) for day in week]
