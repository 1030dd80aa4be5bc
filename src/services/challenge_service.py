"""
ChallengeService - Commitment Challenge Business Logic

Wires the engine pieces in the order the caller uses them:
quote → create challenge → record attested sessions → snapshot / evaluate,
plus reward catalog queries. The caller owns storage and the oracle call;
every method here takes and returns plain records.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from src.commitment import lifecycle, risk_model
from src.commitment.attestation import build_session_event, parse_verdict
from src.commitment.reward_catalog import RewardCatalog
from src.commitment.session_ledger import SessionLedger
from src.commitment.streak_calculator import StreakCalculator
from src.models.challenge import Challenge, ChallengeSnapshot, RiskQuote
from src.models.session import SessionEvent
from src.utils.datetime_helpers import local_date, now_utc
from src.validators import validate_commitment

logger = logging.getLogger(__name__)


class ChallengeService:
    """
    Service for commitment challenges.

    Responsibilities:
    - Risk quotes for commitment parameters
    - Challenge creation and lifecycle evaluation
    - Turning oracle verdicts into ledger entries
    - Dashboard snapshots and reward tier status
    """

    def __init__(
        self,
        reward_catalog: RewardCatalog,
        timezone: str = "UTC",
        collapse_same_day: bool = True
    ):
        """
        Initialize ChallengeService.

        Args:
            reward_catalog: Catalog loaded at startup
            timezone: IANA timezone defining calendar days
            collapse_same_day: Count several sessions on one day once in streaks
        """
        self.reward_catalog = reward_catalog
        self.timezone = timezone
        self.streaks = StreakCalculator(tz=timezone, collapse_same_day=collapse_same_day)
        logger.debug("ChallengeService initialized")

    def quote(self, sessions_per_week: int, duration_months: int, bet_amount: float) -> RiskQuote:
        """Risk numbers for the setup screen (validates the parameters)"""
        params = validate_commitment(sessions_per_week, duration_months, bet_amount)
        return risk_model.quote(params)

    def create_challenge(
        self,
        user_id: str,
        sessions_per_week: int,
        duration_months: int,
        bet_amount: float,
        start_date: Optional[date] = None
    ) -> Challenge:
        return lifecycle.create_challenge(
            user_id=user_id,
            sessions_per_week=sessions_per_week,
            duration_months=duration_months,
            bet_amount=bet_amount,
            start_date=start_date,
            tz=self.timezone,
        )

    def open_ledger(self, challenge: Challenge, events: Iterable[SessionEvent] = ()) -> SessionLedger:
        """Ledger view over the stored sessions of a challenge"""
        return SessionLedger(challenge.id, events, tz=self.timezone)

    def record_attestation(
        self,
        challenge: Challenge,
        ledger: SessionLedger,
        payload: Union[Mapping[str, Any], str],
        verified_at: Optional[datetime] = None
    ) -> Tuple[SessionLedger, SessionEvent]:
        """
        Turn an oracle payload into a session event and append it.

        Returns:
            (new ledger, event) - the caller persists the event

        Raises:
            AttestationError: If the payload is not a complete verdict
        """
        verdict = parse_verdict(payload)
        event = build_session_event(challenge, verdict, verified_at=verified_at)
        return ledger.append(event), event

    def evaluate(
        self,
        challenge: Challenge,
        ledger: SessionLedger,
        as_of: Optional[datetime] = None
    ) -> Challenge:
        """Apply the lifecycle policy as of `as_of` (defaults to now)"""
        as_of = as_of or now_utc()
        return lifecycle.evaluate(challenge, ledger, local_date(as_of, self.timezone), at=as_of)

    def get_snapshot(
        self,
        challenge: Challenge,
        ledger: SessionLedger,
        as_of: Optional[datetime] = None
    ) -> ChallengeSnapshot:
        return lifecycle.snapshot(challenge, ledger, as_of or now_utc(), streaks=self.streaks)

    def reward_status(self, value: float) -> Dict[str, Any]:
        """
        Reward tiers for an accumulated reward value.

        Returns:
            {
                'reward_value': float,
                'unlocked': list[RewardTier],
                'next_tier': RewardTier | None,
                'tiers': list[TierState],
                'progress_percent': float
            }
        """
        return {
            "reward_value": value,
            "unlocked": self.reward_catalog.unlocked_tiers(value),
            "next_tier": self.reward_catalog.next_tier(value),
            "tiers": self.reward_catalog.tier_states(value),
            "progress_percent": self.reward_catalog.progress_percent(value),
        }

    def reward_status_for(self, challenge: Challenge) -> Dict[str, Any]:
        """Reward tiers for a challenge's configured reward value (bet × odds)"""
        value = risk_model.reward_value(challenge.bet_amount, challenge.odds_multiplier)
        return self.reward_status(value)
