"""
Risk Model

Turns commitment parameters (stake, duration, weekly cadence) into the
numbers shown to the user when a challenge is set up.

Two independent models coexist:

Coin reward (continuous):
    coins = round(I × C(I) × (0.3 + 0.6 × M^1.5) × (S / 3)^1.1)

    Stake coefficient C(I), piecewise-linear and continuous:
    - I ≤ 50:          1 + 0.004·I
    - 50 < I ≤ 75:     1.2 + 0.012·(I − 50)
    - 75 < I ≤ 100:    1.5 + 0.02·(I − 75)
    - 100 < I ≤ 300:   2 − 0.0045·(I − 100)
    - 300 < I ≤ 1000:  1.1 − 0.000785·(I − 300)
    - I > 1000:        max(0, 0.55 − 0.00055·(I − 1000))

Odds multiplier (stepwise):
    odds = round(sessionBucket(S) × monthBucket(M), 1)

    - S ≤ 2 → 1.2, S ≤ 4 → 1.8, else 2.5
    - M ≤ 2 → 1.1, M ≤ 4 → 1.5, else 2.0

The two models are not required to agree.
"""

import logging
import math
from typing import Union

from src.exceptions import ValidationError
from src.models.challenge import RiskQuote
from src.validators import CommitmentParameters

logger = logging.getLogger(__name__)

Number = Union[int, float]

# (upper bound, piece start, value at start, slope); each piece starts where the previous ends
STAKE_PIECES = [
    (50, 0, 1.0, 0.004),
    (75, 50, 1.2, 0.012),
    (100, 75, 1.5, 0.02),
    (300, 100, 2.0, -0.0045),
    (1000, 300, 1.1, -0.000785),
]
TAIL_START = 1000
TAIL_BASE = 0.55
TAIL_SLOPE = -0.00055

# Odds buckets: (inclusive upper bound, factor), last factor applies above
SESSION_BUCKETS = [(2, 1.2), (4, 1.8)]
SESSION_BUCKET_TOP = 2.5
MONTH_BUCKETS = [(2, 1.1), (4, 1.5)]
MONTH_BUCKET_TOP = 2.0

# Difficulty labels by odds (exclusive upper bound)
DIFFICULTY_LABELS = [(2.0, "easy"), (3.0, "medium"), (4.0, "hard")]
DIFFICULTY_TOP = "extreme"


def _require_non_negative(field: str, value: Number) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number", field=field, value=value)
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"{field} must be finite", field=field, value=value)
    if value < 0:
        raise ValidationError(f"{field} cannot be negative", field=field, value=value)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (205.5 → 206)"""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def stake_coefficient(stake: Number) -> float:
    """
    Strategic stake coefficient C(I)

    Rises for small stakes, peaks at I = 100, then decays and is floored at 0
    for very large stakes.
    """
    _require_non_negative("stake", stake)

    for upper, start, base, slope in STAKE_PIECES:
        if stake <= upper:
            return base + slope * (stake - start)
    return max(0.0, TAIL_BASE + TAIL_SLOPE * (stake - TAIL_START))


def month_factor(months: Number) -> float:
    """Duration factor 0.3 + 0.6·M^1.5 (M = 3 → ≈ 3.4177)"""
    _require_non_negative("months", months)
    return 0.3 + 0.6 * months ** 1.5


def session_factor(sessions_per_week: Number) -> float:
    """Cadence factor (S/3)^1.1, equal to 1 for three sessions a week"""
    _require_non_negative("sessions_per_week", sessions_per_week)
    return (sessions_per_week / 3) ** 1.1


def coins_reward(stake: Number, months: Number, sessions_per_week: Number) -> int:
    """
    Coins granted for completing a challenge

    Example:
        coins_reward(50, 3, 3) == 205   # 50 × 1.2 × 3.4177 × 1
    """
    raw = (
        stake
        * stake_coefficient(stake)
        * month_factor(months)
        * session_factor(sessions_per_week)
    )
    return int(round_half_up(raw))


def _bucket(value: Number, buckets, top: float) -> float:
    for upper, factor in buckets:
        if value <= upper:
            return factor
    return top


def odds_multiplier(sessions_per_week: Number, months: Number) -> float:
    """
    Coarse odds label from cadence and duration buckets, one decimal

    Example:
        odds_multiplier(3, 3) == 2.7   # 1.8 × 1.5
    """
    _require_non_negative("sessions_per_week", sessions_per_week)
    _require_non_negative("months", months)

    odds = (
        _bucket(sessions_per_week, SESSION_BUCKETS, SESSION_BUCKET_TOP)
        * _bucket(months, MONTH_BUCKETS, MONTH_BUCKET_TOP)
    )
    return round_half_up(odds, 1)


def difficulty_label(odds: float) -> str:
    """easy / medium / hard / extreme, as shown on the setup screen"""
    for upper, label in DIFFICULTY_LABELS:
        if odds < upper:
            return label
    return DIFFICULTY_TOP


def reward_value(bet_amount: Number, odds: float) -> int:
    """Reward value the catalog is queried with: round(bet × odds)"""
    _require_non_negative("bet_amount", bet_amount)
    return int(round_half_up(bet_amount * odds))


def projected_payout(bet_amount: Number, months: Number, odds: float) -> int:
    """Potential gain over the whole challenge: round(bet × months × odds)"""
    _require_non_negative("bet_amount", bet_amount)
    _require_non_negative("months", months)
    return int(round_half_up(bet_amount * months * odds))


def quote(params: CommitmentParameters) -> RiskQuote:
    """All derived risk numbers for one set of validated commitment parameters"""
    odds = odds_multiplier(params.sessions_per_week, params.duration_months)
    result = RiskQuote(
        odds_multiplier=odds,
        coins_reward=coins_reward(params.bet_amount, params.duration_months, params.sessions_per_week),
        difficulty=difficulty_label(odds),
        reward_value=reward_value(params.bet_amount, odds),
        projected_payout=projected_payout(params.bet_amount, params.duration_months, odds),
    )
    logger.debug(
        f"Quoted S={params.sessions_per_week} M={params.duration_months} "
        f"I={params.bet_amount}: odds={result.odds_multiplier} coins={result.coins_reward}"
    )
    return result
