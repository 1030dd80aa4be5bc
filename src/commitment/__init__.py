"""
Challenge commitment & reward economy engine

Pure computation over caller-supplied records:
- Risk model (odds multiplier, coin reward)
- Session ledger, streaks and progress
- Challenge lifecycle (active → completed / failed)
- Reward catalog tiers
"""

from src.commitment.risk_model import (
    stake_coefficient,
    coins_reward,
    odds_multiplier,
    difficulty_label,
    quote,
)
from src.commitment.session_ledger import SessionLedger
from src.commitment.streak_calculator import StreakCalculator, current_streak
from src.commitment.progress_tracker import total_target, completion_percent, remaining_sessions, progress_for
from src.commitment.lifecycle import create_challenge, challenge_from_record, evaluate, transition, snapshot
from src.commitment.reward_catalog import RewardCatalog, default_reward_catalog, load_reward_catalog
from src.commitment.attestation import parse_verdict, build_session_event

__all__ = [
    "stake_coefficient",
    "coins_reward",
    "odds_multiplier",
    "difficulty_label",
    "quote",
    "SessionLedger",
    "StreakCalculator",
    "current_streak",
    "total_target",
    "completion_percent",
    "remaining_sessions",
    "progress_for",
    "create_challenge",
    "challenge_from_record",
    "evaluate",
    "transition",
    "snapshot",
    "RewardCatalog",
    "default_reward_catalog",
    "load_reward_catalog",
    "parse_verdict",
    "build_session_event",
]
