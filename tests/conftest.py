"""Global test fixtures and utilities for commitment engine tests"""
import pytest
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from src.commitment.lifecycle import create_challenge
from src.commitment.reward_catalog import RewardCatalog
from src.commitment.session_ledger import SessionLedger
from src.models.reward import RewardTier
from src.models.session import SessionEvent


# Wednesday evening, UTC
FIXED_NOW = datetime(2026, 3, 18, 18, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# User & Time Fixtures
# ============================================================================

@pytest.fixture
def test_user_id():
    """Standard test user ID"""
    return "user-123456789"


@pytest.fixture
def fixed_now():
    """Fixed 'now' for deterministic streak and lifecycle tests"""
    return FIXED_NOW


# ============================================================================
# Challenge Fixtures
# ============================================================================

@pytest.fixture
def challenge(test_user_id):
    """3 sessions/week for 3 months at 50 - odds 2.7, 205 coins, target 36"""
    return create_challenge(
        user_id=test_user_id,
        sessions_per_week=3,
        duration_months=3,
        bet_amount=50,
        start_date=date(2026, 1, 1),
        challenge_id=UUID("00000000-0000-0000-0000-00000000c001"),
    )


@pytest.fixture
def session_factory(challenge):
    """Factory for session events of the `challenge` fixture"""
    counter = {"n": 0}

    def _create(verified_at, approved=True, confidence=90, reason="Gym equipment visible", **kwargs):
        counter["n"] += 1
        return SessionEvent(
            id=kwargs.get("id", UUID(int=counter["n"])),
            challenge_id=kwargs.get("challenge_id", challenge.id),
            user_id=kwargs.get("user_id", challenge.user_id),
            approved=approved,
            confidence=confidence,
            reason=reason,
            verified_at=verified_at,
        )

    return _create


@pytest.fixture
def days_ago(fixed_now):
    """Timestamp `n` days before fixed_now (optionally shifted by hours)"""
    def _at(n, hours=0):
        return fixed_now - timedelta(days=n, hours=hours)
    return _at


@pytest.fixture
def ledger_factory(challenge):
    """Factory for ledgers of the `challenge` fixture"""
    def _create(events=(), tz="UTC"):
        return SessionLedger(challenge.id, events, tz=tz)
    return _create


# ============================================================================
# Reward Fixtures
# ============================================================================

@pytest.fixture
def test_catalog():
    """Test catalog with thresholds 50, 100, 200, 400, 800, 1500"""
    thresholds = [50, 100, 200, 400, 800, 1500]
    return RewardCatalog(
        RewardTier(rank=i + 1, min_value=value, name=f"Tier {i + 1}")
        for i, value in enumerate(thresholds)
    )


# ============================================================================
# Environment & Config Fixtures
# ============================================================================

@pytest.fixture
def test_env_vars(monkeypatch):
    """Set standard test environment variables"""
    env_vars = {
        "LOG_LEVEL": "DEBUG",
        "ENGINE_TIMEZONE": "Europe/Paris",
        "COLLAPSE_SAME_DAY_SESSIONS": "true",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars
