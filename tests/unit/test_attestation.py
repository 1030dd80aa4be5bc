"""Unit tests for the attestation boundary (src/commitment/attestation.py)"""
import pytest
from datetime import datetime, timezone
from uuid import UUID

from src.commitment.attestation import parse_verdict, build_session_event
from src.exceptions import AttestationError
from src.models.session import AttestationVerdict


# ============================================================================
# Verdict Parsing Tests
# ============================================================================

def test_parse_verdict_from_mapping():
    verdict = parse_verdict({"success": True, "approved": True, "confidence": 92, "reason": "Dumbbells visible"})

    assert verdict == AttestationVerdict(approved=True, confidence=92, reason="Dumbbells visible")


def test_parse_verdict_from_model_text():
    """Test a verdict wrapped in prose or a code fence is extracted"""
    text = 'Voici mon analyse:\n```json\n{"approved": false, "confidence": 15, "reason": "Photo d\'écran"}\n```'

    verdict = parse_verdict(text)

    assert verdict.approved is False
    assert verdict.confidence == 15


def test_parse_verdict_oracle_failure():
    with pytest.raises(AttestationError, match="Crédits AI épuisés"):
        parse_verdict({"success": False, "error": "Crédits AI épuisés."})


@pytest.mark.parametrize("payload", [
    {"approved": True, "confidence": 90},                       # missing reason
    {"confidence": 90, "reason": "ok"},                          # missing approved
    {"approved": "true", "confidence": 90, "reason": "ok"},      # string bool
    {"approved": True, "confidence": 90.5, "reason": "ok"},      # float confidence
    {"approved": True, "confidence": 101, "reason": "ok"},       # out of range
    {"approved": True, "confidence": -1, "reason": "ok"},
])
def test_parse_verdict_rejects_malformed(payload):
    with pytest.raises(AttestationError):
        parse_verdict(payload)


@pytest.mark.parametrize("text", [
    "I cannot analyze this image.",
    "{not json at all}",
    "",
])
def test_parse_verdict_rejects_unparseable_text(text):
    with pytest.raises(AttestationError):
        parse_verdict(text)


def test_parse_verdict_rejects_unsupported_type():
    with pytest.raises(AttestationError):
        parse_verdict(["approved", True])


# ============================================================================
# Session Event Construction Tests
# ============================================================================

def test_build_session_event(challenge, fixed_now):
    verdict = AttestationVerdict(approved=True, confidence=88, reason="Gym mirrors and racks")

    event = build_session_event(
        challenge, verdict, verified_at=fixed_now, event_id=UUID(int=7)
    )

    assert event.id == UUID(int=7)
    assert event.challenge_id == challenge.id
    assert event.user_id == challenge.user_id
    assert event.approved is True
    assert event.confidence == 88
    assert event.reason == "Gym mirrors and racks"
    assert event.verified_at == fixed_now


def test_build_session_event_defaults_to_now(challenge):
    verdict = AttestationVerdict(approved=False, confidence=30, reason="Kitchen")
    before = datetime.now(timezone.utc)

    event = build_session_event(challenge, verdict)

    assert before <= event.verified_at <= datetime.now(timezone.utc)
    assert event.approved is False
