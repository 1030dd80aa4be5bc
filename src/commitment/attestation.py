"""
Attestation Boundary

The gym-photo classifier is an external oracle. Its only contract with the
engine is a verdict shaped like:

    {"approved": true, "confidence": 0-100, "reason": "..."}

The oracle wraps that in {"success": true, ...} and model output may arrive
as free text around a single JSON object. Anything that does not parse into
a complete verdict is rejected; no field is defaulted.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Mapping, Optional, Union
from uuid import UUID, uuid4

from pydantic import ValidationError as PydanticValidationError

from src.exceptions import AttestationError
from src.models.challenge import Challenge
from src.models.session import AttestationVerdict, SessionEvent
from src.utils.datetime_helpers import now_utc

logger = logging.getLogger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def _extract_json_object(text: str) -> dict:
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        raise AttestationError("No JSON object found in oracle response", payload=text)
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AttestationError(f"Oracle response is not valid JSON: {e}", payload=text, cause=e) from e
    if not isinstance(data, dict):
        raise AttestationError("Oracle response is not a JSON object", payload=text)
    return data


def parse_verdict(payload: Union[Mapping[str, Any], str]) -> AttestationVerdict:
    """
    Validate an oracle payload into an AttestationVerdict

    Args:
        payload: Mapping from the oracle, or raw model text containing one JSON object

    Raises:
        AttestationError: If the oracle reported a failure or the verdict is malformed
    """
    if isinstance(payload, str):
        payload = _extract_json_object(payload)
    elif not isinstance(payload, Mapping):
        raise AttestationError(f"Unsupported verdict payload type {type(payload).__name__}", payload=payload)

    if payload.get("success") is False:
        raise AttestationError(
            f"Oracle reported failure: {payload.get('error', 'unknown error')}",
            payload=dict(payload),
        )

    try:
        verdict = AttestationVerdict.model_validate(dict(payload))
    except PydanticValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(part) for part in first_error.get("loc", ()))
        raise AttestationError(
            f"Malformed verdict ({field}): {first_error.get('msg')}",
            payload=dict(payload),
            cause=e,
        ) from e

    logger.debug(f"Verdict approved={verdict.approved} confidence={verdict.confidence}")
    return verdict


def build_session_event(
    challenge: Challenge,
    verdict: AttestationVerdict,
    verified_at: Optional[datetime] = None,
    event_id: Optional[UUID] = None,
) -> SessionEvent:
    """Immutable SessionEvent for a challenge from a validated verdict"""
    event = SessionEvent(
        id=event_id or uuid4(),
        challenge_id=challenge.id,
        user_id=challenge.user_id,
        approved=verdict.approved,
        confidence=verdict.confidence,
        reason=verdict.reason,
        verified_at=verified_at or now_utc(),
    )
    if event.approved:
        logger.info(f"Session {event.id} approved for challenge {challenge.id} ({event.confidence}%)")
    else:
        logger.info(f"Session {event.id} rejected for challenge {challenge.id}: {event.reason}")
    return event
