"""
Service Layer Package

Business logic services that sit between the caller (UI, API, scheduler)
and the pure engine in src.commitment.

Core Services:
- ChallengeService: quotes, challenge lifecycle, session attestation, rewards
"""

from src.services.container import ServiceContainer, get_container, init_container, reset_container
from src.services.challenge_service import ChallengeService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "reset_container",
    "ChallengeService",
]
