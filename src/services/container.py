"""
Service Container - Dependency Injection Container

Holds the startup configuration objects (reward catalog, timezone) and
lazily builds the services that depend on them.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from src.commitment.reward_catalog import RewardCatalog

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Configuration objects (reward catalog, timezone) are injected.
    """

    reward_catalog: RewardCatalog
    timezone: str = "UTC"
    collapse_same_day: bool = True

    # Services (lazy-loaded via properties)
    _challenge_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def challenge_service(self):
        """Get ChallengeService instance (lazy-loaded)"""
        if self._challenge_service is None:
            from src.services.challenge_service import ChallengeService
            self._challenge_service = ChallengeService(
                self.reward_catalog,
                timezone=self.timezone,
                collapse_same_day=self.collapse_same_day
            )
            logger.debug("ChallengeService instantiated")
        return self._challenge_service


# Global container instance (initialized in main.py)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() in main.py before using services."
        )
    return _container


def init_container(
    reward_catalog: RewardCatalog,
    timezone: str = "UTC",
    collapse_same_day: bool = True
) -> ServiceContainer:
    """
    Initialize the global service container.

    Should be called once in main.py after configuration is validated.
    """
    global _container

    _container = ServiceContainer(
        reward_catalog=reward_catalog,
        timezone=timezone,
        collapse_same_day=collapse_same_day
    )

    logger.info(f"Service container initialized ({len(reward_catalog)} reward tiers, timezone {timezone})")
    return _container


def reset_container() -> None:
    """Drop the global container (tests, reconfiguration)"""
    global _container
    _container = None
