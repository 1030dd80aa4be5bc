"""
Reward Catalog

Ordered reward tiers keyed by a reward-value threshold. A tier is unlocked
once the reward value reaches its min_value; the next tier is the cheapest
one still locked.

The catalog is built once at startup from an explicit tier list and passed
to whoever needs it. It is never mutated afterwards.
"""

import json
import logging
import math
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.exceptions import ConfigurationError, ValidationError
from src.models.reward import RewardTier, TierState

logger = logging.getLogger(__name__)

Number = Union[int, float]

DEFAULT_REWARD_TIERS = [
    {"rank": 1, "min_value": 30, "name": "T-Shirt Sport", "brand": "Nike", "icon": "👕"},
    {"rank": 2, "min_value": 50, "name": "Shaker Premium", "brand": "BlenderBottle", "icon": "🥤"},
    {"rank": 3, "min_value": 80, "name": "Brassière / Débardeur", "brand": "Under Armour", "icon": "🏋️"},
    {"rank": 4, "min_value": 120, "name": "Chaussures de Training", "brand": "Adidas", "icon": "👟"},
    {"rank": 5, "min_value": 200, "name": "Tenue Complète", "brand": "Nike", "icon": "🔥"},
    {"rank": 6, "min_value": 350, "name": "Pack Premium", "brand": "Multi-marques", "icon": "🏆"},
]

_tier_list = TypeAdapter(list[RewardTier])


class RewardCatalog:
    """
    Immutable ordered list of reward tiers

    Raises:
        ConfigurationError: If ranks repeat or min_value is not strictly
            increasing in rank order
    """

    def __init__(self, tiers: Iterable[RewardTier]):
        ordered = sorted(tiers, key=lambda t: t.rank)
        for previous, tier in zip(ordered, ordered[1:]):
            if tier.rank == previous.rank:
                raise ConfigurationError(
                    f"Duplicate reward tier rank {tier.rank}",
                    config_key="reward_tiers",
                )
            if tier.min_value <= previous.min_value:
                raise ConfigurationError(
                    f"Reward tier {tier.rank} min_value {tier.min_value} must exceed "
                    f"tier {previous.rank} min_value {previous.min_value}",
                    config_key="reward_tiers",
                )
        self._tiers: tuple[RewardTier, ...] = tuple(ordered)
        logger.debug(f"Reward catalog loaded with {len(self._tiers)} tiers")

    @property
    def tiers(self) -> tuple[RewardTier, ...]:
        return self._tiers

    def __len__(self) -> int:
        return len(self._tiers)

    @staticmethod
    def _check_value(value: Number) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value) or value < 0:
            raise ValidationError(
                "Reward value must be a non-negative number",
                field="reward_value",
                value=value,
                operation="reward_catalog_query",
            )

    def unlocked_tiers(self, value: Number) -> list[RewardTier]:
        """All tiers with min_value ≤ value, in catalog order"""
        self._check_value(value)
        return [tier for tier in self._tiers if tier.min_value <= value]

    def next_tier(self, value: Number) -> Optional[RewardTier]:
        """Cheapest tier with min_value > value, or None past the top tier"""
        self._check_value(value)
        for tier in self._tiers:
            if tier.min_value > value:
                return tier
        return None

    def tier_states(self, value: Number) -> list[TierState]:
        """Unlocked / next flags for every tier"""
        upcoming = self.next_tier(value)
        return [
            TierState(tier=tier, unlocked=tier.min_value <= value, is_next=tier == upcoming)
            for tier in self._tiers
        ]

    def progress_percent(self, value: Number) -> float:
        """Progress toward the top tier, capped at 100"""
        self._check_value(value)
        if not self._tiers:
            return 0.0
        if self._tiers[-1].min_value == 0:
            return 100.0
        return min(100.0, 100 * value / self._tiers[-1].min_value)


def default_reward_catalog() -> RewardCatalog:
    """Catalog of the product's six reward tiers (30 to 350)"""
    return RewardCatalog(RewardTier(**tier) for tier in DEFAULT_REWARD_TIERS)


def load_reward_catalog(path: Path) -> RewardCatalog:
    """
    Load a catalog from a JSON list of tiers

    Raises:
        ConfigurationError: If the file is missing, not JSON, or has invalid tiers
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        tiers = _tier_list.validate_python(raw)
    except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
        raise ConfigurationError(
            f"Could not load reward catalog from {path}: {e}",
            config_key="REWARD_CATALOG_PATH",
            cause=e,
        ) from e

    logger.info(f"Loaded {len(tiers)} reward tiers from {path}")
    return RewardCatalog(tiers)
