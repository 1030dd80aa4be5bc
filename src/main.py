"""Process entry point: configure logging, load the reward catalog, build services"""
import logging

from src import config
from src.commitment.reward_catalog import RewardCatalog, default_reward_catalog, load_reward_catalog
from src.services.container import ServiceContainer, init_container

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Configure root logging from LOG_LEVEL"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    )


def load_catalog() -> RewardCatalog:
    """Reward catalog from REWARD_CATALOG_PATH, or the built-in tiers"""
    if config.REWARD_CATALOG_PATH is not None:
        return load_reward_catalog(config.REWARD_CATALOG_PATH)
    logger.info("REWARD_CATALOG_PATH not set, using built-in reward tiers")
    return default_reward_catalog()


def bootstrap() -> ServiceContainer:
    """
    Start the engine for this process

    The reward catalog is loaded here once; changing tiers needs a restart.

    Raises:
        ConfigurationError: If settings or the catalog file are invalid
    """
    configure_logging()

    logger.info("Validating configuration...")
    config.validate_config()

    catalog = load_catalog()
    return init_container(
        reward_catalog=catalog,
        timezone=config.ENGINE_TIMEZONE,
        collapse_same_day=config.COLLAPSE_SAME_DAY_SESSIONS
    )


if __name__ == "__main__":
    bootstrap()
