"""Domain initialization and configuration."""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")


def init_domain(settings) -> Domain:
    """Point the default database at ``settings.database_url`` and initialize the domain.

    ``domain.toml`` carries the static configuration; the database location
    comes from the environment so one build runs against sqlite locally and
    postgresql in production.
    """
    storefront.config["databases"]["default"] = {
        "provider": settings.database_provider,
        "database_uri": settings.database_url,
    }
    storefront.init()
    logger.info("Domain initialized", domain=storefront.name, database=settings.database_provider)
    return storefront
