"""
Lifespan startup and shutdown task functions.

Each function handles a single startup or shutdown responsibility.
"""

import logging


async def initialize_logging(settings, log_config):
    """Setup logging configuration."""
    from core.logging_config import setup_logging

    setup_logging(log_config)
    logging.getLogger("main").info(f"Starting {settings.api.app_name}...")


async def log_cors_configuration(settings, logger):
    """Log CORS configuration for debugging."""
    logger.info(f"CORS allowed origins: {settings.cors.origins}")


async def initialize_database():
    """Create missing tables."""
    from core.database import init_db

    logger = logging.getLogger("main")
    await init_db()
    logger.info("Database initialized")


async def log_portal_configuration(settings, logger):
    """Warn when facility portal sync is disabled."""
    if settings.portal.api_key:
        logger.info(f"Facility portal sync enabled ({settings.portal.base_url})")
    else:
        logger.warning("Facility portal sync disabled: PORTAL_API_KEY not set")


async def shutdown_portal_client():
    """Close the facility portal HTTP client."""
    from services.facility_portal_client import FacilityPortalClient

    await FacilityPortalClient.close()
    logging.getLogger("main").info("Facility portal client closed")


async def shutdown_database():
    """Close database connections."""
    from core.database import close_db

    await close_db()
    logging.getLogger("main").info("Database connections closed")


def shutdown_logging():
    """Stop the logging queue listener."""
    from core.logging_config import stop_queue_listener

    stop_queue_listener()
