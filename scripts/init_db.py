"""Create the store tables in the configured database (PROJECTSTORE_DATABASE_URL)."""
import asyncio

from projectstore.config import get_settings
from projectstore.database import close_db, init_db
from projectstore.logging_config import configure_logging, get_logger

logger = get_logger(__name__)


async def main():
    settings = get_settings()
    configure_logging(log_level=settings.log_level, environment=settings.environment, debug=settings.debug)
    await init_db()
    logger.info("Tables created in %s", settings.database_url)
    await close_db()


if __name__ == "__main__":
    asyncio.run(main())
