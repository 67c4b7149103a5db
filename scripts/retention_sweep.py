"""Trim old versions of every active project down to the configured retention."""
import asyncio
import sys

from projectstore.config import get_settings
from projectstore.database import close_db
from projectstore.kernel.projects import ProjectStore
from projectstore.logging_config import configure_logging, correlation_scope, get_logger

logger = get_logger(__name__)


async def main(retention=None):
    settings = get_settings()
    configure_logging(log_level=settings.log_level, environment=settings.environment, debug=settings.debug)
    store = ProjectStore()

    with correlation_scope() as sweep_id:
        projects = await store.fetch_all_active_projects()
        logger.info("Retention sweep %s over %d projects", sweep_id, len(projects))
        total = 0
        for project in projects:
            removed = await store.versions.apply_retention(project.id, retention)
            if removed:
                print(f"{project.name}: removed versions {removed}")
            total += len(removed)
        print(f"Removed {total} version(s) across {len(projects)} project(s)")

    await close_db()


if __name__ == "__main__":
    asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else None))
