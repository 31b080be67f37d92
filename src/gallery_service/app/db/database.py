from loguru import logger
from tortoise import Tortoise

from .. import models
from ..core.config import get_settings

MODEL_MODULES = [models.__name__]


def tortoise_database_url(database_url: str) -> str:
    # Tortoise spells file-backed SQLite as sqlite://<path>
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "sqlite://", 1)
    return database_url


async def init_db(database_url: str | None = None, generate_schemas: bool = True):
    try:
        settings = get_settings()
        db_url = tortoise_database_url(database_url or settings.absolute_database_url)

        await Tortoise.init(
            db_url=db_url,
            modules={"models": MODEL_MODULES},
        )

        if generate_schemas:
            await Tortoise.generate_schemas(safe=True)

        logger.info("Database initialized successfully")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


async def close_db():
    try:
        await Tortoise.close_connections()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}")
        raise


async def check_database_health() -> bool:
    try:
        from tortoise import connections

        conn = connections.get("default")
        await conn.execute_query("SELECT 1")

        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
