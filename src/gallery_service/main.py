from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .app.api import public
from .app.core.config import get_settings
from .app.core.logging import configure_logging
from .app.db.database import close_db, init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    logger.info(f"Starting {settings.APP_NAME}...")

    if settings.absolute_database_url.startswith("sqlite:///"):
        database_dir = Path(
            settings.absolute_database_url.replace("sqlite:///", "")
        ).parent
        database_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Storage directories initialized")

    await init_db()
    logger.info("Database initialized")
    logger.info(f"{settings.APP_NAME} startup complete")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}...")
    await close_db()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
        expose_headers=["ETag", "Content-Disposition"],
    )

    app.include_router(public.router, prefix="/api", tags=["public"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.gallery_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
    )
