# main.py
"""Docs assistant application"""
import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from config import settings
from services.logger_config import setup_logging
from api.endpoints import router
from services import factory

# Setup logging
setup_logging()
logger = logging.getLogger(settings.LOGGER_NAME)


def _log_warmup_result(task: asyncio.Task) -> None:
    if task.cancelled():
        logger.warning("Corpus warm-up cancelled")
    elif task.exception() is not None:
        # The cache is back to empty; the first chat request retries the build
        logger.error(f"Corpus warm-up failed: {task.exception()}")
    else:
        logger.info("Corpus warm-up complete")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # --- Startup ---
    logger.info("Starting application...")

    warmup = None
    if settings.WARM_CORPUS_ON_STARTUP:
        warmup = asyncio.create_task(factory.get_corpus_cache().ensure_ready())
        warmup.add_done_callback(_log_warmup_result)
        logger.info("Corpus warm-up scheduled")

    yield

    # --- Shutdown ---
    logger.info("Shutting down application...")
    if warmup is not None and not warmup.done():
        warmup.cancel()

    # The waiter above is shielded; stop the build itself (and its browser)
    await factory.get_corpus_cache().aclose()

    # Clear cached service instances
    factory.clear_instances()
    logger.info("Application shutdown complete")

# Create FastAPI app
app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    lifespan=lifespan
)

# Include API routes
app.include_router(router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
