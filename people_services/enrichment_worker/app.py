"""
Health and status HTTP app for the enrichment worker
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from people_shared.utils.logger import get_logger

from . import __version__
from .metrics import ProcessedCounter
from .subscription import PersonSubscription

logger = get_logger(__name__)


def create_app(
    counter: ProcessedCounter,
    subscription: Optional[PersonSubscription] = None
) -> FastAPI:
    """
    Build the status app

    The app only reads the counter and the subscription stats; it never
    drives the worker.
    """
    app = FastAPI(
        title="Person Enrichment Worker",
        description="Health and status endpoints of the person enrichment worker",
        version=__version__,
    )

    @app.get("/health", response_class=PlainTextResponse)
    async def health_check():
        return "ok"

    @app.get("/", response_class=PlainTextResponse)
    async def processed_count():
        return f"This worker has processed {counter.value} people."

    @app.get("/stats")
    async def stats():
        return {
            "service": "person-enrichment-worker",
            "version": __version__,
            "processed": counter.value,
            "subscription": subscription.get_stats() if subscription else None,
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            exc_info=True
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    return app
