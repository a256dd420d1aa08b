"""
Person Enrichment Worker - Main Entry Point

Runs the work stream subscription and the health/status HTTP server on
one event loop. A fatal subscription error ends the process.
"""

import asyncio
from typing import Optional

import uvicorn

from people_shared.config.settings import DataBackend, settings
from people_shared.utils.logger import configure_logging, get_logger
from people_shared.utils.postgres_client import PostgresClient
from people_shared.utils.redis_client import RedisClient

from . import __version__
from .app import create_app
from .metrics import ProcessedCounter
from .pipeline import EnrichmentPipeline
from .providers.people_lookup_provider import PeopleLookupClient
from .stores import build_person_store
from .subscription import PersonSubscription
from .work_queue import PersonWorkQueue

logger = get_logger(__name__)


async def run_worker() -> None:
    redis_client = RedisClient()
    postgres_client: Optional[PostgresClient] = None

    try:
        try:
            await redis_client.connect()

            if settings.data_backend is DataBackend.POSTGRES:
                postgres_client = PostgresClient(command_timeout=settings.store_timeout_seconds)
                await postgres_client.connect(
                    min_size=settings.db_pool_min,
                    max_size=settings.db_pool_max
                )

            counter = ProcessedCounter()
            store = build_person_store(
                settings.data_backend,
                work_queue=PersonWorkQueue(redis_client),
                redis_client=redis_client,
                postgres_client=postgres_client,
            )
            pipeline = EnrichmentPipeline(store, PeopleLookupClient(), counter=counter)
            subscription = PersonSubscription(redis_client, pipeline)

            server = uvicorn.Server(uvicorn.Config(
                create_app(counter, subscription),
                host=settings.host,
                port=settings.port,
                log_config=None,
            ))
        except Exception as e:
            logger.error("startup_failed", error=str(e), exc_info=True)
            raise

        logger.info(
            "person_enricher_ready",
            version=__version__,
            backend=settings.data_backend.value,
            port=settings.port
        )

        try:
            # Either task finishing means the worker is done
            tasks = [
                asyncio.create_task(subscription.run(), name="subscription"),
                asyncio.create_task(server.serve(), name="http"),
            ]
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            for task in done:
                task.result()
        except Exception as e:
            logger.error("person_enricher_stopped", error=str(e), exc_info=True)
            raise

    finally:
        await redis_client.disconnect()
        if postgres_client:
            await postgres_client.disconnect()


def main() -> None:
    configure_logging(service_name=settings.service_name)
    asyncio.run(run_worker())


if __name__ == "__main__":
    main()
