from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
from src.application.container import container
from src.infrastructure.scheduler.scheduler import JobScheduler
from src.infrastructure.config.settings import settings
from src.domain.market.market_module import MarketModule
from src.domain.market.jobs.refresh_quotes_job import RefreshQuotesJob

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    scheduler: JobScheduler = container.scheduler()

    try:
        # 1) Database first
        await container.db_client().init()
        logger.info("Database initialized successfully")

        # 2) Quote refresh job (replaces client-side polling)
        if settings.scheduler_enabled:
            await scheduler.start()
            logger.info("Scheduler started")

            market_module: MarketModule = app.state.market_module
            refresh_job: RefreshQuotesJob = market_module.refresh_quotes_job()
            scheduler.add_cron_job(
                refresh_job.run,
                settings.quote_refresh_cron,
                job_id="refresh_quotes_job",
            )
        else:
            logger.info("Scheduler disabled, quotes are fetched on demand")

        yield

    except Exception as e:
        logger.error(f"Error during startup: {str(e)}")
        raise

    finally:
        logger.info("Shutting down application...")

        try:
            await scheduler.shutdown()
            logger.info("Scheduler shut down successfully")
        except Exception as e:
            logger.error(f"Error shutting down scheduler: {e}")

        await container.db_client().close()
        logger.info("Application shut down successfully")
