import logging
from typing import Dict
from src.infrastructure.database.client import DatabaseClient
from src.infrastructure.scheduler.scheduler import JobScheduler

logger = logging.getLogger(__name__)


class HealthService:
    def __init__(self, db_client: DatabaseClient, scheduler: JobScheduler):
        self.db_client = db_client
        self.scheduler = scheduler

    async def check_database_health(self) -> bool:
        try:
            return await self.db_client.health_check()
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def status(self) -> Dict[str, object]:
        db_health = await self.check_database_health()
        return {
            "status": "healthy" if db_health else "unhealthy",
            "database": db_health,
            "scheduler": self.scheduler.running,
        }
