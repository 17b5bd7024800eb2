from dependency_injector import containers, providers
from src.infrastructure.database.client import DatabaseClient
from src.infrastructure.config.settings import Settings
from src.infrastructure.data.yfinance_source import YFinanceService
from src.infrastructure.scheduler.scheduler import JobScheduler
from src.domain.market.market_data_service import MarketDataService
from src.domain.portfolio.valuation_cache import ValuationCache
from src.domain.trading.locks import UserLockRegistry


class Container(containers.DeclarativeContainer):
    config = providers.Singleton(Settings)

    db_client = providers.Singleton(
        DatabaseClient,
        db_url=config().async_database_url,
        pool_size=config().db_pool_size,
        max_overflow=config().db_max_overflow,
        pool_timeout=config().db_pool_timeout,
        pool_recycle=config().db_pool_recycle,
        echo=config().db_echo,
    )

    quote_source = providers.Singleton(
        YFinanceService,
    )

    market_data = providers.Singleton(
        MarketDataService,
        source=quote_source,
        timeout=config().quote_timeout_seconds,
        cache_ttl=config().quote_cache_ttl_seconds,
    )

    # shared state: must outlive the per-request service factories
    ledger_locks = providers.Singleton(UserLockRegistry)
    valuation_cache = providers.Singleton(ValuationCache)

    scheduler = providers.Singleton(
        JobScheduler,
        timezone=config().scheduler_timezone,
    )


container = Container()
