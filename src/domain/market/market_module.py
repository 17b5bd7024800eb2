from dependency_injector import containers, providers
from src.domain.market.jobs.refresh_quotes_job import RefreshQuotesJob


class MarketModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    refresh_quotes_job = providers.Factory(
        RefreshQuotesJob,
        market_data=root.market_data,
        trading=root.trading_service,
        watchlist=root.watchlist_service,
    )
