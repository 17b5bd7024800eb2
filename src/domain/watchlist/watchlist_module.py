from dependency_injector import containers, providers
from .watchlist_service import WatchlistService


class WatchlistModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    watchlist_service = providers.Factory(
        WatchlistService,
        db_client=root.db_client,
        market_data=root.market_data,
    )
