from fastapi import FastAPI
from dependency_injector import providers
from src.application.container import container as root_container


def register_modules(app: FastAPI):
    # Register Health Module
    from src.domain.health.module import HealthModule
    from src.domain.health.controller import router as health_router

    health_container = HealthModule(
        root=providers.DependenciesContainer(
            db_client=root_container.db_client,
            scheduler=root_container.scheduler,
        )
    )
    health_container.wire(modules=["src.domain.health.controller"])

    app.include_router(health_router)
    app.state.health_container = health_container

    # Register Trading Module
    from src.domain.trading.trading_module import TradingModule
    from src.domain.trading.controller import router as trading_router

    trading_module = TradingModule(
        root=providers.DependenciesContainer(
            db_client=root_container.db_client,
            ledger_locks=root_container.ledger_locks,
            config=root_container.config,
        ),
    )
    trading_module.wire(modules=["src.domain.trading.controller"])

    app.include_router(trading_router)
    app.state.trading_module = trading_module

    # Register Portfolio Module
    from src.domain.portfolio.portfolio_module import PortfolioModule
    from src.domain.portfolio.controller import router as portfolio_router

    portfolio_module = PortfolioModule(
        root=providers.DependenciesContainer(
            trading_service=trading_module.trading_service,
            market_data=root_container.market_data,
            valuation_cache=root_container.valuation_cache,
        ),
    )
    portfolio_module.wire(modules=["src.domain.portfolio.controller"])

    app.include_router(portfolio_router)
    app.state.portfolio_module = portfolio_module

    # Register Watchlist Module
    from src.domain.watchlist.watchlist_module import WatchlistModule
    from src.domain.watchlist.controller import router as watchlist_router

    watchlist_module = WatchlistModule(
        root=providers.DependenciesContainer(
            db_client=root_container.db_client,
            market_data=root_container.market_data,
        ),
    )
    watchlist_module.wire(modules=["src.domain.watchlist.controller"])

    app.include_router(watchlist_router)
    app.state.watchlist_module = watchlist_module

    # Register Market Module
    from src.domain.market.market_module import MarketModule
    from src.domain.market.controller import router as market_router

    market_module = MarketModule(
        root=providers.DependenciesContainer(
            market_data=root_container.market_data,
            trading_service=trading_module.trading_service,
            watchlist_service=watchlist_module.watchlist_service,
        ),
    )
    root_container.wire(modules=["src.domain.market.controller"])

    app.include_router(market_router)
    app.state.market_module = market_module
