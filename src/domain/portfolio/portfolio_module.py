from dependency_injector import containers, providers
from src.domain.portfolio.portfolio_service import PortfolioService


class PortfolioModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    portfolio_service = providers.Factory(
        PortfolioService,
        trading=root.trading_service,
        market_data=root.market_data,
        views=root.valuation_cache,
    )
