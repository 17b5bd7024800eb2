import pytest
from unittest.mock import AsyncMock, MagicMock

from src.domain.ledger.dtos.portfolio_dto import HoldingDTO, PortfolioDTO
from src.domain.ledger.errors import PortfolioNotFoundError
from src.domain.market.dtos.quote_dto import QuoteDTO
from src.domain.portfolio.portfolio_service import PortfolioService
from src.domain.portfolio.valuation_cache import ValuationCache


@pytest.fixture
def stored_portfolio():
    return PortfolioDTO(
        user_id="user-1",
        cash_balance=1_000.0,
        initial_balance=5_000.0,
        holdings={
            "AAPL": HoldingDTO(symbol="AAPL", shares=10, avg_cost=150),
            "MSFT": HoldingDTO(symbol="MSFT", shares=2, avg_cost=300),
        },
    )


@pytest.fixture
def mock_trading(stored_portfolio):
    trading = MagicMock()
    trading.get_portfolio = AsyncMock(return_value=stored_portfolio)
    return trading


@pytest.fixture
def mock_market_data():
    market_data = MagicMock()
    market_data.get_quotes = AsyncMock(return_value={
        "AAPL": QuoteDTO(symbol="AAPL", price=175.0),
        "MSFT": QuoteDTO(symbol="MSFT", price=250.0),
    })
    return market_data


@pytest.fixture
def portfolio_service(mock_trading, mock_market_data):
    return PortfolioService(
        trading=mock_trading,
        market_data=mock_market_data,
        views=ValuationCache(),
    )


@pytest.mark.asyncio
async def test_view_is_valuated_with_fresh_quotes(portfolio_service, mock_market_data):
    view = await portfolio_service.get_portfolio_view("user-1")

    assert view.total_value == 1_000 + 1_750 + 500
    assert view.holding("AAPL").unrealized_gain == 250
    symbols = mock_market_data.get_quotes.await_args.args[0]
    assert sorted(symbols) == ["AAPL", "MSFT"]


@pytest.mark.asyncio
async def test_quote_outage_falls_back_to_last_view(portfolio_service, mock_market_data):
    await portfolio_service.get_portfolio_view("user-1")
    mock_market_data.get_quotes.return_value = {"AAPL": QuoteDTO(symbol="AAPL", price=180.0)}

    view = await portfolio_service.get_portfolio_view("user-1")

    assert view.holding("AAPL").current_price == 180.0
    assert view.holding("MSFT").stale
    assert view.holding("MSFT").current_price == 250.0


@pytest.mark.asyncio
async def test_total_outage_still_serves_cash(mock_trading, mock_market_data):
    mock_market_data.get_quotes.return_value = {}
    service = PortfolioService(mock_trading, mock_market_data, ValuationCache())

    view = await service.get_portfolio_view("user-1")

    assert view.total_value == 1_000.0
    assert all(not h.is_valued for h in view.holdings)


@pytest.mark.asyncio
async def test_unknown_user(portfolio_service, mock_trading):
    mock_trading.get_portfolio.side_effect = PortfolioNotFoundError("ghost")

    with pytest.raises(PortfolioNotFoundError):
        await portfolio_service.get_portfolio_view("ghost")
