import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from src.domain.market.dtos.quote_dto import QuoteDTO
from src.domain.watchlist.watchlist_service import WatchlistService
from src.infrastructure.database.client import DatabaseClient


@pytest_asyncio.fixture
async def db_client(tmp_path):
    client = DatabaseClient(f"sqlite+aiosqlite:///{tmp_path / 'watchlist.db'}")
    await client.init()
    yield client
    await client.close()


@pytest.fixture
def mock_market_data():
    """Only AAPL has a quote."""
    market_data = MagicMock()

    async def get_quotes(symbols):
        return {
            s: QuoteDTO(symbol=s, price=180.0, change=2.5, change_percent=1.4)
            for s in symbols
            if s == "AAPL"
        }

    market_data.get_quotes = AsyncMock(side_effect=get_quotes)
    return market_data


@pytest.fixture
def watchlist_service(db_client, mock_market_data):
    return WatchlistService(db_client=db_client, market_data=mock_market_data)


@pytest.mark.asyncio
async def test_add_and_list_with_prices(watchlist_service):
    await watchlist_service.add("user-1", "aapl", "Apple Inc.")
    await watchlist_service.add("user-1", "MSFT", "Microsoft")

    items = await watchlist_service.list("user-1")

    assert [i.symbol for i in items] == ["AAPL", "MSFT"]
    assert items[0].current_price == 180.0
    assert items[0].change_percent == 1.4
    # no quote: listed without price fields
    assert items[1].current_price is None


@pytest.mark.asyncio
async def test_adding_twice_keeps_one_entry(watchlist_service):
    await watchlist_service.add("user-1", "AAPL", "Apple Inc.")
    await watchlist_service.add("user-1", "AAPL", "Apple Inc.")

    assert len(await watchlist_service.list("user-1")) == 1


@pytest.mark.asyncio
async def test_watchlists_are_per_user(watchlist_service):
    await watchlist_service.add("user-1", "AAPL", "Apple Inc.")
    await watchlist_service.add("user-2", "MSFT", "Microsoft")

    assert [i.symbol for i in await watchlist_service.list("user-2")] == ["MSFT"]
    assert sorted(await watchlist_service.list_watched_symbols()) == ["AAPL", "MSFT"]


@pytest.mark.asyncio
async def test_remove(watchlist_service):
    await watchlist_service.add("user-1", "AAPL", "Apple Inc.")

    assert await watchlist_service.remove("user-1", "aapl") is True
    assert await watchlist_service.remove("user-1", "AAPL") is False
    assert await watchlist_service.list("user-1") == []
