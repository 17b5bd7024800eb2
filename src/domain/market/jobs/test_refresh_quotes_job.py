import pytest
from unittest.mock import AsyncMock, MagicMock

from src.domain.market.jobs.refresh_quotes_job import RefreshQuotesJob


@pytest.fixture
def job():
    market_data = MagicMock()
    market_data.refresh = AsyncMock(return_value={})
    trading = MagicMock()
    trading.list_held_symbols = AsyncMock(return_value=["AAPL", "MSFT"])
    watchlist = MagicMock()
    watchlist.list_watched_symbols = AsyncMock(return_value=["MSFT", "TSLA"])
    return RefreshQuotesJob(market_data, trading, watchlist)


@pytest.mark.asyncio
async def test_refreshes_held_and_watched_symbols_once(job):
    await job.run()

    job.market_data.refresh.assert_awaited_once()
    assert job.market_data.refresh.await_args.args[0] == {"AAPL", "MSFT", "TSLA"}


@pytest.mark.asyncio
async def test_nothing_to_refresh(job):
    job.trading.list_held_symbols.return_value = []
    job.watchlist.list_watched_symbols.return_value = []

    await job.run()

    job.market_data.refresh.assert_not_awaited()
