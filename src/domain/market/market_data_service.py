import asyncio
import logging
import time
from typing import Dict, Iterable, List, Optional, Tuple

import anyio

from src.domain.ledger.errors import QuoteUnavailableError
from src.domain.market.dtos.quote_dto import (
    ChartInterval,
    ChartPointDTO,
    QuoteDTO,
    StockSearchResultDTO,
)
from src.infrastructure.data.quote_base import QuoteSource

logger = logging.getLogger(__name__)


class MarketDataService:
    """
    Quote access for the rest of the app.

    Wraps a QuoteSource with a per-lookup timeout and a short TTL cache
    of good quotes. Failed lookups are never cached.
    """

    def __init__(
        self,
        source: QuoteSource,
        timeout: float = 10.0,
        cache_ttl: float = 60.0,
    ):
        self.source = source
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self._cache: Dict[str, Tuple[float, QuoteDTO]] = {}

    def _cached(self, symbol: str) -> Optional[QuoteDTO]:
        if self.cache_ttl <= 0:
            return None
        entry = self._cache.get(symbol)
        if entry is None:
            return None
        stored_at, quote = entry
        if time.monotonic() - stored_at > self.cache_ttl:
            self._cache.pop(symbol, None)
            return None
        return quote

    async def _fetch(self, symbol: str) -> QuoteDTO:
        try:
            with anyio.fail_after(self.timeout):
                quote = await self.source.get_quote(symbol)
        except QuoteUnavailableError:
            raise
        except TimeoutError as e:
            raise QuoteUnavailableError(
                symbol, f"timed out after {self.timeout}s") from e
        except Exception as e:
            raise QuoteUnavailableError(symbol, str(e)) from e

        self._cache[symbol] = (time.monotonic(), quote)
        return quote

    async def get_quote(self, symbol: str, use_cache: bool = True) -> QuoteDTO:
        """
        Raises:
            QuoteUnavailableError: the source failed, timed out or returned
                no usable price
        """
        if use_cache:
            cached = self._cached(symbol)
            if cached is not None:
                return cached
        return await self._fetch(symbol)

    async def get_quotes(
        self,
        symbols: Iterable[str],
        use_cache: bool = True,
    ) -> Dict[str, QuoteDTO]:
        """
        Look up every distinct symbol concurrently.

        Returns only the symbols whose lookup succeeded; failures are logged
        and left out so the caller can degrade per symbol.
        """
        distinct: List[str] = sorted(set(symbols))
        if not distinct:
            return {}

        results = await asyncio.gather(
            *(self.get_quote(s, use_cache=use_cache) for s in distinct),
            return_exceptions=True,
        )

        quotes: Dict[str, QuoteDTO] = {}
        for symbol, result in zip(distinct, results):
            if isinstance(result, QuoteDTO):
                quotes[symbol] = result
            elif isinstance(result, Exception):
                logger.warning(f"Quote lookup failed for {symbol}: {result}")
            else:
                # BaseException (e.g. cancellation) must not be swallowed
                raise result

        return quotes

    async def refresh(self, symbols: Iterable[str]) -> Dict[str, QuoteDTO]:
        """Bypass the cache and re-fetch the given symbols."""
        quotes = await self.get_quotes(symbols, use_cache=False)
        logger.info(f"Refreshed {len(quotes)} quotes")
        return quotes

    async def search(self, query: str) -> List[StockSearchResultDTO]:
        if not query or not query.strip():
            return []
        return await self.source.search(query)

    async def get_chart(
        self,
        symbol: str,
        interval: ChartInterval = ChartInterval.ONE_MONTH,
    ) -> List[ChartPointDTO]:
        return await self.source.get_chart(symbol, interval)
