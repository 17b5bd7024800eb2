from __future__ import annotations
from .quote_base import QuoteSource
from datetime import datetime, date, timedelta
from typing import Any, Dict, Optional, List, Tuple, Union

import logging

import anyio
import pandas as pd
import yfinance as yf

from src.domain.ledger.errors import QuoteUnavailableError
from src.domain.market.dtos.quote_dto import (
    ChartInterval,
    ChartPointDTO,
    QuoteDTO,
    StockSearchResultDTO,
)


logger = logging.getLogger(__name__)

# interval -> (lookback days, yfinance bar interval)
CHART_RANGES: Dict[ChartInterval, Tuple[int, str]] = {
    ChartInterval.ONE_DAY: (1, "5m"),
    ChartInterval.ONE_WEEK: (7, "60m"),
    ChartInterval.ONE_MONTH: (30, "1d"),
    ChartInterval.THREE_MONTHS: (90, "1d"),
    ChartInterval.ONE_YEAR: (365, "1wk"),
    ChartInterval.FIVE_YEARS: (5 * 365, "1mo"),
}


# ==========================
# Infrastructure: yfinance
# ==========================

class YFinanceService(QuoteSource):
    def __init__(
        self,
        quote_lookback_days: int = 7,
        search_limit: int = 10,
    ) -> None:
        self.quote_lookback_days = quote_lookback_days
        self.search_limit = search_limit

    # -------- internal helpers --------

    @staticmethod
    def _normalize_symbols(
        symbols: Optional[Union[str, List[str]]]
    ) -> List[str]:
        if symbols is None:
            raise ValueError("symbols cannot be None here")
        if isinstance(symbols, str):
            symbols = [symbols]
        return [s for s in symbols if isinstance(s, str) and s.strip()]

    @staticmethod
    def _normalize_index_tz(df: pd.DataFrame) -> pd.DataFrame:
        """Ensure a sorted, tz-naive DatetimeIndex."""
        if not isinstance(df.index, pd.DatetimeIndex):
            df = df.copy()
            df.index = pd.to_datetime(df.index)

        if df.index.tz is not None:
            df = df.copy()
            df.index = df.index.tz_localize(None)

        return df.sort_index()

    def __download_in_batches(
        self,
        symbols: List[str],
        start_str: str,
        end_str: str,
        interval: str,
        batch_size: int = 40,
        use_threads: bool = False,
    ) -> pd.DataFrame:
        """Blocking call into yfinance."""
        if not symbols:
            return pd.DataFrame()

        parts: List[pd.DataFrame] = []
        failed: List[str] = []

        for i in range(0, len(symbols), batch_size):
            chunk = symbols[i: i + batch_size]

            df = yf.download(
                tickers=chunk,
                start=start_str,
                end=end_str,
                interval=interval,
                group_by="ticker",
                auto_adjust=False,
                progress=False,
                threads=use_threads,
            )

            if df is None or df.empty:
                failed.extend(chunk)
                logger.warning(
                    f"YFinance returned empty data for symbols={chunk}"
                )
                continue

            # single ticker without MultiIndex columns: wrap it
            if (not isinstance(df.columns, pd.MultiIndex)) and len(chunk) == 1:
                t = chunk[0]
                df = pd.concat({t: df}, axis=1)

            df = self._normalize_index_tz(df)
            parts.append(df)

        if failed:
            logger.warning(
                f"Tickers with no data in range {start_str}–{end_str}: {failed}"
            )

        if not parts:
            return pd.DataFrame()

        out = pd.concat(parts, axis=1)
        out = out.loc[:, ~out.columns.duplicated()]

        if not isinstance(out.columns, pd.MultiIndex):
            logger.error(
                "Unexpected column layout in YFinanceService (not a MultiIndex)"
            )

        return out

    def __search(self, query: str) -> List[Dict[str, Any]]:
        return list(yf.Search(query, max_results=self.search_limit).quotes or [])

    @staticmethod
    def _column(df: pd.DataFrame, symbol: str, field: str) -> pd.Series:
        try:
            return df[(symbol, field)].dropna()
        except KeyError:
            return pd.Series(dtype=float)

    # -------- public API --------

    async def get_ohlcv(
        self,
        symbols: Union[str, List[str]],
        interval: str = "1d",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> pd.DataFrame:
        """
        Fetch an OHLCV panel from Yahoo Finance.

        - symbols: a single symbol or a list of them
        - interval: '1d', '1h', '5m', etc.
        - start/end: datetimes; defaults to the quote lookback window
        """
        symbols_list = self._normalize_symbols(symbols)

        if not symbols_list:
            logger.warning("get_ohlcv() called without valid symbols")
            return pd.DataFrame()

        if start is None or end is None:
            end_day = date.today() + timedelta(days=1)
            start_day = end_day - timedelta(days=self.quote_lookback_days + 1)
            start_str = start_day.strftime("%Y-%m-%d")
            end_str = end_day.strftime("%Y-%m-%d")
        else:
            start_str = start.strftime("%Y-%m-%d")
            end_str = end.strftime("%Y-%m-%d")

        df = await anyio.to_thread.run_sync(
            self.__download_in_batches,
            symbols_list,
            start_str,
            end_str,
            interval,
        )

        if df.empty:
            logger.warning(
                f"YFinanceService.get_ohlcv() returned empty DataFrame "
                f"for symbols={symbols_list}, range={start_str}–{end_str}"
            )

        return df

    async def get_quote(self, symbol: str) -> QuoteDTO:
        """
        Latest daily bar for the symbol, with change against the previous
        close.

        Raises:
            QuoteUnavailableError: no data or a non-positive price
        """
        df = await self.get_ohlcv(symbols=symbol, interval="1d")

        if df.empty:
            raise QuoteUnavailableError(symbol, "no market data")

        closes = self._column(df, symbol, "Close")
        if closes.empty:
            raise QuoteUnavailableError(symbol, "no closing prices")

        price = float(closes.iloc[-1])
        if price <= 0:
            raise QuoteUnavailableError(symbol, f"invalid price {price}")

        previous_close = float(closes.iloc[-2]) if len(closes) > 1 else price
        change = price - previous_close
        change_percent = (change / previous_close * 100) if previous_close else 0.0

        last_ts = closes.index[-1]

        def _last(field: str) -> Optional[float]:
            col = self._column(df, symbol, field)
            if col.empty:
                return None
            return float(col.iloc[-1])

        return QuoteDTO(
            symbol=symbol,
            company_name=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=_last("Volume") or 0.0,
            high=_last("High"),
            low=_last("Low"),
            open=_last("Open"),
            previous_close=previous_close,
            timestamp=pd.Timestamp(last_ts).to_pydatetime(),
        )

    async def search(self, query: str) -> List[StockSearchResultDTO]:
        if not query or not query.strip():
            return []

        raw = await anyio.to_thread.run_sync(self.__search, query.strip())

        results: List[StockSearchResultDTO] = []
        for match in raw:
            symbol = match.get("symbol")
            if not symbol:
                continue
            results.append(
                StockSearchResultDTO(
                    symbol=symbol,
                    name=match.get("longname") or match.get("shortname") or symbol,
                    type=match.get("quoteType") or "",
                    region=match.get("exchDisp") or match.get("exchange") or "",
                )
            )
        return results[: self.search_limit]

    async def get_chart(
        self,
        symbol: str,
        interval: ChartInterval = ChartInterval.ONE_MONTH,
    ) -> List[ChartPointDTO]:
        days, bar_interval = CHART_RANGES[interval]
        end = datetime.now() + timedelta(days=1)
        start = end - timedelta(days=days + 1)

        df = await self.get_ohlcv(
            symbols=symbol,
            interval=bar_interval,
            start=start,
            end=end,
        )
        if df.empty:
            return []

        closes = self._column(df, symbol, "Close")
        return [
            ChartPointDTO(
                timestamp=ts.to_pydatetime(),
                date=ts.strftime("%Y-%m-%d"),
                price=float(price),
            )
            for ts, price in closes.items()
        ]
