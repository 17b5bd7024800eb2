from typing import Protocol, Optional, List, Union
from datetime import datetime
import pandas as pd

from src.domain.market.dtos.quote_dto import (
    ChartInterval,
    ChartPointDTO,
    QuoteDTO,
    StockSearchResultDTO,
)


# ==========================
# Domain: quote source contract
# ==========================

class QuoteSource(Protocol):
    async def get_ohlcv(
        self,
        symbols: Union[str, List[str]],
        interval: str = "1d",
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> pd.DataFrame:
        """
        Return an OHLCV panel:
            index: DatetimeIndex (tz-naive, sorted)
            columns: MultiIndex [symbol, field]  (e.g. ('AAPL', 'Close'))
        """
        ...

    async def get_quote(self, symbol: str) -> QuoteDTO:
        """
        Latest quote for the symbol.

        Raises:
            QuoteUnavailableError: no usable price for the symbol
        """
        ...

    async def search(self, query: str) -> List[StockSearchResultDTO]:
        ...

    async def get_chart(
        self,
        symbol: str,
        interval: ChartInterval = ChartInterval.ONE_MONTH,
    ) -> List[ChartPointDTO]:
        ...
