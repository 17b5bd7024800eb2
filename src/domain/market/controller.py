from fastapi import APIRouter, Depends, Query
from dependency_injector.wiring import inject, Provide
from src.application.container import Container
from src.domain.market.dtos.quote_dto import ChartInterval
from src.domain.market.market_data_service import MarketDataService


router = APIRouter(prefix="/stocks", tags=["market"])


@router.get("/quote/{symbol}", summary="Latest quote for a symbol")
@inject
async def get_quote(
    symbol: str,
    market_data: MarketDataService = Depends(Provide[Container.market_data]),
) -> dict:
    quote = await market_data.get_quote(symbol.strip().upper())
    return {"quote": quote}


@router.get("/search", summary="Search symbols by ticker or name")
@inject
async def search(
    query: str = Query(default=""),
    market_data: MarketDataService = Depends(Provide[Container.market_data]),
) -> dict:
    results = await market_data.search(query)
    return {"results": results}


@router.get("/chart/{symbol}", summary="Closing prices for a chart range")
@inject
async def get_chart(
    symbol: str,
    interval: ChartInterval = Query(default=ChartInterval.ONE_MONTH),
    market_data: MarketDataService = Depends(Provide[Container.market_data]),
) -> dict:
    chart = await market_data.get_chart(symbol.strip().upper(), interval)
    return {"chart_data": chart}
