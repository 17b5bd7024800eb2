from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide
from src.domain.watchlist.dtos.watchlist_request_dto import AddToWatchlistRequest
from src.domain.watchlist.watchlist_module import WatchlistModule
from src.domain.watchlist.watchlist_service import WatchlistService


router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("/{user_id}", summary="Watchlist with latest prices")
@inject
async def get_watchlist(
    user_id: str,
    service: WatchlistService = Depends(Provide[WatchlistModule.watchlist_service]),
) -> dict:
    items = await service.list(user_id)
    return {"watchlist": items}


@router.post("", summary="Add a symbol to the watchlist")
@inject
async def add_to_watchlist(
    body: AddToWatchlistRequest,
    service: WatchlistService = Depends(Provide[WatchlistModule.watchlist_service]),
) -> dict:
    await service.add(body.user_id, body.symbol, body.company_name)
    return {"success": True}


@router.delete("/{user_id}/{symbol}", summary="Remove a symbol from the watchlist")
@inject
async def remove_from_watchlist(
    user_id: str,
    symbol: str,
    service: WatchlistService = Depends(Provide[WatchlistModule.watchlist_service]),
) -> dict:
    removed = await service.remove(user_id, symbol)
    return {"success": True, "removed": removed}
