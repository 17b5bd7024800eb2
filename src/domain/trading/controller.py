from fastapi import APIRouter, Depends, status
from dependency_injector.wiring import inject, Provide
from src.domain.trading.dtos.order_request_dto import OpenAccountRequest, OrderRequest
from src.domain.trading.dtos.transaction_update_dto import TransactionUpdateDTO
from src.domain.trading.trading_module import TradingModule
from src.domain.trading.trading_service import TradingService


router = APIRouter(tags=["trading"])


@router.post("/portfolio/accounts", status_code=status.HTTP_201_CREATED,
             summary="Open a portfolio with the initial virtual cash")
@inject
async def open_account(
    body: OpenAccountRequest,
    service: TradingService = Depends(Provide[TradingModule.trading_service]),
) -> dict:
    portfolio = await service.open_account(body.user_id)
    return {"portfolio": portfolio}


@router.post("/portfolio/orders", summary="Execute a market order")
@inject
async def place_order(
    body: OrderRequest,
    service: TradingService = Depends(Provide[TradingModule.trading_service]),
) -> dict:
    settlement = await service.place_order(body.user_id, body.to_order())
    return {
        "success": True,
        "new_balance": settlement.portfolio.cash_balance,
        "transaction": settlement.transaction,
    }


@router.get("/transactions/{user_id}", summary="Transaction history, newest first")
@inject
async def list_transactions(
    user_id: str,
    service: TradingService = Depends(Provide[TradingModule.trading_service]),
) -> dict:
    transactions = await service.list_transactions(user_id)
    return {"transactions": transactions}


@router.put("/transactions/{transaction_id}", tags=["admin"],
            summary="Edit a transaction and re-derive the portfolio")
@inject
async def update_transaction(
    transaction_id: str,
    body: TransactionUpdateDTO,
    service: TradingService = Depends(Provide[TradingModule.trading_service]),
) -> dict:
    transaction = await service.update_transaction(transaction_id, body)
    return {"success": True, "transaction": transaction}


@router.delete("/transactions/{transaction_id}", tags=["admin"],
               summary="Delete a transaction and re-derive the portfolio")
@inject
async def delete_transaction(
    transaction_id: str,
    service: TradingService = Depends(Provide[TradingModule.trading_service]),
) -> dict:
    await service.delete_transaction(transaction_id)
    return {"success": True}
