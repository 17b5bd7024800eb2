from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide
from src.domain.portfolio.portfolio_module import PortfolioModule
from src.domain.portfolio.portfolio_service import PortfolioService


router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("/{user_id}", summary="Portfolio valuated against fresh quotes")
@inject
async def get_portfolio(
    user_id: str,
    service: PortfolioService = Depends(Provide[PortfolioModule.portfolio_service]),
) -> dict:
    view = await service.get_portfolio_view(user_id)
    return {"portfolio": view}
