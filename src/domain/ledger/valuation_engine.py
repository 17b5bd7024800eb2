from __future__ import annotations
from typing import List, Mapping, Optional

from src.domain.ledger.dtos.portfolio_dto import HoldingDTO, PortfolioDTO
from src.domain.ledger.dtos.valuation_dto import HoldingView, PortfolioView
from src.domain.market.dtos.quote_dto import QuoteDTO


def gain_percent(gain: float, cost_basis: float) -> float:
    if cost_basis == 0:
        return 0.0
    return gain / cost_basis * 100


def _value_holding(holding: HoldingDTO, price: float) -> HoldingView:
    cost_basis = holding.cost_basis
    market_value = price * holding.shares
    gain = market_value - cost_basis

    return HoldingView(
        symbol=holding.symbol,
        company_name=holding.company_name,
        shares=holding.shares,
        avg_cost=holding.avg_cost,
        cost_basis=cost_basis,
        current_price=price,
        market_value=market_value,
        unrealized_gain=gain,
        unrealized_gain_percent=gain_percent(gain, cost_basis),
    )


def _pass_through(
    holding: HoldingDTO,
    previous: Optional[PortfolioView],
) -> HoldingView:
    bare = HoldingView(
        symbol=holding.symbol,
        company_name=holding.company_name,
        shares=holding.shares,
        avg_cost=holding.avg_cost,
        cost_basis=holding.cost_basis,
    )

    last = previous.holding(holding.symbol) if previous else None
    # last-known fields only describe the same position
    if (
        last is None
        or not last.is_valued
        or last.shares != holding.shares
        or last.avg_cost != holding.avg_cost
    ):
        return bare

    return last.model_copy(
        update={"company_name": holding.company_name, "stale": True}
    )


def valuate(
    portfolio: PortfolioDTO,
    quotes_by_symbol: Mapping[str, QuoteDTO],
    previous: Optional[PortfolioView] = None,
) -> PortfolioView:
    """
    Combine a portfolio with fresh quotes into a display-ready view.

    A holding whose quote is missing keeps the derived fields of
    ``previous`` when the position did not change since, and has none
    otherwise. Totals cover cash plus every holding with a market value.
    """
    views: List[HoldingView] = []

    for symbol in sorted(portfolio.holdings):
        holding = portfolio.holdings[symbol]
        quote = quotes_by_symbol.get(symbol)

        if quote is not None and quote.price > 0:
            views.append(_value_holding(holding, quote.price))
        else:
            views.append(_pass_through(holding, previous))

    valued = [v for v in views if v.is_valued]
    holdings_value = sum((v.market_value for v in valued), 0.0)
    total_gain_loss = sum((v.unrealized_gain for v in valued), 0.0)
    valued_cost_basis = sum((v.cost_basis for v in valued), 0.0)

    return PortfolioView(
        user_id=portfolio.user_id,
        cash_balance=portfolio.cash_balance,
        holdings=views,
        total_value=holdings_value + portfolio.cash_balance,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=gain_percent(total_gain_loss, valued_cost_basis),
    )
