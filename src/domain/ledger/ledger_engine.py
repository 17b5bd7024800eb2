"""
Trade settlement over a portfolio snapshot.

Pure functions: the input portfolio is never mutated and nothing is logged.
Validation failures raise a ``LedgerError`` subclass; on failure no
transaction is produced and the caller keeps the original snapshot.
"""

from __future__ import annotations
import math
from datetime import datetime
from typing import Dict, Iterable, Optional

from src.domain.ledger.dtos.order_dto import (
    OrderDTO,
    OrderSide,
    SettlementDTO,
    TransactionDTO,
)
from src.domain.ledger.dtos.portfolio_dto import HoldingDTO, PortfolioDTO
from src.domain.ledger.errors import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidOrderTypeError,
    LedgerConsistencyError,
    LedgerError,
    NoSuchHoldingError,
)


SHARE_TOLERANCE = 1e-9


def _parse_side(order_type: str) -> OrderSide:
    try:
        return OrderSide(order_type)
    except ValueError:
        raise InvalidOrderTypeError(order_type) from None


def _apply_buy(portfolio: PortfolioDTO, order: OrderDTO) -> PortfolioDTO:
    cost = order.shares * order.price_per_share

    if cost > portfolio.cash_balance:
        raise InsufficientFundsError(cost, portfolio.cash_balance)

    holdings: Dict[str, HoldingDTO] = dict(portfolio.holdings)
    existing = holdings.get(order.symbol)

    if existing is None:
        holdings[order.symbol] = HoldingDTO(
            symbol=order.symbol,
            company_name=order.company_name,
            shares=order.shares,
            avg_cost=order.price_per_share,
        )
    else:
        # weighted-average merge; the only rule that moves avg_cost
        new_shares = existing.shares + order.shares
        new_avg_cost = (existing.shares * existing.avg_cost + cost) / new_shares
        holdings[order.symbol] = existing.model_copy(
            update={
                "shares": new_shares,
                "avg_cost": new_avg_cost,
                "company_name": existing.company_name or order.company_name,
            }
        )

    return portfolio.model_copy(
        update={
            "cash_balance": portfolio.cash_balance - cost,
            "holdings": holdings,
        }
    )


def _apply_sell(portfolio: PortfolioDTO, order: OrderDTO) -> PortfolioDTO:
    existing = portfolio.holdings.get(order.symbol)

    if existing is None:
        raise NoSuchHoldingError(order.symbol)

    remaining = existing.shares - order.shares
    # float residue of fractional lots counts as a closed position
    closes_position = math.isclose(remaining, 0.0, abs_tol=SHARE_TOLERANCE)

    if remaining < 0 and not closes_position:
        raise InsufficientSharesError(order.symbol, order.shares, existing.shares)

    holdings: Dict[str, HoldingDTO] = dict(portfolio.holdings)

    if closes_position:
        del holdings[order.symbol]
    else:
        holdings[order.symbol] = existing.model_copy(
            update={"shares": remaining}
        )

    proceeds = order.shares * order.price_per_share
    return portfolio.model_copy(
        update={
            "cash_balance": portfolio.cash_balance + proceeds,
            "holdings": holdings,
        }
    )


def execute_order(
    portfolio: PortfolioDTO,
    order: OrderDTO,
    timestamp: Optional[datetime] = None,
) -> SettlementDTO:
    """
    Settle a market order against a portfolio snapshot.

    Buy:
        - cost = shares * price_per_share, must not exceed cash_balance
        - new symbol → holding at avg_cost = price_per_share
        - existing symbol → weighted-average merge
    Sell:
        - symbol must be held, quantity must not exceed shares held
        - selling every share removes the holding
        - avg_cost is untouched by sells

    Returns:
        SettlementDTO with the new portfolio and its transaction record.

    Raises:
        InvalidOrderTypeError, InsufficientFundsError,
        NoSuchHoldingError, InsufficientSharesError
    """
    side = _parse_side(order.type)

    if side == OrderSide.BUY:
        updated = _apply_buy(portfolio, order)
    else:
        updated = _apply_sell(portfolio, order)

    transaction = TransactionDTO(
        user_id=portfolio.user_id,
        type=side,
        symbol=order.symbol,
        company_name=order.company_name,
        shares=order.shares,
        price_per_share=order.price_per_share,
        total_amount=order.shares * order.price_per_share,
        timestamp=timestamp or datetime.now(),
    )

    return SettlementDTO(portfolio=updated, transaction=transaction)


def empty_portfolio(user_id: str, initial_balance: float) -> PortfolioDTO:
    return PortfolioDTO(
        user_id=user_id,
        cash_balance=initial_balance,
        initial_balance=initial_balance,
        holdings={},
    )


def replay_transactions(
    user_id: str,
    initial_balance: float,
    transactions: Iterable[TransactionDTO],
) -> PortfolioDTO:
    """
    Rebuild a portfolio from its transaction log, oldest first.

    Raises:
        LedgerConsistencyError: the log is not a valid settlement history
            (e.g. a sell of shares that were never bought).
    """
    portfolio = empty_portfolio(user_id, initial_balance)

    ordered = sorted(transactions, key=lambda t: t.timestamp)
    for tx in ordered:
        if tx.user_id != user_id:
            raise LedgerConsistencyError(
                f"Transaction {tx.id} belongs to user {tx.user_id}, not {user_id}"
            )
        try:
            portfolio = execute_order(portfolio, tx.to_order(), tx.timestamp).portfolio
        except LedgerError as e:
            raise LedgerConsistencyError(
                f"Transaction {tx.id} ({tx.type.value} {tx.shares} {tx.symbol}) "
                f"cannot be settled: {e.message}",
                cause=e,
            ) from e

    return portfolio
