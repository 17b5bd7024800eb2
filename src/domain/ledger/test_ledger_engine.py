import pytest
from datetime import datetime, timedelta

from src.domain.ledger.dtos.order_dto import OrderDTO, OrderSide, TransactionDTO
from src.domain.ledger.dtos.portfolio_dto import HoldingDTO, PortfolioDTO
from src.domain.ledger.errors import (
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidOrderTypeError,
    LedgerConsistencyError,
    NoSuchHoldingError,
)
from src.domain.ledger.ledger_engine import (
    empty_portfolio,
    execute_order,
    replay_transactions,
)


def make_order(
    type: str = "buy",
    symbol: str = "AAPL",
    shares: float = 10.0,
    price: float = 100.0,
    company_name: str = "Apple Inc.",
) -> OrderDTO:
    """Helper to build test orders."""
    return OrderDTO(
        type=type,
        symbol=symbol,
        company_name=company_name,
        shares=shares,
        price_per_share=price,
    )


def make_portfolio(cash: float = 10_000.0, holdings=None) -> PortfolioDTO:
    holdings = holdings or []
    return PortfolioDTO(
        user_id="user-1",
        cash_balance=cash,
        initial_balance=10_000.0,
        holdings={h.symbol: h for h in holdings},
    )


def equity(portfolio: PortfolioDTO) -> float:
    return portfolio.cash_balance + portfolio.cost_basis


# ==================== BUY ====================


def test_first_buy_creates_holding_at_order_price():
    portfolio = make_portfolio(cash=10_000.0)

    result = execute_order(portfolio, make_order(shares=10, price=100))

    holding = result.portfolio.holdings["AAPL"]
    assert holding.shares == 10
    assert holding.avg_cost == 100
    assert holding.company_name == "Apple Inc."
    assert result.portfolio.cash_balance == 9_000.0


def test_buys_merge_with_weighted_average_cost():
    """5 @ 100 then 5 @ 200 -> 10 shares at 150."""
    portfolio = make_portfolio(cash=10_000.0)

    portfolio = execute_order(portfolio, make_order(shares=5, price=100)).portfolio
    portfolio = execute_order(portfolio, make_order(shares=5, price=200)).portfolio

    holding = portfolio.holdings["AAPL"]
    assert holding.shares == 10
    assert holding.avg_cost == 150
    assert portfolio.cash_balance == 8_500.0


def test_weighted_average_with_uneven_lots():
    portfolio = make_portfolio(
        cash=10_000.0,
        holdings=[HoldingDTO(symbol="AAPL", shares=3, avg_cost=10)],
    )

    portfolio = execute_order(portfolio, make_order(shares=1, price=30)).portfolio

    assert portfolio.holdings["AAPL"].shares == 4
    assert portfolio.holdings["AAPL"].avg_cost == pytest.approx(15.0)


def test_buy_exceeding_cash_fails_and_leaves_portfolio_unchanged():
    portfolio = make_portfolio(cash=1_000.0)

    with pytest.raises(InsufficientFundsError) as exc:
        execute_order(portfolio, make_order(shares=20, price=100))

    assert exc.value.cost == 2_000.0
    assert portfolio.cash_balance == 1_000.0
    assert portfolio.holdings == {}


def test_buy_spending_entire_cash_is_allowed():
    portfolio = make_portfolio(cash=1_000.0)

    result = execute_order(portfolio, make_order(shares=10, price=100))

    assert result.portfolio.cash_balance == 0.0
    assert result.portfolio.holdings["AAPL"].shares == 10


# ==================== SELL ====================


def test_partial_sell_keeps_average_cost():
    portfolio = make_portfolio(
        cash=0.0,
        holdings=[HoldingDTO(symbol="AAPL", shares=10, avg_cost=150)],
    )

    result = execute_order(portfolio, make_order(type="sell", shares=4, price=999))

    holding = result.portfolio.holdings["AAPL"]
    assert holding.shares == 6
    assert holding.avg_cost == 150
    assert result.portfolio.cash_balance == 4 * 999


def test_selling_all_shares_removes_holding():
    portfolio = make_portfolio(
        cash=0.0,
        holdings=[HoldingDTO(symbol="AAPL", shares=10, avg_cost=150)],
    )

    result = execute_order(portfolio, make_order(type="sell", shares=10, price=120))

    assert "AAPL" not in result.portfolio.holdings
    assert result.portfolio.cash_balance == 1_200.0


def test_fractional_round_trip_closes_position():
    portfolio = make_portfolio(cash=1_000.0)

    portfolio = execute_order(portfolio, make_order(shares=0.1, price=10)).portfolio
    portfolio = execute_order(portfolio, make_order(shares=0.2, price=10)).portfolio
    portfolio = execute_order(portfolio, make_order(type="sell", shares=0.3, price=10)).portfolio

    assert "AAPL" not in portfolio.holdings
    assert portfolio.cash_balance == pytest.approx(1_000.0)


def test_sell_more_than_held_fails():
    portfolio = make_portfolio(
        holdings=[HoldingDTO(symbol="AAPL", shares=5, avg_cost=100)],
    )

    with pytest.raises(InsufficientSharesError) as exc:
        execute_order(portfolio, make_order(type="sell", shares=10))

    assert exc.value.held == 5
    assert portfolio.holdings["AAPL"].shares == 5
    assert portfolio.cash_balance == 10_000.0


def test_sell_of_symbol_not_held_fails():
    portfolio = make_portfolio(
        holdings=[HoldingDTO(symbol="AAPL", shares=5, avg_cost=100)],
    )

    with pytest.raises(NoSuchHoldingError):
        execute_order(portfolio, make_order(type="sell", symbol="MSFT", shares=1))


# ==================== ORDER TYPE / RECORD ====================


@pytest.mark.parametrize("order_type", ["short", "hold", ""])
def test_unknown_order_type_fails(order_type):
    portfolio = make_portfolio()

    with pytest.raises(InvalidOrderTypeError):
        execute_order(portfolio, make_order(type=order_type))


def test_order_type_is_case_insensitive():
    result = execute_order(make_portfolio(), make_order(type="BUY", shares=1))

    assert result.transaction.type == OrderSide.BUY


def test_transaction_record_matches_order():
    ts = datetime(2024, 1, 2, 15, 30)
    result = execute_order(
        make_portfolio(),
        make_order(symbol="msft", shares=3, price=50, company_name="Microsoft"),
        timestamp=ts,
    )

    tx = result.transaction
    assert tx.user_id == "user-1"
    assert tx.type == OrderSide.BUY
    assert tx.symbol == "MSFT"
    assert tx.company_name == "Microsoft"
    assert tx.shares == 3
    assert tx.price_per_share == 50
    assert tx.total_amount == 150
    assert tx.timestamp == ts
    assert tx.id


def test_input_portfolio_is_not_mutated():
    portfolio = make_portfolio(
        holdings=[HoldingDTO(symbol="AAPL", shares=5, avg_cost=100)],
    )

    execute_order(portfolio, make_order(shares=5, price=200))
    execute_order(portfolio, make_order(type="sell", shares=5, price=200))

    assert portfolio.cash_balance == 10_000.0
    assert portfolio.holdings["AAPL"].shares == 5
    assert portfolio.holdings["AAPL"].avg_cost == 100


# ==================== INVARIANTS ====================


def test_cash_never_negative_over_order_sequence():
    portfolio = make_portfolio(cash=1_000.0)
    orders = [
        make_order(shares=3, price=200),
        make_order(shares=3, price=200),
        make_order(type="sell", shares=2, price=150),
        make_order(shares=4, price=100),
        make_order(symbol="MSFT", shares=1, price=50),
    ]

    for order in orders:
        try:
            portfolio = execute_order(portfolio, order).portfolio
        except InsufficientFundsError:
            pass
        assert portfolio.cash_balance >= 0
        assert all(h.shares > 0 for h in portfolio.holdings.values())


def test_buys_conserve_cash_plus_cost_basis():
    """Buys only move value between cash and cost basis."""
    portfolio = make_portfolio(cash=10_000.0)
    before = equity(portfolio)

    for shares, price in [(5, 100), (5, 200), (2, 37.5)]:
        portfolio = execute_order(portfolio, make_order(shares=shares, price=price)).portfolio

    assert equity(portfolio) == pytest.approx(before)


def test_sell_changes_equity_by_realized_gain():
    portfolio = make_portfolio(
        cash=0.0,
        holdings=[HoldingDTO(symbol="AAPL", shares=10, avg_cost=150)],
    )
    before = equity(portfolio)

    portfolio = execute_order(portfolio, make_order(type="sell", shares=4, price=175)).portfolio

    realized = 4 * (175 - 150)
    assert equity(portfolio) == pytest.approx(before + realized)


# ==================== REPLAY ====================


def make_tx(type: OrderSide, shares: float, price: float, minutes: int, symbol: str = "AAPL") -> TransactionDTO:
    return TransactionDTO(
        user_id="user-1",
        type=type,
        symbol=symbol,
        shares=shares,
        price_per_share=price,
        total_amount=shares * price,
        timestamp=datetime(2024, 1, 1) + timedelta(minutes=minutes),
    )


def test_replay_rebuilds_portfolio_in_timestamp_order():
    log = [
        make_tx(OrderSide.SELL, 4, 175, minutes=20),
        make_tx(OrderSide.BUY, 5, 100, minutes=0),
        make_tx(OrderSide.BUY, 5, 200, minutes=10),
    ]

    portfolio = replay_transactions("user-1", 10_000.0, log)

    holding = portfolio.holdings["AAPL"]
    assert holding.shares == 6
    assert holding.avg_cost == 150
    assert portfolio.cash_balance == 10_000 - 500 - 1_000 + 700
    assert portfolio.initial_balance == 10_000.0


def test_replay_of_empty_log_is_empty_portfolio():
    assert replay_transactions("user-1", 500.0, []) == empty_portfolio("user-1", 500.0)


def test_replay_rejects_log_selling_unbought_shares():
    log = [
        make_tx(OrderSide.BUY, 5, 100, minutes=0),
        make_tx(OrderSide.SELL, 6, 100, minutes=1),
    ]

    with pytest.raises(LedgerConsistencyError) as exc:
        replay_transactions("user-1", 10_000.0, log)

    assert isinstance(exc.value.cause, InsufficientSharesError)


def test_replay_rejects_foreign_transactions():
    tx = make_tx(OrderSide.BUY, 1, 10, minutes=0).model_copy(update={"user_id": "other"})

    with pytest.raises(LedgerConsistencyError):
        replay_transactions("user-1", 10_000.0, [tx])
