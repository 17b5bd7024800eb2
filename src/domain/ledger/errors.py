"""
Ledger error taxonomy.

Every error is recoverable at the request boundary. Each kind carries a
stable ``code`` and the HTTP status the API layer answers with.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors."""

    code: str = "ledger_error"
    status_code: int = 400

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class InsufficientFundsError(LedgerError):
    """Buy cost exceeds the cash balance."""

    code = "insufficient_funds"

    def __init__(self, cost: float, cash_balance: float):
        super().__init__(
            f"Insufficient funds: order cost {cost:.2f} exceeds cash balance {cash_balance:.2f}"
        )
        self.cost = cost
        self.cash_balance = cash_balance


class InsufficientSharesError(LedgerError):
    """Sell quantity exceeds the shares held."""

    code = "insufficient_shares"

    def __init__(self, symbol: str, requested: float, held: float):
        super().__init__(
            f"Insufficient shares of {symbol}: requested {requested}, held {held}"
        )
        self.symbol = symbol
        self.requested = requested
        self.held = held


class NoSuchHoldingError(LedgerError):
    """Sell attempted on a symbol that is not held."""

    code = "no_such_holding"

    def __init__(self, symbol: str):
        super().__init__(f"No holding for symbol {symbol}")
        self.symbol = symbol


class InvalidOrderTypeError(LedgerError):
    """Order type outside {buy, sell}."""

    code = "invalid_order_type"

    def __init__(self, order_type: object):
        super().__init__(f"Invalid order type: {order_type!r}")
        self.order_type = order_type


class QuoteUnavailableError(LedgerError):
    """A quote lookup failed for one symbol."""

    code = "quote_unavailable"
    status_code = 503

    def __init__(self, symbol: str, reason: Optional[str] = None):
        detail = f": {reason}" if reason else ""
        super().__init__(f"Quote unavailable for {symbol}{detail}")
        self.symbol = symbol


class PersistenceError(LedgerError):
    """A store read or write failed; the order is not executed."""

    code = "persistence_failure"
    status_code = 500


class ConcurrentModificationError(PersistenceError):
    """The portfolio was modified by another writer in the meantime."""

    code = "concurrent_modification"
    status_code = 409


class PortfolioNotFoundError(LedgerError):
    code = "portfolio_not_found"
    status_code = 404

    def __init__(self, user_id: str):
        super().__init__(f"Portfolio not found for user {user_id}")
        self.user_id = user_id


class PortfolioExistsError(LedgerError):
    code = "portfolio_exists"
    status_code = 409

    def __init__(self, user_id: str):
        super().__init__(f"Portfolio already exists for user {user_id}")
        self.user_id = user_id


class TransactionNotFoundError(LedgerError):
    code = "transaction_not_found"
    status_code = 404

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class LedgerConsistencyError(LedgerError):
    """A transaction log does not replay into a valid portfolio."""

    code = "ledger_inconsistent"
    status_code = 409

    def __init__(self, message: str, cause: Optional[LedgerError] = None):
        super().__init__(message)
        self.cause = cause
