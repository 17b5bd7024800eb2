import logging
from typing import List

from src.domain.ledger.dtos.order_dto import OrderDTO, SettlementDTO, TransactionDTO
from src.domain.ledger.dtos.portfolio_dto import PortfolioDTO
from src.domain.ledger.errors import (
    LedgerError,
    PortfolioExistsError,
    PortfolioNotFoundError,
    TransactionNotFoundError,
)
from src.domain.ledger.ledger_engine import execute_order, replay_transactions
from src.domain.trading.dtos.transaction_update_dto import TransactionUpdateDTO
from src.domain.trading.locks import UserLockRegistry
from src.infrastructure.database.client import DatabaseClient
from src.infrastructure.database.repositories.portfolio_repository import PortfolioRepository
from src.infrastructure.database.repositories.transaction_repository import TransactionRepository


logger = logging.getLogger(__name__)


class TradingService:
    """
    Settlement orchestration around the ledger engine.

    Every mutation runs under the user's lock and inside a single database
    transaction, so the portfolio row and the transaction log are written
    together or not at all.
    """

    def __init__(
        self,
        db_client: DatabaseClient,
        locks: UserLockRegistry,
        initial_balance: float = 100_000.0,
    ):
        self.db_client = db_client
        self.locks = locks
        self.initial_balance = initial_balance

    async def open_account(self, user_id: str) -> PortfolioDTO:
        async with self.locks.acquire(user_id):
            async with self.db_client.transaction() as session:
                repo = PortfolioRepository(session)
                if await repo.get_model(user_id) is not None:
                    raise PortfolioExistsError(user_id)
                return await repo.create(user_id, self.initial_balance)

    async def get_portfolio(self, user_id: str) -> PortfolioDTO:
        async with self.db_client.get_session() as session:
            portfolio = await PortfolioRepository(session).load(user_id)

        if portfolio is None:
            raise PortfolioNotFoundError(user_id)
        return portfolio

    async def place_order(self, user_id: str, order: OrderDTO) -> SettlementDTO:
        """
        Validate and settle an order, then persist portfolio and
        transaction atomically.

        Raises:
            LedgerError: validation failure (nothing is written) or
                PersistenceError when the write did not commit
        """
        try:
            async with self.locks.acquire(user_id):
                async with self.db_client.transaction() as session:
                    portfolios = PortfolioRepository(session)
                    transactions = TransactionRepository(session)

                    model = await portfolios.get_model(user_id, for_update=True)
                    if model is None:
                        raise PortfolioNotFoundError(user_id)

                    settlement = execute_order(portfolios.to_dto(model), order)

                    saved = await portfolios.save(model, settlement.portfolio)
                    await transactions.append(settlement.transaction)

        except LedgerError as e:
            logger.info(
                f"Order rejected for user={user_id}: {order.type} {order.shares} "
                f"{order.symbol} @ {order.price_per_share} -> {e.code}"
            )
            raise

        logger.info(
            f"✅ Order settled for user={user_id}: {order.type} {order.shares} "
            f"{order.symbol} @ {order.price_per_share:.2f}, "
            f"cash={saved.cash_balance:.2f}"
        )
        return settlement.model_copy(update={"portfolio": saved})

    async def list_transactions(self, user_id: str) -> List[TransactionDTO]:
        async with self.db_client.get_session() as session:
            return await TransactionRepository(session).list_by_user(user_id)

    async def update_transaction(
        self,
        transaction_id: str,
        changes: TransactionUpdateDTO,
    ) -> TransactionDTO:
        """
        Administrative edit. The user's portfolio is re-derived from the
        edited log; the edit is refused if that log cannot be settled.
        """
        user_id = await self._owner_of(transaction_id)

        async with self.locks.acquire(user_id):
            async with self.db_client.transaction() as session:
                portfolios = PortfolioRepository(session)
                transactions = TransactionRepository(session)

                model = await portfolios.get_model(user_id, for_update=True)
                if model is None:
                    raise PortfolioNotFoundError(user_id)

                current = await transactions.get_by_id(transaction_id)
                if current is None:
                    raise TransactionNotFoundError(transaction_id)

                data = current.model_dump()
                data.update(changes.model_dump(exclude_none=True))
                data["total_amount"] = data["shares"] * data["price_per_share"]
                edited = TransactionDTO.model_validate(data)

                log = [
                    edited if tx.id == transaction_id else tx
                    for tx in await transactions.list_by_user(user_id, newest_first=False)
                ]
                rebuilt = replay_transactions(user_id, model.initial_balance, log)

                await transactions.update(edited)
                await portfolios.save(model, rebuilt)

        logger.warning(
            f"Transaction {transaction_id} edited by administrator, "
            f"portfolio of user={user_id} re-derived"
        )
        return edited

    async def delete_transaction(self, transaction_id: str) -> None:
        """
        Administrative delete. Same replay rule as update_transaction.
        """
        user_id = await self._owner_of(transaction_id)

        async with self.locks.acquire(user_id):
            async with self.db_client.transaction() as session:
                portfolios = PortfolioRepository(session)
                transactions = TransactionRepository(session)

                model = await portfolios.get_model(user_id, for_update=True)
                if model is None:
                    raise PortfolioNotFoundError(user_id)

                log = await transactions.list_by_user(user_id, newest_first=False)
                remaining = [tx for tx in log if tx.id != transaction_id]
                if len(remaining) == len(log):
                    raise TransactionNotFoundError(transaction_id)

                rebuilt = replay_transactions(user_id, model.initial_balance, remaining)

                await transactions.delete(transaction_id)
                await portfolios.save(model, rebuilt)

        logger.warning(
            f"Transaction {transaction_id} deleted by administrator, "
            f"portfolio of user={user_id} re-derived"
        )

    async def list_held_symbols(self) -> List[str]:
        async with self.db_client.get_session() as session:
            return await PortfolioRepository(session).list_held_symbols()

    async def _owner_of(self, transaction_id: str) -> str:
        async with self.db_client.get_session() as session:
            tx = await TransactionRepository(session).get_by_id(transaction_id)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        return tx.user_id
