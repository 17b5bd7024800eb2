import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.ledger.dtos.order_dto import OrderSide, TransactionDTO
from src.infrastructure.database.models.transaction_model import (
    TransactionModel,
    TransactionTypeEnum,
)

logger = logging.getLogger(__name__)


class TransactionRepository:
    """
    Repository for the transaction log.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository.

        Args:
            session: Database session
        """
        self.session = session

    async def append(self, transaction: TransactionDTO) -> TransactionDTO:
        """
        Append a settled transaction to the log.

        Args:
            transaction: Transaction to store

        Returns:
            The stored transaction (same DTO)
        """
        model = TransactionModel(
            id=transaction.id,
            user_id=transaction.user_id,
            type=TransactionTypeEnum(transaction.type.value),
            symbol=transaction.symbol,
            company_name=transaction.company_name,
            shares=transaction.shares,
            price_per_share=transaction.price_per_share,
            total_amount=transaction.total_amount,
            timestamp=transaction.timestamp,
        )

        self.session.add(model)
        await self.session.flush()

        return transaction

    async def get_by_id(self, transaction_id: str) -> Optional[TransactionDTO]:
        """Get transaction by ID."""
        model = await self._get_model(transaction_id)
        if not model:
            return None
        return self._model_to_dto(model)

    async def list_by_user(
        self,
        user_id: str,
        newest_first: bool = True,
    ) -> List[TransactionDTO]:
        """List a user's transactions ordered by timestamp."""
        order = (
            TransactionModel.timestamp.desc()
            if newest_first
            else TransactionModel.timestamp.asc()
        )
        stmt = (
            select(TransactionModel)
            .where(TransactionModel.user_id == user_id)
            .order_by(order)
        )
        result = await self.session.execute(stmt)
        return [self._model_to_dto(m) for m in result.scalars().all()]

    async def update(self, transaction: TransactionDTO) -> Optional[TransactionDTO]:
        """Overwrite a stored transaction. Returns None if it does not exist."""
        model = await self._get_model(transaction.id)
        if not model:
            return None

        model.type = TransactionTypeEnum(transaction.type.value)
        model.symbol = transaction.symbol
        model.company_name = transaction.company_name
        model.shares = transaction.shares
        model.price_per_share = transaction.price_per_share
        model.total_amount = transaction.total_amount
        model.timestamp = transaction.timestamp

        await self.session.flush()
        return self._model_to_dto(model)

    async def delete(self, transaction_id: str) -> bool:
        """Delete a transaction. Returns False if it does not exist."""
        model = await self._get_model(transaction_id)
        if not model:
            return False

        await self.session.delete(model)
        await self.session.flush()
        return True

    async def _get_model(self, transaction_id: str) -> Optional[TransactionModel]:
        stmt = select(TransactionModel).where(TransactionModel.id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _model_to_dto(self, model: TransactionModel) -> TransactionDTO:
        return TransactionDTO(
            id=model.id,
            user_id=model.user_id,
            type=OrderSide(model.type.value),
            symbol=model.symbol,
            company_name=model.company_name,
            shares=model.shares,
            price_per_share=model.price_per_share,
            total_amount=model.total_amount,
            timestamp=model.timestamp,
        )
