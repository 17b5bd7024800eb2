from typing import Dict, Optional

from src.domain.ledger.dtos.valuation_dto import PortfolioView


class ValuationCache:
    """Last view served per user, used as the fallback for missing quotes."""

    def __init__(self) -> None:
        self._views: Dict[str, PortfolioView] = {}

    def get(self, user_id: str) -> Optional[PortfolioView]:
        return self._views.get(user_id)

    def put(self, view: PortfolioView) -> None:
        self._views[view.user_id] = view
