"""Services for CoinTrace backend"""

from .balance_service import BalanceService
from .history import SearchHistory
from .transaction_fetcher import SearchCoordinator, TransactionFetcher

__all__ = ["BalanceService", "SearchHistory", "SearchCoordinator", "TransactionFetcher"]
