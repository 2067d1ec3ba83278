"""Data models for CoinTrace"""

from .blockchain import (
    Transaction,
    TransactionPage,
    BalanceResult,
    UNKNOWN_ADDRESS,
    BALANCE_ERROR,
    CHECK_EXPLORER,
)
from .graph import (
    EdgeKind,
    Position,
    NodeStats,
    GraphNode,
    GraphEdge,
    TransactionGraph,
)
from .api import (
    BulkClassifyRequest,
    BulkClassifyResponse,
    ClassifyResponse,
    GraphBuildRequest,
    GraphRequest,
    GraphResponse,
    HistoryEntry,
    NetworkInfo,
)

__all__ = [
    "Transaction",
    "TransactionPage",
    "BalanceResult",
    "UNKNOWN_ADDRESS",
    "BALANCE_ERROR",
    "CHECK_EXPLORER",
    "EdgeKind",
    "Position",
    "NodeStats",
    "GraphNode",
    "GraphEdge",
    "TransactionGraph",
    "BulkClassifyRequest",
    "BulkClassifyResponse",
    "ClassifyResponse",
    "GraphBuildRequest",
    "GraphRequest",
    "GraphResponse",
    "HistoryEntry",
    "NetworkInfo",
]
