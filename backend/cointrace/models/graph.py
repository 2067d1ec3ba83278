"""Transaction graph models"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .blockchain import Transaction


class EdgeKind(str, Enum):
    """Edge categories, used by renderers to pick a style"""

    TRANSFER = "transfer"
    CHANGE = "change"


class Position(BaseModel):
    """2D layout coordinates"""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Horizontal coordinate")
    y: float = Field(..., description="Vertical coordinate")


class NodeStats(BaseModel):
    """Aggregated activity of one address across the transaction set"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_in: str = Field(..., alias="totalIn", description="Total received (8 decimal places)")
    total_out: str = Field(..., alias="totalOut", description="Total sent (8 decimal places)")
    transaction_count: int = Field(..., alias="transactionCount", description="Transactions touching the node")
    transactions: List[Transaction] = Field(default_factory=list, description="Transactions in fold order")


class GraphNode(BaseModel):
    """Graph node keyed by address"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    address: str = Field(..., description="Address (node key)")
    label: str = Field(..., description="Truncated display label")
    stats: NodeStats = Field(..., description="Aggregate statistics")
    level: int = Field(0, description="Hop level from the root focus address")
    is_focus: bool = Field(False, alias="isFocus", description="Address is a focus/search address")
    is_exchange: bool = Field(False, alias="isExchange", description="Address matches an exchange label")
    position: Optional[Position] = Field(None, description="Layout coordinates")


class GraphEdge(BaseModel):
    """Directed edge derived from a transaction"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Unique edge ID derived from the transaction hash")
    source: str = Field(..., description="Source address")
    target: str = Field(..., description="Target address")
    kind: EdgeKind = Field(EdgeKind.TRANSFER, description="Primary flow or synthesized change")
    transaction: Transaction = Field(..., description="Originating transaction")
    parallel_index: int = Field(0, alias="parallelIndex", description="Index among parallel edges")
    parallel_count: int = Field(1, alias="parallelCount", description="Number of parallel edges")
    offset: float = Field(0.0, description="Rendering offset assigned by layout")


class TransactionGraph(BaseModel):
    """Immutable graph snapshot"""

    model_config = ConfigDict(frozen=True)

    nodes: List[GraphNode] = Field(default_factory=list, description="Graph nodes")
    edges: List[GraphEdge] = Field(default_factory=list, description="Graph edges")
    root: Optional[str] = Field(None, description="Root focus address")

    def node(self, address: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.address == address:
                return node
        return None
