"""API request and response models"""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .blockchain import Transaction
from .graph import TransactionGraph


# Request Models


class BulkClassifyRequest(BaseModel):
    """Request to classify a list of addresses"""

    text: Optional[str] = Field(
        None, description="Free text, one address per line or comma separated; '#' lines ignored"
    )
    addresses: List[str] = Field(default_factory=list, description="Explicit list of addresses")


class GraphRequest(BaseModel):
    """Request to fetch transactions for focus addresses and build their graph"""

    addresses: List[str] = Field(..., min_length=1, description="Focus addresses; the first is the root")


class GraphBuildRequest(BaseModel):
    """Request to build a graph from already-normalized transactions"""

    model_config = ConfigDict(populate_by_name=True)

    transactions: List[Transaction] = Field(default_factory=list, description="Canonical transactions")
    focus_addresses: List[str] = Field(
        ..., min_length=1, alias="focusAddresses", description="Focus addresses; the first is the root"
    )


# Response Models


class NetworkInfo(BaseModel):
    """Registry entry"""

    name: str = Field(..., description="Network display name")
    symbol: str = Field(..., description="Ticker symbol")
    description: str = Field(..., description="Address format description")
    networks: List[str] = Field(default_factory=list, description="Chains sharing the address format")
    explorer_url: Optional[str] = Field(None, description="Explorer base URL")


class ClassifyResponse(BaseModel):
    """Result of classifying one address"""

    address: str = Field(..., description="Trimmed input")
    classified: bool = Field(..., description="False when the format is unknown")
    network: Optional[NetworkInfo] = Field(None, description="Matched network")
    explorer_link: Optional[str] = Field(None, description="Explorer link for the address")


class BulkClassifyResponse(BaseModel):
    """Result of bulk classification"""

    total: int = Field(..., description="Number of distinct addresses analysed")
    results: List[ClassifyResponse] = Field(..., description="Per-address results in input order")
    groups: Dict[str, List[str]] = Field(..., description="Addresses grouped by network name")
    unknown: List[str] = Field(default_factory=list, description="Addresses with an unknown format")


class GraphResponse(BaseModel):
    """Laid-out transaction graph"""

    graph: TransactionGraph = Field(..., description="Nodes and edges with positions")
    focus_addresses: List[str] = Field(..., description="Focus addresses used")
    transaction_count: int = Field(..., description="Transactions consumed")
    total_nodes: int = Field(..., description="Total number of nodes")
    total_edges: int = Field(..., description="Total number of edges")


class HistoryEntry(BaseModel):
    """One search history entry"""

    address: str = Field(..., description="Searched address")
    symbol: Optional[str] = Field(None, description="Classified network symbol")
    name: Optional[str] = Field(None, description="Classified network name")
    timestamp: int = Field(..., description="Unix time of the search")
