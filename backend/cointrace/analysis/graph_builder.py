"""Transaction graph construction"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import networkx as nx

from cointrace.amounts import format_minor_units, to_minor_units
from cointrace.models.blockchain import Transaction, UNKNOWN_ADDRESS
from cointrace.models.graph import EdgeKind, GraphEdge, GraphNode, NodeStats, TransactionGraph

logger = logging.getLogger(__name__)

EXCHANGE_LABELS: Tuple[str, ...] = ("Kraken.com", "Binance.com", "Coinbase.com", "Bitfinex.com")


def truncate_address(address: str) -> str:
    """Display label: first 6 and last 4 characters"""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


class GraphBuilder:
    """
    Build a directed multigraph from canonical transactions.

    Each transaction contributes a transfer edge ``from -> to`` and, when a
    change output was inferred, a change edge ``from -> change_address``.
    Nodes carry aggregate in/out totals summed in integer minor units.
    """

    def __init__(self, exchange_labels: Sequence[str] = EXCHANGE_LABELS):
        self.exchange_labels = tuple(exchange_labels)

    def build(
        self, transactions: Iterable[Transaction], focus_addresses: Sequence[str]
    ) -> TransactionGraph:
        """
        Build the graph for a set of transactions

        Args:
            transactions: Canonical transactions, in list order
            focus_addresses: Searched address first, then any additional ones

        Returns:
            TransactionGraph without positions (see GraphLayoutEngine)
        """
        focus = [address for address in focus_addresses if address]
        if not focus:
            raise ValueError("At least one focus address is required")
        root = focus[0]

        txs = list(transactions)
        if not txs:
            return TransactionGraph(nodes=[], edges=[], root=root)

        graph = nx.MultiDiGraph()
        self._fold(graph, txs)
        edges = self._emit_edges(graph, txs)

        focus_set = set(focus)
        nodes = [
            self._make_node(graph, address, root, focus_set)
            for address in graph.nodes
        ]

        logger.info(
            f"Built graph for {root}: {len(nodes)} nodes, {len(edges)} edges from {len(txs)} transactions"
        )
        return TransactionGraph(nodes=nodes, edges=edges, root=root)

    def _fold(self, graph: nx.MultiDiGraph, txs: List[Transaction]) -> None:
        """Aggregate per-address totals in transaction order"""
        for tx in txs:
            source = tx.from_address or UNKNOWN_ADDRESS
            target = tx.to_address or UNKNOWN_ADDRESS
            value = self._parse_amount(tx.value, tx.hash)

            self._touch(graph, source, tx, out_units=value)
            self._touch(graph, target, tx, in_units=value)

            if tx.change_address:
                change = 0
                if tx.has_change:
                    # The change edge leaves the sender too, so it counts as outflow
                    change = self._parse_amount(tx.change_amount, tx.hash)
                    graph.nodes[source]["total_out"] += change
                self._touch(graph, tx.change_address, tx, in_units=change)

    @staticmethod
    def _touch(
        graph: nx.MultiDiGraph, address: str, tx: Transaction, in_units: int = 0, out_units: int = 0
    ) -> None:
        if address not in graph:
            graph.add_node(address, total_in=0, total_out=0, transactions=[])
        data = graph.nodes[address]
        data["total_in"] += in_units
        data["total_out"] += out_units
        data["transactions"].append(tx)

    @staticmethod
    def _parse_amount(value: Optional[str], tx_hash: str) -> int:
        units = to_minor_units(value)
        if units is None:
            logger.warning("Unparsable amount %r in transaction %s, counting as zero", value, tx_hash)
            return 0
        return units

    def _emit_edges(self, graph: nx.MultiDiGraph, txs: List[Transaction]) -> List[GraphEdge]:
        """Add edges to the working graph and return them in emission order"""
        emitted: List[Tuple[str, str, str, EdgeKind, Transaction]] = []
        seen_ids: Dict[str, int] = defaultdict(int)

        def unique_id(base: str) -> str:
            count = seen_ids[base]
            seen_ids[base] += 1
            return base if count == 0 else f"{base}#{count}"

        for tx in txs:
            source = tx.from_address or UNKNOWN_ADDRESS
            target = tx.to_address or UNKNOWN_ADDRESS
            emitted.append((unique_id(tx.hash), source, target, EdgeKind.TRANSFER, tx))

            if tx.has_change:
                change_tx = tx.model_copy(update={"value": tx.change_amount})
                emitted.append(
                    (unique_id(f"{tx.hash}-change"), source, tx.change_address, EdgeKind.CHANGE, change_tx)
                )

        # Parallel edges share an unordered endpoint pair
        groups: Dict[frozenset, List[int]] = defaultdict(list)
        for index, (_, source, target, _, _) in enumerate(emitted):
            groups[frozenset((source, target))].append(index)

        position_in_group: Dict[int, Tuple[int, int]] = {}
        for members in groups.values():
            for parallel_index, edge_index in enumerate(members):
                position_in_group[edge_index] = (parallel_index, len(members))

        edges: List[GraphEdge] = []
        for order, (edge_id, source, target, kind, tx) in enumerate(emitted):
            graph.add_edge(source, target, key=edge_id, kind=kind, order=order, transaction=tx)
            parallel_index, parallel_count = position_in_group[order]
            edges.append(
                GraphEdge(
                    id=edge_id,
                    source=source,
                    target=target,
                    kind=kind,
                    transaction=tx,
                    parallel_index=parallel_index,
                    parallel_count=parallel_count,
                )
            )
        return edges

    def _make_node(
        self, graph: nx.MultiDiGraph, address: str, root: str, focus: set
    ) -> GraphNode:
        data = graph.nodes[address]
        stats = NodeStats(
            total_in=format_minor_units(data["total_in"]),
            total_out=format_minor_units(data["total_out"]),
            transaction_count=len(data["transactions"]),
            transactions=list(data["transactions"]),
        )
        return GraphNode(
            address=address,
            label=truncate_address(address),
            stats=stats,
            level=hop_level(graph, address, root),
            is_focus=address in focus,
            is_exchange=any(label in address for label in self.exchange_labels),
        )


def _has_transfer(graph: nx.MultiDiGraph, source: str, target: str) -> bool:
    edges = graph.get_edge_data(source, target) or {}
    return any(data["kind"] == EdgeKind.TRANSFER for data in edges.values())


def _first_sender(graph: nx.MultiDiGraph, address: str) -> Optional[str]:
    """Sender of the earliest transfer into ``address``"""
    if address not in graph:
        return None
    incoming = [
        (data["order"], source)
        for source, _, data in graph.in_edges(address, data=True)
        if data["kind"] == EdgeKind.TRANSFER
    ]
    if not incoming:
        return None
    return min(incoming)[1]


def hop_level(graph: nx.MultiDiGraph, address: str, root: str) -> int:
    """
    Hops between ``root`` and ``address`` walking backwards through senders.

    At each step, a direct transfer from the current address to ``address``
    ends the walk at ``steps + 1``. Otherwise the walk moves to the sender of
    the first transfer received by the current address. It stops when there
    is no sender or an address repeats.
    """
    level = 0
    current: Optional[str] = root
    visited = set()

    while current and current not in visited:
        visited.add(current)
        if _has_transfer(graph, current, address):
            return level + 1
        current = _first_sender(graph, current)
        if current is None:
            break
        level += 1

    return level
