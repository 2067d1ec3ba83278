"""Deterministic layered layout for transaction graphs"""

from typing import Optional

from cointrace.config import settings
from cointrace.models.graph import GraphEdge, GraphNode, Position, TransactionGraph


class GraphLayoutEngine:
    """
    Assign node coordinates and parallel-edge offsets.

    Columns follow hop level (``x = level * level_spacing``). Focus nodes sit
    on the ``y = 0`` axis; other nodes are stacked around it in node order.
    """

    def __init__(
        self,
        level_spacing: Optional[float] = None,
        vertical_spacing: Optional[float] = None,
        edge_spacing: Optional[float] = None,
    ):
        self.level_spacing = settings.graph_level_spacing if level_spacing is None else level_spacing
        self.vertical_spacing = settings.graph_vertical_spacing if vertical_spacing is None else vertical_spacing
        self.edge_spacing = settings.graph_edge_spacing if edge_spacing is None else edge_spacing

    def layout(self, graph: TransactionGraph) -> TransactionGraph:
        """Return a new snapshot with positions and edge offsets filled in"""
        non_focus_count = sum(1 for node in graph.nodes if not node.is_focus)
        centre = (non_focus_count * self.vertical_spacing) / 2

        nodes = []
        non_focus_index = 0
        for node in graph.nodes:
            if node.is_focus:
                y = 0.0
            else:
                y = non_focus_index * self.vertical_spacing - centre
                non_focus_index += 1
            nodes.append(self._place(node, node.level * self.level_spacing, y))

        edges = [self._offset(edge) for edge in graph.edges]
        return TransactionGraph(nodes=nodes, edges=edges, root=graph.root)

    @staticmethod
    def _place(node: GraphNode, x: float, y: float) -> GraphNode:
        return node.model_copy(update={"position": Position(x=float(x), y=float(y))})

    def _offset(self, edge: GraphEdge) -> GraphEdge:
        offset = (edge.parallel_index - (edge.parallel_count - 1) / 2) * self.edge_spacing
        return edge.model_copy(update={"offset": offset})
