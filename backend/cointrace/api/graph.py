"""Transaction graph API endpoints"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends

from cointrace.analysis.classifier import classify
from cointrace.analysis.graph_builder import GraphBuilder
from cointrace.analysis.graph_layout import GraphLayoutEngine
from cointrace.errors import FetchCancelledError, UpstreamError
from cointrace.models.api import GraphBuildRequest, GraphRequest, GraphResponse
from cointrace.models.blockchain import Transaction
from cointrace.services.transaction_fetcher import SearchCoordinator, get_search_coordinator

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_response(transactions: List[Transaction], focus_addresses: List[str]) -> GraphResponse:
    graph = GraphBuilder().build(transactions, focus_addresses)
    laid_out = GraphLayoutEngine().layout(graph)
    return GraphResponse(
        graph=laid_out,
        focus_addresses=focus_addresses,
        transaction_count=len(transactions),
        total_nodes=len(laid_out.nodes),
        total_edges=len(laid_out.edges),
    )


@router.post("", response_model=GraphResponse)
async def build_graph_for_addresses(
    request: GraphRequest,
    coordinator: SearchCoordinator = Depends(get_search_coordinator),
):
    """
    Load the full transaction history of one or more Bitcoin addresses and
    return the laid-out transaction graph. The first address is the root.

    A newer graph request cancels the one still loading; the superseded
    request answers 409 and never returns a partial graph.

    Example:
    ```json
    {
      "addresses": ["1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"]
    }
    ```
    """
    try:
        focus = [address.strip() for address in request.addresses if address.strip()]
        if not focus:
            raise HTTPException(status_code=400, detail="No addresses provided")

        for address in focus:
            network = classify(address)
            if network is None or network.symbol != "BTC":
                raise HTTPException(status_code=400, detail=f"Graph is only available for Bitcoin: {address}")

        transactions: List[Transaction] = []
        seen = set()
        for address in focus:
            logger.info(f"Loading transactions for graph: {address}")
            for tx in await coordinator.search(address):
                # A transaction seen from two focus addresses with the same endpoints is kept once
                key = (tx.hash, tx.from_address, tx.to_address)
                if key not in seen:
                    seen.add(key)
                    transactions.append(tx)

        return _build_response(transactions, focus)

    except HTTPException:
        raise
    except FetchCancelledError as e:
        logger.info(f"Graph search cancelled: {e}")
        raise HTTPException(status_code=409, detail="Search superseded by a newer request")
    except UpstreamError as e:
        logger.warning(f"Upstream failure while building graph: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Graph build failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Graph build failed: {str(e)}")


@router.post("/build", response_model=GraphResponse)
async def build_graph(request: GraphBuildRequest):
    """
    Build and lay out a graph from already-normalized transactions (no I/O)
    """
    try:
        focus = [address for address in request.focus_addresses if address]
        if not focus:
            raise HTTPException(status_code=400, detail="At least one focus address is required")

        logger.info(f"Building graph from {len(request.transactions)} transactions")
        return _build_response(request.transactions, focus)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Graph build failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Graph build failed: {str(e)}")
