"""Address classification API endpoints"""

import logging
import time
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends

from cointrace.analysis.address_patterns import NETWORKS, NetworkDescriptor
from cointrace.analysis.classifier import (
    UNKNOWN_GROUP,
    classify,
    classify_many,
    group_by_network,
    parse_address_list,
)
from cointrace.config import settings
from cointrace.models.api import (
    BulkClassifyRequest,
    BulkClassifyResponse,
    ClassifyResponse,
    HistoryEntry,
    NetworkInfo,
)
from cointrace.services.history import SearchHistory, get_search_history

logger = logging.getLogger(__name__)

router = APIRouter()


def network_info(network: NetworkDescriptor) -> NetworkInfo:
    return NetworkInfo(
        name=network.name,
        symbol=network.symbol,
        description=network.description,
        networks=list(network.networks),
        explorer_url=network.explorer_url,
    )


def _classify_response(address: str, network: Optional[NetworkDescriptor]) -> ClassifyResponse:
    return ClassifyResponse(
        address=address,
        classified=network is not None,
        network=network_info(network) if network else None,
        explorer_link=network.explorer_link(address) if network else None,
    )


@router.get("/networks", response_model=List[NetworkInfo])
async def list_networks():
    """List supported networks in classification priority order"""
    return [network_info(network) for network in NETWORKS]


@router.get("/classify/{address}", response_model=ClassifyResponse)
async def classify_address(
    address: str,
    history: SearchHistory = Depends(get_search_history),
):
    """
    Identify the network an address belongs to

    An unknown format is a normal result (classified=false), not an error.

    Example: GET /api/classify/1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa
    """
    try:
        address = address.strip()
        network = classify(address)
        logger.info(f"Classified {address} as {network.symbol if network else 'unknown'}")

        if network:
            await history.record(
                HistoryEntry(
                    address=address,
                    symbol=network.symbol,
                    name=network.name,
                    timestamp=int(time.time()),
                )
            )

        return _classify_response(address, network)

    except Exception as e:
        logger.error(f"Failed to classify address: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to classify address: {str(e)}")


@router.post("/classify/bulk", response_model=BulkClassifyResponse)
async def classify_bulk(request: BulkClassifyRequest):
    """
    Classify many addresses at once

    Accepts free text (one address per line or comma separated, '#' lines
    ignored) and/or an explicit list. At most 50 addresses per request.

    Example:
    ```json
    {
      "text": "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa\\n0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
    }
    ```
    """
    try:
        candidates = parse_address_list(request.text)
        candidates += parse_address_list("\n".join(request.addresses))
        addresses = list(dict.fromkeys(candidates))

        if not addresses:
            raise HTTPException(status_code=400, detail="No addresses provided")
        if len(addresses) > settings.max_bulk_addresses:
            raise HTTPException(
                status_code=400,
                detail=f"Too many addresses: {len(addresses)} (max {settings.max_bulk_addresses})",
            )

        logger.info(f"📦 Bulk classification: {len(addresses)} addresses")
        results = classify_many(addresses)
        groups = group_by_network(results)

        return BulkClassifyResponse(
            total=len(addresses),
            results=[_classify_response(address, network) for address, network in results],
            groups=groups,
            unknown=groups.get(UNKNOWN_GROUP, []),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Bulk classification failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Bulk classification failed: {str(e)}")
