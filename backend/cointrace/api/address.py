"""Address balance and transaction API endpoints"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from cointrace.analysis.classifier import classify
from cointrace.analysis.transaction_views import filter_transactions, sort_transactions
from cointrace.errors import UpstreamError
from cointrace.models.blockchain import BalanceResult, TransactionPage
from cointrace.services.balance_service import BalanceService, get_balance_service
from cointrace.services.transaction_fetcher import TransactionFetcher, get_transaction_fetcher

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{address}/balance", response_model=BalanceResult, response_model_by_alias=True)
async def get_balance(
    address: str,
    balance_service: BalanceService = Depends(get_balance_service),
):
    """
    Get balance, USD value and activity summary for an address

    Networks without a supported API (and any upstream failure) return
    "Check Explorer" values with an explorer link.

    Example: GET /api/address/1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa/balance
    """
    try:
        address = address.strip()
        network = classify(address)
        if network is None:
            raise HTTPException(status_code=400, detail=f"Unknown address format: {address}")

        logger.info(f"Fetching {network.symbol} balance for {address}")
        return await balance_service.fetch_balance(address, network.symbol)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get balance: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get balance: {str(e)}")


@router.get("/{address}/transactions", response_model=TransactionPage, response_model_by_alias=True)
async def get_transactions(
    address: str,
    last_seen_txid: str = Query(default="", description="Cursor from the previous page"),
    sort: str = Query(default="timestamp", description="Sort field: timestamp, value, fee or change_amount"),
    direction: Optional[str] = Query(default=None, description="asc or desc; omitted keeps explorer order"),
    incoming: bool = Query(default=True, description="Include incoming transactions"),
    outgoing: bool = Query(default=True, description="Include outgoing transactions"),
    with_change: bool = Query(default=False, description="Only transactions with detected change"),
    fetcher: TransactionFetcher = Depends(get_transaction_fetcher),
):
    """
    Get one page of Bitcoin transactions (25 per page)

    Sorting and filtering apply to the returned page; the cursor still
    refers to the explorer's order.

    Example: GET /api/address/1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa/transactions?direction=desc&sort=value
    """
    try:
        address = address.strip()
        network = classify(address)
        if network is None or network.symbol != "BTC":
            raise HTTPException(status_code=400, detail="Transaction history is only available for Bitcoin")

        page = await fetcher.fetch_page(address, last_seen_txid)

        try:
            transactions = filter_transactions(
                page.transactions, incoming=incoming, outgoing=outgoing, with_change=with_change
            )
            transactions = sort_transactions(transactions, sort, direction)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return page.model_copy(update={"transactions": transactions})

    except HTTPException:
        raise
    except UpstreamError as e:
        logger.warning(f"Upstream failure fetching transactions for {address}: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to get transactions: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get transactions: {str(e)}")
