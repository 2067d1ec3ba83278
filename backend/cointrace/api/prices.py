"""Price API endpoints"""

import logging
from typing import Dict, Optional
from fastapi import APIRouter, HTTPException, Depends

from cointrace.services.balance_service import BalanceService, get_balance_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/prices", response_model=Dict[str, Optional[str]])
async def get_prices(balance_service: BalanceService = Depends(get_balance_service)):
    """USD price for every supported network (null where no source answered)"""
    try:
        return await balance_service.fetch_prices()
    except Exception as e:
        logger.error(f"Failed to get prices: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to get prices: {str(e)}")
