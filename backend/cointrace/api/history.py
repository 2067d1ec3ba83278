"""Search history API endpoints"""

from typing import List
from fastapi import APIRouter, Depends

from cointrace.models.api import HistoryEntry
from cointrace.services.history import SearchHistory, get_search_history

router = APIRouter()


@router.get("/history", response_model=List[HistoryEntry])
async def get_history(history: SearchHistory = Depends(get_search_history)):
    """Recent searches, newest first"""
    return await history.list()


@router.delete("/history")
async def clear_history(history: SearchHistory = Depends(get_search_history)):
    """Remove every history entry"""
    await history.clear()
    return {"status": "cleared"}
