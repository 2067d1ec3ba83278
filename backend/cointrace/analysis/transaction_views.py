"""Sorting, filtering and paging over canonical transactions"""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from cointrace.amounts import to_minor_units
from cointrace.models.blockchain import Transaction

SORT_FIELDS = ("timestamp", "value", "fee", "change_amount")


def _timestamp_key(tx: Transaction) -> float:
    try:
        parsed = datetime.fromisoformat(tx.timestamp.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _amount_key(attribute: str) -> Callable[[Transaction], int]:
    def key(tx: Transaction) -> int:
        return to_minor_units(getattr(tx, attribute)) or 0

    return key


_SORT_KEYS: Dict[str, Callable[[Transaction], float]] = {
    "timestamp": _timestamp_key,
    "value": _amount_key("value"),
    "fee": _amount_key("fee"),
    "change_amount": _amount_key("change_amount"),
}


def sort_transactions(
    transactions: Sequence[Transaction], field: str = "timestamp", direction: Optional[str] = "desc"
) -> List[Transaction]:
    """
    Sort transactions by one field.

    ``direction`` is "asc", "desc", or None to keep the input order. Missing
    or unparsable amounts sort as zero; the sort is stable.
    """
    if direction is None:
        return list(transactions)
    if field not in _SORT_KEYS:
        raise ValueError(f"Unsupported sort field: {field}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unsupported sort direction: {direction}")
    return sorted(transactions, key=_SORT_KEYS[field], reverse=direction == "desc")


def filter_transactions(
    transactions: Sequence[Transaction],
    incoming: bool = True,
    outgoing: bool = True,
    with_change: bool = False,
) -> List[Transaction]:
    """Keep incoming and/or outgoing transactions, optionally only those with change"""
    result = []
    for tx in transactions:
        if tx.is_incoming and not incoming:
            continue
        if not tx.is_incoming and not outgoing:
            continue
        if with_change and not tx.has_change:
            continue
        result.append(tx)
    return result


def paginate(transactions: Sequence[Transaction], page: int = 1, per_page: int = 25) -> List[Transaction]:
    if page < 1 or per_page < 1:
        raise ValueError("page and per_page must be positive")
    start = (page - 1) * per_page
    return list(transactions[start:start + per_page])
