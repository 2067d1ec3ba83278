"""Convert Esplora transaction records into canonical transactions"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from cointrace.amounts import format_minor_units
from cointrace.models.blockchain import ERROR_ADDRESS, Transaction, UNKNOWN_ADDRESS

logger = logging.getLogger(__name__)

ZERO_AMOUNT = format_minor_units(0)


def _iso_timestamp(block_time: Optional[int]) -> str:
    if block_time is None:
        moment = datetime.now(timezone.utc)
    else:
        moment = datetime.fromtimestamp(int(block_time), tz=timezone.utc)
    return moment.isoformat().replace("+00:00", "Z")


def _satoshis(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"Invalid satoshi amount: {value!r}")
    return int(value)


def normalize_transaction(raw_tx: Dict[str, Any], observed_address: str) -> Transaction:
    """
    Interpret one raw transaction relative to an observed address.

    Incoming when the observed address receives an output without funding
    an input; otherwise outgoing. For outgoing spends funded by the observed address with more
    than one payment output, the first smaller output returning to the
    observed address is reported as change. This is a heuristic and can be
    wrong.

    A malformed record yields a placeholder with "Error" endpoints rather
    than raising.
    """
    try:
        return _normalize(raw_tx, observed_address)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        txid = raw_tx.get("txid", "") if isinstance(raw_tx, dict) else ""
        logger.warning("Failed to normalize transaction %s for %s: %s", txid, observed_address, e)
        return Transaction(
            hash=str(txid or ""),
            timestamp=_iso_timestamp(None),
            from_address=ERROR_ADDRESS,
            to_address=ERROR_ADDRESS,
            value=ZERO_AMOUNT,
            fee=ZERO_AMOUNT,
            is_incoming=False,
        )


def _normalize(raw_tx: Dict[str, Any], observed: str) -> Transaction:
    txid = raw_tx["txid"]
    vin: List[Dict[str, Any]] = raw_tx.get("vin") or []
    vout: List[Dict[str, Any]] = raw_tx.get("vout") or []

    input_addresses = [
        (inp.get("prevout") or {}).get("scriptpubkey_address")
        for inp in vin
    ]
    input_addresses = [address for address in input_addresses if address]

    outputs: List[Tuple[str, int]] = [
        (out["scriptpubkey_address"], _satoshis(out.get("value")))
        for out in vout
        if out.get("scriptpubkey_address")
    ]
    output_addresses = [address for address, _ in outputs]

    status = raw_tx.get("status") or {}
    timestamp = _iso_timestamp(status.get("block_time"))
    fee = format_minor_units(_satoshis(raw_tx.get("fee")))

    change_address: Optional[str] = None
    change_amount: Optional[str] = None

    funds_input = observed in input_addresses
    is_incoming = observed in output_addresses and not funds_input
    if is_incoming:
        from_address = input_addresses[0] if input_addresses else UNKNOWN_ADDRESS
        to_address = observed
        value = next(amount for address, amount in outputs if address == observed)
    else:
        from_address = observed
        to_address = next((address for address in output_addresses if address != observed), UNKNOWN_ADDRESS)
        value = 0

        if funds_input:
            payments = sorted(
                (amount for address, amount in outputs if address != observed),
                reverse=True,
            )
            if payments:
                value = payments[0]
            if len(payments) > 1:
                for address, amount in outputs:
                    if address == observed and amount < value:
                        change_address = address
                        change_amount = format_minor_units(amount)
                        break

    return Transaction(
        hash=txid,
        timestamp=timestamp,
        from_address=from_address,
        to_address=to_address,
        value=format_minor_units(value),
        fee=fee,
        is_incoming=is_incoming,
        change_address=change_address,
        change_amount=change_amount,
    )


def normalize_transactions(raw_txs: List[Dict[str, Any]], observed_address: str) -> List[Transaction]:
    return [normalize_transaction(raw_tx, observed_address) for raw_tx in raw_txs]
