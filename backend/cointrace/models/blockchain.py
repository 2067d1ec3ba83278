"""Blockchain data models"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cointrace.amounts import is_numeric_amount

UNKNOWN_ADDRESS = "Unknown"
ERROR_ADDRESS = "Error"

# Sentinel values returned by the balance collaborator instead of raising
BALANCE_ERROR = "Error"
CHECK_EXPLORER = "Check Explorer"
UNKNOWN_TIME = "Unknown"


class Transaction(BaseModel):
    """
    Canonical transaction, always interpreted relative to one observed address.

    Amounts are decimal strings with 8 places. ``from``/``to`` may be the
    literal "Unknown" when the source record does not resolve them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    hash: str = Field(..., description="Transaction ID")
    timestamp: str = Field(..., description="ISO-8601 instant")
    from_address: str = Field(UNKNOWN_ADDRESS, alias="from", description="Sending address")
    to_address: str = Field(UNKNOWN_ADDRESS, alias="to", description="Receiving address")
    value: str = Field(..., description="Main amount (8 decimal places)")
    fee: str = Field(default="0.00000000", description="Fee (8 decimal places)")
    is_incoming: bool = Field(..., alias="isIncoming", description="Incoming for the observed address")
    change_address: Optional[str] = Field(None, alias="changeAddress", description="Inferred change address")
    change_amount: Optional[str] = Field(None, alias="changeAmount", description="Inferred change amount")

    @field_validator("from_address", "to_address", mode="before")
    @classmethod
    def missing_address_is_unknown(cls, value):
        if value is None or value == "":
            return UNKNOWN_ADDRESS
        return value

    @property
    def has_change(self) -> bool:
        return bool(self.change_address and self.change_amount)


class TransactionPage(BaseModel):
    """One page of an address's transaction history"""

    model_config = ConfigDict(populate_by_name=True)

    transactions: List[Transaction] = Field(default_factory=list, description="Normalized transactions")
    has_more: bool = Field(False, alias="hasMore", description="Another page is available")
    last_seen_txid: str = Field("", alias="lastSeenTxid", description="Cursor for the next page")
    total_txs: int = Field(0, alias="totalTxs", description="Total transactions reported by the explorer")


class BalanceResult(BaseModel):
    """
    Balance lookup result.

    Every field is a display string. "Error" and "Check Explorer" are valid
    values and must not be parsed as amounts.
    """

    model_config = ConfigDict(populate_by_name=True)

    balance: str = Field(..., description="Balance in whole coins, or a sentinel")
    usd_value: str = Field(..., alias="usdValue", description="USD value, or a sentinel")
    tx_count: Optional[str] = Field(None, alias="txCount", description="Transaction count")
    first_tx: Optional[str] = Field(None, alias="firstTx", description="First transaction time")
    last_tx: Optional[str] = Field(None, alias="lastTx", description="Last transaction time")
    usdt_balance: Optional[str] = Field(None, alias="usdtBalance", description="USDT token balance")
    explorer_url: Optional[str] = Field(None, alias="explorerUrl", description="Explorer link")

    @property
    def is_numeric(self) -> bool:
        return is_numeric_amount(self.balance)

    @classmethod
    def check_explorer(cls, explorer_url: Optional[str] = None) -> "BalanceResult":
        return cls(
            balance=CHECK_EXPLORER,
            usd_value=CHECK_EXPLORER,
            tx_count=CHECK_EXPLORER,
            first_tx=CHECK_EXPLORER,
            last_tx=CHECK_EXPLORER,
            explorer_url=explorer_url,
        )
