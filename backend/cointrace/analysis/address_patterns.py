"""Registry of supported networks and their address shapes"""

import re
from dataclasses import dataclass, field
from typing import Optional, Pattern, Tuple

import base58

# Bitcoin Base58 alphabet: no 0, O, I or l
BASE58_ALPHABET: str = base58.BITCOIN_ALPHABET.decode("ascii")


@dataclass(frozen=True)
class NetworkDescriptor:
    """
    Static description of one network's address format.

    ``pattern`` is a shape matcher only: it checks the structure of an
    address, never its checksum.
    """

    name: str
    symbol: str
    pattern: Pattern[str]
    description: str
    explorer_url: Optional[str] = None
    networks: Tuple[str, ...] = field(default_factory=tuple)
    coingecko_id: Optional[str] = None
    binance_symbol: Optional[str] = None

    def matches(self, address: str) -> bool:
        return self.pattern.fullmatch(address) is not None

    def explorer_link(self, address: str) -> Optional[str]:
        if not self.explorer_url:
            return None
        return f"{self.explorer_url}{address}"


# Order is the tie-break priority used by the classifier
NETWORKS: Tuple[NetworkDescriptor, ...] = (
    NetworkDescriptor(
        name="Solana",
        symbol="SOL",
        pattern=re.compile(r"^[1-9A-HJ-NP-Za-km-z]{44}$"),
        description="44 characters using Base58 encoding (excludes 0, O, I, l)",
        explorer_url="https://solscan.io/account/",
        coingecko_id="solana",
        binance_symbol="SOLUSDT",
    ),
    NetworkDescriptor(
        name="Bitcoin",
        symbol="BTC",
        pattern=re.compile(r"^(1[a-zA-Z0-9]{25,34}|3[a-zA-Z0-9]{25,34}|bc1[a-zA-Z0-9]{25,87})$"),
        description="Legacy (1), SegWit (3), or Native SegWit (bc1/bc1p)",
        explorer_url="https://blockchair.com/bitcoin/address/",
        coingecko_id="bitcoin",
        binance_symbol="BTCUSDT",
    ),
    NetworkDescriptor(
        name="Ethereum",
        symbol="ETH",
        pattern=re.compile(r"^0x[a-fA-F0-9]{40}$"),
        description="Starts with '0x' followed by 40 hexadecimal characters (total 42 characters)",
        explorer_url="https://etherscan.io/address/",
        networks=("Ethereum", "Polygon", "BSC", "Avalanche", "Arbitrum", "Optimism", "Fantom", "Base"),
        coingecko_id="ethereum",
        binance_symbol="ETHUSDT",
    ),
    NetworkDescriptor(
        name="Litecoin",
        symbol="LTC",
        pattern=re.compile(r"^[LM][a-km-zA-HJ-NP-Z1-9]{33}$"),
        description="Starts with 'L' or 'M' and is exactly 34 characters long",
        explorer_url="https://blockchair.com/litecoin/address/",
        coingecko_id="litecoin",
        binance_symbol="LTCUSDT",
    ),
    NetworkDescriptor(
        name="Bitcoin Cash",
        symbol="BCH",
        pattern=re.compile(r"^(bitcoincash:q|q)[a-z0-9]{41}$"),
        description="Starts with 'q' or 'bitcoincash:' and is 42 characters long",
        explorer_url="https://blockchair.com/bitcoin-cash/address/",
        coingecko_id="bitcoin-cash",
        binance_symbol="BCHUSDT",
    ),
    NetworkDescriptor(
        name="Cardano",
        symbol="ADA",
        pattern=re.compile(r"^addr[a-zA-Z0-9]{45,200}$"),
        description="Starts with 'addr' and can be very long",
        explorer_url="https://cardanoscan.io/address/",
        coingecko_id="cardano",
        binance_symbol="ADAUSDT",
    ),
    NetworkDescriptor(
        name="Ripple",
        symbol="XRP",
        pattern=re.compile(r"^r[0-9a-zA-Z]{33}$"),
        description="Starts with 'r' and is exactly 34 characters long",
        explorer_url="https://xrpscan.com/account/",
        coingecko_id="ripple",
        binance_symbol="XRPUSDT",
    ),
    NetworkDescriptor(
        name="TRON",
        symbol="TRX",
        pattern=re.compile(r"^T[1-9A-HJ-NP-Za-km-z]{33}$"),
        description="Starts with 'T' and is exactly 34 characters long",
        explorer_url="https://tronscan.org/#/address/",
        coingecko_id="tron",
        binance_symbol="TRXUSDT",
    ),
    NetworkDescriptor(
        name="Dogecoin",
        symbol="DOGE",
        pattern=re.compile(r"^D[5-9A-HJ-NP-U][1-9A-HJ-NP-Za-km-z]{32}$"),
        description="Starts with 'D' and is exactly 34 characters long",
        explorer_url="https://dogechain.info/address/",
        coingecko_id="dogecoin",
        binance_symbol="DOGEUSDT",
    ),
    NetworkDescriptor(
        name="Binance Coin",
        symbol="BNB",
        pattern=re.compile(r"^bnb[a-zA-Z0-9]{39}$"),
        description="Starts with 'bnb' and is exactly 42 characters long",
        explorer_url="https://explorer.binance.org/address/",
        coingecko_id="binancecoin",
        binance_symbol="BNBUSDT",
    ),
)

_BY_SYMBOL = {network.symbol: network for network in NETWORKS}


def get_network(symbol: Optional[str]) -> Optional[NetworkDescriptor]:
    """Look up a descriptor by ticker symbol (case-insensitive)"""
    if not symbol:
        return None
    return _BY_SYMBOL.get(symbol.strip().upper())
