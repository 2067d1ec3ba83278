"""Balance and USD price lookups across public explorer APIs"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

import httpx

from cointrace.amounts import format_decimal, format_minor_units
from cointrace.analysis.address_patterns import NETWORKS, NetworkDescriptor, get_network
from cointrace.config import settings
from cointrace.models.blockchain import BalanceResult, CHECK_EXPLORER, UNKNOWN_TIME
from cointrace.services.http_clients import ExplorerClientFactory
from cointrace.services.rate_limiter import RateLimiter
from cointrace.services.transaction_fetcher import get_client_factory, get_rate_limiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockchairChain:
    """Blockchair chain slug with unit conversion and display precision"""

    slug: str
    decimals: int
    places: int
    lowercase_key: bool = False


BLOCKCHAIR_CHAINS: Dict[str, BlockchairChain] = {
    "ETH": BlockchairChain("ethereum", decimals=18, places=6, lowercase_key=True),
    "LTC": BlockchairChain("litecoin", decimals=8, places=8),
    "BCH": BlockchairChain("bitcoin-cash", decimals=8, places=8),
    "DOGE": BlockchairChain("dogecoin", decimals=8, places=2),
}

XRP_PLACES = 6
TRX_DECIMALS = 6
ETH_PLACES = 6
USDT_CONTRACT = "0xdac17f958d2ee523a2206206994597c13d831ec7"


def _iso_from_unix(seconds: Optional[int]) -> str:
    if not seconds:
        return UNKNOWN_TIME
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc).isoformat().replace("+00:00", "Z")


def _scaled(raw: Any, decimals: int, places: int) -> str:
    amount = Decimal(str(raw or 0)) / (Decimal(10) ** decimals)
    return format_decimal(amount, places)


def _usdt_balance(tokens: Iterable[Dict[str, Any]]) -> Optional[str]:
    for token in tokens:
        info = token.get("tokenInfo") or {}
        if info.get("symbol") == "USDT" and str(info.get("address", "")).lower() == USDT_CONTRACT:
            return _scaled(token.get("balance"), int(info.get("decimals") or 0), 2)
    return None


class BalanceService:
    """
    Fetches balances and USD prices.

    Lookups never raise: any upstream failure degrades to "Check Explorer"
    sentinels so callers can still render a result. Every outbound request
    passes through the shared RateLimiter.
    """

    def __init__(
        self,
        client_factory: ExplorerClientFactory,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        self._client_factory = client_factory
        self._rate_limiter = rate_limiter
        self._fetchers: Dict[str, Callable[[str, NetworkDescriptor], Awaitable[BalanceResult]]] = {
            "BTC": self._fetch_btc,
            "ETH": self._fetch_eth,
            "LTC": self._fetch_blockchair,
            "BCH": self._fetch_blockchair,
            "DOGE": self._fetch_blockchair,
            "XRP": self._fetch_xrp,
            "TRX": self._fetch_trx,
        }

    async def _get_json(self, base_url: str, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        if self._rate_limiter is not None:
            await self._rate_limiter.acquire()
        client = await self._client_factory.get_client(base_url)
        response = await client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def fetch_balance(self, address: str, symbol: Optional[str]) -> BalanceResult:
        """
        Look up the balance of an address

        Args:
            address: Address to inspect
            symbol: Network symbol from the classifier

        Returns:
            BalanceResult; sentinel values when the network is unsupported or upstream fails
        """
        address = address.strip()
        network = get_network(symbol)
        if network is None:
            return BalanceResult.check_explorer()

        explorer_url = network.explorer_link(address)
        fetcher = self._fetchers.get(network.symbol)
        if fetcher is None:
            return BalanceResult.check_explorer(explorer_url)

        try:
            result = await fetcher(address, network)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, IndexError, InvalidOperation) as e:
            logger.warning(f"Balance lookup failed for {network.symbol} {address}: {e}")
            return BalanceResult.check_explorer(explorer_url)

        price = await self.fetch_price(network)
        usd_value = self._usd_value(result.balance, price)
        return result.model_copy(update={"usd_value": usd_value, "explorer_url": explorer_url})

    @staticmethod
    def _usd_value(balance: str, price: Optional[Decimal]) -> str:
        try:
            amount = Decimal(balance)
        except InvalidOperation:
            return CHECK_EXPLORER
        return format_decimal(amount * (price or Decimal(0)), 2)

    async def _fetch_btc(self, address: str, network: NetworkDescriptor) -> BalanceResult:
        data = await self._get_json(settings.esplora_base_url, f"/address/{address}")
        txs = await self._get_json(settings.esplora_base_url, f"/address/{address}/txs")
        chain = data["chain_stats"]
        balance = chain["funded_txo_sum"] - chain["spent_txo_sum"]

        first_tx = last_tx = UNKNOWN_TIME
        if isinstance(txs, list) and txs:
            last_tx = _iso_from_unix((txs[0].get("status") or {}).get("block_time"))
            first_tx = _iso_from_unix((txs[-1].get("status") or {}).get("block_time"))

        return BalanceResult(
            balance=format_minor_units(balance),
            usd_value="0.00",
            tx_count=str(chain["tx_count"]),
            first_tx=first_tx,
            last_tx=last_tx,
        )

    async def _fetch_blockchair(self, address: str, network: NetworkDescriptor) -> BalanceResult:
        chain = BLOCKCHAIR_CHAINS[network.symbol]
        data = await self._get_json(settings.blockchair_base_url, f"/{chain.slug}/raw/address/{address}")

        entries = (data or {}).get("data") or {}
        lowered = address.lower()
        entry = entries.get(lowered) if chain.lowercase_key else entries.get(address) or entries.get(lowered)
        details = (entry or {}).get("address")
        if not details:
            return BalanceResult(
                balance="0", usd_value="0", tx_count="0", first_tx=UNKNOWN_TIME, last_tx=UNKNOWN_TIME
            )

        tx_count = details.get("transaction_count") or details.get("call_count") or 0
        return BalanceResult(
            balance=_scaled(details.get("balance"), chain.decimals, chain.places),
            usd_value="0.00",
            tx_count=str(tx_count),
            first_tx=details.get("first_seen_receiving") or UNKNOWN_TIME,
            last_tx=details.get("last_seen_receiving") or UNKNOWN_TIME,
        )

    async def _fetch_eth(self, address: str, network: NetworkDescriptor) -> BalanceResult:
        """Blockchair first; Ethplorer (with the USDT token balance) when it fails"""
        try:
            return await self._fetch_blockchair(address, network)
        except (httpx.HTTPError, ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning(f"Blockchair lookup failed for ETH {address}, trying Ethplorer: {e}")

        data = await self._get_json(
            settings.ethplorer_base_url,
            f"/getAddressInfo/{address}",
            params={"apiKey": settings.ethplorer_api_key},
        )
        eth_balance = (data.get("ETH") or {}).get("balance") or 0
        return BalanceResult(
            balance=format_decimal(Decimal(str(eth_balance)), ETH_PLACES),
            usd_value="0.00",
            tx_count=str(data.get("countTxs") or 0),
            first_tx=CHECK_EXPLORER,
            last_tx=CHECK_EXPLORER,
            usdt_balance=_usdt_balance(data.get("tokens") or []),
        )

    async def _fetch_xrp(self, address: str, network: NetworkDescriptor) -> BalanceResult:
        data = await self._get_json(settings.xrpscan_base_url, f"/account/{address}")
        return BalanceResult(
            balance=format_decimal(Decimal(str(data.get("xrpBalance") or 0)), XRP_PLACES),
            usd_value="0.00",
            tx_count=CHECK_EXPLORER,
            first_tx=CHECK_EXPLORER,
            last_tx=CHECK_EXPLORER,
        )

    async def _fetch_trx(self, address: str, network: NetworkDescriptor) -> BalanceResult:
        data = await self._get_json(settings.trongrid_base_url, f"/accounts/{address}")
        accounts = data.get("data") or []
        if not accounts:
            raise ValueError("Account not found on trongrid")
        return BalanceResult(
            balance=_scaled(accounts[0].get("balance"), TRX_DECIMALS, TRX_DECIMALS),
            usd_value="0.00",
            tx_count=CHECK_EXPLORER,
            first_tx=CHECK_EXPLORER,
            last_tx=CHECK_EXPLORER,
        )

    async def fetch_price(self, network: NetworkDescriptor) -> Optional[Decimal]:
        """USD price from Binance, falling back to CoinGecko"""
        if network.binance_symbol:
            try:
                data = await self._get_json(
                    settings.binance_base_url, "/ticker/price", params={"symbol": network.binance_symbol}
                )
                return Decimal(str(data["price"]))
            except (httpx.HTTPError, ValueError, KeyError, TypeError, InvalidOperation) as e:
                logger.warning(f"Binance price lookup failed for {network.symbol}: {e}")

        if network.coingecko_id:
            try:
                data = await self._get_json(
                    settings.coingecko_base_url,
                    "/simple/price",
                    params={"ids": network.coingecko_id, "vs_currencies": "usd"},
                )
                return Decimal(str(data[network.coingecko_id]["usd"]))
            except (httpx.HTTPError, ValueError, KeyError, TypeError, InvalidOperation) as e:
                logger.warning(f"CoinGecko price lookup failed for {network.symbol}: {e}")

        return None

    async def fetch_prices(self, symbols: Optional[Iterable[str]] = None) -> Dict[str, Optional[str]]:
        """Prices keyed by symbol; None where every source failed"""
        if symbols is None:
            networks = list(NETWORKS)
        else:
            networks = [network for network in (get_network(symbol) for symbol in symbols) if network]

        prices: Dict[str, Optional[str]] = {}
        for network in networks:
            price = await self.fetch_price(network)
            prices[network.symbol] = str(price) if price is not None else None
        return prices


# Global service instance
_service: Optional[BalanceService] = None


def get_balance_service() -> BalanceService:
    """Get or create global BalanceService instance"""
    global _service
    if _service is None:
        _service = BalanceService(get_client_factory(), get_rate_limiter())
    return _service
