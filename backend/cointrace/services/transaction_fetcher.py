"""Paginated, cancellable transaction loading from Esplora-compatible APIs"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from cointrace.config import settings
from cointrace.errors import FetchCancelledError, UpstreamError
from cointrace.models.blockchain import Transaction, TransactionPage
from cointrace.services.http_clients import ExplorerClientFactory
from cointrace.services.normalizer import normalize_transactions
from cointrace.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

PageCallback = Callable[[TransactionPage], Optional[Awaitable[None]]]


class TransactionFetcher:
    """
    Loads an address's transaction history page by page.

    Pages follow Esplora's ``/txs`` then ``/txs/chain/{last_seen_txid}``
    cursor scheme. ``load_all`` checks its cancellation event at every page
    boundary and never returns a partial history.
    """

    def __init__(
        self,
        client_factory: ExplorerClientFactory,
        rate_limiter: Optional[RateLimiter] = None,
        base_url: Optional[str] = None,
        page_size: Optional[int] = None,
        page_delay: Optional[float] = None,
        max_pages: Optional[int] = None,
    ) -> None:
        self._client_factory = client_factory
        self._rate_limiter = rate_limiter
        self.base_url = base_url or settings.esplora_base_url
        self.page_size = page_size or settings.tx_page_size
        self.page_delay = settings.tx_page_delay if page_delay is None else page_delay
        self.max_pages = max_pages or settings.tx_max_pages

    async def _get_json(self, path: str) -> Any:
        if self._rate_limiter is not None:
            await self._rate_limiter.acquire()
        client = await self._client_factory.get_client(self.base_url)
        try:
            response = await client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Esplora returned HTTP %s for %s", exc.response.status_code, path)
            raise UpstreamError(f"Explorer returned HTTP {exc.response.status_code} for {path}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Esplora request failed for %s: %s", path, exc)
            raise UpstreamError(f"Explorer request failed for {path}: {exc}") from exc

    async def fetch_page(self, address: str, last_seen_txid: str = "") -> TransactionPage:
        """
        Fetch one page of transactions

        Args:
            address: Bitcoin address
            last_seen_txid: Cursor returned by the previous page, "" for the newest page

        Returns:
            TransactionPage with normalized transactions and the next cursor

        Raises:
            UpstreamError: When the explorer cannot be reached or answers with an error
        """
        info = await self._get_json(f"/address/{address}")
        total_txs = _total_tx_count(info)

        path = f"/address/{address}/txs"
        if last_seen_txid:
            path += f"/chain/{last_seen_txid}"
        raw_txs = await self._get_json(path)

        if not isinstance(raw_txs, list):
            logger.error("Invalid transaction list for %s: %s", address, type(raw_txs).__name__)
            return TransactionPage(transactions=[], has_more=False, last_seen_txid="", total_txs=0)

        has_more = len(raw_txs) >= self.page_size
        next_cursor = ""
        if has_more and isinstance(raw_txs[-1], dict):
            next_cursor = raw_txs[-1].get("txid") or ""

        return TransactionPage(
            transactions=normalize_transactions(raw_txs, address),
            has_more=has_more and bool(next_cursor),
            last_seen_txid=next_cursor,
            total_txs=total_txs,
        )

    async def load_all(
        self,
        address: str,
        cancel_event: Optional[asyncio.Event] = None,
        on_page: Optional[PageCallback] = None,
    ) -> List[Transaction]:
        """
        Load every page for an address.

        Raises:
            FetchCancelledError: When ``cancel_event`` is set at a page boundary
            UpstreamError: When a page request fails
        """
        cancel_event = cancel_event or asyncio.Event()
        buffer: List[Transaction] = []
        cursor = ""

        for page_number in range(self.max_pages):
            if cancel_event.is_set():
                raise FetchCancelledError(f"Fetch for {address} cancelled before page {page_number + 1}")

            page = await self.fetch_page(address, cursor)

            if cancel_event.is_set():
                raise FetchCancelledError(f"Fetch for {address} cancelled after page {page_number + 1}")

            buffer.extend(page.transactions)
            logger.debug(
                "Loaded page %d for %s (%d/%d transactions)",
                page_number + 1,
                address,
                len(buffer),
                page.total_txs,
            )

            if on_page is not None:
                result = on_page(page)
                if asyncio.iscoroutine(result):
                    await result

            if not page.has_more:
                break
            cursor = page.last_seen_txid
            await asyncio.sleep(self.page_delay)
        else:
            logger.warning("Stopped loading %s after %d pages", address, self.max_pages)

        return buffer


def _total_tx_count(info: Any) -> int:
    if not isinstance(info, dict):
        return 0
    chain = (info.get("chain_stats") or {}).get("tx_count") or 0
    mempool = (info.get("mempool_stats") or {}).get("tx_count") or 0
    return int(chain) + int(mempool)


class SearchCoordinator:
    """
    Runs one address search at a time.

    Starting a new search signals the previous one to stop and cancels its
    task; the superseded caller receives FetchCancelledError.
    """

    def __init__(self, fetcher: TransactionFetcher) -> None:
        self._fetcher = fetcher
        self._lock = asyncio.Lock()
        self._current_event: Optional[asyncio.Event] = None
        self._current_task: Optional[asyncio.Task] = None

    async def cancel_current(self) -> None:
        async with self._lock:
            self._cancel_locked()

    def _cancel_locked(self) -> None:
        if self._current_event is not None:
            self._current_event.set()
        if self._current_task is not None and not self._current_task.done():
            self._current_task.cancel()

    async def search(self, address: str, on_page: Optional[PageCallback] = None) -> List[Transaction]:
        async with self._lock:
            self._cancel_locked()
            event = asyncio.Event()
            task = asyncio.ensure_future(self._fetcher.load_all(address, event, on_page))
            self._current_event = event
            self._current_task = task

        try:
            return await task
        except asyncio.CancelledError:
            if event.is_set():
                raise FetchCancelledError(f"Search for {address} superseded") from None
            raise
        finally:
            async with self._lock:
                if self._current_task is task:
                    self._current_task = None
                    self._current_event = None


# Global instances
_client_factory: Optional[ExplorerClientFactory] = None
_rate_limiter: Optional[RateLimiter] = None
_fetcher: Optional[TransactionFetcher] = None


def get_client_factory() -> ExplorerClientFactory:
    global _client_factory
    if _client_factory is None:
        _client_factory = ExplorerClientFactory()
    return _client_factory


def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter shared by every upstream collaborator"""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter(settings.rate_limit_interval)
    return _rate_limiter


def get_transaction_fetcher() -> TransactionFetcher:
    """Get or create global TransactionFetcher instance"""
    global _fetcher
    if _fetcher is None:
        _fetcher = TransactionFetcher(get_client_factory(), get_rate_limiter())
    return _fetcher


_coordinator: Optional[SearchCoordinator] = None


def get_search_coordinator() -> SearchCoordinator:
    """Process-wide coordinator; a new graph search supersedes the one in flight"""
    global _coordinator
    if _coordinator is None:
        _coordinator = SearchCoordinator(get_transaction_fetcher())
    return _coordinator
