"""Tests for paginated transaction loading"""

import asyncio

import httpx
import pytest
from cointrace.errors import FetchCancelledError, UpstreamError
from cointrace.services.http_clients import ExplorerClientFactory
from cointrace.services.transaction_fetcher import SearchCoordinator, TransactionFetcher, get_search_coordinator

BASE = "https://esplora.test/api"
ME = "bc1qme0000000000000000000000000000000000"
OTHER = "bc1qother000000000000000000000000000000"


def raw_tx(txid):
    return {
        "txid": txid,
        "fee": 100,
        "status": {"confirmed": True, "block_time": 1700000000},
        "vin": [{"prevout": {"scriptpubkey_address": OTHER, "value": 1000}}],
        "vout": [{"scriptpubkey_address": ME, "value": 900}],
    }


def make_pages(total, page_size=25):
    """Esplora-style pages keyed by cursor ("" for the first page)"""
    txids = [f"tx{i:04d}" for i in range(total)]
    pages = {}
    cursor = ""
    for start in range(0, total, page_size):
        chunk = txids[start:start + page_size]
        pages[cursor] = [raw_tx(txid) for txid in chunk]
        cursor = chunk[-1]
    if total % page_size == 0:
        pages[cursor] = []
    return pages


class FakeEsplora:
    """Minimal Esplora API served through httpx.MockTransport"""

    def __init__(self, pages, chain_count=0, mempool_count=0):
        self.pages = pages
        self.chain_count = chain_count
        self.mempool_count = mempool_count
        self.requests = []
        self.on_txs = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)
        prefix = f"/api/address/{ME}"
        if path == prefix:
            return httpx.Response(
                200,
                json={
                    "address": ME,
                    "chain_stats": {"tx_count": self.chain_count},
                    "mempool_stats": {"tx_count": self.mempool_count},
                },
            )
        if path == f"{prefix}/txs":
            cursor = ""
        elif path.startswith(f"{prefix}/txs/chain/"):
            cursor = path.rsplit("/", 1)[-1]
        else:
            return httpx.Response(404, text="not found")
        if self.on_txs is not None:
            self.on_txs(cursor)
        return httpx.Response(200, json=self.pages.get(cursor, []))


def make_fetcher(handler, **kwargs):
    factory = ExplorerClientFactory(transport=httpx.MockTransport(handler))
    kwargs.setdefault("page_delay", 0)
    return TransactionFetcher(factory, base_url=BASE, page_size=25, **kwargs)


class TestFetchPage:
    """Test single-page fetches"""

    def test_first_page(self):
        api = FakeEsplora(make_pages(30), chain_count=29, mempool_count=1)
        page = asyncio.run(make_fetcher(api).fetch_page(ME))

        assert len(page.transactions) == 25
        assert page.has_more
        assert page.last_seen_txid == "tx0024"
        assert page.total_txs == 30
        assert page.transactions[0].is_incoming
        assert api.requests == [f"/api/address/{ME}", f"/api/address/{ME}/txs"]

    def test_cursor_page(self):
        api = FakeEsplora(make_pages(30))
        page = asyncio.run(make_fetcher(api).fetch_page(ME, "tx0024"))

        assert api.requests[-1] == f"/api/address/{ME}/txs/chain/tx0024"
        assert [tx.hash for tx in page.transactions] == [f"tx{i:04d}" for i in range(25, 30)]
        assert not page.has_more
        assert page.last_seen_txid == ""

    def test_non_list_body_is_empty_page(self):
        def handler(request):
            if request.url.path.endswith("/txs"):
                return httpx.Response(200, json={"error": "unexpected"})
            return httpx.Response(200, json={"chain_stats": {"tx_count": 5}, "mempool_stats": {"tx_count": 0}})

        page = asyncio.run(make_fetcher(handler).fetch_page(ME))
        assert page.transactions == []
        assert not page.has_more
        assert page.total_txs == 0

    def test_http_error_raises_upstream_error(self):
        def handler(request):
            return httpx.Response(503, text="busy")

        with pytest.raises(UpstreamError):
            asyncio.run(make_fetcher(handler).fetch_page(ME))


class TestLoadAll:
    """Test the paginated loading loop"""

    def test_loads_every_page_in_order(self):
        api = FakeEsplora(make_pages(60))
        pages_seen = []

        txs = asyncio.run(make_fetcher(api).load_all(ME, asyncio.Event(), on_page=pages_seen.append))

        assert [tx.hash for tx in txs] == [f"tx{i:04d}" for i in range(60)]
        assert len(pages_seen) == 3

    def test_exact_multiple_of_page_size(self):
        api = FakeEsplora(make_pages(50))
        txs = asyncio.run(make_fetcher(api).load_all(ME))
        assert len(txs) == 50

    def test_max_pages_cap(self):
        api = FakeEsplora(make_pages(100))
        txs = asyncio.run(make_fetcher(api, max_pages=2).load_all(ME))
        assert len(txs) == 50

    def test_cancelled_before_start(self):
        api = FakeEsplora(make_pages(10))
        event = asyncio.Event()
        event.set()

        with pytest.raises(FetchCancelledError):
            asyncio.run(make_fetcher(api).load_all(ME, event))
        assert api.requests == []

    def test_cancelled_mid_load_returns_nothing(self):
        """Cancellation observed after a response discards the partial history"""
        api = FakeEsplora(make_pages(75))

        async def run():
            event = asyncio.Event()

            def cancel_on_second_page(cursor):
                if cursor:
                    event.set()

            api.on_txs = cancel_on_second_page
            return await make_fetcher(api).load_all(ME, event)

        with pytest.raises(FetchCancelledError):
            asyncio.run(run())
        assert sum(1 for path in api.requests if "/txs" in path) == 2

    def test_async_page_callback(self):
        api = FakeEsplora(make_pages(30))
        counts = []

        async def on_page(page):
            counts.append(len(page.transactions))

        asyncio.run(make_fetcher(api).load_all(ME, on_page=on_page))
        assert counts == [25, 5]


class TestSearchCoordinator:
    """Test that a new search supersedes the previous one"""

    def test_new_search_cancels_previous(self):
        pages = make_pages(5)

        async def run():
            gate = asyncio.Event()
            calls = {"count": 0}

            async def handler(request):
                path = request.url.path
                if path.endswith("/txs"):
                    calls["count"] += 1
                    if calls["count"] == 1:
                        # First search hangs until it is cancelled
                        await gate.wait()
                    return httpx.Response(200, json=pages[""])
                return httpx.Response(200, json={"chain_stats": {"tx_count": 5}, "mempool_stats": {"tx_count": 0}})

            coordinator = SearchCoordinator(make_fetcher(handler))
            first = asyncio.ensure_future(coordinator.search(ME))
            await asyncio.sleep(0.05)

            second = await coordinator.search(ME)

            with pytest.raises(FetchCancelledError):
                await first
            return second

        result = asyncio.run(run())
        assert [tx.hash for tx in result] == [f"tx{i:04d}" for i in range(5)]

    def test_process_wide_coordinator(self):
        assert get_search_coordinator() is get_search_coordinator()
        assert isinstance(get_search_coordinator(), SearchCoordinator)
