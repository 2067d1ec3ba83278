"""Tests for transaction sorting, filtering and paging"""

import pytest
from cointrace.analysis.transaction_views import filter_transactions, paginate, sort_transactions
from cointrace.models.blockchain import Transaction


def make_tx(tx_hash, timestamp, value="0.00000000", fee="0.00000000", incoming=True, change_amount=None):
    return Transaction(
        hash=tx_hash,
        timestamp=timestamp,
        from_address="A",
        to_address="B",
        value=value,
        fee=fee,
        is_incoming=incoming,
        change_address="A" if change_amount else None,
        change_amount=change_amount,
    )


@pytest.fixture
def transactions():
    # Fetch order is not chronological
    return [
        make_tx("b", "2024-02-01T00:00:00Z", value="2.00000000", fee="0.00000300", incoming=False, change_amount="0.5"),
        make_tx("a", "2024-01-01T00:00:00Z", value="10.00000000", fee="0.00000100"),
        make_tx("c", "2024-03-01T00:00:00.000Z", value="0.50000000", fee="0.00000200", incoming=False),
    ]


class TestSort:
    """Test explicit sorting"""

    def test_timestamp_desc(self, transactions):
        result = sort_transactions(transactions, "timestamp", "desc")
        assert [tx.hash for tx in result] == ["c", "b", "a"]

    def test_timestamp_asc(self, transactions):
        result = sort_transactions(transactions, "timestamp", "asc")
        assert [tx.hash for tx in result] == ["a", "b", "c"]

    def test_value_is_numeric_not_lexical(self, transactions):
        result = sort_transactions(transactions, "value", "desc")
        assert [tx.hash for tx in result] == ["a", "b", "c"]

    def test_fee(self, transactions):
        result = sort_transactions(transactions, "fee", "asc")
        assert [tx.hash for tx in result] == ["a", "c", "b"]

    def test_change_amount_missing_sorts_as_zero(self, transactions):
        result = sort_transactions(transactions, "change_amount", "desc")
        assert result[0].hash == "b"

    def test_no_direction_keeps_order(self, transactions):
        result = sort_transactions(transactions, "value", None)
        assert [tx.hash for tx in result] == ["b", "a", "c"]

    def test_invalid_field(self, transactions):
        with pytest.raises(ValueError):
            sort_transactions(transactions, "hash", "asc")


class TestFilter:
    """Test direction and change filters"""

    def test_incoming_only(self, transactions):
        result = filter_transactions(transactions, incoming=True, outgoing=False)
        assert [tx.hash for tx in result] == ["a"]

    def test_outgoing_only(self, transactions):
        result = filter_transactions(transactions, incoming=False, outgoing=True)
        assert [tx.hash for tx in result] == ["b", "c"]

    def test_with_change(self, transactions):
        result = filter_transactions(transactions, with_change=True)
        assert [tx.hash for tx in result] == ["b"]

    def test_nothing_selected(self, transactions):
        assert filter_transactions(transactions, incoming=False, outgoing=False) == []


class TestPaginate:
    """Test page slicing"""

    def test_pages(self):
        txs = [make_tx(str(i), "2024-01-01T00:00:00Z") for i in range(30)]
        assert [tx.hash for tx in paginate(txs, 1, 25)] == [str(i) for i in range(25)]
        assert [tx.hash for tx in paginate(txs, 2, 25)] == [str(i) for i in range(25, 30)]
        assert paginate(txs, 3, 25) == []

    def test_invalid_page(self):
        with pytest.raises(ValueError):
            paginate([], 0, 25)
