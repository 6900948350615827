"""
Unit Tests for the Price Feed

These tests verify that upstream ticker batches:
- Update the price table and derive quote volume
- Trigger exactly one broadcast per batch with changes, none otherwise
- Are discarded as a whole when a tracked record is malformed

Run with:
    pytest tests/unit/test_price_feed.py -v
"""

import pytest
from unittest.mock import MagicMock

from services.price_feed import MalformedBatchError, PriceFeed
from storage.price_table import PriceTable


def ticker(symbol="ETHUSDT", last="2500.00", change="+50.00", percent="2.04", volume="1000"):
    return {"e": "24hrTicker", "s": symbol, "c": last, "p": change, "P": percent, "v": volume}


@pytest.fixture
def table():
    price_table = PriceTable()
    price_table.initialize(["eth", "sol", "wbtc"])
    return price_table


@pytest.fixture
def broadcaster():
    return MagicMock()


@pytest.fixture
def feed(table, broadcaster):
    return PriceFeed(table, broadcaster)


class TestHandleBatch:
    """Tests for applying batches"""

    def test_batch_updates_table(self, feed, table, broadcaster):
        assert feed.handle_batch([ticker()]) is True

        eth = table.get("eth")
        assert eth.price == 2500.0
        assert eth.price_change_24h == 50.0
        assert eth.price_change_percentage_24h == 2.04
        assert eth.volume_24h == pytest.approx(2_500_000.0)
        broadcaster.broadcast.assert_called_once()

    def test_one_broadcast_per_batch(self, feed, table, broadcaster):
        feed.handle_batch([ticker(), ticker("SOLUSDT", last="100.5")])

        assert feed.last_batch_changes == 2
        assert table.get("sol").price == 100.5
        assert broadcaster.broadcast.call_count == 1

    def test_no_change_no_broadcast(self, feed, broadcaster):
        feed.handle_batch([ticker()])
        broadcaster.reset_mock()

        assert feed.handle_batch([ticker(last="2500.0000001")]) is False
        broadcaster.broadcast.assert_not_called()
        assert feed.batches_processed == 2

    def test_untracked_symbols_ignored(self, feed, table, broadcaster):
        assert feed.handle_batch([ticker("DOGEUSDT", last="0.1")]) is False
        broadcaster.broadcast.assert_not_called()
        assert all(s.price == 0.0 for s in table.snapshot_all().values())

    def test_btc_prices_wbtc(self, feed, table):
        feed.handle_batch([ticker("BTCUSDT", last="43000")])
        assert table.get("wbtc").price == 43000.0

    def test_single_object_accepted(self, feed, table):
        feed.handle_batch(ticker())
        assert table.get("eth").price == 2500.0


class TestMalformedBatches:
    """Tests for discarding bad batches"""

    def test_malformed_tracked_record_discards_batch(self, feed, table, broadcaster):
        batch = [ticker("SOLUSDT", last="100"), ticker(last="not-a-number")]

        assert feed.handle_batch(batch) is False
        assert table.get("sol").price == 0.0
        assert feed.batches_discarded == 1
        broadcaster.broadcast.assert_not_called()

    def test_missing_field_discards_batch(self, feed):
        record = ticker()
        del record["c"]
        assert feed.handle_batch([record]) is False
        assert feed.batches_discarded == 1

    def test_malformed_untracked_record_ignored(self, feed, table):
        batch = [ticker("DOGEUSDT", last="garbage"), ticker()]
        assert feed.handle_batch(batch) is True
        assert table.get("eth").price == 2500.0

    @pytest.mark.parametrize("payload", ["hello", 42, None])
    def test_non_list_payload_discarded(self, feed, payload):
        assert feed.handle_batch(payload) is False
        assert feed.batches_discarded == 1

    def test_parse_batch_raises(self):
        with pytest.raises(MalformedBatchError):
            PriceFeed.parse_batch([ticker(volume="")])
