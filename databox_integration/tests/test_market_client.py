import copy
import datetime as dt
import unittest
from unittest.mock import Mock, patch

import requests

from databox_integration.config import AppSettings
from databox_integration.errors import FetchError, PayloadError, UpstreamError
from databox_integration.ingestion import MarketstackClient, RecordStamper
from databox_integration.ingestion.market import MARKET_DEFAULTS


def _bar(**overrides) -> dict:
    bar = {
        "symbol": "AAPL",
        "date": "2024-01-15T00:00:00+0000",
        "open": 150.5,
        "high": 155.75,
        "low": 149.25,
        "close": 154.0,
        "volume": 50000000,
    }
    bar.update(overrides)
    return bar


class TestMarketstackClient(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = AppSettings(_env_file=None, marketstack_api_key="test-key")
        self.calls = 0

        def clock() -> dt.datetime:
            # Advances on every read; a batch must still share one value
            self.calls += 1
            return dt.datetime(2024, 1, 15, 12, 0, self.calls, tzinfo=dt.timezone.utc)

        ids = iter(f"id-{i}" for i in range(100))
        self.client = MarketstackClient(
            self.settings, stamper=RecordStamper(clock=clock, id_factory=lambda: next(ids))
        )

    def _fake_response(self, payload, status_code: int = 200) -> Mock:
        m = Mock()
        m.status_code = status_code
        m.json.return_value = payload
        return m

    def test_build_url(self) -> None:
        self.assertEqual(
            self.client.build_url("AAPL,MSFT", 3),
            "http://api.marketstack.com/v1/eod?access_key=test-key&symbols=AAPL,MSFT&limit=3",
        )
        self.assertEqual(self.client.build_url(["AAPL", "MSFT"], 3), self.client.build_url("AAPL,MSFT", 3))

    @patch("requests.Session.get")
    def test_get_market_data_happy_path(self, mock_get: Mock) -> None:
        mock_get.return_value = self._fake_response(
            {"data": [_bar(), _bar(symbol="MSFT", date="2024-01-12T00:00:00+0000", volume=1200)]}
        )

        records = self.client.get_market_data("AAPL,MSFT", 2)

        mock_get.assert_called_once_with(
            "http://api.marketstack.com/v1/eod?access_key=test-key&symbols=AAPL,MSFT&limit=2",
            timeout=30.0,
        )
        self.assertEqual(len(records), 2)
        aapl, msft = records
        self.assertEqual(aapl.symbol, "AAPL")
        self.assertEqual(aapl.date, "2024-01-15T00:00:00+0000")
        self.assertEqual((aapl.open, aapl.high, aapl.low, aapl.close), (150.5, 155.75, 149.25, 154.0))
        self.assertEqual(aapl.volume, 50000000)
        self.assertEqual(msft.symbol, "MSFT")
        self.assertEqual(msft.volume, 1200)

    def test_batch_shares_occurred_at_but_not_ids(self) -> None:
        records = self.client.parse({"data": [_bar(), _bar(), _bar()]})
        self.assertEqual(len({r.occurred_at for r in records}), 1)
        self.assertEqual(len({r.id for r in records}), 3)
        self.assertEqual(records[0].occurred_at, "2024-01-15T12:00:01.000000Z")

    def test_empty_data_is_empty_list(self) -> None:
        self.assertEqual(self.client.parse({"data": []}), [])

    @patch("requests.Session.get")
    def test_empty_data_via_fetch_is_not_an_error(self, mock_get: Mock) -> None:
        mock_get.return_value = self._fake_response({"data": []})
        self.assertEqual(self.client.get_market_data("ZZZZ"), [])

    def test_missing_data_is_a_payload_error(self) -> None:
        with self.assertRaises(PayloadError) as ctx:
            self.client.parse({"pagination": {}})
        self.assertEqual(ctx.exception.field, "data")

    def test_null_fields_default(self) -> None:
        rec = self.client.parse(
            {"data": [_bar(symbol=None, date=None, open=None, high=None, low=None, close=None, volume=None)]}
        )[0]
        self.assertEqual(rec.symbol, "")
        self.assertEqual(rec.date, "")
        self.assertEqual((rec.open, rec.high, rec.low, rec.close), (0.0, 0.0, 0.0, 0.0))
        self.assertEqual(rec.volume, 0)

    def test_volume_non_numeric_defaults_and_numeric_truncates(self) -> None:
        records = self.client.parse({"data": [_bar(volume="n/a"), _bar(volume=1234.9)]})
        self.assertEqual(records[0].volume, 0)
        self.assertEqual(records[1].volume, 1234)

    def test_non_numeric_price_is_a_payload_error(self) -> None:
        with self.assertRaises(PayloadError) as ctx:
            self.client.parse({"data": [_bar(close="154.00")]})
        self.assertEqual(ctx.exception.field, "data[0].close")

    def test_default_table(self) -> None:
        self.assertEqual(MARKET_DEFAULTS["open"], 0.0)
        self.assertEqual(MARKET_DEFAULTS["volume"], 0)
        self.assertEqual(MARKET_DEFAULTS["symbol"], "")

    def test_parse_does_not_mutate_input(self) -> None:
        payload = {"data": [_bar(open=None)]}
        snapshot = copy.deepcopy(payload)
        self.client.parse(payload)
        self.assertEqual(payload, snapshot)

    @patch("requests.Session.get")
    def test_invalid_limit_rejected_before_request(self, mock_get: Mock) -> None:
        for bad in (0, -1, True):
            with self.assertRaises(ValueError):
                self.client.get_market_data("AAPL", bad)
        mock_get.assert_not_called()

    @patch("requests.Session.get")
    def test_error_body_on_401_raises_upstream_error(self, mock_get: Mock) -> None:
        mock_get.return_value = self._fake_response(
            {"error": {"code": "invalid_access_key", "message": "You have not supplied a valid API Access Key."}},
            status_code=401,
        )
        with self.assertRaises(UpstreamError) as ctx:
            self.client.get_market_data("AAPL")
        self.assertEqual(ctx.exception.code, "invalid_access_key")
        self.assertIsInstance(ctx.exception, FetchError)

    @patch("requests.Session.get")
    def test_malformed_element_raises_fetch_error(self, mock_get: Mock) -> None:
        mock_get.return_value = self._fake_response({"data": ["AAPL"]})
        with self.assertRaises(FetchError):
            self.client.get_market_data("AAPL")


    @patch("requests.Session.get")
    def test_invalid_json_raises_fetch_error(self, mock_get: Mock) -> None:
        m = self._fake_response(None)
        m.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
        mock_get.return_value = m
        with self.assertRaises(FetchError) as ctx:
            self.client.get_market_data("AAPL")
        self.assertIn("invalid JSON", ctx.exception.message)

    @patch("requests.Session.get")
    def test_transport_error_raises_fetch_error(self, mock_get: Mock) -> None:
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(FetchError) as ctx:
            self.client.get_market_data("AAPL")
        self.assertEqual(ctx.exception.service, "Marketstack")
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    @patch("requests.Session.get")
    def test_nan_and_infinity_tokens_raise_fetch_error(self, mock_get: Mock) -> None:
        resp = requests.Response()
        resp.status_code = 200
        resp.encoding = "utf-8"
        resp._content = (
            b'{"data": [{"symbol": "AAPL", "date": "2024-01-15T00:00:00+0000",'
            b' "open": NaN, "high": Infinity, "low": -Infinity, "close": 1.0, "volume": 10}]}'
        )
        mock_get.return_value = resp
        with self.assertRaises(FetchError) as ctx:
            self.client.get_market_data("AAPL")
        self.assertIn("invalid JSON", ctx.exception.message)

    def test_non_finite_price_is_a_payload_error(self) -> None:
        for value in (float("nan"), float("inf"), float("-inf")):
            with self.assertRaises(PayloadError) as ctx:
                self.client.parse({"data": [_bar(high=value)]})
            self.assertEqual(ctx.exception.field, "data[0].high")


if __name__ == "__main__":
    unittest.main()
