"""
Tests for the financial data API client, its cache and the finance tools.

HTTP is mocked at requests.get; the cache writes into a temp directory.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

import config
from agency.tools.errors import ToolErrorType, ToolFailure
from agency.tools.finance.api import FinancialApiError, call_api, strip_fields_deep
from agency.tools.finance.tools import get_company_news, get_segmented_revenues
from core.cache import cache_key, read_cache, write_cache


def make_response(data, url="https://api.financialdatasets.ai/news?ticker=AAPL", status=200):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.reason = "OK" if response.ok else "Not Found"
    response.url = url
    response.json.return_value = data
    return response


class FinanceTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.cache_dir = Path(self._tmp.name)
        self._patches = [
            patch.object(config, "FINANCIAL_CACHE_DIR", self.cache_dir),
            patch.dict(os.environ, {config.FINANCIAL_API_KEY_ENV: "test-key"}),
        ]
        for p in self._patches:
            p.start()

    def tearDown(self):
        for p in reversed(self._patches):
            p.stop()
        self._tmp.cleanup()


class TestCallApi(FinanceTestCase):

    @patch("agency.tools.finance.api.requests.get")
    def test_sends_key_and_repeated_list_params(self, mock_get):
        mock_get.return_value = make_response({"news": []})

        call_api("/news", {"ticker": "AAPL", "items": ["a", "b"], "cursor": None})

        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], f"{config.FINANCIAL_API_BASE_URL}/news")
        self.assertEqual(kwargs["headers"], {"x-api-key": "test-key"})
        self.assertEqual(kwargs["params"], [("ticker", "AAPL"), ("items", "a"), ("items", "b")])
        self.assertEqual(kwargs["timeout"], config.FINANCIAL_API_TIMEOUT)

    @patch("agency.tools.finance.api.requests.get")
    def test_returns_data_and_request_url(self, mock_get):
        mock_get.return_value = make_response({"news": [{"title": "x"}]})
        response = call_api("/news", {"ticker": "AAPL"})
        self.assertEqual(response.data, {"news": [{"title": "x"}]})
        self.assertEqual(response.url, "https://api.financialdatasets.ai/news?ticker=AAPL")

    @patch("agency.tools.finance.api.requests.get")
    def test_http_error_status(self, mock_get):
        mock_get.return_value = make_response({}, status=404)
        with self.assertRaises(FinancialApiError) as ctx:
            call_api("/news", {"ticker": "ZZZZ"})
        self.assertEqual(ctx.exception.error.error_type, ToolErrorType.UPSTREAM)
        self.assertIn("404 Not Found", ctx.exception.error.message)
        self.assertTrue(ctx.exception.error.message.startswith("[Financial Datasets API]"))

    @patch("agency.tools.finance.api.requests.get")
    def test_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with self.assertRaises(FinancialApiError) as ctx:
            call_api("/news", {"ticker": "AAPL"})
        self.assertIn("connection refused", ctx.exception.error.message)

    @patch("agency.tools.finance.api.requests.get")
    def test_invalid_json(self, mock_get):
        response = make_response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response
        with self.assertRaises(FinancialApiError) as ctx:
            call_api("/news", {"ticker": "AAPL"})
        self.assertIn("invalid JSON", ctx.exception.error.message)

    @patch("agency.tools.finance.api.requests.get")
    def test_cacheable_response_served_from_cache(self, mock_get):
        mock_get.return_value = make_response({"value": 1}, url="https://example/seg")

        first = call_api("/financials/segmented-revenues/", {"ticker": "AAPL"}, cacheable=True)
        second = call_api("/financials/segmented-revenues/", {"ticker": "AAPL"}, cacheable=True)

        self.assertEqual(mock_get.call_count, 1)
        self.assertEqual(second.data, first.data)
        self.assertEqual(second.url, "https://example/seg")

    @patch("agency.tools.finance.api.requests.get")
    def test_non_cacheable_always_fetches(self, mock_get):
        mock_get.return_value = make_response({"news": []})
        call_api("/news", {"ticker": "AAPL"})
        call_api("/news", {"ticker": "AAPL"})
        self.assertEqual(mock_get.call_count, 2)
        self.assertEqual(list(self.cache_dir.iterdir()), [])


class TestCache(FinanceTestCase):

    def test_key_ignores_param_order_and_none(self):
        self.assertEqual(
            cache_key("/x", {"a": 1, "b": 2}),
            cache_key("/x", {"b": 2, "a": 1, "c": None}),
        )
        self.assertNotEqual(cache_key("/x", {"a": 1}), cache_key("/y", {"a": 1}))

    def test_round_trip(self):
        self.assertIsNone(read_cache("/x", {"a": 1}))
        self.assertTrue(write_cache("/x", {"a": 1}, {"rows": [1, 2]}, "https://example/x"))
        self.assertEqual(read_cache("/x", {"a": 1}), {"data": {"rows": [1, 2]}, "url": "https://example/x"})

    def test_corrupt_entry_is_a_miss(self):
        path = self.cache_dir / f"{cache_key('/x', {'a': 1})}.json"
        path.write_text("{not json", encoding="utf-8")
        self.assertIsNone(read_cache("/x", {"a": 1}))


class TestStripFieldsDeep(unittest.TestCase):

    def test_strips_nested_keys(self):
        data = {
            "period": "annual",
            "items": [{"period": "q1", "revenue": 10, "meta": {"currency": "USD", "segment": "iPhone"}}],
        }
        self.assertEqual(
            strip_fields_deep(data, ["period", "currency"]),
            {"items": [{"revenue": 10, "meta": {"segment": "iPhone"}}]},
        )

    def test_scalars_untouched(self):
        self.assertEqual(strip_fields_deep(5, ["x"]), 5)


class TestFinanceTools(FinanceTestCase):

    @patch("agency.tools.finance.api.requests.get")
    def test_company_news_normalizes_input(self, mock_get):
        mock_get.return_value = make_response({"news": [{"title": "Apple beats"}]})

        news, urls = get_company_news({"ticker": "aapl", "limit": 50})

        self.assertEqual(news, [{"title": "Apple beats"}])
        self.assertEqual(urls, ["https://api.financialdatasets.ai/news?ticker=AAPL"])
        params = dict(mock_get.call_args[1]["params"])
        self.assertEqual(params["ticker"], "AAPL")
        self.assertEqual(params["limit"], str(config.FINANCIAL_NEWS_MAX_LIMIT))

    def test_company_news_requires_ticker(self):
        with self.assertRaises(ToolFailure) as ctx:
            get_company_news({})
        self.assertEqual(ctx.exception.error.error_type, ToolErrorType.MISSING_PARAMETER)

    @patch("agency.tools.finance.api.requests.get")
    def test_segmented_revenues_strips_redundant_fields(self, mock_get):
        mock_get.return_value = make_response(
            {"segmented_revenues": [{"period": "annual", "currency": "USD", "items": [{"amount": 1}]}]},
            url="https://api.financialdatasets.ai/financials/segmented-revenues/?ticker=AAPL",
        )

        segments, urls = get_segmented_revenues({"ticker": "AAPL", "period": "annual"})

        self.assertEqual(segments, [{"items": [{"amount": 1}]}])
        self.assertEqual(len(urls), 1)
        self.assertEqual(len(list(self.cache_dir.iterdir())), 1)

    def test_segmented_revenues_rejects_bad_period(self):
        with self.assertRaises(ToolFailure) as ctx:
            get_segmented_revenues({"ticker": "AAPL", "period": "ttm"})
        self.assertEqual(ctx.exception.error.error_type, ToolErrorType.VALIDATION)


if __name__ == "__main__":
    unittest.main()
