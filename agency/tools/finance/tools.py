"""
Ledgerline - Financial Data Tool Definitions

Thin wrappers over the financial data API. Each tool returns
(payload, source_urls) for the result envelope.
"""

from typing import Any, Dict, List, Tuple

import config
from agency.tools.errors import ToolFailure
from agency.tools.finance.api import call_api, strip_fields_deep

REDUNDANT_FINANCIAL_FIELDS = ("accession_number", "currency", "period")
REPORTING_PERIODS = ("annual", "quarterly")


# =============================================================================
# TOOL DEFINITIONS (for the Anthropic API)
# =============================================================================

COMPANY_NEWS_TOOL: Dict[str, Any] = {
    "name": "get_company_news",
    "description": (
        "Retrieves recent company news headlines for a stock ticker, including title, "
        "source, publication date, and URL. Use for company catalysts, price move "
        "explanations, press releases, and recent announcements."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "ticker": {
                "type": "string",
                "description": "The stock ticker symbol to fetch company news for. For example, 'AAPL' for Apple."
            },
            "limit": {
                "type": "integer",
                "description": "Maximum number of news articles to return (default: 5, max: 10)."
            }
        },
        "required": ["ticker"]
    }
}

SEGMENTED_REVENUES_TOOL: Dict[str, Any] = {
    "name": "get_segmented_revenues",
    "description": (
        "Provides a detailed breakdown of a company's revenue by operating segments, "
        "such as products, services, or geographic regions. Useful for analyzing the "
        "composition of a company's revenue."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "ticker": {
                "type": "string",
                "description": "The stock ticker symbol to fetch segmented revenues for. For example, 'AAPL' for Apple."
            },
            "period": {
                "type": "string",
                "enum": list(REPORTING_PERIODS),
                "description": "'annual' for yearly, 'quarterly' for quarterly."
            },
            "limit": {
                "type": "integer",
                "description": "The number of past periods to retrieve (default: 4)."
            }
        },
        "required": ["ticker", "period"]
    }
}

FINANCE_DESCRIPTION = """
Look up company news and revenue breakdowns from the financial data API.

## Available Tools

- **get_company_news** - Recent headlines for a ticker (max 10)
- **get_segmented_revenues** - Revenue by product/service/geography segment

## Usage Notes

- Tickers are case-insensitive (e.g., "aapl" or "AAPL")
- Each result includes the source URL for citation
""".strip()


# =============================================================================
# TOOL HANDLERS
# =============================================================================

def _require_ticker(tool_input: Dict[str, Any]) -> str:
    ticker = str(tool_input.get("ticker") or "").strip()
    if not ticker:
        raise ToolFailure.missing("ticker is required", example='"ticker": "AAPL"')
    return ticker.upper()


def get_company_news(tool_input: Dict[str, Any]) -> Tuple[List[Any], List[str]]:
    """Fetch recent news for a ticker (never cached - news changes)."""
    params = {
        "ticker": _require_ticker(tool_input),
        "limit": min(int(tool_input.get("limit") or 5), config.FINANCIAL_NEWS_MAX_LIMIT),
    }
    response = call_api("/news", params)
    return response.data.get("news") or [], [response.url]


def get_segmented_revenues(tool_input: Dict[str, Any]) -> Tuple[Any, List[str]]:
    """Fetch segmented revenues; reported periods are immutable, so responses are cached."""
    period = tool_input.get("period")
    if period not in REPORTING_PERIODS:
        raise ToolFailure.invalid(
            f"Invalid period: {period}",
            expected_format='"period": "annual" or "quarterly"',
        )

    params = {
        "ticker": _require_ticker(tool_input),
        "period": period,
        "limit": int(tool_input.get("limit") or 4),
    }
    response = call_api("/financials/segmented-revenues/", params, cacheable=True)
    segments = strip_fields_deep(response.data.get("segmented_revenues") or {}, REDUNDANT_FINANCIAL_FIELDS)
    return segments, [response.url]
