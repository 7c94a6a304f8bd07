"""
Ledgerline - Financial Datasets API Client
Parameterized GET requests against https://api.financialdatasets.ai

Auth: x-api-key header from FINANCIAL_DATASETS_API_KEY (read at call time,
after dotenv has loaded). Responses for immutable data can be cached
locally via core.cache.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import requests

import config
from agency.tools.errors import ToolError, ToolErrorType, ToolFailure
from core.cache import describe_request, read_cache, write_cache
from core.logger import log_warning, log_error

LOG_PREFIX = "[Financial Datasets API]"


class FinancialApiError(ToolFailure):
    """The financial data API could not be reached or returned an error."""

    def __init__(self, message: str):
        super().__init__(ToolError(ToolErrorType.UPSTREAM, f"{LOG_PREFIX} {message}"))


@dataclass
class ApiResponse:
    """Parsed JSON body and the exact URL it came from."""
    data: Dict[str, Any]
    url: str


def strip_fields_deep(value: Any, fields: Iterable[str]) -> Any:
    """
    Remove redundant keys anywhere in a JSON-like structure.

    Trims token usage before payloads are returned to the model.
    """
    fields_to_strip = set(fields)

    def walk(node: Any) -> Any:
        if isinstance(node, list):
            return [walk(item) for item in node]
        if isinstance(node, dict):
            return {
                key: walk(child)
                for key, child in node.items()
                if key not in fields_to_strip
            }
        return node

    return walk(value)


def _query_pairs(params: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """Flatten params into query pairs; lists repeat the key, None is dropped."""
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, str(v)) for v in value)
        else:
            pairs.append((key, str(value)))
    return pairs


def call_api(
    endpoint: str,
    params: Mapping[str, Any],
    cacheable: bool = False
) -> ApiResponse:
    """
    GET an endpoint of the financial data API.

    Args:
        endpoint: API path (e.g., "/news")
        params: Query parameters (lists repeat the key, None values are dropped)
        cacheable: Serve from / store to the local cache

    Returns:
        ApiResponse with parsed JSON data and the request URL

    Raises:
        FinancialApiError: Network failure, non-2xx status, or invalid JSON
    """
    label = describe_request(endpoint, params)

    # Check local cache first - avoids redundant network calls for immutable data
    if cacheable:
        cached = read_cache(endpoint, params)
        if cached:
            return ApiResponse(data=cached["data"], url=cached["url"])

    api_key = os.getenv(config.FINANCIAL_API_KEY_ENV, "")
    if not api_key:
        log_warning(f"{LOG_PREFIX} call without key: {label}")

    try:
        response = requests.get(
            f"{config.FINANCIAL_API_BASE_URL}{endpoint}",
            params=_query_pairs(params),
            headers={"x-api-key": api_key},
            timeout=config.FINANCIAL_API_TIMEOUT,
        )
    except requests.RequestException as e:
        log_error(f"{LOG_PREFIX} network error: {label} - {e}")
        raise FinancialApiError(f"request failed for {label}: {e}")

    if not response.ok:
        detail = f"{response.status_code} {response.reason}"
        log_error(f"{LOG_PREFIX} error: {label} - {detail}")
        raise FinancialApiError(f"request failed: {detail}")

    try:
        data = response.json()
    except ValueError:
        detail = f"invalid JSON ({response.status_code} {response.reason})"
        log_error(f"{LOG_PREFIX} parse error: {label} - {detail}")
        raise FinancialApiError(f"request failed: {detail}")

    # Persist for future requests when the caller marked the response as cacheable
    if cacheable:
        write_cache(endpoint, params, data, response.url)

    return ApiResponse(data=data, url=response.url)
