"""
Ledgerline - API Response Cache
File-backed JSON cache for immutable API responses.

Each entry is one JSON file named by a hash of the endpoint and its
sorted query parameters. Entries never expire; only mark a request
cacheable if its response cannot change (e.g., reported financials).
"""

import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import config
from core.logger import log_info, log_warning


def _normalize_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop empty params and sort list values so key order never matters."""
    normalized = {}
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = sorted(str(v) for v in value)
        normalized[key] = value
    return normalized


def describe_request(endpoint: str, params: Mapping[str, Any]) -> str:
    """
    Short human-readable label for logs.

    Example:
        describe_request("/news", {"ticker": "AAPL", "limit": 5})
        -> "/news ticker=AAPL limit=5"
    """
    parts = [endpoint]
    for key, value in _normalize_params(params).items():
        if isinstance(value, list):
            value = ",".join(value)
        parts.append(f"{key}={value}")
    return " ".join(parts)


def cache_key(endpoint: str, params: Mapping[str, Any]) -> str:
    """Stable hash of an endpoint and its parameters."""
    payload = json.dumps(
        {"endpoint": endpoint, "params": _normalize_params(params)},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _cache_path(endpoint: str, params: Mapping[str, Any], cache_dir: Optional[Path]) -> Path:
    return (cache_dir or config.FINANCIAL_CACHE_DIR) / f"{cache_key(endpoint, params)}.json"


def read_cache(
    endpoint: str,
    params: Mapping[str, Any],
    cache_dir: Optional[Path] = None
) -> Optional[Dict[str, Any]]:
    """
    Look up a cached response.

    Args:
        endpoint: API path (e.g., "/financials/segmented-revenues/")
        params: Query parameters of the request
        cache_dir: Override for the cache directory

    Returns:
        {"data": ..., "url": ...} if cached, else None.
        Unreadable entries are treated as misses.
    """
    path = _cache_path(endpoint, params, cache_dir)
    if not path.exists():
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            entry = json.load(f)
        log_info(f"Cache hit: {describe_request(endpoint, params)}", prefix="💾")
        return {"data": entry["data"], "url": entry["url"]}
    except (OSError, ValueError, KeyError) as e:
        log_warning(f"Ignoring unreadable cache entry {path.name}: {e}")
        return None


def write_cache(
    endpoint: str,
    params: Mapping[str, Any],
    data: Any,
    url: str,
    cache_dir: Optional[Path] = None
) -> bool:
    """
    Store a response.

    Returns:
        True if the entry was written
    """
    path = _cache_path(endpoint, params, cache_dir)
    entry = {
        "endpoint": endpoint,
        "params": _normalize_params(params),
        "url": url,
        "cached_at": datetime.now().isoformat(),
        "data": data,
    }

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(entry, f, indent=2, default=str)
        return True
    except OSError as e:
        log_warning(f"Failed to write cache entry for {describe_request(endpoint, params)}: {e}")
        return False
