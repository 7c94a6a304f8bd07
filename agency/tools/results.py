"""
Ledgerline - Tool Result Envelope
Shapes tool payloads into the JSON text returned to the model.
"""

import json
from typing import Any, List, Optional


def format_tool_result(data: Any, source_urls: Optional[List[str]] = None) -> str:
    """
    Serialize a tool payload into the caller-visible envelope.

    Args:
        data: Arbitrary JSON-compatible payload (success or error dict)
        source_urls: URLs the data came from, surfaced for citation

    Returns:
        JSON string of the form {"data": ..., "sourceUrls": [...]}
    """
    envelope = {"data": data}
    if source_urls:
        envelope["sourceUrls"] = source_urls
    return json.dumps(envelope, ensure_ascii=False, default=str)
