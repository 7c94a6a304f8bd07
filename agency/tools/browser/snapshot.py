"""
Ledgerline - Accessibility Snapshot Grammar

Captures the page's accessibility tree as text, rebuilds the ref table
from it, and truncates the text for transport.

Snapshot line grammar (one node per line):

    <indent>- <role> ["<accessible name>"] [ref=e<digits>] [nth=<digits>] ...

Example:

    - navigation [ref=e1]:
      - link "Home" [ref=e2]
      - button "Search" [ref=e7] [nth=2]

Two capture paths produce this format. aria_snapshot(mode="ai")
assigns refs that Playwright's "aria-ref=" selector engine can resolve later;
the default aria_snapshot() serialization is used when AI mode is not
available in the installed driver. The provider is chosen once per session.
"""

import inspect
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from playwright.async_api import Locator

import config
from agency.tools.browser.refs import RefEntry, RefTable
from core.logger import log_info

TRUNCATION_MARKER = "\n\n[...TRUNCATED - page too large, use read action for full text]"

_REF_RE = re.compile(r"\[ref=(e\d+)\]")
_ROLE_RE = re.compile(r"^\s*-\s*(\w+)")
_NAME_RE = re.compile(r'"([^"]+)"')
_NTH_RE = re.compile(r"\[nth=(\d+)\]")


@dataclass
class SnapshotResult:
    """Serialized tree text and whether it was cut at the character limit."""
    text: str
    truncated: bool


# =============================================================================
# GRAMMAR
# =============================================================================

def parse_ref_line(line: str) -> Optional[Tuple[str, RefEntry]]:
    """
    Parse one snapshot line.

    Returns:
        (ref_id, RefEntry) if the line carries a [ref=eN] marker, else None
    """
    ref_match = _REF_RE.search(line)
    if not ref_match:
        return None

    role_match = _ROLE_RE.match(line)
    name_match = _NAME_RE.search(line)
    nth_match = _NTH_RE.search(line)

    entry = RefEntry(
        role=role_match.group(1) if role_match else "generic",
        name=name_match.group(1) if name_match else None,
        nth=int(nth_match.group(1)) if nth_match else None,
    )
    return ref_match.group(1), entry


def parse_refs(snapshot_text: str) -> Dict[str, RefEntry]:
    """
    Build a fresh ref mapping from snapshot text.

    Later lines win when the same ref appears more than once.
    """
    refs: Dict[str, RefEntry] = {}
    for line in snapshot_text.split("\n"):
        parsed = parse_ref_line(line)
        if parsed is None:
            continue
        ref_id, entry = parsed
        refs[ref_id] = entry
    return refs


def truncate_snapshot(snapshot_text: str, max_chars: Optional[int] = None) -> SnapshotResult:
    """
    Cut the snapshot at max_chars and append the truncation marker.

    The marker is not counted against the limit.
    """
    limit = config.BROWSER_SNAPSHOT_MAX_CHARS if max_chars is None else max_chars
    if len(snapshot_text) > limit:
        return SnapshotResult(text=snapshot_text[:limit] + TRUNCATION_MARKER, truncated=True)
    return SnapshotResult(text=snapshot_text, truncated=False)


# =============================================================================
# CAPTURE PROVIDERS
# =============================================================================

class SnapshotProvider(ABC):
    """Source of snapshot text for a page."""

    name: str = "base"

    @abstractmethod
    async def capture_text(self, page: Any) -> str:
        """Return the page's accessibility tree in the snapshot line grammar."""


class AIModeSnapshotProvider(SnapshotProvider):
    """Playwright's AI-mode snapshot, which carries resolvable [ref=eN] markers."""

    name = "ai"

    async def capture_text(self, page: Any) -> str:
        text = await page.locator(":root").aria_snapshot(
            mode="ai",
            timeout=config.BROWSER_SNAPSHOT_TIMEOUT_MS,
        )
        return text or ""


class AriaSnapshotProvider(SnapshotProvider):
    """Default ARIA serialization of the document root (no refs)."""

    name = "aria"

    async def capture_text(self, page: Any) -> str:
        text = await page.locator(":root").aria_snapshot(timeout=config.BROWSER_SNAPSHOT_TIMEOUT_MS)
        return text or ""


def supports_ai_mode(locator_class: Any) -> bool:
    """True if the driver's aria_snapshot() accepts mode="ai"."""
    aria_snapshot = getattr(locator_class, "aria_snapshot", None)
    if not callable(aria_snapshot):
        return False
    try:
        return "mode" in inspect.signature(aria_snapshot).parameters
    except (TypeError, ValueError):
        return False


def select_snapshot_provider(locator_class: Any = None) -> SnapshotProvider:
    """
    Choose the richest snapshot capability the installed driver supports.

    Args:
        locator_class: Locator type to inspect (defaults to playwright's async Locator)

    Returns:
        AIModeSnapshotProvider if aria_snapshot() takes a mode,
        otherwise AriaSnapshotProvider
    """
    if locator_class is None:
        locator_class = Locator

    if supports_ai_mode(locator_class):
        return AIModeSnapshotProvider()
    return AriaSnapshotProvider()


async def capture_snapshot(
    page: Any,
    provider: SnapshotProvider,
    ref_table: RefTable,
    max_chars: Optional[int] = None
) -> SnapshotResult:
    """
    Capture the page tree, replace the ref table, and truncate for transport.

    Args:
        page: Playwright Page
        provider: Snapshot capability selected for the session
        ref_table: The session's ref table (replaced, never merged)
        max_chars: Truncation limit (defaults to BROWSER_SNAPSHOT_MAX_CHARS)

    Returns:
        SnapshotResult with the possibly truncated text
    """
    snapshot_text = await provider.capture_text(page)

    # Refs come from the full text, so refs past the cut are still resolvable
    ref_table.replace(parse_refs(snapshot_text))

    result = truncate_snapshot(snapshot_text, max_chars)
    log_info(
        f"Snapshot captured via {provider.name} ({len(snapshot_text)} chars, "
        f"{len(ref_table)} refs{', truncated' if result.truncated else ''})",
        prefix="🌐"
    )
    return result
