"""
Ledgerline - Browser Tool Definition and Executor

Defines the single "browser" tool and the BrowserToolExecutor that runs it.

Actions:
    navigate(url)        - Load a URL in the current tab (url/title only)
    open(url)            - Load a URL in a new tab that becomes active
    snapshot(maxChars?)  - Accessibility tree with clickable refs (e1, e2, ...)
    act(request)         - click / type / press / hover / scroll / wait
    read()               - Visible text of the main content region
    close()              - Release the browser

The executor owns a private event loop and bridges the async Playwright
calls into the synchronous tool loop.
"""

import asyncio
from typing import Any, Dict, Optional

from agency.tools.browser.dispatcher import ACT_KINDS, ACTIONS, BrowserActionDispatcher
from agency.tools.browser.session import (
    BrowserSession,
    close_all_browser_sessions,
    get_browser_session,
)


# =============================================================================
# TOOL DEFINITION (for the Anthropic API)
# =============================================================================

BROWSER_DESCRIPTION = """
Control a web browser to navigate websites and extract information.

## When to Use

- Accessing dynamic/JavaScript-rendered content that requires a real browser
- Multi-step web navigation (click links, fill search boxes)
- Interacting with SPAs or pages that require JavaScript to load content

## When NOT to Use

- Structured financial data (use the financial data tools instead)
- General knowledge questions

## CRITICAL: Navigate Returns NO Content

The `navigate` action only loads the page - it does NOT return page content.
You MUST call `snapshot` after navigate to see what's on the page.

## CRITICAL: Use Visible URLs - Do NOT Guess

When the snapshot shows a link with a URL (e.g., `/url: https://...`):
1. **Option A**: Click the link using its ref (e.g., act with kind="click", ref="e22")
2. **Option B**: Navigate directly to the URL shown in the snapshot

**NEVER make up or guess URLs based on common patterns.**

## Available Actions

- **navigate** - Navigate to a URL in the current tab (returns only url/title, no content)
- **open** - Open a URL in a NEW tab (previous tabs stay open)
- **snapshot** - See page structure with clickable refs (e.g., e1, e2, e3)
- **act** - Interact with elements using refs (click, type, press, hover, scroll, wait)
- **read** - Extract full text content from the page
- **close** - Free browser resources when done

## Workflow (MUST FOLLOW)

1. **navigate** or **open** - Load a URL
2. **snapshot** - See page structure with refs
3. **act** - Interact with elements using refs:
   - kind="click", ref="e5" - Click a link/button
   - kind="type", ref="e3", text="search query" - Replace an input's text
   - kind="press", key="Enter" - Press a key
   - kind="scroll", direction="down" - Scroll the page
4. **snapshot** again - Refs from an older snapshot may no longer be valid
5. **read** - Extract full text content from the page
6. **close** - Free browser resources when done

## Snapshot Format

- navigation [ref=e1]:
  - link "Home" [ref=e2]
  - link "Investors" [ref=e3]
- main:
  - heading "Welcome to Acme Corp" [ref=e5]
  - link "Q4 2024 Earnings" [ref=e6]

## Usage Notes

- Always call snapshot after navigate/open - they return only url/title
- After clicking, call snapshot again to see the new page
- The browser persists across calls - no need to re-navigate to the same URL
- Large pages are truncated; use read for the full text
""".strip()

BROWSER_TOOL: Dict[str, Any] = {
    "name": "browser",
    "description": (
        "Navigate websites, read content, and interact with pages. Use for accessing "
        "company websites, earnings reports, and dynamic content."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "action": {
                "type": "string",
                "enum": list(ACTIONS),
                "description": "The browser action to perform"
            },
            "url": {
                "type": "string",
                "description": "URL for navigate/open actions"
            },
            "maxChars": {
                "type": "integer",
                "description": "Max characters for snapshot (default 50000)"
            },
            "request": {
                "type": "object",
                "description": "Request object for act action",
                "properties": {
                    "kind": {
                        "type": "string",
                        "enum": list(ACT_KINDS),
                        "description": "The type of interaction"
                    },
                    "ref": {
                        "type": "string",
                        "description": "Element ref from snapshot (e.g., e12)"
                    },
                    "text": {
                        "type": "string",
                        "description": "Text for type action"
                    },
                    "key": {
                        "type": "string",
                        "description": "Key for press action (e.g., Enter, Tab)"
                    },
                    "direction": {
                        "type": "string",
                        "enum": ["up", "down"],
                        "description": "Scroll direction"
                    },
                    "timeMs": {
                        "type": "number",
                        "description": "Wait time in milliseconds (max 10000)"
                    }
                },
                "required": ["kind"]
            }
        },
        "required": ["action"]
    }
}


# =============================================================================
# BROWSER TOOL EXECUTOR
# =============================================================================

class BrowserToolExecutor:
    """
    Executes browser tool calls on a dedicated event loop.

    All calls must come from one thread, one at a time.
    """

    def __init__(
        self,
        event_loop: Optional[asyncio.AbstractEventLoop] = None,
        session: Optional[BrowserSession] = None
    ):
        """
        Args:
            event_loop: Loop for Playwright calls (a new one is created if omitted)
            session: Browser session (defaults to the registry's "default" session)
        """
        self._loop = event_loop or asyncio.new_event_loop()
        self._dispatcher = BrowserActionDispatcher(session or get_browser_session())

    @property
    def session(self) -> BrowserSession:
        return self._dispatcher.session

    def execute(self, tool_input: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one browser action synchronously.

        Args:
            tool_input: {"action", "url"?, "maxChars"?, "request"?}

        Returns:
            Result dict (errors are returned, not raised)
        """
        return self._loop.run_until_complete(self._dispatcher.dispatch(
            action=tool_input.get("action", ""),
            url=tool_input.get("url"),
            max_chars=tool_input.get("maxChars"),
            request=tool_input.get("request"),
        ))

    def close(self) -> None:
        """Tear down all browser sessions and release the event loop."""
        if self._loop.is_closed():
            return
        self._loop.run_until_complete(close_all_browser_sessions())
        self._loop.close()
