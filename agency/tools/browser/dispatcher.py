"""
Ledgerline - Browser Action Dispatcher

Runs one browser tool action against a BrowserSession and shapes the
result dict. Every action goes through dispatch(), which turns any failure
into a structured error result instead of raising.

Two timeout tiers:
- Hard bounds (navigation, element interaction): expiry is an action failure.
- Settle waits (network idle after an action): advisory, see settle_network_idle().
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from playwright.async_api import Error as PlaywrightError

import config
from agency.tools.browser.resolver import RefResolver
from agency.tools.browser.session import BrowserSession
from agency.tools.browser.snapshot import capture_snapshot
from agency.tools.errors import ToolError, ToolErrorType, ToolFailure
from core.logger import log_info, log_error, log_debug

ERROR_PREFIX = "[Browser]"

ACTIONS = ("navigate", "open", "snapshot", "act", "read", "close")
ACT_KINDS = ("click", "type", "press", "hover", "scroll", "wait")
SCROLL_DIRECTIONS = ("up", "down")

NAVIGATE_HINT = "Page loaded. Call snapshot to see page structure and find elements to interact with."
OPEN_HINT = "New tab opened. Call snapshot to see page structure and find elements to interact with."
SNAPSHOT_HINT = (
    'Use act with kind="click" and ref="eN" to click elements. '
    "Or navigate directly to a /url visible in the snapshot."
)
CLICK_HINT = "Click successful. Call snapshot to see the updated page."

# Returns the innerText of the first matching content container, else <body>
_READ_CONTENT_JS = """(selectors) => {
    for (const selector of selectors) {
        const element = document.querySelector(selector);
        if (element) {
            return element.innerText;
        }
    }
    return document.body ? document.body.innerText : "";
}"""


class BrowserToolError(ToolFailure):
    """Structured failure raised inside browser action handlers."""


class InteractionFailure(BrowserToolError):
    """A hard-bounded driver call failed or timed out."""

    def __init__(self, action: str, target: str, cause: Exception):
        message = f"{action} failed for {target}: {cause}" if target else f"{action} failed: {cause}"
        super().__init__(ToolError(ToolErrorType.INTERACTION, message))
        self.cause = cause


@dataclass
class ActionRequest:
    """One interaction for the "act" action."""
    kind: str
    ref: Optional[str] = None
    text: Optional[str] = None
    key: Optional[str] = None
    direction: Optional[str] = None
    time_ms: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ActionRequest":
        """
        Build a request from the wire shape {kind, ref, text, key, direction, timeMs}.

        Raises:
            BrowserToolError: If the payload is not an object or lacks a kind
        """
        if not isinstance(data, dict):
            raise BrowserToolError(ToolError(
                ToolErrorType.VALIDATION,
                "request must be an object",
                expected_format='{"kind": "click", "ref": "e12"}',
            ))
        kind = data.get("kind")
        if not kind:
            raise BrowserToolError.missing("kind is required in request", example='{"kind": "press", "key": "Enter"}')
        return cls(
            kind=kind,
            ref=data.get("ref"),
            text=data.get("text"),
            key=data.get("key"),
            direction=data.get("direction"),
            time_ms=data.get("timeMs"),
        )

    def validate(self) -> None:
        """
        Check kind-specific required fields before any driver call.

        Raises:
            BrowserToolError: MISSING_PARAMETER, VALIDATION or UNKNOWN_ACTION
        """
        if self.kind not in ACT_KINDS:
            raise BrowserToolError(ToolError(
                ToolErrorType.UNKNOWN_ACTION,
                f"Unknown act kind: {self.kind}",
                expected_format=f"one of {', '.join(ACT_KINDS)}",
            ))
        if self.kind in ("click", "type", "hover") and not self.ref:
            raise BrowserToolError.missing(f"ref is required for {self.kind}", example='"ref": "e12"')
        if self.kind == "type" and self.text is None:
            raise BrowserToolError.missing("text is required for type", example='"text": "earnings"')
        if self.kind == "press" and not self.key:
            raise BrowserToolError.missing("key is required for press", example='"key": "Enter"')
        if self.kind == "scroll" and self.direction is not None and self.direction not in SCROLL_DIRECTIONS:
            raise BrowserToolError.invalid(
                f"Invalid scroll direction: {self.direction}",
                expected_format='"direction": "up" or "down"',
            )
        if self.kind == "wait" and self.time_ms is not None:
            if isinstance(self.time_ms, bool) or not isinstance(self.time_ms, (int, float)):
                raise BrowserToolError.invalid("timeMs must be a number", expected_format='"timeMs": 2000')


async def settle_network_idle(page: Any, timeout_ms: int) -> bool:
    """
    Best-effort wait for network idle.

    Args:
        page: Playwright Page
        timeout_ms: Upper bound for the wait

    Returns:
        True if the page went idle, False if the wait timed out or the
        driver gave up (never raises for driver errors)
    """
    try:
        await page.wait_for_load_state("networkidle", timeout=timeout_ms)
        return True
    except PlaywrightError as e:
        log_debug(f"Network idle wait skipped after {timeout_ms}ms: {e}")
        return False


class BrowserActionDispatcher:
    """
    Routes browser tool actions to handlers.

    The caller is expected to issue one action at a time and await it.
    """

    def __init__(self, session: BrowserSession):
        self._session = session
        self._resolver = RefResolver(session.ref_table)
        self._handlers = {
            "navigate": self._navigate,
            "open": self._open,
            "snapshot": self._snapshot,
            "act": self._act,
            "read": self._read,
            "close": self._close,
        }
        self._act_handlers = {
            "click": self._act_click,
            "type": self._act_type,
            "press": self._act_press,
            "hover": self._act_hover,
            "scroll": self._act_scroll,
            "wait": self._act_wait,
        }

    @property
    def session(self) -> BrowserSession:
        return self._session

    async def dispatch(
        self,
        action: str,
        url: Optional[str] = None,
        max_chars: Optional[int] = None,
        request: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Execute a browser action.

        Args:
            action: One of navigate, open, snapshot, act, read, close
            url: Target URL for navigate/open
            max_chars: Snapshot truncation limit
            request: Interaction request for act

        Returns:
            Result dict; failures carry "error" and "errorType" keys
        """
        try:
            handler = self._handlers.get(action) if isinstance(action, str) else None
            if handler is None:
                raise BrowserToolError(ToolError(
                    ToolErrorType.UNKNOWN_ACTION,
                    f"Unknown action: {action}",
                    expected_format=f"one of {', '.join(ACTIONS)}",
                ))
            return await handler(url=url, max_chars=max_chars, request=request)
        except ToolFailure as e:
            return self._error_result(action, e.error)
        except PlaywrightError as e:
            return self._error_result(action, ToolError(ToolErrorType.INTERACTION, f"{action} failed: {e}"))
        except Exception as e:
            return self._error_result(action, ToolError(ToolErrorType.SYSTEM_ERROR, str(e)))

    def _error_result(self, action: str, error: ToolError) -> Dict[str, Any]:
        message = f"{ERROR_PREFIX} {error.message}"
        log_error(f"Browser {action} error: {error.message}")
        result: Dict[str, Any] = {"error": message, "errorType": error.error_type.value}
        if error.expected_format:
            result["expected"] = error.expected_format
        if error.example:
            result["example"] = error.example
        return result

    # =========================================================================
    # TOP-LEVEL ACTIONS
    # =========================================================================

    async def _navigate(self, url: Optional[str], **_: Any) -> Dict[str, Any]:
        if not url:
            raise BrowserToolError.missing("url is required for navigate action")

        page = await self._session.ensure()
        await self._goto(page, url, "navigate")
        log_info(f"Navigated to {page.url}", prefix="🌐")
        return {
            "ok": True,
            "url": page.url,
            "title": await page.title(),
            "hint": NAVIGATE_HINT,
        }

    async def _open(self, url: Optional[str], **_: Any) -> Dict[str, Any]:
        if not url:
            raise BrowserToolError.missing("url is required for open action")

        page = await self._session.open_page()
        await self._goto(page, url, "open")
        log_info(f"Opened new tab at {page.url} ({len(self._session.pages)} open)", prefix="🌐")
        return {
            "ok": True,
            "url": page.url,
            "title": await page.title(),
            "hint": OPEN_HINT,
        }

    async def _goto(self, page: Any, url: str, action: str) -> None:
        try:
            await page.goto(
                url,
                timeout=config.BROWSER_NAVIGATION_TIMEOUT_MS,
                wait_until="networkidle",
            )
        except PlaywrightError as e:
            raise InteractionFailure(action, url, e)

    async def _snapshot(self, max_chars: Optional[int], **_: Any) -> Dict[str, Any]:
        page = await self._session.ensure()
        await settle_network_idle(page, config.BROWSER_SETTLE_MS)

        result = await capture_snapshot(
            page,
            self._session.snapshot_provider,
            self._session.ref_table,
            max_chars,
        )
        ref_table = self._session.ref_table
        return {
            "url": page.url,
            "title": await page.title(),
            "snapshot": result.text,
            "truncated": result.truncated,
            "refCount": len(ref_table),
            "refs": ref_table.to_dict(),
            "hint": SNAPSHOT_HINT,
        }

    async def _act(self, request: Optional[Dict[str, Any]], **_: Any) -> Dict[str, Any]:
        if request is None:
            raise BrowserToolError.missing(
                "request is required for act action",
                example='{"kind": "click", "ref": "e12"}',
            )

        act_request = ActionRequest.from_dict(request)
        act_request.validate()

        page = await self._session.ensure()
        return await self._act_handlers[act_request.kind](page, act_request)

    async def _read(self, **_: Any) -> Dict[str, Any]:
        page = await self._session.ensure()
        await settle_network_idle(page, config.BROWSER_SETTLE_MS)

        content = await page.evaluate(_READ_CONTENT_JS, list(config.BROWSER_READ_SELECTORS))
        return {
            "url": page.url,
            "title": await page.title(),
            "content": content,
        }

    async def _close(self, **_: Any) -> Dict[str, Any]:
        await self._session.teardown()
        return {"ok": True, "message": "Browser closed"}

    # =========================================================================
    # ACT KINDS
    # =========================================================================

    async def _act_click(self, page: Any, request: ActionRequest) -> Dict[str, Any]:
        target = self._resolver.resolve(request.ref)
        try:
            await target.locate(page).click(timeout=config.BROWSER_ACTION_TIMEOUT_MS)
        except PlaywrightError as e:
            raise InteractionFailure("click", request.ref, e)

        log_info(f"Clicked {request.ref} ({target.describe()})", prefix="🖱️")
        await settle_network_idle(page, config.BROWSER_CLICK_SETTLE_MS)
        return {"ok": True, "clicked": request.ref, "hint": CLICK_HINT}

    async def _act_type(self, page: Any, request: ActionRequest) -> Dict[str, Any]:
        target = self._resolver.resolve(request.ref)
        try:
            # fill() replaces the current value rather than appending
            await target.locate(page).fill(request.text, timeout=config.BROWSER_ACTION_TIMEOUT_MS)
        except PlaywrightError as e:
            raise InteractionFailure("type", request.ref, e)

        return {"ok": True, "ref": request.ref, "typed": request.text}

    async def _act_press(self, page: Any, request: ActionRequest) -> Dict[str, Any]:
        try:
            await page.keyboard.press(request.key)
        except PlaywrightError as e:
            raise InteractionFailure("press", request.key, e)

        await settle_network_idle(page, config.BROWSER_SETTLE_MS)
        return {"ok": True, "pressed": request.key}

    async def _act_hover(self, page: Any, request: ActionRequest) -> Dict[str, Any]:
        target = self._resolver.resolve(request.ref)
        try:
            await target.locate(page).hover(timeout=config.BROWSER_ACTION_TIMEOUT_MS)
        except PlaywrightError as e:
            raise InteractionFailure("hover", request.ref, e)

        return {"ok": True, "hovered": request.ref}

    async def _act_scroll(self, page: Any, request: ActionRequest) -> Dict[str, Any]:
        direction = request.direction or "down"
        amount = config.BROWSER_SCROLL_PIXELS if direction == "down" else -config.BROWSER_SCROLL_PIXELS
        await page.mouse.wheel(0, amount)
        await page.wait_for_timeout(config.BROWSER_SCROLL_SETTLE_MS)
        return {"ok": True, "scrolled": direction}

    async def _act_wait(self, page: Any, request: ActionRequest) -> Dict[str, Any]:
        requested = config.BROWSER_WAIT_DEFAULT_MS if request.time_ms is None else request.time_ms
        wait_ms = int(max(0, min(requested, config.BROWSER_WAIT_MAX_MS)))
        await page.wait_for_timeout(wait_ms)
        return {"ok": True, "waited": wait_ms}
