"""
Ledgerline - Browser Session

Owns the Playwright browser lifecycle for the browser tool:
- Lazy initialization (browser only starts on the first action that needs a page)
- Single-flight startup (concurrent first calls share one launch)
- An active-page pointer plus any background pages opened with "open"
- The ref table from the latest snapshot
- Idempotent teardown on "close"

Usage:
    session = get_browser_session()

    # Lazy - browser starts on first call
    page = await session.ensure()
    await page.goto("https://example.com")

    # New tab, becomes the active page; the previous page stays open
    new_page = await session.open_page()

    # Release everything (safe to call twice)
    await session.teardown()
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import config
from agency.tools.browser.refs import RefTable
from agency.tools.browser.snapshot import SnapshotProvider, select_snapshot_provider
from core.logger import log_info, log_error

# Returns (playwright_handle, browser)
Launcher = Callable[[], Awaitable[Tuple[Any, Any]]]


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    CLOSED = "closed"


async def launch_chromium() -> Tuple[Any, Any]:
    """Start Playwright and launch Chromium with the configured options."""
    try:
        from playwright.async_api import async_playwright
    except ImportError:
        raise RuntimeError(
            "Playwright is not installed. Run: pip install playwright && playwright install chromium"
        )

    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(
            headless=config.BROWSER_HEADLESS,
            args=config.BROWSER_LAUNCH_ARGS,
        )
    except Exception:
        await playwright.stop()
        raise
    return playwright, browser


class BrowserSession:
    """
    A single browser with one active page and the ref table for it.

    Only this class creates or destroys the browser and its pages.
    """

    def __init__(
        self,
        session_id: str = "default",
        launcher: Optional[Launcher] = None,
        snapshot_provider: Optional[SnapshotProvider] = None
    ):
        """
        Initialize the session (nothing is launched yet).

        Args:
            session_id: Registry key for this session
            launcher: Coroutine factory returning (playwright, browser);
                      defaults to launching Chromium
            snapshot_provider: Snapshot capability; defaults to the richest
                               one the installed driver supports
        """
        self.session_id = session_id
        self._launcher = launcher or launch_chromium
        self.snapshot_provider = snapshot_provider or select_snapshot_provider()
        self.ref_table = RefTable()
        self.state = SessionState.UNINITIALIZED

        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self._pages: List[Any] = []
        self._pending_init: Optional[asyncio.Future] = None

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def active_page(self) -> Optional[Any]:
        """The page actions run against (None unless the session is active)."""
        return self._page if self.is_active else None

    @property
    def pages(self) -> List[Any]:
        """All pages owned by this session, oldest first."""
        return list(self._pages)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def ensure(self) -> Any:
        """
        Get the active Playwright Page, launching the browser if needed.

        Concurrent callers during startup await the same pending launch.

        Returns:
            Playwright Page object
        """
        if self.is_active and self._page is not None:
            return self._page

        if self._pending_init is None:
            self._pending_init = asyncio.ensure_future(self._initialize())

        pending = self._pending_init
        try:
            return await asyncio.shield(pending)
        finally:
            if self._pending_init is pending and pending.done():
                self._pending_init = None

    async def _initialize(self) -> Any:
        """Launch the browser and open the first context and page."""
        if self._browser is None:
            log_info("Starting browser", prefix="🌐")
            self._playwright, self._browser = await self._launcher()

        if self._page is None:
            self._context = await self._browser.new_context(viewport=config.BROWSER_VIEWPORT)
            page = await self._context.new_page()
            self._pages.append(page)
            self._page = page

        self.state = SessionState.ACTIVE
        log_info(f"Browser session '{self.session_id}' ready", prefix="🌐")
        return self._page

    def set_active(self, page: Any) -> None:
        """
        Point the active page at another page owned by this session.

        The previously active page is left open.
        """
        if page not in self._pages:
            self._pages.append(page)
        self._page = page

    async def open_page(self) -> Any:
        """Open a new page in the active page's browsing context and make it active."""
        current = await self.ensure()
        new_page = await current.context.new_page()
        self.set_active(new_page)
        return new_page

    async def teardown(self) -> bool:
        """
        Close the browser (and with it every context and page).

        Returns:
            True if resources were released, False if there was nothing to close
        """
        if self._browser is None and self._playwright is None:
            self._page = None
            self._pages = []
            self.ref_table.clear()
            if self.state is SessionState.ACTIVE:
                self.state = SessionState.CLOSED
            return False

        try:
            if self._browser is not None:
                await self._browser.close()
            if self._playwright is not None:
                await self._playwright.stop()
            log_info(f"Browser session '{self.session_id}' closed", prefix="🌐")
        except Exception as e:
            log_error(f"Error closing browser: {e}")
            raise
        finally:
            self._browser = None
            self._playwright = None
            self._context = None
            self._page = None
            self._pages = []
            self.ref_table.clear()
            self.state = SessionState.CLOSED

        return True


# =============================================================================
# SESSION REGISTRY
# =============================================================================

_sessions: Dict[str, BrowserSession] = {}


def get_browser_session(session_id: str = "default") -> BrowserSession:
    """Get (or create) the process-wide session for a session id."""
    session = _sessions.get(session_id)
    if session is None:
        session = BrowserSession(session_id=session_id)
        _sessions[session_id] = session
    return session


async def close_all_browser_sessions() -> int:
    """
    Tear down every registered session.

    Returns:
        Number of sessions that had resources to release
    """
    closed = 0
    for session in list(_sessions.values()):
        try:
            if await session.teardown():
                closed += 1
        except Exception as e:
            log_error(f"Failed to close browser session '{session.session_id}': {e}")
    _sessions.clear()
    return closed
