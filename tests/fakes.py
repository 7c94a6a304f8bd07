"""
In-memory stand-ins for the Playwright objects the browser tool drives.

They record every call so tests can assert on what reached the driver.
"""

import asyncio
from typing import Any, List, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agency.tools.browser.snapshot import SnapshotProvider


class FakeLocator:
    """Lazy locator; records the chain that built it and the actions run on it."""

    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return FakeLocator(self.page, f"{self.selector} >> first")

    def nth(self, index: int) -> "FakeLocator":
        return FakeLocator(self.page, f"{self.selector} >> nth={index}")

    async def _act(self, action: str, *args: Any, **kwargs: Any) -> None:
        self.page.calls.append((action, self.selector, args, kwargs))
        if action in self.page.failing_actions:
            raise PlaywrightTimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded.")

    async def click(self, **kwargs: Any) -> None:
        await self._act("click", **kwargs)

    async def fill(self, value: str, **kwargs: Any) -> None:
        await self._act("fill", value, **kwargs)

    async def hover(self, **kwargs: Any) -> None:
        await self._act("hover", **kwargs)

    async def aria_snapshot(self, **kwargs: Any) -> str:
        self.page.calls.append(("aria_snapshot", self.selector, (), kwargs))
        return self.page.snapshot_text


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def press(self, key: str) -> None:
        self.page.calls.append(("press", key, (), {}))


class FakeMouse:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def wheel(self, delta_x: float, delta_y: float) -> None:
        self.page.calls.append(("wheel", None, (delta_x, delta_y), {}))


class FakePage:
    """Records driver calls; behaviour is steered through plain attributes."""

    def __init__(self, context: "FakeContext", url: str = "about:blank"):
        self.context = context
        self._url = url
        self._title = ""
        self.snapshot_text = ""
        self.read_text = ""
        self.settle_times_out = False
        self.failing_actions: List[str] = []
        self.calls: List[tuple] = []
        self.keyboard = FakeKeyboard(self)
        self.mouse = FakeMouse(self)

    @property
    def url(self) -> str:
        return self._url

    async def title(self) -> str:
        return self._title

    async def goto(self, url: str, **kwargs: Any) -> None:
        self.calls.append(("goto", url, (), kwargs))
        if "goto" in self.failing_actions:
            raise PlaywrightTimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded.")
        self._url = url
        self._title = f"Title of {url}"

    async def wait_for_load_state(self, state: str, **kwargs: Any) -> None:
        self.calls.append(("wait_for_load_state", state, (), kwargs))
        if self.settle_times_out:
            raise PlaywrightTimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded.")

    async def wait_for_timeout(self, timeout: float) -> None:
        self.calls.append(("wait_for_timeout", None, (timeout,), {}))

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", None, (arg,), {}))
        return self.read_text

    def get_by_role(self, role: str, **kwargs: Any) -> FakeLocator:
        if "name" in kwargs:
            selector = f"role={role}[name=\"{kwargs['name']}\" exact={kwargs.get('exact')}]"
        else:
            selector = f"role={role}"
        return FakeLocator(self, selector)

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def calls_named(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


class FakeContext:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.pages: List[FakePage] = []

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page


class FakeBrowser:
    def __init__(self):
        self.contexts: List[FakeContext] = []
        self.closed = False

    async def new_context(self, **kwargs: Any) -> FakeContext:
        context = FakeContext(self)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True


class FakePlaywright:
    def __init__(self):
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class FakeLauncher:
    """Launcher coroutine factory that counts launches."""

    def __init__(self, delay: Optional[float] = None):
        self.launch_count = 0
        self.delay = delay
        self.browsers: List[FakeBrowser] = []
        self.playwrights: List[FakePlaywright] = []

    async def __call__(self):
        self.launch_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        playwright, browser = FakePlaywright(), FakeBrowser()
        self.playwrights.append(playwright)
        self.browsers.append(browser)
        return playwright, browser


class FakeSnapshotProvider(SnapshotProvider):
    """Returns whatever snapshot_text the page currently holds."""

    name = "fake"

    def __init__(self):
        self.capture_count = 0

    async def capture_text(self, page: Any) -> str:
        self.capture_count += 1
        return page.snapshot_text
