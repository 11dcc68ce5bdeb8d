import sys
from pathlib import Path

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

# Ensure tests can import project packages regardless of how pytest is invoked.
ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

from embedflow.configs import settings  # noqa: E402
from embedflow.extractors.browser import BrowserSessionManager  # noqa: E402


class FakeRequest:
    def __init__(self, url, resource_type="other"):
        self.url = url
        self.resource_type = resource_type


class FakeRoute:
    def __init__(self, request):
        self.request = request
        self.continued = 0

    async def continue_(self):
        self.continued += 1


class FakeResponse:
    def __init__(self, url):
        self.url = url
        self.status = 200
        self.headers = {"content-type": "application/vnd.apple.mpegurl", "content-length": "512"}


class FakeFrame:
    def __init__(self, sources=(), error=None):
        self.sources = list(sources)
        self.error = error

    async def evaluate(self, script, *args):
        if self.error:
            raise self.error
        return list(self.sources)


class FakeIframe:
    def __init__(self, frame=None):
        self.frame = frame

    async def content_frame(self):
        return self.frame


class FakePage:
    """
    Stands in for a Playwright page.

    ``requests`` fire through the installed route handlers on goto, ``late_requests``
    fire the first time the DOM is queried, ``play_buttons`` maps selectors to the
    requests a click on them triggers.
    """

    def __init__(
        self,
        requests=(),
        late_requests=(),
        iframes=(),
        scripts=(),
        html="",
        play_buttons=None,
        goto_error=None,
        goto_hook=None,
    ):
        self.requests = list(requests)
        self.late_requests = list(late_requests)
        self.iframes = list(iframes)
        self.scripts = list(scripts)
        self.html = html
        self.play_buttons = dict(play_buttons or {})
        self.goto_error = goto_error
        self.goto_hook = goto_hook

        self.route_handlers = []
        self.listeners = {}
        self.routes = []
        self.visited = []
        self.clicked = []
        self.evaluated = []
        self.init_scripts = []
        self.close_calls = 0

    async def route(self, pattern, handler):
        self.route_handlers.append(handler)

    def on(self, event, callback):
        self.listeners.setdefault(event, []).append(callback)

    async def add_init_script(self, script=None, **kwargs):
        self.init_scripts.append(script)

    async def fire(self, url, resource_type="other", redirect_to=None):
        request = FakeRequest(url, resource_type)
        for callback in self.listeners.get("request", []):
            callback(request)
        route = FakeRoute(request)
        self.routes.append(route)
        for handler in self.route_handlers:
            await handler(route)
        if redirect_to:
            # Like Chromium, the redirected request reaches listeners but not route handlers.
            redirected = FakeRequest(redirect_to, resource_type)
            for callback in self.listeners.get("request", []):
                callback(redirected)
            url = redirect_to
        for callback in self.listeners.get("response", []):
            callback(FakeResponse(url))

    async def _fire_all(self, requests):
        for request in requests:
            if isinstance(request, str):
                await self.fire(request)
            else:
                await self.fire(*request)

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if self.goto_hook:
            await self.goto_hook()
        await self._fire_all(self.requests)
        if self.goto_error:
            raise self.goto_error

    async def click(self, selector, **kwargs):
        if selector not in self.play_buttons:
            raise PlaywrightTimeoutError(f"Timeout waiting for selector {selector}")
        self.clicked.append(selector)
        await self._fire_all(self.play_buttons[selector])

    async def evaluate(self, script, *args):
        self.evaluated.append(script)

    async def query_selector_all(self, selector):
        await self._fire_all(self.late_requests)
        self.late_requests = []
        if selector == "iframe":
            return list(self.iframes)
        return []

    async def eval_on_selector_all(self, selector, script):
        if selector == "script":
            return list(self.scripts)
        return []

    async def content(self):
        return self.html

    async def close(self):
        self.close_calls += 1


class FakeContext:
    def __init__(self, page, options):
        self.page = page
        self.options = options
        self.close_calls = 0

    async def new_page(self):
        return self.page

    async def close(self):
        self.close_calls += 1


class FakeBrowser:
    def __init__(self, driver):
        self.driver = driver
        self.connected = True
        self.close_calls = 0
        self.contexts = []

    def is_connected(self):
        return self.connected

    async def new_context(self, **options):
        context = FakeContext(self.driver.next_page(), options)
        self.contexts.append(context)
        return context

    async def close(self):
        self.close_calls += 1
        self.connected = False


class FakeChromium:
    def __init__(self, driver):
        self.driver = driver

    async def launch(self, **options):
        self.driver.launch_options.append(options)
        if self.driver.failing_launches > 0:
            self.driver.failing_launches -= 1
            raise PlaywrightError("Executable doesn't exist")
        browser = FakeBrowser(self.driver)
        self.driver.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, driver):
        self.chromium = FakeChromium(driver)
        self.driver = driver

    async def stop(self):
        self.driver.stop_calls += 1


class FakePlaywrightManager:
    def __init__(self, driver):
        self.driver = driver

    async def start(self):
        self.driver.start_calls += 1
        return FakePlaywright(self.driver)


class FakeDriver:
    """Records browser lifecycle calls and hands out prepared pages."""

    def __init__(self, pages=(), failing_launches=0):
        self.pages = list(pages)
        self.failing_launches = failing_launches
        self.launch_options = []
        self.browsers = []
        self.start_calls = 0
        self.stop_calls = 0
        self.served_pages = []

    def factory(self):
        return FakePlaywrightManager(self)

    def next_page(self):
        page = self.pages.pop(0) if self.pages else FakePage()
        self.served_pages.append(page)
        return page

    def session(self, **kwargs):
        return BrowserSessionManager(playwright_factory=self.factory, **kwargs)


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    monkeypatch.setattr(settings, "settle_delay", 0)
    monkeypatch.setattr(settings, "iframe_delay", 0)
    monkeypatch.setattr(settings, "play_click_wait", 0)
    monkeypatch.setattr(settings, "batch_delay", 0)
    monkeypatch.setattr(settings, "browser_launch_attempts", 1)
    monkeypatch.setattr(settings, "extra_media_patterns", [])


@pytest.fixture
def make_driver():
    def _make(*pages, failing_launches=0):
        return FakeDriver(pages, failing_launches=failing_launches)

    return _make
