import logging
import re
from typing import List, Optional

import anyio
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from embedflow.configs import settings
from embedflow.const import PLAY_BUTTON_SELECTORS
from embedflow.extractors.base import BaseStrategy, ExtractionContext, ExtractionOutcome
from embedflow.extractors.interceptor import get_format_from_url
from embedflow.extractors.selector import select_best_source

logger = logging.getLogger(__name__)

FRAME_SOURCES_SCRIPT = """
() => {
    const sources = [];
    document.querySelectorAll("video").forEach((video) => {
        if (video.src && !video.src.startsWith("blob:")) {
            sources.push(video.src);
        }
    });
    document.querySelectorAll("source").forEach((source) => {
        if (source.src) sources.push(source.src);
    });
    return sources;
}
"""

LOAD_VIDEOS_SCRIPT = """
() => {
    document.querySelectorAll("video").forEach((video) => {
        video.scrollIntoView();
        video.load();
    });
}
"""

SCRIPT_TEXTS_SCRIPT = "elements => elements.map(e => e.textContent || e.innerHTML || '')"

SCRIPT_MEDIA_URL_RE = re.compile(r"(https?://[^\s\"'`]+\.(?:m3u8|mp4|webm|mkv))", re.IGNORECASE)
PLAYER_CONFIG_RE = re.compile(r"""["']?(?:source|src|url)["']?\s*:\s*["']([^"']+)""", re.IGNORECASE)
PLAYER_CONFIG_URL_RE = re.compile(r"^https?://.+\.(?:m3u8|mp4)(?:\?.*)?$", re.IGNORECASE)


async def trigger_playback(
    page: Page,
    click_timeout: Optional[float] = None,
    click_wait: Optional[float] = None,
):
    """
    Nudge the player into requesting its media. Never raises.
    """
    click_timeout = settings.play_click_timeout if click_timeout is None else click_timeout
    click_wait = settings.play_click_wait if click_wait is None else click_wait

    for selector in PLAY_BUTTON_SELECTORS:
        try:
            await page.click(selector, delay=1000, timeout=click_timeout * 1000)
        except Exception:
            continue
        logger.debug(f"Clicked play button: {selector}")
        await anyio.sleep(click_wait)
        break

    try:
        await page.evaluate(LOAD_VIDEOS_SCRIPT)
    except Exception as e:
        logger.debug(f"Could not trigger video load: {e}")


def find_urls_in_scripts(scripts: List[str]) -> List[str]:
    found = []
    for content in scripts:
        found.extend(match.group(1) for match in SCRIPT_MEDIA_URL_RE.finditer(content or ""))
    return found


def find_urls_in_player_config(html: str) -> List[str]:
    return [
        match.group(1)
        for match in PLAYER_CONFIG_RE.finditer(html or "")
        if PLAYER_CONFIG_URL_RE.match(match.group(1))
    ]


class DirectNavigationStrategy(BaseStrategy):
    name = "direct_navigation"

    def __init__(
        self,
        navigation_timeout: float = None,
        settle_delay: float = None,
        timeout: float = None,
        click_timeout: float = None,
        click_wait: float = None,
    ):
        self.navigation_timeout = settings.navigation_timeout if navigation_timeout is None else navigation_timeout
        self.settle_delay = settings.settle_delay if settle_delay is None else settle_delay
        self.timeout = settings.direct_strategy_timeout if timeout is None else timeout
        self.click_timeout = click_timeout
        self.click_wait = click_wait

    async def attempt(self, context: ExtractionContext) -> ExtractionOutcome:
        try:
            await context.page.goto(
                context.embed_url,
                wait_until="networkidle",
                timeout=self.navigation_timeout * 1000,
            )
        except PlaywrightTimeoutError:
            # Requests seen before the timeout are still usable.
            logger.warning(f"Navigation to {context.embed_url} did not settle within {self.navigation_timeout}s")

        # Lazy-loaded players
        await anyio.sleep(self.settle_delay)
        await trigger_playback(context.page, self.click_timeout, self.click_wait)

        if not context.interceptor.sources:
            return ExtractionOutcome.failed("No media requests captured", self.name)

        best = select_best_source(context.interceptor.sources)
        return ExtractionOutcome.found(best.url, best.format, self.name)


class IframeExtractionStrategy(BaseStrategy):
    name = "iframe_extraction"

    def __init__(self, iframe_delay: float = None, timeout: float = None):
        self.iframe_delay = settings.iframe_delay if iframe_delay is None else iframe_delay
        self.timeout = settings.iframe_strategy_timeout if timeout is None else timeout

    async def attempt(self, context: ExtractionContext) -> ExtractionOutcome:
        iframes = await context.page.query_selector_all("iframe")
        logger.debug(f"Found {len(iframes)} iframes")

        for index, iframe in enumerate(iframes):
            try:
                frame = await iframe.content_frame()
                if frame is None:
                    continue
                await anyio.sleep(self.iframe_delay)
                sources = await frame.evaluate(FRAME_SOURCES_SCRIPT)
            except PlaywrightError as e:
                logger.debug(f"Skipping iframe #{index}: {e}")
                continue

            if sources:
                url = sources[0]
                return ExtractionOutcome.found(url, get_format_from_url(url), self.name)

        return ExtractionOutcome.failed("No sources found in iframes", self.name)


class DomAnalysisStrategy(BaseStrategy):
    name = "dom_analysis"

    def __init__(self, timeout: float = None):
        self.timeout = settings.dom_strategy_timeout if timeout is None else timeout

    async def attempt(self, context: ExtractionContext) -> ExtractionOutcome:
        scripts = await context.page.eval_on_selector_all("script", SCRIPT_TEXTS_SCRIPT)
        html = await context.page.content()

        sources = find_urls_in_scripts(scripts) + find_urls_in_player_config(html)
        if not sources:
            return ExtractionOutcome.failed("No sources found in DOM analysis", self.name)

        url = sources[0]
        return ExtractionOutcome.found(url, get_format_from_url(url), self.name)


class NetworkLogStrategy(BaseStrategy):
    name = "network_log"

    def __init__(self, timeout: float = None):
        self.timeout = settings.network_strategy_timeout if timeout is None else timeout

    async def attempt(self, context: ExtractionContext) -> ExtractionOutcome:
        if not context.interceptor.sources:
            return ExtractionOutcome.failed("No media requests captured", self.name)
        best = select_best_source(context.interceptor.sources)
        return ExtractionOutcome.found(best.url, best.format, self.name)


def default_strategies() -> List[BaseStrategy]:
    return [
        DirectNavigationStrategy(),
        IframeExtractionStrategy(),
        DomAnalysisStrategy(),
        NetworkLogStrategy(),
    ]
