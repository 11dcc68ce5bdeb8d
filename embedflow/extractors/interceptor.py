import logging
import re
from typing import Iterable, List, Optional, Pattern

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Request, Response, Route

from embedflow.const import MEDIA_RESOURCE_TYPES, MEDIA_URL_PATTERNS
from embedflow.extractors.base import CandidateSource, MediaFormat

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_PATTERNS: List[Pattern] = [re.compile(p, re.IGNORECASE) for p in MEDIA_URL_PATTERNS]


def compile_patterns(extra_patterns: Optional[Iterable[str]] = None) -> List[Pattern]:
    patterns = list(DEFAULT_MEDIA_PATTERNS)
    for pattern in extra_patterns or ():
        patterns.append(re.compile(pattern, re.IGNORECASE))
    return patterns


def is_media_request(url: str, resource_type: Optional[str] = None, patterns: Optional[List[Pattern]] = None) -> bool:
    patterns = DEFAULT_MEDIA_PATTERNS if patterns is None else patterns
    if any(pattern.search(url) for pattern in patterns):
        return True
    return resource_type in MEDIA_RESOURCE_TYPES and "video" in url


def get_format_from_url(url: str) -> MediaFormat:
    if ".m3u8" in url:
        return MediaFormat.HLS
    if ".mpd" in url:
        return MediaFormat.DASH
    if ".mp4" in url:
        return MediaFormat.MP4
    if ".webm" in url:
        return MediaFormat.WEBM
    return MediaFormat.UNKNOWN


class NetworkInterceptor:
    """
    Collects media candidates from the network traffic of a single page.

    Every request is let through untouched; the interceptor only records what it sees.
    The collected list grows for the whole extraction attempt and is never reset.
    """

    def __init__(self, extra_patterns: Optional[Iterable[str]] = None):
        self.patterns = compile_patterns(extra_patterns)
        self.sources: List[CandidateSource] = []

    async def attach(self, page: Page):
        # Must run before page.goto, otherwise the first requests are missed.
        # Redirect hops skip route handlers, so classification happens in the request listener.
        page.on("request", self._on_request)
        page.on("response", self._on_response)
        await page.route("**/*", self._handle_route)

    def observe(self, url: str, resource_type: str = "other") -> Optional[CandidateSource]:
        if not is_media_request(url, resource_type, self.patterns):
            return None
        source = CandidateSource(url=url, format=get_format_from_url(url), resource_type=resource_type)
        self.sources.append(source)
        logger.info(f"Media request captured: {url} ({source.format.value}, {resource_type})")
        return source

    def _on_request(self, request: Request):
        self.observe(request.url, request.resource_type)

    async def _handle_route(self, route: Route):
        try:
            await route.continue_()
        except PlaywrightError as e:
            # Page or context already closed
            logger.debug(f"Could not continue request {route.request.url}: {e}")

    def _on_response(self, response: Response):
        if not is_media_request(response.url, patterns=self.patterns):
            return
        headers = response.headers
        logger.debug(
            f"Media response: {response.url}, status: {response.status}, "
            f"type: {headers.get('content-type')}, size: {headers.get('content-length')}"
        )

    def __len__(self):
        return len(self.sources)
