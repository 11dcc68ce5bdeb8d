import logging
from typing import Iterable, List, Optional, Sequence

import anyio

from embedflow.configs import settings
from embedflow.extractors.base import BaseStrategy, ExtractionContext, ExtractionOutcome
from embedflow.extractors.browser import BrowserSessionManager
from embedflow.extractors.interceptor import NetworkInterceptor
from embedflow.extractors.strategies import default_strategies

logger = logging.getLogger(__name__)


class ExtractionPipeline:
    """
    Resolves an embed page to a playable media URL.

    Strategies run in order against one page until one succeeds. A strategy that
    raises or exceeds its timeout counts as failed and the next one runs.
    """

    def __init__(
        self,
        session: BrowserSessionManager,
        strategies: Optional[Sequence[BaseStrategy]] = None,
        extra_patterns: Optional[Iterable[str]] = None,
    ):
        self.session = session
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self.extra_patterns = list(settings.extra_media_patterns if extra_patterns is None else extra_patterns)

    async def extract(self, embed_url: str) -> ExtractionOutcome:
        """
        Run one extraction attempt. BrowserLaunchError propagates to the caller.
        """
        logger.info(f"Extracting video from: {embed_url}")
        async with self.session.open_page() as page:
            interceptor = NetworkInterceptor(self.extra_patterns)
            await interceptor.attach(page)
            context = ExtractionContext(page=page, embed_url=embed_url, interceptor=interceptor)
            outcome = await self.run_strategies(context)

        if outcome.success:
            logger.info(f"Extraction succeeded via {outcome.strategy}: {outcome.video_url} ({outcome.format})")
        else:
            logger.info(f"Extraction failed for {embed_url}: {outcome.error_reason}")
        return outcome

    async def run_strategies(self, context: ExtractionContext) -> ExtractionOutcome:
        outcome = ExtractionOutcome.failed("No extraction strategies configured")
        for strategy in self.strategies:
            logger.info(f"Trying strategy: {strategy.name}")
            outcome = await self._attempt(strategy, context)
            if outcome.success:
                return outcome
            logger.debug(f"Strategy {strategy.name} failed: {outcome.error_reason}")
        return outcome

    async def extract_many(self, embed_urls: Iterable[str], delay: Optional[float] = None) -> List[ExtractionOutcome]:
        """
        Extract several embed pages one after another, pausing between them.
        """
        delay = settings.batch_delay if delay is None else delay
        results = []
        for index, embed_url in enumerate(embed_urls):
            if index and delay:
                await anyio.sleep(delay)
            results.append(await self.extract(embed_url))
        return results

    @staticmethod
    async def _attempt(strategy: BaseStrategy, context: ExtractionContext) -> ExtractionOutcome:
        try:
            with anyio.fail_after(strategy.timeout):
                return await strategy.attempt(context)
        except TimeoutError:
            logger.warning(f"Strategy {strategy.name} timed out after {strategy.timeout}s")
            return ExtractionOutcome.failed(f"{strategy.name} timed out after {strategy.timeout}s", strategy.name)
        except Exception as e:
            logger.warning(f"Strategy {strategy.name} failed: {e}")
            return ExtractionOutcome.failed(f"{strategy.name} failed: {e}", strategy.name)
