import logging
from typing import Callable

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from embedflow.configs import settings
from embedflow.extractors.base import BrowserLaunchError, ExtractionOutcome
from embedflow.extractors.browser import BrowserSessionManager
from embedflow.extractors.pipeline import ExtractionPipeline
from embedflow.schemas import ExtractVideoResponse

logger = logging.getLogger(__name__)


def map_outcome(outcome: ExtractionOutcome, embed_url: str) -> ExtractVideoResponse:
    """
    Turn an extraction outcome into the response returned to the player.

    Anything short of a real media URL tells the client to embed the original page.
    """
    if not outcome.success or not outcome.video_url:
        return ExtractVideoResponse(
            video_url=None,
            embed_url=embed_url,
            fallback_to_iframe=True,
            error=outcome.error_reason or "Could not extract video URL",
        )

    if outcome.video_url == embed_url:
        return ExtractVideoResponse(video_url=None, embed_url=embed_url, fallback_to_iframe=True)

    return ExtractVideoResponse(
        video_url=outcome.video_url,
        embed_url=embed_url,
        fallback_to_iframe=False,
        format=outcome.format,
    )


async def _extract_with_retry(pipeline: ExtractionPipeline, embed_url: str) -> ExtractionOutcome:
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(settings.browser_launch_attempts, 1)),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(BrowserLaunchError),
        reraise=True,
    ):
        with attempt:
            return await pipeline.extract(embed_url)


async def resolve_embed(
    embed_url: str,
    session: BrowserSessionManager,
    pipeline_factory: Callable[[BrowserSessionManager], ExtractionPipeline] = ExtractionPipeline,
) -> ExtractVideoResponse:
    pipeline = pipeline_factory(session)
    try:
        outcome = await _extract_with_retry(pipeline, embed_url)
    except BrowserLaunchError as e:
        logger.error(f"Extraction aborted, {e}")
        outcome = ExtractionOutcome.failed(str(e))
    except Exception as e:
        logger.exception(f"Unexpected error extracting {embed_url}: {e}")
        outcome = ExtractionOutcome.failed(f"Failed to extract video URL: {e}")
    return map_outcome(outcome, embed_url)
