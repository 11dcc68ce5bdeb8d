from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from playwright.async_api import Page

    from embedflow.extractors.interceptor import NetworkInterceptor


class ExtractorError(Exception):
    """Base exception for all extractors."""

    pass


class BrowserLaunchError(ExtractorError):
    """The headless browser could not be started."""

    pass


class MediaKind(str, Enum):
    MOVIE = "movie"
    TV = "tv"


class MediaFormat(str, Enum):
    HLS = "HLS"
    DASH = "DASH"
    MP4 = "MP4"
    WEBM = "WebM"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class EmbedRequest:
    provider_index: int
    media_kind: MediaKind
    catalog_id: str
    season_number: Optional[int] = None
    episode_number: Optional[int] = None

    def embed_url(self) -> str:
        from embedflow.providers import get_embed_url

        return get_embed_url(
            self.provider_index,
            self.media_kind,
            self.catalog_id,
            self.season_number,
            self.episode_number,
        )


@dataclass(frozen=True)
class CandidateSource:
    url: str
    format: MediaFormat
    resource_type: str = "other"


@dataclass(frozen=True)
class ExtractionOutcome:
    success: bool
    video_url: Optional[str] = None
    format: Optional[str] = None
    error_reason: Optional[str] = None
    strategy: Optional[str] = None

    @classmethod
    def found(cls, url: str, media_format: MediaFormat, strategy: str = None) -> "ExtractionOutcome":
        return cls(success=True, video_url=url, format=media_format.value, strategy=strategy)

    @classmethod
    def failed(cls, reason: str, strategy: str = None) -> "ExtractionOutcome":
        return cls(success=False, error_reason=reason, strategy=strategy)


@dataclass
class ExtractionContext:
    """Everything a strategy may look at during one extraction attempt."""

    page: "Page"
    embed_url: str
    interceptor: "NetworkInterceptor"


class BaseStrategy(ABC):
    """One step of the extraction pipeline.

    Strategies report failure by returning an unsuccessful outcome. Exceptions and
    timeouts are converted to failures by the pipeline.
    """

    name: str = "base"
    timeout: float = 30.0

    @abstractmethod
    async def attempt(self, context: ExtractionContext) -> ExtractionOutcome:
        pass

    def __repr__(self):
        return f"<{self.__class__.__name__} name={self.name!r} timeout={self.timeout}>"
