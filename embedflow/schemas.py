from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtractVideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_url: Optional[str] = Field(None, alias="videoUrl", description="Resolved playable media URL.")
    embed_url: str = Field(..., alias="embedUrl", description="Embed page the URL was resolved from.")
    fallback_to_iframe: bool = Field(
        ..., alias="fallbackToIframe", description="Embed the original page when no media URL was isolated."
    )
    format: Optional[str] = Field(None, description="Format of the resolved URL (HLS, DASH, MP4, WebM, Unknown).")
    error: Optional[str] = Field(None, description="Why extraction fell back to the iframe.")


class ServerInfo(BaseModel):
    id: int
    name: str
