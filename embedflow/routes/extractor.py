# embedflow/routes/extractor.py

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from embedflow.extractors.base import EmbedRequest, MediaKind
from embedflow.extractors.browser import BrowserSessionManager
from embedflow.handlers import resolve_embed
from embedflow.providers import ProviderError, list_servers
from embedflow.schemas import ExtractVideoResponse, ServerInfo

logger = logging.getLogger(__name__)

extractor_router = APIRouter()


def get_browser_session(request: Request) -> BrowserSessionManager:
    return request.app.state.browser_session


def _parse_int(name: str, value: Optional[str]) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}")


def build_embed_request(
    server_id: Optional[str],
    media_type: Optional[str],
    id: Optional[str],
    season_number: Optional[str] = None,
    episode_number: Optional[str] = None,
) -> EmbedRequest:
    if not server_id or not media_type or not id:
        raise HTTPException(status_code=400, detail="Missing required parameters")

    try:
        media_kind = MediaKind(media_type)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid mediaType: {media_type}")

    return EmbedRequest(
        provider_index=_parse_int("serverId", server_id),
        media_kind=media_kind,
        catalog_id=id,
        season_number=_parse_int("seasonNumber", season_number),
        episode_number=_parse_int("episodeNumber", episode_number),
    )


@extractor_router.get("/extract-video", response_model=ExtractVideoResponse)
async def extract_video(
    session: Annotated[BrowserSessionManager, Depends(get_browser_session)],
    server_id: Annotated[Optional[str], Query(alias="serverId")] = None,
    media_type: Annotated[Optional[str], Query(alias="mediaType")] = None,
    id: Annotated[Optional[str], Query()] = None,
    season_number: Annotated[Optional[str], Query(alias="seasonNumber")] = None,
    episode_number: Annotated[Optional[str], Query(alias="episodeNumber")] = None,
):
    """
    Resolve the playable video URL behind a provider's embed page.

    Extraction failures are not errors: the response asks the client to embed the page instead.
    """
    embed_request = build_embed_request(server_id, media_type, id, season_number, episode_number)

    try:
        embed_url = embed_request.embed_url()
    except ProviderError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await resolve_embed(embed_url, session)
    except Exception as e:
        logger.exception(f"Unexpected error in extract_video: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@extractor_router.get("/servers", response_model=List[ServerInfo])
async def get_servers():
    return list_servers()
