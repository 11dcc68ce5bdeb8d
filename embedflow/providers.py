# embedflow/providers.py

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Union

from embedflow.extractors.base import MediaKind

EmbedTemplate = Callable[[str, str, Optional[int], Optional[int]], str]


class ProviderError(ValueError):
    pass


@dataclass(frozen=True)
class Provider:
    name: str
    template: EmbedTemplate


def _default_one(value):
    # Season 0 holds specials, so only a missing value defaults.
    return 1 if value is None else value


def _vidsrc_cc(kind, id, ss=None, ep=None):
    if kind == "tv":
        return f"https://vidsrc.cc/v2/embed/tv/{id}/{_default_one(ss)}/{_default_one(ep)}"
    return f"https://vidsrc.cc/v2/embed/movie/{id}"


def _vidzee(kind, id, ss=None, ep=None):
    if kind == "tv":
        return f"https://vidzee.wtf/tv/{id}/{_default_one(ss)}/{_default_one(ep)}"
    return f"https://vidzee.wtf/movie/{id}"


def _videasy(kind, id, ss=None, ep=None):
    if kind == "tv":
        return f"https://player.videasy.net/tv/{id}/{_default_one(ss)}/{_default_one(ep)}"
    return f"https://player.videasy.net/movie/{id}"


def _vidzee_4k(kind, id, ss=None, ep=None):
    if kind == "movie":
        return f"https://vidzee.wtf/movie/4k/{id}"
    return f"https://vidzee.wtf/tv/4k/{id}/{_default_one(ss)}/{_default_one(ep)}"


def _vidsrc_wtf(api: int, movie_only: bool = False) -> EmbedTemplate:
    def template(kind, id, ss=None, ep=None):
        if kind == "tv":
            if movie_only:
                return ""
            return f"https://vidsrc.wtf/api/{api}/tv/?id={id}&s={_default_one(ss)}&e={_default_one(ep)}"
        return f"https://vidsrc.wtf/api/{api}/movie/?id={id}"

    return template


def _embed_su(kind, id, ss=None, ep=None):
    suffix = f"/{_default_one(ss)}/{_default_one(ep)}" if kind == "tv" else ""
    return f"https://embed.su/embed/{kind}/{id}{suffix}"


def _vidsrc_in(kind, id, ss=None, ep=None):
    suffix = f"&season={_default_one(ss)}&episode={_default_one(ep)}" if kind == "tv" else ""
    return f"https://vidsrc.in/embed/{kind}?tmdb={id}{suffix}"


# Index in this list is the public server id.
PROVIDERS: List[Provider] = [
    Provider("VidSrc", _vidsrc_cc),
    Provider("Vidzee", _vidzee),
    Provider("Videasy", _videasy),
    Provider("Vidzee 4K", _vidzee_4k),
    Provider("Vidsrc Multiserver", _vidsrc_wtf(1)),
    Provider("Vidsrc Multilang", _vidsrc_wtf(2)),
    Provider("Vidsrc Multiembed", _vidsrc_wtf(3)),
    Provider("Vidsrc 4K", _vidsrc_wtf(4, movie_only=True)),
    Provider("Vidsrc Premium", _vidsrc_wtf(5)),
    Provider("Embed SU", _embed_su),
    Provider("VidSrc IN", _vidsrc_in),
]


def get_embed_url(
    provider_index: int,
    media_kind: Union[MediaKind, str],
    catalog_id: str,
    season_number: Optional[int] = None,
    episode_number: Optional[int] = None,
) -> str:
    """
    Build the embed page URL for a title on the given provider.

    Raises ProviderError when the provider does not exist or cannot serve the media kind.
    """
    if not 0 <= provider_index < len(PROVIDERS):
        raise ProviderError(f"Unknown server id: {provider_index}")

    try:
        kind = MediaKind(media_kind).value
    except ValueError:
        raise ProviderError(f"Unsupported media type: {media_kind}")

    provider = PROVIDERS[provider_index]
    url = provider.template(kind, catalog_id, season_number, episode_number)
    if not url:
        raise ProviderError(f"{provider.name} does not support media type '{kind}'")
    return url


def get_server_name(provider_index: int) -> str:
    if 0 <= provider_index < len(PROVIDERS):
        return PROVIDERS[provider_index].name
    return "Unknown Server"


def list_servers() -> List[Dict[str, Union[int, str]]]:
    return [{"id": index, "name": provider.name} for index, provider in enumerate(PROVIDERS)]
