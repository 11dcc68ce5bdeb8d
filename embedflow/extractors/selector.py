from typing import Sequence

from embedflow.extractors.base import CandidateSource, MediaFormat

# Progressive formats first: they play without resolving a manifest.
FORMAT_PRIORITY = [
    MediaFormat.MP4,
    MediaFormat.WEBM,
    MediaFormat.HLS,
    MediaFormat.DASH,
    MediaFormat.UNKNOWN,
]


def select_best_source(sources: Sequence[CandidateSource]) -> CandidateSource:
    """
    Pick the preferred candidate by format. Ties keep discovery order.
    """
    if not sources:
        raise ValueError("select_best_source() requires at least one candidate")
    # min() returns the first of equally ranked items
    return min(sources, key=lambda source: FORMAT_PRIORITY.index(source.format))
