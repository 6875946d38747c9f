"""Playback resolution routes."""

from typing import List

from fastapi import APIRouter, Query

from common.playback import extract_playback_sources, resolve_playback
from common.types import PlaybackSource
from uploader.schemas.uploads import PlaybackResponse

router = APIRouter(prefix="/playback", tags=["Playback"])


def _to_response(source: PlaybackSource) -> PlaybackResponse:
    return PlaybackResponse(
        url=source.url,
        platform=source.platform,
        is_valid=source.is_valid,
        embed_locator=source.embed_locator,
        all_locators=list(source.all_locators),
        part_notice=source.part_notice(),
    )


@router.get("", response_model=PlaybackResponse)
async def resolve(reference: str = Query("", description="Stored reference or pasted link")):
    """
    Resolve a stored voice note value to a renderer and playable locator.

    Never fails on arbitrary input: unrecognised values come back with is_valid=false.
    """
    return _to_response(resolve_playback(reference))


@router.get("/extract", response_model=List[PlaybackResponse])
async def extract(text: str = Query("", description="Free text that may contain links")):
    """
    Resolve every playable link found in free text (e.g., a job's notes field).
    """
    return [_to_response(source) for source in extract_playback_sources(text)]
