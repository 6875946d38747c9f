"""Classifies stored voice note values into a renderer platform and playable locator."""

import re
from typing import List, Optional
from urllib.parse import quote

from common.constants import CHUNKED_HOST_PLATFORM, REFERENCE_SEPARATOR
from common.reference import decode_reference, is_container_page
from common.types import PlaybackSource

PLATFORM_PATTERNS = {
    'loom': re.compile(r'(?:https?://)?(?:www\.)?loom\.com/share/([a-zA-Z0-9]+)'),
    'soundcloud': re.compile(r'(?:https?://)?(?:www\.)?soundcloud\.com/[\w-]+/[\w-]+'),
    'google-drive': re.compile(r'(?:https?://)?drive\.google\.com/file/d/([a-zA-Z0-9_-]+)'),
    'dropbox': re.compile(r'(?:https?://)?(?:www\.)?dropbox\.com/s/([a-zA-Z0-9]+)'),
    'cloudapp': re.compile(r'(?:https?://)?(?:www\.)?(?:cl\.ly|cloudapp)/([a-zA-Z0-9]+)'),
    'direct-audio': re.compile(r'^https?://.+\.(mp3|wav|m4a|ogg|webm)(\?.*)?$', re.IGNORECASE),
}

URL_IN_TEXT_PATTERN = re.compile(r'https?://\S+')
LOCATOR_PATTERN = re.compile(r'^https?://\S+$', re.IGNORECASE)


def _resolve_composite(text: str) -> Optional[PlaybackSource]:
    if REFERENCE_SEPARATOR not in text:
        return None

    parsed = decode_reference(text)
    if not is_container_page(parsed.container_url) or not parsed.locator_urls:
        return None
    if not all(LOCATOR_PATTERN.match(url) for url in parsed.locator_urls):
        return None

    return PlaybackSource(
        url=parsed.container_url,
        platform=CHUNKED_HOST_PLATFORM,
        is_valid=True,
        embed_locator=parsed.locator_urls[0],
        all_locators=parsed.locator_urls,
    )


def _resolve_external(text: str) -> Optional[PlaybackSource]:
    loom_match = PLATFORM_PATTERNS['loom'].search(text)
    if loom_match:
        embed = f"https://www.loom.com/embed/{loom_match.group(1)}"
        return PlaybackSource(url=text, platform='loom', is_valid=True,
                              embed_locator=embed)

    if PLATFORM_PATTERNS['soundcloud'].search(text):
        embed = f"https://w.soundcloud.com/player/?url={quote(text, safe='')}&auto_play=false"
        return PlaybackSource(url=text, platform='soundcloud', is_valid=True,
                              embed_locator=embed)

    drive_match = PLATFORM_PATTERNS['google-drive'].search(text)
    if drive_match:
        embed = f"https://drive.google.com/file/d/{drive_match.group(1)}/preview"
        return PlaybackSource(url=text, platform='google-drive', is_valid=True,
                              embed_locator=embed)

    if PLATFORM_PATTERNS['dropbox'].search(text):
        raw = text.replace('www.dropbox.com', 'dl.dropboxusercontent.com').replace('?dl=0', '')
        return PlaybackSource(url=text, platform='dropbox', is_valid=True,
                              embed_locator=raw)

    if PLATFORM_PATTERNS['cloudapp'].search(text):
        return PlaybackSource(url=text, platform='cloudapp', is_valid=True,
                              embed_locator=text)

    if PLATFORM_PATTERNS['direct-audio'].match(text):
        return PlaybackSource(url=text, platform='direct-audio', is_valid=True,
                              embed_locator=text)

    return None


def resolve_playback(url: Optional[str]) -> PlaybackSource:
    """
    Decide which renderer to use for a stored value and what to feed it.

    Composite references produced by the uploader always start playback at
    part 1; callers surface part_notice() instead of auto-advancing.
    Unrecognised or non-string input yields is_valid=False. Never raises.

    Args:
        url: Stored reference, or any link a user pasted instead of recording

    Returns:
        PlaybackSource describing the platform and locators
    """
    if not url or not isinstance(url, str):
        return PlaybackSource(url='')

    text = url.strip()

    resolved = _resolve_composite(text) or _resolve_external(text)
    if resolved is not None:
        return resolved

    return PlaybackSource(url=text)


def extract_playback_sources(text: Optional[str]) -> List[PlaybackSource]:
    """
    Resolve every http(s) link found in free text (e.g., a job's notes field).

    Returns:
        Valid PlaybackSources in the order the links appear
    """
    if not text or not isinstance(text, str):
        return []

    sources = (resolve_playback(match) for match in URL_IN_TEXT_PATTERN.findall(text))
    return [source for source in sources if source.is_valid]
