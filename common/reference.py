"""Codec for persisted media references: "container_url|locator_1,locator_2,..."."""

import re
from typing import Iterable, List, Optional, Union

from common.constants import LOCATOR_SEPARATOR, REFERENCE_SEPARATOR
from common.types import ChunkLocator, ParsedReference

GIST_HOST_PATTERN = re.compile(r'(?:https?://)?(?:gist\.github\.com|gist\.githubusercontent\.com)/', re.IGNORECASE)
GIST_PAGE_PATTERN = re.compile(r'^(?:https?://)?gist\.github\.com/\S+$', re.IGNORECASE)


def _locator_url(locator: Union[ChunkLocator, str]) -> str:
    if isinstance(locator, ChunkLocator):
        return locator.url
    return str(locator)


def encode_reference(container_url: str, locators: Iterable[Union[ChunkLocator, str]]) -> str:
    """
    Encode a container URL and its chunk locators into one string.

    Locator URLs must not contain "," since it separates them.

    Args:
        container_url: Page URL of the container
        locators: ChunkLocators (or their URLs) in part order

    Returns:
        "{container_url}|{url_1},{url_2},..." ("{container_url}|" when empty)
    """
    urls = [_locator_url(locator) for locator in locators]
    return f"{container_url}{REFERENCE_SEPARATOR}{LOCATOR_SEPARATOR.join(urls)}"


def decode_reference(reference: Optional[str]) -> ParsedReference:
    """
    Decode a stored reference string. Never raises.

    A value without "|" is a bare link pasted by a user: it comes back as the
    container URL with no locators and is_composite=False.
    """
    if not reference or not isinstance(reference, str):
        return ParsedReference(container_url='')

    text = reference.strip()
    if REFERENCE_SEPARATOR not in text:
        return ParsedReference(container_url=text)

    container_url, locators_str = text.split(REFERENCE_SEPARATOR, 1)
    locator_urls = tuple(
        url.strip() for url in locators_str.split(LOCATOR_SEPARATOR) if url.strip()
    )
    return ParsedReference(
        container_url=container_url.strip(),
        locator_urls=locator_urls,
        is_composite=True,
    )


def is_container_url(url: str) -> bool:
    """True if the URL points at the gist host (page or raw content)."""
    return bool(url) and GIST_HOST_PATTERN.match(url.strip()) is not None


def is_container_page(url: str) -> bool:
    """True if the URL is a gist page, the only container URL a stored reference may start with."""
    return bool(url) and GIST_PAGE_PATTERN.match(url.strip()) is not None


def first_locator(reference: Optional[str]) -> Optional[str]:
    """First playable chunk URL of a reference, or None."""
    return decode_reference(reference).first_locator


def all_locators(reference: Optional[str]) -> List[str]:
    """Every chunk URL of a reference, in part order."""
    return list(decode_reference(reference).locator_urls)
