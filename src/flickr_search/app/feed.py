import logging
from urllib.parse import urlencode

import httpx

from flickr_search.app.config import FEED_TIMEOUT, FLICKR_FEED_URL, USER_AGENT
from flickr_search.app.errors import InvalidUrlError, NetworkError

logger = logging.getLogger(__name__)


def format_tags(term: str) -> str:
    """Join the words of a search term with the feed's tag delimiter."""
    return ",".join(term.split())


def build_feed_url(tags: str, feed_url: str = FLICKR_FEED_URL) -> httpx.URL:
    """Build the public feed request URL for comma-joined ``tags``"""
    try:
        query = urlencode(
            {"format": "json", "nojsoncallback": "1", "tags": tags}, safe=","
        )
        url = httpx.URL(f"{feed_url}?{query}")
    except (httpx.InvalidURL, UnicodeError) as e:
        raise InvalidUrlError(f"Cannot build feed URL for tags {tags!r}: {e}") from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidUrlError(f"Feed URL must be an absolute http(s) URL: {feed_url}")

    return url


async def fetch_feed(url: httpx.URL) -> bytes:
    """GET the feed and return the raw response body"""
    logger.info(f"[feed] fetching {url}")

    try:
        async with httpx.AsyncClient(headers={"User-Agent": USER_AGENT}) as client:
            response = await client.get(url, timeout=FEED_TIMEOUT)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise NetworkError(
            f"Feed returned HTTP {e.response.status_code} for {url}"
        ) from e
    except httpx.HTTPError as e:
        raise NetworkError(f"Feed request failed: {e!r}") from e

    return response.content
