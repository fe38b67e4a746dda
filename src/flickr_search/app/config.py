import os

FLICKR_FEED_URL = os.getenv(
    "FLICKR_FEED_URL", "https://api.flickr.com/services/feeds/photos_public.gne"
)

USER_AGENT = "flickr-search / public feed client"

# Seconds; httpx's own default of 5s is too tight for the feed
FEED_TIMEOUT = float(os.getenv("FEED_TIMEOUT", "30"))


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


# Empty the result grid as soon as a new search starts instead of keeping the
# previous results until the next successful fetch
CLEAR_RESULTS_ON_SEARCH = _env_flag("CLEAR_RESULTS_ON_SEARCH")

# IANA zone name used for published dates; unset keeps the feed's own offset
DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE") or None
