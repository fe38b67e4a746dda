"""Error classes for the feed pipeline."""


class FeedError(Exception):
    """Base class for every failure that ends a fetch."""


class NetworkError(FeedError):
    """Transport failure: connectivity, DNS, timeout or a non-2xx status."""


class DecodeError(FeedError):
    """The payload is not JSON or does not match the feed schema."""


class InvalidUrlError(FeedError):
    """The request URL could not be constructed."""
