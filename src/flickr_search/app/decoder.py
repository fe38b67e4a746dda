"""Decode feed payloads into image records.

``decode`` validates the whole payload against the feed schema before building
any record, so a malformed item never yields a partial list.
"""

import logging
from dataclasses import dataclass
from typing import Union

from pydantic import ValidationError

from flickr_search.app.errors import DecodeError
from flickr_search.app.image_models import FeedResponse, ImageRecord

logger = logging.getLogger(__name__)


@dataclass
class DecodedFeed:
    records: list[ImageRecord]


@dataclass
class DecodeFailure:
    error: DecodeError


DecodeResult = Union[DecodedFeed, DecodeFailure]


def _describe(e: ValidationError) -> str:
    first = e.errors()[0]
    if first["type"] == "json_invalid":
        return f"Malformed JSON: {first['msg']}"
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"Invalid feed payload at {location}: {first['msg']}"


def decode(payload: Union[bytes, str]) -> DecodeResult:
    try:
        response = FeedResponse.model_validate_json(payload)
    except ValidationError as e:
        message = _describe(e)
        logger.debug(f"[decoder] {message} ({e.error_count()} errors)")
        return DecodeFailure(DecodeError(message))

    return DecodedFeed([ImageRecord.from_feed_item(item) for item in response.items])
