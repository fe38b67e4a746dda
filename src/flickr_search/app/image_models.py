import uuid
from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict


class FeedMedia(BaseModel):
    model_config = ConfigDict(strict=True)

    m: str


class FeedItem(BaseModel):
    model_config = ConfigDict(strict=True)

    title: str
    media: FeedMedia
    author: str
    description: str
    published: str


class FeedResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    items: list[FeedItem]


def _new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ImageRecord:
    """A single feed item, kept exactly as the feed sent it.

    ``id`` is generated locally for list identity and takes no part in
    equality; the feed's own ``guid`` is not modeled.
    """

    title: str
    media_url: str
    author: str
    description: str
    published: str
    id: str = field(default_factory=_new_record_id, compare=False)

    @classmethod
    def from_feed_item(cls, item: FeedItem) -> "ImageRecord":
        return cls(
            title=item.title,
            media_url=item.media.m,
            author=item.author,
            description=item.description,
            published=item.published,
        )
