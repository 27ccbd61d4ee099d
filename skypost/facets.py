from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from .clock import Clock, IncreasingClock, SystemClock
from .post import Block, Post

FEED_POST_TYPE = "app.bsky.feed.post"
LINK_FEATURE_TYPE = "app.bsky.richtext.facet#link"
MENTION_FEATURE_TYPE = "app.bsky.richtext.facet#mention"
TAG_FEATURE_TYPE = "app.bsky.richtext.facet#tag"
STRONG_REF_TYPE = "com.atproto.repo.strongRef"


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)


class ByteSlice(_WireModel):
    byte_start: int = Field(alias="byteStart", ge=0)
    byte_end: int = Field(alias="byteEnd", ge=0)


class LinkFeature(_WireModel):
    type: Literal["app.bsky.richtext.facet#link"] = Field(LINK_FEATURE_TYPE, alias="$type")
    uri: str


class MentionFeature(_WireModel):
    type: Literal["app.bsky.richtext.facet#mention"] = Field(
        MENTION_FEATURE_TYPE, alias="$type"
    )
    did: str


class TagFeature(_WireModel):
    type: Literal["app.bsky.richtext.facet#tag"] = Field(TAG_FEATURE_TYPE, alias="$type")
    tag: str


FacetFeature = Union[LinkFeature, MentionFeature, TagFeature]


class Facet(_WireModel):
    index: ByteSlice
    features: list[FacetFeature]


class StrongRef(_WireModel):
    type: Literal["com.atproto.repo.strongRef"] = Field(STRONG_REF_TYPE, alias="$type")
    uri: str
    cid: str


class ReplyRef(_WireModel):
    root: StrongRef
    parent: StrongRef


class FeedPost(_WireModel):
    type: Literal["app.bsky.feed.post"] = Field(FEED_POST_TYPE, alias="$type")
    text: str
    created_at: str = Field(alias="createdAt")
    langs: list[str] = Field(default_factory=list)
    facets: list[Facet] = Field(default_factory=list)
    reply: ReplyRef | None = None

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def format_created_at(value: datetime) -> str:
    """
    RFC 3339 timestamp with at most millisecond precision.

    Trailing zeros of the fraction are trimmed and UTC is written as `Z`.
    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    base = value.strftime("%Y-%m-%dT%H:%M:%S")
    fraction = f"{value.microsecond // 1000:03d}".rstrip("0")
    if fraction:
        base += "." + fraction

    offset = value.utcoffset()
    if not offset:
        return base + "Z"
    total_minutes = int(offset.total_seconds()) // 60
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{base}{sign}{hours:02d}:{minutes:02d}"


def block_features(block: Block) -> list[FacetFeature]:
    feature = block.feature
    if feature is None or not feature.value:
        return []
    if feature.kind == "link":
        return [LinkFeature(uri=feature.value)]
    if feature.kind == "mention":
        return [MentionFeature(did=feature.value)]
    return [TagFeature(tag=feature.value)]


def post_facets(post: Post) -> list[Facet]:
    """Byte-range facets for every annotated block, over the UTF-8 encoded text."""
    out: list[Facet] = []
    start = 0
    for block in post.blocks:
        end = start + block.byte_length()
        features = block_features(block)
        if features:
            out.append(Facet(index=ByteSlice(byte_start=start, byte_end=end), features=features))
        start = end
    return out


class FeedPostConverter:
    """
    Builds wire-format feed posts from posts.

    Posts without a creation time are stamped from an always-increasing clock, so a
    batch converted together gets distinct, ordered timestamps.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = IncreasingClock(clock or SystemClock())

    def to_feed_post(self, post: Post) -> FeedPost:
        created = post.creation_time if post.creation_time is not None else self._clock.now()
        return FeedPost(
            text=post.plain_text(),
            created_at=format_created_at(created),
            langs=list(post.languages),
            facets=post_facets(post),
        )

    def to_feed_posts(self, posts: Sequence[Post]) -> list[FeedPost]:
        return [self.to_feed_post(post) for post in posts]
