from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

FeatureKind = Literal["link", "mention", "tag"]


@dataclass(frozen=True)
class Feature:
    """An annotation attached to the text of a block."""

    kind: FeatureKind
    value: str


@dataclass(frozen=True)
class Block:
    """A run of post text sharing at most one feature."""

    text: str
    feature: Feature | None = None

    @property
    def link(self) -> str | None:
        return self._feature_value("link")

    @property
    def mention(self) -> str | None:
        return self._feature_value("mention")

    @property
    def tag(self) -> str | None:
        return self._feature_value("tag")

    def _feature_value(self, kind: FeatureKind) -> str | None:
        if self.feature is not None and self.feature.kind == kind:
            return self.feature.value
        return None

    def byte_length(self) -> int:
        return len(self.text.encode("utf-8"))

    def grapheme_length(self) -> int:
        return len(self.text)


def text_block(text: str) -> Block:
    return Block(text)


def link_block(text: str, uri: str) -> Block:
    return Block(text, Feature("link", uri))


def mention_block(text: str, did: str) -> Block:
    return Block(text, Feature("mention", did))


def tag_block(text: str, tag: str) -> Block:
    return Block(text, Feature("tag", tag))


@dataclass
class Post:
    """
    Content that can be published as a single social post.

    Blocks are kept canonical: empty text is dropped on append, and a block whose
    feature matches the last block's feature is merged into it.
    """

    blocks: list[Block] = field(default_factory=list)
    creation_time: datetime | None = None
    languages: list[str] = field(default_factory=list)

    def set_creation_time(self, creation_time: datetime) -> "Post":
        self.creation_time = creation_time
        return self

    def add_text(self, text: str) -> "Post":
        return self.add_block(text_block(text))

    def add_link(self, text: str, uri: str) -> "Post":
        return self.add_block(link_block(text, uri))

    def add_mention(self, text: str, did: str) -> "Post":
        return self.add_block(mention_block(text, did))

    def add_tag(self, text: str, tag: str) -> "Post":
        return self.add_block(tag_block(text, tag))

    def add_block(self, block: Block) -> "Post":
        if not block.text:
            return self

        feature = block.feature
        if feature is not None and not feature.value:
            feature = None

        if self.blocks and self.blocks[-1].feature == feature:
            last = self.blocks[-1]
            self.blocks[-1] = Block(last.text + block.text, feature)
        else:
            self.blocks.append(Block(block.text, feature))
        return self

    def add_language(self, lang: str) -> "Post":
        self.languages.append(lang)
        return self

    def copy_metadata(self) -> "Post":
        """Return an empty post with this post's creation time and languages."""
        return Post(creation_time=self.creation_time, languages=list(self.languages))

    def plain_text(self) -> str:
        return "".join(block.text for block in self.blocks)

    def byte_length(self) -> int:
        return sum(block.byte_length() for block in self.blocks)

    def grapheme_length(self) -> int:
        return sum(block.grapheme_length() for block in self.blocks)
