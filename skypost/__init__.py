from __future__ import annotations

from .clock import Clock, FixedClock, IncreasingClock, SystemClock
from .config import config_sha256, load_config
from .config_schema import AppConfig
from .errors import ConfigError, HtmlImportError, PublishError, SkypostError
from .facets import FeedPost, FeedPostConverter
from .html_import import HtmlImporter
from .multiposter import Multiposter, PublishedRef, PublishResult
from .post import Block, Feature, Post
from .split import SplitOptions, default_numbering, split_post
from .text_import import TextImporter

__all__ = [
    "AppConfig",
    "Block",
    "Clock",
    "ConfigError",
    "Feature",
    "FeedPost",
    "FeedPostConverter",
    "FixedClock",
    "HtmlImportError",
    "HtmlImporter",
    "IncreasingClock",
    "Multiposter",
    "Post",
    "PublishError",
    "PublishResult",
    "PublishedRef",
    "SkypostError",
    "SplitOptions",
    "SystemClock",
    "TextImporter",
    "config_sha256",
    "default_numbering",
    "load_config",
    "split_post",
]
