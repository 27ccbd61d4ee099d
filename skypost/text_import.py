"""
Plain text importer.

Looks for URLs, usernames, and hashtags in the text and turns them into links,
mentions, and tags. URLs are shortened for display, and the resolvers decide which
candidates become annotated blocks.

Usernames are only linked when a handle resolver is supplied; the default one
recognizes nothing.
"""

from __future__ import annotations

import re
import socket
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable
from urllib.parse import SplitResult, unquote, urlsplit

from .post import Post

HandleResolver = Callable[[str], str | None]
UrlResolver = Callable[[str], SplitResult | None]
UrlFormatter = Callable[[SplitResult], str]
TagResolver = Callable[[str], str | None]

_HOST = r"(?:\[[0-9A-Fa-f:]+\]|(?:[0-9]+\.){3}[0-9]+|[A-Za-z][A-Za-z0-9._-]*)"
_DOTTED_HOST = r"(?:\[[0-9A-Fa-f:]+\]|(?:[0-9]+\.){3}[0-9]+|[A-Za-z][A-Za-z0-9._-]*\.[A-Za-z0-9_-]+)"
_URL_TAIL = (
    r"(?::[0-9]+)?"  # port
    r"(?:(?:/[A-Za-z0-9._~%!$&'()*+,;=-]*)+)?"  # path
    r"(?:\?[A-Za-z0-9._~%!$&'()*+,;=/?-]*)?"  # query
    r"(?:#[A-Za-z0-9._~%!$&'()*+,;=/?-]*)?"  # fragment
)

# Userinfo is not accepted.
FULL_URL_RE = re.compile(r"https?://" + _HOST + _URL_TAIL)
# No scheme required, but the host needs two components or must be an IP literal.
SHORT_URL_RE = re.compile(_DOTTED_HOST + _URL_TAIL)
USERNAME_RE = re.compile(r"@[A-Za-z][A-Za-z0-9._-]*\.[A-Za-z0-9_-]+")
HASHTAG_RE = re.compile(r"##?[^\s#]+#?")

_TRAILING_PUNCTUATION = ".,)?!"


class MatchKind(IntEnum):
    # Lower values win ties between matches covering the same span.
    URL = 0
    USERNAME = 1
    HASHTAG = 2


@dataclass(frozen=True)
class Match:
    start: int
    end: int
    kind: MatchKind


def find_matches(text: str, pattern: re.Pattern[str], kind: MatchKind) -> list[Match]:
    out: list[Match] = []
    for m in pattern.finditer(text):
        start, end = m.span()
        if kind == MatchKind.URL:
            while end > start and text[end - 1] in _TRAILING_PUNCTUATION:
                end -= 1
        if start == end:
            continue
        out.append(Match(start, end, kind))
    return out


def scan_entities(text: str) -> list[Match]:
    """Return all candidate entity spans, in the order they should be offered."""
    found: list[Match] = []
    found.extend(find_matches(text, USERNAME_RE, MatchKind.USERNAME))
    found.extend(find_matches(text, HASHTAG_RE, MatchKind.HASHTAG))
    found.extend(find_matches(text, FULL_URL_RE, MatchKind.URL))
    found.extend(find_matches(text, SHORT_URL_RE, MatchKind.URL))
    found.sort(key=lambda m: (m.start, m.end, m.kind))
    return found


def default_handle_resolver(handle: str) -> str | None:
    """Recognizes no handles, so usernames are left as plain text."""
    return None


def default_url_resolver(candidate: str) -> SplitResult | None:
    """Parse a URL with or without an `http(s)://` prefix; `https` is assumed when absent."""
    value = candidate if "://" in candidate else "https://" + candidate
    try:
        parts = urlsplit(value)
        # Accessing port validates it.
        parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts


def network_url_resolver(candidate: str) -> SplitResult | None:
    """Like default_url_resolver, but the hostname must resolve to an address."""
    parts = default_url_resolver(candidate)
    if parts is None or not parts.hostname:
        return None
    try:
        addresses = socket.getaddrinfo(parts.hostname, None)
    except (OSError, UnicodeError):
        return None
    if not addresses:
        return None
    return parts


def default_url_formatter(url: SplitResult) -> str:
    """
    Show the URL without its scheme.

    Host and path are cut to 20 characters (plus an ellipsis) once they reach 24;
    a host of 20 characters or more is shown on its own, in full.
    """
    host = url.netloc
    path = unquote(url.path)
    if len(host) >= 20 or not path or path == "/":
        return host
    host_path = host + path
    if len(host_path) >= 24:
        return host_path[:20] + "…"
    return host_path


def default_tag_resolver(hashtag: str) -> str | None:
    """Cut one leading and one trailing `#`; entirely numeric tags are rejected."""
    tag = hashtag[1:] if hashtag.startswith("#") else hashtag
    if tag.endswith("#"):
        tag = tag[:-1]
    if not tag or tag.isnumeric():
        return None
    return tag


def no_tag_resolver(hashtag: str) -> str | None:
    return None


class TextImporter:
    """Converts plain text into a post, annotating the entities the resolvers accept."""

    def __init__(
        self,
        *,
        handle_resolver: HandleResolver | None = None,
        url_resolver: UrlResolver | None = None,
        url_formatter: UrlFormatter | None = None,
        tag_resolver: TagResolver | None = None,
    ) -> None:
        self._handle_resolver = handle_resolver or default_handle_resolver
        self._url_resolver = url_resolver or default_url_resolver
        self._url_formatter = url_formatter or default_url_formatter
        self._tag_resolver = tag_resolver or default_tag_resolver

    def import_text(self, text: str) -> Post:
        out = Post()
        p = 0
        for m in scan_entities(text):
            if m.start < p:
                continue
            span = text[m.start : m.end]

            if m.kind == MatchKind.URL:
                url = self._url_resolver(span)
                if url is None:
                    continue
                out.add_text(text[p : m.start])
                out.add_link(self._url_formatter(url), url.geturl())
            elif m.kind == MatchKind.USERNAME:
                did = self._handle_resolver(span[1:])
                if not did:
                    continue
                out.add_text(text[p : m.start])
                out.add_mention(span, did)
            else:
                tag = self._tag_resolver(span)
                if not tag:
                    continue
                out.add_text(text[p : m.start])
                out.add_tag(span, tag)
            p = m.end

        out.add_text(text[p:])
        return out
