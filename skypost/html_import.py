"""
HTML importer.

Parses HTML and applies simple formatting, turning anchors into links.

Block tags (<p>, <div>, <h1>..<h6>, <li>, <br>) start new lines, <hr> becomes a
dashed line, <pre> keeps its text verbatim, and list items are bulleted or
numbered. Other tags such as <b> or <span> are transparent, while the content of
<script>, <style>, <iframe> and similar tags is dropped.
"""

from __future__ import annotations

from typing import Callable

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    PageElement,
    ProcessingInstruction,
    Tag,
)

from .errors import HtmlImportError
from .post import Post

_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


class _Converter:
    def __init__(self) -> None:
        self.post = Post()
        self.in_para = False
        self.in_pre = False
        self.want_space = False
        self.link_targets: list[str] = []
        self.list_index: list[int] = []
        self.ignore = 0

    def convert(self, node: PageElement) -> None:
        if isinstance(node, NavigableString):
            if not isinstance(node, _SKIPPED_STRINGS):
                self.add_text(str(node))
            return

        if not isinstance(node, Tag):
            return

        start, end = _TAG_HANDLERS.get(node.name, (_noop, _noop))
        start(self, node)
        for child in list(node.children):
            self.convert(child)
        end(self, node)

    def add_text(self, text: str) -> None:
        if self.in_pre:
            if not self.in_para:
                if self.post.blocks:
                    self.emit("\n")
                self.in_para = True
            self.emit(text)
            return

        for ch in text:
            if ch.isspace():
                if self.in_para:
                    self.want_space = True
                continue

            if not self.in_para:
                if self.post.blocks:
                    self.emit("\n")
                if self.list_index:
                    self.emit("  " * len(self.list_index))
            elif self.want_space:
                self.emit(" ")
                self.want_space = False
            self.emit(ch)
            self.in_para = True

    def emit(self, text: str) -> None:
        if self.ignore > 0:
            return
        if self.link_targets:
            self.post.add_link(text, self.link_targets[-1])
        else:
            self.post.add_text(text)


Handler = Callable[[_Converter, Tag], None]


def _noop(c: _Converter, node: Tag) -> None:
    return None


def _paragraph_boundary(c: _Converter, node: Tag) -> None:
    c.in_para = False
    c.want_space = False


def _start_ignore(c: _Converter, node: Tag) -> None:
    c.ignore += 1


def _end_ignore(c: _Converter, node: Tag) -> None:
    if c.ignore > 0:
        c.ignore -= 1


def _start_anchor(c: _Converter, node: Tag) -> None:
    if c.in_para and c.want_space:
        c.emit(" ")
        c.want_space = False
    href = node.get("href")
    c.link_targets.append(href if isinstance(href, str) else "")


def _end_anchor(c: _Converter, node: Tag) -> None:
    if c.link_targets:
        c.link_targets.pop()


def _start_pre(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    c.in_pre = True


def _end_pre(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    c.in_pre = False


def _start_hr(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    c.add_text("-----")
    _paragraph_boundary(c, node)


def _start_ul(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    c.list_index.append(0)


def _start_ol(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    c.list_index.append(1)


def _end_list(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    if c.list_index:
        c.list_index.pop()


def _start_li(c: _Converter, node: Tag) -> None:
    _paragraph_boundary(c, node)
    if not c.list_index:
        return
    idx = c.list_index[-1]
    if idx == 0:
        c.add_text("* ")
    else:
        c.add_text(f"{idx}. ")
        c.list_index[-1] = idx + 1


_BOUNDARY = (_paragraph_boundary, _paragraph_boundary)
_IGNORED = (_start_ignore, _end_ignore)

_TAG_HANDLERS: dict[str, tuple[Handler, Handler]] = {
    "a": (_start_anchor, _end_anchor),
    "br": (_paragraph_boundary, _noop),
    "p": _BOUNDARY,
    "div": _BOUNDARY,
    "h1": _BOUNDARY,
    "h2": _BOUNDARY,
    "h3": _BOUNDARY,
    "h4": _BOUNDARY,
    "h5": _BOUNDARY,
    "h6": _BOUNDARY,
    "pre": (_start_pre, _end_pre),
    "hr": (_start_hr, _noop),
    "ol": (_start_ol, _end_list),
    "ul": (_start_ul, _end_list),
    "li": (_start_li, _paragraph_boundary),
    "head": _IGNORED,
    "script": _IGNORED,
    "applet": _IGNORED,
    "object": _IGNORED,
    "svg": _IGNORED,
    "style": _IGNORED,
    "link": _IGNORED,
    "iframe": _IGNORED,
}


class HtmlImporter:
    """Converts HTML code into a post."""

    def __init__(self, *, parser: str = "html.parser") -> None:
        self._parser = parser

    def import_html(self, html: str) -> Post:
        # bs4 raises FeatureNotFound for an unknown parser name; the lxml and
        # html5lib backends raise their own error types.
        try:
            soup = BeautifulSoup(html, self._parser)
        except Exception as e:
            raise HtmlImportError(f"Failed to parse HTML for import: {e}") from e

        conv = _Converter()
        conv.convert(soup)
        return conv.post
