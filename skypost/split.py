from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Literal

from .post import Block, Post

NumberingFn = Callable[[int, int], str]
Placement = Literal["prefix", "suffix"]

MAX_POST_GRAPHEME_LENGTH = 300
MAX_WORD_LENGTH = 100

# A word or whitespace run, possibly spanning several blocks.
Atom = list[Block]


def default_numbering(index: int, total: int) -> str:
    return f"[{index}/{total}]"


@dataclass(frozen=True)
class SplitOptions:
    """
    Settings for split_post.

    The numbering function must not produce shorter strings for larger part numbers
    or totals; the packing step relies on this when it reserves room for the marker.
    """

    max_length: int = MAX_POST_GRAPHEME_LENGTH
    numbering: NumberingFn = field(default=default_numbering)
    placement: Placement = "prefix"
    max_word_length: int = MAX_WORD_LENGTH

    def __post_init__(self) -> None:
        if self.max_length < 1:
            raise ValueError("max_length must be >= 1")
        if self.max_word_length < 1:
            raise ValueError("max_word_length must be >= 1")
        if self.max_word_length >= self.max_length:
            raise ValueError("max_word_length must be < max_length")
        if self.placement not in ("prefix", "suffix"):
            raise ValueError("placement must be 'prefix' or 'suffix'")

    def marker(self, index: int, total: int) -> str:
        """Numbering text for one part, including the space that separates it."""
        label = self.numbering(index, total)
        if self.placement == "prefix":
            return label + " "
        return " " + label


def split_post(post: Post, options: SplitOptions | None = None) -> list[Post]:
    """
    Split a post that is too long to publish into several numbered posts.

    Posts within the length limit are returned unchanged, without numbering.
    Splits happen between words; words longer than max_word_length are cut, and so is
    any word that would not fit in an empty part next to its numbering. Raises
    ValueError when the numbering alone leaves no room for text.
    """
    opts = options or SplitOptions()
    if post.grapheme_length() <= opts.max_length:
        return [post]

    atoms = _atomize(post.blocks, opts.max_word_length)
    groups = _pack(atoms, opts)

    out: list[Post] = []
    total = len(groups)
    for index, group in enumerate(groups, start=1):
        part = post.copy_metadata()
        marker = opts.marker(index, total)
        if opts.placement == "prefix":
            part.add_text(marker)
        for atom in group:
            for block in atom:
                part.add_block(block)
        if opts.placement == "suffix":
            part.add_text(marker)
        out.append(part)
    return out


def _atom_length(atom: Atom) -> int:
    return sum(block.grapheme_length() for block in atom)


def _atomize(blocks: list[Block], max_word_length: int) -> list[Atom]:
    """
    Re-cut blocks into alternating word and whitespace atoms.

    Even indices hold words and odd indices whitespace; the list always starts and
    ends with a word atom, which may be empty at either end. Words longer than
    max_word_length are cut into pieces separated by empty whitespace atoms.
    """
    atoms: list[Atom] = [[]]
    in_space = False
    word_len = 0

    for block in blocks:
        text = block.text
        start = 0

        for i, ch in enumerate(text):
            is_space = ch.isspace()
            if is_space != in_space:
                if i > start:
                    atoms[-1].append(Block(text[start:i], block.feature))
                start = i
                atoms.append([])
                in_space = is_space
                word_len = 0
            elif not is_space and word_len >= max_word_length:
                if i > start:
                    atoms[-1].append(Block(text[start:i], block.feature))
                start = i
                atoms.append([])
                atoms.append([])
                word_len = 0
            if not is_space:
                word_len += 1

        if len(text) > start:
            atoms[-1].append(Block(text[start:], block.feature))

    if in_space:
        atoms.append([])
    return atoms


def _pack(atoms: list[Atom], opts: SplitOptions) -> list[list[Atom]]:
    # The marker width depends on the number of parts, which is only known after
    # packing. Pack assuming at most `bound` parts and widen until it holds.
    bound = 9
    while True:
        groups = _pack_with_bound(atoms, opts, bound)
        if len(groups) <= bound:
            return groups
        bound = bound * 10 + 9


def _pack_with_bound(atoms: list[Atom], opts: SplitOptions, bound: int) -> list[list[Atom]]:
    groups: list[list[Atom]] = []
    group: list[Atom] = []
    group_len = 0
    marker_len = len(opts.marker(1, bound))

    for i in range(0, len(atoms), 2):
        space = atoms[i - 1] if i > 0 else []
        word = atoms[i]
        word_len = _atom_length(word)
        added = _atom_length(space) + word_len

        if group_len + added + marker_len <= opts.max_length:
            if i > 0:
                group.append(space)
            group.append(word)
            group_len += added
            continue
        if word_len == 0:
            # Trailing whitespace that does not fit is dropped.
            continue

        # An empty leading group is discarded rather than published as a bare
        # marker.
        if group_len > 0:
            groups.append(group)
            marker_len = len(opts.marker(len(groups) + 1, bound))

        room = opts.max_length - marker_len
        if room < 1:
            raise ValueError("numbering leaves no room for text")
        while word_len > room:
            head, word = _cut_atom(word, room)
            groups.append([head])
            word_len -= room
            marker_len = len(opts.marker(len(groups) + 1, bound))
            room = opts.max_length - marker_len
            if room < 1:
                raise ValueError("numbering leaves no room for text")

        group = [word]
        group_len = word_len

    groups.append(group)
    return groups


def _cut_atom(atom: Atom, length: int) -> tuple[Atom, Atom]:
    """Cut an atom after `length` codepoints, splitting the block that straddles the cut."""
    head: Atom = []
    tail: Atom = []
    for block in atom:
        n = block.grapheme_length()
        if length >= n:
            head.append(block)
            length -= n
        elif length > 0:
            head.append(Block(block.text[:length], block.feature))
            tail.append(Block(block.text[length:], block.feature))
            length = 0
        else:
            tail.append(block)
    return head, tail
