"""Inline import: text content to inline nodes.

The scanner walks a text buffer with an explicit cursor.  At each step it
asks every text-format and text-match transformer for its earliest match at
or after the cursor and takes the winner:

1. earliest start;
2. between two format markers starting at the same position, the longer
   marker (``***`` before ``**`` before ``*``);
3. otherwise registration order.

A format match recursively imports the text between its markers with the
extra format names applied.  A text-match match is turned into a typed node
by the transformer's ``replace`` callback; the text before it is rescanned
and the scan continues after it.  Everything else becomes plain text runs
with exact character content, except that a backslash in front of a marker
character, a text-match escape character or another backslash is dropped.
Code spans keep their content verbatim.

Candidates are cached per transformer and only recomputed once the cursor
has moved past them, so one scan touches each position a bounded number of
times and no regular expression ever backtracks across nested markers.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from marktree.converter.transformers import (
    NO_MATCH,
    TextFormatTransformer,
    Transformer,
    TransformersByType,
    transformers_by_type,
)
from marktree.tree.nodes import ElementNode, Node, ParagraphNode, TextNode


@dataclass
class _Candidate:
    start: int
    order: int
    fmt: TextFormatTransformer | None = None
    close: int = -1
    match_index: int = -1
    match: re.Match[str] | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def import_inline(
    text: str,
    transformers: Iterable[Transformer] | TransformersByType,
    format: Iterable[str] = (),
) -> list[Node]:
    """Convert *text* to a list of detached inline nodes.

    Parameters
    ----------
    text:
        The textual content of one block.
    transformers:
        Ordered transformer list (only the inline variants are used), or a
        pre-partitioned :class:`TransformersByType`.
    format:
        Format names applied to every produced text run.

    Returns
    -------
    list[Node]
        Inline nodes in document order.
    """
    container = ParagraphNode()
    import_inline_into(container, text, transformers, format)
    children = container.get_children()
    container.clear()
    return children


def import_inline_into(
    parent: ElementNode,
    text: str,
    transformers: Iterable[Transformer] | TransformersByType,
    format: Iterable[str] = (),
) -> None:
    """Append the inline nodes for *text* to *parent*."""
    by_type = (
        transformers
        if isinstance(transformers, TransformersByType)
        else transformers_by_type(transformers)
    )
    _InlineScanner(parent, by_type).scan(text, frozenset(format))


# ---------------------------------------------------------------------------
# Escapes
# ---------------------------------------------------------------------------

def is_escaped(text: str, index: int) -> bool:
    """True if the character at *index* follows an odd run of backslashes."""
    count = 0
    i = index - 1
    while i >= 0 and text[i] == "\\":
        count += 1
        i -= 1
    return count % 2 == 1


def escapable_chars(by_type: TransformersByType) -> frozenset[str]:
    """Characters a backslash escapes in inline text.

    The first character of every text-format tag, the ``escape_chars`` of
    every text-match transformer, and the backslash itself.  A backslash in
    front of any other character is ordinary text.
    """
    chars = {"\\"}
    chars.update(t.tag[0] for t in by_type.text_format)
    for transformer in by_type.text_match:
        chars.update(transformer.escape_chars)
    return frozenset(chars)


def unescape_pattern(chars: Iterable[str]) -> re.Pattern[str]:
    """Pattern whose ``sub(r"\\1", text)`` resolves escapes of *chars*."""
    return re.compile(r"\\([" + "".join(re.escape(c) for c in sorted(chars)) + "])")


# ---------------------------------------------------------------------------
# Delimiter runs
# ---------------------------------------------------------------------------

def _is_word(ch: str) -> bool:
    return bool(ch) and ch.isalnum()


def is_uniform(tag: str) -> bool:
    """True if *tag* repeats one character (``*``, ``**``, ``~~``)."""
    return tag == tag[0] * len(tag)


def marker_lengths(text_format: Iterable[TextFormatTransformer]) -> dict[str, tuple[int, ...]]:
    """Tag lengths per marker character, for the uniform tags."""
    lengths: dict[str, set[int]] = {}
    for transformer in text_format:
        if is_uniform(transformer.tag):
            lengths.setdefault(transformer.tag[0], set()).add(len(transformer.tag))
    return {char: tuple(sorted(found)) for char, found in lengths.items()}


def delimiter_runs(
    text: str,
    start: int,
    char: str,
    honor_escapes: bool = True,
) -> list[tuple[int, int]]:
    """Maximal ``(start, end)`` runs of *char* at/after *start*.

    An escaped character is not part of any run; the run starts after it.
    """
    runs: list[tuple[int, int]] = []
    pos = text.find(char, start)
    while pos >= 0:
        if honor_escapes and is_escaped(text, pos):
            pos = text.find(char, pos + 1)
            continue
        end = pos + 1
        while end < len(text) and text[end] == char:
            end += 1
        runs.append((pos, end))
        pos = text.find(char, end)
    return runs


def run_flanking(
    text: str,
    start: int,
    end: int,
    intraword: bool = True,
) -> tuple[bool, bool]:
    """``(can_open, can_close)`` for the run ``text[start:end]``.

    A run can open when followed by a non-space character and close when
    preceded by one.  Without *intraword*, a run between two word
    characters does neither.
    """
    before = text[start - 1] if start > 0 else ""
    after = text[end] if end < len(text) else ""
    if not intraword and _is_word(before) and _is_word(after):
        return False, False
    return bool(after) and not after.isspace(), bool(before) and not before.isspace()


def _leftovers(lengths: Sequence[int], size: int) -> frozenset[int]:
    """Sizes a run may have left after closing a *size* marker.

    The rest closes outer markers and opens new ones, each of another tag
    length.  The closed marker itself only reopens after an outer one closed.
    """
    sums = {0}
    for length in set(lengths):
        if length != size:
            sums |= {total + length for total in sums}
    return frozenset(sums | {total + size for total in sums if total})


def find_format_span(
    text: str,
    start: int,
    transformer: TextFormatTransformer,
    lengths: Sequence[int] | None = None,
) -> tuple[int, int] | None:
    """Earliest ``(open, close)`` marker pair for *transformer* at/after *start*.

    *lengths* lists the tag lengths of every transformer using the same
    marker character; runs shorter than all of them are plain text.

    Markers are matched on runs of the marker character.  Inside a longer
    run the outer marker takes the characters farthest from the enclosed
    text and inner markers the nearest ones, so ``**a *b***`` closes the
    ``*`` before the ``**``.  While looking for a closer, runs that open
    inner markers are counted and the next closing runs pay for them first.
    A run that can both open and close only closes the marker if the rest
    of it can close outer markers and open new ones: in ``*a**b***`` the
    ``**`` opens bold instead of closing the ``*``.
    """
    tag = transformer.tag
    if not is_uniform(tag):
        return _find_literal_span(text, start, transformer)
    if transformer.is_code:
        return _find_code_span(text, start, tag)

    size = len(tag)
    lengths = tuple(lengths) if lengths else (size,)
    shortest = min(lengths)
    leftovers = _leftovers(lengths, size)
    runs = [r for r in delimiter_runs(text, start, tag[0]) if r[1] - r[0] >= shortest]
    flanks = [run_flanking(text, s, e, transformer.intraword) for s, e in runs]
    last_closer = max((i for i, (_, close) in enumerate(flanks) if close), default=-1)

    for index, (run_start, run_end) in enumerate(runs):
        if index >= last_closer:
            return None
        length = run_end - run_start
        if not flanks[index][0] or length < size:
            continue
        positions = [(run_start, length - size)]
        if length > size:
            positions.append((run_end - size, 0))
        for opener, pending in positions:
            closer = _match_closer(runs, flanks, index, size, pending, leftovers)
            if closer is not None:
                return opener, closer
    return None


def _match_closer(
    runs: list[tuple[int, int]],
    flanks: list[tuple[bool, bool]],
    index: int,
    size: int,
    pending: int,
    leftovers: frozenset[int],
) -> int | None:
    inner = [pending] if pending else []
    for (run_start, run_end), (can_open, can_close) in zip(runs[index + 1:], flanks[index + 1:]):
        remaining = run_end - run_start
        if can_close:
            while inner and remaining:
                used = min(inner[-1], remaining)
                inner[-1] -= used
                remaining -= used
                if not inner[-1]:
                    inner.pop()
            if not inner and remaining >= size and (
                not can_open or remaining - size in leftovers
            ):
                return run_end - remaining
        if can_open and remaining:
            inner.append(remaining)
    return None


def _find_code_span(text: str, start: int, tag: str) -> tuple[int, int] | None:
    """Code markers pair with the next run of exactly the same length.

    Backslashes do not escape a closing marker.
    """
    size = len(tag)
    for run_start, run_end in delimiter_runs(text, start, tag[0]):
        if run_end - run_start != size or run_end >= len(text):
            continue
        for close_start, close_end in delimiter_runs(text, run_end + 1, tag[0], honor_escapes=False):
            if close_end - close_start == size:
                return run_start, close_start
        return None
    return None


def _valid_literal_opener(text: str, pos: int, transformer: TextFormatTransformer) -> bool:
    tag = transformer.tag
    end = pos + len(tag)
    before = text[pos - 1] if pos > 0 else ""
    after = text[end] if end < len(text) else ""
    if not after or after.isspace() or is_escaped(text, pos):
        return False
    return transformer.intraword or not (_is_word(before) and _is_word(after))


def _valid_literal_closer(text: str, pos: int, transformer: TextFormatTransformer) -> bool:
    end = pos + len(transformer.tag)
    before = text[pos - 1] if pos > 0 else ""
    after = text[end] if end < len(text) else ""
    if not before or before.isspace() or is_escaped(text, pos):
        return False
    return transformer.intraword or not (_is_word(before) and _is_word(after))


def _find_literal_span(
    text: str,
    start: int,
    transformer: TextFormatTransformer,
) -> tuple[int, int] | None:
    """Opener/closer search for mixed-character tags such as ``<<``."""
    tag = transformer.tag
    pos = start
    while True:
        opener = text.find(tag, pos)
        if opener < 0:
            return None
        if _valid_literal_opener(text, opener, transformer):
            closer = text.find(tag, opener + len(tag) + 1)
            while closer >= 0:
                if _valid_literal_closer(text, closer, transformer):
                    return opener, closer
                closer = text.find(tag, closer + 1)
            return None
        pos = opener + 1



def search_unescaped(pattern: re.Pattern[str], text: str, pos: int) -> re.Match[str] | None:
    """First non-empty match of *pattern* at/after *pos* not starting on an escape."""
    while pos <= len(text):
        match = pattern.search(text, pos)
        if match is None:
            return None
        if match.end() > match.start() and not is_escaped(text, match.start()):
            return match
        pos = match.start() + 1
    return None


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class _InlineScanner:
    """Cursor-driven inline scanner appending nodes to one parent."""

    def __init__(self, parent: ElementNode, by_type: TransformersByType) -> None:
        self._parent = parent
        self._by_type = by_type
        self._lengths = marker_lengths(by_type.text_format)
        self._unescape = unescape_pattern(escapable_chars(by_type))

    def scan(
        self,
        text: str,
        formats: frozenset[str],
        floors: dict[int, int] | None = None,
    ) -> None:
        """Append nodes for *text*.

        *floors* maps a text-match transformer index to the first position
        it may match at; declined matches raise it so they are not retried.
        """
        by_type = self._by_type
        format_cache: dict[int, tuple[int, int] | None] = {}
        match_cache: dict[int, re.Match[str] | None] = {}
        floors = dict(floors or {})
        cursor = 0

        while cursor < len(text):
            best: _Candidate | None = None

            for i, fmt in enumerate(by_type.text_format):
                span = format_cache.get(i)
                if i not in format_cache or (span is not None and span[0] < cursor):
                    span = find_format_span(text, cursor, fmt, self._lengths.get(fmt.tag[0]))
                    format_cache[i] = span
                if span is None:
                    continue
                best = _better(best, _Candidate(
                    start=span[0],
                    order=by_type.order_of(fmt),
                    fmt=fmt,
                    close=span[1],
                ))

            for j, matcher in enumerate(by_type.text_match):
                floor = max(cursor, floors.get(j, 0))
                match = match_cache.get(j)
                if j not in match_cache or (match is not None and match.start() < floor):
                    match = search_unescaped(matcher.import_pattern, text, floor)
                    match_cache[j] = match
                if match is None:
                    continue
                best = _better(best, _Candidate(
                    start=match.start(),
                    order=by_type.order_of(matcher),
                    match_index=j,
                    match=match,
                ))

            if best is None:
                break

            if best.fmt is not None:
                self._emit(text[cursor:best.start], formats)
                tag = best.fmt.tag
                inner = text[best.start + len(tag):best.close]
                inner_formats = formats | set(best.fmt.format)
                if best.fmt.is_code:
                    self._emit(inner, inner_formats, verbatim=True)
                else:
                    self.scan(inner, inner_formats)
                cursor = best.close + len(tag)
                continue

            assert best.match is not None
            transformer = by_type.text_match[best.match_index]
            holder = ParagraphNode()
            node = TextNode(best.match.group(0), formats)
            holder.append(node)
            if transformer.replace(node, best.match) is NO_MATCH:
                floors[best.match_index] = best.start + 1
                continue
            self.scan(
                text[cursor:best.start],
                formats,
                {j: floor - cursor for j, floor in floors.items()},
            )
            self._parent.extend(holder.get_children())
            cursor = best.match.end()

        self._emit(text[cursor:], formats)

    def _emit(self, text: str, formats: frozenset[str], verbatim: bool = False) -> None:
        if text:
            if not verbatim:
                text = self._unescape.sub(r"\1", text)
            self._parent.append(TextNode(text, formats))


def _better(current: _Candidate | None, candidate: _Candidate) -> _Candidate:
    if current is None:
        return candidate
    if candidate.start != current.start:
        return candidate if candidate.start < current.start else current
    if (
        current.fmt is not None
        and candidate.fmt is not None
        and len(current.fmt.tag) != len(candidate.fmt.tag)
    ):
        return candidate if len(candidate.fmt.tag) > len(current.fmt.tag) else current
    return candidate if candidate.order < current.order else current
