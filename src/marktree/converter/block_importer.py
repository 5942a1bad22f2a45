"""Block import: markup lines to block nodes.

:func:`import_blocks` walks the input line by line.  Each line is offered to
the element transformers, then to the multiline element transformers, in
registration order; the first one whose pattern matches and whose
``replace`` callback does not return ``NO_MATCH`` consumes it.  A line no
transformer claims becomes a paragraph.

Inline content (the text after an element match, or a paragraph line) is
produced by :mod:`marktree.converter.inline_importer`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from marktree.converter.inline_importer import import_inline
from marktree.converter.transformers import (
    NO_MATCH,
    MultilineElementTransformer,
    Transformer,
    TransformersByType,
    transformers_by_type,
)
from marktree.models import UNTERMINATED_BLOCK, ConversionWarning
from marktree.tree.nodes import ElementNode, ParagraphNode, is_empty_paragraph


@dataclass
class _MultilineMatch:
    start_match: re.Match[str]
    end_match: re.Match[str] | None
    lines: list[str]
    end_index: int


def import_blocks(
    text: str,
    transformers: Iterable[Transformer] | TransformersByType,
    root: ElementNode,
    preserve_newlines: bool = False,
    warnings: list[ConversionWarning] | None = None,
) -> ElementNode:
    """Append the blocks for *text* to *root*.

    Parameters
    ----------
    text:
        Markup text.  Callers normally run
        :func:`~marktree.converter.normalizer.normalize_markdown` first
        unless *preserve_newlines* is set.
    transformers:
        Ordered transformer list or a pre-partitioned
        :class:`TransformersByType`.
    root:
        The node receiving the blocks.
    preserve_newlines:
        When ``False``, empty paragraphs are removed after import (a single
        empty paragraph is kept for empty input).  When ``True``, every
        blank line stays an explicit empty paragraph.
    warnings:
        List receiving :class:`ConversionWarning` records for unterminated
        multiline blocks.  ``None`` discards them.

    Returns
    -------
    ElementNode
        *root*, for chaining.
    """
    by_type = (
        transformers
        if isinstance(transformers, TransformersByType)
        else transformers_by_type(transformers)
    )
    lines = text.split("\n")
    index = 0

    while index < len(lines):
        line = lines[index]

        if _import_element(line, root, by_type):
            index += 1
            continue

        consumed = _import_multiline(lines, index, root, by_type, warnings)
        if consumed is not None:
            index = consumed + 1
            continue

        paragraph = ParagraphNode()
        paragraph.extend(import_inline(_strip_block_escape(line, by_type), by_type))
        root.append(paragraph)
        index += 1

    if not preserve_newlines:
        _remove_empty_paragraphs(root)
    return root


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _import_element(line: str, root: ElementNode, by_type: TransformersByType) -> bool:
    for transformer in by_type.element:
        match = transformer.pattern.search(line)
        if match is None:
            continue
        children = import_inline(line[match.end():], by_type)
        if transformer.replace(root, children, match) is not NO_MATCH:
            return True
    return False


def _import_multiline(
    lines: list[str],
    index: int,
    root: ElementNode,
    by_type: TransformersByType,
    warnings: list[ConversionWarning] | None,
) -> int | None:
    """Try the multiline transformers at *index*; return the last line consumed."""
    for transformer in by_type.multiline_element:
        found = _match_multiline(transformer, lines, index)
        if found is None:
            continue
        result = transformer.replace(root, found.start_match, found.end_match, found.lines)
        if result is NO_MATCH:
            continue
        if found.end_match is None and warnings is not None:
            warnings.append(ConversionWarning(
                code=UNTERMINATED_BLOCK,
                message=(
                    f"Block opened on line {index + 1} by "
                    f"{transformer.name or 'multiline element'} is never closed; "
                    "the remaining lines were folded into it"
                ),
                context={
                    "transformer": transformer.name,
                    "line": index + 1,
                    "lines_folded": len(found.lines),
                },
            ))
        return found.end_index
    return None


def _match_multiline(
    transformer: MultilineElementTransformer,
    lines: list[str],
    index: int,
) -> _MultilineMatch | None:
    """Locate the start and end of a multiline block beginning at *index*.

    The end pattern is searched first on the start line after the start
    match, where the in-between content is the segment between the two
    matches.  Otherwise the end is the first later line containing the end
    pattern; the in-between lines are the rest of the start line, the lines
    strictly between, and the end line up to the end match.  Without an end
    the block runs to the last line.
    """
    line = lines[index]
    start_match = transformer.start_pattern.search(line)
    if start_match is None:
        return None

    end_match = transformer.end_pattern.search(line, start_match.end())
    if end_match is not None:
        return _MultilineMatch(
            start_match=start_match,
            end_match=end_match,
            lines=[line[start_match.end():end_match.start()]],
            end_index=index,
        )

    collected = [line[start_match.end():]]
    for end_index in range(index + 1, len(lines)):
        candidate = lines[end_index]
        end_match = transformer.end_pattern.search(candidate)
        if end_match is not None:
            collected.append(candidate[:end_match.start()])
            return _MultilineMatch(start_match, end_match, collected, end_index)
        collected.append(candidate)

    return _MultilineMatch(start_match, None, collected, len(lines) - 1)


# ---------------------------------------------------------------------------
# Paragraph helpers
# ---------------------------------------------------------------------------

def claimed_by_block(line: str, by_type: TransformersByType) -> bool:
    """True if an element pattern or a multiline start pattern matches *line*."""
    return any(t.pattern.search(line) for t in by_type.element) or any(
        t.start_pattern.search(line) for t in by_type.multiline_element
    )


def _strip_block_escape(line: str, by_type: TransformersByType) -> str:
    """``\\# not a heading`` imports as the paragraph ``# not a heading``."""
    if line.startswith("\\") and claimed_by_block(line[1:], by_type):
        return line[1:]
    return line


def _remove_empty_paragraphs(root: ElementNode) -> None:
    if root.get_children_size() <= 1:
        return
    for child in root.get_children():
        if is_empty_paragraph(child) and root.get_children_size() > 1:
            child.remove()
