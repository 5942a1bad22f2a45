"""Export: document tree to markup text.

:func:`export_tree` renders every child of the root with the first block
transformer whose ``export`` callback returns :class:`Matched`; paragraphs
and anything no transformer claims fall back to their inline content.

Inline content is rendered by :class:`_InlineExporter`, which keeps a stack
of open format markers while walking the text runs left to right:

* a run that lacks an open format closes that marker and every marker
  opened after it;
* formats the run adds are opened outermost first, so for one run the
  first registered single-format transformer ends up innermost, mirroring
  how the inline importer nests them;
* leading and trailing whitespace of a run stays outside markers opened or
  closed at that run (``**a** b``, never ``**a **b``);
* code-formatted runs are emitted verbatim;
* in every other run, a marker character that could open or close a
  marker in the finished line, a text-match escape character where its
  pattern matches, and a backslash in front of either get a backslash.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from marktree.converter.block_importer import claimed_by_block
from marktree.converter.inline_importer import escapable_chars, marker_lengths, run_flanking
from marktree.converter.transformers import (
    Matched,
    TextFormatTransformer,
    Transformer,
    TransformersByType,
    export_format_transformers,
    transformers_by_type,
)
from marktree.models import UNEXPORTED_NODE, ConversionWarning
from marktree.tree.nodes import (
    ElementNode,
    LineBreakNode,
    LinkNode,
    Node,
    ParagraphNode,
    TextNode,
    is_empty_paragraph,
)


def export_tree(
    root: ElementNode,
    transformers: Iterable[Transformer] | TransformersByType,
    preserve_newlines: bool = False,
    warnings: list[ConversionWarning] | None = None,
) -> str:
    """Render the children of *root* as markup text.

    Parameters
    ----------
    root:
        The document root (or any element whose children are blocks).
    transformers:
        Ordered transformer list or a pre-partitioned
        :class:`TransformersByType`.
    preserve_newlines:
        Join blocks with a single newline, so explicit empty paragraphs
        reproduce the blank lines they were imported from.  Otherwise
        non-empty blocks are separated by a blank line.
    warnings:
        List receiving ``UNEXPORTED_NODE`` warnings.  ``None`` discards
        them.

    Returns
    -------
    str
        The markup text.  Export never fails on tree content.
    """
    by_type = (
        transformers
        if isinstance(transformers, TransformersByType)
        else transformers_by_type(transformers)
    )
    sink: list[ConversionWarning] = warnings if warnings is not None else []
    inline = _InlineExporter(by_type, sink)

    output: list[str] = []
    children = root.get_children()
    for i, child in enumerate(children):
        result = _export_block(child, by_type, inline, sink)
        if (
            not preserve_newlines
            and i > 0
            and not is_empty_paragraph(child)
            and not is_empty_paragraph(children[i - 1])
        ):
            result = "\n" + result
        output.append(result)
    return "\n".join(output)


def _export_block(
    node: Node,
    by_type: TransformersByType,
    inline: _InlineExporter,
    warnings: list[ConversionWarning],
) -> str:
    for transformer in by_type.block:
        if transformer.export is None:
            continue
        result = transformer.export(node, inline.export_children)
        if isinstance(result, Matched):
            return result.value

    if isinstance(node, ParagraphNode):
        text = inline.export_children(node)
        first_line = text.split("\n", 1)[0]
        if claimed_by_block(first_line, by_type) or (
            first_line.startswith("\\") and claimed_by_block(first_line[1:], by_type)
        ):
            return "\\" + text
        return text

    warnings.append(ConversionWarning(
        code=UNEXPORTED_NODE,
        message=f"No transformer exports {node.type!r} blocks; rendered as text",
        context={"node_type": node.type},
    ))
    if isinstance(node, ElementNode) and any(c.is_inline for c in node.children):
        return inline.export_children(node)
    return node.get_text_content()


# ---------------------------------------------------------------------------
# Inline export
# ---------------------------------------------------------------------------

def _split_whitespace(text: str) -> tuple[str, str, str]:
    core = text.strip()
    if not core:
        return text, "", ""
    start = text.index(core)
    return text[:start], core, text[start + len(core):]


@dataclass(frozen=True)
class _MarkerChar:
    shortest: int
    code: bool
    intraword: bool


def _marker_chars(text_format: Iterable[TextFormatTransformer]) -> dict[str, _MarkerChar]:
    lengths = marker_lengths(text_format)
    found: dict[str, _MarkerChar] = {}
    for transformer in text_format:
        char = transformer.tag[0]
        seen = found.get(char)
        found[char] = _MarkerChar(
            shortest=min(lengths.get(char, (1,))),
            code=transformer.is_code or (seen is not None and seen.code),
            intraword=transformer.intraword or (seen is not None and seen.intraword),
        )
    return found


class _InlineExporter:
    """Renders the inline children of an element node."""

    def __init__(self, by_type: TransformersByType, warnings: list[ConversionWarning]) -> None:
        self._by_type = by_type
        self._warnings = warnings
        # Innermost first.
        self._formats: list[TextFormatTransformer] = export_format_transformers(
            by_type.text_format
        )
        self._markers = _marker_chars(by_type.text_format)
        self._escapable = escapable_chars(by_type)

    def export_children(self, node: ElementNode) -> str:
        """Markup for the inline children of *node*; block children are skipped."""
        # (text, plain): plain pieces are escaped once the whole line is known.
        parts: list[tuple[str, bool]] = []
        stack: list[TextFormatTransformer] = []
        pending = ""

        for child in node.get_children():
            if not child.is_inline:
                continue

            plain = False
            if isinstance(child, TextNode):
                formats = child.format
                if "code" in formats:
                    lead, core, trail = "", child.text, ""
                else:
                    lead, core, trail = _split_whitespace(child.text)
                    plain = True
                if not core:
                    pending += lead
                    continue
            elif isinstance(child, LineBreakNode):
                formats, lead, core, trail = frozenset(), "", "\n", ""
            else:
                formats, core = self._export_node(child)
                lead = trail = ""

            self._close(stack, formats, parts)
            parts.append((pending + lead, False))
            pending = trail
            for transformer in reversed(self._formats):
                if transformer.format[0] in formats and transformer not in stack:
                    parts.append((transformer.tag, False))
                    stack.append(transformer)
            parts.append((core, plain))

        self._close(stack, frozenset(), parts)
        parts.append((pending, False))
        return self._escape(parts)

    @staticmethod
    def _close(
        stack: list[TextFormatTransformer],
        formats: frozenset[str],
        parts: list[tuple[str, bool]],
    ) -> None:
        """Close the lowest open marker *formats* lacks and all above it."""
        for depth, transformer in enumerate(stack):
            if transformer.format[0] not in formats:
                for closing in reversed(stack[depth:]):
                    parts.append((closing.tag, False))
                del stack[depth:]
                return

    # -- escaping ----------------------------------------------------------

    def _escape(self, parts: list[tuple[str, bool]]) -> str:
        """Join *parts*, escaping plain characters the importer would read as markup.

        Decisions are taken on the unescaped line so that markers emitted
        for neighbouring runs are taken into account.
        """
        raw = "".join(text for text, _ in parts)
        plain_at = [plain for text, plain in parts for _ in text]
        counts = Counter(raw)
        out: list[str] = []
        offset = 0
        for text, plain in parts:
            if plain:
                out.extend(
                    "\\" + ch if self._needs_escape(raw, offset + i, counts, plain_at) else ch
                    for i, ch in enumerate(text)
                )
            else:
                out.append(text)
            offset += len(text)
        return "".join(out)

    def _needs_escape(
        self, raw: str, index: int, counts: Counter[str], plain_at: list[bool],
    ) -> bool:
        ch = raw[index]
        if ch == "\\":
            return index + 1 < len(raw) and raw[index + 1] in self._escapable
        if ch in self._markers and not self._inert_run(raw, index, counts, plain_at):
            return True
        return any(
            ch in transformer.escape_chars
            and transformer.import_pattern.match(raw, index) is not None
            for transformer in self._by_type.text_match
        )

    def _inert_run(
        self, raw: str, index: int, counts: Counter[str], plain_at: list[bool],
    ) -> bool:
        """True if the run of ``raw[index]`` around *index* can never be a marker.

        A run holding an emitted marker is never inert.
        """
        char = raw[index]
        start = index
        while start > 0 and raw[start - 1] == char:
            start -= 1
        end = index + 1
        while end < len(raw) and raw[end] == char:
            end += 1

        if not all(plain_at[start:end]):
            return False
        marker = self._markers[char]
        if counts[char] == end - start or end - start < marker.shortest:
            return True
        if marker.code:
            return False
        can_open, can_close = run_flanking(raw, start, end, marker.intraword)
        return not (can_open or can_close)

    def _export_node(self, node: Node) -> tuple[frozenset[str], str]:
        """Markup for a typed inline node, with the formats it is wrapped in."""
        formats: frozenset[str] = frozenset()
        export_children = self.export_children
        if isinstance(node, LinkNode) and len(node.children) == 1:
            only = node.children[0]
            if isinstance(only, TextNode):
                formats = only.format
                export_children = _raw_text

        for transformer in self._by_type.text_match:
            if transformer.export is None:
                continue
            result = transformer.export(node, export_children)
            if isinstance(result, Matched):
                return formats, result.value

        self._warnings.append(ConversionWarning(
            code=UNEXPORTED_NODE,
            message=f"No transformer exports {node.type!r} nodes; rendered as text",
            context={"node_type": node.type},
        ))
        return frozenset(), node.get_text_content()


def _raw_text(node: ElementNode) -> str:
    return "".join(child.get_text_content() for child in node.get_children())
