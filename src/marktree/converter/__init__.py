"""Markdown <-> document tree conversion engine.

Public API:

- :func:`normalize_markdown`: line-merging pre-pass.
- :func:`import_blocks` / :func:`import_inline`: low-level import.
- :func:`export_tree`: low-level export.
- :class:`MarkdownToTreeConverter` / :func:`convert_from_markdown`.
- :class:`TreeToMarkdownRenderer` / :func:`convert_to_markdown`.
- Transformer variants, :data:`NO_MATCH` / :class:`Matched`, and the
  built-in transformers from :mod:`marktree.converter.defaults`.
"""

from marktree.converter.block_importer import import_blocks
from marktree.converter.defaults import (
    BOLD_ITALIC_STAR,
    BOLD_ITALIC_UNDERSCORE,
    BOLD_STAR,
    BOLD_UNDERSCORE,
    CHECK_LIST,
    CODE,
    ELEMENT_TRANSFORMERS,
    HEADING,
    HIGHLIGHT,
    INLINE_CODE,
    ITALIC_STAR,
    ITALIC_UNDERSCORE,
    LINK,
    MULTILINE_ELEMENT_TRANSFORMERS,
    ORDERED_LIST,
    QUOTE,
    STRIKETHROUGH,
    TEXT_FORMAT_TRANSFORMERS,
    TEXT_MATCH_TRANSFORMERS,
    TRANSFORMERS,
    UNORDERED_LIST,
)
from marktree.converter.exporter import export_tree
from marktree.converter.inline_importer import import_inline
from marktree.converter.md_to_tree import MarkdownToTreeConverter, convert_from_markdown
from marktree.converter.normalizer import normalize_markdown
from marktree.converter.transformers import (
    NO_MATCH,
    ElementTransformer,
    Matched,
    MultilineElementTransformer,
    NoMatch,
    TextFormatTransformer,
    TextMatchTransformer,
    Transformer,
    TransformersByType,
    transformers_by_type,
)
from marktree.converter.tree_to_md import TreeToMarkdownRenderer, convert_to_markdown

__all__ = [
    "BOLD_ITALIC_STAR",
    "BOLD_ITALIC_UNDERSCORE",
    "BOLD_STAR",
    "BOLD_UNDERSCORE",
    "CHECK_LIST",
    "CODE",
    "ELEMENT_TRANSFORMERS",
    "HEADING",
    "HIGHLIGHT",
    "INLINE_CODE",
    "ITALIC_STAR",
    "ITALIC_UNDERSCORE",
    "LINK",
    "MULTILINE_ELEMENT_TRANSFORMERS",
    "NO_MATCH",
    "ORDERED_LIST",
    "QUOTE",
    "STRIKETHROUGH",
    "TEXT_FORMAT_TRANSFORMERS",
    "TEXT_MATCH_TRANSFORMERS",
    "TRANSFORMERS",
    "UNORDERED_LIST",
    "ElementTransformer",
    "MarkdownToTreeConverter",
    "Matched",
    "MultilineElementTransformer",
    "NoMatch",
    "TextFormatTransformer",
    "TextMatchTransformer",
    "Transformer",
    "TransformersByType",
    "TreeToMarkdownRenderer",
    "convert_from_markdown",
    "convert_to_markdown",
    "export_tree",
    "import_blocks",
    "import_inline",
    "normalize_markdown",
    "transformers_by_type",
]
