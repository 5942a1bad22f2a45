"""marktree: Markdown <-> document tree conversion through ordered transformers.

Public re-exports
-----------------

* **Pipelines:** :class:`MarkdownToTreeConverter`,
  :class:`TreeToMarkdownRenderer`, :func:`convert_from_markdown`,
  :func:`convert_to_markdown`
* **Engine:** :func:`normalize_markdown`, :func:`import_blocks`,
  :func:`import_inline`, :func:`export_tree`
* **Transformers:** the four variants, :data:`NO_MATCH`, :class:`Matched`
  and the built-in rule set
* **Configuration, errors, models**

Usage::

    from marktree import convert_from_markdown, convert_to_markdown

    root = convert_from_markdown("# Hello *world*")
    assert convert_to_markdown(root) == "# Hello *world*"
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from marktree.config import MarktreeConfig

# ── Engine and transformers ─────────────────────────────────────────────
from marktree.converter import (
    CHECK_LIST,
    CODE,
    ELEMENT_TRANSFORMERS,
    HEADING,
    LINK,
    MULTILINE_ELEMENT_TRANSFORMERS,
    NO_MATCH,
    ORDERED_LIST,
    QUOTE,
    TEXT_FORMAT_TRANSFORMERS,
    TEXT_MATCH_TRANSFORMERS,
    TRANSFORMERS,
    UNORDERED_LIST,
    ElementTransformer,
    MarkdownToTreeConverter,
    Matched,
    MultilineElementTransformer,
    TextFormatTransformer,
    TextMatchTransformer,
    Transformer,
    TreeToMarkdownRenderer,
    convert_from_markdown,
    convert_to_markdown,
    export_tree,
    import_blocks,
    import_inline,
    normalize_markdown,
)

# ── Errors ──────────────────────────────────────────────────────────────
from marktree.errors import (
    ErrorCode,
    MarktreeDependencyError,
    MarktreeError,
    MarktreeNodeError,
    MarktreeTransformerError,
)

# ── Models ──────────────────────────────────────────────────────────────
from marktree.models import (
    UNEXPORTED_NODE,
    UNTERMINATED_BLOCK,
    ConversionWarning,
    ImportResult,
)

# ── Tree ────────────────────────────────────────────────────────────────
from marktree.tree import (
    CodeNode,
    HeadingNode,
    LineBreakNode,
    LinkNode,
    ListItemNode,
    ListNode,
    NodeRegistry,
    ParagraphNode,
    QuoteNode,
    RootNode,
    TextNode,
)

__version__ = "0.1.0"

__all__ = [
    "CHECK_LIST",
    "CODE",
    "ELEMENT_TRANSFORMERS",
    "HEADING",
    "LINK",
    "MULTILINE_ELEMENT_TRANSFORMERS",
    "NO_MATCH",
    "ORDERED_LIST",
    "QUOTE",
    "TEXT_FORMAT_TRANSFORMERS",
    "TEXT_MATCH_TRANSFORMERS",
    "TRANSFORMERS",
    "UNEXPORTED_NODE",
    "UNORDERED_LIST",
    "UNTERMINATED_BLOCK",
    "CodeNode",
    "ConversionWarning",
    "ElementTransformer",
    "ErrorCode",
    "HeadingNode",
    "ImportResult",
    "LineBreakNode",
    "LinkNode",
    "ListItemNode",
    "ListNode",
    "MarkdownToTreeConverter",
    "MarktreeConfig",
    "MarktreeDependencyError",
    "MarktreeError",
    "MarktreeNodeError",
    "MarktreeTransformerError",
    "Matched",
    "MultilineElementTransformer",
    "NodeRegistry",
    "ParagraphNode",
    "QuoteNode",
    "RootNode",
    "TextFormatTransformer",
    "TextMatchTransformer",
    "TextNode",
    "Transformer",
    "TreeToMarkdownRenderer",
    "__version__",
    "convert_from_markdown",
    "convert_to_markdown",
    "export_tree",
    "import_blocks",
    "import_inline",
    "normalize_markdown",
]
