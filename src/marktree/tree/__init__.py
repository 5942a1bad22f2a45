"""Document tree consumed by the conversion engine.

Public API:

- Node classes: :class:`RootNode`, :class:`ParagraphNode`,
  :class:`HeadingNode`, :class:`QuoteNode`, :class:`ListNode`,
  :class:`ListItemNode`, :class:`CodeNode`, :class:`TextNode`,
  :class:`LineBreakNode`, :class:`LinkNode`.
- :class:`NodeRegistry`: registered node types and dependency checks.
"""

from marktree.tree.nodes import (
    HIGHLIGHT_LANGUAGES,
    TEXT_FORMATS,
    CodeNode,
    ElementNode,
    HeadingNode,
    LineBreakNode,
    LinkNode,
    ListItemNode,
    ListNode,
    Node,
    ParagraphNode,
    QuoteNode,
    RootNode,
    TextNode,
    is_empty_paragraph,
    normalize_code_language,
)
from marktree.tree.registry import CORE_NODES, DEFAULT_NODES, NodeRegistry

__all__ = [
    "CORE_NODES",
    "DEFAULT_NODES",
    "HIGHLIGHT_LANGUAGES",
    "TEXT_FORMATS",
    "CodeNode",
    "ElementNode",
    "HeadingNode",
    "LineBreakNode",
    "LinkNode",
    "ListItemNode",
    "ListNode",
    "Node",
    "NodeRegistry",
    "ParagraphNode",
    "QuoteNode",
    "RootNode",
    "TextNode",
    "is_empty_paragraph",
    "normalize_code_language",
]
