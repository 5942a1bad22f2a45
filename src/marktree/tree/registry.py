"""Registered node types.

A :class:`NodeRegistry` plays the part of a host editor's node
registration: transformers declare which node classes they create and the
registry refuses transformer lists whose dependencies are not available.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from marktree.errors import MarktreeDependencyError
from marktree.tree.nodes import (
    CodeNode,
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
)

if TYPE_CHECKING:
    from marktree.converter.transformers import Transformer

# Always available, whatever the caller registers.
CORE_NODES: tuple[type[Node], ...] = (RootNode, ParagraphNode, TextNode, LineBreakNode)

DEFAULT_NODES: tuple[type[Node], ...] = (
    HeadingNode,
    QuoteNode,
    ListNode,
    ListItemNode,
    CodeNode,
    LinkNode,
)


class NodeRegistry:
    """A set of node classes known to the hosting document model."""

    def __init__(self, nodes: Iterable[type[Node]] = DEFAULT_NODES) -> None:
        self._nodes: set[type[Node]] = set(CORE_NODES)
        self._nodes.update(nodes)

    def register(self, *nodes: type[Node]) -> NodeRegistry:
        self._nodes.update(nodes)
        return self

    def has_node(self, node_class: type[Node]) -> bool:
        return node_class in self._nodes

    def __contains__(self, node_class: object) -> bool:
        return node_class in self._nodes

    @property
    def node_types(self) -> list[str]:
        return sorted(n.type for n in self._nodes)

    def validate(self, transformers: Sequence[Transformer]) -> None:
        """Raise :class:`MarktreeDependencyError` for unmet dependencies."""
        for transformer in transformers:
            missing = [
                dep for dep in getattr(transformer, "dependencies", ())
                if dep not in self._nodes
            ]
            if missing:
                name = getattr(transformer, "name", "") or type(transformer).__name__
                raise MarktreeDependencyError(
                    message=(
                        f"Transformer {name!r} depends on unregistered node "
                        f"type(s): {', '.join(d.type for d in missing)}"
                    ),
                    context={
                        "transformer": name,
                        "missing": [d.type for d in missing],
                    },
                )
