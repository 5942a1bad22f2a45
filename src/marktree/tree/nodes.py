"""Document tree node classes.

The tree is a :class:`RootNode` owning block nodes, which in turn own
inline nodes.  Nodes know their parent, so transformers can inspect and
mutate siblings (merge a quote line into the previous quote, nest a list
item under the previous list) the same way an editor's node API allows.

Block nodes:
    paragraph, heading, quote, list, listitem, code

Inline nodes:
    text, linebreak, link

Structural equality is defined through :meth:`Node.to_dict`: two trees are
equivalent when their dict forms are equal.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, ClassVar

from marktree.errors import MarktreeNodeError

# Format names a text run may carry.
TEXT_FORMATS: frozenset[str] = frozenset({
    "bold",
    "italic",
    "strikethrough",
    "underline",
    "code",
    "subscript",
    "superscript",
    "highlight",
})

# Languages that get syntax-highlighting metadata.  Any other language tag
# is still stored and exported literally.
HIGHLIGHT_LANGUAGES: frozenset[str] = frozenset({
    "c", "clike", "cpp", "css", "html", "java", "javascript", "js",
    "markdown", "md", "markup", "objc", "objective-c", "plain", "plaintext",
    "powershell", "py", "python", "rust", "sql", "swift", "text",
    "typescript", "ts", "xml",
})

_LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "md": "markdown",
    "plaintext": "plain",
    "text": "plain",
    "py": "python",
    "ts": "typescript",
    "objc": "objective-c",
    "objective_c": "objective-c",
}


def normalize_code_language(language: str | None) -> str | None:
    """Map a fence info word to its canonical highlighting name.

    Returns ``None`` for empty or unsupported languages.
    """
    if not language:
        return None
    lang = language.strip().lower()
    if lang not in HIGHLIGHT_LANGUAGES:
        return None
    return _LANGUAGE_ALIASES.get(lang, lang)


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------

class Node:
    """Base class for every tree node."""

    type: ClassVar[str] = "node"
    is_inline: ClassVar[bool] = False

    def __init__(self) -> None:
        self.parent: ElementNode | None = None

    # -- navigation ----------------------------------------------------

    def get_index(self) -> int:
        if self.parent is None:
            return -1
        for i, child in enumerate(self.parent.children):
            if child is self:
                return i
        return -1

    def get_previous_sibling(self) -> Node | None:
        index = self.get_index()
        if index <= 0:
            return None
        assert self.parent is not None
        return self.parent.children[index - 1]

    def get_next_sibling(self) -> Node | None:
        index = self.get_index()
        if index < 0:
            return None
        assert self.parent is not None
        siblings = self.parent.children
        return siblings[index + 1] if index + 1 < len(siblings) else None

    def is_attached(self) -> bool:
        node: Node | None = self
        while node is not None:
            if isinstance(node, RootNode):
                return True
            node = node.parent
        return False

    # -- mutation ------------------------------------------------------

    def remove(self) -> None:
        """Detach this node from its parent.  No-op when already detached."""
        if self.parent is None:
            return
        index = self.get_index()
        del self.parent.children[index]
        self.parent = None

    def replace(self, node: Node) -> Node:
        """Put *node* where this node is and detach this node."""
        parent = self.parent
        if parent is None:
            raise MarktreeNodeError(
                message="Cannot replace a detached node",
                context={"node_type": self.type, "operation": "replace"},
            )
        parent.insert(self.get_index(), node)
        self.remove()
        return node

    def insert_before(self, node: Node) -> Node:
        parent = self.parent
        if parent is None:
            raise MarktreeNodeError(
                message="Cannot insert next to a detached node",
                context={"node_type": self.type, "operation": "insert_before"},
            )
        parent.insert(self.get_index(), node)
        return node

    # -- content -------------------------------------------------------

    def get_text_content(self) -> str:
        return ""

    def export_dict(self) -> dict[str, Any]:
        """Type-specific attributes for :meth:`to_dict`."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type}
        data.update(self.export_dict())
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.export_dict()!r})"


class ElementNode(Node):
    """A node that owns an ordered list of children."""

    type: ClassVar[str] = "element"

    def __init__(self) -> None:
        super().__init__()
        self.children: list[Node] = []

    def get_children(self) -> list[Node]:
        return list(self.children)

    def get_children_size(self) -> int:
        return len(self.children)

    def get_first_child(self) -> Node | None:
        return self.children[0] if self.children else None

    def get_last_child(self) -> Node | None:
        return self.children[-1] if self.children else None

    def is_empty(self) -> bool:
        return not self.children

    def iter_descendants(self) -> Iterator[Node]:
        for child in self.children:
            yield child
            if isinstance(child, ElementNode):
                yield from child.iter_descendants()

    def get_depth(self) -> int:
        """Levels of element nesting below this node; 0 without element children."""
        return max(
            (child.get_depth() + 1 for child in self.children if isinstance(child, ElementNode)),
            default=0,
        )

    def get_last_descendant(self) -> Node | None:
        node = self.get_last_child()
        while isinstance(node, ElementNode) and node.children:
            node = node.get_last_child()
        return node

    def insert(self, index: int, node: Node) -> Node:
        """Insert *node* at *index*, detaching it from any previous parent."""
        if node is self or (
            isinstance(node, ElementNode)
            and any(d is self for d in node.iter_descendants())
        ):
            raise MarktreeNodeError(
                message="Cannot insert a node into its own subtree",
                context={"node_type": node.type, "operation": "insert"},
            )
        if isinstance(node, RootNode):
            raise MarktreeNodeError(
                message="The root node cannot be a child",
                context={"node_type": node.type, "operation": "insert"},
            )
        node.remove()
        self.children.insert(index, node)
        node.parent = self
        return node

    def append(self, *nodes: Node) -> ElementNode:
        for node in nodes:
            self.insert(len(self.children), node)
        return self

    def extend(self, nodes: Iterable[Node]) -> ElementNode:
        return self.append(*list(nodes))

    def clear(self) -> ElementNode:
        for child in list(self.children):
            child.remove()
        return self

    def get_text_content(self) -> str:
        separator = "" if self.is_inline or self._has_inline_children() else "\n\n"
        return separator.join(child.get_text_content() for child in self.children)

    def _has_inline_children(self) -> bool:
        return any(child.is_inline for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["children"] = [child.to_dict() for child in self.children]
        return data

    def normalize_text(self) -> ElementNode:
        """Merge adjacent text runs with identical formats and drop empty runs.

        Import may split one visual run into several text nodes; merging
        them gives a canonical shape for structural comparison.
        """
        merged: list[Node] = []
        for child in list(self.children):
            if isinstance(child, ElementNode):
                child.normalize_text()
            if isinstance(child, TextNode):
                if not child.text:
                    child.remove()
                    continue
                previous = merged[-1] if merged else None
                if isinstance(previous, TextNode) and previous.format == child.format:
                    previous.text += child.text
                    child.remove()
                    continue
            merged.append(child)
        return self


class RootNode(ElementNode):
    """The document root.  Owns block nodes only."""

    type: ClassVar[str] = "root"

    def remove(self) -> None:
        raise MarktreeNodeError(
            message="The root node cannot be removed",
            context={"node_type": self.type, "operation": "remove"},
        )


# ---------------------------------------------------------------------------
# Block nodes
# ---------------------------------------------------------------------------

class ParagraphNode(ElementNode):
    type: ClassVar[str] = "paragraph"


class HeadingNode(ElementNode):
    """A heading block; ``tag`` is ``"h1"`` .. ``"h6"``."""

    type: ClassVar[str] = "heading"

    def __init__(self, tag: str = "h1") -> None:
        super().__init__()
        if tag not in ("h1", "h2", "h3", "h4", "h5", "h6"):
            raise MarktreeNodeError(
                message=f"Invalid heading tag: {tag!r}",
                context={"node_type": self.type, "operation": "create"},
            )
        self.tag = tag

    @property
    def level(self) -> int:
        return int(self.tag[1])

    def export_dict(self) -> dict[str, Any]:
        return {"tag": self.tag}


class QuoteNode(ElementNode):
    type: ClassVar[str] = "quote"


class ListNode(ElementNode):
    """A list block.  ``list_type`` is ``bullet``, ``number`` or ``check``."""

    type: ClassVar[str] = "list"

    def __init__(self, list_type: str = "bullet", start: int = 1) -> None:
        super().__init__()
        if list_type not in ("bullet", "number", "check"):
            raise MarktreeNodeError(
                message=f"Invalid list type: {list_type!r}",
                context={"node_type": self.type, "operation": "create"},
            )
        self.list_type = list_type
        self.start = start

    def get_text_content(self) -> str:
        return "\n".join(child.get_text_content() for child in self.children)

    def export_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"list_type": self.list_type}
        if self.list_type == "number":
            data["start"] = self.start
        return data


class ListItemNode(ElementNode):
    """One list item.

    Children are inline nodes optionally followed by nested
    :class:`ListNode` blocks.  ``checked`` is only meaningful inside a
    ``check`` list.
    """

    type: ClassVar[str] = "listitem"

    def __init__(self, checked: bool | None = None) -> None:
        super().__init__()
        self.checked = checked

    def get_inline_children(self) -> list[Node]:
        return [c for c in self.children if not isinstance(c, ListNode)]

    def get_nested_lists(self) -> list[ListNode]:
        return [c for c in self.children if isinstance(c, ListNode)]

    def get_value(self) -> int:
        """1-based position among siblings, offset by the list's start."""
        parent = self.parent
        start = parent.start if isinstance(parent, ListNode) else 1
        return start + max(self.get_index(), 0)

    def get_text_content(self) -> str:
        inline = "".join(c.get_text_content() for c in self.get_inline_children())
        nested = [c.get_text_content() for c in self.get_nested_lists()]
        return "\n".join([inline, *nested]) if nested else inline

    def export_dict(self) -> dict[str, Any]:
        if self.checked is None:
            return {}
        return {"checked": self.checked}


class CodeNode(ElementNode):
    """A fenced code block.

    ``language`` keeps the fence info word exactly as written, supported or
    not; :attr:`highlight_language` is the presentation-layer metadata and
    is ``None`` for languages without highlighting support.
    """

    type: ClassVar[str] = "code"

    def __init__(self, language: str | None = None) -> None:
        super().__init__()
        self.language = language or None

    @property
    def highlight_language(self) -> str | None:
        return normalize_code_language(self.language)

    def get_text_content(self) -> str:
        return "".join(child.get_text_content() for child in self.children)

    def export_dict(self) -> dict[str, Any]:
        return {"language": self.language}


# ---------------------------------------------------------------------------
# Inline nodes
# ---------------------------------------------------------------------------

class TextNode(Node):
    """A run of text carrying a set of format names."""

    type: ClassVar[str] = "text"
    is_inline: ClassVar[bool] = True

    def __init__(self, text: str = "", format: Iterable[str] = ()) -> None:
        super().__init__()
        self.text = text
        self.format: frozenset[str] = _check_formats(format, self.type)

    def has_format(self, name: str) -> bool:
        return name in self.format

    def set_format(self, format: Iterable[str]) -> TextNode:
        self.format = _check_formats(format, self.type)
        return self

    def add_format(self, *names: str) -> TextNode:
        return self.set_format(self.format | set(names))

    def toggle_format(self, name: str) -> TextNode:
        return self.set_format(self.format ^ {name})

    def set_text_content(self, text: str) -> TextNode:
        self.text = text
        return self

    def split_text(self, *offsets: int) -> list[TextNode]:
        """Split this node in place at *offsets*; returns the pieces in order.

        Empty pieces are not created.  The first piece is this node.
        """
        bounds = sorted({o for o in offsets if 0 < o < len(self.text)})
        if not bounds:
            return [self]
        cuts = [0, *bounds, len(self.text)]
        pieces = [self.text[a:b] for a, b in zip(cuts, cuts[1:])]
        self.text = pieces[0]
        nodes: list[TextNode] = [self]
        anchor: Node = self
        for piece in pieces[1:]:
            node = TextNode(piece, self.format)
            if anchor.parent is not None:
                anchor.parent.insert(anchor.get_index() + 1, node)
            nodes.append(node)
            anchor = node
        return nodes

    def get_text_content(self) -> str:
        return self.text

    def export_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.format:
            data["format"] = sorted(self.format)
        return data


class LineBreakNode(Node):
    type: ClassVar[str] = "linebreak"
    is_inline: ClassVar[bool] = True

    def get_text_content(self) -> str:
        return "\n"


class LinkNode(ElementNode):
    """An inline link wrapping text runs."""

    type: ClassVar[str] = "link"
    is_inline: ClassVar[bool] = True

    def __init__(self, url: str = "", title: str | None = None) -> None:
        super().__init__()
        self.url = url
        self.title = title or None

    def export_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"url": self.url}
        if self.title is not None:
            data["title"] = self.title
        return data


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _check_formats(format: Iterable[str], node_type: str) -> frozenset[str]:
    if isinstance(format, str):
        format = (format,)
    formats = frozenset(format)
    unknown = formats - TEXT_FORMATS
    if unknown:
        raise MarktreeNodeError(
            message=f"Unknown text format(s): {', '.join(sorted(unknown))}",
            context={"node_type": node_type, "operation": "set_format"},
        )
    return formats


def is_empty_paragraph(node: Node | None) -> bool:
    """True for a paragraph with no content or only up to three spaces."""
    if not isinstance(node, ParagraphNode):
        return False
    if not node.children:
        return True
    if len(node.children) != 1:
        return False
    child = node.children[0]
    return isinstance(child, TextNode) and len(child.text) <= 3 and not child.text.strip()
