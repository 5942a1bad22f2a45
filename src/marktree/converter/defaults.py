"""Built-in transformers.

The default set covers headings, quotes, bullet and numbered lists, fenced
code, the inline formats (code span, bold, italic, bold-italic,
strike-through, highlight) and links.  Callers build their own list from
these groups and prepend custom transformers to take precedence::

    from marktree.converter.defaults import TRANSFORMERS

    transformers = [MY_BLOCK, *TRANSFORMERS]

:data:`CHECK_LIST` is not part of :data:`ELEMENT_TRANSFORMERS`; add it in
front of :data:`UNORDERED_LIST` to import ``- [ ]`` / ``- [x]`` items as
check lists.
"""

from __future__ import annotations

import re

from marktree.converter.transformers import (
    NO_MATCH,
    ElementTransformer,
    ExportChildren,
    Matched,
    MultilineElementTransformer,
    TextFormatTransformer,
    TextMatchTransformer,
    Transformer,
)
from marktree.tree.nodes import (
    CodeNode,
    ElementNode,
    HeadingNode,
    LineBreakNode,
    LinkNode,
    ListItemNode,
    ListNode,
    Node,
    QuoteNode,
    TextNode,
)

LIST_INDENT_SIZE = 4

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_indent(whitespace: str) -> int:
    """Nesting level of a list item from its leading whitespace.

    Each tab is one level, and every full group of four spaces is one more.
    Tabs and spaces may be mixed in any order: ``"  \\t  "`` is level 2.
    """
    tabs = whitespace.count("\t")
    spaces = whitespace.count(" ")
    return tabs + spaces // LIST_INDENT_SIZE


def _target_list(parent: ElementNode, depth: int, list_type: str, start: int) -> ListNode:
    """Find or create the list an item at *depth* belongs to.

    Nested lists live inside the last item of the list one level up.  A
    missing intermediate level gets a wrapper item holding only the nested
    list.  At the top level a line without a preceding list starts a new
    one whatever its indentation.
    """
    container: ElementNode = parent
    for _ in range(depth):
        last = container.get_last_child()
        if not isinstance(last, ListNode):
            if container is parent:
                break
            last = ListNode(list_type, start)
            container.append(last)
        item = last.get_last_child()
        if not isinstance(item, ListItemNode):
            item = ListItemNode()
            last.append(item)
        container = item

    last = container.get_last_child()
    if isinstance(last, ListNode) and last.list_type == list_type:
        return last
    target = ListNode(list_type, start)
    container.append(target)
    return target


def _list_replace(list_type: str):
    def replace(parent: ElementNode, children: list[Node], match: re.Match[str]) -> None:
        depth = get_indent(match.group(1))
        start = int(match.group(2)) if list_type == "number" else 1
        checked = None
        if list_type == "check":
            checked = (match.group(3) or "").lower() == "x"
        item = ListItemNode(checked=checked)
        item.extend(children)
        _target_list(parent, depth, list_type, start).append(item)

    return replace


def _item_prefix(node: ListNode, item: ListItemNode, index: int) -> str:
    if node.list_type == "number":
        return f"{node.start + index}. "
    if node.list_type == "check":
        return "- [x] " if item.checked else "- [ ] "
    return "- "


def _render_list(node: ListNode, export_children: ExportChildren, depth: int) -> str:
    lines: list[str] = []
    index = 0
    indent = " " * (LIST_INDENT_SIZE * depth)
    for item in node.get_children():
        if not isinstance(item, ListItemNode):
            continue
        nested = item.get_nested_lists()
        # An item holding only nested lists is a wrapper and has no line.
        if item.get_inline_children() or not nested:
            lines.append(indent + _item_prefix(node, item, index) + export_children(item))
            index += 1
        for child in nested:
            lines.append(_render_list(child, export_children, depth + 1))
    return "\n".join(lines)


def _list_export(node: Node, export_children: ExportChildren):
    if not isinstance(node, ListNode):
        return NO_MATCH
    return Matched(_render_list(node, export_children, 0))


# ---------------------------------------------------------------------------
# Element transformers
# ---------------------------------------------------------------------------


def _heading_replace(parent: ElementNode, children: list[Node], match: re.Match[str]) -> None:
    node = HeadingNode(f"h{len(match.group(1))}")
    node.extend(children)
    parent.append(node)


def _heading_export(node: Node, export_children: ExportChildren):
    if not isinstance(node, HeadingNode):
        return NO_MATCH
    return Matched("#" * node.level + " " + export_children(node))


def _quote_replace(parent: ElementNode, children: list[Node], match: re.Match[str]) -> None:
    previous = parent.get_last_child()
    if isinstance(previous, QuoteNode):
        previous.append(LineBreakNode(), *children)
        return
    node = QuoteNode()
    node.extend(children)
    parent.append(node)


def _quote_export(node: Node, export_children: ExportChildren):
    if not isinstance(node, QuoteNode):
        return NO_MATCH
    lines = export_children(node).split("\n")
    return Matched("\n".join("> " + line for line in lines))


HEADING = ElementTransformer(
    pattern=r"^(#{1,6})\s",
    replace=_heading_replace,
    export=_heading_export,
    dependencies=(HeadingNode,),
    name="heading",
)

QUOTE = ElementTransformer(
    pattern=r"^>\s",
    replace=_quote_replace,
    export=_quote_export,
    dependencies=(QuoteNode,),
    name="quote",
)

UNORDERED_LIST = ElementTransformer(
    pattern=r"^(\s*)[-*+]\s",
    replace=_list_replace("bullet"),
    export=_list_export,
    dependencies=(ListNode, ListItemNode),
    name="unordered_list",
)

ORDERED_LIST = ElementTransformer(
    pattern=r"^(\s*)(\d{1,})\.\s",
    replace=_list_replace("number"),
    export=_list_export,
    dependencies=(ListNode, ListItemNode),
    name="ordered_list",
)

CHECK_LIST = ElementTransformer(
    pattern=re.compile(r"^(\s*)(?:-\s)?\s?(\[(\s|x)?\])\s", re.IGNORECASE),
    replace=_list_replace("check"),
    export=_list_export,
    dependencies=(ListNode, ListItemNode),
    name="check_list",
)


# ---------------------------------------------------------------------------
# Multiline element transformers
# ---------------------------------------------------------------------------


def _code_replace(
    parent: ElementNode,
    start_match: re.Match[str],
    end_match: re.Match[str] | None,
    lines: list[str],
) -> None:
    language = start_match.group(1)

    if len(lines) == 1:
        if end_match is not None:
            # ```Single line``` : the word after the fence is content, not a language.
            node = CodeNode()
            code = (language or "") + lines[0]
        else:
            node = CodeNode(language)
            code = lines[0][1:] if lines[0].startswith(" ") else lines[0]
    else:
        node = CodeNode(language)
        body = list(lines)
        if not body[0].strip():
            while body and not body[0].strip():
                body.pop(0)
        elif body[0].startswith(" "):
            body[0] = body[0][1:]
        while body and not body[-1].strip():
            body.pop()
        code = "\n".join(body)

    if code:
        node.append(TextNode(code))
    parent.append(node)


def _code_export(node: Node, export_children: ExportChildren):
    if not isinstance(node, CodeNode):
        return NO_MATCH
    text = node.get_text_content()
    body = "\n" + text if text else ""
    return Matched("```" + (node.language or "") + body + "\n```")


CODE = MultilineElementTransformer(
    start_pattern=r"^[ \t]*```([^\s`]+)?",
    end_pattern=r"[ \t]*```$",
    replace=_code_replace,
    export=_code_export,
    dependencies=(CodeNode,),
    name="code",
)


# ---------------------------------------------------------------------------
# Text format transformers
# ---------------------------------------------------------------------------

INLINE_CODE = TextFormatTransformer(format=("code",), tag="`", name="inline_code")

BOLD_ITALIC_STAR = TextFormatTransformer(
    format=("bold", "italic"), tag="***", name="bold_italic_star",
)

BOLD_ITALIC_UNDERSCORE = TextFormatTransformer(
    format=("bold", "italic"), tag="___", intraword=False, name="bold_italic_underscore",
)

BOLD_STAR = TextFormatTransformer(format=("bold",), tag="**", name="bold_star")

BOLD_UNDERSCORE = TextFormatTransformer(
    format=("bold",), tag="__", intraword=False, name="bold_underscore",
)

HIGHLIGHT = TextFormatTransformer(format=("highlight",), tag="==", name="highlight")

ITALIC_STAR = TextFormatTransformer(format=("italic",), tag="*", name="italic_star")

ITALIC_UNDERSCORE = TextFormatTransformer(
    format=("italic",), tag="_", intraword=False, name="italic_underscore",
)

STRIKETHROUGH = TextFormatTransformer(format=("strikethrough",), tag="~~", name="strikethrough")


# ---------------------------------------------------------------------------
# Text match transformers
# ---------------------------------------------------------------------------


_TITLE_ESCAPE = re.compile(r'\\(["\\])')


def _link_replace(text_node: TextNode, match: re.Match[str]) -> None:
    title = match.group(3)
    if title is not None:
        title = _TITLE_ESCAPE.sub(r"\1", title)
    link = LinkNode(url=match.group(2), title=title)
    link.append(TextNode(match.group(1), text_node.format))
    text_node.replace(link)


def _link_export(node: Node, export_children: ExportChildren):
    if not isinstance(node, LinkNode):
        return NO_MATCH
    title = ""
    if node.title:
        escaped = node.title.replace("\\", "\\\\").replace('"', '\\"')
        title = f' "{escaped}"'
    return Matched(f"[{export_children(node)}]({node.url}{title})")


LINK = TextMatchTransformer(
    import_pattern=r'\[([^\[\]]+)\]\(([^()\s]+)(?:\s+"((?:[^"\\]|\\.)*)")?\s*\)',
    replace=_link_replace,
    export=_link_export,
    dependencies=(LinkNode,),
    name="link",
    escape_chars="[",
)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

ELEMENT_TRANSFORMERS: list[Transformer] = [
    HEADING,
    QUOTE,
    UNORDERED_LIST,
    ORDERED_LIST,
]

MULTILINE_ELEMENT_TRANSFORMERS: list[Transformer] = [CODE]

# Order matters for import ties and export nesting: the first registered
# single-format transformer is the innermost marker on export.
TEXT_FORMAT_TRANSFORMERS: list[Transformer] = [
    INLINE_CODE,
    BOLD_ITALIC_STAR,
    BOLD_ITALIC_UNDERSCORE,
    BOLD_STAR,
    BOLD_UNDERSCORE,
    HIGHLIGHT,
    ITALIC_STAR,
    ITALIC_UNDERSCORE,
    STRIKETHROUGH,
]

TEXT_MATCH_TRANSFORMERS: list[Transformer] = [LINK]

TRANSFORMERS: list[Transformer] = [
    *ELEMENT_TRANSFORMERS,
    *MULTILINE_ELEMENT_TRANSFORMERS,
    *TEXT_FORMAT_TRANSFORMERS,
    *TEXT_MATCH_TRANSFORMERS,
]
