"""Round-trip tests: Markdown -> document tree -> Markdown.

Each case pairs a Markdown string with a compact HTML rendering of the tree
it imports to.  Cases without ``skip_export`` must also export back to the
exact same Markdown.  Import-only cases that have a canonical export are
additionally checked with mistune: the source and the re-exported text must
render to the same HTML.
"""
from html import escape

import mistune
import pytest

from marktree.converter.defaults import TRANSFORMERS
from marktree.converter.md_to_tree import convert_from_markdown
from marktree.converter.transformers import (
    NO_MATCH,
    Matched,
    MultilineElementTransformer,
    TextMatchTransformer,
)
from marktree.converter.tree_to_md import convert_to_markdown
from marktree.tree import (
    CodeNode,
    HeadingNode,
    LineBreakNode,
    LinkNode,
    ListItemNode,
    ListNode,
    ParagraphNode,
    QuoteNode,
    RootNode,
    TextNode,
)

URL = "https://example.com"


# ---------------------------------------------------------------------------
# Custom transformers
# ---------------------------------------------------------------------------

def _mdx_replace(parent, start_match, end_match, lines):
    if start_match.group(1) != "MyComponent":
        return NO_MATCH
    code = CodeNode(start_match.group(1))
    code.append(TextNode("From HTML: " + "\n".join(lines)))
    parent.append(code)
    return None


def _mdx_export(node, export_children):
    if isinstance(node, CodeNode) and node.get_text_content().startswith("From HTML:"):
        body = node.get_text_content().replace("From HTML: ", "", 1)
        return Matched(f"<MyComponent>{body}</MyComponent>")
    return NO_MATCH


# Embedded component markup, imported as a code block.
MDX_HTML = MultilineElementTransformer(
    start_pattern=r"<(\w+)[^>]*>",
    end_pattern=r"</(\w+)\s*>",
    replace=_mdx_replace,
    export=_mdx_export,
    dependencies=(CodeNode,),
    name="mdx_html",
)


def _highlight_replace(text_node, match):
    text_node.set_format("highlight")
    return None


# $...$ imports as highlighted text.
HIGHLIGHT_IMPORT = TextMatchTransformer(
    import_pattern=r"\$([^$]+?)\$",
    replace=_highlight_replace,
    name="highlight_import",
)


# ---------------------------------------------------------------------------
# Tree rendering
# ---------------------------------------------------------------------------

_WRAP = (
    ("code", "code"),
    ("bold", "b"),
    ("italic", "i"),
    ("strikethrough", "s"),
    ("highlight", "mark"),
)


def to_html(node) -> str:
    """Compact HTML for a tree, just enough to compare structure."""
    if isinstance(node, TextNode):
        out = escape(node.text, quote=False)
        for fmt, tag in _WRAP:
            if node.has_format(fmt):
                out = f"<{tag}>{out}</{tag}>"
        return out
    if isinstance(node, LineBreakNode):
        return "<br>"

    inner = "".join(to_html(child) for child in node.children)
    if isinstance(node, RootNode):
        return inner
    if isinstance(node, LinkNode):
        title = f' title="{escape(node.title)}"' if node.title else ""
        return f'<a href="{node.url}"{title}>{inner}</a>'
    if isinstance(node, HeadingNode):
        return f"<{node.tag}>{inner}</{node.tag}>"
    if isinstance(node, QuoteNode):
        return f"<blockquote>{inner}</blockquote>"
    if isinstance(node, ListNode):
        if node.list_type == "number":
            start = f' start="{node.start}"' if node.start != 1 else ""
            return f"<ol{start}>{inner}</ol>"
        return f"<ul>{inner}</ul>"
    if isinstance(node, ListItemNode):
        return f"<li>{inner}</li>"
    if isinstance(node, CodeNode):
        language = f' data-language="{node.language}"' if node.language else ""
        return f"<pre{language}>{inner}</pre>"
    if isinstance(node, ParagraphNode):
        return f"<p>{inner or '<br>'}</p>"
    raise AssertionError(f"unexpected node {node.type}")


# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------

CASES = [
    dict(md="# Hello world", html="<h1>Hello world</h1>"),
    dict(md="## Hello world", html="<h2>Hello world</h2>"),
    dict(md="### Hello world", html="<h3>Hello world</h3>"),
    dict(md="#### Hello world", html="<h4>Hello world</h4>"),
    dict(md="##### Hello world", html="<h5>Hello world</h5>"),
    dict(md="###### Hello world", html="<h6>Hello world</h6>"),
    # Soft-wrapped lines join into one paragraph.
    dict(md="Hello\nworld\n!", html="<p>Helloworld!</p>", skip_export=True),
    dict(md="> Hello\n> world!", html="<blockquote>Hello<br>world!</blockquote>"),
    dict(
        md="- Hello\n- world\n!\n!",
        html="<ul><li>Hello</li><li>world!!</li></ul>",
        skip_export=True,
    ),
    dict(md="- Hello\n- world", html="<ul><li>Hello</li><li>world</li></ul>"),
    dict(
        md="- Level 1\n    - Level 2\n        - Level 3\n\nHello world",
        html=(
            "<ul><li>Level 1<ul><li>Level 2<ul><li>Level 3</li></ul></li></ul></li></ul>"
            "<p>Hello world</p>"
        ),
    ),
    # Tabs and spaces mix for indentation; export always uses four spaces.
    dict(
        md="- Level 1\n\t- Level 2\n  \t  - Level 3\n\nHello world",
        html=(
            "<ul><li>Level 1<ul><li>Level 2<ul><li>Level 3</li></ul></li></ul></li></ul>"
            "<p>Hello world</p>"
        ),
        skip_export=True,
    ),
    # Export uses "-" instead of "*".
    dict(
        md="* Level 1\n    * Level 2\n        * Level 3\n\nHello world",
        html=(
            "<ul><li>Level 1<ul><li>Level 2<ul><li>Level 3</li></ul></li></ul></li></ul>"
            "<p>Hello world</p>"
        ),
        skip_export=True,
        canonical=True,
    ),
    dict(md="1. Hello\n2. world", html="<ol><li>Hello</li><li>world</li></ol>"),
    dict(md="25. Hello\n26. world", html='<ol start="25"><li>Hello</li><li>world</li></ol>'),
    dict(md="*Hello* world", html="<p><i>Hello</i> world</p>"),
    dict(md="**Hello** world", html="<p><b>Hello</b> world</p>"),
    dict(md="***Hello*** world", html="<p><i><b>Hello</b></i> world</p>"),
    dict(md="`Hello` world", html="<p><code>Hello</code> world</p>"),
    dict(md="~~Hello~~ world", html="<p><s>Hello</s> world</p>"),
    dict(md="==Hello== world", html="<p><mark>Hello</mark> world</p>"),
    dict(md="`hello$`", html="<p><code>hello$</code></p>"),
    dict(md="`$$hello`", html="<p><code>$$hello</code></p>"),
    dict(md=f"[Hello]({URL}) world", html=f'<p><a href="{URL}">Hello</a> world</p>'),
    dict(
        md=f'[Hello]({URL} "Hello world") world',
        html=f'<p><a href="{URL}" title="Hello world">Hello</a> world</p>',
    ),
    dict(
        md=f'[Hello]({URL} "Title with \\" escaped character") world',
        html=(
            f'<p><a href="{URL}" title="Title with &quot; escaped character">Hello</a>'
            " world</p>"
        ),
    ),
    dict(md="Hello ~~***world***~~!", html="<p>Hello <s><i><b>world</b></i></s>!</p>"),
    dict(md="*Hello **world**!*", html="<p><i>Hello </i><i><b>world</b></i><i>!</i></p>"),
    # Markers sharing one run of stars.
    dict(md="**Hello *world***", html="<p><b>Hello </b><i><b>world</b></i></p>"),
    dict(md="*Hello **world***", html="<p><i>Hello </i><i><b>world</b></i></p>"),
    dict(md="***Hello** world*", html="<p><i><b>Hello</b></i><i> world</i></p>"),
    dict(md="***Hello* world**", html="<p><i><b>Hello</b></i><b> world</b></p>", skip_export=True),
    dict(md="**a*b****c*", html="<p><b>a</b><i><b>b</b></i><i>c</i></p>"),
    # Backslash escapes.
    dict(md=r"2\*3\*4 and \*a\*", html="<p>2*3*4 and *a*</p>"),
    dict(md=r"\[a](u) b", html="<p>[a](u) b</p>"),
    dict(md=r"a\\\*b", html="<p>a\\*b</p>"),
    dict(md="`a\\`", html="<p><code>a\\</code></p>"),
    dict(
        md=f'[Hello]({URL} "back\\\\slash")',
        html=f'<p><a href="{URL}" title="back\\slash">Hello</a></p>',
    ),
    dict(
        md="# Hello\n\n\n\n**world**!",
        html="<h1>Hello</h1><p><br></p><p><br></p><p><br></p><p><b>world</b>!</p>",
        preserve_newlines=True,
    ),
    dict(
        md="# Hello\nhi\n\n**world**\n\nhi\n> hello\n> hello\n\n# hi\n\nhi",
        html=(
            "<h1>Hello</h1><p>hi</p><p><br></p><p><b>world</b></p><p><br></p><p>hi</p>"
            "<blockquote>hello<br>hello</blockquote><p><br></p><h1>hi</h1><p><br></p>"
            "<p>hi</p>"
        ),
        preserve_newlines=True,
    ),
    # Export uses "*" instead of "_": star markers are registered first.
    dict(md="_Hello_ world", html="<p><i>Hello</i> world</p>", skip_export=True, canonical=True),
    dict(md="__Hello__ world", html="<p><b>Hello</b> world</p>", skip_export=True, canonical=True),
    dict(md="___Hello___ world", html="<p><i><b>Hello</b></i> world</p>", skip_export=True),
    dict(
        md="Hello ~~__*world*__~~!",
        html="<p>Hello <s><i><b>world</b></i></s>!</p>",
        skip_export=True,
    ),
    # The word after a same-line fence is content, not a language.
    dict(md="```Single line Code```", html="<pre>Single line Code</pre>", skip_export=True),
    dict(
        md="```javascript Incomplete tag",
        html='<pre data-language="javascript">Incomplete tag</pre>',
        skip_export=True,
    ),
    dict(
        md="```javascript Incomplete multiline\n\nTag",
        html='<pre data-language="javascript">Incomplete multiline\n\nTag</pre>',
        skip_export=True,
    ),
    dict(md="```\nCode\n```", html="<pre>Code</pre>"),
    dict(md="```javascript\nCode\n```", html='<pre data-language="javascript">Code</pre>'),
    dict(md="```unknown\nCode\n```", html='<pre data-language="unknown">Code</pre>'),
    dict(
        md="```objective-c\nCode\n```",
        html='<pre data-language="objective-c">Code</pre>',
    ),
    dict(md="\t```\nCode\n```", html="<pre>Code</pre>", skip_export=True),
    dict(md="   ```\nCode\n```", html="<pre>Code</pre>", skip_export=True),
    dict(
        md="### Code blocks\n\n```javascript\n1 + 1 = 2;\n```",
        html='<h3>Code blocks</h3><pre data-language="javascript">1 + 1 = 2;</pre>',
    ),
    dict(md="Hello\n\n\n\nworld", html="<p>Hello</p><p>world</p>", skip_export=True),
    dict(md="> Hello\nworld\n!", html="<blockquote>Helloworld!</blockquote>", skip_export=True),
    # Text before a text-match is scanned for further text-matches.
    dict(
        md=f"Hello [world]({URL})! Hello $world$! [Hello]({URL}) world! Hello $world$!",
        html=(
            f'<p>Hello <a href="{URL}">world</a>! Hello <mark>$world$</mark>! '
            f'<a href="{URL}">Hello</a> world! Hello <mark>$world$</mark>!</p>'
        ),
        skip_export=True,
    ),
    dict(
        md="Some HTML in mdx:\n\n<MyComponent>Some Text</MyComponent>",
        html=(
            '<p>Some HTML in mdx:</p>'
            '<pre data-language="MyComponent">From HTML: Some Text</pre>'
        ),
        custom=[MDX_HTML],
    ),
    dict(
        md="Some HTML in mdx:\n\n<MyComponent>Line 1\nSome Text</MyComponent>",
        html=(
            '<p>Some HTML in mdx:</p>'
            '<pre data-language="MyComponent">From HTML: Line 1Some Text</pre>'
        ),
        custom=[MDX_HTML],
        skip_export=True,
    ),
]


def _case_id(case):
    return case["md"].replace("\n", "\\n")


def _import(case):
    transformers = [*case.get("custom", []), *TRANSFORMERS, HIGHLIGHT_IMPORT]
    return convert_from_markdown(
        case["md"],
        transformers,
        preserve_newlines=case.get("preserve_newlines", False),
    )


def _export(case, root):
    transformers = [*case.get("custom", []), *TRANSFORMERS]
    return convert_to_markdown(
        root,
        transformers,
        preserve_newlines=case.get("preserve_newlines", False),
    )


class TestImport:
    @pytest.mark.parametrize("case", CASES, ids=_case_id)
    def test_import(self, case):
        assert to_html(_import(case)) == case["html"]


class TestRoundTrip:
    @pytest.mark.parametrize(
        "case",
        [c for c in CASES if not c.get("skip_export")],
        ids=_case_id,
    )
    def test_export_reproduces_source(self, case):
        assert _export(case, _import(case)) == case["md"]

    @pytest.mark.parametrize("case", CASES, ids=_case_id)
    def test_reimport_gives_same_tree(self, case):
        root = _import(case)
        again = _import({**case, "md": _export(case, root)})
        assert again.to_dict() == root.to_dict()

    @pytest.mark.parametrize(
        "case",
        [c for c in CASES if c.get("canonical")],
        ids=_case_id,
    )
    def test_canonical_export_renders_the_same(self, case):
        exported = _export(case, _import(case))
        assert exported != case["md"]
        assert mistune.html(exported) == mistune.html(case["md"])


class TestExportOnly:
    def test_line_breaks_in_paragraph(self):
        root = RootNode().append(ParagraphNode().append(
            TextNode("Hello"), LineBreakNode(), TextNode("world"), LineBreakNode(), TextNode("!"),
        ))
        assert convert_to_markdown(root) == "Hello\nworld\n!"

    def test_replacement_patterns_are_literal(self):
        root = RootNode().append(ParagraphNode().append(TextNode("$$H$&e$`l$'l$o$")))
        assert convert_to_markdown(root) == "$$H$&e$`l$'l$o$"


class TestCustomTransformers:
    def test_mdx_declines_other_components(self):
        root = convert_from_markdown("<Other>text</Other>", [MDX_HTML, *TRANSFORMERS])
        (node,) = root.children
        assert isinstance(node, ParagraphNode)
        assert node.get_text_content() == "<Other>text</Other>"

    def test_mdx_export_falls_through_for_plain_code(self):
        root = RootNode().append(CodeNode("js").append(TextNode("x")))
        assert convert_to_markdown(root, [MDX_HTML, *TRANSFORMERS]) == "```js\nx\n```"
