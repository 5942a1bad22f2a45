"""Tests for TreeToMarkdownRenderer and convert_to_markdown."""

import pytest

from marktree.config import MarktreeConfig
from marktree.converter.defaults import HEADING
from marktree.converter.tree_to_md import TreeToMarkdownRenderer, convert_to_markdown
from marktree.errors import MarktreeDependencyError
from marktree.models import UNEXPORTED_NODE
from marktree.tree import (
    CodeNode,
    HeadingNode,
    NodeRegistry,
    ParagraphNode,
    QuoteNode,
    RootNode,
    TextNode,
)


class RecordingMetricsHook:
    def __init__(self):
        self.increments = []
        self.timings = []
        self.gauges = []

    def increment(self, name, value=1, tags=None):
        self.increments.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append(name)

    def gauge(self, name, value, tags=None):
        self.gauges.append((name, value, tags))


def sample_root():
    return RootNode().append(
        HeadingNode("h1").append(TextNode("Title")),
        ParagraphNode(),
        ParagraphNode().append(TextNode("Body", {"bold"})),
    )


class TestRender:
    def test_render(self, renderer):
        assert renderer.render(sample_root()) == "# Title\n\n**Body**"
        assert renderer.warnings == []

    def test_preserve_newlines(self):
        renderer = TreeToMarkdownRenderer(MarktreeConfig(preserve_newlines=True))
        assert renderer.render(sample_root()) == "# Title\n\n**Body**"

    def test_warnings_reset_between_renders(self):
        renderer = TreeToMarkdownRenderer(transformers=[])
        renderer.render(RootNode().append(QuoteNode().append(TextNode("q"))))
        assert [w.code for w in renderer.warnings] == [UNEXPORTED_NODE]
        renderer.render(RootNode().append(ParagraphNode().append(TextNode("p"))))
        assert renderer.warnings == []

    def test_missing_dependency(self):
        with pytest.raises(MarktreeDependencyError):
            TreeToMarkdownRenderer(transformers=[HEADING], registry=NodeRegistry(nodes=[]))


class TestObservability:
    def test_metrics_emitted(self):
        hook = RecordingMetricsHook()
        renderer = TreeToMarkdownRenderer(MarktreeConfig(metrics=hook), transformers=[])
        renderer.render(RootNode().append(CodeNode().append(TextNode("x"))))
        assert ("marktree.blocks_exported_total", 1, None) in hook.increments
        assert (
            "marktree.conversion_warnings_total", 1, {"code": UNEXPORTED_NODE}
        ) in hook.increments
        assert hook.timings == ["marktree.export_duration_ms"]

    def test_output_length_gauge(self):
        hook = RecordingMetricsHook()
        TreeToMarkdownRenderer(MarktreeConfig(metrics=hook)).render(sample_root())
        assert hook.gauges == [("marktree.markdown_chars", 17, {"op": "export"})]

    def test_debug_dump_markdown(self, capsys):
        renderer = TreeToMarkdownRenderer(MarktreeConfig(debug_dump_markdown=True))
        renderer.render(sample_root())
        err = capsys.readouterr().err
        assert err == "[marktree] Exported markdown:\n# Title\n\n**Body**\n"


class TestConvertToMarkdown:
    def test_default_transformers(self):
        assert convert_to_markdown(sample_root()) == "# Title\n\n**Body**"

    def test_preserve_newlines(self):
        root = RootNode().append(
            ParagraphNode().append(TextNode("a")),
            ParagraphNode(),
            ParagraphNode().append(TextNode("b")),
        )
        assert convert_to_markdown(root, preserve_newlines=True) == "a\n\nb"
        assert convert_to_markdown(root) == "a\n\nb"

    def test_unexported_nodes_fall_back_to_text(self):
        root = RootNode().append(HeadingNode("h2").append(TextNode("plain")))
        assert convert_to_markdown(root, transformers=[]) == "plain"
