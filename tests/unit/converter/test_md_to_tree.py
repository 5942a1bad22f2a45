"""Tests for MarkdownToTreeConverter and convert_from_markdown."""

import json
import logging

import pytest

from marktree.config import MarktreeConfig
from marktree.converter.defaults import CODE, TRANSFORMERS
from marktree.converter.md_to_tree import MarkdownToTreeConverter, convert_from_markdown
from marktree.errors import MarktreeDependencyError, MarktreeTransformerError
from marktree.models import UNTERMINATED_BLOCK, ImportResult
from marktree.tree import NodeRegistry, RootNode


class RecordingMetricsHook:
    def __init__(self):
        self.increments = []
        self.timings = []
        self.gauges = []

    def increment(self, name, value=1, tags=None):
        self.increments.append((name, value, tags))

    def timing(self, name, ms, tags=None):
        self.timings.append((name, ms))

    def gauge(self, name, value, tags=None):
        self.gauges.append((name, value, tags))


class TestConvert:
    def test_returns_import_result(self, converter):
        result = converter.convert("# Hello world")
        assert isinstance(result, ImportResult)
        assert result.warnings == []
        assert result.to_dict() == {
            "type": "root",
            "children": [{
                "type": "heading",
                "tag": "h1",
                "children": [{"type": "text", "text": "Hello world"}],
            }],
        }

    def test_normalizes_by_default(self, converter):
        root = converter.convert("Hello\nworld\n!").root
        assert [c.get_text_content() for c in root.children] == ["Helloworld!"]

    def test_normalize_disabled(self):
        converter = MarkdownToTreeConverter(MarktreeConfig(normalize=False))
        root = converter.convert("Hello\nworld").root
        assert [c.get_text_content() for c in root.children] == ["Hello", "world"]

    def test_preserve_newlines_skips_normalizer(self):
        converter = MarkdownToTreeConverter(MarktreeConfig(preserve_newlines=True))
        root = converter.convert("a\nb\n\nc").root
        assert [c.get_text_content() for c in root.children] == ["a", "b", "", "c"]

    def test_appends_to_given_root(self, converter):
        root = RootNode()
        result = converter.convert("x", root)
        assert result.root is root

    def test_unterminated_warning(self, converter):
        result = converter.convert("```js\ncode")
        assert [w.code for w in result.warnings] == [UNTERMINATED_BLOCK]

    def test_unterminated_warning_disabled(self):
        converter = MarkdownToTreeConverter(MarktreeConfig(warn_unterminated=False))
        assert converter.convert("```js\ncode").warnings == []


class TestConstruction:
    def test_default_transformers(self):
        converter = MarkdownToTreeConverter()
        assert converter.convert("- a").root.children[0].type == "list"

    def test_custom_transformers_only(self):
        converter = MarkdownToTreeConverter(transformers=[CODE])
        root = converter.convert("# not a heading").root
        assert root.children[0].type == "paragraph"

    def test_missing_dependency(self):
        with pytest.raises(MarktreeDependencyError):
            MarkdownToTreeConverter(transformers=TRANSFORMERS, registry=NodeRegistry(nodes=[]))

    def test_invalid_transformer(self):
        with pytest.raises(MarktreeTransformerError):
            MarkdownToTreeConverter(transformers=["not a transformer"])


class TestObservability:
    def test_metrics_emitted(self):
        hook = RecordingMetricsHook()
        converter = MarkdownToTreeConverter(MarktreeConfig(metrics=hook))
        converter.convert("# a\n\nb\n\n```\nc")
        assert ("marktree.blocks_imported_total", 3, None) in hook.increments
        assert (
            "marktree.conversion_warnings_total", 1, {"code": UNTERMINATED_BLOCK}
        ) in hook.increments
        assert [name for name, _ in hook.timings] == ["marktree.import_duration_ms"]

    def test_gauges_emitted(self):
        hook = RecordingMetricsHook()
        converter = MarkdownToTreeConverter(MarktreeConfig(metrics=hook))
        converter.convert("- a\n    - b\n\nc")
        assert hook.gauges == [
            ("marktree.tree_depth", 4, None),
            ("marktree.markdown_chars", 14, {"op": "import"}),
        ]

    def test_flat_document_depth(self):
        hook = RecordingMetricsHook()
        MarkdownToTreeConverter(MarktreeConfig(metrics=hook)).convert("a")
        assert ("marktree.tree_depth", 1, None) in hook.gauges

    def test_debug_dump_tree(self, capsys):
        converter = MarkdownToTreeConverter(MarktreeConfig(debug_dump_tree=True))
        converter.convert("# a")
        err = capsys.readouterr().err
        assert err.startswith("[marktree] Imported tree:")
        dumped = json.loads(err.split("\n", 1)[1])
        assert dumped["children"][0]["tag"] == "h1"

    def test_debug_log_record(self, converter, caplog):
        logger = logging.getLogger("marktree.converter")
        logger.addHandler(caplog.handler)
        try:
            with caplog.at_level(logging.DEBUG, logger="marktree.converter"):
                converter.convert("a\n\nb")
        finally:
            logger.removeHandler(caplog.handler)
        (record,) = [r for r in caplog.records if r.getMessage() == "markdown imported"]
        assert record.extra_fields["blocks"] == 2
        assert record.extra_fields["chars"] == 4
        assert record.extra_fields["depth"] == 1
        assert record.extra_fields["preview"] == "a\n\nb"


class TestConvertFromMarkdown:
    def test_returns_root(self):
        root = convert_from_markdown("*Hello* world")
        assert isinstance(root, RootNode)
        assert root.children[0].children[0].has_format("italic")

    def test_preserve_newlines(self):
        root = convert_from_markdown("a\n\nb", preserve_newlines=True)
        assert len(root.children) == 3

    def test_custom_transformers(self):
        root = convert_from_markdown("```\nx\n```", transformers=[])
        assert [c.get_text_content() for c in root.children] == ["```", "x", "```"]
