"""Document tree to Markdown renderer.

Usage::

    from marktree.converter.tree_to_md import TreeToMarkdownRenderer

    renderer = TreeToMarkdownRenderer()
    md = renderer.render(root)
    renderer.warnings  # nodes no transformer could export
"""

from __future__ import annotations

import sys
from collections.abc import Iterable

from marktree.config import MarktreeConfig
from marktree.converter.defaults import TRANSFORMERS
from marktree.converter.exporter import export_tree
from marktree.converter.transformers import Transformer, transformers_by_type
from marktree.models import ConversionWarning
from marktree.observability import NoopMetricsHook, get_logger, timed
from marktree.tree.nodes import ElementNode
from marktree.tree.registry import NodeRegistry

log = get_logger("marktree.converter")


class TreeToMarkdownRenderer:
    """Stateful renderer that converts a document tree to Markdown.

    :attr:`warnings` holds the :class:`ConversionWarning` records of the
    last :meth:`render` call.

    Parameters
    ----------
    config:
        Conversion options; only ``preserve_newlines``, ``metrics`` and
        ``debug_dump_markdown`` apply to export.
    transformers:
        Ordered transformer list.  Defaults to
        :data:`~marktree.converter.defaults.TRANSFORMERS`.
    registry:
        Registered node classes, checked against transformer dependencies.
    """

    def __init__(
        self,
        config: MarktreeConfig | None = None,
        transformers: Iterable[Transformer] | None = None,
        registry: NodeRegistry | None = None,
    ) -> None:
        self._config = config or MarktreeConfig()
        self._transformers = list(TRANSFORMERS if transformers is None else transformers)
        self._registry = registry or NodeRegistry()
        self._registry.validate(self._transformers)
        self._by_type = transformers_by_type(self._transformers)
        self._metrics = self._config.metrics or NoopMetricsHook()
        self.warnings: list[ConversionWarning] = []

    def render(self, root: ElementNode) -> str:
        """Render the children of *root* as Markdown.

        Parameters
        ----------
        root:
            The document root.

        Returns
        -------
        str
            The rendered Markdown text.
        """
        config = self._config
        self.warnings = []
        with timed(self._metrics, "marktree.export_duration_ms"):
            markdown = export_tree(root, self._by_type, config.preserve_newlines, self.warnings)

        blocks = root.get_children_size()
        self._metrics.increment("marktree.blocks_exported_total", blocks)
        self._metrics.gauge("marktree.markdown_chars", len(markdown), tags={"op": "export"})
        for warning in self.warnings:
            self._metrics.increment(
                "marktree.conversion_warnings_total", tags={"code": warning.code},
            )

        log.debug(
            "tree exported",
            extra={
                "extra_fields": {
                    "op": "export",
                    "blocks": blocks,
                    "warnings": len(self.warnings),
                    "chars": len(markdown),
                },
            },
        )

        if config.debug_dump_markdown:
            print("[marktree] Exported markdown:", markdown, sep="\n", file=sys.stderr)

        return markdown


def convert_to_markdown(
    root: ElementNode,
    transformers: Iterable[Transformer] | None = None,
    preserve_newlines: bool = False,
) -> str:
    """Export *root* to Markdown.

    Shortcut for ``TreeToMarkdownRenderer(...).render(root)``.
    """
    renderer = TreeToMarkdownRenderer(
        MarktreeConfig(preserve_newlines=preserve_newlines),
        transformers,
    )
    markdown = renderer.render(root)
    for warning in renderer.warnings:
        log.info(
            warning.message,
            extra={"extra_fields": {"op": "export", "code": warning.code, **warning.context}},
        )
    return markdown
