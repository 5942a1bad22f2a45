"""Full Markdown-to-tree conversion pipeline.

:class:`MarkdownToTreeConverter` runs the import stages:

1. **Normalize**: :func:`normalize_markdown` merges soft-wrapped lines
   (skipped when preserving newlines).
2. **Blocks**: :func:`import_blocks` builds block nodes line by line,
   delegating inline content to the inline importer.

The result is an :class:`ImportResult` holding the populated root and any
non-fatal warnings.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable

from marktree.config import MarktreeConfig
from marktree.converter.block_importer import import_blocks
from marktree.converter.defaults import TRANSFORMERS
from marktree.converter.normalizer import normalize_markdown
from marktree.converter.transformers import Transformer, transformers_by_type
from marktree.models import UNTERMINATED_BLOCK, ConversionWarning, ImportResult
from marktree.observability import NoopMetricsHook, get_logger, timed
from marktree.tree.nodes import RootNode
from marktree.tree.registry import NodeRegistry

log = get_logger("marktree.converter")


class MarkdownToTreeConverter:
    """Convert Markdown text to a document tree.

    Parameters
    ----------
    config:
        Conversion options.  Defaults to ``MarktreeConfig()``.
    transformers:
        Ordered transformer list.  Defaults to
        :data:`~marktree.converter.defaults.TRANSFORMERS`.
    registry:
        Registered node classes.  Every transformer's dependencies must be
        registered.  Defaults to ``NodeRegistry()``.

    Raises
    ------
    MarktreeTransformerError
        If *transformers* contains an object that is not a transformer.
    MarktreeDependencyError
        If a transformer depends on a node class missing from *registry*.

    Examples
    --------
    >>> converter = MarkdownToTreeConverter()
    >>> result = converter.convert("# Hello world")
    >>> result.root.get_first_child().tag
    'h1'
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

    def convert(self, markdown: str, root: RootNode | None = None) -> ImportResult:
        """Full pipeline: normalize -> import blocks -> collect warnings.

        Parameters
        ----------
        markdown:
            Markdown text to convert.
        root:
            Root to append to.  A fresh :class:`RootNode` when omitted.

        Returns
        -------
        ImportResult
            The populated root and any :class:`ConversionWarning`.
        """
        config = self._config
        root = root if root is not None else RootNode()
        warnings: list[ConversionWarning] = []

        with timed(self._metrics, "marktree.import_duration_ms"):
            text = markdown
            if not config.preserve_newlines and config.normalize:
                text = normalize_markdown(text)
            import_blocks(text, self._by_type, root, config.preserve_newlines, warnings)
            if not config.warn_unterminated:
                warnings = [w for w in warnings if w.code != UNTERMINATED_BLOCK]

        blocks = root.get_children_size()
        depth = root.get_depth()
        self._metrics.increment("marktree.blocks_imported_total", blocks)
        self._metrics.gauge("marktree.tree_depth", depth)
        self._metrics.gauge("marktree.markdown_chars", len(markdown), tags={"op": "import"})
        for warning in warnings:
            self._metrics.increment(
                "marktree.conversion_warnings_total", tags={"code": warning.code},
            )

        log.debug(
            "markdown imported",
            extra={
                "extra_fields": {
                    "op": "import",
                    "blocks": blocks,
                    "depth": depth,
                    "warnings": len(warnings),
                    "chars": len(markdown),
                    "preview": markdown,
                },
            },
        )

        if config.debug_dump_tree:
            print(
                "[marktree] Imported tree:",
                json.dumps(root.to_dict(), indent=2, ensure_ascii=False),
                sep="\n",
                file=sys.stderr,
            )

        return ImportResult(root=root, warnings=warnings)


def convert_from_markdown(
    markdown: str,
    transformers: Iterable[Transformer] | None = None,
    root: RootNode | None = None,
    preserve_newlines: bool = False,
) -> RootNode:
    """Import *markdown* into *root* (or a new root) and return the root.

    Shortcut for ``MarkdownToTreeConverter(...).convert(markdown).root``.
    Warnings are logged, not returned.
    """
    converter = MarkdownToTreeConverter(
        MarktreeConfig(preserve_newlines=preserve_newlines),
        transformers,
    )
    result = converter.convert(markdown, root)
    for warning in result.warnings:
        log.info(
            warning.message,
            extra={"extra_fields": {"op": "import", "code": warning.code, **warning.context}},
        )
    return result.root
