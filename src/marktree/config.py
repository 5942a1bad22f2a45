"""Configuration for marktree conversions.

:class:`MarktreeConfig` captures the knobs shared by
:class:`~marktree.converter.md_to_tree.MarkdownToTreeConverter` and
:class:`~marktree.converter.tree_to_md.TreeToMarkdownRenderer`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class MarktreeConfig:
    """Complete configuration for a conversion pipeline.

    Every parameter has a default, so ``MarktreeConfig()`` gives the
    standard Markdown behaviour.

    Parameters
    ----------
    preserve_newlines:
        Keep every line break as written.  On import, each blank line
        becomes an explicit empty paragraph and the normalizer is skipped;
        on export, blocks are joined by single newlines.
    normalize:
        Run :func:`~marktree.converter.normalizer.normalize_markdown` before
        block import.  Ignored when *preserve_newlines* is set.
    warn_unterminated:
        Record an ``UNTERMINATED_BLOCK`` warning when a multiline block
        (e.g. a code fence) runs to the end of the input.
    metrics:
        A :class:`~marktree.observability.MetricsHook` implementation.
        ``None`` uses :class:`~marktree.observability.NoopMetricsHook`.
    debug_dump_tree:
        Print the imported tree as JSON to stderr.
    debug_dump_markdown:
        Print the exported Markdown to stderr.
    """

    preserve_newlines: bool = False
    normalize: bool = True
    warn_unterminated: bool = True
    metrics: Any | None = None
    debug_dump_tree: bool = False
    debug_dump_markdown: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in (
            "preserve_newlines",
            "normalize",
            "warn_unterminated",
            "debug_dump_tree",
            "debug_dump_markdown",
        ):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ValueError(f"{name} must be a bool, got {value!r}")

        if self.metrics is not None:
            from marktree.observability.metrics import MetricsHook

            if not isinstance(self.metrics, MetricsHook):
                raise ValueError(
                    f"metrics must implement MetricsHook, got {type(self.metrics).__name__}"
                )
