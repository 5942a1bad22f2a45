"""Shared test fixtures for the marktree test suite."""

from __future__ import annotations

import pytest

from marktree.config import MarktreeConfig
from marktree.converter.defaults import TRANSFORMERS
from marktree.converter.md_to_tree import MarkdownToTreeConverter
from marktree.converter.tree_to_md import TreeToMarkdownRenderer


@pytest.fixture
def config() -> MarktreeConfig:
    """Default configuration."""
    return MarktreeConfig()


@pytest.fixture
def transformers() -> list:
    """A fresh copy of the built-in transformer list."""
    return list(TRANSFORMERS)


@pytest.fixture
def converter(config: MarktreeConfig) -> MarkdownToTreeConverter:
    """Markdown-to-tree converter using the default config."""
    return MarkdownToTreeConverter(config)


@pytest.fixture
def renderer(config: MarktreeConfig) -> TreeToMarkdownRenderer:
    """Tree-to-Markdown renderer using the default config."""
    return TreeToMarkdownRenderer(config)
