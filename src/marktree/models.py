"""Public data models for marktree.

Result and warning types returned by the conversion pipelines.  All types
are plain dataclasses with no behaviour beyond what is needed for
structural equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from marktree.tree.nodes import RootNode

# ---------------------------------------------------------------------------
# Warning codes
# ---------------------------------------------------------------------------

UNTERMINATED_BLOCK = "UNTERMINATED_BLOCK"
"""A multiline block start had no matching end; remaining lines were folded in."""

UNEXPORTED_NODE = "UNEXPORTED_NODE"
"""No transformer exported an inline node; its raw text was emitted."""


# ---------------------------------------------------------------------------
# Conversion results
# ---------------------------------------------------------------------------

@dataclass
class ConversionWarning:
    """A non-fatal issue encountered during import or export.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"UNTERMINATED_BLOCK"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class ImportResult:
    """Result of a Markdown-to-tree conversion.

    Attributes
    ----------
    root:
        The populated document root.
    warnings:
        Non-fatal issues encountered during import.
    """

    root: RootNode
    warnings: list[ConversionWarning] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return self.root.to_dict()
