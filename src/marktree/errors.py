"""Error hierarchy for marktree.

Import and export never raise on text or tree *input*: a transformer that
cannot handle something declines with ``NO_MATCH`` and the engine falls
through to the next rule or a default rendering.  The errors below are for
programmer mistakes only: malformed transformer definitions, transformers
whose node dependencies are not registered, and illegal tree mutations.

Every class inherits from :class:`MarktreeError` and carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error marktree can raise."""

    INVALID_TRANSFORMER = "INVALID_TRANSFORMER"
    MISSING_DEPENDENCY = "MISSING_DEPENDENCY"
    INVALID_NODE_OPERATION = "INVALID_NODE_OPERATION"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class MarktreeError(Exception):
    """Base exception for all marktree errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Transformer errors
# ---------------------------------------------------------------------------

class MarktreeTransformerError(MarktreeError):
    """A transformer definition is malformed.

    Raised when a transformer is constructed with an empty marker, unknown
    format names, or when the transformer list contains an object that is
    not one of the four transformer variants.

    Context keys: ``transformer``, ``field``, ``value``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSFORMER,
            message=message,
            context=context,
            cause=cause,
        )


class MarktreeDependencyError(MarktreeError):
    """A transformer depends on a node class that is not registered.

    Context keys: ``transformer``, ``missing`` (list of node type names).
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MISSING_DEPENDENCY,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Tree errors
# ---------------------------------------------------------------------------

class MarktreeNodeError(MarktreeError):
    """An illegal document-tree mutation was attempted.

    Examples: making the root a child, inserting a node into its
    own subtree, replacing a detached node, or setting an unknown text
    format.

    Context keys: ``node_type``, ``operation``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_NODE_OPERATION,
            message=message,
            context=context,
            cause=cause,
        )
