"""Transformer variants and the match result type.

A transformer is a rule converting between markup text and one tree
construct.  There are four variants, each a frozen dataclass carrying only
the fields relevant to its kind:

* :class:`ElementTransformer`: one line <-> one block node.
* :class:`MultilineElementTransformer`: a start line, an end line and the
  lines in between <-> one block node.
* :class:`TextFormatTransformer`: a symmetric inline marker <-> a set of
  text format names.
* :class:`TextMatchTransformer`: an inline pattern <-> a typed inline node.

Callers assemble an ordered list of transformers and pass it to every
import/export call.  Order is precedence: the first accepting transformer
wins in both directions.

Callbacks decline with :data:`NO_MATCH` so the engine tries the next
transformer.  Export callbacks accept by returning :class:`Matched`;
``Matched("")`` is a legitimate empty rendering and is not a decline.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, TypeVar, Union

from marktree.errors import MarktreeTransformerError
from marktree.tree.nodes import TEXT_FORMATS, ElementNode, Node, TextNode

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

class NoMatch:
    """Sentinel type: the transformer does not handle this input."""

    _instance: ClassVar[NoMatch | None] = None

    def __new__(cls) -> NoMatch:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_MATCH"

    def __bool__(self) -> bool:
        return False


NO_MATCH = NoMatch()


@dataclass(frozen=True)
class Matched(Generic[T]):
    """The transformer accepted; ``value`` is its result."""

    value: T


MatchResult = Union[Matched[T], NoMatch]


# ---------------------------------------------------------------------------
# Callback signatures
# ---------------------------------------------------------------------------

ExportChildren = Callable[[ElementNode], str]

ElementReplace = Callable[[ElementNode, list[Node], "re.Match[str]"], Any]
"""``(parent, children, match)``; return :data:`NO_MATCH` to decline."""

MultilineReplace = Callable[
    [ElementNode, "re.Match[str]", "re.Match[str] | None", list[str]], Any,
]
"""``(parent, start_match, end_match, lines_in_between)``; return
:data:`NO_MATCH` to decline."""

BlockExport = Callable[[Node, ExportChildren], "Matched[str] | NoMatch"]

TextMatchReplace = Callable[[TextNode, "re.Match[str]"], Any]
"""``(text_node, match)``; return :data:`NO_MATCH` to decline."""

InlineExport = Callable[[Node, ExportChildren], "Matched[str] | NoMatch"]


def _compile(pattern: str | re.Pattern[str], owner: str, field_name: str) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise MarktreeTransformerError(
            message=f"Invalid regular expression for {owner}.{field_name}: {exc}",
            context={"transformer": owner, "field": field_name, "value": pattern},
            cause=exc,
        ) from exc


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ElementTransformer:
    """Single-line block rule.

    ``pattern`` is matched at the start of the line; the text after the
    match is inline-imported and handed to ``replace`` as *children*.
    """

    kind: ClassVar[str] = "element"

    pattern: re.Pattern[str]
    replace: ElementReplace
    export: BlockExport | None = None
    dependencies: tuple[type[Node], ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "pattern", _compile(self.pattern, self.name or "element", "pattern"))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass(frozen=True)
class MultilineElementTransformer:
    """Block rule spanning a start line, an end line and everything between."""

    kind: ClassVar[str] = "multiline_element"

    start_pattern: re.Pattern[str]
    end_pattern: re.Pattern[str]
    replace: MultilineReplace
    export: BlockExport | None = None
    dependencies: tuple[type[Node], ...] = ()
    name: str = ""

    def __post_init__(self) -> None:
        owner = self.name or "multiline_element"
        object.__setattr__(self, "start_pattern", _compile(self.start_pattern, owner, "start_pattern"))
        object.__setattr__(self, "end_pattern", _compile(self.end_pattern, owner, "end_pattern"))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass(frozen=True)
class TextFormatTransformer:
    """Symmetric inline marker, e.g. ``**`` for bold.

    ``intraword=False`` forbids the marker from acting as a boundary when it
    has word characters on both sides (``snake_case_name``).
    """

    kind: ClassVar[str] = "text_format"

    format: tuple[str, ...]
    tag: str
    intraword: bool = True
    name: str = ""

    def __post_init__(self) -> None:
        formats = (self.format,) if isinstance(self.format, str) else tuple(self.format)
        owner = self.name or f"text_format {self.tag!r}"
        if not self.tag:
            raise MarktreeTransformerError(
                message="Text format transformer needs a non-empty tag",
                context={"transformer": owner, "field": "tag", "value": self.tag},
            )
        if not formats:
            raise MarktreeTransformerError(
                message="Text format transformer needs at least one format",
                context={"transformer": owner, "field": "format", "value": formats},
            )
        unknown = [f for f in formats if f not in TEXT_FORMATS]
        if unknown:
            raise MarktreeTransformerError(
                message=f"Unknown text format(s): {', '.join(unknown)}",
                context={"transformer": owner, "field": "format", "value": formats},
            )
        object.__setattr__(self, "format", formats)

    @property
    def is_code(self) -> bool:
        """Code markers take their content verbatim."""
        return "code" in self.format


@dataclass(frozen=True)
class TextMatchTransformer:
    """Inline pattern rule, e.g. a link.

    ``escape_chars`` lists the characters a match starts with.  Export
    backslash-escapes one in plain text where the pattern would match, and
    import drops that backslash again.
    """

    kind: ClassVar[str] = "text_match"

    import_pattern: re.Pattern[str]
    replace: TextMatchReplace
    export: InlineExport | None = None
    dependencies: tuple[type[Node], ...] = ()
    name: str = ""
    escape_chars: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "import_pattern",
            _compile(self.import_pattern, self.name or "text_match", "import_pattern"),
        )
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


Transformer = Union[
    ElementTransformer,
    MultilineElementTransformer,
    TextFormatTransformer,
    TextMatchTransformer,
]

_VARIANTS = (
    ElementTransformer,
    MultilineElementTransformer,
    TextFormatTransformer,
    TextMatchTransformer,
)


# ---------------------------------------------------------------------------
# Registry partitioning
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransformersByType:
    """An ordered transformer list split per variant.

    Each field keeps the relative registration order of the input list.
    ``block`` holds element and multiline-element transformers together, in
    registration order, for export dispatch.  ``inline_order`` maps every
    inline transformer to its position in the input list.
    """

    element: tuple[ElementTransformer, ...] = ()
    multiline_element: tuple[MultilineElementTransformer, ...] = ()
    text_format: tuple[TextFormatTransformer, ...] = ()
    text_match: tuple[TextMatchTransformer, ...] = ()
    block: tuple[ElementTransformer | MultilineElementTransformer, ...] = ()
    inline_order: dict[int, int] = field(default_factory=dict)

    def order_of(self, transformer: TextFormatTransformer | TextMatchTransformer) -> int:
        return self.inline_order.get(id(transformer), 0)


def transformers_by_type(transformers: Iterable[Transformer]) -> TransformersByType:
    """Partition *transformers* by variant, preserving order.

    Raises
    ------
    MarktreeTransformerError
        If an item is not one of the four transformer variants.
    """
    element: list[ElementTransformer] = []
    multiline: list[MultilineElementTransformer] = []
    text_format: list[TextFormatTransformer] = []
    text_match: list[TextMatchTransformer] = []
    block: list[ElementTransformer | MultilineElementTransformer] = []
    order: dict[int, int] = {}

    for index, transformer in enumerate(transformers):
        if isinstance(transformer, ElementTransformer):
            element.append(transformer)
            block.append(transformer)
        elif isinstance(transformer, MultilineElementTransformer):
            multiline.append(transformer)
            block.append(transformer)
        elif isinstance(transformer, TextFormatTransformer):
            text_format.append(transformer)
            order.setdefault(id(transformer), index)
        elif isinstance(transformer, TextMatchTransformer):
            text_match.append(transformer)
            order.setdefault(id(transformer), index)
        else:
            raise MarktreeTransformerError(
                message=(
                    f"Unsupported transformer object {transformer!r}; expected "
                    f"one of {', '.join(v.__name__ for v in _VARIANTS)}"
                ),
                context={"transformer": repr(transformer), "field": "kind"},
            )

    return TransformersByType(
        element=tuple(element),
        multiline_element=tuple(multiline),
        text_format=tuple(text_format),
        text_match=tuple(text_match),
        block=tuple(block),
        inline_order=order,
    )


def export_format_transformers(
    text_format: Sequence[TextFormatTransformer],
) -> list[TextFormatTransformer]:
    """Single-format transformers used for export, first one per format.

    Combined markers such as ``***`` are import-only; export composes them
    from the single-format markers.  When two transformers render the same
    format (``*`` and ``_``), the earlier registered one is used.
    """
    seen: set[str] = set()
    result: list[TextFormatTransformer] = []
    for transformer in text_format:
        if len(transformer.format) != 1:
            continue
        fmt = transformer.format[0]
        if fmt in seen:
            continue
        seen.add(fmt)
        result.append(transformer)
    return result
