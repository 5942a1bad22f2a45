"""Line-merging pre-pass applied before block import.

Markdown has no notion of an empty paragraph and treats a single line break
inside a paragraph as a soft wrap.  :func:`normalize_markdown` therefore
joins adjacent non-blank lines into one line, so that every remaining line
is a whole block for the block importer.

Verbatim regions are left untouched:

* fenced code, opened by a run of three or more backticks or tildes and
  closed by a line ending in a run of the same character at least as long;
* table rows, i.e. lines whose first non-space character is ``|``.

A fence opened and closed on the same line (```` ```code``` ````) is an
ordinary line and does not open a region.

Structural lines (headings, quotes, list items, fences, table rows) always
start a new line, nothing is appended to a heading, fence or table line,
a merge that would produce a fence is refused, and nothing is appended to
the closing line of a fenced region.  These rules make the
function idempotent.
"""

from __future__ import annotations

import re

FENCE_RE = re.compile(r"^[ \t]*(`{3,}|~{3,})")
TABLE_ROW_RE = re.compile(r"^[ \t]*\|")

HEADING_RE = re.compile(r"^#{1,6}\s")
QUOTE_RE = re.compile(r"^>\s")
UNORDERED_LIST_RE = re.compile(r"^\s*[-*+]\s")
ORDERED_LIST_RE = re.compile(r"^\s*\d+\.\s")
CHECK_LIST_RE = re.compile(r"^\s*(?:-\s)?\s?\[(?:\s|x)?\]\s", re.IGNORECASE)

_STRUCTURAL_RES: tuple[re.Pattern[str], ...] = (
    HEADING_RE,
    QUOTE_RE,
    UNORDERED_LIST_RE,
    ORDERED_LIST_RE,
    CHECK_LIST_RE,
    FENCE_RE,
    TABLE_ROW_RE,
)


def parse_fence(line: str) -> tuple[str, int] | None:
    """Return ``(fence_char, length)`` if *line* opens a fenced region.

    Lines that open and close a fence on the same line return ``None``.
    """
    match = FENCE_RE.match(line)
    if match is None:
        return None
    fence = match.group(1)
    rest = line[match.end():]
    if rest.strip() and closes_fence(rest, fence[0], len(fence)):
        return None
    return fence[0], len(fence)


def closes_fence(line: str, char: str, length: int) -> bool:
    """True if *line* ends with a run of *char* at least *length* long."""
    return re.search(f"{re.escape(char)}{{{length},}}[ \t]*$", line) is not None


def is_blank(line: str) -> bool:
    return not line.strip()


def is_structural(line: str) -> bool:
    """True for lines that always start a new block."""
    return any(regex.match(line) for regex in _STRUCTURAL_RES)


def _accepts_continuation(line: str) -> bool:
    """True if text may be appended to *line*."""
    return not (
        is_blank(line)
        or HEADING_RE.match(line)
        or FENCE_RE.match(line)
        or TABLE_ROW_RE.match(line)
    )


def normalize_markdown(text: str) -> str:
    """Merge soft-wrapped lines, leaving verbatim regions unchanged.

    Parameters
    ----------
    text:
        Raw Markdown text.

    Returns
    -------
    str
        Text where every non-verbatim line is one whole block.

    Examples
    --------
    >>> normalize_markdown("A1\\nA2\\n\\nA3")
    'A1A2\\n\\nA3'
    """
    lines = text.split("\n")
    output: list[str] = []
    fence: tuple[str, int] | None = None
    # The last output line belongs to a fenced region and is never extended.
    verbatim_tail = False

    for line in lines:
        if fence is not None:
            output.append(line)
            if closes_fence(line, *fence):
                fence = None
            continue

        opened = parse_fence(line)
        if opened is not None:
            fence = opened
            output.append(line)
            verbatim_tail = True
            continue

        if (
            output
            and not verbatim_tail
            and not is_blank(line)
            and not is_structural(line)
            and _accepts_continuation(output[-1])
            and not FENCE_RE.match(output[-1] + line)
        ):
            output[-1] += line
        else:
            output.append(line)
            verbatim_tail = False

    return "\n".join(output)
