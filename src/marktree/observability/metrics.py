"""Metrics hook protocol, no-op default and a timing helper.

The conversion pipelines report through a :class:`MetricsHook`;
:class:`NoopMetricsHook` is used when the caller supplies nothing.

Emitted metric names:

* ``marktree.blocks_imported_total``      -- counter
* ``marktree.blocks_exported_total``      -- counter
* ``marktree.conversion_warnings_total``  -- counter, tagged with ``code``
* ``marktree.import_duration_ms``         -- timing
* ``marktree.export_duration_ms``         -- timing
* ``marktree.tree_depth``                 -- gauge, nesting depth of an imported tree
* ``marktree.markdown_chars``             -- gauge, length of the text, tagged
  with ``op`` (``import`` or ``export``)
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """What a metrics backend implements.

    *tags* is an optional ``str -> str`` dict that implementations map onto
    their backend's tagging mechanism.
    """

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        """Add *value* to a counter."""
        ...

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        """Report the current value of a measurement."""
        ...


class NoopMetricsHook:
    """Discards every data point."""

    __slots__ = ()

    def increment(self, name: str, value: int = 1, tags: dict[str, str] | None = None) -> None:
        pass

    def timing(self, name: str, ms: float, tags: dict[str, str] | None = None) -> None:
        pass

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        pass


@contextmanager
def timed(
    hook: MetricsHook,
    name: str,
    tags: dict[str, str] | None = None,
) -> Iterator[None]:
    """Report the wall time of the ``with`` body as timing *name*.

    The timing is reported even when the body raises.
    """
    t0 = time.monotonic()
    try:
        yield
    finally:
        hook.timing(name, (time.monotonic() - t0) * 1000, tags)
